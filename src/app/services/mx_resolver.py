from abc import ABC, abstractmethod


class IMxResolver(ABC):
    """Mail exchange lookup - application layer"""

    @abstractmethod
    async def has_mx(self, domain: str) -> bool:
        """
        True when the domain can receive mail.

        Implementations return False only for a definite "no records"
        answer and True when the lookup itself fails.
        """
        pass
