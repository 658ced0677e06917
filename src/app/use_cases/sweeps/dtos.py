from typing import List

from pydantic import BaseModel, Field


class SweepReport(BaseModel):
    """Outcome of one scheduled job run"""

    job: str
    processed: int = 0
    succeeded: int = 0
    failed: List[str] = Field(default_factory=list)
