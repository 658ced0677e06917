import asyncio


class TenantAllocator:
    """
    Serializes the capacity check, resource allocation and insert of new
    tenants inside this process.
    """

    def __init__(self):
        self._lock = asyncio.Lock()

    async def __aenter__(self):
        await self._lock.acquire()
        return self

    async def __aexit__(self, *args):
        self._lock.release()
