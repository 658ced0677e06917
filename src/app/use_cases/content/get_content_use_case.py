from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import CONTENT_KINDS
from src.domain.tenancy import TenantContext

from .dtos import ContentItemResponse, record_to_dict


class GetContentUseCase:
    """Fetch one CMS record; another tenant's record is reported as missing."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, kind: str, record_id: UUID, context: TenantContext
    ) -> Result[ContentItemResponse]:
        model = CONTENT_KINDS.get(kind)
        if model is None:
            return Return.err(Error("NOT_FOUND", f"Unknown content type: {kind}"))

        async with self.uow:
            record = await self.uow.scoped(model, context).get_by_id(record_id)
            if record is None:
                return Return.err(Error("NOT_FOUND", "Record not found"))
            return Return.ok(ContentItemResponse(kind=kind, item=record_to_dict(record)))
