from typing import Any, Dict, Optional

from libs.result import Error, Result, Return
from src.app.repositories.tenant_scoped_repository import InvalidFilterError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import CONTENT_KINDS
from src.domain.tenancy import TenantContext

from .dtos import ContentListResponse, record_to_dict

MAX_PAGE_SIZE = 100


class ListContentUseCase:
    """List CMS records of one kind, visible to the caller's tenant context only."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        kind: str,
        context: TenantContext,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Result[ContentListResponse]:
        model = CONTENT_KINDS.get(kind)
        if model is None:
            return Return.err(Error("NOT_FOUND", f"Unknown content type: {kind}"))

        page = max(1, page)
        limit = max(1, min(limit, MAX_PAGE_SIZE))

        async with self.uow:
            records = self.uow.scoped(model, context)
            try:
                items = await records.list(
                    filters=filters, limit=limit, offset=(page - 1) * limit
                )
                total = await records.count(filters=filters)
            except InvalidFilterError as exc:
                return Return.err(Error("INVALID_FILTER", str(exc)))

            return Return.ok(
                ContentListResponse(
                    kind=kind,
                    items=[record_to_dict(item) for item in items],
                    total=total,
                    page=page,
                    limit=limit,
                )
            )
