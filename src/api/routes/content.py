"""
Content Routes

Read access to CMS records. The caller's token decides the tenant context:
a demo session sees only its demo's records, everyone else sees production
records only.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.api.error import raise_for_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.content import (
    ContentItemResponse,
    ContentListResponse,
    GetContentUseCase,
    ListContentUseCase,
)
from src.depends import get_tenant_context, get_unit_of_work
from src.domain.tenancy import TenantContext

router = APIRouter(prefix="/content", tags=["Content"])


@router.get("/{kind}", response_model=ContentListResponse)
async def list_content(
    kind: str,
    status: str = Query(None, description="Filter by publication status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    uow: UnitOfWork = Depends(get_unit_of_work),
    context: TenantContext = Depends(get_tenant_context),
):
    filters = {"status": status} if status else None
    result = await ListContentUseCase(uow).execute(
        kind, context, filters=filters, page=page, limit=limit
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/{kind}/{record_id}", response_model=ContentItemResponse)
async def get_content(
    kind: str,
    record_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    context: TenantContext = Depends(get_tenant_context),
):
    result = await GetContentUseCase(uow).execute(kind, record_id, context)
    if result.is_err():
        raise_for_error(result.error)
    return result.value
