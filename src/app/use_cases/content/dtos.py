from typing import Any, Dict, List

from pydantic import BaseModel

from src.domain.entities import TenantScopedRecord

HIDDEN_FIELDS = {"password_hash", "tenant_id"}


def record_to_dict(record: TenantScopedRecord) -> Dict[str, Any]:
    return record.model_dump(mode="json", exclude=HIDDEN_FIELDS)


class ContentListResponse(BaseModel):
    kind: str
    items: List[Dict[str, Any]]
    total: int
    page: int
    limit: int


class ContentItemResponse(BaseModel):
    kind: str
    item: Dict[str, Any]
