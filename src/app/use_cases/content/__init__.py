"""
Content Use Cases

Read access to tenant-scoped CMS records through the tenant-scoped repository.
"""

from .dtos import ContentItemResponse, ContentListResponse
from .get_content_use_case import GetContentUseCase
from .list_content_use_case import ListContentUseCase

__all__ = [
    "ListContentUseCase",
    "GetContentUseCase",
    "ContentListResponse",
    "ContentItemResponse",
]
