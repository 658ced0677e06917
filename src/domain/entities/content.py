"""
Tenant-scoped CMS records

Minimal shapes of the CMS entities the control plane seeds, isolates and
purges. The full content model lives in the CMS; only the columns the control
plane touches are declared here.

Isolation contract: ``tenant_id`` is None for production data and the owning
tenant's id for demo data. These tables are read and written only through
the tenant-scoped repository.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.domain.base import utcnow

from .enums import ContentStatus, ContentUserRole


class TenantScopedRecord(SQLModel):
    """Columns shared by every tenant-scoped table."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: Optional[UUID] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow)


class ContentUser(TenantScopedRecord, table=True):
    __tablename__ = "cms_users"

    email: str = Field(max_length=255, index=True)
    name: str = Field(max_length=255)
    password_hash: str = Field(max_length=255)
    role: ContentUserRole = Field(default=ContentUserRole.viewer)
    is_active: bool = Field(default=True)


class Post(TenantScopedRecord, table=True):
    __tablename__ = "cms_posts"

    title: str = Field(max_length=255)
    slug: str = Field(max_length=255, index=True)
    excerpt: Optional[str] = Field(default=None, max_length=500)
    content: str = Field(default="")
    status: ContentStatus = Field(default=ContentStatus.draft)
    author_id: Optional[UUID] = Field(default=None)


class Page(TenantScopedRecord, table=True):
    __tablename__ = "cms_pages"

    title: str = Field(max_length=255)
    slug: str = Field(max_length=255, index=True)
    content: str = Field(default="")
    status: ContentStatus = Field(default=ContentStatus.draft)
    author_id: Optional[UUID] = Field(default=None)


class Product(TenantScopedRecord, table=True):
    __tablename__ = "cms_products"

    name: str = Field(max_length=255)
    slug: str = Field(max_length=255, index=True)
    description: str = Field(default="")
    price: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    stock: int = Field(default=0)
    status: ContentStatus = Field(default=ContentStatus.draft)


class Course(TenantScopedRecord, table=True):
    __tablename__ = "cms_courses"

    title: str = Field(max_length=255)
    slug: str = Field(max_length=255, index=True)
    description: str = Field(default="")
    level: str = Field(default="beginner", max_length=50)
    status: ContentStatus = Field(default=ContentStatus.draft)
    instructor_id: Optional[UUID] = Field(default=None)


class Media(TenantScopedRecord, table=True):
    __tablename__ = "cms_media"

    filename: str = Field(max_length=255)
    url: str = Field(max_length=1024)
    mime_type: str = Field(max_length=100)
    size_bytes: int = Field(default=0)
    uploaded_by: Optional[UUID] = Field(default=None)


# Every table whose rows carry a tenant_id. Teardown purges all of them.
TENANT_SCOPED_MODELS = (ContentUser, Post, Page, Product, Course, Media)

# Public names used by the content API.
CONTENT_KINDS = {
    "users": ContentUser,
    "posts": Post,
    "pages": Page,
    "products": Product,
    "courses": Course,
    "media": Media,
}
