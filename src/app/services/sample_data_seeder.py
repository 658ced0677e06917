"""
Sample content for a fresh demo

Everything is written through the tenant-scoped repository under the new
tenant's context, so every row is stamped with its tenant_id.
"""

import logging
from decimal import Decimal
from typing import Dict

import bcrypt

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import (
    ContentStatus,
    ContentUser,
    ContentUserRole,
    Course,
    Media,
    Page,
    Post,
    Product,
    TenantInstance,
)
from src.domain.tenancy import TenantContext

logger = logging.getLogger(__name__)

SAMPLE_USER_PASSWORD = "demo123"

SAMPLE_USERS = [
    ("editor@demo.com", "Sarah Editor", ContentUserRole.editor),
    ("author@demo.com", "John Author", ContentUserRole.author),
    ("viewer@demo.com", "Jane Viewer", ContentUserRole.viewer),
    ("customer@demo.com", "Mike Customer", ContentUserRole.viewer),
    ("student@demo.com", "Lisa Student", ContentUserRole.viewer),
]

SAMPLE_POSTS = [
    (
        "Welcome to NodePress CMS",
        "welcome-to-nodepress",
        "Discover the powerful features of NodePress, your all-in-one platform.",
        ContentStatus.published,
    ),
    (
        "10 Tips for Building a Successful Online Business",
        "10-tips-online-business",
        "Learn the essential strategies for launching and growing your online business.",
        ContentStatus.published,
    ),
    (
        "The Future of E-Commerce",
        "future-of-ecommerce",
        "Explore the trends shaping the future of online retail.",
        ContentStatus.published,
    ),
    (
        "Getting Started with Online Courses",
        "getting-started-online-courses",
        "How to create and sell your first online course.",
        ContentStatus.published,
    ),
    (
        "Draft: Upcoming Features",
        "upcoming-features-draft",
        "Preview of upcoming NodePress features.",
        ContentStatus.draft,
    ),
]

SAMPLE_PAGES = [
    ("About Us", "about"),
    ("Contact", "contact"),
    ("Privacy Policy", "privacy-policy"),
    ("Terms of Service", "terms-of-service"),
]

SAMPLE_PRODUCTS = [
    ("Premium Theme", "premium-theme", "A beautiful, responsive theme for modern websites.", "59.99", 999),
    ("NodePress Pro License", "nodepress-pro-license", "Unlock all premium features with a Pro license.", "199.99", 999),
    ("Custom Development Package", "custom-development", "10 hours of custom development and consultation.", "999.99", 10),
]

SAMPLE_COURSES = [
    ("NodePress Masterclass", "nodepress-masterclass", "Learn to build powerful websites with NodePress CMS.", "beginner"),
    ("E-Commerce with NodePress", "ecommerce-nodepress", "Build a complete online store from scratch.", "intermediate"),
]

SAMPLE_MEDIA = [
    ("hero-banner.jpg", "https://images.unsplash.com/photo-1467232004584-a241de8bcf5d?w=1200", "image/jpeg", 245760),
    ("team-photo.jpg", "https://images.unsplash.com/photo-1522071820081-009f0129c71c?w=1200", "image/jpeg", 198656),
    ("product-guide.pdf", "/uploads/product-guide.pdf", "application/pdf", 524288),
]


class SampleDataSeeder:
    async def seed(self, uow: UnitOfWork, tenant: TenantInstance) -> Dict[str, int]:
        context = TenantContext.for_tenant(tenant.id)
        counts: Dict[str, int] = {}

        users = uow.scoped(ContentUser, context)
        admin = await users.create(
            ContentUser(
                email=tenant.admin_email,
                name="Demo Admin",
                password_hash=tenant.admin_password_hash,
                role=ContentUserRole.admin,
            )
        )
        sample_hash = bcrypt.hashpw(SAMPLE_USER_PASSWORD.encode("utf-8"), bcrypt.gensalt(10))
        for email, name, role in SAMPLE_USERS:
            await users.create(
                ContentUser(
                    email=email,
                    name=name,
                    password_hash=sample_hash.decode("utf-8"),
                    role=role,
                )
            )
        counts["users"] = len(SAMPLE_USERS) + 1

        posts = uow.scoped(Post, context)
        for title, slug, excerpt, status in SAMPLE_POSTS:
            await posts.create(
                Post(
                    title=title,
                    slug=slug,
                    excerpt=excerpt,
                    content=f"<p>{excerpt}</p>",
                    status=status,
                    author_id=admin.id,
                )
            )
        counts["posts"] = len(SAMPLE_POSTS)

        pages = uow.scoped(Page, context)
        for title, slug in SAMPLE_PAGES:
            await pages.create(
                Page(
                    title=title,
                    slug=slug,
                    content=f"<h1>{title}</h1>",
                    status=ContentStatus.published,
                    author_id=admin.id,
                )
            )
        counts["pages"] = len(SAMPLE_PAGES)

        products = uow.scoped(Product, context)
        for name, slug, description, price, stock in SAMPLE_PRODUCTS:
            await products.create(
                Product(
                    name=name,
                    slug=slug,
                    description=description,
                    price=Decimal(price),
                    stock=stock,
                    status=ContentStatus.published,
                )
            )
        counts["products"] = len(SAMPLE_PRODUCTS)

        courses = uow.scoped(Course, context)
        for title, slug, description, level in SAMPLE_COURSES:
            await courses.create(
                Course(
                    title=title,
                    slug=slug,
                    description=description,
                    level=level,
                    status=ContentStatus.published,
                    instructor_id=admin.id,
                )
            )
        counts["courses"] = len(SAMPLE_COURSES)

        media = uow.scoped(Media, context)
        for filename, url, mime_type, size_bytes in SAMPLE_MEDIA:
            await media.create(
                Media(
                    filename=filename,
                    url=url,
                    mime_type=mime_type,
                    size_bytes=size_bytes,
                    uploaded_by=admin.id,
                )
            )
        counts["media"] = len(SAMPLE_MEDIA)

        logger.info(f"Seeded sample data for tenant {tenant.id}: {counts}")
        return counts
