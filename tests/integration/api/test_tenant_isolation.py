from uuid import UUID

import pytest
from httpx import AsyncClient

from src.adapter.repositories.tenant_scoped_repository import (
    TenantDataRepository,
    TenantScopedRepository,
)
from src.domain.entities import Post
from src.domain.tenancy import TenantContext
from tests.utils.json_compare import exclude_keys


@pytest.fixture
def two_demos(test_data, launch_demo):
    async def launch():
        first = await launch_demo(test_data.get("demo_request"))
        second = await launch_demo(test_data.get("second_demo_request"))
        return first, second

    return launch


async def add_production_post(db_session, test_data):
    posts = TenantScopedRepository(db_session, Post, TenantContext.production())
    post = await posts.create(Post(**test_data.get("production_post")))
    await db_session.commit()
    return post


@pytest.mark.asyncio
async def test_scoped_repository_sees_only_its_tenant(db_session, test_data, two_demos):
    first, second = await two_demos()
    production_post = await add_production_post(db_session, test_data)

    first_posts = TenantScopedRepository(
        db_session, Post, TenantContext.for_tenant(UUID(first["id"]))
    )
    second_posts = TenantScopedRepository(
        db_session, Post, TenantContext.for_tenant(UUID(second["id"]))
    )
    production_posts = TenantScopedRepository(db_session, Post, TenantContext.production())

    first_items = await first_posts.list()
    second_items = await second_posts.list()
    assert len(first_items) == 5
    assert len(second_items) == 5
    assert {p.tenant_id for p in first_items} == {UUID(first["id"])}
    assert [p.id for p in await production_posts.list()] == [production_post.id]

    foreign = second_items[0]
    assert await first_posts.get_by_id(foreign.id) is None
    assert await first_posts.update(foreign.id, {"title": "hijacked"}) is None
    assert await first_posts.delete(foreign.id) is False
    assert await first_posts.delete_many({"id": foreign.id}) == 0
    assert await production_posts.get_by_id(foreign.id) is None

    await db_session.refresh(foreign)
    assert foreign.title != "hijacked"


@pytest.mark.asyncio
async def test_create_is_stamped_with_context_tenant(db_session, test_data, two_demos):
    first, second = await two_demos()
    first_posts = TenantScopedRepository(
        db_session, Post, TenantContext.for_tenant(UUID(first["id"]))
    )

    post = await first_posts.create(
        Post(title="Sneaky", slug="sneaky", tenant_id=UUID(second["id"]))
    )

    assert post.tenant_id == UUID(first["id"])


@pytest.mark.asyncio
async def test_content_api_follows_session_context(
    client: AsyncClient, db_session, test_data, two_demos, open_session
):
    first, second = await two_demos()
    production_post = await add_production_post(db_session, test_data)
    first_token = await open_session(first["subdomain"])
    second_token = await open_session(second["subdomain"])

    response = await client.get(
        "/api/content/posts", headers={"Authorization": f"Bearer {first_token}"}
    )
    assert response.status_code == 200
    first_items = response.json()["items"]
    assert response.json()["total"] == 5
    assert all("tenant_id" not in item for item in first_items)

    response = await client.get(
        "/api/content/posts", headers={"Authorization": f"Bearer {second_token}"}
    )
    second_ids = {item["id"] for item in response.json()["items"]}
    assert second_ids.isdisjoint({item["id"] for item in first_items})

    response = await client.get(
        f"/api/content/posts/{next(iter(second_ids))}",
        headers={"Authorization": f"Bearer {first_token}"},
    )
    assert response.status_code == 404

    response = await client.get("/api/content/posts")
    assert [item["id"] for item in response.json()["items"]] == [str(production_post.id)]
    assert exclude_keys(response.json()["items"][0], {"author_id"}) == {
        **test_data.get("production_post"),
        "excerpt": None,
    }


@pytest.mark.asyncio
async def test_content_users_hide_password_hash(client: AsyncClient, test_data, launch_demo, open_session):
    credentials = await launch_demo(test_data.get("demo_request"))
    token = await open_session(credentials["subdomain"])

    response = await client.get(
        "/api/content/users", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 200
    users = response.json()["items"]
    assert len(users) == 6
    assert all("password_hash" not in user for user in users)


@pytest.mark.asyncio
async def test_content_unknown_kind_and_status_filter(
    client: AsyncClient, test_data, launch_demo, open_session
):
    credentials = await launch_demo(test_data.get("demo_request"))
    token = await open_session(credentials["subdomain"])
    headers = {"Authorization": f"Bearer {token}"}

    response = await client.get("/api/content/widgets", headers=headers)
    assert response.status_code == 404

    response = await client.get("/api/content/posts?status=published", headers=headers)
    assert response.status_code == 200
    assert all(item["status"] == "published" for item in response.json()["items"])


@pytest.mark.asyncio
async def test_invalid_token_is_unauthorized(client: AsyncClient):
    response = await client.get(
        "/api/content/posts", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_purge_removes_only_one_tenant(db_session, test_data, two_demos):
    first, second = await two_demos()
    await add_production_post(db_session, test_data)

    deleted = await TenantDataRepository(db_session).purge(UUID(first["id"]))
    await db_session.commit()

    assert deleted["cms_posts"] == 5
    assert deleted["cms_users"] == 6
    second_posts = TenantScopedRepository(
        db_session, Post, TenantContext.for_tenant(UUID(second["id"]))
    )
    production_posts = TenantScopedRepository(db_session, Post, TenantContext.production())
    assert await second_posts.count() == 5
    assert await production_posts.count() == 1

    with pytest.raises(ValueError):
        await TenantDataRepository(db_session).purge(None)
