"""
API test fixtures: the FastAPI app wired to the per-test SQLite ledger.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from storefront.interfaces.http.deps import get_app_container
from storefront.main import create_app
from storefront.modules.common import ROLE_ADMIN

PASSWORD = "secret123"


@pytest.fixture
async def client(container):
    app = create_app()
    app.dependency_overrides[get_app_container] = lambda: container
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def login(client):
    async def _login(username: str, password: str = PASSWORD) -> dict:
        response = await client.post("/api/auth/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login


@pytest.fixture
async def admin_headers(make_account, login) -> dict:
    await make_account("api-admin", role=ROLE_ADMIN)
    return await login("api-admin")


@pytest.fixture
async def user_headers(client) -> dict:
    response = await client.post("/api/auth/register", json={"username": "api-user", "password": PASSWORD})
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
async def user_id(client, user_headers) -> str:
    response = await client.get("/api/auth/me", headers=user_headers)
    return response.json()["id"]
