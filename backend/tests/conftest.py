"""
Shared fixtures: a SQLite-backed app per test, an HTTP client and a small NAS tree.
"""

from pathlib import Path

import httpx
import pytest

from photocatalog.config import Settings
from photocatalog.database import init_db
from photocatalog.main import create_app
from photocatalog.tasks.indexer import CatalogIndexer

JWT_SECRET = "k3y-for-signing-photo-tokens-0123456789abcdef"
ADMIN_KEY = "admin-key-for-the-catalog"

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"jpeg-body" * 100
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"png-body" * 50


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}",
        jwt_secret=JWT_SECRET,
        admin_api_key=ADMIN_KEY,
        bcrypt_rounds=4,
        nas_root_path=str(tmp_path / "nas"),
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
async def app(settings):
    application = create_app(settings)
    await init_db(application.state.context.engine)
    yield application
    await application.state.context.dispose()


@pytest.fixture
def context(app):
    return app.state.context


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def nas_root(tmp_path):
    """
    nas/
      PN-100/  a.jpg  b.png  notes.txt
      PN-200/  c.jpeg
      readme.txt
    """
    root = tmp_path / "nas"
    (root / "PN-100").mkdir(parents=True)
    (root / "PN-100" / "a.jpg").write_bytes(JPEG_BYTES)
    (root / "PN-100" / "b.png").write_bytes(PNG_BYTES)
    (root / "PN-100" / "notes.txt").write_text("not a photo")
    (root / "PN-200").mkdir()
    (root / "PN-200" / "c.jpeg").write_bytes(JPEG_BYTES)
    (root / "readme.txt").write_text("stray file")
    return root


@pytest.fixture
async def indexed(context, nas_root):
    return await CatalogIndexer(context, str(nas_root), concurrency=4).run()


async def register(client, login, password, display_name=None):
    body = {"login": login, "password": password}
    if display_name is not None:
        body["displayName"] = display_name
    return await client.post("/register", json=body)


async def login_token(client, login, password) -> str:
    response = await client.post("/login", json={"login": login, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
async def token(client):
    response = await register(client, "alice", "correct horse", "Alice Doe")
    assert response.status_code == 201
    return await login_token(client, "alice", "correct horse")


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
