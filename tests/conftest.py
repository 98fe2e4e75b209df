import pytest
from fastapi.testclient import TestClient

from main import create_app
from middlewares.basic_auth import BasicAuthCredentials


@pytest.fixture
def site_dir(tmp_path):
    """A minimal built site: index, a nested page, a 404 page and a hashed asset."""
    (tmp_path / "index.html").write_text("<h1>Home</h1>")
    (tmp_path / "about").mkdir()
    (tmp_path / "about" / "index.html").write_text("<h1>About</h1>")
    (tmp_path / "404.html").write_text("<h1>Not found</h1>")
    (tmp_path / "_astro").mkdir()
    (tmp_path / "_astro" / "app.3f9a1c.js").write_text("console.log('hi');")
    return tmp_path


@pytest.fixture
def credentials():
    return BasicAuthCredentials(username="admin", password="secret123")


@pytest.fixture
def client(site_dir, credentials):
    app = create_app(static_dir=str(site_dir), credentials=lambda: credentials)
    with TestClient(app) as c:
        yield c
