"""Shared test fixtures for the web test suite."""

import pytest

from aom_scrape.db import create_product

STORY = (
    "<p>Im Atelier riecht es nach Wolle und Dampf. Der Schneider hebt das Sakko "
    "gegen das Licht und prüft jede Naht, bevor es die Werkstatt verlässt.</p>"
    "<p>Für den Abend, an dem alles zählt.</p>"
)


@pytest.fixture
def db_path(tmp_path):
    """Path to an empty per-test catalog database."""
    return str(tmp_path / "catalog.db")


@pytest.fixture
def app(db_path, monkeypatch):
    """Flask app pointed at the per-test database, auth disabled."""
    monkeypatch.delenv("ADMIN_USER", raising=False)
    monkeypatch.delenv("ADMIN_PASS", raising=False)

    from aom_web.app import app as flask_app

    monkeypatch.setitem(flask_app.config, "TESTING", True)
    monkeypatch.setitem(flask_app.config, "DB_PATH", db_path)
    monkeypatch.setitem(flask_app.config, "APP_URL", "https://www.example-shop.de")
    return flask_app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def make_product(client, db_path):
    """Insert a product directly into the store.

    Depends on client so the schema exists before inserting.
    """
    client.get("/api/products")

    def _make(slug, **kwargs):
        kwargs.setdefault("name", slug.replace("-", " ").title())
        kwargs.setdefault("description", "Elegant und zeitlos.")
        kwargs.setdefault("story", STORY)
        return create_product(db_path, slug=slug, **kwargs)

    return _make
