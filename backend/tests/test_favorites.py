import logging
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from quickbite.db import SessionLocal, init_db
from quickbite.main import app
from quickbite.services.catalogue_service import CatalogueException
from quickbite.services.favorite_service import FavoriteService


def setup_module(module):
    init_db(reset=True)


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


def test_add_is_idempotent(db):
    svc = FavoriteService(db)
    session_uuid = uuid4().hex
    _, created = svc.add(session_uuid, "4")
    assert created is True
    _, created = svc.add(session_uuid, "4")
    assert created is False
    assert [r.id for r in svc.list_favorites(session_uuid)] == ["4"]


def test_toggle_and_remove(db):
    svc = FavoriteService(db)
    session_uuid = uuid4().hex
    assert svc.toggle(session_uuid, "2") is True
    assert svc.is_favorite(session_uuid, "2")
    assert svc.toggle(session_uuid, "2") is False
    assert not svc.is_favorite(session_uuid, "2")
    assert svc.remove(session_uuid, "2") is False


def test_search_favorites(db):
    svc = FavoriteService(db)
    session_uuid = uuid4().hex
    for rid in ("6", "4", "1"):
        svc.add(session_uuid, rid)
    assert [r.id for r in svc.search_favorites(session_uuid, "")] == ["6", "4", "1"]
    assert [r.id for r in svc.search_favorites(session_uuid, "SUSHI")] == ["4"]
    assert [r.id for r in svc.search_favorites(session_uuid, "cafe")] == ["6"]


def test_unknown_restaurant(db, caplog):
    with caplog.at_level(logging.WARNING, logger="favorites"):
        with pytest.raises(CatalogueException):
            FavoriteService(db).add(uuid4().hex, "99")
    assert "unknown restaurant 99" in caplog.text


def test_favorites_http():
    client = TestClient(app)
    assert client.post("/api/favorites/3").json()["created"] is True
    assert client.post("/api/favorites/3/toggle").json()["favorite"] is False
    assert client.post("/api/favorites/7/toggle").json()["favorite"] is True
    assert [r["id"] for r in client.get("/api/favorites").json()["items"]] == ["7"]
    assert client.delete("/api/favorites/7").json()["removed"] is True
    assert client.get("/api/favorites").json()["items"] == []
    assert client.post("/api/favorites/99").status_code == 404
