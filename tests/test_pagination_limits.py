from fastapi.testclient import TestClient

from bom_backend.core.db import SessionLocal
from bom_backend.core.pagination import clamp_page_size, get_max_page_size, page_offset
from bom_backend.main import create_app
from bom_backend.models.dependency_rule import BomDependencyRule

BASE = "/api/v1/bom-templates/dependencies"


def _client() -> TestClient:
    app = create_app()
    return TestClient(app)


def _seed_rules(count: int = 8) -> None:
    with SessionLocal() as db:
        existing = db.query(BomDependencyRule).filter(BomDependencyRule.category == "PAGE_TEST").count()
        for i in range(existing, count):
            db.add(
                BomDependencyRule(
                    name=f"page-{i:02d}",
                    conditions=[],
                    actions=[{"targetMaterialCategory": "NVR", "field": "required", "formula": "1"}],
                    category="PAGE_TEST",
                )
            )
        db.commit()


def test_page_size_capped(monkeypatch):
    monkeypatch.setenv("API_MAX_PAGE_SIZE", "3")
    with _client() as client:
        _seed_rules(8)
        resp = client.get(f"{BASE}?category=PAGE_TEST&page_size=100")
        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 3
        assert resp.headers.get("X-Page-Size") == "3"
        assert resp.headers.get("X-Total-Count") == "8"

        resp = client.get(f"{BASE}?category=PAGE_TEST&page_size=100&page=3")
        assert [r["name"] for r in resp.json()["data"]] == ["page-06", "page-07"]


def test_negative_page_rejected():
    with _client() as client:
        resp = client.get(f"{BASE}?page=-1")
        assert resp.status_code == 422
        resp = client.get(f"{BASE}?page_size=0")
        assert resp.status_code == 422


def test_max_page_size_falls_back_on_bad_values(monkeypatch):
    monkeypatch.setenv("API_MAX_PAGE_SIZE", "lots")
    assert get_max_page_size() == 200
    monkeypatch.setenv("API_MAX_PAGE_SIZE", "0")
    assert get_max_page_size() == 200
    assert clamp_page_size(500) == 200
    assert page_offset(0, 25) == 0
    assert page_offset(3, 25) == 50
