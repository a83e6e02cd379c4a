#!/usr/bin/env python3
"""
API tests against a temporary SQLite index. Collection runs are replaced
with stubs so no browser is needed.
"""
import pytest
from fastapi.testclient import TestClient

from propscraper.core import CollectionSummary
from propscraper.database import SqliteSink
from propscraper.errors import PageLoadError, SinkError
from propscraper.models import ParsedFields, RawFields
from propscraper.validator import finalize

from propapi.config import config
from propapi.main import app


def make_record(index, price, beds, city="Columbus", state="OH"):
    raw = RawFields(price_text=price, full_text=f"{price} listing {index}")
    parsed = ParsedFields(price=price, beds=beds, baths=2.0, sqft=1200 + index)
    return finalize(raw, parsed, city, state, index)


@pytest.fixture
def seeded(tmp_path, monkeypatch):
    db_path = str(tmp_path / "props.db")
    monkeypatch.setattr(config, "DB_PATH", db_path)
    records = [
        make_record(0, "$150,000", 1),
        make_record(1, "$325,000", 3),
        make_record(2, "$700,000", 4, city="Austin", state="TX"),
    ]
    sink = SqliteSink(db_path)
    sink.save_records(records)
    sink.close()
    return records


@pytest.fixture
def client():
    return TestClient(app)


def stub_collection(result=None, error=None, calls=None):
    async def fake_run_collection(city, state, max_count=20, **kwargs):
        if calls is not None:
            calls.append((city, state, max_count, kwargs))
        if error is not None:
            raise error
        return result or CollectionSummary(city=city, state=state)
    return fake_run_collection


def test_health(seeded, client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"


def test_search_all(seeded, client):
    data = client.get("/api/properties/search").json()
    assert data["total"] == 3
    assert len(data["items"]) == 3
    assert data["limit"] == 50


def test_search_filters(seeded, client):
    """City match is case-insensitive; facets are exact."""
    assert client.get("/api/properties/search", params={"city": "columbus"}).json()["total"] == 2
    assert client.get("/api/properties/search", params={"state": "tx"}).json()["total"] == 1
    assert client.get("/api/properties/search", params={"q": "condo"}).json()["total"] == 1
    data = client.get("/api/properties/search", params={"price_range": "$200K - $400K"}).json()
    assert [item["price"] for item in data["items"]] == ["$325,000"]
    data = client.get("/api/properties/search", params={"min_price": 200000, "max_price": 800000}).json()
    assert data["total"] == 2


def test_search_sort_and_pagination(seeded, client):
    data = client.get("/api/properties/search", params={"sort": "price_desc", "limit": 2}).json()
    assert data["total"] == 3
    assert [item["price_value"] for item in data["items"]] == [700000, 325000]
    data = client.get("/api/properties/search", params={"sort": "price_desc", "limit": 2, "offset": 2}).json()
    assert [item["price_value"] for item in data["items"]] == [150000]


def test_search_rejects_bad_limit(seeded, client):
    assert client.get("/api/properties/search", params={"limit": 0}).status_code == 422


def test_get_property(seeded, client):
    record = seeded[1]
    response = client.get(f"/api/properties/{record.object_id}")
    assert response.status_code == 200
    body = response.json()
    assert body["address"] == record.address
    assert body["address_is_synthesized"] is True
    assert body["property_type"] == "Single Family Home"


def test_get_property_not_found(seeded, client):
    response = client.get("/api/properties/property_0_0_missing")
    assert response.status_code == 404


def test_stats(seeded, client):
    data = client.get("/api/stats").json()
    assert data["total_properties"] == 3
    assert data["unique_cities"] == 2
    assert data["average_price"] == 391667
    assert data["price_ranges"]["Over $600K"] == 1
    assert data["property_types"]["Condo/Apartment"] == 1


def test_collect_success(seeded, client, monkeypatch):
    calls = []
    summary = CollectionSummary(city="Columbus", state="OH", collected=3, indexed=3, task_id="task-1")
    monkeypatch.setattr("propapi.routes.properties.run_collection", stub_collection(summary, calls=calls))

    response = client.post("/api/properties/collect", json={"city": "Columbus", "state": "OH", "max_count": 5})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["collected"] == 3
    assert body["existing"] == 2
    assert body["total"] == 5
    assert body["task_id"] == "task-1"
    assert body["message"] == "Successfully collected 3 new properties for Columbus, OH"
    assert calls[0][:3] == ("Columbus", "OH", 5)


def test_collect_splits_location_and_clamps_count(seeded, client, monkeypatch):
    calls = []
    monkeypatch.setattr("propapi.routes.properties.run_collection", stub_collection(calls=calls))

    response = client.post("/api/properties/collect", json={"location": "Parma, OH", "max_count": 10_000})
    assert response.status_code == 200
    assert response.json()["message"] == "No properties found for this location."
    assert calls[0][:3] == ("Parma", "OH", config.MAX_COLLECT_COUNT)


def test_collect_nothing_new_reports_existing(seeded, client, monkeypatch):
    monkeypatch.setattr("propapi.routes.properties.run_collection", stub_collection())
    body = client.post("/api/properties/collect", json={"location": "Columbus OH"}).json()
    assert body["collected"] == 0
    assert body["message"] == "No new properties found. 2 existing properties available."


@pytest.mark.parametrize("payload", [
    {"location": "Parma"},
    {"city": "Parma"},
    {},
])
def test_collect_requires_city_and_state(seeded, client, payload):
    assert client.post("/api/properties/collect", json=payload).status_code == 400


def test_collect_page_load_failure(seeded, client, monkeypatch):
    error = PageLoadError("https://www.realty.com/search/OH/Parma", 2, "timeout")
    monkeypatch.setattr("propapi.routes.properties.run_collection", stub_collection(error=error))
    response = client.post("/api/properties/collect", json={"location": "Parma, OH"})
    assert response.status_code == 502


def test_collect_sink_failure(seeded, client, monkeypatch):
    error = SinkError("sqlite", "database is locked")
    monkeypatch.setattr("propapi.routes.properties.run_collection", stub_collection(error=error))
    response = client.post("/api/properties/collect", json={"location": "Parma, OH"})
    assert response.status_code == 503
    assert "database is locked" in response.json()["detail"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
