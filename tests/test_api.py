"""
HTTP API tests using FastAPI's TestClient with the fixture engine.
"""
import threading
import time

import pytest
from fastapi.testclient import TestClient

from merch_pricing.api.main import app
from merch_pricing.api import state
from merch_pricing.api.state import get_engine

CHEAP = {"sku": "CHEAP", "line": "Basic", "factory_unit_manual": 0.80,
         "box_size": "Small", "amazon_tier_key": "Std_Parcel_S"}
STAND = {"sku": "STAND", "line": "Basic", "factory_unit_manual": 2.0, "manual_uvp_inc": 23.99}


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "online"


def test_price(client):
    response = client.post("/price", json={"product": STAND})
    assert response.status_code == 200

    body = response.json()
    assert body["uvp_inc_99_cents"] == 2399
    assert body["autotune"]["action"] == "OK"
    assert body["guardrails"]["OwnStore"]["price_cents"] == 499
    assert body["needs_manual_review"] is False
    assert "Guardrail" in body["trace_text"]


def test_price_with_bundles(client):
    body = client.post("/price", json={"product": CHEAP}).json()

    assert body["autotune"]["action"] == "BUNDLE_RECOMMENDED"
    assert body["bundle_proposals"][0]["units"] == 2
    assert body["bundle_proposals"][0]["proposed_price_cents"] == 1499


def test_unknown_line_is_bad_request(client):
    response = client.post("/price", json={"product": {**STAND, "line": "Luxury"}})
    assert response.status_code == 400
    assert "Luxury" in response.json()["detail"]


def test_negative_cost_is_bad_request(client):
    response = client.post("/price", json={"product": {**STAND, "epr_fee": -1}})
    assert response.status_code == 400


def test_bundles(client):
    body = client.post("/bundles", json=CHEAP).json()
    assert [p["units"] for p in body["proposals"]] == [2]

    assert client.post("/bundles", json=STAND).json()["proposals"] == []


def test_quote(client):
    response = client.post("/quote", json={
        "role": "Stand Program",
        "items": [{"product": STAND, "qty": 12}],
    })
    assert response.status_code == 200

    body = response.json()
    assert body["lines"][0]["unit_net"] == pytest.approx(15.32)
    assert body["total_gross"] == pytest.approx(218.77)


def test_quote_unknown_role(client):
    response = client.post("/quote", json={"role": "Nobody", "items": [{"product": STAND, "qty": 1}]})
    assert response.status_code == 400


def test_quote_rejects_zero_quantity(client):
    response = client.post("/quote", json={"role": "Stand Program", "items": [{"product": STAND, "qty": 0}]})
    assert response.status_code == 422


def test_config(client, config):
    body = client.get("/config").json()
    assert body["vat"] == pytest.approx(config.vat)
    assert set(body["channels"]) == {"OwnStore", "Amazon_FBM", "Amazon_FBA"}


def test_catalog_report(client):
    response = client.post("/catalog/report", json={
        "products": [CHEAP, STAND, {**STAND, "sku": "GHOST", "line": "Luxury"}],
    })
    assert response.status_code == 200

    body = response.json()
    assert body["summary"]["priced"] == 2
    assert body["summary"]["failed"] == 1
    assert "GHOST" in body["errors"]
    assert len(body["rows"]) == 2


def test_shared_engine_built_once_across_threads(monkeypatch, engine):
    built = []

    def slow_build():
        time.sleep(0.05)
        built.append(engine)
        return engine

    monkeypatch.setattr(state, "_engine", None)
    monkeypatch.setattr(state.PricingEngine, "from_default_config", slow_build)

    results = []
    threads = [threading.Thread(target=lambda: results.append(get_engine())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(built) == 1
    assert len(results) == 8
    assert all(r is engine for r in results)
    assert get_engine() is engine
