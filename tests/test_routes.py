import pytest
from fastapi.testclient import TestClient

from sku_api.catalog.woo_rest import WooRestCatalog
from sku_api.config import settings
from sku_api.main_app import app

URL = f"{settings.API_NAMESPACE}/update-by-sku"


def test_batch_update(client, catalog):
    response = client.post(URL, json=[{"sku": "A1", "stock_quantity": 5}, {"sku": "ZZZ-missing"}])
    assert response.status_code == 200
    body = response.json()
    assert body["updated"] == 1
    assert body["failed"] == 1
    assert body["results"][0] == {"message": "product updated successfully", "id": 101, "sku": "A1"}
    assert body["results"][1] == {"sku": "ZZZ-missing", "error": "product not found"}
    assert catalog.get(101).stock_quantity == 5


def test_single_object_body(client):
    response = client.post(URL, json={"sku": "B2", "regular_price": "21.00"})
    assert response.status_code == 200
    assert response.json()["results"] == [{"message": "product updated successfully", "id": 102, "sku": "B2"}]


def test_missing_sku_is_null_in_response(client):
    response = client.post(URL, json=[{"regular_price": "1"}])
    assert response.status_code == 200
    assert response.json()["results"][0] == {"sku": None, "error": "SKU not specified"}


@pytest.mark.parametrize("body", [b"", b"   ", b"{}", b"[]", b"not json", b"42", b"null", b'"A1"'])
def test_malformed_body_is_400(client, catalog, body):
    response = client.post(URL, content=body, headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"error": "at least one object with sku and data to update is required"}
    assert catalog.calls == []

def test_non_utf8_body_is_400(client, catalog):
    body = b'{"sku":"A1","description":"caf\xe9"}'
    response = client.post(URL, content=body, headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"error": "at least one object with sku and data to update is required"}
    assert catalog.calls == []


def test_legacy_single_route_non_utf8_body_is_400(client, catalog):
    body = b'{"description":"caf\xe9"}'
    response = client.post(f"{URL}/A1", content=body, headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert catalog.calls == []



def test_legacy_single_route(client, catalog):
    response = client.post(f"{URL}/A1", json={"regular_price": "11.00", "sku": "ignored"})
    assert response.status_code == 200
    assert response.json() == {"message": "product updated successfully", "id": 101, "sku": "A1"}
    assert catalog.get(101).regular_price == "11.00"


def test_legacy_single_route_empty_body(client):
    response = client.post(f"{URL}/A1")
    assert response.status_code == 200


def test_legacy_single_route_not_found(client):
    response = client.post(f"{URL}/NOPE", json={"regular_price": "1"})
    assert response.status_code == 404
    assert response.json() == {"error": "product not found"}


def test_legacy_single_route_collision(client):
    response = client.post(f"{URL}/A1", json={"new_sku": "B2"})
    assert response.status_code == 409
    assert response.json() == {"error": "new SKU already exists on another product"}


def test_legacy_single_route_rejects_array(client):
    response = client.post(f"{URL}/A1", json=[{"regular_price": "1"}])
    assert response.status_code == 400


def test_health_ready(client):
    response = client.get(f"{URL}/health")
    assert response.status_code == 200
    assert response.json() == {"ready": True, "catalog": "memory"}


def test_unconfigured_woo_catalog_is_503():
    app.state.catalog = WooRestCatalog(base_url="", api_key="", api_secret="")
    try:
        client = TestClient(app)
        response = client.post(URL, json={"sku": "A1"})
        assert response.status_code == 503
        assert "not configured" in response.json()["error"]
        assert client.get(f"{URL}/health").status_code == 503
    finally:
        app.state.catalog = None


def test_save_failure_is_500(catalog):
    async def broken_load(product_id):
        raise RuntimeError("store down")
    catalog.load_product = broken_load
    app.state.catalog = catalog
    try:
        client = TestClient(app, raise_server_exceptions=False)
        response = client.post(URL, json={"sku": "A1"})
        assert response.status_code == 500
        assert "store down" in response.json()["detail"]
    finally:
        app.state.catalog = None


def test_basic_auth_when_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "API_USER", "shop")
    monkeypatch.setattr(settings, "API_PASS", "secret")
    assert client.post(URL, json={"sku": "A1"}).status_code == 401
    assert client.post(URL, json={"sku": "A1"}, auth=("shop", "wrong")).status_code == 401
    assert client.post(URL, json={"sku": "A1"}, auth=("shop", "secret")).status_code == 200


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"
    assert response.json()["catalog"] == "memory"
