"""Integration tests for the storefront and admin catalogue endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalogue.api.routes import admin_catalogue_router, catalogue_router, product_router
from shared.backend.port import FilePart
from shared.errors import register_exception_handlers

ADMIN = {"Authorization": "Bearer admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(product_router)
    app.include_router(catalogue_router)
    app.include_router(admin_catalogue_router)
    return TestClient(app)


def _products(count):
    return [{"id": f"p-{i}", "name": f"Product {i}", "price": str(10 * i)} for i in range(1, count + 1)]


class TestProductListAPI:
    def test_repeated_filters_are_forwarded(self, client, backend):
        backend.respond("GET", "/products", {"data": [], "meta": {}})

        response = client.get("/api/products?manufacturerId=m-1&manufacturerId=m-2&categoryId=c-1")

        assert response.status_code == 200
        params = backend.calls[0]["params"]
        assert ("manufacturerId", "m-1") in params
        assert ("manufacturerId", "m-2") in params
        assert ("categoryId", "c-1") in params
        assert ("limit", 5) in params

    def test_product_details(self, client, backend):
        backend.respond("GET", "/products/p-1", {"id": "p-1", "name": "SSD"})

        assert client.get("/api/products/p-1").json()["name"] == "SSD"

    def test_missing_product(self, client, backend):
        response = client.get("/api/products/p-404")

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}


class TestBrowseAPI:
    def test_price_filter(self, client, backend):
        backend.respond("GET", "/products", {"data": _products(20)})

        response = client.get("/api/products/browse?minPrice=50&maxPrice=120")

        body = response.json()
        assert response.status_code == 200
        assert body["meta"]["totalItems"] == 8
        assert body["pageNumbers"] == [1, 2]
        assert body["priceBounds"] == [10, 200]

    def test_inverted_range(self, client, backend):
        response = client.get("/api/products/browse?minPrice=500&maxPrice=100")

        assert response.status_code == 400
        assert "priceRange" in response.json()["error"]

    def test_search_endpoint(self, client, backend):
        response = client.get("/api/products/search?q=a")

        assert response.json() == {"query": "a", "data": []}
        assert backend.calls == []


class TestPublicCatalogueAPI:
    def test_bundles_are_active_only(self, client, backend):
        backend.respond("GET", "/bundles", {"data": []})

        client.get("/api/bundles")

        assert backend.calls[0]["params"] == {"page": 1, "limit": 8, "activeOnly": "true"}

    def test_global_search(self, client, backend):
        response = client.get("/api/search?q=x")
        assert response.json()["query"] == "x"


class TestAdminProductAPI:
    def test_multipart_create_is_forwarded(self, client, backend):
        backend.respond("POST", "/products", {"id": "p-9"}, status_code=201)

        response = client.post(
            "/api/admin/products",
            data={"name": "SSD", "price": "99.99"},
            files={"image": ("ssd.png", b"png-bytes", "image/png")},
            headers=ADMIN,
        )

        assert response.status_code == 201
        call = backend.calls[0]
        assert call["token"] == "Bearer admin"
        assert call["data"] == {"name": "SSD", "price": "99.99"}
        assert call["files"] == {"image": FilePart("ssd.png", b"png-bytes", "image/png")}

    def test_restock(self, client, backend):
        backend.respond("POST", "/products/p-1/restock", {"id": "p-1", "stock": 30})

        response = client.post("/api/admin/products/p-1/restock", json={"quantity": 25}, headers=ADMIN)

        assert response.status_code == 200
        assert backend.calls[0]["json"] == {"quantity": 25}

    def test_restock_needs_positive_quantity(self, client):
        response = client.post("/api/admin/products/p-1/restock", json={"quantity": 0}, headers=ADMIN)
        assert response.status_code == 422

    def test_requires_token(self, client, backend):
        assert client.delete("/api/admin/products/p-1").status_code == 401
        assert backend.calls == []


class TestAdminProductTypesAPI:
    def test_paged_locally(self, client, backend):
        rows = [{"id": f"t-{i}", "name": f"Type {i}"} for i in range(1, 24)]
        backend.respond("GET", "/product-types", rows)

        response = client.get("/api/admin/productTypes?page=3", headers=ADMIN)

        body = response.json()
        assert [row["id"] for row in body["data"]] == ["t-21", "t-22", "t-23"]
        assert body["meta"]["totalPages"] == 3
        assert body["pageNumbers"] == [1, 2, 3]

    def test_create(self, client, backend):
        backend.respond("POST", "/product-types", {"id": "t-1"}, status_code=201)

        client.post(
            "/api/admin/productTypes",
            json={"name": "SSD", "allowedAttributes": ["capacity"]},
            headers=ADMIN,
        )

        assert backend.calls[0]["json"] == {"name": "SSD", "allowedAttributes": ["capacity"]}


class TestAdminManufacturersAPI:
    def test_list_adds_page_window(self, client, backend):
        backend.respond(
            "GET", "/manufacturers", {"data": [{"id": "m-1"}], "meta": {"currentPage": 4, "totalPages": 9}}
        )

        response = client.get("/api/admin/manufacturers?page=4", headers=ADMIN)

        assert response.json()["pageNumbers"] == [2, 3, 4, 5, 6]
