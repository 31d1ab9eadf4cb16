"""Tests for the backend port and its adapters."""

import json

import pytest
import requests
import responses

from shared.backend import FakeBackend, get_backend, reset_backend, set_backend
from shared.backend.http_adapter import RequestsBackend
from shared.backend.port import BackendResponse, FilePart
from shared.errors import BackendError, BackendUnavailable

BASE_URL = "http://backend.test/api/v1"


class TestBackendResponse:
    def test_expect_ok_returns_payload(self):
        assert BackendResponse(200, {"id": 1}).expect_ok() == {"id": 1}

    def test_expect_ok_raises_with_backend_message(self):
        with pytest.raises(BackendError) as exc_info:
            BackendResponse(400, {"error": "Out of stock"}).expect_ok("Request failed")
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Out of stock"
        assert exc_info.value.payload == {"error": "Out of stock"}

    def test_expect_ok_falls_back_to_default_message(self):
        with pytest.raises(BackendError) as exc_info:
            BackendResponse(500, None).expect_ok("Failed to fetch cart")
        assert exc_info.value.message == "Failed to fetch cart"


class TestRequestsBackend:
    @responses.activate
    def test_get_forwards_token_and_params(self):
        responses.add(responses.GET, f"{BASE_URL}/cart", json={"cartId": "c1"}, status=200)

        result = RequestsBackend(BASE_URL).get("/cart", token="Bearer abc", params={"page": 1})

        assert result.status_code == 200
        assert result.payload == {"cartId": "c1"}
        request = responses.calls[0].request
        assert request.headers["Authorization"] == "Bearer abc"
        assert "page=1" in request.url

    @responses.activate
    def test_no_authorization_header_without_token(self):
        responses.add(responses.GET, f"{BASE_URL}/products", json={"data": []})

        RequestsBackend(BASE_URL).get("/products")

        assert "Authorization" not in responses.calls[0].request.headers

    @responses.activate
    def test_json_body_is_sent(self):
        responses.add(responses.POST, f"{BASE_URL}/cart/items", json={"ok": True}, status=201)

        RequestsBackend(BASE_URL).post("/cart/items", json={"productId": "p-1", "quantity": 2})

        request = responses.calls[0].request
        assert json.loads(request.body) == {"productId": "p-1", "quantity": 2}
        assert request.headers["Content-Type"] == "application/json"

    @responses.activate
    def test_error_status_is_returned_not_raised(self):
        responses.add(responses.POST, f"{BASE_URL}/cart/items", json={"error": "Out of stock"}, status=400)

        result = RequestsBackend(BASE_URL).post("/cart/items", json={})

        assert result.ok is False
        assert result.status_code == 400
        assert result.payload == {"error": "Out of stock"}

    @responses.activate
    def test_empty_body_has_no_payload(self):
        responses.add(responses.DELETE, f"{BASE_URL}/cart", status=204)

        result = RequestsBackend(BASE_URL).delete("/cart")

        assert result.status_code == 204
        assert result.payload is None

    @responses.activate
    def test_connection_error_is_backend_unavailable(self):
        responses.add(responses.GET, f"{BASE_URL}/cart", body=requests.ConnectionError("refused"))

        with pytest.raises(BackendUnavailable):
            RequestsBackend(BASE_URL).get("/cart")

    @responses.activate
    def test_non_json_body_is_backend_unavailable(self):
        responses.add(responses.GET, f"{BASE_URL}/cart", body="<html>Bad Gateway</html>", status=502)

        with pytest.raises(BackendUnavailable):
            RequestsBackend(BASE_URL).get("/cart")

    @responses.activate
    def test_files_are_sent_as_multipart(self):
        responses.add(responses.POST, f"{BASE_URL}/products", json={"id": "p-9"}, status=201)

        RequestsBackend(BASE_URL).post(
            "/products",
            token="Bearer admin",
            data={"name": "SSD"},
            files={"image": FilePart("ssd.png", b"png-bytes", "image/png")},
        )

        request = responses.calls[0].request
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b"ssd.png" in request.body
        assert b"png-bytes" in request.body


class TestFakeBackend:
    def test_unregistered_route_is_not_found(self):
        result = FakeBackend().get("/nowhere")
        assert result.status_code == 404
        assert result.payload == {"error": "Not Found"}

    def test_records_calls(self):
        fake = FakeBackend()
        fake.post("/cart/items", token="Bearer t", json={"productId": "p-1"})

        calls = fake.calls_to("POST", "/cart/items")
        assert len(calls) == 1
        assert calls[0]["token"] == "Bearer t"
        assert calls[0]["json"] == {"productId": "p-1"}

    def test_sequence_repeats_last_entry(self):
        fake = FakeBackend()
        fake.respond_sequence("GET", "/cart", [(500, None), (200, {"cartId": "c1"})])

        assert fake.get("/cart").status_code == 500
        assert fake.get("/cart").status_code == 200
        assert fake.get("/cart").status_code == 200

    def test_handler_sees_the_call(self):
        fake = FakeBackend()
        fake.respond_with("GET", "/products", lambda call: BackendResponse(200, {"echo": call["params"]}))

        assert fake.get("/products", params={"page": 2}).payload == {"echo": {"page": 2}}

    def test_offline_raises(self):
        fake = FakeBackend()
        fake.go_offline()
        with pytest.raises(BackendUnavailable):
            fake.get("/cart")


class TestBackendFactory:
    def test_set_and_reset(self):
        fake = FakeBackend()
        set_backend(fake)
        assert get_backend() is fake

        reset_backend()
        default = get_backend()
        assert isinstance(default, RequestsBackend)
        assert default.base_url.endswith("/api/v1")
