"""
End-to-end tests for POST /recepie through the FastAPI app.

Outbound page fetches are mocked with `responses`; the Gemini client is
replaced by the FakeExtractor from conftest.
"""

from unittest.mock import patch

import pytest
import responses
from fastapi.testclient import TestClient

from ingredient_extractor.errors import CompletionError, UploadError
from ingredient_extractor.main import create_app

from conftest import FakeExtractor

PAGE_URL = "http://recipes.test/page"


class TestAuthorization:

    def test_missing_header_is_401(self, client, extractor):
        """No Authorization header is rejected before anything is fetched."""
        response = client.post("/recepie", json={"url": PAGE_URL})
        assert response.status_code == 401
        assert extractor.received == []

    @pytest.mark.parametrize("header", ["Token abc", "Bearer", "Bearer not-a-jwt"])
    def test_malformed_header_is_401(self, client, header):
        response = client.post("/recepie", json={"url": PAGE_URL}, headers={"Authorization": header})
        assert response.status_code == 401

    def test_token_from_other_secret_is_401(self, client, make_token):
        headers = {"Authorization": f"Bearer {make_token(secret='someone-else')}"}
        response = client.post("/recepie", json={"url": PAGE_URL}, headers=headers)
        assert response.status_code == 401

    def test_auth_checked_before_body(self, client):
        """A bad body from an unauthorized caller still answers 401."""
        response = client.post("/recepie", content=b"{not json")
        assert response.status_code == 401

    def test_error_body_has_no_internal_detail(self, client):
        response = client.post("/recepie", json={"url": PAGE_URL}, headers={"Authorization": "Bearer x.y.z"})
        assert response.json() == {"detail": "Unauthorized"}


class TestMethod:

    def test_get_is_405(self, client, auth_headers):
        response = client.get("/recepie", headers=auth_headers)
        assert response.status_code == 405


class TestBody:

    @pytest.mark.parametrize("body", [b"{not json", b"", b"[]", b'{"link": "http://x"}', b'{"url": 5}'])
    def test_malformed_body_is_400(self, client, auth_headers, body):
        headers = dict(auth_headers, **{"Content-Type": "application/json"})
        response = client.post("/recepie", content=body, headers=headers)
        assert response.status_code == 400


class TestExtraction:

    @responses.activate
    def test_fetched_page_reaches_extractor(self, client, extractor, auth_headers):
        """The extractor receives exactly the fetched page."""
        responses.add(responses.GET, PAGE_URL, body="<h1>OK</h1>", status=200, content_type="text/html")
        response = client.post("/recepie", json={"url": PAGE_URL}, headers=auth_headers)
        assert response.status_code == 200
        assert extractor.received == ["<h1>OK</h1>"]

    @responses.activate
    def test_page_is_sanitized_before_extraction(self, client, extractor, auth_headers):
        responses.add(responses.GET, PAGE_URL, body="<h1 onclick='x()'>OK</h1><script>steal()</script>", status=200)
        client.post("/recepie", json={"url": PAGE_URL}, headers=auth_headers)
        assert extractor.received == ["<h1>OK</h1>"]

    @responses.activate
    def test_result_is_forwarded_as_json(self, client, auth_headers):
        """The collaborator's ingredient list comes back as one JSON document."""
        responses.add(responses.GET, PAGE_URL, body="<h1>OK</h1>", status=200)
        response = client.post("/recepie", json={"url": PAGE_URL}, headers=auth_headers)
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"ingredients": [{"name": "Salt", "amount": "5g"}]}

    @responses.activate
    def test_upstream_500_is_500(self, client, extractor, auth_headers):
        responses.add(responses.GET, PAGE_URL, status=500)
        response = client.post("/recepie", json={"url": PAGE_URL}, headers=auth_headers)
        assert response.status_code == 500
        assert extractor.received == []

    @responses.activate
    def test_upstream_404_is_500(self, client, auth_headers):
        responses.add(responses.GET, PAGE_URL, status=404)
        response = client.post("/recepie", json={"url": PAGE_URL}, headers=auth_headers)
        assert response.status_code == 500

    def test_unfetchable_url_is_500(self, client, auth_headers):
        response = client.post("/recepie", json={"url": "not-a-url"}, headers=auth_headers)
        assert response.status_code == 500

    @responses.activate
    @pytest.mark.parametrize("error", [UploadError("upload failed"), CompletionError("model failed")])
    def test_extraction_failure_is_500(self, settings, auth_headers, error):
        """Extraction errors fail the request, and the app keeps serving."""
        responses.add(responses.GET, PAGE_URL, body="<h1>OK</h1>", status=200)
        client = TestClient(create_app(settings=settings, extractor=FakeExtractor(error=error)))
        response = client.post("/recepie", json={"url": PAGE_URL}, headers=auth_headers)
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal Server Error"}
        assert client.get("/health").status_code == 200


class TestMiddleware:

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_request_id_is_generated(self, client):
        response = client.get("/health")
        assert response.headers["X-Request-ID"]

    @responses.activate
    def test_access_log_names_recipe_host(self, client, auth_headers):
        """The access log line carries the host of the recipe page."""
        responses.add(responses.GET, PAGE_URL, body="<h1>OK</h1>", status=200)
        with patch("ingredient_extractor.core.middleware.log") as log:
            client.post("/recepie", json={"url": PAGE_URL}, headers={**auth_headers, "X-Request-ID": "req-1"})
        extra = log.info.call_args.kwargs["extra"]
        assert extra["target_host"] == "recipes.test"
        assert extra["request_id"] == "req-1"
        assert extra["status_code"] == 200
        assert extra["path"] == "/recepie"

    def test_access_log_without_target(self, client):
        with patch("ingredient_extractor.core.middleware.log") as log:
            client.post("/recepie", json={"url": PAGE_URL})
        extra = log.info.call_args.kwargs["extra"]
        assert extra["target_host"] is None
        assert extra["status_code"] == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
