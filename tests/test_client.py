"""
Tests for the client module.
"""

import json
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
import requests
from unittest.mock import MagicMock

import canvas_bridge.client as client_module
from canvas_bridge.client import CanvasClient, encode_segment, get_canvas_client, reset_canvas_client
from canvas_bridge.config import Settings
from canvas_bridge.exceptions import CanvasAPIError, ConfigurationError, ErrorKind

from conftest import BASE_URL, make_response, sent


class TestCanvasClient:
    """Tests for request dispatch."""

    def test_bearer_token_on_session(self, canvas_client):
        """The token is sent as a bearer Authorization header."""
        assert canvas_client.session.headers["Authorization"] == "Bearer test-token"

    def test_token_not_in_repr(self, canvas_client):
        """The token never appears in the client's repr."""
        assert "test-token" not in repr(canvas_client)
        assert BASE_URL in repr(canvas_client)

    def test_missing_token_raises_config_error(self):
        """An empty token is rejected at construction."""
        with pytest.raises(ConfigurationError):
            CanvasClient(BASE_URL, "")

    def test_base_url_trailing_slash_stripped(self):
        """A trailing slash on the base URL is dropped."""
        client = CanvasClient(BASE_URL + "/", "token")
        assert client.base_url == BASE_URL

    def test_get_sends_query(self, canvas_client):
        """GET passes the query as params and sends no body."""
        canvas_client.session.request.return_value = make_response(json_body={"id": 1})

        result = canvas_client.get("/api/v1/courses/1", {"include[]": ["term"]})

        method, url, kwargs = sent(canvas_client)
        assert result == {"id": 1}
        assert method == "GET"
        assert url == f"{BASE_URL}/api/v1/courses/1"
        assert kwargs["params"] == {"include[]": ["term"]}
        assert "json" not in kwargs

    def test_none_values_omitted(self, canvas_client):
        """None values are removed from bodies and queries, nested ones included."""
        canvas_client.session.request.return_value = make_response(json_body={})

        canvas_client.put(
            "/api/v1/x",
            {"title": "T", "body": None, "wiki_page": {"published": None, "title": "T"}},
            {"search_term": None, "per_page": 10},
        )

        _, _, kwargs = sent(canvas_client)
        assert kwargs["json"] == {"title": "T", "wiki_page": {"title": "T"}}
        assert kwargs["params"] == {"per_page": 10}

    def test_post_sends_json_body(self, canvas_client):
        """POST sends the body as JSON."""
        canvas_client.session.request.return_value = make_response(json_body={"ok": True})

        canvas_client.post("/api/v1/courses/1/assignments", {"assignment": {"name": "HW"}})

        method, _, kwargs = sent(canvas_client)
        assert method == "POST"
        assert kwargs["json"] == {"assignment": {"name": "HW"}}

    def test_delete(self, canvas_client):
        """DELETE returns the decoded body."""
        canvas_client.session.request.return_value = make_response(json_body={"url": "p"})

        assert canvas_client.delete("/api/v1/courses/1/pages/p") == {"url": "p"}
        assert sent(canvas_client)[0] == "DELETE"

    def test_empty_body_returns_none(self, canvas_client):
        """An empty response body decodes to None."""
        canvas_client.session.request.return_value = make_response(status_code=204, reason="No Content")

        assert canvas_client.delete("/api/v1/thing") is None

    def test_timeout_passed_when_configured(self):
        """A configured timeout is passed to every request."""
        client = CanvasClient(BASE_URL, "token", timeout=12.5)
        client.session.request = MagicMock(return_value=make_response(json_body={}))

        client.get("/api/v1/x")

        assert client.session.request.call_args.kwargs["timeout"] == 12.5

    def test_no_timeout_by_default(self, canvas_client):
        """No timeout is sent unless one is configured."""
        canvas_client.get("/api/v1/x")
        assert "timeout" not in sent(canvas_client)[2]


class TestRequestFailures:
    """Every failure surfaces as a CanvasAPIError."""

    def test_structured_errors(self, canvas_client):
        """An errors body is raised as an upstream CanvasAPIError."""
        errors = [{"message": "The specified resource does not exist."}]
        canvas_client.session.request.return_value = make_response(
            status_code=404, json_body={"errors": errors}, reason="Not Found"
        )

        with pytest.raises(CanvasAPIError) as exc_info:
            canvas_client.get("/api/v1/courses/999")

        assert str(exc_info.value) == json.dumps(errors)
        assert exc_info.value.kind == ErrorKind.UPSTREAM
        assert exc_info.value.status_code == 404

    def test_http_error_without_body(self, canvas_client):
        """An HTTP error without JSON uses the status message."""
        canvas_client.session.request.return_value = make_response(
            status_code=500, content=b"oops", reason="Internal Server Error"
        )

        with pytest.raises(CanvasAPIError) as exc_info:
            canvas_client.get("/api/v1/courses")

        assert exc_info.value.kind == ErrorKind.TRANSPORT
        assert "500 Server Error" in str(exc_info.value)

    def test_network_error(self, canvas_client):
        """A connection failure keeps its message."""
        canvas_client.session.request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(CanvasAPIError) as exc_info:
            canvas_client.get("/api/v1/courses")

        assert str(exc_info.value) == "connection refused"
        assert exc_info.value.kind == ErrorKind.TRANSPORT

    def test_malformed_body(self, canvas_client):
        """A body that is not JSON is a transport error."""
        canvas_client.session.request.return_value = make_response(content=b"<html>not json</html>")

        with pytest.raises(CanvasAPIError) as exc_info:
            canvas_client.get("/api/v1/courses")

        assert exc_info.value.kind == ErrorKind.TRANSPORT


class TestFetchAllPages:
    """Tests for page-number pagination."""

    @staticmethod
    def _serve(canvas_client, total, per_page=100):
        items = list(range(total))
        pages = [items[i:i + per_page] for i in range(0, total, per_page)]
        if total % per_page == 0:
            pages.append([])
        canvas_client.session.request.side_effect = [make_response(json_body=p) for p in pages]
        return items

    @pytest.mark.parametrize("total", [0, 1, 99, 100, 101, 250, 300])
    def test_concatenates_pages_in_order(self, canvas_client, total):
        """Pages are joined in order with one extra request on exact multiples."""
        items = self._serve(canvas_client, total)

        result = canvas_client.fetch_all_pages("/api/v1/courses/1/users")

        expected_requests = -(-total // 100) + (1 if total % 100 == 0 else 0)
        assert result == items
        assert canvas_client.session.request.call_count == expected_requests

    def test_page_numbers_increase(self, canvas_client):
        """Pages are requested from 1 upward with the caller's query kept."""
        self._serve(canvas_client, 250)

        canvas_client.fetch_all_pages("/api/v1/courses/1/users", {"include[]": ["email"]})

        pages = [c.kwargs["params"]["page"] for c in canvas_client.session.request.call_args_list]
        assert pages == [1, 2, 3]
        first_params = canvas_client.session.request.call_args_list[0].kwargs["params"]
        assert first_params == {"include[]": ["email"], "page": 1, "per_page": 100}

    def test_per_page_override(self, canvas_client):
        """A caller's per_page sets both the page size and the stop rule."""
        self._serve(canvas_client, 25, per_page=10)

        result = canvas_client.fetch_all_pages("/api/v1/x", {"per_page": 10})

        assert len(result) == 25
        assert canvas_client.session.request.call_count == 3
        assert all(c.kwargs["params"]["per_page"] == 10 for c in canvas_client.session.request.call_args_list)

    def test_oversized_page_ends_run(self, canvas_client):
        """A page longer than per_page ends the run."""
        canvas_client.session.request.side_effect = [make_response(json_body=list(range(5)))]

        result = canvas_client.fetch_all_pages("/api/v1/x", {"per_page": 3})

        assert result == [0, 1, 2, 3, 4]
        assert canvas_client.session.request.call_count == 1

    def test_failure_aborts_without_partial_result(self, canvas_client):
        """A failing page raises instead of returning what was fetched."""
        canvas_client.session.request.side_effect = [
            make_response(json_body=list(range(100))),
            make_response(status_code=401, json_body={"errors": [{"message": "Invalid access token."}]},
                          reason="Unauthorized"),
        ]

        with pytest.raises(CanvasAPIError) as exc_info:
            canvas_client.fetch_all_pages("/api/v1/x")

        assert "Invalid access token." in str(exc_info.value)
        assert canvas_client.session.request.call_count == 2

    def test_non_list_page_is_an_error(self, canvas_client):
        """A page that is an object is an error."""
        canvas_client.session.request.return_value = make_response(json_body={"id": 1})

        with pytest.raises(CanvasAPIError):
            canvas_client.fetch_all_pages("/api/v1/x")

    @pytest.mark.parametrize("body", [{}, "", 0, False])
    def test_falsy_non_list_page_is_an_error(self, canvas_client, body):
        """Empty objects, empty text and zero are not treated as an empty page."""
        canvas_client.session.request.return_value = make_response(json_body=body)

        with pytest.raises(CanvasAPIError) as exc_info:
            canvas_client.fetch_all_pages("/api/v1/x")

        assert exc_info.value.kind == ErrorKind.TRANSPORT

    def test_empty_body_ends_run(self, canvas_client):
        """A page with no body at all counts as an empty final page."""
        canvas_client.session.request.return_value = make_response(status_code=204, reason="No Content")

        assert canvas_client.fetch_all_pages("/api/v1/x") == []


class TestEncodeSegment:
    """Tests for encode_segment function."""

    def test_slash_is_encoded(self):
        """Slashes inside a segment are percent-encoded."""
        assert encode_segment("syllabus/v2") == "syllabus%2Fv2"

    def test_plain_id_unchanged(self):
        """Plain ids are left as they are."""
        assert encode_segment(12345) == "12345"


class TestGetCanvasClient:
    """Tests for get_canvas_client function."""

    def test_explicit_settings_build_new_client(self):
        """Explicit settings give a fresh client that is not cached."""
        settings = Settings(base_url="https://override.test.edu", token="override-token")

        client = get_canvas_client(settings)

        assert isinstance(client, CanvasClient)
        assert client.base_url == "https://override.test.edu"
        assert client_module._canvas_client is not client

    def test_caches_global_client(self, monkeypatch):
        """The environment client is built once and reused."""
        reset_canvas_client()
        monkeypatch.setenv("CANVAS_DOMAIN", "test.instructure.com")
        monkeypatch.setenv("CANVAS_API_TOKEN", "token")
        monkeypatch.delenv("CANVAS_BASE_URL", raising=False)
        monkeypatch.delenv("CANVAS_ANONYMIZATION_POLICY", raising=False)
        monkeypatch.delenv("CANVAS_TIMEOUT", raising=False)

        client1 = get_canvas_client()
        client2 = get_canvas_client()

        assert client1 is client2
        assert client1.base_url == "https://test.instructure.com"

        reset_canvas_client()

    def test_concurrent_first_use_builds_one_client(self, monkeypatch):
        """Threads racing on first use all get the same, singly built client."""
        reset_canvas_client()
        built = []

        def build(settings):
            time.sleep(0.05)
            client = MagicMock(base_url=BASE_URL)
            built.append(client)
            return client

        monkeypatch.setattr(client_module, "load_settings", lambda: None)
        monkeypatch.setattr(CanvasClient, "from_settings", staticmethod(build))

        with ThreadPoolExecutor(max_workers=8) as pool:
            clients = list(pool.map(lambda _: get_canvas_client(), range(8)))

        assert len(built) == 1
        assert all(client is built[0] for client in clients)

        reset_canvas_client()
