import httpx
import pytest

from wikidelete import wikijs_client
from wikidelete.backends import WikiJSBackend
from wikidelete.core.domain import Actor, FileRef, StatusLevel, make_target
from wikidelete.core.titles import parse_title
from wikidelete.core.upstream import upstream_api_error
from wikidelete.wikijs_client import WikiError, WikiJSClient

ALICE = Actor("Alice", groups=frozenset({"sysop"}))


class _FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def json(self):
        return self.payload


class _FakeClient:
    """Answers GraphQL posts from a list of canned responses."""

    responses: list = []
    requests: list = []

    def __init__(self, *args, **kwargs):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def post(self, url, json, headers):
        assert url == "http://example.test/graphql"
        assert headers["Authorization"] == "Bearer token-1"
        _FakeClient.requests.append(json)
        item = _FakeClient.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return _FakeResponse(item)


@pytest.fixture
def fake_http(monkeypatch):
    _FakeClient.responses = []
    _FakeClient.requests = []
    monkeypatch.setattr(wikijs_client.httpx, "Client", _FakeClient)
    monkeypatch.setattr(wikijs_client.time, "sleep", lambda s: None)
    return _FakeClient


def _page_target():
    return make_target(3, parse_title("Sandbox"))


def _backend():
    return WikiJSBackend(WikiJSClient("http://example.test", "token-1"))


def test_client_from_env(monkeypatch):
    monkeypatch.setenv("WIKIJS_BASE_URL", "http://example.test/")
    monkeypatch.setenv("WIKIJS_API_TOKEN", "token-1")
    monkeypatch.setenv("WIKIJS_LOCALE", "de")
    client = WikiJSClient.from_env()
    assert client.graphql_url == "http://example.test/graphql"
    assert client.locale == "de"


def test_client_from_env_requires_config(monkeypatch):
    monkeypatch.delenv("WIKIJS_BASE_URL", raising=False)
    with pytest.raises(WikiError) as exc:
        WikiJSClient.from_env()
    assert exc.value.status == 503


def test_resolve_page_by_title(fake_http):
    fake_http.responses = [{"data": {"pages": {"singleByPath": {"id": 7, "path": "help/deleting-pages"}}}}]
    target = _backend().resolve_target(title=parse_title("Help:Deleting pages"))
    assert target.exists and target.page_id == 7
    assert fake_http.requests[0]["variables"] == {"path": "help/deleting-pages", "locale": "en"}


def test_resolve_missing_page(fake_http):
    fake_http.responses = [{"errors": [{"message": "This page does not exist."}]}]
    target = _backend().resolve_target(title=parse_title("Nowhere"))
    assert not target.exists


def test_resolve_by_pageid(fake_http):
    fake_http.responses = [{"data": {"pages": {"single": {"id": 3, "path": "sandbox", "title": "Sandbox"}}}}]
    target = _backend().resolve_target(pageid=3)
    assert target.title.prefixed_text == "Sandbox"


def test_resolve_file_by_asset_name(fake_http):
    assets = {"data": {"assets": {"list": [{"id": 11, "filename": "example.png", "ext": ".png", "kind": "IMAGE"}]}}}
    fake_http.responses = [assets]
    target = _backend().resolve_target(title=parse_title("File:Example.png"))
    assert target.exists and target.kind.value == "file" and target.page_id == 11


def test_synthesize_reason_for_blanked_page(fake_http):
    fake_http.responses = [
        {"data": {"pages": {"single": {"id": 3, "content": "", "authorName": "Bob"}}}},
        {"data": {"pages": {"history": {"trail": [{"versionId": 5, "authorName": "Alice"}], "total": 1}}}},
        {"data": {"pages": {"version": {"content": "Old text", "authorName": "Alice"}}}},
    ]
    assert _backend().synthesize_reason(_page_target()) == 'content before blanking was: "Old text"'


def test_delete_page_records_log(fake_http):
    fake_http.responses = [{"data": {"pages": {"delete": {"responseResult": {"succeeded": True}}}}}]
    backend = _backend()
    status = backend.delete_page(_page_target(), "cleanup", ALICE)
    assert status.level == StatusLevel.SUCCESS
    assert status.value == backend.log.recent()[0].logid


def test_delete_page_failure_is_fatal(fake_http):
    fake_http.responses = [
        {"data": {"pages": {"delete": {"responseResult": {"succeeded": False, "slug": "PageDeleteForbidden"}}}}}
    ]
    status = _backend().delete_page(_page_target(), "cleanup", ALICE)
    assert status.level == StatusLevel.FAILURE
    assert status.errors[0].code == "PageDeleteForbidden"


def test_network_errors_retry_then_fail(fake_http):
    request = httpx.Request("POST", "http://example.test/graphql")
    fake_http.responses = [httpx.ConnectError("down", request=request) for _ in range(4)]
    status = _backend().delete_page(_page_target(), "cleanup", ALICE)
    assert status.level == StatusLevel.FAILURE
    assert status.errors[0].code == "upstream_error"
    assert len(fake_http.requests) == 4


def test_archived_assets_are_not_supported(fake_http):
    backend = _backend()
    assert backend.archived_file(_page_target(), "20200101000000!Example.png") is None


def test_delete_current_asset(fake_http):
    assets = {"data": {"assets": {"list": [{"id": 11, "filename": "example.png"}]}}}
    fake_http.responses = [
        assets,
        {"data": {"assets": {"deleteAsset": {"responseResult": {"succeeded": True}}}}},
    ]
    backend = _backend()
    target = make_target(11, parse_title("File:Example.png"))
    status = backend.delete_file(target, FileRef("example.png"), None, "", False, ALICE)
    assert status.succeeded
    assert fake_http.requests[1]["variables"] == {"id": 11}
    assert backend.log.recent()[0].title == "File:Example.png"


@pytest.mark.parametrize(
    "status,expected",
    [(504, (504, "upstream_timeout")), (503, (503, "upstream_unconfigured")), (500, (502, "upstream_error")), (404, (404, "upstream_error"))],
)
def test_upstream_errors_map_to_api_errors(status, expected):
    err = upstream_api_error(WikiError(status, "boom"))
    assert (err.status_code, err.code) == expected
    assert err.message == "boom"
