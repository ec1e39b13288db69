import pytest
import requests

from models.queued_operation import QueuedOperation
from services.archive_api import ApiError, ArchiveApiClient
from services.operation_processor import OperationProcessor, ReplayError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b""):
        self.status_code = status_code
        self._payload = payload
        self.content = content or (b"{}" if payload is not None else b"")

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.requests = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.requests.append({"method": method, "url": url, "json": json, "headers": headers})
        if self.error:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return FakeResponse(200, {"ok": True})

    def get(self, url, headers=None, timeout=None):
        self.requests.append({"method": "GET", "url": url, "json": None, "headers": headers})
        if self.error:
            raise self.error
        return self.responses.pop(0) if self.responses else FakeResponse(200, content=b"%PDF")


def _processor(session, token=None):
    api = ArchiveApiClient(
        "http://localhost:4000/",
        session=session,
        token_provider=lambda: token,
    )
    return OperationProcessor(api)


def test_create_posts_payload_to_collection():
    session = FakeSession()
    op = QueuedOperation.new("create", "partituras", {"titulo": "Sinfonia"})

    _processor(session, token="abc").process(op)

    request = session.requests[0]
    assert request["method"] == "POST"
    assert request["url"] == "http://localhost:4000/api/partituras"
    assert request["json"] == {"titulo": "Sinfonia"}
    assert request["headers"]["Authorization"] == "Bearer abc"


def test_update_puts_to_record_url():
    session = FakeSession()
    op = QueuedOperation.new("update", "performances", {"id": 12, "local": "Teatro"})

    _processor(session).process(op)

    request = session.requests[0]
    assert request["method"] == "PUT"
    assert request["url"] == "http://localhost:4000/api/performances/12"
    assert request["json"] == {"id": 12, "local": "Teatro"}
    assert "Authorization" not in request["headers"]


def test_delete_addresses_record_without_body():
    session = FakeSession()
    op = QueuedOperation.new("delete", "partituras", {"id": "p-9"})

    _processor(session).process(op)

    request = session.requests[0]
    assert request["method"] == "DELETE"
    assert request["url"] == "http://localhost:4000/api/partituras/p-9"
    assert request["json"] is None


def test_non_success_response_is_replay_error():
    session = FakeSession(responses=[FakeResponse(500)])
    op = QueuedOperation.new("create", "partituras", {"titulo": "A"})

    with pytest.raises(ReplayError) as info:
        _processor(session).process(op)
    assert info.value.operation is op
    assert isinstance(info.value.__cause__, ApiError)
    assert info.value.__cause__.status == 500


def test_transport_error_is_replay_error():
    session = FakeSession(error=requests.ConnectionError("offline"))
    op = QueuedOperation.new("create", "partituras", {"titulo": "A"})

    with pytest.raises(ReplayError):
        _processor(session).process(op)


def test_update_without_id_fails_without_request():
    session = FakeSession()
    op = QueuedOperation.new("update", "partituras", {"titulo": "sem id"})

    with pytest.raises(ReplayError):
        _processor(session).process(op)
    assert session.requests == []


def test_unknown_resource_fails():
    session = FakeSession()
    op = QueuedOperation.new("create", "arquivos-secretos", {"nome": "x"})

    with pytest.raises(ReplayError):
        _processor(session).process(op)
    assert session.requests == []


def test_download_resolves_relative_urls():
    session = FakeSession()
    api = ArchiveApiClient("http://localhost:4000", session=session)

    assert api.download("/uploads/sinfonia.pdf") == b"%PDF"
    assert session.requests[0]["url"] == "http://localhost:4000/uploads/sinfonia.pdf"


def test_redirect_is_not_success():
    session = FakeSession(responses=[FakeResponse(302)])
    op = QueuedOperation.new("delete", "partituras", {"id": 1})

    with pytest.raises(ReplayError) as info:
        _processor(session).process(op)
    assert info.value.__cause__.status == 302
