import json
import pytest
from unittest.mock import MagicMock, patch

from ragie_import.models import StructuredMode
from ragie_import.load.ragie import RagieAPIError, RagieClient
from ragie_import.load.importer import clear_documents


def make_response(status: int, payload=None, reason: str = "OK", text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.reason = reason
    response.text = text or (json.dumps(payload) if payload is not None else "")
    response.json.return_value = payload
    return response


@pytest.fixture
def client() -> RagieClient:
    return RagieClient("secret-key", base_url="https://api.example.test/")


def test_create_document_raw_posts_json(client) -> None:
    response = make_response(201, {"id": "d1", "name": "Doc", "metadata": {"external_id": "x"}})
    with patch.object(client.session, "request", return_value=response) as request:
        doc = client.create_document_raw("part", "Doc", "body", {"external_id": "x"})

    assert doc.id == "d1"
    method, url = request.call_args.args
    kwargs = request.call_args.kwargs
    assert method == "POST"
    assert url == "https://api.example.test/documents/raw"
    assert kwargs["json"] == {"name": "Doc", "data": "body", "metadata": {"external_id": "x"}, "partition": "part"}
    assert kwargs["headers"]["Authorization"] == "Bearer secret-key"


def test_create_document_raw_omits_empty_partition(client) -> None:
    response = make_response(201, {"id": "d1"})
    with patch.object(client.session, "request", return_value=response) as request:
        client.create_document_raw("", "Doc", "body", {})

    assert "partition" not in request.call_args.kwargs["json"]


def test_non_created_status_raises_with_status_and_body(client) -> None:
    response = make_response(422, reason="Unprocessable Entity", text='{"detail":"bad"}')
    with patch.object(client.session, "request", return_value=response):
        with pytest.raises(RagieAPIError) as excinfo:
            client.create_document_raw("", "Doc", "body", {})

    assert str(excinfo.value) == 'API error: 422 Unprocessable Entity - {"detail":"bad"}'
    assert excinfo.value.body == '{"detail":"bad"}'


def test_undecodable_response_raises_api_error(client) -> None:
    response = make_response(201, text="not json")
    response.json.side_effect = ValueError("no json")
    with patch.object(client.session, "request", return_value=response):
        with pytest.raises(RagieAPIError):
            client.create_document_raw("", "Doc", "body", {})


def test_list_documents_encodes_filter_and_partition(client) -> None:
    payload = {"documents": [{"id": "d1", "name": "a", "metadata": {}}], "pagination": {"next_cursor": "c2"}}
    with patch.object(client.session, "request", return_value=make_response(200, payload)) as request:
        result = client.list_documents(filter={"external_id": "abc"}, page_size=1, cursor="c1", partition="team")

    assert [d.id for d in result.documents] == ["d1"]
    assert result.pagination.next_cursor == "c2"
    kwargs = request.call_args.kwargs
    assert request.call_args.args == ("GET", "https://api.example.test/documents")
    assert kwargs["params"] == {"filter": '{"external_id": "abc"}', "page_size": 1, "cursor": "c1"}
    assert kwargs["headers"]["Partition"] == "team"


def test_list_documents_without_partition_sends_no_header(client) -> None:
    with patch.object(client.session, "request", return_value=make_response(200, {"documents": []})) as request:
        client.list_documents(filter={"external_id": "abc"}, page_size=1)

    assert "Partition" not in request.call_args.kwargs["headers"]


def test_create_document_sends_multipart_with_structured_mode(client) -> None:
    response = make_response(201, {"id": "f1", "name": "a.txt"})
    mode = StructuredMode(audio=True, video="audio_video")
    with patch.object(client.session, "request", return_value=response) as request:
        client.create_document("part", "a.txt", b"bytes", "a.txt", {"external_id": "a.txt"}, mode)

    kwargs = request.call_args.kwargs
    assert request.call_args.args == ("POST", "https://api.example.test/documents")
    assert kwargs["files"] == {"file": ("a.txt", b"bytes")}
    assert kwargs["data"] == {
        "name": "a.txt",
        "partition": "part",
        "mode": '{"audio":true,"video":"audio_video"}',
        "metadata": '{"external_id": "a.txt"}',
    }


def test_create_document_sends_bare_string_mode(client) -> None:
    with patch.object(client.session, "request", return_value=make_response(201, {"id": "f1"})) as request:
        client.create_document("", "a.txt", b"bytes", "a.txt", {}, "hi_res")

    data = request.call_args.kwargs["data"]
    assert data["mode"] == "hi_res"
    assert "partition" not in data


def test_create_document_without_mode(client) -> None:
    with patch.object(client.session, "request", return_value=make_response(201, {"id": "f1"})) as request:
        client.create_document("", "a.txt", b"bytes", "a.txt", {}, None)

    assert "mode" not in request.call_args.kwargs["data"]


def test_delete_document(client) -> None:
    with patch.object(client.session, "request", return_value=make_response(200)) as request:
        client.delete_document("d9")

    assert request.call_args.args == ("DELETE", "https://api.example.test/documents/d9")


def test_delete_document_failure(client) -> None:
    with patch.object(client.session, "request", return_value=make_response(404, reason="Not Found", text="missing")):
        with pytest.raises(RagieAPIError, match="404 Not Found - missing"):
            client.delete_document("d9")


def test_clear_documents_follows_cursors_and_continues_after_delete_error(client) -> None:
    pages = [
        make_response(200, {"documents": [{"id": "a"}, {"id": "b"}], "pagination": {"next_cursor": "next"}}),
        make_response(200, {"documents": [{"id": "c"}], "pagination": {"next_cursor": None}}),
    ]
    deletes = {
        "a": make_response(200),
        "b": make_response(500, reason="Internal Server Error", text="oops"),
        "c": make_response(200),
    }

    def fake_request(method, url, **kwargs):
        if method == "GET":
            return pages.pop(0)
        return deletes[url.rsplit("/", 1)[1]]

    with patch.object(client.session, "request", side_effect=fake_request) as request:
        deleted = clear_documents(client, partition="team")

    assert deleted == 2
    gets = [c for c in request.call_args_list if c.args[0] == "GET"]
    assert gets[0].kwargs["params"]["page_size"] == 100
    assert gets[1].kwargs["params"]["cursor"] == "next"
    assert gets[0].kwargs["headers"]["Partition"] == "team"


def test_clear_documents_dry_run_deletes_nothing(client) -> None:
    page = make_response(200, {"documents": [{"id": "a"}], "pagination": {}})
    with patch.object(client.session, "request", return_value=page) as request:
        deleted = clear_documents(client, dry_run=True)

    assert deleted == 0
    assert all(c.args[0] == "GET" for c in request.call_args_list)


def test_clear_documents_list_failure_propagates(client) -> None:
    failure = make_response(401, reason="Unauthorized", text="bad key")
    with patch.object(client.session, "request", return_value=failure):
        with pytest.raises(RagieAPIError):
            clear_documents(client)
