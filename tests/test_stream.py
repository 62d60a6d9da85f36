from dataclasses import dataclass

import httpx
import pytest

from cozeclient.stream import StreamReader
from cozeclient.transport import HTTP_LOG_ID_KEY, CozeAuthError, CozeError, HTTPResponse


@dataclass
class Event:
    content: str
    done: bool


def processor(line, lines):
    done = line == "done"
    return Event(line, done), done


def make_http_response():
    return HTTPResponse(headers={HTTP_LOG_ID_KEY: "test_log_id"})


def make_reader(lines, proc=processor):
    response = httpx.Response(200, content="\n".join(lines).encode())
    return StreamReader(response, proc, make_http_response())


def test_successful_event_processing():
    with make_reader(["first", "second", "done"]) as reader:
        event = reader.recv()
        assert event == Event("first", False)
        assert reader.is_finished is False

        event = reader.recv()
        assert event == Event("second", False)
        assert reader.is_finished is False

        event = reader.recv()
        assert event == Event("done", True)
        assert reader.is_finished is True

        assert reader.recv() is None


def test_empty_lines_are_skipped():
    reader = make_reader(["", "test", "", "done"])
    assert reader.recv() == Event("test", False)
    assert reader.recv() == Event("done", True)
    assert reader.recv() is None


def test_iteration_collects_all_events():
    reader = make_reader(["a", "b", "done"])
    assert [event.content for event in reader] == ["a", "b", "done"]


def test_processor_can_read_following_lines():
    def multi_line(line, lines):
        if line.startswith("id:"):
            data = next(lines)
            return Event(data[len("data:"):], False), False
        return None, False

    response = httpx.Response(200, content=b"id:1\ndata:x\n\nid:2\ndata:y\nstray\n")
    reader = StreamReader(response, multi_line)
    assert [event.content for event in reader] == ["x", "y"]
    assert reader.is_finished is True


def test_error_response_handling():
    body = b'{"log_id": "error_log_id", "error": {"code": 400, "message": "Bad Request"}}'
    response = httpx.Response(400, headers={"Content-Type": "application/json"}, content=body)
    reader = StreamReader(response, processor, make_http_response())
    with pytest.raises(CozeAuthError) as info:
        reader.recv()
    assert info.value.status_code == 400


def test_json_business_error():
    response = httpx.Response(
        200,
        json={"code": 100, "msg": "Invalid workflow ID"},
        headers={HTTP_LOG_ID_KEY: "test_log_id"},
    )
    reader = StreamReader(response, processor)
    with pytest.raises(CozeError) as info:
        reader.recv()
    assert info.value.code == 100
    assert info.value.log_id == "test_log_id"


def test_json_success_ends_stream():
    response = httpx.Response(200, json={"code": 0, "msg": ""})
    reader = StreamReader(response, processor)
    assert reader.recv() is None
    assert reader.is_finished is True


def test_log_id():
    response = httpx.Response(200, content=b"")
    reader = StreamReader(response, processor, make_http_response())
    assert reader.http_response.log_id() == "test_log_id"


def test_log_id_taken_from_response_by_default():
    response = httpx.Response(200, content=b"", headers={HTTP_LOG_ID_KEY: "from-response"})
    reader = StreamReader(response, processor)
    assert reader.http_response.log_id() == "from-response"