import json

import httpx
import pytest

from cozeclient.templates import (
    DuplicateTemplateReq,
    TemplateDuplicateResp,
    TemplateEntityType,
    Templates,
)
from cozeclient.transport import CozeError, Core

BASE_URL = "https://api.example.com"


class _Auth:
    def token(self) -> str:
        return "token"


def _make(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return Templates(Core(BASE_URL, client, _Auth(), False))


def _ok(entity_id="entity1", entity_type="agent"):
    body = {"code": 0, "msg": "", "data": {"entity_id": entity_id, "entity_type": entity_type}}
    return httpx.Response(200, json=body, headers={"X-Tt-Logid": "test_log_id"})


def test_duplicate_sends_request_and_parses_result():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("Authorization")
        return _ok()

    templates = _make(handler)
    resp = templates.duplicate("tmpl1", DuplicateTemplateReq(workspace_id="ws1"))

    assert seen["method"] == "POST"
    assert seen["path"] == "/v1/templates/tmpl1/duplicate"
    assert seen["body"] == {"workspace_id": "ws1"}
    assert seen["auth"] == "Bearer token"
    assert resp.entity_id == "entity1"
    assert resp.entity_type == TemplateEntityType.AGENT
    assert resp.log_id == "test_log_id"


def test_duplicate_sends_name_when_given():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return _ok(entity_id="entity2")

    resp = _make(handler).duplicate(
        "tmpl1", DuplicateTemplateReq(workspace_id="ws1", name="copy")
    )
    assert resp.entity_id == "entity2"
    assert resp.entity_type == TemplateEntityType.AGENT
    assert seen["body"] == {"workspace_id": "ws1", "name": "copy"}


def test_unknown_entity_type_kept_as_text():
    resp = _make(lambda request: _ok(entity_type="plugin")).duplicate(
        "tmpl1", DuplicateTemplateReq(workspace_id="ws1")
    )
    assert resp.entity_type == "plugin"


def test_request_to_dict_omits_missing_name():
    assert DuplicateTemplateReq(workspace_id="ws1").to_dict() == {"workspace_id": "ws1"}


def test_request_to_dict_includes_name():
    req = DuplicateTemplateReq(workspace_id="ws1", name="copy")
    assert req.to_dict() == {"workspace_id": "ws1", "name": "copy"}


def test_from_dict_empty_payload():
    resp = TemplateDuplicateResp.from_dict({}, TemplateDuplicateResp().http_response)
    assert resp.entity_id == ""
    assert resp.log_id == ""


def test_duplicate_business_error():
    def handler(request):
        return httpx.Response(
            200, json={"code": 4000, "msg": "bad template"}, headers={"X-Tt-Logid": "test_log_id"}
        )

    with pytest.raises(CozeError) as info:
        _make(handler).duplicate("tmpl1", DuplicateTemplateReq(workspace_id="ws1"))
    assert info.value.code == 4000
    assert info.value.message == "bad template"
    assert info.value.log_id == "test_log_id"