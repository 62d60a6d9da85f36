"""Template operations: duplicating a template into a workspace."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from .transport import Core, HTTPResponse


class TemplateEntityType(str, enum.Enum):
    """Kinds of entity a template can produce."""

    AGENT = "agent"


def _entity_type(value: Any) -> TemplateEntityType | str:
    text = "" if value is None else str(value)
    try:
        return TemplateEntityType(text)
    except ValueError:
        return text


@dataclass
class DuplicateTemplateReq:
    """Parameters for duplicating a template."""

    workspace_id: str
    name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"workspace_id": self.workspace_id}
        if self.name is not None:
            body["name"] = self.name
        return body


@dataclass
class TemplateDuplicateResp:
    """The entity created by duplicating a template."""

    entity_id: str = ""
    entity_type: TemplateEntityType | str = ""
    http_response: HTTPResponse = field(default_factory=HTTPResponse)

    @property
    def log_id(self) -> str:
        return self.http_response.log_id()

    @classmethod
    def from_dict(cls, payload: dict[str, Any], http_response: HTTPResponse) -> TemplateDuplicateResp:
        entity_id = payload.get("entity_id")
        return cls(
            entity_id="" if entity_id is None else str(entity_id),
            entity_type=_entity_type(payload.get("entity_type")),
            http_response=http_response,
        )


class Templates:
    """Access to template operations."""

    def __init__(self, core: Core) -> None:
        self._core = core

    def duplicate(self, template_id: str, req: DuplicateTemplateReq) -> TemplateDuplicateResp:
        """Create a copy of the template ``template_id``."""
        result = self._core.request("POST", f"/v1/templates/{template_id}/duplicate", req)
        data = result.data if isinstance(result.data, dict) else {}
        return TemplateDuplicateResp.from_dict(data, result.http_response)