"""Variable operations: reading and updating stored variable values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .transport import Core, HTTPResponse, with_http_query


@dataclass
class VariableValue:
    """A single variable with its keyword and value."""

    keyword: str
    value: str
    update_time: int = 0
    create_time: int = 0

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"keyword": self.keyword, "value": self.value}
        if self.update_time:
            body["update_time"] = self.update_time
        if self.create_time:
            body["create_time"] = self.create_time
        return body

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> VariableValue:
        keyword = payload.get("keyword")
        value = payload.get("value")
        return cls(
            keyword="" if keyword is None else str(keyword),
            value="" if value is None else str(value),
            update_time=int(payload.get("update_time") or 0),
            create_time=int(payload.get("create_time") or 0),
        )


@dataclass
class RetrieveVariablesReq:
    """Which variables to read."""

    connector_uid: str
    keywords: list[str] = field(default_factory=list)
    app_id: str | None = None
    bot_id: str | None = None
    connector_id: str | None = None


@dataclass
class RetrieveVariablesResp:
    """Variables read from the service."""

    items: list[VariableValue] = field(default_factory=list)
    http_response: HTTPResponse = field(default_factory=HTTPResponse)

    @property
    def log_id(self) -> str:
        return self.http_response.log_id()


@dataclass
class UpdateVariablesReq:
    """Variable values to store."""

    connector_uid: str
    data: list[VariableValue] = field(default_factory=list)
    app_id: str | None = None
    bot_id: str | None = None
    connector_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "connector_uid": self.connector_uid,
            "data": [item.to_dict() for item in self.data],
        }
        for key in ("app_id", "bot_id", "connector_id"):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        return body


@dataclass
class UpdateVariablesResp:
    """The answer to a variable update."""

    http_response: HTTPResponse = field(default_factory=HTTPResponse)

    @property
    def log_id(self) -> str:
        return self.http_response.log_id()


class Variables:
    """Access to variable operations."""

    def __init__(self, core: Core) -> None:
        self._core = core

    def retrieve(self, req: RetrieveVariablesReq | None) -> RetrieveVariablesResp:
        """Read the variables matching ``req``."""
        if req is None:
            raise ValueError("invalid req")
        options = [
            with_http_query("connector_uid", req.connector_uid),
            with_http_query("keywords", ",".join(req.keywords)),
        ]
        for key in ("app_id", "bot_id", "connector_id"):
            value = getattr(req, key)
            if value is not None:
                options.append(with_http_query(key, value))
        result = self._core.request("GET", "/v1/variables", None, options)
        data = result.data if isinstance(result.data, dict) else {}
        raw_items = data.get("items") or []
        return RetrieveVariablesResp(
            items=[VariableValue.from_dict(item) for item in raw_items if isinstance(item, dict)],
            http_response=result.http_response,
        )

    def update(self, req: UpdateVariablesReq | None) -> UpdateVariablesResp:
        """Store the variable values in ``req``."""
        if req is None:
            raise ValueError("invalid req")
        result = self._core.request("PUT", "/v1/variables", req)
        return UpdateVariablesResp(http_response=result.http_response)