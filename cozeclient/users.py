"""User operations: information about the current user."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .transport import Core, HTTPResponse


def _str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class User:
    """A Coze user."""

    user_id: str = ""
    user_name: str = ""
    nick_name: str = ""
    avatar_url: str = ""
    http_response: HTTPResponse = field(default_factory=HTTPResponse)

    @property
    def log_id(self) -> str:
        return self.http_response.log_id()

    @classmethod
    def from_dict(cls, payload: dict[str, Any], http_response: HTTPResponse) -> User:
        return cls(
            user_id=_str(payload.get("user_id")),
            user_name=_str(payload.get("user_name")),
            nick_name=_str(payload.get("nick_name")),
            avatar_url=_str(payload.get("avatar_url")),
            http_response=http_response,
        )


class Users:
    """Access to user operations."""

    def __init__(self, core: Core) -> None:
        self._core = core

    def me(self) -> User:
        """Fetch the current user's information."""
        result = self._core.request("GET", "/v1/users/me")
        data = result.data if isinstance(result.data, dict) else {}
        return User.from_dict(data, result.http_response)