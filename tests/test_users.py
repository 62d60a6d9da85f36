import httpx
import pytest

from cozeclient.transport import CozeAuthError, CozeError, Core
from cozeclient.users import Users

BASE_URL = "https://api.example.com"


class _Auth:
    def token(self) -> str:
        return "token"


def _make(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return Users(Core(BASE_URL, client, _Auth(), False))


def test_me():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        body = {
            "code": 0,
            "msg": "",
            "data": {
                "user_id": "test_user_id",
                "user_name": "test_user",
                "nick_name": "Test User",
                "avatar_url": "https://example.com/avatar.jpg",
            },
        }
        return httpx.Response(200, json=body, headers={"X-Tt-Logid": "test_log_id"})

    user = _make(handler).me()
    assert seen["method"] == "GET"
    assert seen["path"] == "/v1/users/me"
    assert seen["auth"] == "Bearer token"
    assert user.user_id == "test_user_id"
    assert user.user_name == "test_user"
    assert user.nick_name == "Test User"
    assert user.avatar_url == "https://example.com/avatar.jpg"
    assert user.log_id == "test_log_id"


def test_me_business_error():
    def handler(request):
        return httpx.Response(200, json={"code": 1001, "msg": "business error"})

    with pytest.raises(CozeError) as info:
        _make(handler).me()
    assert info.value.code == 1001
    assert info.value.message == "business error"


def test_me_auth_error():
    def handler(request):
        return httpx.Response(
            401, json={"error_code": "invalid_token", "error_message": "Token is invalid"}
        )

    with pytest.raises(CozeAuthError) as info:
        _make(handler).me()
    assert info.value.error_code == "invalid_token"
    assert info.value.error_message == "Token is invalid"