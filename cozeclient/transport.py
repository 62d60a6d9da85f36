"""HTTP plumbing shared by the API clients: requests, headers and error handling."""

from __future__ import annotations

import dataclasses
import enum
import json
import logging
import os
import platform
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Iterable, Mapping, Protocol

import httpx

logger = logging.getLogger(__name__)

VERSION = "0.1.0"
HTTP_LOG_ID_KEY = "X-Tt-Logid"

# Log id forwarded with each request when the core is created with enable_log_id.
LOG_ID_VAR: ContextVar[str] = ContextVar("coze_log_id", default="")

RequestOption = Callable[[httpx.Request], None]

_SDK_NAME = "cozeclient"
_LANG = "python"
_LANG_VERSION = platform.python_version()
_OS_NAME = platform.system().lower()
_OS_VERSION = os.environ.get("OSVERSION", "")

_USER_AGENT = f"{_SDK_NAME}/{VERSION} {_LANG}/{_LANG_VERSION} {_OS_NAME}/{_OS_VERSION}"
_CLIENT_USER_AGENT = json.dumps(
    {
        "version": VERSION,
        "lang": _SDK_NAME,
        "lang_version": _LANG_VERSION,
        "os_name": _OS_NAME,
        "os_version": _OS_VERSION,
    },
    separators=(",", ":"),
)


def user_agent() -> str:
    """The value sent in the User-Agent header."""
    return _USER_AGENT


def client_user_agent() -> str:
    """The JSON value sent in the X-Coze-Client-User-Agent header."""
    return _CLIENT_USER_AGENT


class CozeError(Exception):
    """A failed API call: the service answered with a non-zero code."""

    def __init__(self, code: int, message: str, log_id: str = "") -> None:
        super().__init__(code, message, log_id)
        self.code = code
        self.message = message
        self.log_id = log_id

    def __str__(self) -> str:
        return f"code={self.code}, message={self.message}, logid={self.log_id}"


class CozeAuthError(CozeError):
    """A non-200 answer carrying an authentication error body."""

    def __init__(self, error_code: str, error_message: str, status_code: int, log_id: str = "") -> None:
        super().__init__(status_code, error_message, log_id)
        self.error_code = error_code
        self.error_message = error_message
        self.status_code = status_code

    def __str__(self) -> str:
        return (
            f"status={self.status_code}, code={self.error_code}, "
            f"message={self.error_message}, logid={self.log_id}"
        )


@dataclass
class HTTPResponse:
    """Status and headers of the HTTP answer behind a result."""

    headers: httpx.Headers = field(default_factory=httpx.Headers)
    status_code: int = 200

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers)

    def log_id(self) -> str:
        return self.headers.get(HTTP_LOG_ID_KEY, "")


@dataclass
class ApiResult:
    """A decoded JSON answer together with its HTTP response."""

    payload: Any
    http_response: HTTPResponse

    @property
    def code(self) -> int:
        if isinstance(self.payload, dict):
            return int(self.payload.get("code") or 0)
        return 0

    @property
    def msg(self) -> str:
        if isinstance(self.payload, dict):
            return str(self.payload.get("msg") or "")
        return ""

    @property
    def data(self) -> Any:
        if isinstance(self.payload, dict):
            return self.payload.get("data")
        return None

    @property
    def log_id(self) -> str:
        return self.http_response.log_id()


class _TokenSource(Protocol):
    def token(self) -> str: ...


def with_http_header(key: str, value: str) -> RequestOption:
    """An option that sets one request header."""

    def apply(request: httpx.Request) -> None:
        request.headers[key] = value

    return apply


def with_http_query(key: str, value: str) -> RequestOption:
    """An option that adds one query parameter."""

    def apply(request: httpx.Request) -> None:
        request.url = request.url.copy_add_param(key, value)

    return apply


def _http_response_of(response: httpx.Response) -> HTTPResponse:
    return HTTPResponse(headers=response.headers, status_code=response.status_code)


def _is_json_response(response: httpx.Response) -> bool:
    return "application/json" in response.headers.get("Content-Type", "")


def _check_http_response(response: httpx.Response) -> None:
    """Raise for any status other than 200."""
    if response.status_code == 200:
        return
    log_id = response.headers.get(HTTP_LOG_ID_KEY, "")
    raw = response.read()
    text = raw.decode("utf-8", errors="replace")
    try:
        payload = json.loads(raw)
    except ValueError:
        payload = None
    if not isinstance(payload, dict):
        logger.error("unmarshal response body: %s", text)
        raise CozeError(response.status_code, f"{text} log_id: {log_id}", log_id)
    error_code = payload.get("error_code")
    if not isinstance(error_code, str) or not error_code:
        fallback = payload.get("error")
        error_code = fallback if isinstance(fallback, str) else ""
    error_message = payload.get("error_message")
    raise CozeAuthError(
        error_code,
        error_message if isinstance(error_message, str) else "",
        response.status_code,
        log_id,
    )


def _ensure_success(payload: Any, raw: bytes, http_response: HTTPResponse) -> None:
    """Raise CozeError when a decoded body carries a non-zero code."""
    if not isinstance(payload, dict):
        return
    code = int(payload.get("code") or 0)
    if code != 0:
        log_id = http_response.log_id()
        logger.warning(
            "request failed, body=%s, log_id=%s", raw.decode("utf-8", errors="replace"), log_id
        )
        raise CozeError(code, str(payload.get("msg") or ""), log_id)


def _pack(response: httpx.Response) -> ApiResult:
    _check_http_response(response)
    raw = response.read()
    http_response = _http_response_of(response)
    try:
        payload = json.loads(raw)
    except ValueError:
        logger.error("unmarshal response body: %s", raw.decode("utf-8", errors="replace"))
        raise
    _ensure_success(payload, raw, http_response)
    return ApiResult(payload, http_response)


def _to_jsonable(body: Any) -> Any:
    to_dict = getattr(body, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(body) and not isinstance(body, type):
        return dataclasses.asdict(body)
    return body


def _json_default(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class Core:
    """Sends requests to the API and turns answers into results or errors."""

    def __init__(
        self,
        base_url: str,
        client: httpx.Client | None = None,
        auth: _TokenSource | None = None,
        enable_log_id: bool = False,
    ) -> None:
        self.base_url = base_url
        self.client = client if client is not None else httpx.Client(timeout=5.0)
        self.auth = auth
        self.enable_log_id = enable_log_id

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        options: Iterable[RequestOption] = (),
    ) -> ApiResult:
        """Send a JSON request and return the decoded, checked answer."""
        return _pack(self.raw_request(method, path, body, options))

    def raw_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        options: Iterable[RequestOption] = (),
    ) -> httpx.Response:
        """Send a JSON request and return the HTTP response once its status is checked."""
        return self._send(method, path, body, options, stream=False)

    def stream_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        options: Iterable[RequestOption] = (),
    ) -> httpx.Response:
        """Send a JSON request whose answer is read as a stream.

        A JSON answer in place of a stream is checked for an error code first.
        """
        response = self._send(method, path, body, options, stream=True)
        if _is_json_response(response):
            try:
                _pack(response)
            except BaseException:
                response.close()
                raise
        return response

    def upload_file(
        self,
        path: str,
        file: bytes | BinaryIO,
        file_name: str,
        fields: Mapping[str, str] | None = None,
        options: Iterable[RequestOption] = (),
    ) -> ApiResult:
        """Post ``file`` as multipart form data with extra ``fields``."""
        request = self.client.build_request(
            "POST",
            f"{self.base_url}{path}",
            files={"file": (file_name, file)},
            data=dict(fields or {}),
        )
        for option in options:
            option(request)
        self._set_common_headers(request)
        response = self.client.send(request)
        return _pack(response)

    def _send(
        self,
        method: str,
        path: str,
        body: Any,
        options: Iterable[RequestOption],
        *,
        stream: bool,
    ) -> httpx.Response:
        content = None
        if body is not None:
            content = json.dumps(_to_jsonable(body), default=_json_default).encode("utf-8")
        request = self.client.build_request(
            method,
            f"{self.base_url}{path}",
            content=content,
            headers={"Content-Type": "application/json"},
        )
        for option in options:
            option(request)
        self._set_common_headers(request)
        response = self.client.send(request, stream=stream)
        try:
            _check_http_response(response)
        except BaseException:
            response.close()
            raise
        return response

    def _set_common_headers(self, request: httpx.Request) -> None:
        request.headers["User-Agent"] = _USER_AGENT
        request.headers["X-Coze-Client-User-Agent"] = _CLIENT_USER_AGENT
        if self.enable_log_id:
            log_id = LOG_ID_VAR.get()
            if log_id:
                request.headers[HTTP_LOG_ID_KEY] = log_id
        if self.auth is not None:
            try:
                access_token = self.auth.token()
            except Exception as exc:
                logger.error("failed to get access_token: %s", exc)
                raise
            request.headers["Authorization"] = f"Bearer {access_token}"