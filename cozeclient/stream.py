"""Reading server-sent event streams one event at a time."""

from __future__ import annotations

import json
from typing import Callable, Generic, Iterator, Optional, Tuple, TypeVar

import httpx

from .transport import (
    HTTPResponse,
    _check_http_response,
    _ensure_success,
    _http_response_of,
    _is_json_response,
)

T = TypeVar("T")

# Turns one non-empty line into an event; may pull further lines from the iterator.
EventProcessor = Callable[[str, Iterator[str]], Tuple[Optional[T], bool]]


class StreamReader(Generic[T]):
    """Yields events parsed from a streamed HTTP response."""

    def __init__(
        self,
        response: httpx.Response,
        processor: EventProcessor,
        http_response: HTTPResponse | None = None,
    ) -> None:
        self._response = response
        self._processor = processor
        self.http_response = http_response if http_response is not None else _http_response_of(response)
        self.is_finished = False
        self._lines: Iterator[str] | None = None

    def _open(self) -> Iterator[str]:
        _check_http_response(self._response)
        if _is_json_response(self._response):
            raw = self._response.read()
            _ensure_success(json.loads(raw), raw, self.http_response)
            return iter(())
        return self._response.iter_lines()

    def recv(self) -> T | None:
        """Return the next event, or None once the stream is exhausted."""
        if self._lines is None:
            self._lines = self._open()
        for line in self._lines:
            if not line:
                continue
            event, done = self._processor(line, self._lines)
            self.is_finished = done
            if event is not None:
                return event
        self.is_finished = True
        return None

    def close(self) -> None:
        self._response.close()

    def __iter__(self) -> Iterator[T]:
        while (event := self.recv()) is not None:
            yield event

    def __enter__(self) -> StreamReader[T]:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()