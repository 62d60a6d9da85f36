"""Workflow runs: synchronous runs, streamed runs, resumes and run histories."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Iterator

from .stream import StreamReader
from .transport import Core, HTTPResponse


class WorkflowEventType(str, enum.Enum):
    """Kinds of events a streamed workflow run emits."""

    MESSAGE = "Message"
    ERROR = "Error"
    DONE = "Done"
    INTERRUPT = "Interrupt"


class WorkflowRunMode(enum.IntEnum):
    """How a workflow was run."""

    SYNCHRONOUS = 0
    STREAMING = 1
    ASYNCHRONOUS = 2


class WorkflowExecuteStatus(str, enum.Enum):
    """Execution status of a workflow run."""

    SUCCESS = "Success"
    RUNNING = "Running"
    FAIL = "Fail"


def _enum_or_raw(enum_type: type[enum.Enum], value: Any) -> Any:
    """Return the enum member for ``value``, or ``value`` itself when it is unknown."""
    try:
        return enum_type(value)
    except ValueError:
        return value


def _load_object(data: str) -> dict[str, Any]:
    """Decode ``data`` as a JSON object; ``null`` counts as an empty object."""
    payload = json.loads(data)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any) -> int:
    return int(value or 0)


@dataclass
class WorkflowEventMessage:
    """A message emitted by a workflow node."""

    content: str = ""
    node_title: str = ""
    node_seq_id: str = ""
    node_is_finish: bool = False
    ext: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> WorkflowEventMessage:
        return cls(
            content=_str(payload.get("content")),
            node_title=_str(payload.get("node_title")),
            node_seq_id=_str(payload.get("node_seq_id")),
            node_is_finish=bool(payload.get("node_is_finish")),
            ext=payload.get("ext"),
        )


@dataclass
class WorkflowEventInterruptData:
    """Identifies an interruption; both values are passed back on resume."""

    event_id: str = ""
    type: int = 0

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> WorkflowEventInterruptData:
        return cls(event_id=_str(payload.get("event_id")), type=_int(payload.get("type")))


@dataclass
class WorkflowEventInterrupt:
    """An interruption of a running workflow."""

    interrupt_data: WorkflowEventInterruptData | None = None
    node_title: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> WorkflowEventInterrupt:
        raw = payload.get("interrupt_data")
        return cls(
            interrupt_data=WorkflowEventInterruptData.from_dict(raw) if isinstance(raw, dict) else None,
            node_title=_str(payload.get("node_title")),
        )


@dataclass
class WorkflowEventError:
    """An error reported inside a workflow stream."""

    error_code: int = 0
    error_message: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> WorkflowEventError:
        return cls(
            error_code=_int(payload.get("error_code")),
            error_message=_str(payload.get("error_message")),
        )


@dataclass
class WorkflowEventDebugURL:
    """The debug page of a finished workflow run."""

    url: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> WorkflowEventDebugURL:
        return cls(url=_str(payload.get("debug_url")))


@dataclass
class WorkflowEvent:
    """One event of a streamed workflow run."""

    id: int = 0
    event: WorkflowEventType | str = WorkflowEventType.MESSAGE
    message: WorkflowEventMessage | None = None
    interrupt: WorkflowEventInterrupt | None = None
    error: WorkflowEventError | None = None
    debug_url: WorkflowEventDebugURL | None = None

    def is_done(self) -> bool:
        return self.event == WorkflowEventType.DONE


@dataclass
class WorkflowRunResult:
    """The result of a workflow run."""

    debug_url: str = ""
    data: str = ""
    execute_id: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> WorkflowRunResult:
        return cls(
            debug_url=_str(payload.get("debug_url")),
            data=_str(payload.get("data")),
            execute_id=_str(payload.get("execute_id")),
        )


@dataclass
class RunWorkflowsReq:
    """Parameters for running a published workflow."""

    workflow_id: str
    parameters: dict[str, Any] | None = None
    bot_id: str = ""
    ext: dict[str, str] | None = None
    is_async: bool = False
    app_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"workflow_id": self.workflow_id}
        if self.parameters:
            body["parameters"] = self.parameters
        if self.bot_id:
            body["bot_id"] = self.bot_id
        if self.ext:
            body["ext"] = self.ext
        if self.is_async:
            body["is_async"] = True
        if self.app_id:
            body["app_id"] = self.app_id
        return body


@dataclass
class ResumeRunWorkflowsReq:
    """Parameters for resuming an interrupted workflow run."""

    workflow_id: str
    event_id: str
    resume_data: str
    interrupt_type: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "workflow_id": self.workflow_id,
            "event_id": self.event_id,
            "resume_data": self.resume_data,
            "interrupt_type": self.interrupt_type,
        }


@dataclass
class RunWorkflowsResp:
    """The answer to a non-streamed workflow run."""

    execute_id: str = ""
    data: str = ""
    debug_url: str = ""
    token: int = 0
    cost: str = ""
    http_response: HTTPResponse = field(default_factory=HTTPResponse)

    @property
    def log_id(self) -> str:
        return self.http_response.log_id()

    @classmethod
    def from_dict(cls, payload: dict[str, Any], http_response: HTTPResponse) -> RunWorkflowsResp:
        return cls(
            execute_id=_str(payload.get("execute_id")),
            data=_str(payload.get("data")),
            debug_url=_str(payload.get("debug_url")),
            token=_int(payload.get("token")),
            cost=_str(payload.get("cost")),
            http_response=http_response,
        )


@dataclass
class RetrieveWorkflowsRunsHistoriesReq:
    """Identifies one asynchronous workflow execution."""

    execute_id: str
    workflow_id: str


@dataclass
class WorkflowRunHistory:
    """The record of one workflow execution."""

    execute_id: str = ""
    execute_status: WorkflowExecuteStatus | str = ""
    bot_id: str = ""
    connector_id: str = ""
    connector_uid: str = ""
    run_mode: WorkflowRunMode | int = WorkflowRunMode.SYNCHRONOUS
    log_id: str = ""
    create_time: int = 0
    update_time: int = 0
    output: str = ""
    error_code: str = ""
    error_message: str = ""
    debug_url: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> WorkflowRunHistory:
        return cls(
            execute_id=_str(payload.get("execute_id")),
            execute_status=_enum_or_raw(WorkflowExecuteStatus, _str(payload.get("execute_status"))),
            bot_id=_str(payload.get("bot_id")),
            connector_id=_str(payload.get("connector_id")),
            connector_uid=_str(payload.get("connector_uid")),
            run_mode=_enum_or_raw(WorkflowRunMode, _int(payload.get("run_mode"))),
            log_id=_str(payload.get("logid")),
            create_time=_int(payload.get("create_time")),
            update_time=_int(payload.get("update_time")),
            output=_str(payload.get("output")),
            error_code=_str(payload.get("error_code")),
            error_message=_str(payload.get("error_message")),
            debug_url=_str(payload.get("debug_url")),
        )


@dataclass
class RetrieveWorkflowRunsHistoriesResp:
    """Execution histories of a workflow run."""

    histories: list[WorkflowRunHistory] = field(default_factory=list)
    http_response: HTTPResponse = field(default_factory=HTTPResponse)

    @property
    def log_id(self) -> str:
        return self.http_response.log_id()


def parse_workflow_event_error(data: str) -> WorkflowEventError:
    """Decode a JSON error event payload."""
    return WorkflowEventError.from_dict(_load_object(data))


def parse_workflow_event_interrupt(data: str) -> WorkflowEventInterrupt:
    """Decode a JSON interrupt event payload."""
    return WorkflowEventInterrupt.from_dict(_load_object(data))


def _build_event(raw_id: str, event_name: str, data: str) -> WorkflowEvent:
    try:
        event_id = int(raw_id)
    except ValueError:
        event_id = 0
    event_type = _enum_or_raw(WorkflowEventType, event_name)
    if event_type == WorkflowEventType.INTERRUPT:
        return WorkflowEvent(id=event_id, event=event_type, interrupt=parse_workflow_event_interrupt(data))
    if event_type == WorkflowEventType.ERROR:
        return WorkflowEvent(id=event_id, event=event_type, error=parse_workflow_event_error(data))
    if event_type == WorkflowEventType.DONE:
        return WorkflowEvent(
            id=event_id,
            event=event_type,
            debug_url=WorkflowEventDebugURL.from_dict(_load_object(data)),
        )
    return WorkflowEvent(
        id=event_id,
        event=event_type,
        message=WorkflowEventMessage.from_dict(_load_object(data)),
    )


def _next_line(reader: Iterator[str]) -> str:
    try:
        return next(reader)
    except StopIteration:
        raise EOFError("workflow stream ended in the middle of an event") from None


def parse_workflow_event(line: str, reader: Iterator[str]) -> tuple[WorkflowEvent | None, bool]:
    """Parse an event starting at an ``id:`` line, reading its event and data lines.

    Returns the event and whether it ends the stream; other lines yield ``(None, False)``.
    """
    if not line.startswith("id:"):
        return None, False
    raw_id = line[3:].strip()
    event_name = _next_line(reader)[6:].strip()
    data = _next_line(reader)[5:].strip()
    event = _build_event(raw_id, event_name, data)
    return event, event.is_done()


def _open_stream(core: Core, path: str, req: Any) -> StreamReader[WorkflowEvent]:
    response = core.stream_request("POST", path, req)
    return StreamReader(response, parse_workflow_event, None)


class WorkflowRunsHistories:
    """Access to the execution histories of workflow runs."""

    def __init__(self, core: Core) -> None:
        self._core = core

    def retrieve(self, req: RetrieveWorkflowsRunsHistoriesReq) -> RetrieveWorkflowRunsHistoriesResp:
        """Fetch the history of one execution."""
        path = f"/v1/workflows/{req.workflow_id}/run_histories/{req.execute_id}"
        result = self._core.request("GET", path)
        items = result.data if isinstance(result.data, list) else []
        return RetrieveWorkflowRunsHistoriesResp(
            histories=[WorkflowRunHistory.from_dict(item) for item in items if isinstance(item, dict)],
            http_response=result.http_response,
        )


class WorkflowRuns:
    """Running, streaming and resuming workflows."""

    def __init__(self, core: Core) -> None:
        self._core = core
        self.histories = WorkflowRunsHistories(core)

    def create(self, req: RunWorkflowsReq) -> RunWorkflowsResp:
        """Run a workflow and wait for its result."""
        result = self._core.request("POST", "/v1/workflow/run", req)
        payload = result.payload if isinstance(result.payload, dict) else {}
        return RunWorkflowsResp.from_dict(payload, result.http_response)

    def stream(self, req: RunWorkflowsReq) -> StreamReader[WorkflowEvent]:
        """Run a workflow and stream its events."""
        return _open_stream(self._core, "/v1/workflow/stream_run", req)

    def resume(self, req: ResumeRunWorkflowsReq) -> StreamReader[WorkflowEvent]:
        """Resume an interrupted workflow and stream its events."""
        return _open_stream(self._core, "/v1/workflow/stream_resume", req)


class Workflows:
    """Entry point to workflow operations."""

    def __init__(self, core: Core) -> None:
        self.runs = WorkflowRuns(core)