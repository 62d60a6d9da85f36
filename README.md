# cozeclient

A small Python client for the Coze open API, built on httpx. It covers:

- running workflows in one call or as a stream of events, resuming
  interrupted runs and looking up run histories;
- reading the current user's profile;
- reading and updating variables;
- duplicating templates.

## Installation

```
pip install cozeclient
```

To run the test suite:

```
pip install "cozeclient[test]"
pytest
```

## Setting up a core

Every service is built on a `Core` from `cozeclient.transport`. It holds the
base URL, the `httpx.Client` used to send requests (a client with a 5 second
timeout is made when none is given), an optional token source and whether
log ids are forwarded.

The token source is any object with a `token()` method returning an access
token; it is sent as `Authorization: Bearer <token>`. When `auth` is `None`
no Authorization header is sent.

```python
import httpx

from cozeclient.transport import Core


class StaticToken:
    def token(self) -> str:
        return "token"


core = Core(
    base_url="https://api.example.com",
    client=httpx.Client(timeout=5.0),
    auth=StaticToken(),
    enable_log_id=False,
)
```

Every request carries a `User-Agent` header and an
`X-Coze-Client-User-Agent` JSON header describing the library and platform;
their values come from `user_agent()` and `client_user_agent()`.

With `enable_log_id=True`, a non-empty value set in the context variable
`cozeclient.transport.LOG_ID_VAR` is sent in the `X-Tt-Logid` header.

### Low-level requests

`Core.request(method, path, body=None, options=())` sends a JSON body
(dataclasses and objects with a `to_dict()` method are encoded) and returns an
`ApiResult` with the decoded `payload`, its `code`, `msg`, `data`, `log_id`
and the `http_response`. `Core.raw_request` returns the `httpx.Response`
after its status is checked, `Core.stream_request` returns a streamed
response, and `Core.upload_file(path, file, file_name, fields=None,
options=())` posts a multipart form with the file under the `file` field.

Options are callables applied to the outgoing `httpx.Request`:
`with_http_header(key, value)` sets a header and `with_http_query(key, value)`
adds a query parameter.

## Running a workflow

```python
from cozeclient.workflows import RunWorkflowsReq, WorkflowRuns

runs = WorkflowRuns(core)
result = runs.create(RunWorkflowsReq(workflow_id="workflow1", parameters={"param1": "value1"}))
print(result.execute_id, result.data, result.token, result.cost, result.log_id)
```

`Workflows(core)` holds the same service as `Workflows(core).runs`.

### Streaming

`stream` and `resume` return a `StreamReader` (from `cozeclient.stream`). It
is a context manager and can be iterated; each item is a `WorkflowEvent`.
`recv()` returns the next event, or `None` once the stream is exhausted.

```python
from cozeclient.workflows import WorkflowEventType

with runs.stream(RunWorkflowsReq(workflow_id="workflow1")) as events:
    for event in events:
        if event.event is WorkflowEventType.MESSAGE:
            print(event.message.content, end="")
        elif event.event is WorkflowEventType.INTERRUPT:
            print("interrupted at", event.interrupt.node_title)
        elif event.event is WorkflowEventType.ERROR:
            print("error", event.error.error_code, event.error.error_message)
        elif event.is_done():
            print("\ndebug page:", event.debug_url.url)
```

An interrupted run is continued with
`runs.resume(ResumeRunWorkflowsReq(workflow_id=..., event_id=..., resume_data=..., interrupt_type=...))`,
passing back `event.interrupt.interrupt_data.event_id` and `.type`.

Event payloads can also be decoded on their own with
`parse_workflow_event_error(data)` and `parse_workflow_event_interrupt(data)`.

### Run histories

```python
from cozeclient.workflows import RetrieveWorkflowsRunsHistoriesReq

found = runs.histories.retrieve(
    RetrieveWorkflowsRunsHistoriesReq(workflow_id="workflow1", execute_id="exec1")
)
for history in found.histories:
    print(history.execute_id, history.execute_status, history.run_mode)
```

`WorkflowExecuteStatus` and `WorkflowRunMode` give the known status and run
mode values; unknown values are kept as they came.

## Users

```python
from cozeclient.users import Users

me = Users(core).me()
print(me.user_id, me.user_name, me.nick_name, me.avatar_url)
```

## Variables

```python
from cozeclient.variables import (
    RetrieveVariablesReq, UpdateVariablesReq, VariableValue, Variables,
)

variables = Variables(core)
found = variables.retrieve(RetrieveVariablesReq(connector_uid="uid1", keywords=["key1", "key2"]))
for item in found.items:
    print(item.keyword, item.value, item.update_time)

variables.update(UpdateVariablesReq(
    connector_uid="uid1",
    data=[VariableValue(keyword="key1", value="new_value1")],
))
```

Passing `None` to `retrieve` or `update` raises `ValueError("invalid req")`.

## Templates

```python
from cozeclient.templates import DuplicateTemplateReq, Templates

copy = Templates(core).duplicate("template1", DuplicateTemplateReq(workspace_id="ws1"))
print(copy.entity_id, copy.entity_type)
```

## Errors

Both live in `cozeclient.transport`:

- `CozeError` is raised when the API answers with a non-zero business code,
  or with a non-200 status whose body is not a JSON object; it carries
  `code`, `message` and `log_id`.
- `CozeAuthError`, a subclass of `CozeError`, is raised for a non-200 status
  with a JSON object body; it carries `status_code`, `error_code` and
  `error_message`.

Results keep the HTTP response they came from, so the server's log id is
available as `log_id` for troubleshooting.

## What it does not do

- There is no single client object bundling all services, and no token
  provider: the token source passed to `Core` is up to the caller.
- Chat, conversation, workspace listing and paginated listing APIs are not
  included.
- There is no command-line tool; this is a library only.