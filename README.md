# otterjobs

Pieces of a background job daemon that drives multi-phase pipelines and the
coding agents working inside them. The package is a library; it uses only the
standard library.

## Modules

- **`otterjobs.scheduler`**: named one-shot timers. `Scheduler.set_timer(id,
  duration, now)` sets or resets a timer to fire `duration` seconds after
  `now` (times are plain seconds on a monotonic scale of your choosing, such
  as `time.monotonic()`). `fired_timers(now)` removes every timer due at or
  before `now` and returns a `TimerEvent` for each. `next_deadline()` gives the
  earliest pending deadline or `None`, `has_timers()` says whether any timer
  is pending, and `cancel_timer()` drops a timer (unknown ids are ignored).
- **`otterjobs.session_log`**: works out what an agent is doing from the last
  non-blank line of its JSON-lines session log.
  `SessionLogWatcher(path).check_state()` returns either a `SessionState`
  member (`WORKING`, `WAITING_FOR_INPUT`, `UNKNOWN`) or a `Failed` holding a
  `FailureReason`. A reason has a `FailureKind` (`UNAUTHORIZED`,
  `OUT_OF_CREDITS`, `NO_INTERNET`, `RATE_LIMITED`, `OTHER`) and, for `OTHER`,
  the raw error text in `detail`. A missing, empty or unparsable log gives
  `UNKNOWN`. `find_session_log_in(project_path, session_id, base)` looks in
  `<base>/projects/<hash>/` for `<session_id>.jsonl` and otherwise returns the
  most recently modified `.jsonl` file there, or `None`.
  `find_session_log()` does the same with the base taken from
  `CLAUDE_LOCAL_STATE_DIR`, or `~/.claude` when that is unset.
  `hash_project_path()` gives the directory name for a project, and
  `failure_to_message()` a short human-readable message for a reason.
- **`otterjobs.workspace`**: `prepare_for_agent(workspace_path, project_root,
  pipeline_name, prompt)` creates the workspace, writes a `CLAUDE.md` holding
  the pipeline name, the prompt and instructions for finishing, and copies the
  project's `.claude/settings.json` to `.claude/settings.local.json` when the
  project has one.
- **`otterjobs.errors`**: the engine's exceptions, all derived from
  `EngineError`: `ExecuteError`, `PipelineNotFound`, `CommandNotFound`,
  `PipelineDefNotFound`, `AgentNotFound`, `PromptError` and
  `InvalidRunDirective`.
- **`otterjobs.lifecycle`**: daemon paths for a project.
  `Config.for_project()` resolves the project root (raising `ProjectNotFound`
  if it does not exist) and picks the socket, PID, version, log, WAL and
  workspace paths under a per-project hash from `project_hash()`.
  `state_dir()` is `$XDG_STATE_HOME/oj`, or `~/.local/state/oj` from `HOME`;
  with neither set it raises `NoStateDir`. `socket_dir()` is `/tmp/oj` unless
  `OJ_SOCKET_DIR` is set. `cleanup_on_failure()` removes the socket, version
  and PID files silently; `remove_runtime_files()` removes them and logs a
  warning for any that cannot be removed. Both derive errors from
  `LifecycleError`.
- **`otterjobs.protocol`**: the IPC protocol between client and daemon. Each
  message is a 4-byte big-endian length followed by a JSON object tagged by
  `"type"`. It provides the request classes (`PingRequest`, `HelloRequest`,
  `EventRequest`, `QueryRequest`, `ShutdownRequest`, `StatusRequest`,
  `SessionSendRequest`, `PipelineResumeRequest`, `PipelineFailRequest`), the
  queries (`ListPipelines`, `GetPipeline`, `ListSessions`), the response
  classes (`OkResponse`, `PongResponse`, `HelloResponse`,
  `ShuttingDownResponse`, `EventResponse`, `PipelinesResponse`,
  `PipelineResponse`, `SessionsResponse`, `StatusResponse`, `ErrorResponse`)
  and the records `PipelineSummary`, `PipelineDetail` and `SessionSummary`.
  `encode()`, `decode_request()` and `decode_response()` convert messages to
  and from JSON bytes; async `read_message()`, `write_message()`,
  `read_request()` and `write_response()` handle framing, the last two with a
  timeout in seconds (default 5). Errors derive from `ProtocolError`:
  `MessageTooLarge` (over 200 MB), `ConnectionClosed` and `ProtocolTimeout`.
- **`otterjobs.daemonlog`**: `write_startup_marker(config, pid=None)` appends
  the `--- ojd: starting (pid: N)` line to the daemon log (creating its
  directory), and `write_startup_error()` appends a startup error line,
  ignoring any failure to write. A client reads these lines to find the
  current startup attempt.

## Examples

Check what an agent session is doing:

```python
from otterjobs.session_log import SessionLogWatcher, SessionState, Failed, failure_to_message

state = SessionLogWatcher("/path/to/session.jsonl").check_state()
if isinstance(state, Failed):
    print("agent failed:", failure_to_message(state.reason))
elif state == SessionState.WAITING_FOR_INPUT:
    print("agent is idle")
```

Prepare a workspace for an agent:

```python
from otterjobs.workspace import prepare_for_agent

prepare_for_agent("/tmp/ws/login", "/path/to/project", "login", "Add a login page")
```

Exchange a message with a daemon listening on the project's socket:

```python
import asyncio

from otterjobs.lifecycle import Config
from otterjobs.protocol import (
    PingRequest,
    decode_response,
    encode,
    read_message,
    write_message,
)


async def ping(project_root):
    config = Config.for_project(project_root)
    reader, writer = await asyncio.open_unix_connection(str(config.socket_path))
    try:
        await write_message(writer, encode(PingRequest()))
        return decode_response(await read_message(reader))
    finally:
        writer.close()
        await writer.wait_closed()
```

## What the package does not do

It holds no daemon itself: there is no command to start, no socket server
that answers requests, no event loop or runtime that advances pipelines
through their phases, no runbook parser and no event log storage. The
modules above are the parts such a daemon and its client are built from.

## Requirements

Python 3.10 or later. No third-party dependencies; the tests use `pytest`
and `pytest-asyncio` (the `test` extra).