"""IPC protocol between the CLI and the daemon.

Wire format: a 4-byte big-endian length prefix followed by a JSON payload.
Every request, response and query is a JSON object tagged by its ``type``.
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Any, ClassVar, Union

MAX_MESSAGE_SIZE = 200 * 1024 * 1024
"""Largest payload accepted in either direction (200 MB)."""

DEFAULT_TIMEOUT = 5.0
"""Default IPC timeout in seconds."""

PROTOCOL_VERSION = "0.1.0"
"""Version reported in the hello handshake."""

_LENGTH_PREFIX_SIZE = 4


class ProtocolError(Exception):
    """Base class for protocol errors; raised directly for I/O and JSON failures."""


class MessageTooLarge(ProtocolError):
    """A message exceeds :data:`MAX_MESSAGE_SIZE`."""

    def __init__(self, size: int, max_size: int) -> None:
        self.size = size
        self.max_size = max_size
        super().__init__(f"Message too large: {size} bytes (max {max_size})")


class ConnectionClosed(ProtocolError):
    """The peer closed the connection before a message began."""

    def __init__(self) -> None:
        super().__init__("Connection closed")


class ProtocolTimeout(ProtocolError):
    """A read or write did not finish in time."""

    def __init__(self) -> None:
        super().__init__("Timeout")


# --- field helpers -------------------------------------------------------


def _matches(value: Any, kind: Any) -> bool:
    if kind is bool:
        return isinstance(value, bool)
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool) and value >= 0
    return isinstance(value, kind)


def _get(data: dict[str, Any], key: str, kind: Any, optional: bool = False) -> Any:
    if key not in data or (optional and data[key] is None):
        if optional:
            return None
        raise ProtocolError(f"JSON error: missing field `{key}`")
    value = data[key]
    if not _matches(value, kind):
        raise ProtocolError(f"JSON error: invalid type for field `{key}`")
    return value


def _get_str_map(data: dict[str, Any], key: str) -> dict[str, str]:
    mapping = _get(data, key, dict)
    if not all(isinstance(v, str) for v in mapping.values()):
        raise ProtocolError(f"JSON error: invalid type for field `{key}`")
    return dict(mapping)


def _decode_tagged(value: Any, registry: dict[str, Any], what: str) -> Any:
    if not isinstance(value, dict):
        raise ProtocolError(f"JSON error: expected {what} object")
    tag = value.get("type")
    if not isinstance(tag, str):
        raise ProtocolError("JSON error: missing field `type`")
    cls = registry.get(tag)
    if cls is None:
        raise ProtocolError(f"JSON error: unknown variant `{tag}`")
    return cls._from_json(value)


def _to_json(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        out: dict[str, Any] = {}
        tag = getattr(value, "TAG", None)
        if tag:
            out["type"] = tag
        for item in dataclasses.fields(value):
            out[item.name] = _to_json(getattr(value, item.name))
        return out
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_json(v) for k, v in value.items()}
    return value


class _Tagged:
    TAG: ClassVar[str] = ""


# --- summaries -----------------------------------------------------------


@dataclass(frozen=True)
class PipelineSummary:
    """Summary of a pipeline for listing."""

    id: str
    name: str
    kind: str
    phase: str
    phase_status: str

    @classmethod
    def _from_json(cls, data: Any) -> PipelineSummary:
        if not isinstance(data, dict):
            raise ProtocolError("JSON error: expected pipeline summary object")
        return cls(
            **{k: _get(data, k, str) for k in ("id", "name", "kind", "phase", "phase_status")}
        )


@dataclass(frozen=True)
class PipelineDetail:
    """Detailed pipeline information."""

    id: str
    name: str
    kind: str
    phase: str
    phase_status: str
    inputs: dict[str, str] = field(default_factory=dict)
    workspace_path: Path | None = None
    session_id: str | None = None
    error: str | None = None

    @classmethod
    def _from_json(cls, data: Any) -> PipelineDetail:
        if not isinstance(data, dict):
            raise ProtocolError("JSON error: expected pipeline detail object")
        workspace = _get(data, "workspace_path", str, optional=True)
        return cls(
            **{k: _get(data, k, str) for k in ("id", "name", "kind", "phase", "phase_status")},
            inputs=_get_str_map(data, "inputs"),
            workspace_path=Path(workspace) if workspace is not None else None,
            session_id=_get(data, "session_id", str, optional=True),
            error=_get(data, "error", str, optional=True),
        )


@dataclass(frozen=True)
class SessionSummary:
    """Summary of a session for listing."""

    id: str
    pipeline_id: str | None = None

    @classmethod
    def _from_json(cls, data: Any) -> SessionSummary:
        if not isinstance(data, dict):
            raise ProtocolError("JSON error: expected session summary object")
        return cls(
            id=_get(data, "id", str),
            pipeline_id=_get(data, "pipeline_id", str, optional=True),
        )


# --- queries -------------------------------------------------------------


@dataclass(frozen=True)
class ListPipelines(_Tagged):
    """List all pipelines."""

    TAG: ClassVar[str] = "ListPipelines"

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> ListPipelines:
        return cls()


@dataclass(frozen=True)
class GetPipeline(_Tagged):
    """Fetch one pipeline by id or unique prefix."""

    TAG: ClassVar[str] = "GetPipeline"
    id: str

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> GetPipeline:
        return cls(id=_get(data, "id", str))


@dataclass(frozen=True)
class ListSessions(_Tagged):
    """List all sessions."""

    TAG: ClassVar[str] = "ListSessions"

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> ListSessions:
        return cls()


Query = Union[ListPipelines, GetPipeline, ListSessions]
_QUERIES = {cls.TAG: cls for cls in (ListPipelines, GetPipeline, ListSessions)}


# --- requests ------------------------------------------------------------


@dataclass(frozen=True)
class PingRequest(_Tagged):
    """Health check ping."""

    TAG: ClassVar[str] = "Ping"

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> PingRequest:
        return cls()


@dataclass(frozen=True)
class HelloRequest(_Tagged):
    """Version handshake."""

    TAG: ClassVar[str] = "Hello"
    version: str

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> HelloRequest:
        return cls(version=_get(data, "version", str))


@dataclass(frozen=True)
class EventRequest(_Tagged):
    """Deliver an event (a JSON object) to the event loop."""

    TAG: ClassVar[str] = "Event"
    event: dict[str, Any]

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> EventRequest:
        return cls(event=_get(data, "event", dict))


@dataclass(frozen=True)
class QueryRequest(_Tagged):
    """Query daemon state."""

    TAG: ClassVar[str] = "Query"
    query: Query

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> QueryRequest:
        if "query" not in data:
            raise ProtocolError("JSON error: missing field `query`")
        return cls(query=_decode_tagged(data["query"], _QUERIES, "query"))


@dataclass(frozen=True)
class ShutdownRequest(_Tagged):
    """Ask the daemon to shut down."""

    TAG: ClassVar[str] = "Shutdown"

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> ShutdownRequest:
        return cls()


@dataclass(frozen=True)
class StatusRequest(_Tagged):
    """Ask for daemon status."""

    TAG: ClassVar[str] = "Status"

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> StatusRequest:
        return cls()


@dataclass(frozen=True)
class SessionSendRequest(_Tagged):
    """Send input to a session."""

    TAG: ClassVar[str] = "SessionSend"
    id: str
    input: str

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> SessionSendRequest:
        return cls(id=_get(data, "id", str), input=_get(data, "input", str))


@dataclass(frozen=True)
class PipelineResumeRequest(_Tagged):
    """Resume monitoring for an escalated pipeline."""

    TAG: ClassVar[str] = "PipelineResume"
    id: str

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> PipelineResumeRequest:
        return cls(id=_get(data, "id", str))


@dataclass(frozen=True)
class PipelineFailRequest(_Tagged):
    """Mark a pipeline as failed."""

    TAG: ClassVar[str] = "PipelineFail"
    id: str
    error: str

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> PipelineFailRequest:
        return cls(id=_get(data, "id", str), error=_get(data, "error", str))


Request = Union[
    PingRequest,
    HelloRequest,
    EventRequest,
    QueryRequest,
    ShutdownRequest,
    StatusRequest,
    SessionSendRequest,
    PipelineResumeRequest,
    PipelineFailRequest,
]
_REQUESTS = {
    cls.TAG: cls
    for cls in (
        PingRequest,
        HelloRequest,
        EventRequest,
        QueryRequest,
        ShutdownRequest,
        StatusRequest,
        SessionSendRequest,
        PipelineResumeRequest,
        PipelineFailRequest,
    )
}


# --- responses -----------------------------------------------------------


@dataclass(frozen=True)
class OkResponse(_Tagged):
    """Generic success."""

    TAG: ClassVar[str] = "Ok"

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> OkResponse:
        return cls()


@dataclass(frozen=True)
class PongResponse(_Tagged):
    """Health check reply."""

    TAG: ClassVar[str] = "Pong"

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> PongResponse:
        return cls()


@dataclass(frozen=True)
class HelloResponse(_Tagged):
    """Version handshake reply."""

    TAG: ClassVar[str] = "Hello"
    version: str

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> HelloResponse:
        return cls(version=_get(data, "version", str))


@dataclass(frozen=True)
class ShuttingDownResponse(_Tagged):
    """The daemon is shutting down."""

    TAG: ClassVar[str] = "ShuttingDown"

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> ShuttingDownResponse:
        return cls()


@dataclass(frozen=True)
class EventResponse(_Tagged):
    """An event was processed."""

    TAG: ClassVar[str] = "Event"
    accepted: bool

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> EventResponse:
        return cls(accepted=_get(data, "accepted", bool))


@dataclass(frozen=True)
class PipelinesResponse(_Tagged):
    """List of pipelines."""

    TAG: ClassVar[str] = "Pipelines"
    pipelines: list[PipelineSummary] = field(default_factory=list)

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> PipelinesResponse:
        items = _get(data, "pipelines", list)
        return cls(pipelines=[PipelineSummary._from_json(item) for item in items])


@dataclass(frozen=True)
class PipelineResponse(_Tagged):
    """Single pipeline details, or ``None`` if not found."""

    TAG: ClassVar[str] = "Pipeline"
    pipeline: PipelineDetail | None = None

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> PipelineResponse:
        detail = _get(data, "pipeline", dict, optional=True)
        return cls(pipeline=PipelineDetail._from_json(detail) if detail is not None else None)


@dataclass(frozen=True)
class SessionsResponse(_Tagged):
    """List of sessions."""

    TAG: ClassVar[str] = "Sessions"
    sessions: list[SessionSummary] = field(default_factory=list)

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> SessionsResponse:
        items = _get(data, "sessions", list)
        return cls(sessions=[SessionSummary._from_json(item) for item in items])


@dataclass(frozen=True)
class StatusResponse(_Tagged):
    """Daemon status."""

    TAG: ClassVar[str] = "Status"
    uptime_secs: int
    pipelines_active: int
    sessions_active: int

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> StatusResponse:
        return cls(
            uptime_secs=_get(data, "uptime_secs", int),
            pipelines_active=_get(data, "pipelines_active", int),
            sessions_active=_get(data, "sessions_active", int),
        )


@dataclass(frozen=True)
class ErrorResponse(_Tagged):
    """Error reply."""

    TAG: ClassVar[str] = "Error"
    message: str

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> ErrorResponse:
        return cls(message=_get(data, "message", str))


Response = Union[
    OkResponse,
    PongResponse,
    HelloResponse,
    ShuttingDownResponse,
    EventResponse,
    PipelinesResponse,
    PipelineResponse,
    SessionsResponse,
    StatusResponse,
    ErrorResponse,
]
_RESPONSES = {
    cls.TAG: cls
    for cls in (
        OkResponse,
        PongResponse,
        HelloResponse,
        ShuttingDownResponse,
        EventResponse,
        PipelinesResponse,
        PipelineResponse,
        SessionsResponse,
        StatusResponse,
        ErrorResponse,
    )
}


# --- encoding ------------------------------------------------------------


def encode(message: Any) -> bytes:
    """Encode a message as JSON bytes, without the length prefix."""
    payload = json.dumps(_to_json(message), separators=(",", ":"), ensure_ascii=False)
    data = payload.encode("utf-8")
    if len(data) > MAX_MESSAGE_SIZE:
        raise MessageTooLarge(len(data), MAX_MESSAGE_SIZE)
    return data


def _load(data: bytes) -> Any:
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProtocolError(f"JSON error: {exc}") from exc


def decode_request(data: bytes) -> Request:
    """Decode a request from JSON bytes."""
    return _decode_tagged(_load(data), _REQUESTS, "request")


def decode_response(data: bytes) -> Response:
    """Decode a response from JSON bytes."""
    return _decode_tagged(_load(data), _RESPONSES, "response")


# --- framing -------------------------------------------------------------


async def read_message(reader: asyncio.StreamReader) -> bytes:
    """Read one length-prefixed message payload."""
    try:
        header = await reader.readexactly(_LENGTH_PREFIX_SIZE)
    except asyncio.IncompleteReadError as exc:
        raise ConnectionClosed() from exc
    except OSError as exc:
        raise ProtocolError(f"IO error: {exc}") from exc

    length = int.from_bytes(header, "big")
    if length > MAX_MESSAGE_SIZE:
        raise MessageTooLarge(length, MAX_MESSAGE_SIZE)

    try:
        return await reader.readexactly(length)
    except asyncio.IncompleteReadError as exc:
        raise ProtocolError("IO error: early end of stream") from exc
    except OSError as exc:
        raise ProtocolError(f"IO error: {exc}") from exc


async def write_message(writer: Any, data: bytes) -> None:
    """Write ``data`` with its 4-byte big-endian length prefix and flush."""
    if len(data) > MAX_MESSAGE_SIZE:
        raise MessageTooLarge(len(data), MAX_MESSAGE_SIZE)
    try:
        writer.write(len(data).to_bytes(_LENGTH_PREFIX_SIZE, "big"))
        writer.write(data)
        await writer.drain()
    except OSError as exc:
        raise ProtocolError(f"IO error: {exc}") from exc


async def read_request(
    reader: asyncio.StreamReader, timeout: float = DEFAULT_TIMEOUT
) -> Request:
    """Read and decode a request, giving up after ``timeout`` seconds."""
    try:
        data = await asyncio.wait_for(read_message(reader), timeout)
    except asyncio.TimeoutError as exc:
        raise ProtocolTimeout() from exc
    return decode_request(data)


async def write_response(
    writer: Any, response: Response, timeout: float = DEFAULT_TIMEOUT
) -> None:
    """Encode and write a response, giving up after ``timeout`` seconds."""
    data = encode(response)
    try:
        await asyncio.wait_for(write_message(writer, data), timeout)
    except asyncio.TimeoutError as exc:
        raise ProtocolTimeout() from exc