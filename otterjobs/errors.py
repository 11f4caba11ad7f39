"""Errors raised by the engine."""

from __future__ import annotations


class EngineError(Exception):
    """Base class for engine errors."""


class ExecuteError(EngineError):
    """An effect failed to execute."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"execute error: {detail}")


class PipelineNotFound(EngineError):
    """No pipeline matches the given id (or a required field was missing)."""

    def __init__(self, pipeline_id: str) -> None:
        self.pipeline_id = pipeline_id
        super().__init__(f"pipeline not found: {pipeline_id}")


class CommandNotFound(EngineError):
    """The runbook defines no such command."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"command not found: {command}")


class PipelineDefNotFound(EngineError):
    """The runbook defines no such pipeline."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"pipeline definition not found: {kind}")


class AgentNotFound(EngineError):
    """The runbook defines no such agent."""

    def __init__(self, agent: str) -> None:
        self.agent = agent
        super().__init__(f"agent not found: {agent}")


class PromptError(EngineError):
    """An agent's prompt could not be built."""

    def __init__(self, agent: str, message: str) -> None:
        self.agent = agent
        self.message = message
        super().__init__(f"prompt error for agent {agent}: {message}")


class InvalidRunDirective(EngineError):
    """A run directive is not allowed in this context."""

    def __init__(self, context: str, directive: str) -> None:
        self.context = context
        self.directive = directive
        super().__init__(f"invalid run directive for {context}: {directive}")