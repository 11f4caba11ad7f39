import pytest

from otterjobs.errors import (
    AgentNotFound,
    CommandNotFound,
    EngineError,
    ExecuteError,
    InvalidRunDirective,
    PipelineDefNotFound,
    PipelineNotFound,
    PromptError,
)


def test_pipeline_not_found_message():
    err = PipelineNotFound("pipe-1")
    assert str(err) == "pipeline not found: pipe-1"
    assert err.pipeline_id == "pipe-1"


def test_simple_messages():
    assert str(CommandNotFound("build")) == "command not found: build"
    assert str(PipelineDefNotFound("build")) == "pipeline definition not found: build"
    assert str(AgentNotFound("planner")) == "agent not found: planner"
    assert str(ExecuteError("boom")) == "execute error: boom"


def test_prompt_error_message():
    err = PromptError("planner", "missing var")
    assert str(err) == "prompt error for agent planner: missing var"
    assert (err.agent, err.message) == ("planner", "missing var")


def test_invalid_run_directive_message():
    err = InvalidRunDirective("command", "not an agent phase")
    assert str(err) == "invalid run directive for command: not an agent phase"
    assert err.directive == "not an agent phase"


@pytest.mark.parametrize(
    "error",
    [
        ExecuteError("x"),
        PipelineNotFound("x"),
        CommandNotFound("x"),
        PipelineDefNotFound("x"),
        AgentNotFound("x"),
        PromptError("a", "m"),
        InvalidRunDirective("c", "d"),
    ],
)
def test_all_errors_catchable_as_engine_error(error):
    with pytest.raises(EngineError) as info:
        raise error
    assert info.value is error