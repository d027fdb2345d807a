"""
Unit tests for the agent loop.
"""

import pytest

from llm_pipeline.agent.loop import Agent, AgentError
from llm_pipeline.encoding.template import TemplateEncoder
from llm_pipeline.parsing.raw import RawParser
from llm_pipeline.pipeline.exceptions import PipelineError
from llm_pipeline.pipeline.oneshot import OneShotPipeline


def counter_pipeline(model):
    """Pipeline asking the model for the next action given a count state."""
    return OneShotPipeline(TemplateEncoder(user_template="count={{ input }}"), RawParser(), model)


def increment(state, action):
    next_state = state + 1 if action == "inc" else state
    return next_state, action == "stop" or next_state >= 3


async def collect(agent, initial_state):
    return [step async for step in agent.run(initial_state)]


@pytest.mark.asyncio
async def test_runs_until_terminal(scripted_model):
    """Test that one step is yielded per action and the last is terminal."""
    model = scripted_model({"count=0": ["inc"], "count=1": ["inc"], "count=2": ["inc"]})

    steps = await collect(Agent(counter_pipeline(model), increment), 0)

    assert [s.state for s in steps] == [1, 2, 3]
    assert [s.terminal for s in steps] == [False, False, True]
    assert all(s.error is None for s in steps)
    assert all(s.usage.successful_calls == 1 for s in steps)


@pytest.mark.asyncio
async def test_async_handler(scripted_model):
    """Test that coroutine handlers are awaited."""
    model = scripted_model({"count=5": ["stop"]})

    async def handler(state, action):
        return state, True

    steps = await collect(Agent(counter_pipeline(model), handler), 5)

    assert len(steps) == 1
    assert steps[0].action == "stop"
    assert steps[0].terminal


@pytest.mark.asyncio
async def test_pipeline_error_stops_with_error_step(failing_model):
    """Test that a pipeline failure yields one error step and ends."""
    steps = await collect(Agent(counter_pipeline(failing_model()), increment), 0)

    assert len(steps) == 1
    step = steps[0]
    assert isinstance(step.error, AgentError)
    assert step.error.message == "failed to get next action"
    assert isinstance(step.error.__cause__, PipelineError)
    assert step.state == 0
    assert step.action is None
    assert step.usage.failed_calls == 1


@pytest.mark.asyncio
async def test_handler_error_keeps_state(scripted_model):
    """Test that a handler failure reports the action and leaves state unchanged."""
    model = scripted_model({"count=0": ["explode"]})

    def handler(state, action):
        raise ValueError(f"unknown action {action}")

    steps = await collect(Agent(counter_pipeline(model), handler), 0)

    step = steps[0]
    assert step.error.message == "failed to apply next action"
    assert step.action == "explode"
    assert step.state == 0
    assert str(step.error) == "failed to apply next action: unknown action explode"


@pytest.mark.asyncio
async def test_lazy_iteration(scripted_model):
    """Test that nothing runs beyond what the consumer pulls."""
    model = scripted_model({"count=0": ["inc"], "count=1": ["inc"]})
    agent = Agent(counter_pipeline(model), increment)

    async for step in agent.run(0):
        assert step.state == 1
        break

    assert len(model.calls) == 1


def test_agent_error_str_skips_empty_cause():
    """Test that only a cause with text is appended to the message."""
    error = AgentError("agent stopped")
    error.__cause__ = TimeoutError()
    assert str(error) == "agent stopped"

    error.__cause__ = ValueError("bad action")
    assert str(error) == "agent stopped: bad action"
