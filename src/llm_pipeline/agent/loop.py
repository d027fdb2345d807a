"""
Agent loop.

An agent repeatedly asks a pipeline for the next action given its current
state, applies that action with a handler to get the next state, and yields
one AgentStep per iteration. Iteration is lazy: nothing runs until the
consumer asks for the next step, and stopping early (break, aclose) performs
no further work.
"""

import inspect
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar, Union

import structlog

from llm_pipeline.llm.exceptions import usage_of
from llm_pipeline.models.llm_models import Usage
from llm_pipeline.pipeline.base import Pipeline

logger = structlog.get_logger(__name__)

S = TypeVar("S")
A = TypeVar("A")

Handler = Callable[[S, A], Union[tuple[S, bool], Awaitable[tuple[S, bool]]]]


class AgentError(Exception):
    """
    Raised into an AgentStep when the loop cannot continue.

    The failure that stopped the loop is attached as __cause__.
    """

    def __init__(self, message: str, usage: Usage | None = None):
        super().__init__(message)
        self.message = message
        self.usage = usage or Usage()

    def __str__(self) -> str:
        cause = str(self.__cause__) if self.__cause__ is not None else ""
        if cause:
            return f"{self.message}: {cause}"
        return self.message


@dataclass(frozen=True)
class AgentStep(Generic[S, A]):
    """
    One iteration of the agent loop.

    Attributes:
        state: State after the action was applied (unchanged on error)
        action: Action chosen this iteration (None if choosing it failed)
        usage: Usage of the pipeline call that chose the action
        terminal: True if this is the last step of a successful run
        error: Set when the loop stopped on a failure
    """

    state: S
    action: Optional[A] = None
    usage: Usage = field(default_factory=Usage)
    terminal: bool = False
    error: Optional[AgentError] = None


class Agent(Generic[S, A]):
    """
    State machine driven by a pipeline.

    handler(state, action) returns (next_state, terminal) and may be a plain
    function or a coroutine function. States are replaced wholesale, never
    mutated by the loop.
    """

    def __init__(self, action_pipeline: Pipeline[S, A], handler: Handler):
        self.action_pipeline = action_pipeline
        self.handler = handler

    async def run(self, initial_state: S) -> AsyncIterator[AgentStep[S, A]]:
        state = initial_state
        step_number = 0

        while True:
            step_number += 1
            try:
                action, usage = await self.action_pipeline.call(state)
            except Exception as e:
                error = AgentError("failed to get next action", usage=usage_of(e))
                error.__cause__ = e
                logger.warning("Agent stopped", step=step_number, error=str(error))
                yield AgentStep(state=state, usage=error.usage, error=error)
                return

            try:
                result = self.handler(state, action)
                if inspect.isawaitable(result):
                    result = await result
                next_state, terminal = result
            except Exception as e:
                error = AgentError("failed to apply next action", usage=usage)
                error.__cause__ = e
                logger.warning("Agent stopped", step=step_number, error=str(error))
                yield AgentStep(state=state, action=action, usage=usage, error=error)
                return

            logger.debug("Agent step complete", step=step_number, terminal=terminal)
            yield AgentStep(state=next_state, action=action, usage=usage, terminal=terminal)
            if terminal:
                return
            state = next_state
