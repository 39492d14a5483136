"""
@file_name: context.py
@author: NetMind.AI
@date: 2026-03-04
@description: Runner execution context

RunContext is a dataclass used to pass state between the step functions of a
run. It is owned by exactly one Runner invocation; nested agent-as-tool runs
get their own. User callbacks (instructions, guardrails, hooks, tools) never
see it directly, only the frozen RunContextView returned by view().
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Dict, List, Optional, Tuple, TypeVar, Union

from xyz_agent_runtime.schema import (
    GuardrailRecord,
    ModelResponse,
    RunItem,
    Usage,
)
from xyz_agent_runtime.utils import RunCancelledError, RunTimeoutError, wait_with_budget
from ..execution_state import ExecutionState

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_definition import Agent, RunHooks
    from xyz_agent_runtime.agent_framework.model_client import ModelClient
    from ..response_processor import ProcessedResponse
    from ..run_config import RunConfig

T = TypeVar("T")

# wait_for and time.monotonic may disagree by a few milliseconds
_CLOCK_TOLERANCE = 0.01


# ============================================================================
# Read-only View
# ============================================================================

@dataclass(frozen=True)
class RunContextView:
    """
    Read-only snapshot of a run, handed to user callbacks

    Attributes:
        context: The user context object passed to Runner.run (shared, not copied)
        agent_name: Active agent
        turn: Current turn number (0 before the first model call)
        max_turns: Turn limit of the run
        history: Snapshot of the history at the time the view was taken
        usage: Token usage so far
    """
    context: Any
    agent_name: str
    turn: int
    max_turns: int
    history: Tuple[RunItem, ...]
    usage: Usage


# ============================================================================
# Run Context
# ============================================================================

@dataclass
class RunContext:
    """
    Execution context for one run

    Attributes:
        # ===== Input Parameters (set at initialization) =====
        starting_agent: Agent the run started with
        input: Raw run input (text or list of history items)
        context: User context object
        run_config: Effective RunConfig
        max_turns: Turn limit
        model_client: Model Client used for every turn
        hooks: Run-wide lifecycle hooks

        # ===== Turn Loop State =====
        current_agent: Active agent (exactly one at any instant)
        history: Ordered history
        input_item_count: Number of leading history items that are run input
        turn: Turn counter (incremented before each model call)
        turn_start_index: History length when the current turn started
        agent_start_pending: on_agent_start hooks still owed to current_agent
        processed: Classified response of the current turn

        # ===== Results =====
        state: Immutable ExecutionState (counters, usage, steps)
        raw_responses: Every ModelResponse, in order
        input_guardrail_results / output_guardrail_results: Every guardrail evaluation
        final_candidate: Raw final candidate of the current turn
        final_output: Coerced final output
        is_done: Run reached Done

        # ===== Limits =====
        deadline: time.monotonic() value after which the run times out (None = unbounded)
    """

    # ===== Input Parameters (set at initialization) =====
    starting_agent: "Agent"
    input: Union[str, List[RunItem]]
    context: Any
    run_config: "RunConfig"
    max_turns: int
    model_client: "ModelClient"
    hooks: Optional["RunHooks"] = None

    # ===== Turn Loop State =====
    current_agent: Optional["Agent"] = None
    history: List[RunItem] = field(default_factory=list)
    input_item_count: int = 0
    turn: int = 0
    turn_start_index: int = 0
    agent_start_pending: bool = True
    processed: Optional["ProcessedResponse"] = None

    # ===== Results =====
    state: ExecutionState = field(default_factory=ExecutionState)
    raw_responses: List[ModelResponse] = field(default_factory=list)
    input_guardrail_results: List[GuardrailRecord] = field(default_factory=list)
    output_guardrail_results: List[GuardrailRecord] = field(default_factory=list)
    final_candidate: Any = None
    has_final_candidate: bool = False
    final_output: Any = None
    is_done: bool = False

    # ===== Limits =====
    deadline: Optional[float] = None

    def __post_init__(self):
        if self.current_agent is None:
            self.current_agent = self.starting_agent

    # =========================================================================
    # Views and item helpers
    # =========================================================================

    def view(self) -> RunContextView:
        """Frozen snapshot for user callbacks"""
        return RunContextView(
            context=self.context,
            agent_name=self.current_agent.name,
            turn=self.turn,
            max_turns=self.max_turns,
            history=tuple(self.history),
            usage=self.state.usage,
        )

    def item_meta(self) -> Dict[str, Any]:
        """agent_name / turn fields for a new history item"""
        return {"agent_name": self.current_agent.name, "turn": self.turn}

    def add_item(self, item: RunItem) -> RunItem:
        self.history.append(item)
        return item

    def begin_turn(self) -> None:
        self.turn += 1
        self.turn_start_index = len(self.history)
        self.processed = None
        self.final_candidate = None
        self.has_final_candidate = False

    def set_final_candidate(self, candidate: Any) -> None:
        self.final_candidate = candidate
        self.has_final_candidate = True

    def swap_agent(self, agent: "Agent", new_history: List[RunItem], input_item_count: int) -> None:
        """Make agent active and replace the history with the filtered handoff history"""
        self.current_agent = agent
        self.history = list(new_history)
        self.input_item_count = input_item_count
        self.turn_start_index = len(self.history)
        self.agent_start_pending = True

    # =========================================================================
    # Limits
    # =========================================================================

    def start_clock(self, timeout_seconds: Optional[float]) -> None:
        self.deadline = time.monotonic() + timeout_seconds if timeout_seconds is not None else None

    def remaining_seconds(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def check_limits(self) -> None:
        """
        Raise if the run was cancelled or ran out of time

        Raises:
            RunCancelledError: The cancellation token is set
            RunTimeoutError: The deadline has passed
        """
        token = self.run_config.cancellation_token
        if token is not None and token.is_cancelled:
            raise RunCancelledError(
                f"Run cancelled{': ' + token.reason if token.reason else ''}",
                agent_name=self.current_agent.name,
                turn=self.turn,
            )
        remaining = self.remaining_seconds()
        if remaining is not None and remaining <= 0:
            raise self._timeout_error()

    async def within_budget(self, awaitable: Awaitable[T]) -> T:
        """
        Await at most the remaining budget

        Raises:
            RunTimeoutError: The budget ran out while waiting
        """
        budget = self.remaining_seconds()
        started = time.monotonic()
        try:
            return await wait_with_budget(awaitable, budget)
        except asyncio.TimeoutError:
            if budget is None or time.monotonic() - started < budget - _CLOCK_TOLERANCE:
                # Raised by the awaited code itself, not by the budget
                raise
            raise self._timeout_error() from None

    def _timeout_error(self) -> RunTimeoutError:
        return RunTimeoutError(
            self.run_config.timeout_seconds or 0.0,
            agent_name=self.current_agent.name,
            turn=self.turn,
        )
