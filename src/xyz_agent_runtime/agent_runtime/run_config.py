"""
@file_name: run_config.py
@author: NetMind.AI
@date: 2026-03-04
@description: Per-run configuration

RunConfig carries every per-run override. Fields left as None fall back to
the agent's own value and then to the global settings (settings.py).

Usage:
    config = RunConfig(
        model_client=OpenAIChatModelClient(),
        max_parallel_tool_calls=4,
        timeout_seconds=60,
        output_retry_policy=OutputRetryPolicy(max_retries=2),
    )
    result = await Runner.run(agent, "Hello", run_config=config)
"""

from __future__ import annotations

import asyncio
import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from xyz_agent_runtime.agent_definition import (
    InputGuardrail,
    OutputGuardrail,
    OutputRetryPolicy,
    ToolErrorPolicy,
)
from xyz_agent_runtime.agent_definition.handoff import HandoffInputFilter
from xyz_agent_runtime.schema import ModelSettings
from xyz_agent_runtime.settings import settings

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_framework.model_client import ModelClient


# ============================================================================
# Cancellation
# ============================================================================

class CancellationToken:
    """
    Cooperative cancellation flag

    The Runner checks it at every turn boundary and before every tool batch.
    A single token may be shared by a run and its nested agent-as-tool runs.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


# ============================================================================
# Run Config
# ============================================================================

@dataclass
class RunConfig:
    """
    Per-run overrides

    Attributes:
        model_client: Model Client to use (default: OpenAIChatModelClient built from settings)
        model: Model name overriding every agent's model
        model_settings: Settings overriding every agent's model_settings (non-None fields win)
        input_guardrails / output_guardrails: Run-wide guardrails, evaluated after the agent's own
        parallel_guardrails: Evaluate guardrails concurrently (reported trip is still the first in declared order)
        handoff_input_filter: Filter applied to handoffs that have none of their own
        tool_error_policy: Run-level ToolErrorPolicy
        output_retry_policy: Corrective retry policy (default: settings.output_parse_retries)
        max_parallel_tool_calls: Concurrency bound for one turn's tool calls
        timeout_seconds: Wall-clock budget for the whole run
        cancellation_token: Cooperative cancellation
        workflow_name: Label used in logs and log file names
    """
    model_client: Optional["ModelClient"] = None
    model: Optional[str] = None
    model_settings: Optional[ModelSettings] = None
    input_guardrails: List[InputGuardrail] = field(default_factory=list)
    output_guardrails: List[OutputGuardrail] = field(default_factory=list)
    parallel_guardrails: bool = False
    handoff_input_filter: Optional[HandoffInputFilter] = None
    tool_error_policy: Optional[ToolErrorPolicy] = None
    output_retry_policy: Optional[OutputRetryPolicy] = None
    max_parallel_tool_calls: int = field(default_factory=lambda: settings.max_parallel_tool_calls)
    timeout_seconds: Optional[float] = field(default_factory=lambda: settings.run_timeout_seconds)
    cancellation_token: Optional[CancellationToken] = None
    workflow_name: str = "agent_run"

    def __post_init__(self):
        if self.max_parallel_tool_calls < 1:
            raise ValueError("max_parallel_tool_calls must be >= 1")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if self.output_retry_policy is None:
            self.output_retry_policy = OutputRetryPolicy(max_retries=settings.output_parse_retries)

    def for_nested_run(self, remaining_seconds: Optional[float]) -> "RunConfig":
        """
        Config for an agent-as-tool nested run

        Keeps the Model Client, policies, parallelism and cancellation token;
        drops run-wide guardrails and the handoff filter, which belong to the
        outer run; bounds the nested run by the caller's remaining budget.
        """
        timeout = remaining_seconds
        if timeout is not None and timeout <= 0:
            # Spent budget: the nested run must still time out, and RunConfig rejects 0
            timeout = 1e-6
        return dataclasses.replace(
            self,
            input_guardrails=[],
            output_guardrails=[],
            handoff_input_filter=None,
            timeout_seconds=timeout,
        )
