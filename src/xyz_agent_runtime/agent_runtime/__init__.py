"""
Agent Runtime Package

Core implementation of the run loop, responsible for coordinating the entire execution flow.

Architecture:
- Runner: Core orchestrator, drives the turn loop
- RunConfig / CancellationToken: Per-run overrides and cooperative cancellation
- ExecutionState: Execution state management (immutable design)
- ResponseProcessor: Response classifier (pure, no side effects)
- ToolRegistry / ToolInvoker: Tool lookup and concurrent dispatch
- HandoffResolver: Agent swaps and handoff input filtering
- GuardrailEngine: Input / output guardrail evaluation
- OutputSchema / OutputCoercer: Final output validation
- HookManager: Lifecycle hooks (faults logged, never escalated)
- LoggingService: Per-run log file
"""

from .execution_state import ExecutionState
from .response_processor import ResponseProcessor, ResponseType, ProcessedResponse
from .logging_service import LoggingService
from .hook_manager import HookManager
from .tool_invoker import ToolRegistry, ToolInvoker, ToolOutcome, resolve_error_policy
from .guardrail_engine import GuardrailEngine
from .handoff_resolver import HandoffResolver, HandoffOutcome
from .output_coercer import OutputSchema, OutputCoercer
from .run_config import RunConfig, CancellationToken
from ._agent_runtime_steps import RunContext, RunContextView
from .runner import Runner

__all__ = [
    # Core orchestrator
    "Runner",
    "RunConfig",
    "CancellationToken",
    "RunContext",
    "RunContextView",
    # Execution state
    "ExecutionState",
    # Response processing
    "ResponseProcessor",
    "ResponseType",
    "ProcessedResponse",
    # Tools
    "ToolRegistry",
    "ToolInvoker",
    "ToolOutcome",
    "resolve_error_policy",
    # Handoffs
    "HandoffResolver",
    "HandoffOutcome",
    # Guardrails
    "GuardrailEngine",
    # Output
    "OutputSchema",
    "OutputCoercer",
    # Services
    "HookManager",
    "LoggingService",
]
