"""
Custom Exceptions - Runtime exception hierarchy

@file_name: exceptions.py
@author: NetMind.AI
@date: 2026-03-02
@description: Define custom exception types for xyz_agent_runtime

=============================================================================
Design Goals
=============================================================================

Every run-level failure reaches the caller as a typed exception:
- Clear hierarchy (one base class, one subclass per failure kind)
- Exception chains preserved (cause)
- Context attached (active agent, turn, offending tool/guardrail)
- Enough history attached to diagnose a failure without replaying the run

Exception hierarchy:
    AgentRuntimeError (base class)
    ├── ConfigurationError
    │   └── UnknownToolError
    ├── GuardrailTripped
    ├── GuardrailExecutionError
    ├── ToolInputError
    ├── ToolExecutionError
    ├── OutputParseError
    ├── AmbiguousHandoffError
    ├── MaxTurnsExceeded
    ├── ModelCollaboratorError
    ├── RunTimeoutError
    ├── RunCancelledError
    └── HookExecutionError (logged only)

Usage example:
    try:
        result = await tool.invoke(call, tool_ctx)
    except ValidationError as e:
        raise ToolInputError(
            tool_name=tool.name,
            message="Arguments do not match the tool schema",
            cause=e,
        ) from e

=============================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


# =============================================================================
# Base Exception
# =============================================================================

class AgentRuntimeError(Exception):
    """
    Base exception class for xyz_agent_runtime

    Attributes:
        message: Error message
        cause: Original exception (if any)
        context: Additional context information (agent_name, turn, ...)
        history: Snapshot of the run history at the time of failure (set by the Runner)
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        **context: Any,
    ):
        self.message = message
        self.cause = cause
        self.context = context
        self.history: List[Any] = []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message"""
        parts = [self.message]

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"[{context_str}]")

        if self.cause:
            parts.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        return " ".join(parts)

    @property
    def agent_name(self) -> Optional[str]:
        return self.context.get("agent_name")

    @property
    def turn(self) -> Optional[int]:
        return self.context.get("turn")

    def attach_run_state(self, agent_name: str, turn: int, history: List[Any]) -> None:
        """
        Attach run diagnostics without overwriting what the raiser already set

        Called by the Runner before the exception leaves the run.
        """
        self.context.setdefault("agent_name", agent_name)
        self.context.setdefault("turn", turn)
        if not self.history:
            self.history = list(history)
        self.args = (self._format_message(),)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging purposes"""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "cause_type": type(self.cause).__name__ if self.cause else None,
            **self.context,
        }


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(AgentRuntimeError):
    """
    Invalid agent/tool/handoff configuration

    Raised at construction time (duplicate tool names, bad output type) or
    when the model addresses something the active agent does not expose.
    """
    pass


class UnknownToolError(ConfigurationError):
    """The model requested a tool name the active agent does not have"""

    def __init__(
        self,
        tool_name: str,
        message: Optional[str] = None,
        cause: Optional[BaseException] = None,
        **context: Any,
    ):
        self.tool_name = tool_name
        super().__init__(
            message or f"Tool '{tool_name}' is not available on the active agent",
            cause,
            tool_name=tool_name,
            **context,
        )


# =============================================================================
# Guardrail Errors
# =============================================================================

class GuardrailTripped(AgentRuntimeError):
    """
    A guardrail tripwire was triggered (always fatal)

    Attributes:
        guardrail_name: Name of the guardrail that tripped
        kind: "input" or "output"
        output_info: Diagnostic payload returned by the guardrail
    """

    def __init__(
        self,
        guardrail_name: str,
        kind: str,
        output_info: Any = None,
        message: Optional[str] = None,
        **context: Any,
    ):
        self.guardrail_name = guardrail_name
        self.kind = kind
        self.output_info = output_info
        super().__init__(
            message or f"{kind.capitalize()} guardrail '{guardrail_name}' tripped",
            None,
            guardrail_name=guardrail_name,
            kind=kind,
            **context,
        )


class GuardrailExecutionError(AgentRuntimeError):
    """A guardrail function raised instead of returning a result"""

    def __init__(
        self,
        guardrail_name: str,
        kind: str,
        cause: Optional[BaseException] = None,
        **context: Any,
    ):
        self.guardrail_name = guardrail_name
        self.kind = kind
        super().__init__(
            f"{kind.capitalize()} guardrail '{guardrail_name}' failed to execute",
            cause,
            guardrail_name=guardrail_name,
            kind=kind,
            **context,
        )


# =============================================================================
# Tool Errors
# =============================================================================

class ToolError(AgentRuntimeError):
    """Base class for errors raised while running a single tool call"""

    def __init__(
        self,
        tool_name: str,
        message: str,
        cause: Optional[BaseException] = None,
        **context: Any,
    ):
        self.tool_name = tool_name
        super().__init__(message, cause, tool_name=tool_name, **context)


class ToolInputError(ToolError):
    """
    Tool arguments failed validation against the tool's input schema

    Converted to model-visible text by default.
    """
    pass


class ToolExecutionError(ToolError):
    """
    Runtime fault inside a tool or a nested agent run

    Locally recovered (converted to text) by default, fatal if recovery is disabled.
    """
    pass


# =============================================================================
# Run-Level Errors
# =============================================================================

class OutputParseError(AgentRuntimeError):
    """
    Final output failed validation against the agent's output schema

    Attributes:
        diagnostic: Human/model readable validation report
        raw_output: The candidate that failed
    """

    def __init__(
        self,
        message: str,
        diagnostic: str = "",
        raw_output: Any = None,
        cause: Optional[BaseException] = None,
        **context: Any,
    ):
        self.diagnostic = diagnostic
        self.raw_output = raw_output
        super().__init__(message, cause, **context)


class AmbiguousHandoffError(AgentRuntimeError):
    """The model requested more than one handoff in a single turn"""

    def __init__(self, requested: List[str], **context: Any):
        self.requested = list(requested)
        super().__init__(
            f"Model requested {len(requested)} handoffs in one turn",
            None,
            requested=self.requested,
            **context,
        )


class MaxTurnsExceeded(AgentRuntimeError):
    """The run needed more model round-trips than max_turns allows"""

    def __init__(self, max_turns: int, **context: Any):
        self.max_turns = max_turns
        super().__init__(f"Max turns ({max_turns}) exceeded", None, max_turns=max_turns, **context)


class ModelCollaboratorError(AgentRuntimeError):
    """The Model Client failed or returned a response that breaks the contract"""
    pass


class RunTimeoutError(AgentRuntimeError):
    """The run exceeded its wall-clock budget"""

    def __init__(self, timeout_seconds: float, **context: Any):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Run exceeded its {timeout_seconds:.2f}s time budget",
            None,
            timeout_seconds=timeout_seconds,
            **context,
        )


class RunCancelledError(AgentRuntimeError):
    """The run's cancellation token was triggered"""
    pass


# =============================================================================
# Hook Errors (never escalated)
# =============================================================================

class HookExecutionError(AgentRuntimeError):
    """
    A lifecycle hook or on_handoff callback raised

    Only used for structured logging; the run continues.
    """

    def __init__(
        self,
        hook_name: str,
        message: str,
        cause: Optional[BaseException] = None,
        **context: Any,
    ):
        self.hook_name = hook_name
        super().__init__(message, cause, hook_name=hook_name, **context)
