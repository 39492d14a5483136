"""
Utils Package

@file_name: __init__.py
@description: Utility modules for xyz_agent_runtime

Exports:
- Exception hierarchy (AgentRuntimeError and subclasses)
- with_retry: exponential-backoff retry for Model Client adapters
- Text helpers: truncate_text, strip_code_fences, to_text, normalize_tool_name
- Async helpers: maybe_await, call_maybe_async, wait_with_budget
"""

# Retry utilities
from xyz_agent_runtime.utils.retry import (
    with_retry,
    compute_backoff,
    DEFAULT_RETRYABLE_EXCEPTIONS,
)

# Text utilities
from xyz_agent_runtime.utils.text import (
    truncate_text,
    strip_code_fences,
    to_text,
    normalize_tool_name,
)

# Async utilities
from xyz_agent_runtime.utils.async_helpers import (
    MaybeAwaitable,
    maybe_await,
    call_maybe_async,
    wait_with_budget,
)

# Custom exceptions
from xyz_agent_runtime.utils.exceptions import (
    # Base
    AgentRuntimeError,
    # Configuration
    ConfigurationError,
    UnknownToolError,
    # Guardrails
    GuardrailTripped,
    GuardrailExecutionError,
    # Tools
    ToolError,
    ToolInputError,
    ToolExecutionError,
    # Run level
    OutputParseError,
    AmbiguousHandoffError,
    MaxTurnsExceeded,
    ModelCollaboratorError,
    RunTimeoutError,
    RunCancelledError,
    # Hooks
    HookExecutionError,
)

__all__ = [
    # Retry
    "with_retry",
    "compute_backoff",
    "DEFAULT_RETRYABLE_EXCEPTIONS",
    # Text utilities
    "truncate_text",
    "strip_code_fences",
    "to_text",
    "normalize_tool_name",
    # Async utilities
    "MaybeAwaitable",
    "maybe_await",
    "call_maybe_async",
    "wait_with_budget",
    # Exceptions
    "AgentRuntimeError",
    "ConfigurationError",
    "UnknownToolError",
    "GuardrailTripped",
    "GuardrailExecutionError",
    "ToolError",
    "ToolInputError",
    "ToolExecutionError",
    "OutputParseError",
    "AmbiguousHandoffError",
    "MaxTurnsExceeded",
    "ModelCollaboratorError",
    "RunTimeoutError",
    "RunCancelledError",
    "HookExecutionError",
]
