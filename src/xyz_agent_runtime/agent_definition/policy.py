"""
@file_name: policy.py
@author: NetMind.AI
@date: 2026-03-03
@description: Explicit policy values for error conversion, output retries and tool-use behavior

Policies are plain frozen dataclasses so the same instance can be shared by
many agents and many concurrent runs.

Resolution order for ToolErrorPolicy:
    tool.error_policy -> agent.tool_error_policy -> run_config.tool_error_policy -> DEFAULT_TOOL_ERROR_POLICY
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional, Tuple, Union

from xyz_agent_runtime.config import TOOL_ERROR_MESSAGE_TEMPLATE, OUTPUT_RETRY_MESSAGE_TEMPLATE
from xyz_agent_runtime.utils.exceptions import ToolError, ToolInputError, ToolExecutionError


# ============================================================================
# Tool Error Policy
# ============================================================================

@dataclass(frozen=True)
class ToolErrorPolicy:
    """
    Decides whether a tool error is converted to model-visible text or fails the run

    Attributes:
        convert_input_errors: Convert ToolInputError (bad arguments) to text
        convert_execution_errors: Convert ToolExecutionError (tool fault) to text
        message_template: Template with {tool_name} and {error}
        formatter: Custom formatter, takes precedence over message_template
    """
    convert_input_errors: bool = True
    convert_execution_errors: bool = True
    message_template: str = TOOL_ERROR_MESSAGE_TEMPLATE
    formatter: Optional[Callable[[ToolError], str]] = None

    def should_convert(self, error: ToolError) -> bool:
        if isinstance(error, ToolInputError):
            return self.convert_input_errors
        if isinstance(error, ToolExecutionError):
            return self.convert_execution_errors
        return False

    def format(self, error: ToolError) -> str:
        """Render the error as the tool output the model sees"""
        if self.formatter is not None:
            return self.formatter(error)
        return self.message_template.format(tool_name=error.tool_name, error=error.message)

    @classmethod
    def fail_fast(cls) -> "ToolErrorPolicy":
        """Policy that never converts: every tool error fails the run"""
        return cls(convert_input_errors=False, convert_execution_errors=False)


DEFAULT_TOOL_ERROR_POLICY = ToolErrorPolicy()


# ============================================================================
# Output Retry Policy
# ============================================================================

@dataclass(frozen=True)
class OutputRetryPolicy:
    """
    Bounded corrective retries for final outputs that fail validation

    max_retries counts consecutive failing final responses; 0 means the first
    failure is fatal.
    """
    max_retries: int = 1
    message_template: str = OUTPUT_RETRY_MESSAGE_TEMPLATE

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")

    def corrective_message(self, output_name: str, diagnostic: str) -> str:
        return self.message_template.format(output_name=output_name, diagnostic=diagnostic)


# ============================================================================
# Tool Use Behavior
# ============================================================================

@dataclass(frozen=True)
class StopAtTools:
    """Treat the output of the first listed tool called in a turn as the final output"""
    stop_at_tool_names: Tuple[str, ...]

    def __init__(self, *stop_at_tool_names: str):
        object.__setattr__(self, "stop_at_tool_names", tuple(stop_at_tool_names))


ToolUseBehavior = Union[Literal["run_llm_again", "stop_on_first_tool"], StopAtTools]

TOOL_USE_BEHAVIORS = ("run_llm_again", "stop_on_first_tool")
