"""
@file_name: execution_state.py
@author: NetMind.AI
@date: 2026-03-04
@description: Run execution state management

Tracks counters, token usage and a compact step log during the turn loop.

Design principles:
- Immutable design: each state update returns a new object for easy tracking and debugging
- Single responsibility: only responsible for state storage and updates, no business logic
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List

from xyz_agent_runtime.schema import Usage


@dataclass(frozen=True)
class ExecutionState:
    """
    Run execution state - immutable design

    Attributes:
        response_count: Model responses received
        tool_call_count: Tool calls dispatched (function, agent and hosted)
        tool_error_count: Tool calls whose error was converted to text
        handoff_count: Handoffs performed
        consecutive_output_failures: Final outputs that failed validation in a row
        usage: Accumulated token usage
        all_steps: Records of all execution steps

    Usage:
        >>> state = ExecutionState()
        >>> state = state.record_response(Usage(requests=1, total_tokens=42))
        >>> state.usage.total_tokens
        42
    """
    response_count: int = 0
    tool_call_count: int = 0
    tool_error_count: int = 0
    handoff_count: int = 0
    consecutive_output_failures: int = 0
    usage: Usage = field(default_factory=Usage)
    all_steps: tuple = field(default_factory=tuple)  # Use tuple for immutability

    def record_response(self, usage: Usage) -> "ExecutionState":
        """Count a model response and add its usage"""
        return replace(
            self,
            response_count=self.response_count + 1,
            usage=self.usage.add(usage),
        )

    def record_tool_call(self, tool_name: str, tool_call_id: str, arguments: str) -> "ExecutionState":
        new_step = {
            "type": "tool_call",
            "tool_name": tool_name,
            "tool_call_id": tool_call_id,
            "arguments": arguments,
        }
        return replace(
            self,
            tool_call_count=self.tool_call_count + 1,
            all_steps=self.all_steps + (new_step,),
        )

    def record_tool_output(self, tool_name: str, tool_call_id: str, output: str, is_error: bool = False) -> "ExecutionState":
        new_step = {
            "type": "tool_output",
            "tool_name": tool_name,
            "tool_call_id": tool_call_id,
            "output": output,
            "is_error": is_error,
        }
        return replace(
            self,
            tool_error_count=self.tool_error_count + (1 if is_error else 0),
            all_steps=self.all_steps + (new_step,),
        )

    def record_handoff(self, source_agent: str, target_agent: str) -> "ExecutionState":
        new_step = {
            "type": "handoff",
            "source_agent": source_agent,
            "target_agent": target_agent,
        }
        return replace(
            self,
            handoff_count=self.handoff_count + 1,
            all_steps=self.all_steps + (new_step,),
        )

    def record_output_failure(self, diagnostic: str) -> "ExecutionState":
        """Count a final output that failed validation"""
        new_step = {
            "type": "output_failure",
            "attempt": self.consecutive_output_failures + 1,
            "diagnostic": diagnostic,
        }
        return replace(
            self,
            consecutive_output_failures=self.consecutive_output_failures + 1,
            all_steps=self.all_steps + (new_step,),
        )

    def reset_output_failures(self) -> "ExecutionState":
        """A non-final turn breaks a run of failing final outputs"""
        if self.consecutive_output_failures == 0:
            return self
        return replace(self, consecutive_output_failures=0)

    def finalize(self, agent_name: str, output: Any) -> "ExecutionState":
        """Record the final output in all_steps"""
        final_step = {
            "type": "final_output",
            "agent_name": agent_name,
            "output_type": type(output).__name__,
        }
        return replace(self, all_steps=self.all_steps + (final_step,))

    def get_all_steps_as_list(self) -> List[Dict[str, Any]]:
        """Get all steps as a list (for serialization)"""
        return list(self.all_steps)
