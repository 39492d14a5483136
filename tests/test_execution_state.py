"""
Test ExecutionState immutable updates
"""

from xyz_agent_runtime import Usage
from xyz_agent_runtime.agent_runtime import ExecutionState


class TestExecutionState:

    def test_updates_return_new_objects(self):
        state = ExecutionState()
        updated = state.record_response(Usage(requests=1, total_tokens=42))

        assert updated is not state
        assert state.response_count == 0
        assert updated.response_count == 1
        assert updated.usage.total_tokens == 42

    def test_usage_accumulates(self):
        state = ExecutionState()
        state = state.record_response(Usage(requests=1, input_tokens=10, output_tokens=2, total_tokens=12))
        state = state.record_response(Usage(requests=1, input_tokens=5, output_tokens=1, total_tokens=6))

        assert state.usage.requests == 2
        assert state.usage.input_tokens == 15
        assert state.usage.total_tokens == 18

    def test_tool_steps(self):
        state = ExecutionState()
        state = state.record_tool_call("lookup", "c1", "{}")
        state = state.record_tool_output("lookup", "c1", "oops", is_error=True)
        state = state.record_handoff("triage", "billing")

        assert state.tool_call_count == 1
        assert state.tool_error_count == 1
        assert state.handoff_count == 1
        assert [s["type"] for s in state.get_all_steps_as_list()] == ["tool_call", "tool_output", "handoff"]

    def test_output_failures_count_and_reset(self):
        state = ExecutionState().record_output_failure("Invalid JSON").record_output_failure("Missing field")
        assert state.consecutive_output_failures == 2
        assert state.all_steps[-1]["attempt"] == 2

        reset = state.reset_output_failures()
        assert reset.consecutive_output_failures == 0
        assert len(reset.all_steps) == 2
        assert ExecutionState().reset_output_failures() == ExecutionState()

    def test_finalize(self):
        state = ExecutionState().finalize("weather", {"city": "Paris"})
        assert state.all_steps[-1] == {"type": "final_output", "agent_name": "weather", "output_type": "dict"}
