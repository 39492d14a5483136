"""
Test GuardrailEngine: sequential / parallel evaluation and reporting order
"""

import asyncio

import pytest

from xyz_agent_runtime import (
    Agent,
    GuardrailExecutionError,
    GuardrailResult,
    GuardrailTripped,
    input_guardrail,
    output_guardrail,
)
from xyz_agent_runtime.agent_runtime import GuardrailEngine
from xyz_agent_runtime.schema import GuardrailKind


@pytest.fixture
def agent():
    return Agent(name="checker")


def make_guardrail(name, trip, delay=0.0, calls=None):
    async def check(ctx_view, agent, payload):
        await asyncio.sleep(delay)
        if calls is not None:
            calls.append(name)
        return GuardrailResult(tripwire_triggered=trip, output_info={"by": name})

    return input_guardrail(name=name)(check)


class TestSequential:
    """Default mode"""

    async def test_all_pass(self, agent):
        engine = GuardrailEngine()
        records = await engine.run_input_guardrails(
            [make_guardrail("a", False), make_guardrail("b", False)], agent, "hello", None
        )
        assert [r.guardrail_name for r in records] == ["a", "b"]
        assert all(r.kind == GuardrailKind.INPUT and not r.tripped for r in records)

    async def test_stops_at_first_trip(self, agent):
        calls = []
        engine = GuardrailEngine()
        with pytest.raises(GuardrailTripped) as exc_info:
            await engine.run_input_guardrails(
                [make_guardrail("a", True, calls=calls), make_guardrail("b", True, calls=calls)],
                agent,
                "hello",
                None,
            )
        assert exc_info.value.guardrail_name == "a"
        assert exc_info.value.kind == "input"
        assert exc_info.value.output_info == {"by": "a"}
        assert calls == ["a"]

    async def test_no_guardrails(self, agent):
        assert await GuardrailEngine().run_output_guardrails([], agent, "x", None) == []


class TestParallel:
    """parallel=True"""

    async def test_reports_first_trip_in_declared_order(self, agent):
        calls = []
        guardrails = [
            make_guardrail("slow_trip", True, delay=0.05, calls=calls),
            make_guardrail("fast_trip", True, delay=0.0, calls=calls),
        ]
        with pytest.raises(GuardrailTripped) as exc_info:
            await GuardrailEngine(parallel=True).run_input_guardrails(guardrails, agent, "x", None)

        assert exc_info.value.guardrail_name == "slow_trip"
        assert sorted(calls) == ["fast_trip", "slow_trip"]

    async def test_per_call_override(self, agent):
        calls = []
        guardrails = [make_guardrail("a", True, calls=calls), make_guardrail("b", False, calls=calls)]
        with pytest.raises(GuardrailTripped):
            await GuardrailEngine().run_input_guardrails(guardrails, agent, "x", None, parallel=True)
        assert sorted(calls) == ["a", "b"]


class TestFaults:
    """Guardrails that break"""

    async def test_raising_guardrail(self, agent):
        @output_guardrail
        def broken(ctx_view, agent, output):
            raise RuntimeError("checker offline")

        with pytest.raises(GuardrailExecutionError) as exc_info:
            await GuardrailEngine().run_output_guardrails([broken], agent, "x", None)
        assert exc_info.value.guardrail_name == "broken"
        assert exc_info.value.kind == "output"
        assert isinstance(exc_info.value.cause, RuntimeError)

    async def test_wrong_return_type(self, agent):
        @input_guardrail
        def sloppy(ctx_view, agent, payload):
            return True

        with pytest.raises(GuardrailExecutionError):
            await GuardrailEngine().run_input_guardrails([sloppy], agent, "x", None)
