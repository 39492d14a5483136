"""
Test ToolRegistry and ToolInvoker: ordering, concurrency bound, error policy
"""

import asyncio
import threading

import pytest
from pydantic import BaseModel

from conftest import call

from xyz_agent_runtime import (
    Agent,
    ConfigurationError,
    ToolErrorPolicy,
    ToolExecutionError,
    ToolInputError,
    UnknownToolError,
    function_tool,
)
from xyz_agent_runtime.agent_runtime import HookManager, ToolInvoker, ToolRegistry, resolve_error_policy


class SleepArgs(BaseModel):
    label: str
    delay: float = 0.0


@function_tool(SleepArgs)
async def sleepy(label: str, delay: float) -> str:
    await asyncio.sleep(delay)
    return label


@function_tool()
def boom() -> str:
    raise ValueError("kaboom")


@pytest.fixture
def invoker():
    return ToolInvoker(HookManager())


class TestToolRegistry:
    """Lookup and validation"""

    def test_duplicate_names_rejected(self):
        with pytest.raises(ConfigurationError):
            ToolRegistry([sleepy, sleepy], agent_name="a")

    def test_unknown_name(self):
        registry = ToolRegistry([sleepy], agent_name="a")
        with pytest.raises(UnknownToolError) as exc_info:
            registry.get("missing")
        assert exc_info.value.tool_name == "missing"

    def test_schemas_in_declared_order(self):
        registry = ToolRegistry.for_agent(Agent(name="a", tools=[sleepy, boom]))
        assert [s.name for s in registry.schemas()] == ["sleepy", "boom"]


class TestDispatch:
    """Concurrent dispatch and request-order merge"""

    async def test_outputs_in_request_order(self, invoker, make_ctx):
        agent = Agent(name="a", tools=[sleepy])
        ctx = make_ctx(agent)
        requests = [
            (call("sleepy", {"label": "slow", "delay": 0.05}), sleepy),
            (call("sleepy", {"label": "fast", "delay": 0.0}), sleepy),
        ]

        outcomes = await invoker.invoke_all(ctx, requests)
        assert [o.output for o in outcomes] == ["slow", "fast"]
        assert [o.request.call_id for o in outcomes] == [r.call_id for r, _ in requests]

    async def test_concurrency_is_bounded(self, invoker, make_ctx):
        active = 0
        peak = 0

        class Empty(BaseModel):
            pass

        @function_tool(Empty)
        async def tracked() -> str:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.02)
            active -= 1
            return "ok"

        agent = Agent(name="a", tools=[tracked])
        ctx = make_ctx(agent, max_parallel_tool_calls=2)
        outcomes = await invoker.invoke_all(ctx, [(call("tracked"), tracked) for _ in range(5)])

        assert len(outcomes) == 5
        assert peak == 2

    async def test_sync_tool_runs_in_worker_thread(self, invoker, make_ctx):
        @function_tool()
        def which_thread() -> str:
            return threading.current_thread().name

        ctx = make_ctx(Agent(name="a", tools=[which_thread]))
        (outcome,) = await invoker.invoke_all(ctx, [(call("which_thread"), which_thread)])
        assert outcome.output != threading.main_thread().name


class TestErrorPolicy:
    """Conversion of tool errors to model-visible text"""

    async def test_execution_error_converted_by_default(self, invoker, make_ctx):
        ctx = make_ctx(Agent(name="a", tools=[boom]))
        (outcome,) = await invoker.invoke_all(ctx, [(call("boom"), boom)])

        assert outcome.is_error
        assert isinstance(outcome.error, ToolExecutionError)
        assert "Error running tool 'boom'" in outcome.output
        assert "kaboom" in outcome.output

    async def test_invalid_arguments_converted(self, invoker, make_ctx):
        ctx = make_ctx(Agent(name="a", tools=[sleepy]))
        (outcome,) = await invoker.invoke_all(ctx, [(call("sleepy", "{not json"), sleepy)])
        assert isinstance(outcome.error, ToolInputError)

    async def test_fail_fast_raises(self, invoker, make_ctx):
        ctx = make_ctx(Agent(name="a", tools=[boom]), tool_error_policy=ToolErrorPolicy.fail_fast())
        with pytest.raises(ToolExecutionError) as exc_info:
            await invoker.invoke_all(ctx, [(call("boom", call_id="call_1"), boom)])
        assert exc_info.value.context["call_id"] == "call_1"

    async def test_first_failure_in_request_order_is_raised(self, invoker, make_ctx):
        class Args(BaseModel):
            delay: float

        @function_tool(Args, name="first")
        async def first(delay: float) -> str:
            await asyncio.sleep(delay)
            raise RuntimeError("first failed")

        @function_tool(Args, name="second")
        async def second(delay: float) -> str:
            await asyncio.sleep(delay)
            raise RuntimeError("second failed")

        ctx = make_ctx(Agent(name="a", tools=[first, second]), tool_error_policy=ToolErrorPolicy.fail_fast())
        with pytest.raises(ToolExecutionError) as exc_info:
            await invoker.invoke_all(ctx, [
                (call("first", {"delay": 0.05}), first),
                (call("second", {"delay": 0.0}), second),
            ])
        assert exc_info.value.tool_name == "first"

    def test_policy_resolution_order(self):
        tool_policy = ToolErrorPolicy(message_template="tool: {error}")
        agent_policy = ToolErrorPolicy(message_template="agent: {error}")
        run_policy = ToolErrorPolicy(message_template="run: {error}")

        @function_tool(error_policy=tool_policy)
        def with_policy() -> str:
            return ""

        agent = Agent(name="a", tools=[with_policy, boom], tool_error_policy=agent_policy)
        assert resolve_error_policy(with_policy, agent, run_policy) is tool_policy
        assert resolve_error_policy(boom, agent, run_policy) is agent_policy
        assert resolve_error_policy(boom, Agent(name="b"), run_policy) is run_policy

    async def test_input_errors_only_policy(self, invoker, make_ctx):
        policy = ToolErrorPolicy(convert_input_errors=True, convert_execution_errors=False)
        ctx = make_ctx(Agent(name="a", tools=[boom, sleepy]), tool_error_policy=policy)

        (outcome,) = await invoker.invoke_all(ctx, [(call("sleepy", "{}"), sleepy)])
        assert outcome.is_error

        with pytest.raises(ToolExecutionError):
            await invoker.invoke_all(ctx, [(call("boom"), boom)])
