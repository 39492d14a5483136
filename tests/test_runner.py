"""
Test the Runner turn loop end to end against the scripted Model Client
"""

import asyncio

import pytest
from pydantic import BaseModel

from conftest import call, calls, text

from xyz_agent_runtime import (
    Agent,
    AgentHooks,
    AgentUpdatedMessage,
    AmbiguousHandoffError,
    CancellationToken,
    ConfigurationError,
    GuardrailResult,
    GuardrailTripped,
    HandoffCallItem,
    HandoffOutputItem,
    ItemType,
    MaxTurnsExceeded,
    ModelCollaboratorError,
    OutputParseError,
    OutputRetryItem,
    OutputRetryPolicy,
    ProgressMessage,
    RunCancelledError,
    RunHooks,
    RunItemMessage,
    RunResult,
    RunTimeoutError,
    Runner,
    StopAtTools,
    ToolErrorPolicy,
    ToolExecutionError,
    ToolOutputItem,
    UnknownToolError,
    function_tool,
    handoff,
    input_guardrail,
    output_guardrail,
    remove_all_tools,
)


class Weather(BaseModel):
    city: str
    temperature: float


class Escalation(BaseModel):
    reason: str


@function_tool()
def ping() -> str:
    return "pong"


@function_tool()
def refund_status() -> str:
    """Look up the refund status"""
    return "refund sent"


@function_tool()
def boom() -> str:
    raise ValueError("kaboom")


@input_guardrail
def homework_guardrail(ctx_view, agent, run_input):
    is_homework = "homework" in str(run_input).lower()
    return GuardrailResult(tripwire_triggered=is_homework, output_info={"reason": "homework request"})


@output_guardrail
def no_secrets(ctx_view, agent, output):
    return GuardrailResult(tripwire_triggered="secret" in str(output))


@output_guardrail
def always_trip(ctx_view, agent, output):
    return GuardrailResult(tripwire_triggered=True)


def item_types(items):
    return [i.item_type for i in items]


class TestInputGuardrails:

    async def test_homework_is_blocked_before_any_model_call(self, scripted):
        client, config = scripted(text("never sent"))
        agent = Agent(name="tutor", input_guardrails=[homework_guardrail])

        with pytest.raises(GuardrailTripped) as exc_info:
            await Runner.run(agent, "Can you do my math homework?", run_config=config)

        assert client.requests == []
        assert exc_info.value.guardrail_name == "homework_guardrail"
        assert exc_info.value.output_info == {"reason": "homework request"}

    async def test_run_wide_guardrail(self, scripted):
        client, config = scripted(text("never sent"), input_guardrails=[homework_guardrail])
        with pytest.raises(GuardrailTripped):
            await Runner.run(Agent(name="tutor"), "homework again", run_config=config)
        assert client.requests == []

    async def test_passing_guardrail_is_reported(self, scripted):
        _, config = scripted(text("Paris"))
        agent = Agent(name="tutor", input_guardrails=[homework_guardrail])
        result = await Runner.run(agent, "Capital of France?", run_config=config)

        assert result.final_output == "Paris"
        assert [r.guardrail_name for r in result.input_guardrail_results] == ["homework_guardrail"]
        assert not result.input_guardrail_results[0].tripped
        assert result.guardrail_records == []


class TestAgentAsTool:
    """Delegation through a nested run"""

    def build(self):
        spanish = Agent(name="spanish_agent", instructions="Translate the user's message to Spanish")
        french = Agent(name="french_agent", instructions="Translate the user's message to French")
        orchestrator = Agent(
            name="orchestrator",
            instructions="Use your tools to translate",
            tools=[
                spanish.as_tool("translate_to_spanish", "Translate the text to Spanish"),
                french.as_tool("translate_to_french", "Translate the text to French"),
            ],
        )
        return spanish, orchestrator

    def script(self):
        return (
            calls(call("translate_to_spanish", {"input": "Good morning"})),
            text("Buenos días"),
            text("Translation: Buenos días"),
        )

    async def test_translate_to_spanish(self, scripted):
        _, orchestrator = self.build()
        client, config = scripted(*self.script())

        result = await Runner.run(orchestrator, "Say good morning in Spanish", run_config=config)

        assert result.final_output == "Translation: Buenos días"
        assert result.turns == 2
        assert result.last_agent is orchestrator
        assert [r.agent_name for r in client.requests] == ["orchestrator", "spanish_agent", "orchestrator"]
        assert [t.name for t in client.requests[0].tools] == ["translate_to_spanish", "translate_to_french"]
        tool_calls = [i for i in result.history if i.item_type == ItemType.TOOL_CALL]
        assert [c.tool_name for c in tool_calls] == ["translate_to_spanish"]
        assert [o.output for o in result.history if isinstance(o, ToolOutputItem)] == ["Buenos días"]
        assert not any(isinstance(i, (HandoffCallItem, HandoffOutputItem)) for i in result.history)

    async def test_nested_run_starts_from_tool_input(self, scripted):
        _, orchestrator = self.build()
        client, config = scripted(*self.script())

        await Runner.run(orchestrator, "Say good morning in Spanish", run_config=config)

        nested_request = client.requests[1]
        assert nested_request.instructions == "Translate the user's message to Spanish"
        assert [i.item_type for i in nested_request.history] == [ItemType.USER_INPUT]
        assert nested_request.history[0].content == "Good morning"

    async def test_repeated_and_concurrent_delegation_is_stable(self, scripted):
        _, orchestrator = self.build()

        _, first_config = scripted(*self.script())
        first = await Runner.run(orchestrator, "Say good morning in Spanish", run_config=first_config)

        configs = [scripted(*self.script())[1] for _ in range(2)]
        concurrent = await asyncio.gather(*(
            Runner.run(orchestrator, "Say good morning in Spanish", run_config=c) for c in configs
        ))

        for result in concurrent:
            assert result.final_output == first.final_output
            assert item_types(result.history) == item_types(first.history)
        assert len(orchestrator.tools) == 2

    async def test_delegation_matches_direct_run(self, scripted):
        spanish, orchestrator = self.build()
        dictionary = {"Hello": "Hola"}

        def translate(request):
            assert request.agent_name == "spanish_agent"
            return text(dictionary[request.history[-1].content])

        def relay_tool_output(request):
            return text(request.history[-1].output)

        _, direct_config = scripted(translate)
        direct = await Runner.run(spanish, "Hello", run_config=direct_config)

        _, delegated_config = scripted(
            calls(call("translate_to_spanish", {"input": "Hello"})),
            translate,
            relay_tool_output,
        )
        delegated = await Runner.run(orchestrator, "Translate Hello to Spanish", run_config=delegated_config)

        (tool_output,) = [i for i in delegated.history if isinstance(i, ToolOutputItem)]
        assert direct.final_output == "Hola"
        assert tool_output.output == direct.final_output
        assert delegated.final_output == direct.final_output


class TestHandoffs:
    """Active agent swaps"""

    async def test_handoff_swaps_tools_and_output_guardrails(self, scripted):
        billing = Agent(name="billing", tools=[refund_status], output_guardrails=[no_secrets])
        triage = Agent(name="triage", handoffs=[billing], output_guardrails=[always_trip])
        client, config = scripted(
            calls(call("transfer_to_billing")),
            calls(call("refund_status")),
            text("Your refund was sent"),
        )

        result = await Runner.run(triage, "Where is my refund?", run_config=config)

        assert result.last_agent is billing
        assert result.final_output == "Your refund was sent"
        assert result.turns == 3
        first, second, _ = client.requests
        assert [t.name for t in first.tools] == ["transfer_to_billing"]
        assert second.agent_name == "billing"
        assert [t.name for t in second.tools] == ["refund_status"]
        assert [r.guardrail_name for r in result.output_guardrail_results] == ["no_secrets"]
        assert result.output_guardrail_results[0].agent_name == "billing"

    async def test_target_output_guardrail_trips(self, scripted):
        billing = Agent(name="billing", output_guardrails=[no_secrets])
        triage = Agent(name="triage", handoffs=[billing])
        _, config = scripted(calls(call("transfer_to_billing")), text("the secret code is 42"))

        with pytest.raises(GuardrailTripped) as exc_info:
            await Runner.run(triage, "hi", run_config=config)
        assert exc_info.value.guardrail_name == "no_secrets"
        assert exc_info.value.agent_name == "billing"

    async def test_handoff_items_are_visible_to_target(self, scripted):
        billing = Agent(name="billing")
        triage = Agent(name="triage", handoffs=[billing])
        client, config = scripted(calls(call("transfer_to_billing")), text("done"))

        await Runner.run(triage, "hi", run_config=config)

        assert item_types(client.requests[1].history) == [
            ItemType.USER_INPUT,
            ItemType.HANDOFF_CALL,
            ItemType.HANDOFF_OUTPUT,
        ]

    async def test_input_filter_shapes_target_history(self, scripted):
        billing = Agent(name="billing")
        triage = Agent(
            name="triage",
            tools=[refund_status],
            handoffs=[handoff(billing, input_filter=remove_all_tools)],
        )
        client, config = scripted(
            calls(call("refund_status")),
            calls(call("transfer_to_billing")),
            text("done"),
        )

        result = await Runner.run(triage, "hi", run_config=config)

        assert item_types(client.requests[2].history) == [ItemType.USER_INPUT]
        assert item_types(result.history) == [ItemType.USER_INPUT, ItemType.ASSISTANT_MESSAGE]

    async def test_tools_run_before_handoff_in_same_turn(self, scripted):
        billing = Agent(name="billing")
        triage = Agent(name="triage", tools=[refund_status], handoffs=[billing])
        _, config = scripted(
            calls(call("refund_status"), call("transfer_to_billing")),
            text("done"),
        )

        result = await Runner.run(triage, "hi", run_config=config)

        assert result.last_agent is billing
        assert item_types(result.history)[1:5] == [
            ItemType.TOOL_CALL,
            ItemType.TOOL_OUTPUT,
            ItemType.HANDOFF_CALL,
            ItemType.HANDOFF_OUTPUT,
        ]

    async def test_two_handoffs_in_one_turn_is_ambiguous(self, scripted):
        billing = Agent(name="billing")
        support = Agent(name="support")
        triage = Agent(name="triage", handoffs=[billing, support])
        _, config = scripted(calls(call("transfer_to_billing"), call("transfer_to_support")))

        with pytest.raises(AmbiguousHandoffError) as exc_info:
            await Runner.run(triage, "hi", run_config=config)

        assert exc_info.value.requested == ["transfer_to_billing", "transfer_to_support"]
        assert exc_info.value.history

    async def test_on_handoff_receives_payload(self, scripted):
        received = []

        def record(ctx_view, payload):
            received.append(payload)

        billing = Agent(name="billing")
        triage = Agent(name="triage", handoffs=[handoff(billing, on_handoff=record, input_type=Escalation)])
        _, config = scripted(calls(call("transfer_to_billing", {"reason": "refund"})), text("done"))

        result = await Runner.run(triage, "hi", run_config=config)

        assert result.last_agent is billing
        assert received == [Escalation(reason="refund")]

    async def test_failing_on_handoff_is_recorded(self, scripted):
        def broken(ctx_view):
            raise RuntimeError("crm offline")

        billing = Agent(name="billing")
        triage = Agent(name="triage", handoffs=[handoff(billing, on_handoff=broken)])
        _, config = scripted(calls(call("transfer_to_billing")), text("done"))

        result = await Runner.run(triage, "hi", run_config=config)

        assert result.last_agent is billing
        (output_item,) = [i for i in result.history if isinstance(i, HandoffOutputItem)]
        assert "crm offline" in output_item.callback_error

    async def test_invalid_payload_does_not_swap(self, scripted):
        billing = Agent(name="billing")
        triage = Agent(name="triage", handoffs=[handoff(billing, input_type=Escalation)])
        client, config = scripted(calls(call("transfer_to_billing", {})), text("let me help instead"))

        result = await Runner.run(triage, "hi", run_config=config)

        assert result.last_agent is triage
        assert client.requests[1].agent_name == "triage"
        (error_output,) = [i for i in result.history if isinstance(i, ToolOutputItem)]
        assert error_output.is_error
        assert error_output.tool_name == "transfer_to_billing"


class TestStructuredOutput:
    """Typed final output and corrective retries"""

    async def test_retry_then_success(self, scripted):
        agent = Agent(name="weather", output_type=Weather)
        client, config = scripted(
            text("It is sunny"),
            text('{"city": "Paris", "temperature": 20}'),
            output_retry_policy=OutputRetryPolicy(max_retries=1),
        )

        result = await Runner.run(agent, "Weather in Paris?", run_config=config)

        assert result.final_output == Weather(city="Paris", temperature=20)
        assert result.final_output_as(Weather) is result.final_output
        retry_items = [i for i in result.history if isinstance(i, OutputRetryItem)]
        assert len(retry_items) == 1
        assert "Weather" in retry_items[0].content
        assert client.requests[1].history[-1].item_type == ItemType.OUTPUT_RETRY
        assert set(client.requests[0].output_schema["properties"]) == {"city", "temperature"}

    async def test_retries_exhausted(self, scripted):
        agent = Agent(name="weather", output_type=Weather)
        client, config = scripted(
            text("It is sunny"),
            text("Still sunny"),
            output_retry_policy=OutputRetryPolicy(max_retries=1),
        )

        with pytest.raises(OutputParseError) as exc_info:
            await Runner.run(agent, "Weather in Paris?", run_config=config)

        assert len(client.requests) == 2
        assert exc_info.value.raw_output == "Still sunny"

    async def test_no_retries(self, scripted):
        agent = Agent(name="weather", output_type=Weather)
        client, config = scripted(text("sunny"), output_retry_policy=OutputRetryPolicy(max_retries=0))

        with pytest.raises(OutputParseError):
            await Runner.run(agent, "Weather?", run_config=config)
        assert len(client.requests) == 1

    async def test_plain_text_request_has_no_schema(self, scripted):
        client, config = scripted(text("hello"))
        await Runner.run(Agent(name="a"), "hi", run_config=config)
        assert client.requests[0].output_schema is None


class TestLimits:
    """Turn limit, time budget, cancellation"""

    async def test_max_turns(self, scripted):
        agent = Agent(name="looper", tools=[ping])
        client, config = scripted(*[calls(call("ping")) for _ in range(5)])

        with pytest.raises(MaxTurnsExceeded) as exc_info:
            await Runner.run(agent, "go", max_turns=3, run_config=config)

        assert len(client.requests) == 3
        assert exc_info.value.max_turns == 3
        assert exc_info.value.turn == 3

    async def test_invalid_max_turns(self, scripted):
        _, config = scripted()
        with pytest.raises(ConfigurationError):
            await Runner.run(Agent(name="a"), "hi", max_turns=0, run_config=config)

    async def test_starting_agent_must_be_agent(self, scripted):
        _, config = scripted()
        with pytest.raises(ConfigurationError):
            await Runner.run("not an agent", "hi", run_config=config)

    async def test_timeout(self, scripted):
        async def slow(request):
            await asyncio.sleep(1)
            return text("too late")

        _, config = scripted(slow, timeout_seconds=0.05)

        with pytest.raises(RunTimeoutError) as exc_info:
            await Runner.run(Agent(name="a"), "hi", run_config=config)
        assert exc_info.value.timeout_seconds == 0.05

    async def test_cancelled_before_start(self, scripted):
        token = CancellationToken()
        token.cancel("user left")
        client, config = scripted(text("never sent"), cancellation_token=token)

        with pytest.raises(RunCancelledError):
            await Runner.run(Agent(name="a"), "hi", run_config=config)
        assert client.requests == []

    async def test_cancelled_by_tool(self, scripted):
        token = CancellationToken()

        @function_tool()
        async def stop() -> str:
            token.cancel("user pressed stop")
            return "stopping"

        client, config = scripted(calls(call("stop")), text("never sent"), cancellation_token=token)

        with pytest.raises(RunCancelledError):
            await Runner.run(Agent(name="a", tools=[stop]), "hi", run_config=config)
        assert len(client.requests) == 1


class TestToolHandling:
    """Tool errors and tool-use behavior"""

    async def test_tool_error_returned_to_model(self, scripted):
        client, config = scripted(calls(call("boom")), text("sorry, that failed"))

        result = await Runner.run(Agent(name="a", tools=[boom]), "hi", run_config=config)

        assert result.final_output == "sorry, that failed"
        last_sent = client.requests[1].history[-1]
        assert last_sent.is_error
        assert "kaboom" in last_sent.output

    async def test_fail_fast_tool_error(self, scripted):
        _, config = scripted(calls(call("boom")), tool_error_policy=ToolErrorPolicy.fail_fast())

        with pytest.raises(ToolExecutionError) as exc_info:
            await Runner.run(Agent(name="a", tools=[boom]), "hi", run_config=config)

        assert exc_info.value.agent_name == "a"
        assert exc_info.value.turn == 1
        assert ItemType.TOOL_CALL in item_types(exc_info.value.history)

    async def test_unknown_tool(self, scripted):
        _, config = scripted(calls(call("does_not_exist")))
        with pytest.raises(UnknownToolError) as exc_info:
            await Runner.run(Agent(name="a", tools=[ping]), "hi", run_config=config)
        assert exc_info.value.tool_name == "does_not_exist"

    async def test_stop_on_first_tool(self, scripted):
        agent = Agent(name="a", tools=[ping], tool_use_behavior="stop_on_first_tool")
        client, config = scripted(calls(call("ping")))

        result = await Runner.run(agent, "hi", run_config=config)

        assert result.final_output == "pong"
        assert result.turns == 1
        assert len(client.requests) == 1

    async def test_stop_at_tools(self, scripted):
        agent = Agent(name="a", tools=[ping, refund_status], tool_use_behavior=StopAtTools("refund_status"))
        client, config = scripted(calls(call("ping")), calls(call("refund_status")))

        result = await Runner.run(agent, "hi", run_config=config)

        assert result.final_output == "refund sent"
        assert len(client.requests) == 2

    async def test_tool_sees_run_context(self, scripted):
        @function_tool(takes_context=True)
        def whoami(tool_context) -> str:
            return tool_context.context["user"]

        _, config = scripted(calls(call("whoami")), text("done"))
        result = await Runner.run(Agent(name="a", tools=[whoami]), "hi", context={"user": "ada"}, run_config=config)

        (output_item,) = [i for i in result.history if isinstance(i, ToolOutputItem)]
        assert output_item.output == "ada"


class TestModelCollaborator:

    async def test_client_exception_is_wrapped(self, scripted):
        _, config = scripted(RuntimeError("provider down"))

        with pytest.raises(ModelCollaboratorError) as exc_info:
            await Runner.run(Agent(name="a"), "hi", run_config=config)
        assert isinstance(exc_info.value.cause, RuntimeError)

    async def test_dynamic_instructions_and_model_override(self, scripted):
        def instructions(ctx_view, agent):
            return f"Help {ctx_view.context['user']}"

        client, config = scripted(text("hello"), model="gpt-test")
        await Runner.run(Agent(name="a", instructions=instructions), "hi", context={"user": "Ada"}, run_config=config)

        assert client.requests[0].instructions == "Help Ada"
        assert client.requests[0].model == "gpt-test"

    async def test_usage_accumulates(self, scripted):
        _, config = scripted(calls(call("ping")), text("done", tokens=20))
        result = await Runner.run(Agent(name="a", tools=[ping]), "hi", run_config=config)

        assert result.usage.requests == 2
        assert result.usage.total_tokens == 5 + 21
        assert len(result.raw_responses) == 2


class TestStreaming:

    async def test_event_order(self, scripted):
        _, config = scripted(calls(call("ping")), text("done"))
        events = [e async for e in Runner.run_streamed(Agent(name="a", tools=[ping]), "hi", run_config=config)]

        assert isinstance(events[0], ProgressMessage)
        assert isinstance(events[-1], RunResult)
        assert events[-1].final_output == "done"
        updates = [e for e in events if isinstance(e, AgentUpdatedMessage)]
        assert [u.agent_name for u in updates] == ["a"]
        streamed_items = [e.item for e in events if isinstance(e, RunItemMessage)]
        assert item_types(streamed_items) == [
            ItemType.USER_INPUT,
            ItemType.TOOL_CALL,
            ItemType.TOOL_OUTPUT,
            ItemType.ASSISTANT_MESSAGE,
        ]

    async def test_follow_up_run_from_history(self, scripted):
        _, config = scripted(text("first answer"), text("second answer"))
        agent = Agent(name="a")

        first = await Runner.run(agent, "hi", run_config=config)
        second = await Runner.run(agent, first.to_input_list(), run_config=config)

        assert second.final_output == "second answer"
        assert item_types(second.history) == [
            ItemType.USER_INPUT,
            ItemType.ASSISTANT_MESSAGE,
            ItemType.ASSISTANT_MESSAGE,
        ]


class RecordingHooks(RunHooks):
    def __init__(self):
        self.events = []

    async def on_agent_start(self, context, agent):
        self.events.append(("start", agent.name))

    async def on_agent_end(self, context, agent, output):
        self.events.append(("end", agent.name, output))

    async def on_handoff(self, context, from_agent, to_agent):
        self.events.append(("handoff", from_agent.name, to_agent.name))

    async def on_tool_start(self, context, agent, tool):
        self.events.append(("tool_start", tool.name))

    async def on_tool_end(self, context, agent, tool, result):
        self.events.append(("tool_end", tool.name, result))


class BrokenAgentHooks(AgentHooks):
    async def on_start(self, context, agent):
        raise RuntimeError("hook exploded")


class TestHooks:

    async def test_lifecycle_order(self, scripted):
        billing = Agent(name="billing", tools=[refund_status])
        triage = Agent(name="triage", handoffs=[billing])
        hooks = RecordingHooks()
        _, config = scripted(
            calls(call("transfer_to_billing")),
            calls(call("refund_status")),
            text("done"),
        )

        await Runner.run(triage, "hi", run_config=config, hooks=hooks)

        assert hooks.events == [
            ("start", "triage"),
            ("handoff", "triage", "billing"),
            ("start", "billing"),
            ("tool_start", "refund_status"),
            ("tool_end", "refund_status", "refund sent"),
            ("end", "billing", "done"),
        ]

    async def test_failing_hook_does_not_fail_run(self, scripted):
        _, config = scripted(text("fine"))
        result = await Runner.run(Agent(name="a", hooks=BrokenAgentHooks()), "hi", run_config=config)
        assert result.final_output == "fine"


class TestRunSync:

    def test_run_sync(self, scripted):
        _, config = scripted(text("sync answer"))
        result = Runner.run_sync(Agent(name="a"), "hi", run_config=config)
        assert result.final_output == "sync answer"

    async def test_run_sync_inside_event_loop(self, scripted):
        _, config = scripted(text("never sent"))
        with pytest.raises(RuntimeError):
            Runner.run_sync(Agent(name="a"), "hi", run_config=config)
