"""
@file_name: step_2_model_call.py
@author: NetMind.AI
@date: 2026-03-04
@description: Step 2 - One model round-trip

- 2.1 Turn bookkeeping (limits, max_turns, turn counter)
- 2.2 Build the ModelRequest from the active agent
- 2.3 Call the Model Client within the remaining budget
- 2.4 Classify the response and record hosted calls
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator

from loguru import logger

from xyz_agent_runtime.agent_definition import ToolContext
from xyz_agent_runtime.config import LOG_PREVIEW_LENGTH
from xyz_agent_runtime.schema import (
    AssistantMessageItem,
    BaseRuntimeMessage,
    HostedToolCallItem,
    ModelRequest,
    ModelResponse,
    ProgressMessage,
    ProgressStatus,
    RunItemMessage,
)
from xyz_agent_runtime.utils import (
    AgentRuntimeError,
    MaxTurnsExceeded,
    ModelCollaboratorError,
    to_text,
    truncate_text,
)
from ..response_processor import ResponseType
from ..tool_invoker import ToolRegistry

if TYPE_CHECKING:
    from .context import RunContext
    from ..hook_manager import HookManager
    from ..response_processor import ResponseProcessor


async def step_2_model_call(
    ctx: "RunContext",
    response_processor: "ResponseProcessor",
    hook_manager: "HookManager",
) -> AsyncGenerator[BaseRuntimeMessage, None]:
    """
    Step 2: Model call

    Output:
        ctx.processed: ProcessedResponse of this turn

    Raises:
        MaxTurnsExceeded, ModelCollaboratorError, UnknownToolError,
        AmbiguousHandoffError, RunTimeoutError, RunCancelledError
    """
    # =========================================================================
    # 2.1 Turn bookkeeping
    # =========================================================================
    ctx.check_limits()
    if ctx.turn >= ctx.max_turns:
        logger.error(f"❌ Max turns ({ctx.max_turns}) exceeded")
        raise MaxTurnsExceeded(ctx.max_turns, agent_name=ctx.current_agent.name, turn=ctx.turn)

    ctx.begin_turn()
    agent = ctx.current_agent

    yield ProgressMessage(
        step="2",
        title="Model call",
        description=f"Turn {ctx.turn}/{ctx.max_turns} with agent '{agent.name}'",
        status=ProgressStatus.RUNNING,
    )
    logger.info(f"🚀 Step 2: Turn {ctx.turn}/{ctx.max_turns} - agent '{agent.name}'")

    if ctx.agent_start_pending:
        ctx.agent_start_pending = False
        await hook_manager.on_agent_start(ctx, agent)

    # =========================================================================
    # 2.2 Build the request
    # =========================================================================
    registry = ToolRegistry.for_agent(agent)
    output_schema = agent.get_output_schema()
    instructions = await agent.resolve_instructions(ctx.view())
    request = ModelRequest(
        agent_name=agent.name,
        model=ctx.run_config.model or agent.model,
        instructions=instructions,
        history=list(ctx.history),
        tools=[*registry.schemas(), *(h.to_schema() for h in agent.get_handoffs())],
        output_schema=output_schema.json_schema(),
        output_schema_name=None if output_schema.is_plain_text else output_schema.name,
        model_settings=agent.model_settings.resolve(ctx.run_config.model_settings),
    )
    logger.debug(f"  📤 Request: {len(request.history)} item(s), {len(request.tools)} tool schema(s)")

    # =========================================================================
    # 2.3 Call the Model Client
    # =========================================================================
    try:
        response = await ctx.within_budget(ctx.model_client.get_response(request))
    except AgentRuntimeError:
        raise
    except Exception as e:
        raise ModelCollaboratorError(
            f"Model call failed: {type(e).__name__}: {e}",
            cause=e,
            agent_name=agent.name,
            turn=ctx.turn,
        ) from e

    if not isinstance(response, ModelResponse):
        raise ModelCollaboratorError(
            f"Model Client returned {type(response).__name__} instead of ModelResponse",
            agent_name=agent.name,
            turn=ctx.turn,
        )

    ctx.raw_responses.append(response)
    ctx.state = ctx.state.record_response(response.usage)

    # =========================================================================
    # 2.4 Classify and record
    # =========================================================================
    processed = response_processor.process(response, agent, registry)
    ctx.processed = processed

    for call, tool in processed.hosted_calls:
        tool_context = ToolContext(run_context=ctx.view(), tool_name=tool.name, call_id=call.call_id)
        output = await tool.invoke(call, tool_context)
        item = ctx.add_item(HostedToolCallItem(
            call_id=call.call_id,
            tool_name=call.name,
            arguments=call.arguments,
            output=output,
            **ctx.item_meta(),
        ))
        ctx.state = ctx.state.record_tool_call(call.name, call.call_id, call.arguments)
        logger.debug(f"  ☁️ Hosted call {call.name} -> {truncate_text(output, LOG_PREVIEW_LENGTH)}")
        yield RunItemMessage(item=item)

    # Text that accompanies tool calls is kept in history; the final candidate is recorded in Step 4
    if processed.type != ResponseType.FINAL_OUTPUT and to_text(processed.content).strip():
        item = ctx.add_item(AssistantMessageItem(content=processed.content, **ctx.item_meta()))
        yield RunItemMessage(item=item)

    yield ProgressMessage(
        step="2",
        title="Model call",
        description=f"Response: {processed.type.value}",
        status=ProgressStatus.COMPLETED,
        details={"usage": response.usage.model_dump()},
    )
