"""
@file_name: step_3_execute_tools.py
@author: NetMind.AI
@date: 2026-03-04
@description: Step 3 - Execute the tool calls of a turn

- 3.1 Record every tool call (request order)
- 3.2 Dispatch concurrently and wait for all (barrier)
- 3.3 Record every output (request order)
- 3.4 Apply the agent's tool_use_behavior
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator, List, Optional

from loguru import logger

from xyz_agent_runtime.agent_definition import StopAtTools
from xyz_agent_runtime.schema import (
    BaseRuntimeMessage,
    ProgressMessage,
    ProgressStatus,
    RunItemMessage,
    ToolCallItem,
    ToolOutputItem,
)

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_definition import Agent
    from .context import RunContext
    from ..tool_invoker import ToolInvoker, ToolOutcome


def _final_tool_output(agent: "Agent", outcomes: List["ToolOutcome"]) -> Optional["ToolOutcome"]:
    """The outcome that ends the run under the agent's tool_use_behavior, if any"""
    behavior = agent.tool_use_behavior
    if behavior == "run_llm_again":
        return None
    for outcome in outcomes:
        if outcome.is_error:
            continue
        if behavior == "stop_on_first_tool":
            return outcome
        if isinstance(behavior, StopAtTools) and outcome.tool.name in behavior.stop_at_tool_names:
            return outcome
    return None


async def step_3_execute_tools(
    ctx: "RunContext",
    tool_invoker: "ToolInvoker",
) -> AsyncGenerator[BaseRuntimeMessage, None]:
    """
    Step 3: Execute tools

    Output:
        ctx.final_candidate: Set when tool_use_behavior turns a tool output into the final output

    Raises:
        ToolInputError / ToolExecutionError (when not converted), RunTimeoutError, RunCancelledError
    """
    calls = ctx.processed.tool_calls
    agent = ctx.current_agent
    ctx.check_limits()

    yield ProgressMessage(
        step="3",
        title="Tool execution",
        description=f"Running {len(calls)} tool call(s): {', '.join(request.name for request, _ in calls)}",
        status=ProgressStatus.RUNNING,
    )

    # =========================================================================
    # 3.1 Record calls
    # =========================================================================
    for request, tool in calls:
        item = ctx.add_item(ToolCallItem(
            call_id=request.call_id,
            tool_name=request.name,
            arguments=request.arguments,
            **ctx.item_meta(),
        ))
        ctx.state = ctx.state.record_tool_call(request.name, request.call_id, request.arguments)
        yield RunItemMessage(item=item)

    # =========================================================================
    # 3.2 Dispatch (barrier)
    # =========================================================================
    outcomes = await ctx.within_budget(tool_invoker.invoke_all(ctx, calls))

    # =========================================================================
    # 3.3 Record outputs
    # =========================================================================
    for outcome in outcomes:
        item = ctx.add_item(ToolOutputItem(
            call_id=outcome.request.call_id,
            tool_name=outcome.request.name,
            output=outcome.output,
            is_error=outcome.is_error,
            **ctx.item_meta(),
        ))
        ctx.state = ctx.state.record_tool_output(
            outcome.request.name, outcome.request.call_id, outcome.output, outcome.is_error
        )
        yield RunItemMessage(item=item)

    # =========================================================================
    # 3.4 Tool use behavior
    # =========================================================================
    final = _final_tool_output(agent, outcomes)
    if final is not None:
        logger.info(f"  🏁 Output of tool '{final.tool.name}' becomes the final output candidate")
        ctx.set_final_candidate(final.output)

    errors = sum(1 for outcome in outcomes if outcome.is_error)
    yield ProgressMessage(
        step="3",
        title="Tool execution",
        description=f"{len(outcomes)} tool call(s) finished, {errors} returned an error",
        status=ProgressStatus.COMPLETED,
    )
