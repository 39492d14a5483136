"""
@file_name: step_3_handoff.py
@author: NetMind.AI
@date: 2026-03-05
@description: Step 3 (handoff path) - Transfer control to another agent

Runs after any ordinary tool calls of the same turn. A successful handoff
swaps the active agent, so the next turn is built from the target agent's
instructions, tools, handoffs and guardrails.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator

from loguru import logger

from xyz_agent_runtime.schema import (
    AgentUpdatedMessage,
    BaseRuntimeMessage,
    ProgressMessage,
    ProgressStatus,
    RunItemMessage,
)

if TYPE_CHECKING:
    from .context import RunContext
    from ..handoff_resolver import HandoffResolver


async def step_3_handoff(
    ctx: "RunContext",
    handoff_resolver: "HandoffResolver",
) -> AsyncGenerator[BaseRuntimeMessage, None]:
    """
    Step 3: Handoff

    Output:
        ctx.current_agent: The handoff target (when the handoff was accepted)
        ctx.history: Filtered handoff history

    Raises:
        ToolInputError (payload rejected and not converted), ConfigurationError (bad filter)
    """
    request, handoff = ctx.processed.handoff
    source = ctx.current_agent
    ctx.check_limits()

    yield ProgressMessage(
        step="3",
        title="Handoff",
        description=f"'{source.name}' requested a transfer to '{handoff.agent_name}'",
        status=ProgressStatus.RUNNING,
    )

    outcome = await handoff_resolver.resolve(ctx, request, handoff)
    for item in outcome.items:
        yield RunItemMessage(item=item)

    if not outcome.swapped:
        yield ProgressMessage(
            step="3",
            title="Handoff",
            description="Handoff rejected, the error was returned to the model",
            status=ProgressStatus.FAILED,
        )
        return

    # A tool output picked by tool_use_behavior belongs to the agent that gave up control
    if ctx.has_final_candidate:
        logger.debug("  Discarding tool output final candidate after handoff")
        ctx.final_candidate = None
        ctx.has_final_candidate = False

    yield AgentUpdatedMessage(agent_name=ctx.current_agent.name, previous_agent=source.name, turn=ctx.turn)
    yield ProgressMessage(
        step="3",
        title="Handoff",
        description=f"Active agent is now '{ctx.current_agent.name}'",
        status=ProgressStatus.COMPLETED,
        details={"callback_error": outcome.callback_error} if outcome.callback_error else None,
    )
