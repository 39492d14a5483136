"""
@file_name: step_1_input_guardrails.py
@author: NetMind.AI
@date: 2026-03-04
@description: Step 1 - Input guardrails

Runs the starting agent's input guardrails followed by the RunConfig's, on
the raw run input, before any model call. A trip ends the run with zero
model calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator

from loguru import logger

from xyz_agent_runtime.schema import BaseRuntimeMessage, ProgressMessage, ProgressStatus

if TYPE_CHECKING:
    from .context import RunContext
    from ..guardrail_engine import GuardrailEngine


async def step_1_input_guardrails(
    ctx: "RunContext",
    guardrail_engine: "GuardrailEngine",
) -> AsyncGenerator[BaseRuntimeMessage, None]:
    """
    Step 1: Input guardrails

    Raises:
        GuardrailTripped / GuardrailExecutionError
    """
    agent = ctx.starting_agent
    guardrails = [*agent.input_guardrails, *ctx.run_config.input_guardrails]
    if not guardrails:
        logger.debug("🛡️ Step 1: No input guardrails")
        return

    yield ProgressMessage(
        step="1",
        title="Input guardrails",
        description=f"Checking input with {len(guardrails)} guardrail(s)",
        status=ProgressStatus.RUNNING,
    )

    logger.info(f"🛡️ Step 1: Running {len(guardrails)} input guardrail(s)")
    records = await ctx.within_budget(
        guardrail_engine.run_input_guardrails(
            guardrails,
            agent,
            ctx.input,
            ctx.view(),
            parallel=ctx.run_config.parallel_guardrails,
        )
    )
    ctx.input_guardrail_results.extend(records)

    yield ProgressMessage(
        step="1",
        title="Input guardrails",
        description="Input accepted",
        status=ProgressStatus.COMPLETED,
    )
