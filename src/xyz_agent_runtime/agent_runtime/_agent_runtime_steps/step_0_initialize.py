"""
@file_name: step_0_initialize.py
@author: NetMind.AI
@date: 2026-03-04
@description: Step 0 - Initialization phase

- 0.1 Start the wall-clock budget
- 0.2 Seed the history with the run input
- 0.3 Announce the starting agent
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator

from loguru import logger

from xyz_agent_runtime.config import LOG_PREVIEW_LENGTH
from xyz_agent_runtime.schema import (
    AgentUpdatedMessage,
    BaseRunItem,
    BaseRuntimeMessage,
    ProgressMessage,
    ProgressStatus,
    RunItemMessage,
    UserInputItem,
)
from xyz_agent_runtime.utils import ConfigurationError, truncate_text

if TYPE_CHECKING:
    from .context import RunContext


async def step_0_initialize(ctx: "RunContext") -> AsyncGenerator[BaseRuntimeMessage, None]:
    """
    Step 0: Initialization phase

    Args:
        ctx: Run context

    Yields:
        ProgressMessage, AgentUpdatedMessage, RunItemMessage
    """
    yield ProgressMessage(
        step="0",
        title="Initialization",
        description=f"Starting agent '{ctx.starting_agent.name}' (max_turns={ctx.max_turns})",
        status=ProgressStatus.RUNNING,
    )

    # =========================================================================
    # 0.1 Start the clock
    # =========================================================================
    ctx.start_clock(ctx.run_config.timeout_seconds)
    if ctx.deadline is not None:
        logger.info(f"⏱️ Step 0.1: Time budget {ctx.run_config.timeout_seconds:.2f}s")

    # =========================================================================
    # 0.2 Seed history
    # =========================================================================
    if isinstance(ctx.input, str):
        seeded = [UserInputItem(content=ctx.input, agent_name=ctx.starting_agent.name, turn=0)]
        logger.info(f"💬 Step 0.2: Input: {truncate_text(ctx.input, LOG_PREVIEW_LENGTH)}")
    else:
        seeded = list(ctx.input)
        for item in seeded:
            if not isinstance(item, BaseRunItem):
                raise ConfigurationError(
                    f"Run input items must be RunItems, got {type(item).__name__}",
                    agent_name=ctx.starting_agent.name,
                )
        logger.info(f"💬 Step 0.2: Input: {len(seeded)} history item(s)")

    ctx.history.extend(seeded)
    ctx.input_item_count = len(seeded)
    ctx.turn_start_index = len(ctx.history)

    # =========================================================================
    # 0.3 Announce the starting agent
    # =========================================================================
    yield AgentUpdatedMessage(agent_name=ctx.starting_agent.name, previous_agent=None, turn=0)
    for item in seeded:
        yield RunItemMessage(item=item)

    yield ProgressMessage(
        step="0",
        title="Initialization",
        description=f"History seeded with {len(seeded)} item(s)",
        status=ProgressStatus.COMPLETED,
    )
