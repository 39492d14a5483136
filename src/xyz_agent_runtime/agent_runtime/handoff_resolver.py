"""
@file_name: handoff_resolver.py
@author: NetMind.AI
@date: 2026-03-04
@description: Handoff resolution - swapping the active agent

Resolution of one handoff request:
    1. Validate the payload against the handoff's input_type
       - invalid + policy converts -> error output recorded, no swap
       - invalid + policy does not convert -> ToolInputError (fatal)
    2. Record the handoff call and run on_handoff (faults recorded on the
       handoff_output item, never escalated)
    3. Apply the input filter (handoff's own, else RunConfig.handoff_input_filter)
    4. Swap the active agent with the filtered history
    5. Fire on_handoff lifecycle hooks
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from loguru import logger

from xyz_agent_runtime.agent_definition import DEFAULT_TOOL_ERROR_POLICY, Handoff, HandoffInputData
from xyz_agent_runtime.schema import HandoffCallItem, HandoffOutputItem, RunItem, ToolCallRequest, ToolOutputItem
from xyz_agent_runtime.utils import (
    ConfigurationError,
    HookExecutionError,
    ToolInputError,
    call_maybe_async,
)

if TYPE_CHECKING:
    from ._agent_runtime_steps.context import RunContext
    from .hook_manager import HookManager


@dataclass
class HandoffOutcome:
    """
    Result of a handoff request

    Attributes:
        swapped: The active agent changed
        items: Items appended for this request (before filtering)
        callback_error: Fault raised by on_handoff, if any
    """
    swapped: bool
    items: List[RunItem]
    callback_error: Optional[str] = None


class HandoffResolver:
    """
    Handoff resolver

    Usage:
        >>> resolver = HandoffResolver(hook_manager)
        >>> outcome = await resolver.resolve(ctx, request, handoff)
    """

    def __init__(self, hook_manager: "HookManager"):
        self.hook_manager = hook_manager

    async def resolve(self, ctx: "RunContext", request: ToolCallRequest, handoff: Handoff) -> HandoffOutcome:
        """
        Resolve one handoff request against ctx

        Raises:
            ToolInputError: Invalid payload and the effective policy does not convert
            ConfigurationError: The input filter returned something other than HandoffInputData
        """
        source = ctx.current_agent
        target = handoff.agent

        # =====================================================================
        # 1. Validate payload
        # =====================================================================
        try:
            payload = handoff.parse_input(request.arguments)
        except ToolInputError as e:
            policy = source.tool_error_policy or ctx.run_config.tool_error_policy or DEFAULT_TOOL_ERROR_POLICY
            e.context.setdefault("call_id", request.call_id)
            if not policy.should_convert(e):
                raise
            logger.warning(f"  ⚠️ Handoff '{handoff.tool_name}' rejected, returning error to the model: {e.message}")
            items = [
                ctx.add_item(HandoffCallItem(
                    call_id=request.call_id,
                    tool_name=handoff.tool_name,
                    target_agent=target.name,
                    arguments=request.arguments,
                    **ctx.item_meta(),
                )),
                ctx.add_item(ToolOutputItem(
                    call_id=request.call_id,
                    tool_name=handoff.tool_name,
                    output=policy.format(e),
                    is_error=True,
                    **ctx.item_meta(),
                )),
            ]
            return HandoffOutcome(swapped=False, items=items)

        logger.info(f"  🔀 Handoff: '{source.name}' -> '{target.name}'")

        # =====================================================================
        # 2. Record + on_handoff side effect
        # =====================================================================
        call_item = ctx.add_item(HandoffCallItem(
            call_id=request.call_id,
            tool_name=handoff.tool_name,
            target_agent=target.name,
            arguments=request.arguments,
            **ctx.item_meta(),
        ))
        callback_error = await self._run_on_handoff(ctx, handoff, payload)
        output_item = ctx.add_item(HandoffOutputItem(
            call_id=request.call_id,
            tool_name=handoff.tool_name,
            source_agent=source.name,
            target_agent=target.name,
            output=handoff.get_transfer_message(),
            callback_error=callback_error,
            **ctx.item_meta(),
        ))

        # =====================================================================
        # 3. Input filter
        # =====================================================================
        data = HandoffInputData(
            input_history=tuple(ctx.history[:ctx.input_item_count]),
            pre_handoff_items=tuple(ctx.history[ctx.input_item_count:ctx.turn_start_index]),
            new_items=tuple(ctx.history[ctx.turn_start_index:]),
        )
        input_filter = handoff.input_filter or ctx.run_config.handoff_input_filter
        if input_filter is not None:
            filtered = await call_maybe_async(input_filter, data)
            if not isinstance(filtered, HandoffInputData):
                raise ConfigurationError(
                    f"Handoff input filter must return HandoffInputData, got {type(filtered).__name__}",
                    tool_name=handoff.tool_name,
                )
            data = filtered
            logger.debug(f"    🧹 Handoff input filter kept {len(data.all_items())} item(s)")

        # =====================================================================
        # 4. Swap + hooks
        # =====================================================================
        ctx.swap_agent(target, data.all_items(), input_item_count=len(data.input_history))
        ctx.state = ctx.state.record_handoff(source.name, target.name)
        await self.hook_manager.on_handoff(ctx, source, target)

        return HandoffOutcome(swapped=True, items=[call_item, output_item], callback_error=callback_error)

    async def _run_on_handoff(self, ctx: "RunContext", handoff: Handoff, payload) -> Optional[str]:
        if handoff.on_handoff is None:
            return None
        view = ctx.view()
        try:
            if handoff.input_type is not None:
                await call_maybe_async(handoff.on_handoff, view, payload)
            else:
                await call_maybe_async(handoff.on_handoff, view)
        except Exception as e:
            error = HookExecutionError(
                hook_name="on_handoff",
                message=f"on_handoff callback of '{handoff.tool_name}' failed",
                cause=e,
                agent_name=ctx.current_agent.name,
                turn=ctx.turn,
            )
            logger.error(f"  on_handoff callback of '{handoff.tool_name}' failed, continuing", extra=error.to_dict())
            return f"{type(e).__name__}: {e}"
        return None
