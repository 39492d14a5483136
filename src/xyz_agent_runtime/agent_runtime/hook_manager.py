"""
@file_name: hook_manager.py
@author: NetMind.AI
@date: 2026-03-04
@description: Hook Manager - invokes RunHooks and AgentHooks

Hooks run inside the turn but in their own error domain: an exception raised
by a hook is logged as a structured HookExecutionError and execution
continues. A hook can never fail a run.

Invocation order for every event:
    1. RunHooks (run-wide, passed to Runner.run)
    2. AgentHooks of the agent concerned
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

from loguru import logger

from xyz_agent_runtime.utils import HookExecutionError, call_maybe_async

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_definition import Agent, Tool
    from ._agent_runtime_steps.context import RunContext


class HookManager:
    """
    Hook Manager

    Responsible for calling lifecycle hooks safely.
    """

    async def _safe_call(
        self,
        ctx: "RunContext",
        hook_name: str,
        hook: Optional[Callable[..., Any]],
        *args: Any,
    ) -> None:
        if hook is None:
            return
        try:
            await call_maybe_async(hook, *args)
        except Exception as e:
            # Use structured exception to log the error, but continue the run
            error = HookExecutionError(
                hook_name=hook_name,
                message="Hook execution failed",
                cause=e,
                agent_name=ctx.current_agent.name,
                turn=ctx.turn,
            )
            logger.error(f"Hook {hook_name} failed, continuing the run", extra=error.to_dict())

    async def on_agent_start(self, ctx: "RunContext", agent: "Agent") -> None:
        view = ctx.view()
        if ctx.hooks is not None:
            await self._safe_call(ctx, "run.on_agent_start", ctx.hooks.on_agent_start, view, agent)
        if agent.hooks is not None:
            await self._safe_call(ctx, "agent.on_start", agent.hooks.on_start, view, agent)

    async def on_agent_end(self, ctx: "RunContext", agent: "Agent", output: Any) -> None:
        view = ctx.view()
        if ctx.hooks is not None:
            await self._safe_call(ctx, "run.on_agent_end", ctx.hooks.on_agent_end, view, agent, output)
        if agent.hooks is not None:
            await self._safe_call(ctx, "agent.on_end", agent.hooks.on_end, view, agent, output)

    async def on_handoff(self, ctx: "RunContext", from_agent: "Agent", to_agent: "Agent") -> None:
        view = ctx.view()
        if ctx.hooks is not None:
            await self._safe_call(ctx, "run.on_handoff", ctx.hooks.on_handoff, view, from_agent, to_agent)
        if to_agent.hooks is not None:
            await self._safe_call(ctx, "agent.on_handoff", to_agent.hooks.on_handoff, view, to_agent, from_agent)

    async def on_tool_start(self, ctx: "RunContext", agent: "Agent", tool: "Tool") -> None:
        view = ctx.view()
        if ctx.hooks is not None:
            await self._safe_call(ctx, "run.on_tool_start", ctx.hooks.on_tool_start, view, agent, tool)
        if agent.hooks is not None:
            await self._safe_call(ctx, "agent.on_tool_start", agent.hooks.on_tool_start, view, agent, tool)

    async def on_tool_end(self, ctx: "RunContext", agent: "Agent", tool: "Tool", result: str) -> None:
        view = ctx.view()
        if ctx.hooks is not None:
            await self._safe_call(ctx, "run.on_tool_end", ctx.hooks.on_tool_end, view, agent, tool, result)
        if agent.hooks is not None:
            await self._safe_call(ctx, "agent.on_tool_end", agent.hooks.on_tool_end, view, agent, tool, result)
