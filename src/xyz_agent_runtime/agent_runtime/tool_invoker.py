"""
@file_name: tool_invoker.py
@author: NetMind.AI
@date: 2026-03-04
@description: Tool registry and concurrent tool dispatch

ToolRegistry: name -> tool map for the active agent (rebuilt on every handoff)
ToolInvoker:  runs one turn's tool calls concurrently

Dispatch rules:
- Every call of a turn is started concurrently, bounded by a semaphore
- asyncio.gather is the barrier: the turn continues only when all calls finished
- Outcomes are returned in request order, whatever the completion order
- ToolInputError / ToolExecutionError are converted to text when the effective
  ToolErrorPolicy allows it; otherwise the run fails with the first failing
  call in request order
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from xyz_agent_runtime.agent_definition import DEFAULT_TOOL_ERROR_POLICY, ToolContext, ToolErrorPolicy
from xyz_agent_runtime.config import LOG_PREVIEW_LENGTH
from xyz_agent_runtime.schema import ToolCallRequest, ToolSchema
from xyz_agent_runtime.utils import ConfigurationError, ToolError, UnknownToolError, truncate_text

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_definition import Agent, Tool
    from ._agent_runtime_steps.context import RunContext
    from .hook_manager import HookManager


# ============================================================================
# Registry
# ============================================================================

class ToolRegistry:
    """
    Tools of one agent, addressable by name

    Raises ConfigurationError on duplicate names; lookups of unknown names raise
    UnknownToolError.
    """

    def __init__(self, tools: Iterable["Tool"], agent_name: Optional[str] = None):
        self.agent_name = agent_name
        self._tools: Dict[str, "Tool"] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ConfigurationError(
                    f"Duplicate tool name '{tool.name}'",
                    agent_name=agent_name,
                    tool_name=tool.name,
                )
            self._tools[tool.name] = tool

    @classmethod
    def for_agent(cls, agent: "Agent") -> "ToolRegistry":
        return cls(agent.tools, agent_name=agent.name)

    def get(self, name: str) -> "Tool":
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name, agent_name=self.agent_name) from None

    def schemas(self) -> List[ToolSchema]:
        return [tool.to_schema() for tool in self._tools.values()]


# ============================================================================
# Invoker
# ============================================================================

@dataclass
class ToolOutcome:
    """
    Result of one tool call

    Attributes:
        request: The call as the model requested it
        tool: The tool that served it
        output: Model-visible text (tool result or converted error)
        error: The converted error, if any
    """
    request: ToolCallRequest
    tool: "Tool"
    output: str
    error: Optional[ToolError] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


def resolve_error_policy(tool: "Tool", agent: "Agent", run_policy: Optional[ToolErrorPolicy]) -> ToolErrorPolicy:
    """tool -> agent -> run config -> default"""
    return (
        getattr(tool, "error_policy", None)
        or agent.tool_error_policy
        or run_policy
        or DEFAULT_TOOL_ERROR_POLICY
    )


class ToolInvoker:
    """
    Concurrent dispatcher for one turn's tool calls

    Usage:
        >>> invoker = ToolInvoker(hook_manager)
        >>> outcomes = await invoker.invoke_all(ctx, processed.tool_calls)
    """

    def __init__(self, hook_manager: "HookManager"):
        self.hook_manager = hook_manager

    async def invoke_all(
        self,
        ctx: "RunContext",
        calls: Sequence[Tuple[ToolCallRequest, "Tool"]],
    ) -> List[ToolOutcome]:
        """
        Dispatch every call concurrently and wait for all of them

        Returns:
            Outcomes in request order

        Raises:
            ToolInputError / ToolExecutionError: First unconverted failure in request order
        """
        if not calls:
            return []

        limit = ctx.run_config.max_parallel_tool_calls
        semaphore = asyncio.Semaphore(limit)
        agent = ctx.current_agent
        logger.info(f"  🔧 Dispatching {len(calls)} tool call(s) (max parallel: {limit})")

        async def run_one(request: ToolCallRequest, tool: "Tool") -> ToolOutcome:
            async with semaphore:
                return await self._invoke_one(ctx, agent, request, tool)

        results = await asyncio.gather(
            *[run_one(request, tool) for request, tool in calls],
            return_exceptions=True,
        )

        outcomes: List[ToolOutcome] = []
        for result in results:
            if isinstance(result, BaseException):
                raise result
            outcomes.append(result)
        return outcomes

    async def _invoke_one(
        self,
        ctx: "RunContext",
        agent: "Agent",
        request: ToolCallRequest,
        tool: "Tool",
    ) -> ToolOutcome:
        view = ctx.view()
        tool_context = ToolContext(
            run_context=view,
            tool_name=tool.name,
            call_id=request.call_id,
            run_config=ctx.run_config,
            remaining_seconds=ctx.remaining_seconds(),
        )

        await self.hook_manager.on_tool_start(ctx, agent, tool)
        try:
            output = await tool.invoke(request, tool_context)
            error = None
        except ToolError as e:
            policy = resolve_error_policy(tool, agent, ctx.run_config.tool_error_policy)
            e.context.setdefault("call_id", request.call_id)
            if not policy.should_convert(e):
                logger.error(f"    ❌ Tool '{tool.name}' failed (not recoverable): {e.message}", extra=e.to_dict())
                raise
            logger.warning(f"    ⚠️ Tool '{tool.name}' failed, returning error to the model: {e.message}")
            output = policy.format(e)
            error = e

        logger.debug(f"    ↩️ {tool.name} -> {truncate_text(output, LOG_PREVIEW_LENGTH)}")
        await self.hook_manager.on_tool_end(ctx, agent, tool, output)
        return ToolOutcome(request=request, tool=tool, output=output, error=error)
