"""
@file_name: lifecycle.py
@author: NetMind.AI
@date: 2026-03-03
@description: Lifecycle hook interfaces

Subclass and override what you need; every method is a no-op by default.
Hooks are invoked by the HookManager, which logs and swallows any exception
a hook raises, so hooks can never change the outcome of a run.

- RunHooks: passed to Runner.run, sees every agent of the run
- AgentHooks: set on an Agent, sees only events of that agent
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_runtime._agent_runtime_steps.context import RunContextView
    from .agent import Agent
    from .tool import Tool


class RunHooks:
    """Run-wide lifecycle callbacks"""

    async def on_agent_start(self, context: "RunContextView", agent: "Agent") -> None:
        """Called before the first model call of each agent"""
        pass

    async def on_agent_end(self, context: "RunContextView", agent: "Agent", output: Any) -> None:
        """Called once, when the final output has been coerced"""
        pass

    async def on_handoff(self, context: "RunContextView", from_agent: "Agent", to_agent: "Agent") -> None:
        pass

    async def on_tool_start(self, context: "RunContextView", agent: "Agent", tool: "Tool") -> None:
        pass

    async def on_tool_end(self, context: "RunContextView", agent: "Agent", tool: "Tool", result: str) -> None:
        pass


class AgentHooks:
    """Callbacks for a single agent"""

    async def on_start(self, context: "RunContextView", agent: "Agent") -> None:
        pass

    async def on_end(self, context: "RunContextView", agent: "Agent", output: Any) -> None:
        pass

    async def on_handoff(self, context: "RunContextView", agent: "Agent", source: "Agent") -> None:
        """Called on the target agent when control is handed to it"""
        pass

    async def on_tool_start(self, context: "RunContextView", agent: "Agent", tool: "Tool") -> None:
        pass

    async def on_tool_end(self, context: "RunContextView", agent: "Agent", tool: "Tool", result: str) -> None:
        pass
