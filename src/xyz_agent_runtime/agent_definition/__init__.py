"""
Agent Definition Package

@file_name: __init__.py
@description: Immutable building blocks of a run (agents, tools, handoffs, guardrails, hooks, policies)
"""

# Policies
from .policy import (
    ToolErrorPolicy,
    DEFAULT_TOOL_ERROR_POLICY,
    OutputRetryPolicy,
    StopAtTools,
    ToolUseBehavior,
)

# Tools
from .tool import (
    ToolContext,
    FunctionTool,
    function_tool,
    HostedTool,
    AgentToolInput,
    AgentAsToolWrapper,
    Tool,
)

# Handoffs
from .handoff import (
    HandoffInputData,
    Handoff,
    handoff,
    remove_all_tools,
    keep_last_n_items,
)

# Guardrails
from .guardrail import (
    InputGuardrail,
    OutputGuardrail,
    input_guardrail,
    output_guardrail,
)

# Lifecycle hooks
from .lifecycle import RunHooks, AgentHooks

# Agent
from .agent import Agent

__all__ = [
    # Policies
    "ToolErrorPolicy",
    "DEFAULT_TOOL_ERROR_POLICY",
    "OutputRetryPolicy",
    "StopAtTools",
    "ToolUseBehavior",
    # Tools
    "ToolContext",
    "FunctionTool",
    "function_tool",
    "HostedTool",
    "AgentToolInput",
    "AgentAsToolWrapper",
    "Tool",
    # Handoffs
    "HandoffInputData",
    "Handoff",
    "handoff",
    "remove_all_tools",
    "keep_last_n_items",
    # Guardrails
    "InputGuardrail",
    "OutputGuardrail",
    "input_guardrail",
    "output_guardrail",
    # Lifecycle hooks
    "RunHooks",
    "AgentHooks",
    # Agent
    "Agent",
]
