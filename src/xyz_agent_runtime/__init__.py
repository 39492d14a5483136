"""
XYZ Agent Runtime - Multi-agent execution runtime

Drives a multi-turn conversation between a model and a set of callable
capabilities until the active agent produces a typed final output:
- Agent definition: Agents, tools, handoffs, guardrails, hooks
- Agent runtime: Runner turn loop, tool dispatch, handoffs, output coercion
- Agent framework: Model Client interface and the OpenAI adapter
"""

__version__ = "0.1.0"

# Export core components - organized by dependency order
# 1. Schema (data structures, no dependencies)
from .schema import (
    ItemType,
    RunItem,
    UserInputItem,
    AssistantMessageItem,
    ToolCallItem,
    ToolOutputItem,
    HostedToolCallItem,
    HandoffCallItem,
    HandoffOutputItem,
    OutputRetryItem,
    ModelSettings,
    ModelRequest,
    ModelResponse,
    ToolCallRequest,
    HostedToolCall,
    Usage,
    GuardrailResult,
    ProgressMessage,
    AgentUpdatedMessage,
    RunItemMessage,
    RunResult,
)

# 2. Utils (exceptions)
from .utils import (
    AgentRuntimeError,
    ConfigurationError,
    UnknownToolError,
    GuardrailTripped,
    GuardrailExecutionError,
    ToolInputError,
    ToolExecutionError,
    OutputParseError,
    AmbiguousHandoffError,
    MaxTurnsExceeded,
    ModelCollaboratorError,
    RunTimeoutError,
    RunCancelledError,
)

# 3. Agent definition
from .agent_definition import (
    Agent,
    FunctionTool,
    function_tool,
    HostedTool,
    AgentAsToolWrapper,
    ToolContext,
    Handoff,
    handoff,
    HandoffInputData,
    remove_all_tools,
    keep_last_n_items,
    InputGuardrail,
    OutputGuardrail,
    input_guardrail,
    output_guardrail,
    RunHooks,
    AgentHooks,
    ToolErrorPolicy,
    OutputRetryPolicy,
    StopAtTools,
)

# 4. Agent framework (Model Client)
from .agent_framework import ModelClient, OpenAIChatModelClient

# 5. Agent runtime (run loop)
from .agent_runtime import Runner, RunConfig, CancellationToken, RunContextView

__all__ = [
    "__version__",
    # Schema
    "ItemType",
    "RunItem",
    "UserInputItem",
    "AssistantMessageItem",
    "ToolCallItem",
    "ToolOutputItem",
    "HostedToolCallItem",
    "HandoffCallItem",
    "HandoffOutputItem",
    "OutputRetryItem",
    "ModelSettings",
    "ModelRequest",
    "ModelResponse",
    "ToolCallRequest",
    "HostedToolCall",
    "Usage",
    "GuardrailResult",
    "ProgressMessage",
    "AgentUpdatedMessage",
    "RunItemMessage",
    "RunResult",
    # Exceptions
    "AgentRuntimeError",
    "ConfigurationError",
    "UnknownToolError",
    "GuardrailTripped",
    "GuardrailExecutionError",
    "ToolInputError",
    "ToolExecutionError",
    "OutputParseError",
    "AmbiguousHandoffError",
    "MaxTurnsExceeded",
    "ModelCollaboratorError",
    "RunTimeoutError",
    "RunCancelledError",
    # Agent definition
    "Agent",
    "FunctionTool",
    "function_tool",
    "HostedTool",
    "AgentAsToolWrapper",
    "ToolContext",
    "Handoff",
    "handoff",
    "HandoffInputData",
    "remove_all_tools",
    "keep_last_n_items",
    "InputGuardrail",
    "OutputGuardrail",
    "input_guardrail",
    "output_guardrail",
    "RunHooks",
    "AgentHooks",
    "ToolErrorPolicy",
    "OutputRetryPolicy",
    "StopAtTools",
    # Model Client
    "ModelClient",
    "OpenAIChatModelClient",
    # Runtime
    "Runner",
    "RunConfig",
    "CancellationToken",
    "RunContextView",
]
