"""
Schema Package

@file_name: __init__.py
@description: Shared data model for xyz_agent_runtime (pydantic models and dataclasses)
"""

# History items
from .run_item_schema import (
    ItemType,
    BaseRunItem,
    UserInputItem,
    AssistantMessageItem,
    ToolCallItem,
    ToolOutputItem,
    HostedToolCallItem,
    HandoffCallItem,
    HandoffOutputItem,
    OutputRetryItem,
    RunItem,
)

# Model Client contract
from .model_schema import (
    ToolKind,
    ToolSchema,
    ModelSettings,
    Usage,
    ToolCallRequest,
    HostedToolCall,
    ModelRequest,
    ModelResponse,
)

# Guardrails
from .guardrail_schema import (
    GuardrailKind,
    GuardrailResult,
    GuardrailRecord,
)

# Streaming events
from .runtime_message import (
    MessageType,
    ProgressStatus,
    BaseRuntimeMessage,
    ProgressMessage,
    AgentUpdatedMessage,
    RunItemMessage,
)

# Result
from .result_schema import RunResult

__all__ = [
    # History items
    "ItemType",
    "BaseRunItem",
    "UserInputItem",
    "AssistantMessageItem",
    "ToolCallItem",
    "ToolOutputItem",
    "HostedToolCallItem",
    "HandoffCallItem",
    "HandoffOutputItem",
    "OutputRetryItem",
    "RunItem",
    # Model Client contract
    "ToolKind",
    "ToolSchema",
    "ModelSettings",
    "Usage",
    "ToolCallRequest",
    "HostedToolCall",
    "ModelRequest",
    "ModelResponse",
    # Guardrails
    "GuardrailKind",
    "GuardrailResult",
    "GuardrailRecord",
    # Streaming events
    "MessageType",
    "ProgressStatus",
    "BaseRuntimeMessage",
    "ProgressMessage",
    "AgentUpdatedMessage",
    "RunItemMessage",
    # Result
    "RunResult",
]
