"""
@file_name: run_item_schema.py
@author: NetMind.AI
@date: 2026-03-02
@description: Conversation history items produced during a run

The run history is an ordered list of RunItems. Every item records which agent
produced it and in which turn, so a history snapshot attached to an error is
enough to diagnose a failed run without replaying it.

Item Architecture:
- BaseRunItem: Common fields (agent_name, turn, timestamp)
- UserInputItem: Input given to the run (or a filtered carry-over after handoff)
- AssistantMessageItem: Final/intermediate content produced by the model
- ToolCallItem / ToolOutputItem: A function or agent tool request and its result
- HostedToolCallItem: A call executed by the model provider itself (passthrough)
- HandoffCallItem / HandoffOutputItem: A handoff request and its resolution
- OutputRetryItem: Corrective message after a final output failed validation

Usage:
    history.append(ToolCallItem(agent_name="triage", turn=1, call_id="c1",
                                tool_name="lookup", arguments='{"q": "x"}'))
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field
from typing_extensions import Annotated


# ============================================================================
# Item Type Enum
# ============================================================================

class ItemType(str, Enum):
    """History item type"""
    USER_INPUT = "user_input"
    ASSISTANT_MESSAGE = "assistant_message"
    TOOL_CALL = "tool_call"
    TOOL_OUTPUT = "tool_output"
    HOSTED_TOOL_CALL = "hosted_tool_call"
    HANDOFF_CALL = "handoff_call"
    HANDOFF_OUTPUT = "handoff_output"
    OUTPUT_RETRY = "output_retry"


# ============================================================================
# Base Item
# ============================================================================

class BaseRunItem(BaseModel):
    """
    Base class for all history items

    Attributes:
        item_type: Discriminator
        agent_name: Agent that was active when the item was produced
        turn: Turn number (0 for items that precede the first model call)
        timestamp: Unix timestamp when the item was created
    """
    item_type: ItemType
    agent_name: Optional[str] = None
    turn: int = 0
    timestamp: float = Field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with enums rendered as their string values"""
        return self.model_dump(mode="json")


# ============================================================================
# Concrete Items
# ============================================================================

class UserInputItem(BaseRunItem):
    """Input to the run"""
    item_type: Literal[ItemType.USER_INPUT] = ItemType.USER_INPUT
    content: str


class AssistantMessageItem(BaseRunItem):
    """Content produced by the model (text or structured candidate)"""
    item_type: Literal[ItemType.ASSISTANT_MESSAGE] = ItemType.ASSISTANT_MESSAGE
    content: Any = None


class ToolCallItem(BaseRunItem):
    """A function/agent tool call requested by the model"""
    item_type: Literal[ItemType.TOOL_CALL] = ItemType.TOOL_CALL
    call_id: str
    tool_name: str
    arguments: str = "{}"


class ToolOutputItem(BaseRunItem):
    """
    Result of a tool call

    Attributes:
        output: Text the model sees (tool result or converted error message)
        is_error: True when output is a converted ToolInputError/ToolExecutionError
    """
    item_type: Literal[ItemType.TOOL_OUTPUT] = ItemType.TOOL_OUTPUT
    call_id: str
    tool_name: str
    output: str
    is_error: bool = False


class HostedToolCallItem(BaseRunItem):
    """A capability executed on the model provider's infrastructure"""
    item_type: Literal[ItemType.HOSTED_TOOL_CALL] = ItemType.HOSTED_TOOL_CALL
    call_id: str
    tool_name: str
    arguments: str = "{}"
    output: str = ""


class HandoffCallItem(BaseRunItem):
    """The model asked to transfer control to another agent"""
    item_type: Literal[ItemType.HANDOFF_CALL] = ItemType.HANDOFF_CALL
    call_id: str
    tool_name: str
    target_agent: str
    arguments: str = "{}"


class HandoffOutputItem(BaseRunItem):
    """
    Resolution of a handoff call

    Attributes:
        source_agent / target_agent: Agents on either side of the swap
        output: Tool output recorded for the handoff call
        callback_error: Fault raised by on_handoff (recorded, never escalated)
    """
    item_type: Literal[ItemType.HANDOFF_OUTPUT] = ItemType.HANDOFF_OUTPUT
    call_id: str
    tool_name: str
    source_agent: str
    target_agent: str
    output: str
    callback_error: Optional[str] = None


class OutputRetryItem(BaseRunItem):
    """Corrective instruction sent after a final output failed validation"""
    item_type: Literal[ItemType.OUTPUT_RETRY] = ItemType.OUTPUT_RETRY
    content: str
    attempt: int = 1


RunItem = Annotated[
    Union[
        UserInputItem,
        AssistantMessageItem,
        ToolCallItem,
        ToolOutputItem,
        HostedToolCallItem,
        HandoffCallItem,
        HandoffOutputItem,
        OutputRetryItem,
    ],
    Field(discriminator="item_type"),
]
