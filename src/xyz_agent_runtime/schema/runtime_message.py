"""
@file_name: runtime_message.py
@author: NetMind.AI
@date: 2026-03-02
@description: Runtime events yielded by Runner.run_streamed

The streamed run is an async generator. Every element except the last is one
of the messages below; the last element is the RunResult.

Message Architecture:
- BaseRuntimeMessage: Abstract base class for all runtime messages
- ProgressMessage: Step-by-step progress of the turn loop
- AgentUpdatedMessage: The active agent changed (run start or handoff)
- RunItemMessage: A new item was appended to the run history

Usage:
    async for event in Runner.run_streamed(agent, "hello"):
        if isinstance(event, ProgressMessage):
            display_progress(event)
        elif isinstance(event, RunItemMessage):
            display_item(event.item)
        elif isinstance(event, RunResult):
            result = event
"""

import time
from abc import ABC
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .run_item_schema import RunItem


# ============================================================================
# Message Type Enums
# ============================================================================

class MessageType(str, Enum):
    """Runtime message type enumeration"""
    PROGRESS = "progress"
    AGENT_UPDATED = "agent_updated"
    RUN_ITEM = "run_item"


class ProgressStatus(str, Enum):
    """Indicates the current state of a progress step"""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# ============================================================================
# Base Runtime Message
# ============================================================================

class BaseRuntimeMessage(BaseModel, ABC):
    """
    Base class for all runtime messages

    - message_type: The type of message, serialized as "type"
    - timestamp: Unix timestamp when the message was created
    """
    model_config = ConfigDict(use_enum_values=True)

    message_type: MessageType = Field(serialization_alias="type")
    timestamp: float = Field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert message to dictionary, with message_type serialized as type"""
        data = self.model_dump(mode="json")
        if "message_type" in data:
            data["type"] = data.pop("message_type")
        return data


# ============================================================================
# Progress Messages
# ============================================================================

class ProgressMessage(BaseRuntimeMessage):
    """
    Progress tracking message

    Example:
        >>> msg = ProgressMessage(
        ...     step="2",
        ...     title="Model call",
        ...     description="Turn 1 with agent 'triage'",
        ...     status=ProgressStatus.RUNNING,
        ... )

    Attributes:
        step: Step identifier (e.g., "0", "1", "3.1")
        title: Human-readable step title
        description: Detailed description of what's happening
        status: Current status (running/completed/failed)
        substeps: List of substep descriptions (optional)
        details: Additional structured data (optional)
    """
    message_type: Literal[MessageType.PROGRESS] = MessageType.PROGRESS
    step: str
    title: str
    description: str
    status: ProgressStatus
    substeps: List[str] = Field(default_factory=list)
    details: Optional[Dict[str, Any]] = None


# ============================================================================
# Agent / Item Messages
# ============================================================================

class AgentUpdatedMessage(BaseRuntimeMessage):
    """The active agent changed"""
    message_type: Literal[MessageType.AGENT_UPDATED] = MessageType.AGENT_UPDATED
    agent_name: str
    previous_agent: Optional[str] = None
    turn: int = 0


class RunItemMessage(BaseRuntimeMessage):
    """A history item was produced"""
    message_type: Literal[MessageType.RUN_ITEM] = MessageType.RUN_ITEM
    item: RunItem
