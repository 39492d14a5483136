"""
@file_name: model_schema.py
@author: NetMind.AI
@date: 2026-03-02
@description: Contract between the runtime and the Model Client

The runtime never talks to a provider directly. It builds a ModelRequest and
expects a ModelResponse back; everything provider-specific (wire format,
authentication, retries) lives behind the ModelClient interface.

Request:  instructions + ordered history + tool schemas (+ output schema)
Response: exactly one of
    - final content (text or structured candidate)
    - one-or-more tool-call requests
    - one handoff request (a tool call addressed to a handoff pseudo-tool)
  plus any calls the provider already executed itself (hosted tools).
"""

from __future__ import annotations

import json
import uuid
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .run_item_schema import RunItem


# ============================================================================
# Tool Schemas
# ============================================================================

class ToolKind(str, Enum):
    """What the model is looking at when it sees a tool schema"""
    FUNCTION = "function"
    HOSTED = "hosted"
    AGENT = "agent"
    HANDOFF = "handoff"


class ToolSchema(BaseModel):
    """
    Model-visible description of a callable capability

    Attributes:
        name: Tool name (unique within the active agent)
        description: What the tool does
        parameters: JSON schema of the arguments object
        kind: Function / hosted / agent / handoff pseudo-tool
        hosted_config: Provider-specific settings for hosted capabilities
    """
    name: str
    description: str = ""
    parameters: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})
    kind: ToolKind = ToolKind.FUNCTION
    hosted_config: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Model Settings
# ============================================================================

class ModelSettings(BaseModel):
    """Sampling / tool-use settings forwarded to the Model Client"""
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    tool_choice: Optional[Union[Literal["auto", "required", "none"], str]] = None
    parallel_tool_calls: Optional[bool] = None

    def resolve(self, override: Optional["ModelSettings"]) -> "ModelSettings":
        """Return a copy where every non-None field of override wins"""
        if override is None:
            return self.model_copy()
        changes = {k: v for k, v in override.model_dump().items() if v is not None}
        return self.model_copy(update=changes)


# ============================================================================
# Usage
# ============================================================================

class Usage(BaseModel):
    """Token accounting for one response or a whole run"""
    requests: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    def add(self, other: "Usage") -> "Usage":
        """Return a new Usage with other's counters added"""
        return Usage(
            requests=self.requests + other.requests,
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


# ============================================================================
# Request / Response
# ============================================================================

def _new_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:12]}"


def _arguments_to_json(value: Any) -> str:
    if value is None:
        return "{}"
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


class ToolCallRequest(BaseModel):
    """
    A tool call requested by the model

    arguments is kept as the raw JSON text the model produced; validation
    happens in the ToolInvoker against the tool's own schema.
    """
    call_id: str = Field(default_factory=_new_call_id)
    name: str
    arguments: str = "{}"

    @field_validator("arguments", mode="before")
    @classmethod
    def _coerce_arguments(cls, value: Any) -> str:
        return _arguments_to_json(value)


class HostedToolCall(BaseModel):
    """A call the provider executed on its own infrastructure"""
    call_id: str = Field(default_factory=_new_call_id)
    name: str
    arguments: str = "{}"
    output: str = ""

    @field_validator("arguments", mode="before")
    @classmethod
    def _coerce_arguments(cls, value: Any) -> str:
        return _arguments_to_json(value)


class ModelRequest(BaseModel):
    """
    Everything the Model Client needs for one round-trip

    Attributes:
        agent_name: Active agent (for logging / routing in the client)
        model: Model name override (None = client default)
        instructions: Resolved system instructions
        history: Ordered conversation history
        tools: Schemas of function tools, hosted tools and handoff pseudo-tools
        output_schema: JSON schema of the structured final output (None = plain text)
        output_schema_name: Name of the structured output type
        model_settings: Resolved model settings
    """
    agent_name: str
    model: Optional[str] = None
    instructions: Optional[str] = None
    history: List[RunItem] = Field(default_factory=list)
    tools: List[ToolSchema] = Field(default_factory=list)
    output_schema: Optional[Dict[str, Any]] = None
    output_schema_name: Optional[str] = None
    model_settings: ModelSettings = Field(default_factory=ModelSettings)


class ModelResponse(BaseModel):
    """
    One model round-trip

    Attributes:
        content: Final content candidate (text or structured); ignored when tool_calls is non-empty
        tool_calls: Requested tool/handoff calls, in the order the model produced them
        hosted_tool_calls: Calls already executed by the provider
        usage: Token accounting
        response_id: Provider response identifier
    """
    content: Any = None
    tool_calls: List[ToolCallRequest] = Field(default_factory=list)
    hosted_tool_calls: List[HostedToolCall] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)
    response_id: Optional[str] = None
