"""
@file_name: response_processor.py
@author: NetMind.AI
@date: 2026-03-04
@description: Model response classification

Classifies one ModelResponse against the active agent into the turn kind the
Runner acts on.

Design principles:
- Pure function processing: no side effects, easy to test
- Single responsibility: only responsible for response classification
- State separation: does not modify the RunContext, returns a ProcessedResponse for the caller to use

Classification rules:
    tool_calls addressed to handoff pseudo-tools -> handoff requests (more than one is ambiguous)
    tool_calls addressed to tools               -> tool requests (request order kept)
    any other name                              -> UnknownToolError
    no tool calls                               -> final output (response.content)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from loguru import logger

from xyz_agent_runtime.agent_definition import Handoff, HostedTool
from xyz_agent_runtime.schema import HostedToolCall, ModelResponse, ToolCallRequest
from xyz_agent_runtime.utils import AmbiguousHandoffError, UnknownToolError

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_definition import Agent, Tool
    from .tool_invoker import ToolRegistry


class ResponseType(str, Enum):
    """Response type enum"""
    FINAL_OUTPUT = "final_output"
    TOOL_CALLS = "tool_calls"
    HANDOFF = "handoff"


@dataclass
class ProcessedResponse:
    """
    Processed response result

    Attributes:
        type: What the Runner does with this turn
        tool_calls: (request, tool) pairs in request order
        handoff: (request, handoff) pair, if the model asked for a handoff
        hosted_calls: (call, hosted tool) pairs already executed by the provider
        content: Final candidate (only meaningful for FINAL_OUTPUT) or text accompanying calls
    """
    type: ResponseType
    tool_calls: List[Tuple[ToolCallRequest, "Tool"]] = field(default_factory=list)
    handoff: Optional[Tuple[ToolCallRequest, Handoff]] = None
    hosted_calls: List[Tuple[HostedToolCall, HostedTool]] = field(default_factory=list)
    content: Any = None

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


class ResponseProcessor:
    """
    Model response classifier

    Usage:
        >>> processor = ResponseProcessor()
        >>> processed = processor.process(response, agent, registry)
        >>> if processed.type == ResponseType.HANDOFF:
        ...     ...
    """

    def process(
        self,
        response: ModelResponse,
        agent: "Agent",
        registry: "ToolRegistry",
    ) -> ProcessedResponse:
        """
        Classify a response

        Raises:
            UnknownToolError: A call names something the agent does not expose
            AmbiguousHandoffError: More than one handoff requested
        """
        handoffs = {h.tool_name: h for h in agent.get_handoffs()}

        tool_calls: List[Tuple[ToolCallRequest, "Tool"]] = []
        handoff_calls: List[Tuple[ToolCallRequest, Handoff]] = []
        for request in response.tool_calls:
            if request.name in handoffs:
                handoff_calls.append((request, handoffs[request.name]))
            else:
                tool = registry.get(request.name)
                if isinstance(tool, HostedTool):
                    raise UnknownToolError(
                        request.name,
                        message=f"Hosted tool '{request.name}' cannot be executed locally",
                        agent_name=agent.name,
                    )
                tool_calls.append((request, tool))

        if len(handoff_calls) > 1:
            raise AmbiguousHandoffError(
                [request.name for request, _ in handoff_calls],
                agent_name=agent.name,
            )

        hosted_calls = []
        for call in response.hosted_tool_calls:
            tool = registry.get(call.name)
            if not isinstance(tool, HostedTool):
                raise UnknownToolError(
                    call.name,
                    message=f"Provider reported hosted call '{call.name}' but the tool is not hosted",
                    agent_name=agent.name,
                )
            hosted_calls.append((call, tool))

        if handoff_calls:
            response_type = ResponseType.HANDOFF
        elif tool_calls:
            response_type = ResponseType.TOOL_CALLS
        else:
            response_type = ResponseType.FINAL_OUTPUT

        logger.debug(
            f"  📨 Response classified as {response_type.value} "
            f"(tools={len(tool_calls)}, handoffs={len(handoff_calls)}, hosted={len(hosted_calls)})"
        )
        return ProcessedResponse(
            type=response_type,
            tool_calls=tool_calls,
            handoff=handoff_calls[0] if handoff_calls else None,
            hosted_calls=hosted_calls,
            content=response.content,
        )
