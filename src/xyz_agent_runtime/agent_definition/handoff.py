"""
@file_name: handoff.py
@author: NetMind.AI
@date: 2026-03-03
@description: Handoffs - transferring control of the run to another agent

A handoff is exposed to the model as a pseudo-tool (default name
"transfer_to_<agent>"). When the model calls it, the HandoffResolver swaps
the active agent; from then on the new agent's tools, handoffs and
guardrails apply.

Handoff flow:
    1. Validate the payload against input_type (if any)
    2. Run on_handoff as a side effect (faults are recorded, never escalated)
    3. Apply the input filter to HandoffInputData -> new history
    4. Swap the active agent

Bundled input filters (see handoff_filters below):
- remove_all_tools: Drop every tool/handoff item from the carried history
- keep_last_n_items(n): Keep only the last n items
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from xyz_agent_runtime.config import (
    HANDOFF_TOOL_DESCRIPTION_TEMPLATE,
    HANDOFF_TOOL_PREFIX,
    HANDOFF_TRANSFER_MESSAGE_TEMPLATE,
)
from xyz_agent_runtime.schema import ItemType, RunItem, ToolKind, ToolSchema
from xyz_agent_runtime.utils import ToolInputError, normalize_tool_name

if TYPE_CHECKING:
    from .agent import Agent


# ============================================================================
# Handoff Input Data
# ============================================================================

@dataclass(frozen=True)
class HandoffInputData:
    """
    History segments handed to an input filter

    Attributes:
        input_history: Items that were the input of the run
        pre_handoff_items: Items produced by the run before the handoff turn
        new_items: Items produced in the handoff turn (including the handoff call and its output)
    """
    input_history: Tuple[RunItem, ...]
    pre_handoff_items: Tuple[RunItem, ...]
    new_items: Tuple[RunItem, ...]

    def all_items(self) -> List[RunItem]:
        return [*self.input_history, *self.pre_handoff_items, *self.new_items]

    def clone(self, **changes: Any) -> "HandoffInputData":
        return replace(self, **changes)


HandoffInputFilter = Callable[[HandoffInputData], Any]


# ============================================================================
# Handoff
# ============================================================================

@dataclass(frozen=True)
class Handoff:
    """
    A handoff target with its model-visible pseudo-tool

    Attributes:
        agent: Target agent
        tool_name: Pseudo-tool name the model calls
        tool_description: Pseudo-tool description
        input_type: Pydantic model the handoff payload must match (None = no payload)
        on_handoff: Side-effect callback, called as (ctx_view) or (ctx_view, payload) when input_type is set
        input_filter: HandoffInputData -> HandoffInputData (sync or async)
    """
    agent: "Agent"
    tool_name: str
    tool_description: str
    input_type: Optional[Type[BaseModel]] = None
    on_handoff: Optional[Callable[..., Any]] = None
    input_filter: Optional[HandoffInputFilter] = None

    @property
    def agent_name(self) -> str:
        return self.agent.name

    @property
    def params_json_schema(self) -> Dict[str, Any]:
        if self.input_type is None:
            return {"type": "object", "properties": {}, "additionalProperties": False}
        return self.input_type.model_json_schema()

    def to_schema(self) -> ToolSchema:
        return ToolSchema(
            name=self.tool_name,
            description=self.tool_description,
            parameters=self.params_json_schema,
            kind=ToolKind.HANDOFF,
        )

    def parse_input(self, arguments: str) -> Optional[BaseModel]:
        """
        Validate the handoff payload

        Raises:
            ToolInputError: Payload does not match input_type
        """
        if self.input_type is None:
            return None
        try:
            return self.input_type.model_validate_json(arguments or "{}")
        except ValidationError as e:
            raise ToolInputError(
                tool_name=self.tool_name,
                message=f"Invalid handoff payload for '{self.tool_name}': {e}",
                cause=e,
            ) from e

    def get_transfer_message(self) -> str:
        return HANDOFF_TRANSFER_MESSAGE_TEMPLATE.format(agent_name=self.agent.name)

    @staticmethod
    def default_tool_name(agent: "Agent") -> str:
        return f"{HANDOFF_TOOL_PREFIX}{normalize_tool_name(agent.name)}"

    @staticmethod
    def default_tool_description(agent: "Agent") -> str:
        return HANDOFF_TOOL_DESCRIPTION_TEMPLATE.format(
            agent_name=agent.name,
            description=agent.handoff_description or "",
        ).strip()


def handoff(
    agent: "Agent",
    tool_name_override: Optional[str] = None,
    tool_description_override: Optional[str] = None,
    on_handoff: Optional[Callable[..., Any]] = None,
    input_type: Optional[Type[BaseModel]] = None,
    input_filter: Optional[HandoffInputFilter] = None,
) -> Handoff:
    """
    Create a Handoff to agent

    Example:
        >>> class EscalationData(BaseModel):
        ...     reason: str
        >>> h = handoff(billing_agent, on_handoff=log_escalation, input_type=EscalationData)
    """
    return Handoff(
        agent=agent,
        tool_name=tool_name_override or Handoff.default_tool_name(agent),
        tool_description=tool_description_override or Handoff.default_tool_description(agent),
        input_type=input_type,
        on_handoff=on_handoff,
        input_filter=input_filter,
    )


# ============================================================================
# Bundled Input Filters
# ============================================================================

_TOOL_ITEM_TYPES = frozenset({
    ItemType.TOOL_CALL,
    ItemType.TOOL_OUTPUT,
    ItemType.HOSTED_TOOL_CALL,
    ItemType.HANDOFF_CALL,
    ItemType.HANDOFF_OUTPUT,
})


def _without_tool_items(items: Tuple[RunItem, ...]) -> Tuple[RunItem, ...]:
    return tuple(item for item in items if item.item_type not in _TOOL_ITEM_TYPES)


def remove_all_tools(data: HandoffInputData) -> HandoffInputData:
    """Drop tool calls, tool outputs and handoff items from every segment"""
    return data.clone(
        input_history=_without_tool_items(data.input_history),
        pre_handoff_items=_without_tool_items(data.pre_handoff_items),
        new_items=_without_tool_items(data.new_items),
    )


def keep_last_n_items(n: int) -> HandoffInputFilter:
    """Build a filter that keeps only the last n items, preserving each item's segment"""
    if n < 0:
        raise ValueError("n must be >= 0")

    def _filter(data: HandoffInputData) -> HandoffInputData:
        segments = (data.input_history, data.pre_handoff_items, data.new_items)
        cutoff = max(0, sum(len(s) for s in segments) - n)
        kept = []
        offset = 0
        for segment in segments:
            start = min(len(segment), max(0, cutoff - offset))
            kept.append(segment[start:])
            offset += len(segment)
        return data.clone(input_history=kept[0], pre_handoff_items=kept[1], new_items=kept[2])

    return _filter
