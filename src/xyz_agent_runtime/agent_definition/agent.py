"""
@file_name: agent.py
@author: NetMind.AI
@date: 2026-03-03
@description: Agent - immutable description of one participant in a run

An Agent is pure data: it has no run method and holds no per-run state, so a
single Agent can be shared by many concurrent runs. All behavior lives in the
Runner and the components it drives.

Construction validates:
- name is non-empty
- tool names and handoff pseudo-tool names are unique within the agent
- tool_use_behavior is a known value
- output_type can be turned into an output schema

Usage:
    spanish = Agent(name="spanish", instructions="Translate to Spanish")
    triage = Agent(
        name="triage",
        instructions="Route the request",
        tools=[spanish.as_tool("translate_to_spanish", "Translate text to Spanish")],
        handoffs=[billing_agent],
    )
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence, Tuple, Union

from xyz_agent_runtime.schema import ModelSettings
from xyz_agent_runtime.utils import ConfigurationError, call_maybe_async, normalize_tool_name
from .guardrail import InputGuardrail, OutputGuardrail
from .handoff import Handoff, handoff
from .lifecycle import AgentHooks
from .policy import TOOL_USE_BEHAVIORS, StopAtTools, ToolErrorPolicy, ToolUseBehavior
from .tool import AgentAsToolWrapper, Tool

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_runtime._agent_runtime_steps.context import RunContextView
    from xyz_agent_runtime.agent_runtime.output_coercer import OutputSchema

Instructions = Union[str, Callable[["RunContextView", "Agent"], Any], None]


@dataclass(frozen=True, eq=False)
class Agent:
    """
    Immutable agent definition

    Attributes:
        name: Agent name (also used for the default handoff pseudo-tool name)
        instructions: Static text, or a sync/async function (ctx_view, agent) -> str
        handoff_description: Shown to other agents in the handoff pseudo-tool description
        tools: Ordered tools (names unique)
        handoffs: Ordered handoff targets (Agent or Handoff)
        input_guardrails: Checks on the raw run input (only those of the starting agent run)
        output_guardrails: Checks on the candidate final output
        output_type: None/str for plain text, otherwise any type pydantic can validate
        model: Model name override
        model_settings: Model settings for this agent
        hooks: Per-agent lifecycle hooks
        tool_use_behavior: "run_llm_again" | "stop_on_first_tool" | StopAtTools
        tool_error_policy: Agent-level ToolErrorPolicy
    """
    name: str
    instructions: Instructions = None
    handoff_description: Optional[str] = None
    tools: Sequence[Tool] = ()
    handoffs: Sequence[Union["Agent", Handoff]] = ()
    input_guardrails: Sequence[InputGuardrail] = ()
    output_guardrails: Sequence[OutputGuardrail] = ()
    output_type: Any = None
    model: Optional[str] = None
    model_settings: ModelSettings = field(default_factory=ModelSettings)
    hooks: Optional[AgentHooks] = None
    tool_use_behavior: ToolUseBehavior = "run_llm_again"
    tool_error_policy: Optional[ToolErrorPolicy] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ConfigurationError("Agent name must be a non-empty string")

        # Freeze the sequences so shared agents cannot be mutated through them
        for attr in ("tools", "handoffs", "input_guardrails", "output_guardrails"):
            object.__setattr__(self, attr, tuple(getattr(self, attr) or ()))

        if not isinstance(self.tool_use_behavior, StopAtTools) and self.tool_use_behavior not in TOOL_USE_BEHAVIORS:
            raise ConfigurationError(
                f"Unknown tool_use_behavior {self.tool_use_behavior!r}",
                agent_name=self.name,
            )

        object.__setattr__(self, "_handoffs", tuple(self._build_handoffs()))
        self._validate_names()
        object.__setattr__(self, "_output_schema", self._build_output_schema())

    # =========================================================================
    # Validation
    # =========================================================================

    def _build_handoffs(self) -> List[Handoff]:
        built = []
        for item in self.handoffs:
            if isinstance(item, Handoff):
                built.append(item)
            elif isinstance(item, Agent):
                built.append(handoff(item))
            else:
                raise ConfigurationError(
                    f"Handoff targets must be Agent or Handoff, got {type(item).__name__}",
                    agent_name=self.name,
                )
        return built

    def _validate_names(self) -> None:
        seen = set()
        names = [tool.name for tool in self.tools] + [h.tool_name for h in self._handoffs]
        for name in names:
            if not name:
                raise ConfigurationError("Tool names must be non-empty", agent_name=self.name)
            if name in seen:
                raise ConfigurationError(
                    f"Duplicate tool name '{name}' on agent '{self.name}'",
                    agent_name=self.name,
                    tool_name=name,
                )
            seen.add(name)

    def _build_output_schema(self) -> "OutputSchema":
        from xyz_agent_runtime.agent_runtime.output_coercer import OutputSchema
        return OutputSchema.for_agent(self.name, self.output_type)

    # =========================================================================
    # Accessors
    # =========================================================================

    def get_handoffs(self) -> Tuple[Handoff, ...]:
        """Handoffs normalized to Handoff objects, in declared order"""
        return self._handoffs

    def get_output_schema(self) -> "OutputSchema":
        return self._output_schema

    async def resolve_instructions(self, ctx_view: "RunContextView") -> Optional[str]:
        """
        Resolve instructions to text for the current turn

        Raises:
            ConfigurationError: A dynamic instructions function returned something other than str
        """
        if self.instructions is None or isinstance(self.instructions, str):
            return self.instructions
        resolved = await call_maybe_async(self.instructions, ctx_view, self)
        if resolved is not None and not isinstance(resolved, str):
            raise ConfigurationError(
                f"Instructions function must return str, got {type(resolved).__name__}",
                agent_name=self.name,
            )
        return resolved

    # =========================================================================
    # Derivation
    # =========================================================================

    def clone(self, **changes: Any) -> "Agent":
        """
        Return a modified copy; the copy is validated like a new Agent

        Example:
            >>> pirate = agent.clone(name="pirate", instructions="Talk like a pirate")
        """
        return dataclasses.replace(self, **changes)

    def as_tool(
        self,
        tool_name: Optional[str] = None,
        tool_description: Optional[str] = None,
        *,
        share_context: bool = False,
        max_turns: Optional[int] = None,
        output_extractor: Optional[Callable[..., Any]] = None,
        error_policy: Optional[ToolErrorPolicy] = None,
    ) -> AgentAsToolWrapper:
        """
        Expose this agent as a tool of another agent

        The calling agent stays in control; this agent runs in a nested run.
        """
        return AgentAsToolWrapper(
            agent=self,
            name=tool_name or normalize_tool_name(self.name),
            description=tool_description or self.handoff_description or f"Run the {self.name} agent",
            share_context=share_context,
            max_turns=max_turns,
            output_extractor=output_extractor,
            error_policy=error_policy,
        )

    def __repr__(self) -> str:
        return f"Agent(name={self.name!r}, tools={[t.name for t in self.tools]}, handoffs={[h.tool_name for h in self._handoffs]})"
