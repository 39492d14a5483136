"""
@file_name: tool.py
@author: NetMind.AI
@date: 2026-03-03
@description: Tool kinds - function tools, hosted tools and agents exposed as tools

All tool kinds share one capability:

    async invoke(call, tool_context) -> str

and raise typed errors on failure (ToolInputError / ToolExecutionError). What
happens with those errors is decided by the ToolInvoker and the effective
ToolErrorPolicy, never by the tool itself.

Tool kinds:
- FunctionTool: Local Python callable (sync callables run in a worker thread)
- HostedTool: Capability executed by the model provider (passthrough)
- AgentAsToolWrapper: Nested run of another agent

Usage:
    class WeatherArgs(BaseModel):
        city: str

    @function_tool(WeatherArgs)
    async def get_weather(city: str) -> str:
        '''Get the weather for a city'''
        return f"Sunny in {city}"
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Type, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from xyz_agent_runtime.config import LOG_PREVIEW_LENGTH
from xyz_agent_runtime.schema import HostedToolCall, ToolCallRequest, ToolKind, ToolSchema
from xyz_agent_runtime.utils import (
    AgentRuntimeError,
    ToolError,
    ToolExecutionError,
    ToolInputError,
    call_maybe_async,
    to_text,
    truncate_text,
)
from .policy import ToolErrorPolicy

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_runtime._agent_runtime_steps.context import RunContextView
    from xyz_agent_runtime.agent_runtime.run_config import RunConfig
    from xyz_agent_runtime.schema import RunResult
    from .agent import Agent


# ============================================================================
# Tool Context
# ============================================================================

@dataclass(frozen=True)
class ToolContext:
    """
    What a tool sees while it runs

    Attributes:
        run_context: Read-only view of the calling run
        tool_name: Name of the tool being invoked
        call_id: Identifier of the call being served
        run_config: RunConfig of the calling run (used for nested runs)
        remaining_seconds: Remaining wall-clock budget of the calling run (None = unbounded)
    """
    run_context: "RunContextView"
    tool_name: str
    call_id: str
    run_config: Optional["RunConfig"] = None
    remaining_seconds: Optional[float] = None

    @property
    def context(self) -> Any:
        """The user context object of the calling run"""
        return self.run_context.context


class _NoArguments(BaseModel):
    model_config = ConfigDict(extra="forbid")


def _parse_arguments(tool_name: str, params_model: Type[BaseModel], arguments: str) -> BaseModel:
    try:
        return params_model.model_validate_json(arguments or "{}")
    except ValidationError as e:
        raise ToolInputError(
            tool_name=tool_name,
            message=f"Invalid arguments for tool '{tool_name}': {e}",
            cause=e,
        ) from e


# ============================================================================
# Function Tool
# ============================================================================

@dataclass(frozen=True)
class FunctionTool:
    """
    A local Python callable exposed to the model

    The callable receives the validated arguments as keyword arguments, plus
    the ToolContext as first positional argument when takes_context is True.

    Attributes:
        name: Tool name
        description: Description shown to the model
        params_model: Pydantic model describing the arguments
        func: The callable (sync or async)
        takes_context: Pass ToolContext as first argument
        error_policy: Tool-level ToolErrorPolicy override
    """
    name: str
    description: str
    params_model: Type[BaseModel]
    func: Callable[..., Any]
    takes_context: bool = False
    error_policy: Optional[ToolErrorPolicy] = None

    @property
    def kind(self) -> ToolKind:
        return ToolKind.FUNCTION

    @property
    def params_json_schema(self) -> Dict[str, Any]:
        return self.params_model.model_json_schema()

    def to_schema(self) -> ToolSchema:
        return ToolSchema(
            name=self.name,
            description=self.description,
            parameters=self.params_json_schema,
            kind=self.kind,
        )

    async def invoke(self, call: ToolCallRequest, tool_context: ToolContext) -> str:
        """
        Validate arguments and run the callable

        Raises:
            ToolInputError: Arguments are not valid JSON or do not match params_model
            ToolExecutionError: The callable raised
        """
        args = _parse_arguments(self.name, self.params_model, call.arguments)
        kwargs = {name: getattr(args, name) for name in type(args).model_fields}
        positional = (tool_context,) if self.takes_context else ()

        logger.debug(f"    🔧 {self.name}({truncate_text(call.arguments, LOG_PREVIEW_LENGTH)})")
        try:
            result = await call_maybe_async(self.func, *positional, offload_sync=True, **kwargs)
        except ToolError:
            raise
        except Exception as e:
            raise ToolExecutionError(
                tool_name=self.name,
                message=f"Tool '{self.name}' raised {type(e).__name__}: {e}",
                cause=e,
                call_id=call.call_id,
            ) from e
        return to_text(result)


def function_tool(
    params_model: Optional[Type[BaseModel]] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    takes_context: bool = False,
    error_policy: Optional[ToolErrorPolicy] = None,
) -> Callable[[Callable[..., Any]], FunctionTool]:
    """
    Decorator turning a callable into a FunctionTool

    The argument schema is the explicit pydantic model; it is never derived
    from the signature. The description defaults to the callable's docstring.

    Args:
        params_model: Pydantic model for the arguments (None = tool takes no arguments)
        name: Tool name (default: the callable's __name__)
        description: Description (default: docstring)
        takes_context: Pass ToolContext as first positional argument
        error_policy: Tool-level ToolErrorPolicy

    Example:
        >>> @function_tool(AddArgs)
        ... def add(a: int, b: int) -> int:
        ...     '''Add two integers'''
        ...     return a + b
    """
    def decorator(func: Callable[..., Any]) -> FunctionTool:
        return FunctionTool(
            name=name or func.__name__,
            description=description if description is not None else inspect.cleandoc(func.__doc__ or ""),
            params_model=params_model or _NoArguments,
            func=func,
            takes_context=takes_context,
            error_policy=error_policy,
        )

    return decorator


# ============================================================================
# Hosted Tool
# ============================================================================

@dataclass(frozen=True)
class HostedTool:
    """
    A capability executed by the model provider itself (web search, code interpreter, ...)

    The runtime never executes it; invoke() only hands back the output the
    Model Client already reported so the invoker can record it.

    Attributes:
        name: Capability name as the provider knows it
        description: Description shown to the model
        config: Provider-specific configuration forwarded in the tool schema
    """
    name: str
    description: str = ""
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> ToolKind:
        return ToolKind.HOSTED

    @property
    def params_json_schema(self) -> Dict[str, Any]:
        return {}

    def to_schema(self) -> ToolSchema:
        return ToolSchema(
            name=self.name,
            description=self.description,
            parameters={},
            kind=self.kind,
            hosted_config=dict(self.config),
        )

    async def invoke(self, call: Union[HostedToolCall, ToolCallRequest], tool_context: ToolContext) -> str:
        return getattr(call, "output", "") or ""


# ============================================================================
# Agent As Tool
# ============================================================================

class AgentToolInput(BaseModel):
    """Arguments the model fills when calling an agent exposed as a tool"""
    input: str = Field(description="The input to send to the agent")


@dataclass(frozen=True)
class AgentAsToolWrapper:
    """
    Another agent exposed as a tool (delegation without a handoff)

    Each invocation runs the wrapped agent to completion in a nested run with
    its own RunContext. The caller's agent stays active; the nested history is
    never merged into the caller's history.

    Attributes:
        agent: The wrapped agent
        name / description: Model-visible tool identity
        share_context: Give the nested run the caller's user context object (default: None)
        max_turns: max_turns for the nested run (default: the caller's effective default)
        output_extractor: Turns the nested RunResult into the tool output text
        error_policy: Tool-level ToolErrorPolicy
    """
    agent: "Agent"
    name: str
    description: str
    share_context: bool = False
    max_turns: Optional[int] = None
    output_extractor: Optional[Callable[["RunResult"], Any]] = None
    error_policy: Optional[ToolErrorPolicy] = None

    @property
    def kind(self) -> ToolKind:
        return ToolKind.AGENT

    @property
    def params_json_schema(self) -> Dict[str, Any]:
        return AgentToolInput.model_json_schema()

    def to_schema(self) -> ToolSchema:
        return ToolSchema(
            name=self.name,
            description=self.description,
            parameters=self.params_json_schema,
            kind=self.kind,
        )

    async def invoke(self, call: ToolCallRequest, tool_context: ToolContext) -> str:
        """
        Run the wrapped agent and return its final output as text

        Raises:
            ToolInputError: Arguments do not match AgentToolInput
            ToolExecutionError: The nested run failed fatally
        """
        # Runner imports agent_definition; import lazily to keep the dependency one-way at load time
        from xyz_agent_runtime.agent_runtime.runner import Runner

        args = _parse_arguments(self.name, AgentToolInput, call.arguments)
        nested_context = tool_context.context if self.share_context else None
        nested_config = (
            tool_context.run_config.for_nested_run(tool_context.remaining_seconds)
            if tool_context.run_config is not None
            else None
        )

        logger.info(f"    🤖 Delegating to agent '{self.agent.name}' via tool '{self.name}'")
        try:
            result = await Runner.run(
                self.agent,
                args.input,
                context=nested_context,
                max_turns=self.max_turns,
                run_config=nested_config,
            )
        except AgentRuntimeError as e:
            raise ToolExecutionError(
                tool_name=self.name,
                message=f"Nested run of agent '{self.agent.name}' failed: {e.message}",
                cause=e,
                call_id=call.call_id,
            ) from e

        if self.output_extractor is None:
            return to_text(result.final_output)
        try:
            return to_text(await call_maybe_async(self.output_extractor, result))
        except Exception as e:
            raise ToolExecutionError(
                tool_name=self.name,
                message=f"Output extractor of tool '{self.name}' raised {type(e).__name__}: {e}",
                cause=e,
                call_id=call.call_id,
            ) from e


Tool = Union[FunctionTool, HostedTool, AgentAsToolWrapper]
