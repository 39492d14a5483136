"""
@file_name: guardrail.py
@author: NetMind.AI
@date: 2026-03-03
@description: Input and output guardrails

A guardrail is a named check. Input guardrails run on the raw run input before
the first model call; output guardrails run on the candidate final output
before it is coerced. Functions may be sync or async and must return a
GuardrailResult.

Usage:
    @input_guardrail
    async def no_homework(ctx, agent, run_input) -> GuardrailResult:
        return GuardrailResult(tripwire_triggered="homework" in str(run_input))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Union, overload

from xyz_agent_runtime.schema import GuardrailKind, GuardrailRecord, GuardrailResult
from xyz_agent_runtime.utils import GuardrailExecutionError, call_maybe_async

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_runtime._agent_runtime_steps.context import RunContextView
    from .agent import Agent

GuardrailFunction = Callable[["RunContextView", "Agent", Any], Any]


async def _evaluate(
    guardrail_function: GuardrailFunction,
    name: str,
    kind: GuardrailKind,
    ctx_view: "RunContextView",
    agent: "Agent",
    payload: Any,
) -> GuardrailRecord:
    try:
        result = await call_maybe_async(guardrail_function, ctx_view, agent, payload)
    except Exception as e:
        raise GuardrailExecutionError(guardrail_name=name, kind=kind.value, cause=e) from e

    if not isinstance(result, GuardrailResult):
        raise GuardrailExecutionError(
            guardrail_name=name,
            kind=kind.value,
            cause=TypeError(f"expected GuardrailResult, got {type(result).__name__}"),
        )
    return GuardrailRecord(guardrail_name=name, kind=kind, agent_name=agent.name, result=result)


@dataclass(frozen=True)
class InputGuardrail:
    """Check run against the raw input of the run"""
    guardrail_function: GuardrailFunction
    name: Optional[str] = None

    @property
    def kind(self) -> GuardrailKind:
        return GuardrailKind.INPUT

    def get_name(self) -> str:
        return self.name or getattr(self.guardrail_function, "__name__", "input_guardrail")

    async def run(self, ctx_view: "RunContextView", agent: "Agent", run_input: Any) -> GuardrailRecord:
        """
        Evaluate the guardrail

        Raises:
            GuardrailExecutionError: The function raised or returned something other than GuardrailResult
        """
        return await _evaluate(self.guardrail_function, self.get_name(), self.kind, ctx_view, agent, run_input)


@dataclass(frozen=True)
class OutputGuardrail:
    """Check run against the candidate final output"""
    guardrail_function: GuardrailFunction
    name: Optional[str] = None

    @property
    def kind(self) -> GuardrailKind:
        return GuardrailKind.OUTPUT

    def get_name(self) -> str:
        return self.name or getattr(self.guardrail_function, "__name__", "output_guardrail")

    async def run(self, ctx_view: "RunContextView", agent: "Agent", output: Any) -> GuardrailRecord:
        return await _evaluate(self.guardrail_function, self.get_name(), self.kind, ctx_view, agent, output)


Guardrail = Union[InputGuardrail, OutputGuardrail]


# ============================================================================
# Decorators
# ============================================================================

@overload
def input_guardrail(func: GuardrailFunction) -> InputGuardrail: ...


@overload
def input_guardrail(*, name: Optional[str] = None) -> Callable[[GuardrailFunction], InputGuardrail]: ...


def input_guardrail(func=None, *, name=None):
    """Decorator creating an InputGuardrail; usable with or without arguments"""
    def decorator(f: GuardrailFunction) -> InputGuardrail:
        return InputGuardrail(guardrail_function=f, name=name)

    if func is not None:
        return decorator(func)
    return decorator


@overload
def output_guardrail(func: GuardrailFunction) -> OutputGuardrail: ...


@overload
def output_guardrail(*, name: Optional[str] = None) -> Callable[[GuardrailFunction], OutputGuardrail]: ...


def output_guardrail(func=None, *, name=None):
    """Decorator creating an OutputGuardrail; usable with or without arguments"""
    def decorator(f: GuardrailFunction) -> OutputGuardrail:
        return OutputGuardrail(guardrail_function=f, name=name)

    if func is not None:
        return decorator(func)
    return decorator
