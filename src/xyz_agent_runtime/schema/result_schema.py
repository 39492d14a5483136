"""
@file_name: result_schema.py
@author: NetMind.AI
@date: 2026-03-02
@description: RunResult - the single typed value a successful run produces

A RunResult exists only for successful runs. Failures surface as exceptions
from utils.exceptions and never produce a partial result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Type, TypeVar, Union

from .guardrail_schema import GuardrailRecord
from .model_schema import ModelResponse, Usage
from .run_item_schema import RunItem

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_definition.agent import Agent

T = TypeVar("T")


@dataclass
class RunResult:
    """
    Result of a completed run

    Attributes:
        input: The original run input (text or list of history items)
        final_output: Coerced final output (str, or an instance of the agent's output type)
        history: Full ordered history of the run
        last_agent: Agent that produced the final output
        guardrail_records: Guardrail trips that did not end the run (empty while every trip is fatal)
        input_guardrail_results: Every input guardrail evaluation
        output_guardrail_results: Every output guardrail evaluation
        raw_responses: Every ModelResponse received, in order
        usage: Accumulated token usage
        turns: Number of model round-trips performed
    """
    input: Union[str, List[RunItem]]
    final_output: Any
    history: List[RunItem]
    last_agent: "Agent"
    guardrail_records: List[GuardrailRecord] = field(default_factory=list)
    input_guardrail_results: List[GuardrailRecord] = field(default_factory=list)
    output_guardrail_results: List[GuardrailRecord] = field(default_factory=list)
    raw_responses: List[ModelResponse] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    turns: int = 0

    def final_output_as(self, cls: Type[T], raise_if_incorrect_type: bool = False) -> T:
        """
        Return final_output typed as cls

        Args:
            cls: Expected type
            raise_if_incorrect_type: Raise TypeError when final_output is not an instance of cls
        """
        if raise_if_incorrect_type and not isinstance(self.final_output, cls):
            raise TypeError(
                f"Final output is {type(self.final_output).__name__}, not {cls.__name__}"
            )
        return self.final_output

    def to_input_list(self) -> List[RunItem]:
        """History of this run, usable as the input of a follow-up run"""
        return list(self.history)

    def __str__(self) -> str:
        return (
            f"RunResult(last_agent={self.last_agent.name!r}, turns={self.turns}, "
            f"items={len(self.history)}, final_output={self.final_output!r})"
        )
