"""
@file_name: guardrail_engine.py
@author: NetMind.AI
@date: 2026-03-04
@description: Guardrail evaluation

Evaluates ordered guardrails against the raw input (before the first model
call) or the candidate final output (before coercion).

Execution modes:
- Sequential (default): stop at the first trip or failure
- Parallel: evaluate all concurrently, then report in declared order

In both modes the reported trip is the first one in declared order. Every
trip is fatal (GuardrailTripped); a guardrail that raises is fatal too
(GuardrailExecutionError).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Optional, Sequence, Union

from loguru import logger

from xyz_agent_runtime.schema import GuardrailRecord
from xyz_agent_runtime.utils import GuardrailTripped

if TYPE_CHECKING:
    from xyz_agent_runtime.agent_definition import Agent, InputGuardrail, OutputGuardrail
    from ._agent_runtime_steps.context import RunContextView

AnyGuardrail = Union["InputGuardrail", "OutputGuardrail"]


class GuardrailEngine:
    """
    Guardrail evaluator

    Usage:
        >>> engine = GuardrailEngine()
        >>> records = await engine.run_input_guardrails(guardrails, agent, "hi", view)
    """

    def __init__(self, parallel: bool = False):
        """
        Args:
            parallel: Default execution mode, can be overridden per call
        """
        self.parallel = parallel

    async def run_input_guardrails(
        self,
        guardrails: Sequence["InputGuardrail"],
        agent: "Agent",
        run_input: Any,
        ctx_view: "RunContextView",
        parallel: Optional[bool] = None,
    ) -> List[GuardrailRecord]:
        """
        Evaluate input guardrails

        Returns:
            One record per evaluated guardrail (all untripped)

        Raises:
            GuardrailTripped: A guardrail tripped
            GuardrailExecutionError: A guardrail raised
        """
        return await self._run(
            guardrails,
            lambda g: g.run(ctx_view, agent, run_input),
            self.parallel if parallel is None else parallel,
            agent.name,
        )

    async def run_output_guardrails(
        self,
        guardrails: Sequence["OutputGuardrail"],
        agent: "Agent",
        output: Any,
        ctx_view: "RunContextView",
        parallel: Optional[bool] = None,
    ) -> List[GuardrailRecord]:
        """Evaluate output guardrails (same contract as run_input_guardrails)"""
        return await self._run(
            guardrails,
            lambda g: g.run(ctx_view, agent, output),
            self.parallel if parallel is None else parallel,
            agent.name,
        )

    async def _run(
        self,
        guardrails: Sequence[AnyGuardrail],
        evaluate: Callable[[AnyGuardrail], Awaitable[GuardrailRecord]],
        parallel: bool,
        agent_name: str,
    ) -> List[GuardrailRecord]:
        if not guardrails:
            return []

        mode = "parallel" if parallel else "sequential"
        logger.debug(f"    🛡️ Evaluating {len(guardrails)} {guardrails[0].kind.value} guardrail(s) ({mode})")

        records: List[GuardrailRecord] = []
        if not parallel:
            for guardrail in guardrails:
                record = await evaluate(guardrail)
                records.append(record)
                self._raise_if_tripped(record, agent_name)
            return records

        results = await asyncio.gather(
            *[evaluate(guardrail) for guardrail in guardrails],
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
            records.append(result)
            self._raise_if_tripped(result, agent_name)
        return records

    @staticmethod
    def _raise_if_tripped(record: GuardrailRecord, agent_name: str) -> None:
        if not record.tripped:
            return
        logger.warning(f"    🚫 {record.kind.value.capitalize()} guardrail '{record.guardrail_name}' tripped")
        raise GuardrailTripped(
            guardrail_name=record.guardrail_name,
            kind=record.kind.value,
            output_info=record.result.output_info,
            agent_name=agent_name,
        )
