"""
@file_name: guardrail_schema.py
@author: NetMind.AI
@date: 2026-03-02
@description: Guardrail result types
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class GuardrailKind(str, Enum):
    """Where a guardrail runs"""
    INPUT = "input"
    OUTPUT = "output"


class GuardrailResult(BaseModel):
    """
    Value returned by a guardrail function

    Attributes:
        tripwire_triggered: True aborts the run
        output_info: Optional diagnostic payload (any type)
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    tripwire_triggered: bool = False
    output_info: Any = None


class GuardrailRecord(BaseModel):
    """A guardrail evaluation as recorded on the RunResult"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    guardrail_name: str
    kind: GuardrailKind
    agent_name: Optional[str] = None
    result: GuardrailResult

    @property
    def tripped(self) -> bool:
        return self.result.tripwire_triggered
