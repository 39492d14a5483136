"""
General text processing utilities

@file_name: text.py
@author: NetMind.AI
@date: 2026-03-02
@description: Text helpers shared by the runtime (log previews, tool results, model output cleanup)

Features:
1. truncate_text - Smart text truncation for log previews
2. strip_code_fences - Remove markdown fences around model-produced JSON
3. to_text - Render an arbitrary tool/agent result as the text the model sees
4. normalize_tool_name - Turn a display name into a valid tool identifier
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel


# =============================================================================
# Text Truncation
# =============================================================================

def truncate_text(
    text: str,
    max_length: int = 100,
    suffix: str = "..."
) -> str:
    """
    Smart text truncation

    Example:
        >>> truncate_text("This is a very long text", max_length=10)
        'This is...'
    """
    if not text:
        return ""

    if len(text) <= max_length:
        return text

    available_length = max_length - len(suffix)
    if available_length <= 0:
        return suffix

    return text[:available_length] + suffix


# =============================================================================
# Model Output Cleanup
# =============================================================================

_FENCE_OPEN = re.compile(r"^```[a-zA-Z0-9_-]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """
    Remove a markdown code fence wrapping the whole text

    Example:
        >>> strip_code_fences('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    stripped = _FENCE_OPEN.sub("", stripped, count=1)
    stripped = _FENCE_CLOSE.sub("", stripped, count=1)
    return stripped.strip()


# =============================================================================
# Result Rendering
# =============================================================================

def to_text(value: Any) -> str:
    """
    Render a tool or nested-agent result as model-visible text

    - str: returned unchanged
    - pydantic model: JSON dump
    - dict / list / numbers / bool: JSON
    - None: empty string
    - anything else: str()
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    if isinstance(value, (dict, list, tuple, int, float, bool)):
        try:
            return json.dumps(
                value,
                ensure_ascii=False,
                default=lambda o: o.model_dump() if isinstance(o, BaseModel) else str(o),
            )
        except (TypeError, ValueError):
            return str(value)
    return str(value)


# =============================================================================
# Identifiers
# =============================================================================

_NON_IDENTIFIER = re.compile(r"[^a-zA-Z0-9_]+")


def normalize_tool_name(name: str) -> str:
    """
    Convert a free-form name into a tool identifier

    Example:
        >>> normalize_tool_name("Spanish Agent")
        'spanish_agent'
    """
    normalized = _NON_IDENTIFIER.sub("_", name.strip()).strip("_").lower()
    return normalized or "agent"
