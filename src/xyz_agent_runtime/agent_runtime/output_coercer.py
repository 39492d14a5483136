"""
@file_name: output_coercer.py
@author: NetMind.AI
@date: 2026-03-04
@description: Output schema construction and final-output coercion

OutputSchema is built once per Agent from its output_type:

    None / str          -> plain text, identity coercion
    pydantic model      -> JSON object
    list[T]             -> wrapped as {"response": [...]}
    dict[str, T]        -> wrapped as {"response": {...}}
    anything else       -> validated through pydantic TypeAdapter (wrapped unless it is an object with properties)

The OutputCoercer takes the raw final candidate from the model (text that may
contain JSON inside markdown code fences, or an already structured value) and
returns a value of the output type, or raises OutputParseError with a
diagnostic the Runner can send back to the model.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, get_origin

from loguru import logger
from pydantic import BaseModel, TypeAdapter, ValidationError

from xyz_agent_runtime.config import LOG_PREVIEW_LENGTH, OUTPUT_WRAPPER_KEY
from xyz_agent_runtime.utils import (
    ConfigurationError,
    OutputParseError,
    strip_code_fences,
    to_text,
    truncate_text,
)


# ============================================================================
# Output Schema
# ============================================================================

class OutputSchema:
    """
    Validation schema for an agent's final output

    Attributes:
        output_type: The declared type (None = plain text)
        is_plain_text: Final output is returned as text without validation
        is_wrapped: The model is asked for {"response": <value>} instead of <value>
    """

    def __init__(self, output_type: Any = None):
        self.output_type = output_type
        self.is_plain_text = output_type is None or output_type is str
        self.is_wrapped = False
        self._adapter: Optional[TypeAdapter] = None
        self._json_schema: Optional[Dict[str, Any]] = None

        if self.is_plain_text:
            return

        try:
            self._adapter = TypeAdapter(output_type)
            inner_schema = self._adapter.json_schema()
        except Exception as e:
            raise ConfigurationError(
                f"Cannot build an output schema for {self.name}",
                cause=e,
            ) from e

        self.is_wrapped = not (inner_schema.get("type") == "object" and "properties" in inner_schema)
        self._json_schema = self._wrap(inner_schema) if self.is_wrapped else inner_schema

    @classmethod
    def for_agent(cls, agent_name: str, output_type: Any) -> "OutputSchema":
        try:
            return cls(output_type)
        except ConfigurationError as e:
            e.context.setdefault("agent_name", agent_name)
            e.args = (e._format_message(),)
            raise

    @staticmethod
    def _wrap(inner_schema: Dict[str, Any]) -> Dict[str, Any]:
        inner = dict(inner_schema)
        defs = inner.pop("$defs", None)
        wrapped: Dict[str, Any] = {
            "type": "object",
            "properties": {OUTPUT_WRAPPER_KEY: inner},
            "required": [OUTPUT_WRAPPER_KEY],
            "additionalProperties": False,
        }
        # "#/$defs/..." references stay valid once the definitions live at the top level
        if defs:
            wrapped["$defs"] = defs
        return wrapped

    @property
    def name(self) -> str:
        if self.output_type is None:
            return "str"
        if get_origin(self.output_type) is not None:
            # Dict[str, str] would otherwise render as "Dict"
            return repr(self.output_type).replace("typing.", "")
        return getattr(self.output_type, "__name__", None) or repr(self.output_type)

    def json_schema(self) -> Optional[Dict[str, Any]]:
        """JSON schema sent to the model (None for plain text)"""
        return self._json_schema

    def accepts_instance(self, value: Any) -> bool:
        """True when value already is an instance of a plain class output type"""
        output_type = self.output_type
        if output_type is None or get_origin(output_type) is not None or not isinstance(output_type, type):
            return False
        return isinstance(value, output_type)

    def validate(self, data: Any) -> Any:
        """Validate already-decoded data; raises pydantic ValidationError"""
        if self._adapter is None:
            return data
        return self._adapter.validate_python(data)

    def __repr__(self) -> str:
        return f"OutputSchema({self.name}, wrapped={self.is_wrapped})"


# ============================================================================
# Output Coercer
# ============================================================================

class OutputCoercer:
    """
    Coerces raw final candidates into the active agent's output type

    Usage:
        >>> coercer = OutputCoercer()
        >>> coercer.coerce(agent.get_output_schema(), '```json\\n{"city": "Paris"}\\n```')
        Weather(city='Paris')
    """

    def coerce(self, schema: OutputSchema, raw: Any) -> Any:
        """
        Convert raw into a value of schema.output_type

        Raises:
            OutputParseError: raw is not valid JSON or does not validate
        """
        if schema.is_plain_text:
            return to_text(raw)

        if schema.accepts_instance(raw):
            return raw

        data = self._decode(schema, raw)
        candidates = [data]
        if schema.is_wrapped and isinstance(data, dict) and set(data) == {OUTPUT_WRAPPER_KEY}:
            # {"response": x} is the envelope; the bare mapping stays a fallback for dict outputs
            candidates.insert(0, data[OUTPUT_WRAPPER_KEY])

        try:
            value = self._validate_first(schema, candidates)
        except ValidationError as e:
            logger.warning(f"    ⚠️ Final output does not match {schema.name}: {e.error_count()} error(s)")
            raise OutputParseError(
                f"Final output does not match {schema.name}",
                diagnostic=str(e),
                raw_output=raw,
                cause=e,
            ) from e

        logger.debug(f"    ✅ Final output coerced to {schema.name}")
        return value

    @staticmethod
    def _validate_first(schema: OutputSchema, candidates: list) -> Any:
        """Value of the first candidate that validates; re-raises the first candidate's error"""
        first_error: Optional[ValidationError] = None
        for candidate in candidates:
            try:
                return schema.validate(candidate)
            except ValidationError as e:
                if first_error is None:
                    first_error = e
        raise first_error

    @staticmethod
    def _decode(schema: OutputSchema, raw: Any) -> Any:
        if isinstance(raw, BaseModel):
            return raw.model_dump()
        if not isinstance(raw, str):
            return raw

        text = strip_code_fences(raw)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"    ⚠️ Final output is not valid JSON: {truncate_text(text, LOG_PREVIEW_LENGTH)}")
            raise OutputParseError(
                f"Final output is not valid JSON for {schema.name}",
                diagnostic=f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
                raw_output=raw,
                cause=e,
            ) from e
