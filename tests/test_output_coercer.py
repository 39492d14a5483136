"""
Test output schema construction and final-output coercion
"""

from typing import Dict, List

import pytest
from pydantic import BaseModel

from xyz_agent_runtime import ConfigurationError, OutputParseError
from xyz_agent_runtime.agent_runtime import OutputCoercer, OutputSchema


class Weather(BaseModel):
    city: str
    temperature: float


@pytest.fixture
def coercer():
    return OutputCoercer()


class TestOutputSchema:
    """Schema shapes sent to the model"""

    def test_plain_text(self):
        for output_type in (None, str):
            schema = OutputSchema(output_type)
            assert schema.is_plain_text
            assert schema.json_schema() is None

    def test_model_is_not_wrapped(self):
        schema = OutputSchema(Weather)
        assert not schema.is_wrapped
        assert set(schema.json_schema()["properties"]) == {"city", "temperature"}
        assert schema.name == "Weather"

    def test_list_is_wrapped(self):
        schema = OutputSchema(List[int])
        assert schema.is_wrapped
        json_schema = schema.json_schema()
        assert json_schema["required"] == ["response"]
        assert json_schema["properties"]["response"]["type"] == "array"

    def test_wrapped_definitions_are_hoisted(self):
        json_schema = OutputSchema(List[Weather]).json_schema()
        assert "Weather" in json_schema["$defs"]
        assert "$defs" not in json_schema["properties"]["response"]

    def test_unsupported_type_is_configuration_error(self):
        class NotPydantic:
            pass

        with pytest.raises(ConfigurationError):
            OutputSchema(NotPydantic)


class TestCoercion:
    """OutputCoercer.coerce"""

    def test_plain_text_identity(self, coercer):
        assert coercer.coerce(OutputSchema(None), "Hola") == "Hola"
        assert coercer.coerce(OutputSchema(str), None) == ""

    def test_fenced_json_to_model(self, coercer):
        raw = '```json\n{"city": "Paris", "temperature": 21.5}\n```'
        value = coercer.coerce(OutputSchema(Weather), raw)
        assert value == Weather(city="Paris", temperature=21.5)

    def test_structured_dict_candidate(self, coercer):
        value = coercer.coerce(OutputSchema(Weather), {"city": "Oslo", "temperature": -3})
        assert value.city == "Oslo"

    def test_instance_passthrough(self, coercer):
        weather = Weather(city="Rome", temperature=30)
        assert coercer.coerce(OutputSchema(Weather), weather) is weather

    def test_wrapped_list(self, coercer):
        schema = OutputSchema(List[int])
        assert coercer.coerce(schema, '{"response": [1, 2, 3]}') == [1, 2, 3]
        assert coercer.coerce(schema, "[4, 5]") == [4, 5]

    def test_wrapped_mapping(self, coercer):
        schema = OutputSchema(Dict[str, int])
        assert coercer.coerce(schema, '{"response": {"a": 1}}') == {"a": 1}

    def test_invalid_json(self, coercer):
        with pytest.raises(OutputParseError) as exc_info:
            coercer.coerce(OutputSchema(Weather), "It is sunny in Paris")
        assert exc_info.value.diagnostic.startswith("Invalid JSON")
        assert exc_info.value.raw_output == "It is sunny in Paris"

    def test_schema_mismatch_diagnostic(self, coercer):
        with pytest.raises(OutputParseError) as exc_info:
            coercer.coerce(OutputSchema(Weather), '{"city": "Paris"}')
        assert "temperature" in exc_info.value.diagnostic

    def test_bare_mapping_with_response_key(self, coercer):
        schema = OutputSchema(Dict[str, str])
        value = coercer.coerce(schema, '{"response": "ok", "status": "done"}')
        assert value == {"response": "ok", "status": "done"}

    def test_single_response_key_mapping_falls_back_to_bare_value(self, coercer):
        schema = OutputSchema(Dict[str, int])
        assert coercer.coerce(schema, '{"response": 5}') == {"response": 5}

    def test_generic_names_in_diagnostics(self, coercer):
        schema = OutputSchema(Dict[str, str])
        assert schema.name == "Dict[str, str]"
        with pytest.raises(OutputParseError) as exc_info:
            coercer.coerce(schema, '{"response": 1, "status": 2}')
        assert "Dict[str, str]" in exc_info.value.message
