"""
Global pytest configuration and fixtures for xyz_agent_runtime tests

The Model Client is always the scripted fake below; no test talks to a provider.
"""

import inspect
from typing import Any, Callable, List, Optional, Union

import pytest

from xyz_agent_runtime import (
    ModelClient,
    ModelRequest,
    ModelResponse,
    RunConfig,
    ToolCallRequest,
    Usage,
)
from xyz_agent_runtime.agent_runtime import RunContext

ScriptStep = Union[ModelResponse, BaseException, Callable[[ModelRequest], Any]]


class ScriptedModelClient(ModelClient):
    """
    Fake Model Client replaying a fixed script

    Each step is a ModelResponse, an exception to raise, or a callable
    (sync or async) receiving the request and returning a ModelResponse.
    Every request is recorded in .requests.
    """

    def __init__(self, script: Optional[List[ScriptStep]] = None):
        self.script = list(script or [])
        self.requests: List[ModelRequest] = []

    async def get_response(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        if not self.script:
            raise AssertionError(f"Unexpected model call #{len(self.requests)} for agent '{request.agent_name}'")
        step = self.script.pop(0)
        if isinstance(step, BaseException):
            raise step
        if callable(step):
            step = step(request)
            if inspect.isawaitable(step):
                step = await step
        return step


def text(content: Any, tokens: int = 10) -> ModelResponse:
    """A final-content response"""
    return ModelResponse(content=content, usage=Usage(requests=1, input_tokens=tokens, output_tokens=1, total_tokens=tokens + 1))


def calls(*requests: ToolCallRequest, content: Any = None) -> ModelResponse:
    """A response requesting tool/handoff calls"""
    return ModelResponse(content=content, tool_calls=list(requests), usage=Usage(requests=1, total_tokens=5))


def call(name: str, arguments: Any = None, call_id: Optional[str] = None) -> ToolCallRequest:
    if call_id is None:
        return ToolCallRequest(name=name, arguments=arguments)
    return ToolCallRequest(call_id=call_id, name=name, arguments=arguments)


@pytest.fixture
def scripted():
    """Factory: scripted(step, step, ...) -> (client, run_config)"""
    def _make(*script: ScriptStep, **config_kwargs) -> tuple:
        client = ScriptedModelClient(list(script))
        return client, RunConfig(model_client=client, **config_kwargs)
    return _make


@pytest.fixture
def make_ctx():
    """Factory: RunContext for component tests (no model calls)"""
    def _make(agent, max_turns: int = 5, **config_kwargs) -> RunContext:
        client = ScriptedModelClient()
        config = RunConfig(model_client=client, **config_kwargs)
        ctx = RunContext(
            starting_agent=agent,
            input="hi",
            context=None,
            run_config=config,
            max_turns=max_turns,
            model_client=client,
        )
        return ctx
    return _make
