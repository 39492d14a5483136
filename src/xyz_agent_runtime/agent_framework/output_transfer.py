"""
@file_name: output_transfer.py
@author: NetMind.AI
@date: 2026-03-05
@description: Conversion between runtime types and the OpenAI Chat Completions format

Request direction:
    history (RunItems)  -> chat messages
    ToolSchema list     -> "tools" entries
    output schema       -> "response_format"

Response direction:
    ChatCompletion      -> ModelResponse
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from xyz_agent_runtime.schema import (
    AssistantMessageItem,
    HandoffCallItem,
    HandoffOutputItem,
    HostedToolCallItem,
    ModelRequest,
    ModelResponse,
    OutputRetryItem,
    RunItem,
    ToolCallItem,
    ToolCallRequest,
    ToolKind,
    ToolOutputItem,
    ToolSchema,
    Usage,
    UserInputItem,
)
from xyz_agent_runtime.utils import ModelCollaboratorError, normalize_tool_name, to_text


# ============================================================================
# Request direction
# ============================================================================

def items_to_messages(instructions: Optional[str], history: List[RunItem]) -> List[Dict[str, Any]]:
    """
    Convert the run history into Chat Completions messages

    Consecutive tool/handoff calls are grouped into a single assistant message
    (attached to the preceding assistant text of the same turn, if any). Tool
    outputs whose call is no longer in the history (e.g. cut by a handoff
    filter) are sent as user text, the API rejects orphaned tool messages.
    """
    messages: List[Dict[str, Any]] = []
    if instructions:
        messages.append({"role": "system", "content": instructions})

    open_call_ids = set()
    for item in history:
        if isinstance(item, UserInputItem):
            messages.append({"role": "user", "content": item.content})

        elif isinstance(item, AssistantMessageItem):
            messages.append({"role": "assistant", "content": to_text(item.content)})

        elif isinstance(item, (ToolCallItem, HandoffCallItem)):
            tool_call = {
                "id": item.call_id,
                "type": "function",
                "function": {"name": item.tool_name, "arguments": item.arguments},
            }
            last = messages[-1] if messages else None
            if last is not None and last["role"] == "assistant":
                last.setdefault("tool_calls", []).append(tool_call)
            else:
                messages.append({"role": "assistant", "content": None, "tool_calls": [tool_call]})
            open_call_ids.add(item.call_id)

        elif isinstance(item, (ToolOutputItem, HandoffOutputItem)):
            if item.call_id in open_call_ids:
                messages.append({"role": "tool", "tool_call_id": item.call_id, "content": item.output})
            else:
                messages.append({"role": "user", "content": f"[{item.tool_name} result] {item.output}"})

        elif isinstance(item, HostedToolCallItem):
            messages.append({
                "role": "assistant",
                "content": f"[{item.tool_name}({item.arguments})] {item.output}",
            })

        elif isinstance(item, OutputRetryItem):
            messages.append({"role": "user", "content": item.content})

    return messages


def tools_to_openai(tools: List[ToolSchema]) -> List[Dict[str, Any]]:
    """Function, agent and handoff schemas become function tools; hosted tools are skipped"""
    result = []
    for tool in tools:
        if tool.kind == ToolKind.HOSTED:
            logger.warning(f"Hosted tool '{tool.name}' is not supported by Chat Completions, skipping it")
            continue
        result.append({
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters,
            },
        })
    return result


def output_schema_to_response_format(schema: Dict[str, Any], name: Optional[str]) -> Dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": normalize_tool_name(name or "final_output")[:64],
            "schema": schema,
            "strict": False,
        },
    }


def build_chat_completion_kwargs(request: ModelRequest, default_model: str) -> Dict[str, Any]:
    """
    Build the keyword arguments of chat.completions.create for one request

    Only settings that are explicitly set are sent.
    """
    kwargs: Dict[str, Any] = {
        "model": request.model or default_model,
        "messages": items_to_messages(request.instructions, request.history),
    }

    tools = tools_to_openai(request.tools)
    settings = request.model_settings
    if tools:
        kwargs["tools"] = tools
        if settings.tool_choice is not None:
            kwargs["tool_choice"] = settings.tool_choice
        if settings.parallel_tool_calls is not None:
            kwargs["parallel_tool_calls"] = settings.parallel_tool_calls

    if settings.temperature is not None:
        kwargs["temperature"] = settings.temperature
    if settings.top_p is not None:
        kwargs["top_p"] = settings.top_p
    if settings.max_tokens is not None:
        kwargs["max_tokens"] = settings.max_tokens

    if request.output_schema is not None:
        kwargs["response_format"] = output_schema_to_response_format(
            request.output_schema, request.output_schema_name
        )
    return kwargs


# ============================================================================
# Response direction
# ============================================================================

def completion_to_response(completion: Any) -> ModelResponse:
    """
    Convert a ChatCompletion into a ModelResponse

    Raises:
        ModelCollaboratorError: The completion carries no choice
    """
    if not completion.choices:
        raise ModelCollaboratorError("Chat completion returned no choices", response_id=completion.id)

    message = completion.choices[0].message
    tool_calls = [
        ToolCallRequest(
            call_id=call.id,
            name=call.function.name,
            arguments=call.function.arguments or "{}",
        )
        for call in (message.tool_calls or [])
        if getattr(call, "function", None) is not None
    ]

    usage = Usage(requests=1)
    if completion.usage is not None:
        usage = Usage(
            requests=1,
            input_tokens=completion.usage.prompt_tokens or 0,
            output_tokens=completion.usage.completion_tokens or 0,
            total_tokens=completion.usage.total_tokens or 0,
        )

    content = message.content
    if content is None and not tool_calls:
        content = getattr(message, "refusal", None)

    return ModelResponse(
        content=content,
        tool_calls=tool_calls,
        usage=usage,
        response_id=completion.id,
    )
