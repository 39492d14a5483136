"""
@file_name: openai_chat_client.py
@author: NetMind.AI
@date: 2026-03-05
@description: ModelClient backed by the OpenAI Chat Completions API

Works with any OpenAI-compatible endpoint (settings.openai_base_url).

Retries:
- The SDK's own retry loop is disabled (max_retries=0) so that all retries go
  through utils.retry.with_retry and show up in our logs
- Retried: connection errors, timeouts, rate limits, 5xx
- Everything else surfaces immediately as ModelCollaboratorError
"""

from typing import Optional

from loguru import logger
from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    InternalServerError,
    OpenAIError,
    RateLimitError,
)

from xyz_agent_runtime.schema import ModelRequest, ModelResponse
from xyz_agent_runtime.settings import settings
from xyz_agent_runtime.utils import ConfigurationError, ModelCollaboratorError, with_retry
from .model_client import ModelClient
from .output_transfer import build_chat_completion_kwargs, completion_to_response

RETRYABLE_OPENAI_ERRORS = (APIConnectionError, APITimeoutError, RateLimitError, InternalServerError)


class OpenAIChatModelClient(ModelClient):
    """
    OpenAI Chat Completions Model Client

    Usage:
        >>> client = OpenAIChatModelClient(model="gpt-4.1-mini")
        >>> result = await Runner.run(agent, "Hello", run_config=RunConfig(model_client=client))
    """

    def __init__(
        self,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            model: Default model (requests may override it; default: settings.default_model)
            client: Pre-built AsyncOpenAI client (api_key/base_url/timeout are ignored then)
            api_key: API key (default: settings.openai_api_key / OPENAI_API_KEY)
            base_url: OpenAI-compatible endpoint (default: settings.openai_base_url)
            timeout: Per-request timeout in seconds (default: settings.model_request_timeout)
        """
        self.model = model or settings.default_model
        if client is not None:
            self.client = client
            return
        try:
            self.client = AsyncOpenAI(
                api_key=api_key or settings.openai_api_key or None,
                base_url=base_url or settings.openai_base_url,
                timeout=timeout or settings.model_request_timeout,
                max_retries=0,
            )
        except OpenAIError as e:
            raise ConfigurationError("Cannot create the OpenAI client, set OPENAI_API_KEY", cause=e) from e

    async def get_response(self, request: ModelRequest) -> ModelResponse:
        kwargs = build_chat_completion_kwargs(request, self.model)
        logger.debug(
            f"  🤖 chat.completions.create model={kwargs['model']} "
            f"messages={len(kwargs['messages'])} tools={len(kwargs.get('tools', []))}"
        )
        try:
            completion = await self._create_completion(**kwargs)
        except APIError as e:
            raise ModelCollaboratorError(
                f"OpenAI request failed: {type(e).__name__}",
                cause=e,
                agent_name=request.agent_name,
                model=kwargs["model"],
            ) from e
        return completion_to_response(completion)

    @with_retry(max_attempts=settings.model_max_retries, exceptions=RETRYABLE_OPENAI_ERRORS)
    async def _create_completion(self, **kwargs):
        return await self.client.chat.completions.create(**kwargs)
