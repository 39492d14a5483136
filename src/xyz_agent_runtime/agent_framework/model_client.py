"""
@file_name: model_client.py
@author: NetMind.AI
@date: 2026-03-05
@description: Model Client interface

The Runner only depends on this interface. A concrete client turns a
ModelRequest into whatever its provider expects and maps the provider's answer
back into a ModelResponse. Networking, authentication and transient-failure
retries are the client's business; the Runner never retries a model call.
"""

from abc import ABC, abstractmethod

from xyz_agent_runtime.schema import ModelRequest, ModelResponse


class ModelClient(ABC):
    """
    Model collaborator used by the Runner for every turn

    Implementations must be safe to share between concurrent runs.
    """

    @abstractmethod
    async def get_response(self, request: ModelRequest) -> ModelResponse:
        """
        One model round-trip

        Args:
            request: Instructions, history, tool schemas and output schema of the turn

        Returns:
            ModelResponse with final content, tool calls, or a handoff call

        Raises:
            ModelCollaboratorError: The provider failed after the client's own retries
        """
