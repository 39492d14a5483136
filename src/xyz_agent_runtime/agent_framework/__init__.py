"""
Agent Framework Package

Model Client interface and the provider adapters behind it
"""

from .model_client import ModelClient
from .openai_chat_client import OpenAIChatModelClient

__all__ = [
    "ModelClient",
    "OpenAIChatModelClient",
]
