"""Chat completion clients for Ollama and OpenAI-compatible endpoints."""

from __future__ import annotations

import enum
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable

import httpx

log = logging.getLogger(__name__)

_OLLAMA_LOCAL_HOST = "http://localhost:11434"
_OLLAMA_DEFAULT_MODEL = "llama3.2"
_OPENAI_DEFAULT_MODEL = "gpt-4o"
_OPENAI_DEFAULT_HOST = "https://api.openai.com"


class Role(enum.Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    def __str__(self) -> str:
        return self.value


@dataclass
class Message:
    """One message of a conversation."""

    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(Role.SYSTEM, content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(Role.ASSISTANT, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)


def _wire_messages(messages: Iterable[Message]) -> list[dict[str, str]]:
    return [{"role": str(m.role), "content": m.content} for m in messages]


def _message_content(message: Any) -> str:
    if not isinstance(message, dict) or not isinstance(message.get("content"), str):
        raise ValueError("response has no message content")
    return message["content"]


class AiSdk(ABC):
    """Something that turns a conversation into the next reply."""

    @abstractmethod
    def complete(self, messages: list[Message]) -> str:
        """Return the model's reply to ``messages``."""


class OllamaAdapter(AiSdk):
    """Client for an Ollama server's chat endpoint."""

    def __init__(
        self,
        host: str = _OLLAMA_LOCAL_HOST,
        model: str = _OLLAMA_DEFAULT_MODEL,
        client: httpx.Client | None = None,
    ) -> None:
        self.host = host
        self.model = model
        self.client = client if client is not None else httpx.Client(timeout=None)

    @classmethod
    def local(cls, model: str) -> "OllamaAdapter":
        """An adapter for a server running on this machine."""
        return cls(_OLLAMA_LOCAL_HOST, model)

    def complete(self, messages: list[Message]) -> str:
        request = {
            "model": self.model,
            "messages": _wire_messages(messages),
            "stream": False,
        }
        response = self.client.post(f"{self.host}/api/chat", json=request)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("unexpected response from Ollama")
        return _message_content(data.get("message"))


class OpenAIAdapter(AiSdk):
    """Client for an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = _OPENAI_DEFAULT_MODEL,
        host: str = _OPENAI_DEFAULT_HOST,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.host = host
        self.client = client if client is not None else httpx.Client(timeout=None)

    @classmethod
    def from_env(cls) -> "OpenAIAdapter":
        """Build an adapter from the ``OPENAI_API_KEY`` environment variable."""
        api_key = os.environ.get("OPENAI_API_KEY")
        if api_key is None:
            raise RuntimeError("OPENAI_API_KEY is not set")
        return cls(api_key, _OPENAI_DEFAULT_MODEL, _OPENAI_DEFAULT_HOST)

    def complete(self, messages: list[Message]) -> str:
        request = {"model": self.model, "messages": _wire_messages(messages)}
        response = self.client.post(
            f"{self.host}/v1/chat/completions",
            json=request,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        response.raise_for_status()
        data = response.json()
        log.debug("completion response: %r", data)
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise ValueError("No response from OpenAI")
        last = choices[-1]
        if not isinstance(last, dict):
            raise ValueError("unexpected choice in OpenAI response")
        return _message_content(last.get("message"))