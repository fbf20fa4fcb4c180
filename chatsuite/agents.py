"""Chat agents that may rewrite, answer or merely observe messages."""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from chatsuite.ai import AiSdk, Message, OllamaAdapter, OpenAIAdapter
from chatsuite.chat_errors import AgentFailure

log = logging.getLogger(__name__)


class AgentType(enum.Enum):
    PROXY = "proxy"
    REPLY = "reply"
    TAP = "tap"


class AdapterType(enum.Enum):
    OPENAI = "openai"
    OLLAMA = "ollama"


@dataclass(frozen=True)
class AgentContext:
    chat_id: int
    user_id: int
    workspace_id: int


class DecisionKind(enum.Enum):
    MODIFY = "modify"
    REPLY = "reply"
    NONE = "none"


@dataclass(frozen=True)
class AgentDecision:
    """What an agent wants done with a message."""

    kind: DecisionKind
    content: Optional[str] = None

    @classmethod
    def modify(cls, content: str) -> "AgentDecision":
        return cls(DecisionKind.MODIFY, content)

    @classmethod
    def reply(cls, content: str) -> "AgentDecision":
        return cls(DecisionKind.REPLY, content)

    @classmethod
    def none(cls) -> "AgentDecision":
        return cls(DecisionKind.NONE)


@dataclass
class ChatAgentRecord:
    """An agent as stored for a chat."""

    id: int
    name: str
    type: AgentType
    prompt: str
    adapter: AdapterType
    model: str
    chat_id: int
    args: Any = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Agent(ABC):
    @abstractmethod
    def process(self, msg: str, ctx: AgentContext) -> AgentDecision:
        """Decide what to do with ``msg``."""


@dataclass
class _LlmAgent(Agent):
    name: str
    prompt: str
    adapter: AiSdk
    args: Any = field(default=None)

    def _ask(self, msg: str) -> str:
        messages = [Message.user(f"{self.prompt} {msg}")]
        log.debug("agent %s messages: %r", self.name, messages)
        try:
            return self.adapter.complete(messages)
        except Exception as exc:
            raise AgentFailure(str(exc)) from exc


class ProxyAgent(_LlmAgent):
    """Rewrites the message with the model's answer."""

    def process(self, msg: str, ctx: AgentContext) -> AgentDecision:
        return AgentDecision.modify(self._ask(msg))


class ReplyAgent(_LlmAgent):
    """Answers the message with the model's reply."""

    def process(self, msg: str, ctx: AgentContext) -> AgentDecision:
        return AgentDecision.reply(self._ask(msg))


class TapAgent(_LlmAgent):
    """Observes messages without acting on them."""

    def process(self, msg: str, ctx: AgentContext) -> AgentDecision:
        return AgentDecision.none()


_AGENT_CLASSES = {
    AgentType.PROXY: ProxyAgent,
    AgentType.REPLY: ReplyAgent,
    AgentType.TAP: TapAgent,
}


def adapter_for(adapter_type: AdapterType) -> AiSdk:
    """Default completion client for an adapter type."""
    if adapter_type is AdapterType.OPENAI:
        return OpenAIAdapter.from_env()
    if adapter_type is AdapterType.OLLAMA:
        return OllamaAdapter()
    raise ValueError(f"unknown adapter type: {adapter_type!r}")


def agent_from_record(
    record: ChatAgentRecord, adapter: Optional[AiSdk] = None
) -> Agent:
    """Build the agent a record describes, using ``adapter`` if given."""
    if adapter is None:
        adapter = adapter_for(record.adapter)
    cls = _AGENT_CLASSES[record.type]
    return cls(name=record.name, prompt=record.prompt, adapter=adapter, args=record.args)