import pytest

from chatsuite.agents import (
    AdapterType,
    AgentContext,
    AgentDecision,
    AgentType,
    ChatAgentRecord,
    DecisionKind,
    ProxyAgent,
    ReplyAgent,
    TapAgent,
    adapter_for,
    agent_from_record,
)
from chatsuite.ai import AiSdk, OllamaAdapter, OpenAIAdapter, Role
from chatsuite.chat_errors import AgentFailure

CTX = AgentContext(chat_id=1, user_id=1, workspace_id=1)


class FakeSdk(AiSdk):
    def __init__(self, answer="answer", fail=False):
        self.answer = answer
        self.fail = fail
        self.seen = []

    def complete(self, messages):
        self.seen.append(messages)
        if self.fail:
            raise RuntimeError("backend down")
        return self.answer


def record(agent_type):
    return ChatAgentRecord(
        id=1,
        name="proxy",
        type=agent_type,
        prompt="Translate:",
        adapter=AdapterType.OLLAMA,
        model="llama3.2",
        chat_id=1,
    )


def test_proxy_agent_modifies_with_prompt_prefix():
    sdk = FakeSdk("hello, world!")
    agent = ProxyAgent(name="p", prompt="Translate:", adapter=sdk)
    decision = agent.process("你好，世界！", CTX)
    assert decision == AgentDecision.modify("hello, world!")
    [messages] = sdk.seen
    assert len(messages) == 1
    assert messages[0].role is Role.USER
    assert messages[0].content == "Translate: 你好，世界！"


def test_reply_agent_replies():
    agent = ReplyAgent(name="r", prompt="Answer", adapter=FakeSdk("sure"))
    decision = agent.process("question", CTX)
    assert decision.kind is DecisionKind.REPLY
    assert decision.content == "sure"


def test_tap_agent_does_nothing():
    sdk = FakeSdk()
    decision = TapAgent(name="t", prompt="x", adapter=sdk).process("msg", CTX)
    assert decision == AgentDecision.none()
    assert sdk.seen == []


def test_adapter_failure_becomes_agent_failure():
    agent = ProxyAgent(name="p", prompt="x", adapter=FakeSdk(fail=True))
    with pytest.raises(AgentFailure) as info:
        agent.process("msg", CTX)
    assert "backend down" in str(info.value)


@pytest.mark.parametrize(
    "agent_type, cls",
    [(AgentType.PROXY, ProxyAgent), (AgentType.REPLY, ReplyAgent), (AgentType.TAP, TapAgent)],
)
def test_agent_from_record_picks_class(agent_type, cls):
    sdk = FakeSdk()
    agent = agent_from_record(record(agent_type), sdk)
    assert type(agent) is cls
    assert agent.prompt == "Translate:"
    assert agent.adapter is sdk


def test_agent_from_record_default_adapter():
    agent = agent_from_record(record(AgentType.TAP))
    assert type(agent) is TapAgent
    assert isinstance(agent.adapter, OllamaAdapter)
    assert agent.adapter.host == "http://localhost:11434"
    assert agent.adapter.model == "llama3.2"
    assert agent.process("msg", CTX) == AgentDecision.none()


def test_adapter_for_ollama_defaults():
    adapter = adapter_for(AdapterType.OLLAMA)
    assert adapter.host == "http://localhost:11434"
    assert adapter.model == "llama3.2"


def test_adapter_for_openai_reads_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "placeholder")
    adapter = adapter_for(AdapterType.OPENAI)
    assert isinstance(adapter, OpenAIAdapter)
    assert adapter.api_key == "placeholder"
    assert adapter.model == "gpt-4o"


def test_adapter_for_openai_without_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(RuntimeError):
        adapter_for(AdapterType.OPENAI)