"""Tests for the agent orchestrator."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.llmproxy.agent.domain.entities import (
    ErrorType,
    MessageRole,
    ReasoningResult,
    ToolCall,
    Turn,
    WindowPolicy,
)
from src.llmproxy.agent.domain.exceptions import (
    AgentExecutionFailedError,
    AgentTimeoutError,
    InvalidArgumentError,
    UnknownToolError,
)
from src.llmproxy.agent.memory import InMemoryConversationStore
from src.llmproxy.agent.orchestrator import FALLBACK_ANSWER, AgentConfig, AgentOrchestrator
from src.llmproxy.agent.providers import (
    AnthropicProvider,
    LLMProviderConfig,
    LLMProviderError,
    OpenAIProvider,
)
from src.llmproxy.agent.tools import GoogleSearchClient, ToolRegistry, create_web_search_tool


@pytest.fixture
def store():
    return InMemoryConversationStore(WindowPolicy(size=10))


@pytest.fixture
def make_orchestrator(registry, store):
    def _make(provider, tool_registry=None, **config):
        return AgentOrchestrator(
            reasoning_provider=provider,
            tool_registry=tool_registry or registry,
            conversation_store=store,
            config=AgentConfig(**config),
        )
    return _make


def search_request(query="python closures", name="web_search"):
    return ReasoningResult.tool_request(ToolCall(name=name, arguments={"query": query}))


class TestPlainAnswers:
    """Requests answered without tools."""

    @pytest.mark.asyncio
    async def test_answer_stored_verbatim(self, make_provider, make_orchestrator, store):
        provider = make_provider(
            ReasoningResult.answer("It returns the sum of its arguments.", model="gpt-4o-mini")
        )
        orchestrator = make_orchestrator(provider)

        reply = await orchestrator.run("What does this function do?", "c1")

        assert reply.output == "It returns the sum of its arguments."
        assert reply.conversation_id == "c1"
        assert reply.message_count == 2
        assert reply.model == "gpt-4o-mini"
        assert reply.tool_calls == []

        history = await store.get_history("c1")
        assert [(t.role, t.content) for t in history] == [
            (MessageRole.USER, "What does this function do?"),
            (MessageRole.ASSISTANT, "It returns the sum of its arguments."),
        ]

    @pytest.mark.asyncio
    async def test_model_falls_back_to_provider_name(self, make_provider, make_orchestrator):
        orchestrator = make_orchestrator(make_provider(ReasoningResult.answer("ok")))
        reply = await orchestrator.run("hi", "c1")
        assert reply.model == "scripted-model"

    @pytest.mark.asyncio
    async def test_model_override_passed_through(self, make_provider, make_orchestrator):
        provider = make_provider(ReasoningResult.answer("ok"))
        orchestrator = make_orchestrator(provider)

        reply = await orchestrator.run("hi", "c1", model="gpt-4.1")

        assert provider.calls[0][2] == "gpt-4.1"
        assert reply.model == "gpt-4.1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", None])
    async def test_empty_answer_uses_fallback(self, make_provider, make_orchestrator, store, text):
        orchestrator = make_orchestrator(make_provider(ReasoningResult(text=text)))

        reply = await orchestrator.run("hi", "c1")

        assert reply.output == FALLBACK_ANSWER
        history = await store.get_history("c1")
        assert history[-1].content == FALLBACK_ANSWER

    @pytest.mark.asyncio
    async def test_history_in_transcript(self, make_provider, make_orchestrator, store):
        await store.append_and_trim("c1", [Turn.user("What is a closure?"), Turn.assistant("A function...")])
        provider = make_provider(ReasoningResult.answer("Yes."))
        orchestrator = make_orchestrator(provider)

        await orchestrator.run("Can it capture loop variables?", "c1")

        context = provider.calls[0][0]
        assert context.input == (
            "user: What is a closure?\n"
            "assistant: A function...\n"
            "user: Can it capture loop variables?"
        )
        assert "c1" in context.instructions

    @pytest.mark.asyncio
    async def test_full_window_evicts_oldest_pair(self, make_provider, make_orchestrator, store):
        for i in range(5):
            await store.append_and_trim("c1", [Turn.user(f"q{i}"), Turn.assistant(f"a{i}")])
        orchestrator = make_orchestrator(make_provider(ReasoningResult.answer("a5")))

        reply = await orchestrator.run("q5", "c1")

        assert reply.message_count == 10
        history = await store.get_history("c1")
        assert history[0].content == "q1"
        assert history[-1].content == "a5"


class TestValidation:
    """Input errors are raised before any work is done."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prompt, conversation_id", [
        ("", "c1"),
        ("   ", "c1"),
        ("hi", ""),
        ("hi", "  "),
    ])
    async def test_blank_input(self, make_provider, make_orchestrator, store, prompt, conversation_id):
        provider = make_provider(ReasoningResult.answer("unused"))
        orchestrator = make_orchestrator(provider)

        with pytest.raises(InvalidArgumentError) as exc_info:
            await orchestrator.run(prompt, conversation_id)

        assert exc_info.value.status_code == 400
        assert provider.calls == []
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_unknown_requested_tool(self, make_provider, make_orchestrator):
        provider = make_provider(ReasoningResult.answer("unused"))
        orchestrator = make_orchestrator(provider)

        with pytest.raises(UnknownToolError):
            await orchestrator.run("hi", "c1", tools=["run_shell"])

        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_empty_tool_subset_offers_nothing(self, make_provider, make_orchestrator):
        provider = make_provider(ReasoningResult.answer("ok"))
        orchestrator = make_orchestrator(provider)

        await orchestrator.run("hi", "c1", tools=[])

        assert provider.calls[0][1] == []


class TestToolHops:
    """Tool requests and the hop budget."""

    @pytest.mark.asyncio
    async def test_single_hop(self, make_provider, make_orchestrator, fake_search, store):
        provider = make_provider(
            search_request(),
            ReasoningResult.answer("Closures capture variables by reference."),
        )
        orchestrator = make_orchestrator(provider)

        reply = await orchestrator.run("Explain closures", "c1")

        assert reply.output == "Closures capture variables by reference."
        assert reply.tool_calls == ["web_search"]
        assert reply.hops == 1
        assert fake_search.queries == ["python closures"]

        first_tools = [t.name for t in provider.calls[0][1]]
        second_context, second_tools, _ = provider.calls[1]
        assert first_tools == ["web_search"]
        # Still declared for the replayed exchange, but no longer callable
        assert [t.name for t in second_tools] == ["web_search"]
        assert provider.allow_tool_calls == [True, False]
        assert len(second_context.tool_calls) == 1
        assert second_context.tool_calls[0].result.startswith('Search results for "python closures":')

        # Tool exchanges are not stored, only the final pair
        assert len(await store.get_history("c1")) == 2

    @pytest.mark.asyncio
    async def test_search_failure_reaches_model_as_text(
        self, make_provider, make_orchestrator, failing_search
    ):
        provider = make_provider(search_request("x"), ReasoningResult.answer("Sorry."))
        orchestrator = make_orchestrator(
            provider, tool_registry=ToolRegistry([create_web_search_tool(failing_search)])
        )

        reply = await orchestrator.run("hi", "c1")

        assert reply.output == "Sorry."
        result = provider.calls[1][0].tool_calls[0].result
        assert result == 'Error searching for "x": Google API error: 403 - quota exceeded'

    @pytest.mark.asyncio
    async def test_request_after_budget_fails(self, make_provider, make_orchestrator, store):
        provider = make_provider(search_request("a"), search_request("b"))
        orchestrator = make_orchestrator(provider)

        with pytest.raises(AgentExecutionFailedError):
            await orchestrator.run("hi", "c1")

        assert await store.get_history("c1") == []

    @pytest.mark.asyncio
    async def test_zero_hops_disallows_tool_calls(self, make_provider, make_orchestrator):
        provider = make_provider(ReasoningResult.answer("ok"))
        orchestrator = make_orchestrator(provider, max_tool_hops=0)

        await orchestrator.run("hi", "c1")

        assert provider.allow_tool_calls == [False]

    @pytest.mark.asyncio
    async def test_tool_not_offered(self, make_provider, make_orchestrator, fake_search, store):
        provider = make_provider(search_request())
        orchestrator = make_orchestrator(provider)

        with pytest.raises(UnknownToolError):
            await orchestrator.run("hi", "c1", tools=[])

        assert fake_search.queries == []
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_unregistered_tool_requested(self, make_provider, make_orchestrator):
        provider = make_provider(search_request(name="run_shell"))
        orchestrator = make_orchestrator(provider)

        with pytest.raises(UnknownToolError):
            await orchestrator.run("hi", "c1")

    @pytest.mark.asyncio
    async def test_invalid_tool_arguments(self, make_provider, make_orchestrator, fake_search):
        provider = make_provider(
            ReasoningResult.tool_request(ToolCall(name="web_search", arguments={"q": "typo"}))
        )
        orchestrator = make_orchestrator(provider)

        with pytest.raises(InvalidArgumentError):
            await orchestrator.run("hi", "c1")

        assert fake_search.queries == []


class TestFailures:
    """Provider failures and deadlines."""

    @pytest.mark.asyncio
    async def test_provider_error(self, make_provider, make_orchestrator, store):
        provider = make_provider(
            LLMProviderError("API error: boom", error_type=ErrorType.RECOVERABLE)
        )
        orchestrator = make_orchestrator(provider)

        with pytest.raises(AgentExecutionFailedError) as exc_info:
            await orchestrator.run("hi", "c1")

        assert exc_info.value.message.startswith("Failed to process developer request:")
        assert exc_info.value.status_code == 502
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_provider_timeout(self, make_provider, make_orchestrator):
        provider = make_provider(
            LLMProviderError("Request timed out", error_type=ErrorType.TIMEOUT)
        )
        orchestrator = make_orchestrator(provider)

        with pytest.raises(AgentTimeoutError) as exc_info:
            await orchestrator.run("hi", "c1")

        assert exc_info.value.stage == "reasoning"
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, make_provider, make_orchestrator):
        orchestrator = make_orchestrator(make_provider(RuntimeError("kaput")))

        with pytest.raises(AgentExecutionFailedError, match="kaput"):
            await orchestrator.run("hi", "c1")

    @pytest.mark.asyncio
    async def test_slow_reasoning(self, make_provider, make_orchestrator, store):
        provider = make_provider(ReasoningResult.answer("late"), delay=0.5)
        orchestrator = make_orchestrator(provider, reasoning_timeout_seconds=0.01)

        with pytest.raises(AgentTimeoutError) as exc_info:
            await orchestrator.run("hi", "c1")

        assert exc_info.value.stage == "reasoning"
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_slow_tool(self, make_provider, make_search, make_orchestrator, store):
        slow = make_search(results=[], delay=0.5)
        provider = make_provider(search_request(), ReasoningResult.answer("unused"))
        orchestrator = make_orchestrator(
            provider,
            tool_registry=ToolRegistry([create_web_search_tool(slow)]),
            tool_timeout_seconds=0.01,
        )

        with pytest.raises(AgentTimeoutError) as exc_info:
            await orchestrator.run("hi", "c1")

        assert exc_info.value.stage == "tool"
        assert len(provider.calls) == 1
        assert len(store) == 0


def test_config_rejects_bad_values():
    with pytest.raises(ValueError):
        AgentConfig(max_tool_hops=-1)
    with pytest.raises(ValueError):
        AgentConfig(tool_timeout_seconds=0)


def anthropic_message(block):
    response = MagicMock()
    response.content = [block]
    response.model = "claude-sonnet-4-5"
    return response


def openai_completion(content=None, tool_calls=None):
    message = MagicMock()
    message.content = content
    message.tool_calls = tool_calls
    response = MagicMock()
    response.choices = [MagicMock(message=message)]
    response.model = "gpt-4o-mini"
    return response


class TestProviderRoundTrip:
    """A search hop driven through the real provider adapters."""

    @pytest.mark.asyncio
    async def test_anthropic_follow_up_declares_tools(self, make_orchestrator, fake_search):
        tool_use = MagicMock(type="tool_use", id="toolu_1", input={"query": "python"})
        tool_use.name = "web_search"
        text = MagicMock(type="text", text="Python is a language.")
        client = MagicMock()
        client.messages.create = AsyncMock(
            side_effect=[anthropic_message(tool_use), anthropic_message(text)]
        )
        config = LLMProviderConfig(api_key="sk-ant-test", model="claude-sonnet-4-5")
        provider = AnthropicProvider(config, client=client)

        reply = await make_orchestrator(provider).run("hi", "c1")

        assert reply.output == "Python is a language."
        second = client.messages.create.await_args_list[1].kwargs
        assert [m["content"][0]["type"] for m in second["messages"][1:]] == [
            "tool_use",
            "tool_result",
        ]
        assert [t["name"] for t in second["tools"]] == ["web_search"]
        assert second["tool_choice"] == {"type": "none"}

    @pytest.mark.asyncio
    async def test_openai_follow_up_declares_tools(self, make_orchestrator, fake_search):
        call = MagicMock(id="call_1")
        call.function.name = "web_search"
        call.function.arguments = '{"query": "python"}'
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            side_effect=[openai_completion(tool_calls=[call]), openai_completion("Done.")]
        )
        provider = OpenAIProvider(
            LLMProviderConfig(api_key="sk-test", model="gpt-4o-mini"), client=client
        )

        reply = await make_orchestrator(provider).run("hi", "c1")

        assert reply.output == "Done."
        second = client.chat.completions.create.await_args_list[1].kwargs
        assert second["messages"][-1]["role"] == "tool"
        assert [t["function"]["name"] for t in second["tools"]] == ["web_search"]
        assert second["tool_choice"] == "none"


class TestSearchTransportFailures:
    """Search backend failures reach the model as text, not as timeouts."""

    @pytest.mark.asyncio
    async def test_hanging_search_backend_becomes_text(self, make_provider, make_orchestrator):
        session = MagicMock()
        session.get = MagicMock(side_effect=asyncio.TimeoutError())
        search = GoogleSearchClient("k", "cx", timeout=0.01, session=session)
        provider = make_provider(search_request("x"), ReasoningResult.answer("No luck."))
        orchestrator = make_orchestrator(
            provider, tool_registry=ToolRegistry([create_web_search_tool(search)])
        )

        with patch("src.llmproxy.api.resilience.asyncio.sleep", new=AsyncMock()):
            reply = await orchestrator.run("hi", "c1")

        assert reply.output == "No luck."
        assert session.get.call_count == 3
        result = provider.calls[1][0].tool_calls[0].result
        assert result.startswith('Error searching for "x": Google API request failed')
