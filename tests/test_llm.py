"""Unit tests for the LLM provider layer."""
from types import SimpleNamespace

import pytest

from codexchat.llm import (
    SUPPORTED_PROVIDERS,
    ChatMessage,
    GeminiProvider,
    LLMProvider,
    LLMResponse,
    OpenAIProvider,
    create_llm_provider,
)
from codexchat.llm.providers import gemini as gemini_module


class RecordingProvider(LLMProvider):
    """Provider that records what complete() sends."""

    def __init__(self):
        self.received = None

    @property
    def model(self) -> str:
        return "recording-1"

    async def chat_completion(self, messages, model=None, temperature=0.7, max_tokens=None, **kwargs):
        self.received = {"messages": messages, "temperature": temperature, "max_tokens": max_tokens, **kwargs}
        return LLMResponse(content="  padded reply  ", model=self.model)

    async def close(self) -> None:
        pass


class FakeGeminiModels:
    """Stands in for client.aio.models; returns scripted responses in order."""

    def __init__(self, answers: list):
        self.answers = list(answers)
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        return self.answers[len(self.calls) - 1]


class FakeOpenAICompletions:
    """Stands in for client.chat.completions; records each request."""

    def __init__(self, completion):
        self.completion = completion
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return self.completion


class TestLLMProvider:
    """Tests for the LLMProvider interface."""

    def test_llm_provider_is_abstract(self):
        """Test that LLMProvider cannot be instantiated directly."""
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore

    @pytest.mark.asyncio
    async def test_complete_sends_single_user_message(self):
        """Test that complete() wraps the prompt as one user message."""
        provider = RecordingProvider()

        text = await provider.complete("hello", temperature=0.0, max_tokens=50)

        assert text == "  padded reply  "
        assert provider.received["messages"] == [ChatMessage(role="user", content="hello")]
        assert provider.received["temperature"] == 0.0
        assert provider.received["max_tokens"] == 50

    @pytest.mark.asyncio
    async def test_async_context_manager(self):
        """Test that providers work as async context managers."""
        async with RecordingProvider() as provider:
            assert await provider.complete("hi") == "  padded reply  "


class TestModels:
    """Tests for the provider data models."""

    def test_chat_message_is_frozen(self):
        """Test that chat messages are immutable."""
        message = ChatMessage(role="user", content="hello")
        with pytest.raises(ValueError):
            message.content = "changed"  # type: ignore

    def test_llm_response_usage_optional(self):
        """Test that usage defaults to None."""
        response = LLMResponse(content="x", model="m")
        assert response.usage is None


class TestCreateLLMProvider:
    """Tests for create_llm_provider factory."""

    def test_supported_providers(self):
        """Test the list of provider names."""
        assert SUPPORTED_PROVIDERS == ("openai", "gemini")

    def test_create_openai_provider(self):
        """Test creating an OpenAI provider."""
        provider = create_llm_provider("openai", api_key="sk-test", model="gpt-4o-mini")

        assert isinstance(provider, OpenAIProvider)
        assert provider.model == "gpt-4o-mini"

    def test_create_gemini_provider_case_insensitive(self):
        """Test that provider names ignore case."""
        provider = create_llm_provider("Gemini", api_key="gm-test")

        assert isinstance(provider, GeminiProvider)
        assert provider.model == "gemini-2.0-flash"

    @pytest.mark.parametrize("name", ["openai", "gemini"])
    def test_missing_api_key_raises_type_error(self, name: str):
        """Test that api_key is required."""
        with pytest.raises(TypeError, match="api_key"):
            create_llm_provider(name)

    def test_unknown_provider_raises_error(self):
        """Test that unknown provider names are rejected."""
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_llm_provider("anthropic", api_key="x")


class TestGeminiProvider:
    """Tests for Gemini message conversion and the empty-answer retry."""

    @staticmethod
    def _answer(text: str | None = None, usage=None):
        parts = [SimpleNamespace(text=text)] if text else []
        candidate = SimpleNamespace(content=SimpleNamespace(parts=parts))
        return SimpleNamespace(candidates=[candidate], usage_metadata=usage, text=text)

    @staticmethod
    def _provider(monkeypatch, answers: list) -> tuple[GeminiProvider, FakeGeminiModels]:
        monkeypatch.setattr(gemini_module, "RETRY_BACKOFF_SECONDS", 0)
        provider = GeminiProvider(api_key="gm-test", max_retries=3)
        models = FakeGeminiModels(answers)
        provider._client = SimpleNamespace(aio=SimpleNamespace(models=models))
        return provider, models

    def test_convert_messages(self):
        """Test that system text becomes the instruction and assistant maps to model."""
        provider = GeminiProvider(api_key="gm-test")

        system, contents = provider._convert_messages([
            ChatMessage(role="system", content="be brief"),
            ChatMessage(role="user", content="hello"),
            ChatMessage(role="assistant", content="hi"),
        ])

        assert system == "be brief"
        assert [content.role for content in contents] == ["user", "model"]
        assert contents[0].parts[0].text == "hello"

    @pytest.mark.asyncio
    async def test_empty_answer_is_retried(self, monkeypatch):
        """Test that an empty answer is asked again and the later text returned."""
        provider, models = self._provider(monkeypatch, [self._answer(None), self._answer("pong")])

        text = await provider.complete("ping")

        assert text == "pong"
        assert len(models.calls) == 2

    @pytest.mark.asyncio
    async def test_all_answers_empty(self, monkeypatch):
        """Test that a reply stays empty after every attempt comes back empty."""
        provider, models = self._provider(monkeypatch, [self._answer(None)] * 3)

        response = await provider.chat_completion([ChatMessage(role="user", content="ping")])

        assert response.content == ""
        assert len(models.calls) == 3

    @pytest.mark.asyncio
    async def test_request_config_and_usage(self, monkeypatch):
        """Test the model, sampling config and token usage of one call."""
        usage = SimpleNamespace(prompt_token_count=4, candidates_token_count=None, total_token_count=4)
        provider, models = self._provider(monkeypatch, [self._answer("pong", usage=usage)])

        response = await provider.chat_completion(
            [ChatMessage(role="user", content="ping")], temperature=0.2, max_tokens=50
        )

        call = models.calls[0]
        assert call["model"] == "gemini-2.0-flash"
        assert call["config"].temperature == 0.2
        assert call["config"].max_output_tokens == 50
        assert response.usage == {"prompt_tokens": 4, "completion_tokens": 0, "total_tokens": 4}

    def test_text_falls_back_to_response_text(self):
        """Test that response.text is used when no candidate has text parts."""
        response = SimpleNamespace(candidates=[], text="from text")
        assert GeminiProvider._text_of(response) == "from text"

    def test_text_accessor_errors_mean_no_text(self):
        """Test that a response whose text accessor fails yields ""."""
        class _Blocked:
            candidates = None

            @property
            def text(self):
                raise ValueError("blocked by safety filters")

        assert GeminiProvider._text_of(_Blocked()) == ""


class TestOpenAIProvider:
    """Tests for the Chat Completions payload."""

    @staticmethod
    def _provider(content: str | None = "pong", choices: bool = True):
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))] if choices else [],
            model="gpt-4o-2024-08-06",
            usage=SimpleNamespace(prompt_tokens=5, completion_tokens=1, total_tokens=6),
        )
        provider = OpenAIProvider(api_key="sk-test")
        completions = FakeOpenAICompletions(completion)
        provider._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        return provider, completions

    @pytest.mark.asyncio
    async def test_payload_for_openai_route(self):
        """Test that the relay's sampling parameters reach the request unchanged."""
        provider, completions = self._provider()

        text = await provider.complete(
            "hello",
            temperature=0.0,
            max_tokens=100,
            top_p=1,
            frequency_penalty=0.5,
            presence_penalty=0,
        )

        assert text == "pong"
        assert completions.calls == [{
            "model": "gpt-4o",
            "messages": [{"role": "user", "content": "hello"}],
            "temperature": 0.0,
            "max_tokens": 100,
            "top_p": 1,
            "frequency_penalty": 0.5,
            "presence_penalty": 0,
        }]

    @pytest.mark.asyncio
    async def test_max_tokens_omitted_when_unset(self):
        """Test that no max_tokens key is sent without a limit."""
        provider, completions = self._provider()

        response = await provider.chat_completion([ChatMessage(role="user", content="hi")], model="gpt-4o-mini")

        assert "max_tokens" not in completions.calls[0]
        assert completions.calls[0]["model"] == "gpt-4o-mini"
        assert response.model == "gpt-4o-2024-08-06"
        assert response.usage == {"prompt_tokens": 5, "completion_tokens": 1, "total_tokens": 6}

    @pytest.mark.asyncio
    async def test_missing_content_becomes_empty_text(self):
        """Test that a None message content or no choices give an empty reply."""
        provider, _ = self._provider(content=None)
        assert await provider.complete("hi") == ""

        provider, _ = self._provider(choices=False)
        assert await provider.complete("hi") == ""


class TestProvidersIntegration:
    """Integration tests against the real vendor APIs."""

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_openai_real_api(self, api_keys):
        """Integration test: answer a prompt with OpenAI."""
        if not api_keys["openai"]:
            pytest.skip("OPENAI_API_KEY not set")

        provider = OpenAIProvider(api_key=api_keys["openai"])
        try:
            text = await provider.complete("Reply with the single word: pong", max_tokens=10)
            assert "pong" in text.lower()
        finally:
            await provider.close()

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_gemini_real_api(self, api_keys):
        """Integration test: answer a prompt with Gemini."""
        if not api_keys["gemini"]:
            pytest.skip("GEMINI_API_KEY not set")

        provider = GeminiProvider(api_key=api_keys["gemini"])
        try:
            text = await provider.complete("Reply with the single word: pong")
            assert "pong" in text.lower()
        finally:
            await provider.close()
