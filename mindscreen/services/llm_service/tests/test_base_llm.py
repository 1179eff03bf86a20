"""Tests for completion backends."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mindscreen.services.llm_service import (
    HuggingFaceLLM,
    LLMConfig,
    LLMProvider,
    OpenAILLM,
    create_llm,
)


@pytest.fixture
def openai_config():
    return LLMConfig(provider=LLMProvider.OPENAI, model_name="gpt-4o-mini", api_key="sk-test")


@pytest.fixture
def openai_client():
    completion = MagicMock()
    completion.choices = [MagicMock(message=MagicMock(content="Hello from the model"))]
    completion.usage.total_tokens = 42

    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion)
    return client


class TestCreateLLM:

    def test_openai_requires_api_key(self):
        with pytest.raises(ValueError):
            create_llm(LLMConfig(provider=LLMProvider.OPENAI, model_name="gpt-4o-mini"))

    def test_huggingface_requires_endpoint(self):
        with pytest.raises(ValueError):
            create_llm(LLMConfig(provider=LLMProvider.HUGGINGFACE, model_name="mistral"))

    def test_huggingface_backend(self):
        llm = create_llm(LLMConfig(
            provider=LLMProvider.HUGGINGFACE,
            model_name="mistral",
            endpoint="https://example.invalid/models/mistral",
            api_key="hf-test",
        ))
        assert isinstance(llm, HuggingFaceLLM)
        assert llm.headers["Authorization"] == "Bearer hf-test"

    def test_openai_backend(self, openai_config):
        with patch("openai.AsyncOpenAI"):
            assert isinstance(create_llm(openai_config), OpenAILLM)


class TestSampling:

    def test_config_defaults(self, openai_config):
        with patch("openai.AsyncOpenAI"):
            llm = OpenAILLM(openai_config)
        assert llm.sampling() == {"temperature": 0.6, "max_tokens": 1200, "top_p": 0.9}

    def test_overrides(self, openai_config):
        with patch("openai.AsyncOpenAI"):
            llm = OpenAILLM(openai_config)
        assert llm.sampling(temperature=0.2, max_tokens=50)["temperature"] == 0.2


class TestValidatePrompt:

    @pytest.mark.parametrize("prompt", ["", "   ", "x" * 10001])
    def test_rejected(self, openai_config, prompt):
        with patch("openai.AsyncOpenAI"):
            llm = OpenAILLM(openai_config)
        assert llm.validate_prompt(prompt) is False

    def test_accepted(self, openai_config):
        with patch("openai.AsyncOpenAI"):
            llm = OpenAILLM(openai_config)
        assert llm.validate_prompt("How are you?") is True


class TestOpenAIGenerate:
    """OpenAI chat-completions calls."""

    @pytest.mark.asyncio
    async def test_generate(self, openai_config, openai_client):
        with patch("openai.AsyncOpenAI", return_value=openai_client):
            llm = OpenAILLM(openai_config)

        response = await llm.generate("How are you?", system_prompt="Be kind", temperature=0.3)

        assert response.text == "Hello from the model"
        assert response.tokens_used == 42
        assert response.provider == "openai"

        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 1200
        assert kwargs["messages"][0] == {"role": "system", "content": "Be kind"}
        assert kwargs["messages"][1]["role"] == "user"

    @pytest.mark.asyncio
    async def test_invalid_prompt_raises(self, openai_config, openai_client):
        with patch("openai.AsyncOpenAI", return_value=openai_client):
            llm = OpenAILLM(openai_config)

        with pytest.raises(ValueError):
            await llm.generate("")
        openai_client.chat.completions.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_error_propagates(self, openai_config, openai_client):
        openai_client.chat.completions.create.side_effect = RuntimeError("rate limited")
        with patch("openai.AsyncOpenAI", return_value=openai_client):
            llm = OpenAILLM(openai_config)

        with pytest.raises(RuntimeError):
            await llm.generate("How are you?")
