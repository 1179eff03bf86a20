"""Text-completion collaborators.

The rest of the system treats a model as "prompt string in, text out,
or an exception". BaseLLM.generate owns prompt checks, sampling defaults,
timing and logging; each backend only implements _complete().
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

MAX_PROMPT_CHARS = 10000


class LLMProvider(Enum):
    HUGGINGFACE = "huggingface"
    OPENAI = "openai"


@dataclass
class LLMConfig:
    """Connection and sampling settings for a completion backend."""
    provider: LLMProvider
    model_name: str
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    max_tokens: int = 1200
    temperature: float = 0.6
    top_p: float = 0.9
    timeout_seconds: float = 30.0


@dataclass
class LLMResponse:
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None
    latency_ms: Optional[float] = None
    metadata: Optional[Dict[str, Any]] = None


# (text, tokens used, backend metadata)
Completion = Tuple[str, Optional[int], Optional[Dict[str, Any]]]


class BaseLLM(ABC):
    """Abstract completion backend."""

    def __init__(self, config: LLMConfig):
        self.config = config
        logger.info(
            "LLM_INITIALIZED",
            extra={"provider": config.provider.value, "model": config.model_name}
        )

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt for context
            **kwargs: ``temperature`` / ``max_tokens`` / ``top_p`` override the config

        Returns:
            LLMResponse

        Raises:
            ValueError: If the prompt is empty or too long
            Exception: Any transport or API failure from the backend
        """
        if not self.validate_prompt(prompt):
            raise ValueError("Invalid prompt")

        provider = self.config.provider.value
        started = time.perf_counter()
        try:
            text, tokens_used, metadata = await self._complete(
                prompt, system_prompt, self.sampling(**kwargs)
            )
        except Exception as e:
            logger.error(
                "LLM_GENERATION_FAILED",
                extra={
                    "provider": provider,
                    "model": self.config.model_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            raise

        latency_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "LLM_GENERATION_SUCCEEDED",
            extra={
                "provider": provider,
                "model": self.config.model_name,
                "latency_ms": round(latency_ms, 2),
                "tokens_used": tokens_used,
            }
        )
        return LLMResponse(
            text=text,
            model=self.config.model_name,
            provider=provider,
            tokens_used=tokens_used,
            latency_ms=latency_ms,
            metadata=metadata,
        )

    @abstractmethod
    async def _complete(
        self,
        prompt: str,
        system_prompt: Optional[str],
        params: Dict[str, Any],
    ) -> Completion:
        """Call the backend once with resolved sampling ``params``."""

    def sampling(self, **kwargs) -> Dict[str, Any]:
        """Sampling parameters for one call, config values as defaults."""
        return {
            "temperature": kwargs.get("temperature", self.config.temperature),
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
            "top_p": kwargs.get("top_p", self.config.top_p),
        }

    def validate_prompt(self, prompt: str) -> bool:
        if not isinstance(prompt, str) or not prompt.strip():
            logger.warning("LLM_PROMPT_REJECTED", extra={"reason": "empty"})
            return False
        if len(prompt) > MAX_PROMPT_CHARS:
            logger.warning(
                "LLM_PROMPT_REJECTED",
                extra={"reason": "too_long", "length": len(prompt)}
            )
            return False
        return True


class HuggingFaceLLM(BaseLLM):
    """HuggingFace Inference API backend over plain HTTP."""

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        if not config.endpoint:
            raise ValueError("HuggingFace backend needs an endpoint URL")

        self.endpoint = config.endpoint
        self.headers = {"Authorization": f"Bearer {config.api_key}"} if config.api_key else {}

    async def _complete(self, prompt, system_prompt, params) -> Completion:
        import aiohttp

        inputs = prompt if not system_prompt else f"{system_prompt}\n\n{prompt}"
        payload = {
            "inputs": inputs,
            "parameters": {
                "max_new_tokens": params["max_tokens"],
                "temperature": params["temperature"],
                "top_p": params["top_p"],
                "return_full_text": False,
            },
        }
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.endpoint, headers=self.headers, json=payload) as resp:
                resp.raise_for_status()
                body = await resp.json()

        # The inference API answers with a list of generations or a single one
        first = body[0] if isinstance(body, list) and body else body
        text = first.get("generated_text", "") if isinstance(first, dict) else ""
        return text, None, {"endpoint": self.endpoint}


class OpenAILLM(BaseLLM):
    """OpenAI chat-completions backend."""

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        if not config.api_key:
            raise ValueError("OpenAI backend needs an API key")

        import openai
        self.client = openai.AsyncOpenAI(api_key=config.api_key, base_url=config.endpoint)

    async def _complete(self, prompt, system_prompt, params) -> Completion:
        messages = [{"role": "user", "content": prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})

        completion = await self.client.chat.completions.create(
            model=self.config.model_name,
            messages=messages,
            timeout=self.config.timeout_seconds,
            **params,
        )
        usage = completion.usage
        return (
            completion.choices[0].message.content or "",
            usage.total_tokens if usage else None,
            None,
        )


_BACKENDS = {
    LLMProvider.HUGGINGFACE: HuggingFaceLLM,
    LLMProvider.OPENAI: OpenAILLM,
}


def create_llm(config: LLMConfig) -> BaseLLM:
    """Build the backend for ``config.provider``.

    Raises:
        ValueError: If the provider is unsupported or its settings are incomplete
    """
    backend = _BACKENDS.get(config.provider)
    if backend is None:
        raise ValueError(f"No completion backend for provider {config.provider!r}")
    return backend(config)
