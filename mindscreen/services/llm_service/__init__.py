"""LLM Service: therapeutic replies for analysed messages.

Model output is optional. Crisis messages get a fixed protocol response,
and any model failure falls back to a deterministic reply chosen by
conversational context and risk tier.
"""

from .base_llm import BaseLLM, HuggingFaceLLM, LLMConfig, LLMProvider, LLMResponse, OpenAILLM, create_llm
from .fallback_responses import ResponseTable, classify_context, get_table, register_table
from .response_generator import (
    ResponseGenerator,
    ResponseSource,
    TherapeuticResponse,
    UnsafeResponseError,
    find_unsafe_pattern,
)

__all__ = [
    "BaseLLM",
    "HuggingFaceLLM",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "OpenAILLM",
    "create_llm",
    "ResponseTable",
    "classify_context",
    "get_table",
    "register_table",
    "ResponseGenerator",
    "ResponseSource",
    "TherapeuticResponse",
    "UnsafeResponseError",
    "find_unsafe_pattern",
]
