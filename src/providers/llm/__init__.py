"""LLM provider adapters.

Two concrete implementations of ILLMProvider (src/interfaces/llm_provider.py):
    - AnthropicLLMProvider - Claude Sonnet
    - OpenAILLMProvider    - gpt-4o-mini, or any OpenAI-compatible endpoint

The ingest CLI builds the first provider with a configured API key
(Anthropic preferred) and hands it to the transcript segmenter.
"""

from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OpenAILLMProvider"]
