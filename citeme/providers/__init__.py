"""External service providers."""
from .llm import BaseLLMProvider, GeminiProvider

__all__ = ["BaseLLMProvider", "GeminiProvider"]
