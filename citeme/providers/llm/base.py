"""Base LLM provider interface."""
from abc import ABC, abstractmethod
from typing import Any, List, Optional


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers.

    Args:
        config: Configuration object carrying the provider's credentials
    """

    def __init__(self, config: Optional[Any] = None):
        self.config = config

    @abstractmethod
    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 1.0,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> str:
        """Generate text from a prompt.

        Args:
            prompt: Text prompt for generation
            model: Optional specific model name
            temperature: Generation temperature (0.0-2.0)
            max_tokens: Maximum tokens to generate
            json_mode: Ask the model for a JSON object

        Returns:
            Generated text

        Raises:
            LLMError: If generation fails
        """
        pass

    @abstractmethod
    def generate_with_files(
        self,
        prompt: str,
        file_paths: List[str],
        model: Optional[str] = None,
        temperature: float = 1.0,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> str:
        """Generate text from a prompt with file context.

        Files are sent in the given order, before the prompt.

        Args:
            prompt: Text prompt for generation
            file_paths: List of file paths to upload for context
            model: Optional specific model name
            temperature: Generation temperature
            max_tokens: Maximum tokens to generate
            json_mode: Ask the model for a JSON object

        Returns:
            Generated text

        Raises:
            LLMError: If generation fails
            FileNotFoundError: If files don't exist
        """
        pass

    def get_default_model(self) -> Optional[str]:
        """Get the default model for this provider."""
        return getattr(self.config, "gemini_model_default", None)
