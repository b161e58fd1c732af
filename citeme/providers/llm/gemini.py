"""Google Gemini LLM provider implementation."""
import os
import re
import time
import logging
from typing import List, Optional

try:
    import google.generativeai as genai
    from google.generativeai import types
    from google.api_core import exceptions as google_exceptions
    GEMINI_AVAILABLE = True
except ImportError:
    GEMINI_AVAILABLE = False

from .base import BaseLLMProvider
from ...exceptions import LLMError, RateLimitError
from ...utils.rate_limiter import API_LIMITS, rate_limit_api

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^\s*```[a-zA-Z]*\s*\n(.*?)\n\s*```\s*$", re.DOTALL)


class GeminiProvider(BaseLLMProvider):
    """Google Gemini LLM provider.

    Reads reference PDFs through file uploads, so the model sees the
    documents' pages rather than extracted text.
    """

    def __init__(self, config):
        """Initialize Gemini provider.

        Args:
            config: Configuration object with gemini_api_key

        Raises:
            LLMError: If Gemini library not installed or API key missing
        """
        super().__init__(config)

        if not GEMINI_AVAILABLE:
            raise LLMError(
                "google-generativeai library not installed. "
                "Install it with: pip install google-generativeai"
            )

        if not self.config.gemini_api_key:
            raise LLMError("GEMINI_API_KEY not configured")

        try:
            genai.configure(api_key=self.config.gemini_api_key)
            self.client = genai
            logger.info("Google Generative AI client configured successfully")
        except Exception as e:
            raise LLMError(f"Failed to configure Gemini client: {e}")

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
            model: Optional specific model (defaults to config.gemini_model_default)
            temperature: Generation temperature (0.0-2.0)
            max_tokens: Maximum tokens to generate
            json_mode: Ask for an ``application/json`` response

        Returns:
            Generated text

        Raises:
            LLMError: If generation fails
        """
        model = model or self.get_default_model()
        logger.info(f"Generating with Gemini model: {model}")
        self._rate_limit()

        try:
            gen_model = self.client.GenerativeModel(model)
            response = gen_model.generate_content(
                contents=[prompt],
                generation_config=self._generation_config(temperature, max_tokens, json_mode),
            )
            return self._post_process_text(response.text)

        except google_exceptions.ResourceExhausted as e:
            raise RateLimitError(f"Gemini rate limit exceeded: {e}", retry_after=API_LIMITS["gemini"][1])
        except Exception as e:
            logger.error(f"Gemini generation error: {e}")
            raise LLMError(f"Gemini generation failed: {e}")

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

        Args:
            prompt: Text prompt for generation
            file_paths: List of file paths to upload, in prompt order
            model: Optional specific model
            temperature: Generation temperature
            max_tokens: Maximum tokens to generate
            json_mode: Ask for an ``application/json`` response

        Returns:
            Generated text

        Raises:
            LLMError: If generation fails
            FileNotFoundError: If files don't exist
        """
        model = model or self.get_default_model()
        logger.info(f"Generating with Gemini model: {model} with {len(file_paths)} files")
        self._rate_limit()

        uploaded_files = []

        try:
            logger.info(f"Uploading {len(file_paths)} files to Gemini...")
            for file_path in file_paths:
                uploaded_files.append(self._upload(file_path))

            contents_for_api = uploaded_files + [prompt]
            logger.info(
                f"Constructed contents: {len(uploaded_files)} file(s) and 1 text prompt"
            )

            logger.info(f"Sending request to Gemini API model '{model}'...")
            gen_model = self.client.GenerativeModel(model)
            response = gen_model.generate_content(
                contents=contents_for_api,
                generation_config=self._generation_config(temperature, max_tokens, json_mode),
            )
            return self._post_process_text(response.text)

        except (FileNotFoundError, LLMError):
            raise
        except google_exceptions.ResourceExhausted as e:
            raise RateLimitError(f"Gemini rate limit exceeded: {e}", retry_after=API_LIMITS["gemini"][1])
        except Exception as e:
            logger.error(f"Gemini generation with files error: {e}")
            raise LLMError(f"Gemini generation with files failed: {e}")

        finally:
            if uploaded_files:
                logger.info("Cleaning up uploaded Gemini files...")
                for f in uploaded_files:
                    try:
                        self.client.delete_file(name=f.name)
                        logger.info(f"Deleted uploaded file: {f.name}")
                    except Exception as del_e:
                        logger.warning(f"Failed to delete uploaded file {f.name}: {del_e}")

    def _upload(self, file_path: str):
        """Upload one file and wait until Gemini reports it ACTIVE."""
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            uploaded_file = self.client.upload_file(path=file_path)
            time.sleep(2)  # Wait for processing

            file_info = self.client.get_file(name=uploaded_file.name)
            if file_info.state.name != "ACTIVE":
                logger.warning(
                    f"File {uploaded_file.name} not active after upload "
                    f"(state: {file_info.state.name}). Waiting..."
                )
                time.sleep(10)
                file_info = self.client.get_file(name=uploaded_file.name)
                if file_info.state.name != "ACTIVE":
                    raise LLMError(
                        f"File {uploaded_file.name} failed to become active. "
                        f"Final state: {file_info.state.name}"
                    )
        except LLMError:
            raise
        except Exception as e:
            logger.error(f"Failed to upload file {file_path}: {e}")
            raise LLMError(f"File upload failed for {file_path}: {e}")

        logger.info(f"Uploaded file: {file_path} as {uploaded_file.name}, URI: {uploaded_file.uri}")
        return uploaded_file

    def _generation_config(self, temperature: float, max_tokens: Optional[int], json_mode: bool):
        generation_config = types.GenerationConfig(temperature=temperature)
        if max_tokens:
            generation_config.max_output_tokens = max_tokens
        if json_mode:
            generation_config.response_mime_type = "application/json"
        return generation_config

    def _rate_limit(self) -> None:
        if getattr(self.config, "enable_rate_limiting", True):
            max_calls, period = API_LIMITS["gemini"]
            rate_limit_api("gemini", max_calls, period)

    def _post_process_text(self, text: str) -> str:
        """Strip a markdown code fence wrapped around the whole reply."""
        if not text:
            return text
        match = _CODE_FENCE.match(text)
        if match:
            text = match.group(1)
        return text.strip()
