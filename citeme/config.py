"""Configuration management for CiteMe."""
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv


@dataclass
class Config:
    """CiteMe configuration.

    Attributes:
        gemini_api_key: API key for Google Gemini
        gemini_model_default: Vision-capable Gemini model used for citations
        temperature: Generation temperature for citation requests
        citation_style: Default citation style for a new session
        heading_max_length: Lines shorter than this (and without a period)
            are rendered as sub-headings by the formatter
        output_dir: Directory for exported files
        page_size: Page size for PDF export ('A4' or 'letter')
        enable_rate_limiting: Enable API rate limiting
    """

    # LLM Settings
    gemini_api_key: Optional[str] = None
    gemini_model_default: str = "gemini-2.0-flash"
    temperature: float = 0.1

    # Formatting Settings
    citation_style: str = "OSCOLA"
    heading_max_length: int = 60

    # Export Settings
    output_dir: str = "./output"
    page_size: str = "A4"

    # Rate Limiting
    enable_rate_limiting: bool = True

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Config":
        """Load configuration from environment variables.

        Args:
            env_file: Path to .env file (optional)

        Returns:
            Config instance with values from environment
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model_default=os.getenv("GEMINI_MODEL_DEFAULT", "gemini-2.0-flash"),
            temperature=float(os.getenv("CITEME_TEMPERATURE", "0.1")),
            citation_style=os.getenv("CITEME_CITATION_STYLE", "OSCOLA"),
            heading_max_length=int(os.getenv("CITEME_HEADING_MAX_LENGTH", "60")),
            output_dir=os.getenv("CITEME_OUTPUT_DIR", "./output"),
            page_size=os.getenv("CITEME_PAGE_SIZE", "A4"),
            enable_rate_limiting=os.getenv("CITEME_ENABLE_RATE_LIMITING", "true").lower()
            == "true",
        )

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Load configuration from dictionary.

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Config instance
        """
        return cls(**{k: v for k, v in config_dict.items() if k in cls.__annotations__})
