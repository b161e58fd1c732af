"""Custom exceptions for CiteMe."""


class CiteMeError(Exception):
    """Base exception for all CiteMe errors."""

    pass


class ConfigurationError(CiteMeError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(CiteMeError):
    """Raised when input validation fails."""

    pass


class UnknownStyleError(ValidationError):
    """Raised when a citation style is not in the supported set."""

    def __init__(self, style, supported=None):
        self.style = style
        self.supported = list(supported or [])
        message = f"Unknown citation style: {style!r}"
        if self.supported:
            message += f". Must be one of: {', '.join(self.supported)}"
        super().__init__(message)


class MissingUploadError(ValidationError):
    """Raised when a generation request has no reference documents."""

    pass


class LLMError(CiteMeError):
    """Raised when LLM API call fails."""

    pass


class RateLimitError(LLMError):
    """Raised when API rate limit is hit."""

    def __init__(self, message: str, retry_after: float = 0):
        super().__init__(message)
        self.retry_after = retry_after


class GenerationError(CiteMeError):
    """Raised when a citation cannot be generated for a document."""

    pass


class ConversionError(CiteMeError):
    """Raised when document export fails."""

    pass
