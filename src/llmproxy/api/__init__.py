"""Cross-cutting HTTP helpers: exception hierarchy, error sanitizer, retry."""
from .error_sanitizer import ErrorSanitizer, sanitize_error_message
from .exceptions import (
    ConfigurationError,
    InvalidUploadError,
    LLMProxyError,
    NetworkError,
    ResourceNotFoundError,
    UpstreamServiceError,
)
from .resilience import retry

__all__ = [
    "ConfigurationError",
    "ErrorSanitizer",
    "InvalidUploadError",
    "LLMProxyError",
    "NetworkError",
    "ResourceNotFoundError",
    "UpstreamServiceError",
    "retry",
    "sanitize_error_message",
]
