"""Exception hierarchy for the LLM proxy.

Design Principles:
    - All exceptions inherit from LLMProxyError
    - Exceptions preserve context (original error, timestamp, details)
    - Exceptions are categorized by recoverability
    - Each exception knows the HTTP status it maps to

Exception Hierarchy:
    LLMProxyError (base)
    ├── ConfigurationError (unrecoverable - fix env)
    ├── UpstreamServiceError (provider call failed, may be retried)
    │   └── NetworkError
    ├── ResourceNotFoundError (generated file missing)
    └── InvalidUploadError (rejected multipart upload)

The agent subsystem extends LLMProxyError with its own kinds in
``src.llmproxy.agent.domain.exceptions``.
"""
from datetime import datetime, timezone
from typing import Any, Optional

# ============================================
# Base Exception
# ============================================

class LLMProxyError(Exception):
    """Base exception for all proxy errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code
        details: Additional context as a dictionary
        timestamp: When the error occurred
        cause: The original exception that caused this error
        recoverable: Whether this error might be recoverable with retry
        status_code: HTTP status used when surfaced through the API
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        self.cause = cause
        self.recoverable = recoverable

        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [f"[{self.code}]", self.message]
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================
# Configuration Errors (Unrecoverable)
# ============================================

class ConfigurationError(LLMProxyError):
    """Raised when configuration is missing or invalid."""

    status_code = 503

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list[str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details=details,
            recoverable=False,
            **kwargs,
        )


# ============================================
# Upstream Errors
# ============================================

class UpstreamServiceError(LLMProxyError):
    """Raised when a provider (OpenAI, Google, image host) call fails.

    Attributes:
        service: Name of the upstream service
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if service:
            details["service"] = service
        kwargs.setdefault("code", "UPSTREAM_ERROR")
        kwargs.setdefault("recoverable", True)
        super().__init__(message, details=details, **kwargs)
        self.service = service


class NetworkError(UpstreamServiceError):
    """Transient transport failure (connection reset, DNS, read timeout)."""

    def __init__(self, message: str = "Network request failed", **kwargs):
        kwargs.setdefault("code", "NETWORK_ERROR")
        super().__init__(message, **kwargs)


# ============================================
# Request Errors
# ============================================

class ResourceNotFoundError(LLMProxyError):
    """Raised when a generated file cannot be found on disk."""

    status_code = 404

    def __init__(self, message: str, resource: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        super().__init__(message, code="NOT_FOUND", details=details, **kwargs)


class InvalidUploadError(LLMProxyError):
    """Raised when an uploaded file fails type or size validation."""

    status_code = 400

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="INVALID_UPLOAD", **kwargs)
