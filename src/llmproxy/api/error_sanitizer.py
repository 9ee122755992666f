"""
Error Message Sanitization for API Responses.

Provider SDK errors routinely echo request details back: the OpenAI and
Anthropic SDKs include the offending key prefix on auth failures, and a
failed Google Custom Search call carries the full request URL including the
``key=`` query parameter. Nothing of that kind may reach a client.

The original message is always logged server-side; only the sanitized
message is placed in HTTP error bodies.

Usage:
    from src.llmproxy.api.error_sanitizer import sanitize_error_message

    try:
        ...
    except openai.APIError as e:
        logger.error(f"OpenAI call failed: {e}")
        raise HTTPException(
            status_code=502,
            detail=sanitize_error_message(str(e), "Upstream error"),
        )

What Gets Sanitized
-------------------
1. Provider credentials:
   - OpenAI keys: sk-proj-abc... → [OPENAI_KEY]
   - Anthropic keys: sk-ant-api03-... → [ANTHROPIC_KEY]
   - Google API keys: AIzaSy... → [GOOGLE_KEY]
   - Query parameters: ?key=...&cx=... → key=[REDACTED]
2. Authentication headers and tokens (Bearer, api_key=, JWTs)
3. Environment variable names of secrets
4. File paths and Python stack traces
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


@dataclass
class SanitizationResult:
    """Result of error message sanitization.

    Attributes:
        sanitized_message: Sanitized error message (safe to return to client)
        redaction_count: Number of redactions made
        original_length: Length of original message
        sanitized_length: Length of sanitized message
    """

    sanitized_message: str
    redaction_count: int
    original_length: int
    sanitized_length: int

    @property
    def was_sanitized(self) -> bool:
        """Check if any redactions were made."""
        return self.redaction_count > 0


class ErrorSanitizer:
    """Sanitizer for error messages in API responses.

    Usage:
        sanitizer = ErrorSanitizer()
        result = sanitizer.sanitize("Incorrect API key provided: sk-proj-abc123...")
        # result.sanitized_message == "Incorrect API key provided: [OPENAI_KEY]"

        # Custom pattern
        sanitizer.add_pattern(r'org-[A-Za-z0-9]{10,}', '[OPENAI_ORG]')

    Attributes:
        patterns: List of (regex_pattern, replacement) tuples
        max_message_length: Maximum length of sanitized messages
    """

    # Order matters - more specific patterns come first
    DEFAULT_PATTERNS: list[tuple[str, str]] = [
        # Provider keys (Anthropic before the generic OpenAI prefix)
        (r'\bsk-ant-[A-Za-z0-9_\-]+', '[ANTHROPIC_KEY]'),
        (r'\bsk-(?:proj-|svcacct-)?[A-Za-z0-9_\-\*]{8,}', '[OPENAI_KEY]'),
        (r'\bAIza[0-9A-Za-z_\-]{20,}', '[GOOGLE_KEY]'),

        # Query string credentials (Google Custom Search style)
        (r'([?&])key=[^&\s]+', r'\1key=[REDACTED]'),
        (r'([?&])cx=[^&\s]+', r'\1cx=[REDACTED]'),

        # Secret environment variables used by this service
        (r'\b(OPENAI_API_KEY|ANTHROPIC_API_KEY|GOOGLE_API_KEY|GOOGLE_SEARCH_ENGINE_ID)\b', '[ENV_VAR]'),

        # Authentication tokens and keys
        (r'bearer\s+[A-Za-z0-9_\-\.]+', 'Bearer [REDACTED]'),
        (r'authorization[:\s]+[^\s\n]+', 'Authorization: [REDACTED]'),
        (r'api[-_]?key\s*[=:]\s*[^\s,;]+', 'api_key=[REDACTED]'),
        (r'access[-_]?token\s*[=:]\s*[^\s,;]+', 'access_token=[REDACTED]'),

        # File paths (Unix and Windows)
        (r'/(?:home|root|usr|var|etc|opt|mnt|tmp)/[^\s\n,;]+', '[FILE_PATH]'),
        (r'[A-Z]:\\[^\s\n,;]+', '[FILE_PATH]'),

        # Stack traces (Python)
        (r'Traceback \(most recent call last\):[\s\S]*?(?=\n\n|\n[A-Z]|\Z)', '[STACK_TRACE]'),
        (r'File "([^"]+)", line \d+', 'File "[REDACTED]", line [REDACTED]'),

        # JWT tokens
        (r'\beyJ[A-Za-z0-9_-]*\.eyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]+\b', '[JWT_REDACTED]'),
    ]

    def __init__(
        self,
        patterns: Optional[list[tuple[str, str]]] = None,
        max_message_length: int = 500,
    ):
        """Initialize the sanitizer.

        Args:
            patterns: Custom patterns to use (defaults to DEFAULT_PATTERNS)
            max_message_length: Maximum length of sanitized message
        """
        self.patterns = list(patterns or self.DEFAULT_PATTERNS)
        self.max_message_length = max_message_length
        self._compiled_patterns = [
            (re.compile(pattern, re.IGNORECASE), replacement)
            for pattern, replacement in self.patterns
        ]

    def sanitize(self, message: str, error_type: Optional[str] = None) -> SanitizationResult:
        """Sanitize error message for safe client exposure.

        Args:
            message: Raw error message
            error_type: Optional error category used as a prefix

        Returns:
            SanitizationResult with sanitized message
        """
        if not message:
            return SanitizationResult(
                sanitized_message="An error occurred",
                redaction_count=0,
                original_length=0,
                sanitized_length=17,
            )

        original_length = len(message)
        sanitized = message
        redaction_count = 0

        for pattern, replacement in self._compiled_patterns:
            sanitized, matches = pattern.subn(replacement, sanitized)
            redaction_count += matches

        if len(sanitized) > self.max_message_length:
            sanitized = sanitized[: self.max_message_length] + "... [TRUNCATED]"

        if not sanitized.strip():
            sanitized = "An error occurred"

        if error_type and not sanitized.startswith(error_type):
            sanitized = f"{error_type}: {sanitized}"

        return SanitizationResult(
            sanitized_message=sanitized,
            redaction_count=redaction_count,
            original_length=original_length,
            sanitized_length=len(sanitized),
        )

    def add_pattern(self, pattern: str, replacement: str) -> None:
        """Add a custom sanitization pattern."""
        self.patterns.append((pattern, replacement))
        self._compiled_patterns.append(
            (re.compile(pattern, re.IGNORECASE), replacement)
        )

    def is_safe(self, message: str) -> bool:
        """Return True if no pattern would redact anything in ``message``."""
        for pattern, _ in self._compiled_patterns:
            if pattern.search(message):
                return False
        return True


_default_sanitizer: Optional[ErrorSanitizer] = None


def get_sanitizer() -> ErrorSanitizer:
    """Get the default error sanitizer instance."""
    global _default_sanitizer
    if _default_sanitizer is None:
        _default_sanitizer = ErrorSanitizer()
    return _default_sanitizer


def sanitize_error_message(
    message: str,
    error_type: Optional[str] = None,
) -> str:
    """Convenience function to sanitize error messages.

    Example:
        >>> sanitize_error_message("Missing OPENAI_API_KEY", "Configuration error")
        'Configuration error: Missing [ENV_VAR]'
    """
    return get_sanitizer().sanitize(message, error_type).sanitized_message
