# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import re
from datetime import datetime, timezone
from typing import Any

_NON_DIGITS = re.compile(r"\D")


# =============================================================================
# Text Utilities
# =============================================================================

def clean_text(value: Any) -> str:
    """
    Normalize a raw form value to a trimmed string.

    Example:
        clean_text("  Juan ")  # "Juan"
        clean_text(None)       # ""
    """
    if value is None:
        return ""
    return str(value).strip()


def digits_only(value: Any, default: str = "0") -> str:
    """
    Strip every non-digit character from a numeric form value.

    Args:
        value: Raw input, e.g. "$ 1.500.000" or 1500000
        default: Returned when nothing is left

    Example:
        digits_only("$ 1.500.000")  # "1500000"
        digits_only("")             # "0"
    """
    if value is None:
        return default
    return _NON_DIGITS.sub("", str(value)) or default


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result
