"""
Centralized Exception Hierarchy for searchblend.

All exceptions raised by searchblend inherit from SearchBlendError so
callers can catch everything from this package with a single clause.

Each exception includes:
- error_code: Unique identifier for documentation lookup (e.g., "SB-CFG-001")
- why_it_happened: Explanation of the root cause
- how_to_fix: Actionable steps to resolve the issue

Usage
-----
    from searchblend.core.exceptions import (
        SearchBlendError,
        ConfigValidationError,
    )

    try:
        result = blender.search(query, offset=0, limit=20)
    except ConfigValidationError as e:
        logger.error(f"Bad blending configuration: {e}")
    except SearchBlendError as e:
        logger.error(f"Blended search failed: {e}")

Exception Hierarchy
-------------------
    SearchBlendError (base)
    ├── ValidationError
    │   └── ConfigValidationError
    └── BackendError
        └── AllBackendsFailedError

Only configuration problems and a total backend outage are fatal. A single
failed backend is reported through BlendResult.errors instead.
"""

import re
from typing import Any, List, Optional


def sanitize_message(message: str) -> str:
    """Sanitize an error message to avoid leaking sensitive info.

    Backend exceptions frequently embed request URLs, so credentials and
    tokens are masked before the message reaches logs or the user.

    Args:
        message: Original error message

    Returns:
        Sanitized message with sensitive info replaced
    """
    if not message:
        return message

    patterns = [
        # API keys and tokens passed as query parameters
        (r"((?:api_?key|apikey|token|secret)[=:]\s*)[^\s&]+", r"\1<hidden>"),
        # Bearer tokens
        (r"Bearer\s+[a-zA-Z0-9_.-]+", r"Bearer <token>"),
        # Basic auth in URLs
        (r"://[^:/\s]+:[^@/\s]+@", r"://<user>:<pass>@"),
        # Long hex strings (session ids, keys)
        (r"[a-fA-F0-9]{40,}", r"<hash>"),
    ]

    result = message
    for pattern, replacement in patterns:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)
    return result


def get_root_cause(exc: BaseException) -> BaseException:
    """Follow __cause__ / __context__ links to the original exception."""
    seen = set()
    current = exc

    while current is not None:
        if id(current) in seen:
            break
        seen.add(id(current))

        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__context__ is not None:
            current = current.__context__
        else:
            break

    return current


class SearchBlendError(Exception):
    """
    Base exception for all searchblend errors.

    Example
    -------
        try:
            blender.search(query, 0, 20)
        except SearchBlendError as e:
            print(f"[{e.error_code}] {e}")
            print(f"Fix: {e.how_to_fix}")
    """

    error_code: str = "SB-ERR-000"
    why_it_happened: str = "An unexpected error occurred"
    how_to_fix: List[str] = ["Check the error message for details"]

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        """Initialize SearchBlendError with helpful information.

        Args:
            message: Human-readable error message
            error_code: Unique identifier (e.g., "SB-CFG-001")
            why_it_happened: Explanation of root cause
            how_to_fix: List of actionable fix suggestions
        """
        super().__init__(sanitize_message(message))

        if error_code is not None:
            self.error_code = error_code
        if why_it_happened is not None:
            self.why_it_happened = why_it_happened
        if how_to_fix is not None:
            self.how_to_fix = how_to_fix

    @property
    def user_message(self) -> str:
        """Get the user-friendly error message."""
        return str(self)

    def get_root_cause(self) -> BaseException:
        """Get the root cause of this exception chain."""
        return get_root_cause(self)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(SearchBlendError):
    """
    Raised when validation fails.

    This can occur when:
    - Configuration is invalid
    - Request parameters (offset, limit) are out of range
    """

    error_code = "SB-VAL-000"
    why_it_happened = "Validation failed for input data or configuration"
    how_to_fix = [
        "Check the error message for specific validation failures",
        "Review the expected format or value constraints",
    ]


class ConfigValidationError(ValidationError):
    """
    Raised when blending or facet mapping configuration is invalid.

    A bad block size would silently corrupt pagination, so it is
    rejected before any records are placed.

    Attributes
    ----------
    field : str
        The configuration field that failed validation
    value : any
        The invalid value
    """

    error_code = "SB-CFG-001"
    why_it_happened = (
        "A configuration value is invalid. "
        "The searchblend.yaml file may have incorrect settings"
    )
    how_to_fix = [
        "Check searchblend.yaml for syntax errors",
        "Verify blending.block_size is a positive integer",
        "Run 'searchblend layout' to preview the block layout",
    ]

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code,
            why_it_happened=why_it_happened,
            how_to_fix=how_to_fix,
        )
        self.field = field
        self.value = value


# ============================================================================
# Backend Exceptions
# ============================================================================


class BackendError(SearchBlendError):
    """
    Raised when a search backend cannot deliver results.

    Attributes
    ----------
    backend_id : str
        Identifier of the failing backend (e.g. "Solr")
    """

    error_code = "SB-BACK-000"
    why_it_happened = "A search backend did not return a result"
    how_to_fix = [
        "Check that the backend service is reachable",
        "Review the log for the backend's original error",
    ]

    def __init__(
        self,
        message: str,
        backend_id: Optional[str] = None,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code,
            why_it_happened=why_it_happened,
            how_to_fix=how_to_fix,
        )
        self.backend_id = backend_id


class AllBackendsFailedError(BackendError):
    """
    Raised when no active backend returned results.

    With at least one working backend the search degrades to single-source
    mode; with none there is nothing to blend.
    """

    error_code = "SB-BACK-001"
    why_it_happened = "Every active search backend failed or timed out"
    how_to_fix = [
        "Check connectivity to both search backends",
        "Increase blending.search_timeout_seconds if the backends are slow",
    ]
