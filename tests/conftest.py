"""
Shared pytest fixtures and configuration for searchblend tests.

Fixture Organization
--------------------
- **record_ids / records_of**: Plain helpers, imported with ``from conftest import ...``
- **temp_dir**: Temporary directory for file operations
- **make_response**: BackendResponse builder
- **mock_backend / failing_backend**: Mock SearchBackend instances
- **blend_config**: Config with named backends and facet mappings
"""

import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Iterable, List, Optional
from unittest.mock import Mock

import pytest

from searchblend.blending.backend import BackendResponse, SearchBackend
from searchblend.blending.models import SourcedRecord
from searchblend.core.config import (
    BackendsConfig,
    BackendSideConfig,
    BlendingConfig,
    Config,
    FacetFieldMapping,
)


def record_ids(prefix: str, count: int) -> List[str]:
    """Return ["P0", "P1", ...] style record identifiers."""
    return [f"{prefix}{i}" for i in range(count)]


def records_of(items: Iterable[SourcedRecord]) -> List[Any]:
    """Unwrap blended items back to the backend records."""
    return [item.record for item in items]


# ============================================================================
# Path and Directory Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Record Fixtures
# ============================================================================


@pytest.fixture
def make_response() -> Callable[..., BackendResponse]:
    """Factory for BackendResponse objects."""

    def _make(
        prefix: str,
        count: int,
        total: Optional[int] = None,
        facets: Optional[Dict[str, Any]] = None,
        errors: Optional[List[str]] = None,
    ) -> BackendResponse:
        return BackendResponse(
            records=record_ids(prefix, count),
            total=count if total is None else total,
            facets=facets or {},
            errors=errors or [],
        )

    return _make


# ============================================================================
# Backend Fixtures
# ============================================================================


@pytest.fixture
def mock_backend() -> Callable[[str, BackendResponse], Mock]:
    """Factory for a mock backend that returns a fixed response."""

    def _make(identifier: str, response: BackendResponse) -> Mock:
        backend = Mock(spec=SearchBackend)
        backend.identifier = identifier
        backend.search.return_value = response
        return backend

    return _make


@pytest.fixture
def failing_backend() -> Callable[..., Mock]:
    """Factory for a mock backend whose search raises."""

    def _make(identifier: str, error: Optional[Exception] = None) -> Mock:
        backend = Mock(spec=SearchBackend)
        backend.identifier = identifier
        backend.search.side_effect = error or ConnectionError("connection refused")
        return backend

    return _make


# ============================================================================
# Config Fixtures
# ============================================================================


@pytest.fixture
def blend_config() -> Config:
    """Config with Solr as primary, Primo as secondary and block size 5."""
    return Config(
        backends=BackendsConfig(
            primary=BackendSideConfig("Solr", "Local index"),
            secondary=BackendSideConfig("Primo", "Primo Central"),
        ),
        blending=BlendingConfig(block_size=5),
        facets=[
            FacetFieldMapping(
                field="format",
                secondary="ContentType",
                type="hierarchical",
                values={"Book": "0/Book/", "eBook": "1/Book/eBook/"},
            ),
            FacetFieldMapping(
                field="online_boolean",
                secondary="IsOnline",
                type="boolean",
                values={"yes": True, "no": False},
            ),
        ],
    )
