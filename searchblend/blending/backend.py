"""
Base Interface for Search Backends.

A backend is anything that can execute a query and return one page of
records, a total hit count and facet counts. The blender only talks to
backends through this interface:

              ┌─────────────────┐
              │     Blender     │
              └────────┬────────┘
                       │
              ┌────────┴────────┐
              │  SearchBackend  │
              │ (abstract base) │
              └────────┬────────┘
                       │
         ┌─────────────┴─────────────┐
         ↓                           ↓
    ┌──────────┐               ┌───────────┐
    │  local   │               │ licensed  │
    │  index   │               │ discovery │
    └──────────┘               └───────────┘

Query construction is backend specific and happens before the blender
runs, so the query object is passed through untouched.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List

from searchblend.blending.models import FacetMap, RecordSequence


@dataclass
class BackendResponse:
    """One executed backend search.

    Attributes:
        records: The materialized page, in backend rank order
        total: Total hits reported by the backend
        facets: field → ``{value: count}`` or ``[[value, count], ...]``
        errors: Non-fatal warnings reported by the backend itself
    """

    records: List[Any] = field(default_factory=list)
    total: int = 0
    facets: FacetMap = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def sequence(self) -> RecordSequence:
        """Records and total as a RecordSequence."""
        return RecordSequence(records=self.records, total=self.total)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackendResponse":
        """Build from ``{"records", "total", "facets", "errors"}`` (all optional)."""
        records = list(data.get("records") or [])
        return cls(
            records=records,
            total=int(data.get("total", len(records))),
            facets=dict(data.get("facets") or {}),
            errors=[str(error) for error in data.get("errors") or []],
        )


class SearchBackend(ABC):
    """Abstract base class for a blendable search backend."""

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Backend identifier, e.g. ``"Solr"``."""

    @abstractmethod
    def search(self, query: Any, offset: int, limit: int) -> BackendResponse:
        """Execute ``query`` and return records [offset, offset + limit).

        Implementations raise on failure; the blender turns the exception
        into a partial-failure warning when the other backend succeeded.
        """


class StaticBackend(SearchBackend):
    """Backend that serves a fixed, already fetched response.

    Used by the CLI to blend responses read from files, and handy in
    tests. ``offset`` and ``limit`` slice the stored records.
    """

    def __init__(self, identifier: str, response: BackendResponse) -> None:
        self._identifier = identifier
        self.response = response

    @property
    def identifier(self) -> str:
        return self._identifier

    def search(self, query: Any, offset: int, limit: int) -> BackendResponse:
        return BackendResponse(
            records=self.response.records[offset : offset + limit],
            total=self.response.total,
            facets=self.response.facets,
            errors=list(self.response.errors),
        )
