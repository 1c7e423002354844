"""
Data model for blended search.

Records coming from a backend are opaque to the blender. They are moved,
never inspected; the only thing attached to them is the side they came
from, and that lives in a SourcedRecord wrapper instead of on the record.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

# field -> [[value, count], ...]
FacetPairs = List[List[Any]]
FacetFields = Dict[str, FacetPairs]
# Accepted input shapes: value -> count, or ordered (value, count) pairs
FacetValues = Union[Mapping[str, int], Sequence[Tuple[str, int]], Sequence[Sequence[Any]]]
FacetMap = Mapping[str, FacetValues]

PARTIAL_FAILURE = "search_backend_partial_failure"


class RecordSource(str, Enum):
    """Which backend a blended record came from."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class SourcedRecord:
    """A backend record tagged with its source."""

    record: Any
    source: RecordSource

    @property
    def is_primary(self) -> bool:
        return self.source is RecordSource.PRIMARY


@dataclass
class RecordSequence:
    """One page of a backend result plus the backend's total hit count.

    ``total`` may exceed ``len(records)``: only a prefix of the remote
    result set is materialized.
    """

    records: List[Any] = field(default_factory=list)
    total: int = 0

    def __post_init__(self) -> None:
        self.records = list(self.records)
        if self.total < 0:
            raise ValueError(f"total must be >= 0, got {self.total}")
        if self.total < len(self.records):
            self.total = len(self.records)

    def __len__(self) -> int:
        return len(self.records)


@dataclass
class BlendResult:
    """One blended page: records, merged facets, combined total and warnings."""

    records: List[SourcedRecord] = field(default_factory=list)
    facets: FacetFields = field(default_factory=dict)
    total: int = 0
    errors: List[str] = field(default_factory=list)
    # error tag -> labels of the backends that reported or caused it
    error_sources: Dict[str, List[str]] = field(default_factory=dict)

    def add_error(self, error: str, source: Optional[str] = None) -> None:
        """Record a warning tag once, keeping first-seen order.

        ``source`` is the display label of the backend behind the warning;
        each label is kept once per tag.
        """
        if error not in self.errors:
            self.errors.append(error)
        if source:
            sources = self.error_sources.setdefault(error, [])
            if source not in sources:
                sources.append(source)

    @property
    def is_partial(self) -> bool:
        return PARTIAL_FAILURE in self.errors

    @property
    def failed_sources(self) -> List[str]:
        """Labels of the backends that failed during this search."""
        return list(self.error_sources.get(PARTIAL_FAILURE, []))

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation used by the CLI."""
        return {
            "total": self.total,
            "records": [
                {"source": item.source.value, "record": item.record}
                for item in self.records
            ],
            "facets": self.facets,
            "errors": list(self.errors),
            "error_sources": {
                error: list(sources) for error, sources in self.error_sources.items()
            },
        }
