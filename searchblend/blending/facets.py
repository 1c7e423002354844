"""
Facet Merging across two backend vocabularies.

The primary and secondary backends facet on different field names and
value tokens. A list of FacetFieldMapping rules translates the secondary
side into the primary vocabulary so the counts can be added together.

Algorithm (per mapped primary field)
------------------------------------
1. Skip the field when the secondary backend has no data for it.
2. Translate each secondary value:
   - explicit mapping → mapped value (for boolean facets, "true" or "false"
     by the Python truthiness of the mapped value)
   - boolean without mapping → dropped
   - hierarchical value not shaped like ``<level>/<path>/`` → ``0/<value>/``
3. Add the count to the primary count of the translated value.
4. For hierarchical facets, add the count to every ancestor node:
   ``2/a/b/c/`` also feeds ``1/a/b/`` and ``0/a/``.
5. Re-sort the field by descending count (stable).

Every field is returned as Solr-style ``[[value, count], ...]`` pairs.
Unmapped primary fields pass through with their order intact, and the
input maps are never modified.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from searchblend.blending.models import FacetFields, FacetMap, FacetValues
from searchblend.core.config import FacetFieldMapping
from searchblend.core.logging import get_logger

logger = get_logger(__name__)

MAX_HIERARCHY_DEPTH = 32
HIERARCHY_KEY = re.compile(r"^\d+/.+/$")


def to_counts(values: Optional[FacetValues]) -> Dict[str, int]:
    """Normalize ``{value: count}`` or ``[(value, count), ...]`` to a new dict."""
    if not values:
        return {}
    if isinstance(values, Mapping):
        return dict(values)

    counts: Dict[str, int] = {}
    for pair in values:
        value, count = pair[0], pair[1]
        counts[value] = counts.get(value, 0) + count
    return counts


def to_pairs(counts: Mapping[str, int]) -> List[List[Any]]:
    """Convert a value → count map to ``[[value, count], ...]``."""
    return [[value, count] for value, count in counts.items()]


def sort_by_count(counts: Mapping[str, int]) -> Dict[str, int]:
    """Stable sort by descending count."""
    return dict(sorted(counts.items(), key=lambda item: -item[1]))


def ancestor_keys(key: str) -> List[str]:
    """Ancestor nodes of a hierarchical facet key, nearest first.

    ``"2/a/b/c/"`` → ``["1/a/b/", "0/a/"]`` and ``"1/x/"`` → ``["0/x/"]``.
    The level prefix decides how many ancestors there are, bounded only by
    MAX_HIERARCHY_DEPTH; a level deeper than the path repeats the full
    path, so ``"3/a/"`` → ``["2/a/", "1/a/", "0/a/"]``.
    """
    level_token, _, path = key.partition("/")
    try:
        level = int(level_token)
    except ValueError:
        return []

    segments = path.rstrip("/").split("/")
    level = min(level, MAX_HIERARCHY_DEPTH)

    keys = []
    for i in range(level - 1, -1, -1):
        keys.append(f"{i}/" + "/".join(segments[: i + 1]) + "/")
    return keys


class FacetMerger:
    """
    Merge secondary facet counts into the primary facet vocabulary.

    Example:
        merger = FacetMerger([
            FacetFieldMapping("format", "ContentType", "hierarchical",
                              {"Book": "0/Book/"}),
            FacetFieldMapping("online_boolean", "IsOnline", "boolean",
                              {"yes": True}),
        ])
        facets = merger.merge(solr_facets, external_facets)
    """

    def __init__(self, mappings: Optional[Iterable[FacetFieldMapping]] = None) -> None:
        self.mappings: List[FacetFieldMapping] = list(mappings or [])

    def merge(
        self, primary_facets: Optional[FacetMap], secondary_facets: Optional[FacetMap]
    ) -> FacetFields:
        """Merge two facet maps.

        Args:
            primary_facets: field → values of the primary backend (or None)
            secondary_facets: field → values of the secondary backend (or None)

        Returns:
            field → ``[[value, count], ...]`` for every primary field and
            every mapped field that received secondary counts.
        """
        merged: Dict[str, Dict[str, int]] = {
            name: to_counts(values) for name, values in (primary_facets or {}).items()
        }
        secondary_facets = secondary_facets or {}

        for mapping in self.mappings:
            secondary_values = to_counts(secondary_facets.get(mapping.secondary))
            if not secondary_values:
                continue

            counts = merged.get(mapping.field, {})
            self._merge_field(counts, secondary_values, mapping)
            merged[mapping.field] = sort_by_count(counts)

        return {name: to_pairs(counts) for name, counts in merged.items()}

    def _merge_field(
        self,
        counts: Dict[str, int],
        secondary_values: Mapping[str, int],
        mapping: FacetFieldMapping,
    ) -> None:
        """Accumulate one secondary field into ``counts`` in place."""
        dropped = 0
        for value, count in secondary_values.items():
            mapped = self._map_value(value, mapping)
            if mapped is None:
                dropped += 1
                continue

            counts[mapped] = counts.get(mapped, 0) + count
            if mapping.is_hierarchical:
                for key in ancestor_keys(mapped):
                    counts[key] = counts.get(key, 0) + count

        if dropped:
            logger.debug(
                "Dropped unmapped boolean facet values",
                field=mapping.field,
                dropped=dropped,
            )

    @staticmethod
    def _map_value(value: Any, mapping: FacetFieldMapping) -> Optional[str]:
        """Translate one secondary value; None means drop it."""
        token = str(value)
        if token in mapping.values:
            mapped = mapping.values[token]
            if mapping.is_boolean:
                return "true" if mapped else "false"
            mapped = str(mapped)
        elif mapping.is_boolean:
            return None
        else:
            mapped = token

        if mapping.is_hierarchical and not HIERARCHY_KEY.match(mapped):
            mapped = f"0/{mapped}/"
        return mapped


def merge_facets(
    primary_facets: Optional[FacetMap],
    secondary_facets: Optional[FacetMap],
    mappings: Sequence[FacetFieldMapping],
) -> FacetFields:
    """Function form of FacetMerger.merge()."""
    return FacetMerger(mappings).merge(primary_facets, secondary_facets)
