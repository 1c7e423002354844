"""
The ``blender_backend`` pseudo-filter.

Users can narrow a blended search to one backend through an ordinary
filter query on the ``blender_backend`` pseudo-facet:

    blender_backend:"Solr"                                  only Solr
    {!tag=blender_backend_filter}blender_backend:(blender_backend:"Solr" OR blender_backend:"Primo")
    -blender_backend:"Primo"                                everything but Primo

Positive filters are OR-ed together and applied first; negative filters
are applied last. Unknown backend ids are ignored with a warning.
"""

import re
from typing import Dict, Iterable, List, Optional

from searchblend.blending.models import RecordSource
from searchblend.core.config import BackendsConfig
from searchblend.core.logging import get_logger

logger = get_logger(__name__)

FACET_FIELD = "blender_backend"
_INCLUDE_PREFIX = f"{FACET_FIELD}:"
_EXCLUDE_PREFIX = f"-{FACET_FIELD}:"
_ADVANCED_OR = re.compile(r"\{!tag=blender_backend_filter\}blender_backend:\((.+)\)")


def _filter_value(filter_str: str, prefix: str, delimiter: Optional[str]) -> str:
    value = filter_str[len(prefix) :].strip().strip('"')
    if delimiter:
        value = value.split(delimiter, 1)[0]
    return value


def active_sides(
    filters: Optional[Iterable[str]],
    backends: BackendsConfig,
    delimiter: Optional[str] = None,
) -> Dict[str, RecordSource]:
    """Resolve which sides take part in a search.

    Args:
        filters: Filter query strings; only blender_backend ones are read
        backends: Configured primary and secondary backends
        delimiter: Optional facet delimiter; text after it is ignored

    Returns:
        backend id → RecordSource of every active side, primary first.
    """
    available = {
        backends.primary.id: RecordSource.PRIMARY,
        backends.secondary.id: RecordSource.SECONDARY,
    }
    filters = list(filters or [])

    selected: Dict[str, RecordSource] = {}
    for filter_str in filters:
        advanced = _ADVANCED_OR.search(filter_str)
        candidates: List[str] = (
            advanced.group(1).split(" OR ") if advanced else [filter_str]
        )
        for candidate in candidates:
            candidate = candidate.strip()
            if not candidate.startswith(_INCLUDE_PREFIX):
                continue
            backend_id = _filter_value(candidate, _INCLUDE_PREFIX, delimiter)
            if backend_id not in available:
                logger.warning(
                    f"Invalid {FACET_FIELD} filter: Backend {backend_id} not enabled"
                )
                continue
            selected[backend_id] = available[backend_id]

    active = dict(available)
    if selected:
        active = {key: value for key, value in available.items() if key in selected}

    for filter_str in filters:
        if filter_str.startswith(_EXCLUDE_PREFIX):
            active.pop(_filter_value(filter_str, _EXCLUDE_PREFIX, delimiter), None)

    return active
