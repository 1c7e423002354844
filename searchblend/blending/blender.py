"""
Blended Search: two backends, one result list.

Runs the same search against a primary and a secondary backend and
combines the two result lists into one paginated, faceted result.

Architecture Context
--------------------
    Blender.search(query, offset, limit, filters)
        ├── active_sides(filters)             ← blender_backend pseudo-filter
        ├── _fetch()                          ← both backends in parallel
        │     ├── primary.search(query, 0, blend_limit)
        │     └── secondary.search(query, 0, blend_limit)
        └── blend(primary, secondary, offset, limit, fetch_more)
              ├── resolve_block_size(total)   ← adaptive block sizes
              ├── interleave()                ← block alternation + boost
              │     └── backend.search(query, n, max(block_size, 20))
              └── FacetMerger.merge()         ← facet vocabulary mapping

Placement always starts at position 0 because the placement of record
``offset`` depends on every record placed before it. Only the first
``blend_limit`` records of each backend are fetched up front; deeper pages
pull further batches from a backend as the placement reaches them.

Failure Handling
----------------
- One backend fails or times out → the other backend's records are
  returned alone and BlendResult.errors gets
  ``"search_backend_partial_failure"``, with the failed backend's label
  in BlendResult.error_sources.
- A later batch fails → the records placed so far stay, the rest of the
  page falls back to the other backend, and the same warning is added.
- Every active backend fails → AllBackendsFailedError.
- A backend excluded by a filter is not a failure; it contributes nothing.
"""

from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from searchblend.blending.backend import BackendResponse, SearchBackend
from searchblend.blending.block_size import parse_rules, resolve_block_size
from searchblend.blending.facets import FacetMerger
from searchblend.blending.filters import FACET_FIELD, active_sides
from searchblend.blending.interleaver import FetchMore, ResultInterleaver
from searchblend.blending.models import (
    PARTIAL_FAILURE,
    BlendResult,
    RecordSource,
)
from searchblend.core.config import Config
from searchblend.core.exceptions import AllBackendsFailedError, ValidationError
from searchblend.core.logging import get_logger

logger = get_logger(__name__)


def _check_page(offset: int, limit: int) -> None:
    if offset < 0:
        raise ValidationError(f"offset must be >= 0, got {offset}")
    if limit < 0:
        raise ValidationError(f"limit must be >= 0, got {limit}")


def _labels(config: Config) -> Dict[RecordSource, str]:
    return {
        RecordSource.PRIMARY: config.backends.primary.label,
        RecordSource.SECONDARY: config.backends.secondary.label,
    }


def _reporting_failures(
    fetch_more: FetchMore, label: str, result: BlendResult
) -> FetchMore:
    """Wrap a continuation fetch so a failure ends that source's records."""

    def fetch(offset: int, count: int) -> List[Any]:
        try:
            return fetch_more(offset, count)
        except Exception as e:
            logger.warning(f"Search in {label} failed: {e}", offset=offset)
            result.add_error(PARTIAL_FAILURE, source=label)
            return []

    return fetch


def blend(
    primary: Optional[BackendResponse],
    secondary: Optional[BackendResponse],
    offset: int,
    limit: int,
    config: Optional[Config] = None,
    fetch_more: Optional[Mapping[RecordSource, FetchMore]] = None,
) -> BlendResult:
    """Blend two already executed backend responses into one page.

    A None response marks a failed backend: the result is built from the
    other side and carries the partial-failure warning, attributed to the
    failed backend's label.

    Args:
        primary: Primary backend response, or None if it failed
        secondary: Secondary backend response, or None if it failed
        offset: Index of the first blended record to return
        limit: Page size; 0 returns totals and facets only
        config: Configuration (defaults to Config())
        fetch_more: Per side, ``(backend_offset, count) -> records`` used
            when a response holds fewer records than the page needs

    Returns:
        BlendResult for records [offset, offset + limit).

    Raises:
        ValidationError: If offset or limit is negative.
        AllBackendsFailedError: If both responses are None.
        ConfigValidationError: For an invalid block size configuration.
    """
    config = config or Config()
    _check_page(offset, limit)
    if primary is None and secondary is None:
        raise AllBackendsFailedError("No backend returned results")

    labels = _labels(config)
    responses = {RecordSource.PRIMARY: primary, RecordSource.SECONDARY: secondary}
    result = BlendResult()
    for side, response in responses.items():
        if response is None:
            result.add_error(PARTIAL_FAILURE, source=labels[side])
    for side, response in responses.items():
        for error in (response.errors if response else []):
            result.add_error(error, source=labels[side])

    primary_total = primary.total if primary else 0
    secondary_total = secondary.total if secondary else 0
    result.total = primary_total + secondary_total

    block_size = resolve_block_size(config.blending, result.total)
    if limit:
        continuations = {
            side: _reporting_failures(fetch, labels[side], result)
            for side, fetch in (fetch_more or {}).items()
        }
        result.records = ResultInterleaver(config.blending).interleave(
            primary.sequence if primary else None,
            secondary.sequence if secondary else None,
            offset,
            limit,
            block_size=block_size,
            fetch_more=continuations,
        )

    result.facets = FacetMerger(config.facets).merge(
        primary.facets if primary else None,
        secondary.facets if secondary else None,
    )
    result.facets[FACET_FIELD] = [
        [config.backends.primary.id, primary_total],
        [config.backends.secondary.id, secondary_total],
    ]

    logger.debug(
        "Blended results",
        block_size=block_size,
        total=result.total,
        returned=len(result.records),
        errors=len(result.errors),
    )
    return result

class Blender:
    """
    Blended search over a primary and a secondary backend.

    Features:
    - Parallel execution of both backend searches with a timeout
    - Further batches fetched on demand for deep pages
    - Degraded single-backend results on partial failure
    - blender_backend pseudo-filter and pseudo-facet
    - Adaptive block size by combined result count

    Example:
        blender = Blender(solr_backend, primo_backend, config)
        result = blender.search(query, offset=20, limit=20)
        for item in result.records:
            print(item.source, item.record)
    """

    def __init__(
        self,
        primary: SearchBackend,
        secondary: SearchBackend,
        config: Optional[Config] = None,
    ) -> None:
        """
        Initialize blender.

        Args:
            primary: Primary backend (e.g. the local index)
            secondary: Secondary backend (e.g. a licensed discovery API)
            config: Configuration; backend ids and labels come from here

        Raises:
            ConfigValidationError: If an adaptive block size rule is invalid.
        """
        self.config = config or Config()
        self.backends = {
            RecordSource.PRIMARY: primary,
            RecordSource.SECONDARY: secondary,
        }
        parse_rules(self.config.blending.adaptive_block_sizes)

    def _label(self, side: RecordSource) -> str:
        return _labels(self.config)[side]

    def _fetch_more(self, side: RecordSource, query: Any) -> FetchMore:
        """Continuation fetch for one side: ``(offset, count) -> records``."""
        backend = self.backends[side]

        def fetch(offset: int, count: int) -> List[Any]:
            return backend.search(query, offset, count).records

        return fetch

    def search(
        self,
        query: Any,
        offset: int = 0,
        limit: int = 20,
        filters: Optional[Iterable[str]] = None,
        secondary_query: Any = None,
    ) -> BlendResult:
        """
        Execute a blended search.

        Args:
            query: Query for the primary backend (and the secondary one
                unless secondary_query is given)
            offset: Index of the first blended record to return
            limit: Page size; 0 asks for totals and facets only
            filters: Filter queries; blender_backend filters select sides
            secondary_query: Query for the secondary backend

        Returns:
            BlendResult for records [offset, offset + limit).

        Raises:
            ValidationError: If offset or limit is negative.
            AllBackendsFailedError: If every active backend failed.
        """
        _check_page(offset, limit)
        active = set(active_sides(filters, self.config.backends).values())
        queries = {
            RecordSource.PRIMARY: query,
            RecordSource.SECONDARY: query if secondary_query is None else secondary_query,
        }

        blend_limit = self.config.blending.blend_limit if limit else 0
        responses, failures = self._fetch(active, queries, blend_limit)
        if active and not responses:
            side, error = failures[0]
            raise AllBackendsFailedError(
                f"Search in {self._label(side)} failed: {error}",
                backend_id=self.backends[side].identifier,
            ) from error

        sides = {}
        for side in RecordSource:
            if side in responses:
                sides[side] = responses[side]
            elif side in active:
                sides[side] = None
            else:
                # Excluded by a filter: contributes nothing, is not a failure
                sides[side] = BackendResponse()

        return blend(
            sides[RecordSource.PRIMARY],
            sides[RecordSource.SECONDARY],
            offset,
            limit,
            self.config,
            fetch_more={
                side: self._fetch_more(side, queries[side]) for side in responses
            },
        )

    def _fetch(
        self,
        active: Iterable[RecordSource],
        queries: Dict[RecordSource, Any],
        fetch_limit: int,
    ) -> Tuple[Dict[RecordSource, BackendResponse], List[Tuple[RecordSource, Exception]]]:
        """Query the active backends concurrently.

        Each backend gets the same time budget; a backend that is still
        running when it expires counts as failed and its result is
        discarded.

        Returns:
            Tuple of (responses by side, [(side, exception), ...])
        """
        active = [side for side in RecordSource if side in set(active)]
        responses: Dict[RecordSource, BackendResponse] = {}
        failures: List[Tuple[RecordSource, Exception]] = []
        if not active:
            return responses, failures

        timeout = self.config.blending.search_timeout_seconds
        executor = ThreadPoolExecutor(max_workers=len(active))
        try:
            futures = {
                executor.submit(
                    self.backends[side].search, queries[side], 0, fetch_limit
                ): side
                for side in active
            }
            _, not_done = wait(futures, timeout=timeout)

            for future, side in futures.items():
                if future in not_done:
                    future.cancel()
                    error: Exception = TimeoutError(f"timed out after {timeout}s")
                else:
                    try:
                        responses[side] = future.result()
                        continue
                    except Exception as e:
                        error = e
                failures.append((side, error))
                logger.warning(f"Search in {self._label(side)} failed: {error}")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return responses, failures
