"""
Result Interleaving: block alternation with a boost window.

Merges two independently ranked record sequences into one list that
alternates between the sources in fixed-size blocks.

Architecture Context
--------------------
Placement is a pure function of the position. The Blender fetches the
first records of both backends, then calls:

    Blender.search(query, offset, limit)
        ├── primary backend  → RecordSequence
        ├── secondary backend → RecordSequence
        └── interleave(primary, secondary, offset, limit, config, fetch_more)
                ├── is_primary_at_offset(p) for p in 0 .. offset+limit
                └── RecordFeed.pop()  ← fetch_more() once a sequence runs dry

Placement Rule
--------------
Block 0, 2, 4, ... draw from the primary sequence and blocks 1, 3, 5, ...
from the secondary one. The boost window overrides this near the top of
the first block:

    block_size=10, boost_position=5, boost_count=2

    position  0 1 2 3 4 5 6 7 8 9 10 11 12 13 ...
    source    P P P P P S S P P P P  P  S  S  ...

The window positions go to the secondary source and the first primary
block is extended by boost_count positions to compensate. The placement
is decided by position only; running out of records in one source is
handled by falling back to the other.
"""

from collections import deque
from math import ceil
from typing import Any, Callable, Deque, List, Mapping, Optional

from searchblend.blending.models import RecordSequence, RecordSource, SourcedRecord
from searchblend.core.config import BlendingConfig
from searchblend.core.exceptions import ConfigValidationError, ValidationError
from searchblend.core.logging import get_logger

logger = get_logger(__name__)


def _check_block_size(block_size: int) -> None:
    if not isinstance(block_size, int) or block_size <= 0:
        raise ConfigValidationError(
            f"block_size must be a positive integer, got {block_size!r}",
            field="blending.block_size",
            value=block_size,
        )


def _block_is_primary(position: int, block_size: int) -> bool:
    """Plain alternation: even blocks are primary."""
    return (position // block_size) % 2 == 0


def is_primary_at_offset(
    position: int, block_size: int, config: Optional[BlendingConfig] = None
) -> bool:
    """Decide whether output ``position`` prefers the primary source.

    The branches are evaluated in order; the order is the tie-break:

    1. outside the boost-affected range → plain block alternation
    2. inside the boost window → secondary
    3. within the extended first block → primary
    4. anything else → secondary

    Args:
        position: 0-based output position
        block_size: Alternation block size (may differ from
            config.block_size when an adaptive size is in effect)
        config: Boost settings; None disables boosting

    Returns:
        True if the position should be filled from the primary source.

    Raises:
        ConfigValidationError: If block_size is not positive.
    """
    _check_block_size(block_size)

    if config is None:
        boost_pos, boost_count = block_size, 0
    else:
        boost_pos = (
            block_size if config.boost_position is None else config.boost_position
        )
        boost_count = config.boost_count or 0

    max_boosted_pos = boost_pos + boost_count
    max_affected_pos = ceil(max_boosted_pos / block_size) * block_size + boost_count - 1

    if (
        position < boost_pos
        or boost_count == 0
        or position > max_affected_pos
        or max_boosted_pos > block_size
    ):
        return _block_is_primary(position, block_size)

    # Boost window: secondary records are pulled up into the first block.
    if boost_pos <= position < boost_pos + boost_count:
        return False

    if position < block_size + boost_count:
        return True

    return False


FetchMore = Callable[[int, int], List[Any]]

# Smallest batch requested when a source needs more records
MIN_FETCH_SIZE = 20


class RecordFeed:
    """Records of one source, handed out front to back.

    A feed starts with the records already fetched. Once those are used up
    and the source reports more hits than it has delivered, the next batch
    comes from ``fetch_more(offset, count)``. An empty batch ends the feed.

    Example:
        feed = RecordFeed(RecordSequence(["a", "b"], total=50), RecordSource.PRIMARY)
        feed.pop()  # SourcedRecord("a", RecordSource.PRIMARY)
    """

    def __init__(
        self,
        sequence: Optional[RecordSequence],
        source: RecordSource,
        fetch_more: Optional[FetchMore] = None,
        batch_size: int = MIN_FETCH_SIZE,
    ) -> None:
        self.source = source
        self.total = sequence.total if sequence is not None else 0
        self._buffer: Deque[Any] = deque(sequence.records if sequence is not None else ())
        # Backend offset of the next record to fetch
        self.offset = len(self._buffer)
        self.fetch_more = fetch_more
        self.batch_size = batch_size

    def _refill(self) -> None:
        if self.fetch_more is None or self.offset >= self.total:
            return
        records = list(self.fetch_more(self.offset, self.batch_size))
        logger.debug(
            "Fetched more records",
            source=self.source.value,
            offset=self.offset,
            received=len(records),
        )
        if not records:
            self.total = self.offset
            return
        self.offset += len(records)
        self._buffer.extend(records)

    def pop(self) -> Optional[SourcedRecord]:
        """Next record of this source, or None when it is exhausted."""
        if not self._buffer:
            self._refill()
        if not self._buffer:
            return None
        return SourcedRecord(self._buffer.popleft(), self.source)


def interleave(
    primary: Optional[RecordSequence],
    secondary: Optional[RecordSequence],
    offset: int,
    limit: int,
    config: Optional[BlendingConfig] = None,
    block_size: Optional[int] = None,
    fetch_more: Optional[Mapping[RecordSource, FetchMore]] = None,
) -> List[SourcedRecord]:
    """Interleave two record sequences and return the requested page.

    Each position takes the next record of its preferred source, or of the
    other source when the preferred one is exhausted. When both are
    exhausted the page is simply shorter than ``limit``.

    A sequence usually holds only the first records of its source. With a
    ``fetch_more`` callable for that source, further records are requested
    in batches of ``max(block_size, 20)`` as placement reaches them; without
    one the sequence is all there is.

    A None sequence stands for a failed backend and yields single-source
    pass-through; reporting the failure is the caller's job.

    Args:
        primary: Primary backend page, or None
        secondary: Secondary backend page, or None
        offset: Index of the first record to return (>= 0)
        limit: Maximum number of records to return (> 0)
        config: Blending configuration (defaults to BlendingConfig())
        block_size: Overrides config.block_size, e.g. an adaptive size
        fetch_more: Per source, ``(backend_offset, count) -> records``

    Returns:
        At most ``limit`` SourcedRecords covering [offset, offset + limit).

    Raises:
        ValidationError: If offset is negative or limit is not positive.
        ConfigValidationError: If the block size is not positive.
    """
    config = config or BlendingConfig()
    block_size = config.block_size if block_size is None else block_size
    _check_block_size(block_size)
    if offset < 0:
        raise ValidationError(f"offset must be >= 0, got {offset}")
    if limit <= 0:
        raise ValidationError(f"limit must be positive, got {limit}")

    fetch_more = fetch_more or {}
    batch_size = max(block_size, MIN_FETCH_SIZE)
    feeds = {
        True: RecordFeed(
            primary,
            RecordSource.PRIMARY,
            fetch_more.get(RecordSource.PRIMARY) if primary is not None else None,
            batch_size,
        ),
        False: RecordFeed(
            secondary,
            RecordSource.SECONDARY,
            fetch_more.get(RecordSource.SECONDARY) if secondary is not None else None,
            batch_size,
        ),
    }

    merged: List[SourcedRecord] = []
    end = offset + limit
    for position in range(end):
        preferred = is_primary_at_offset(position, block_size, config)
        item = feeds[preferred].pop() or feeds[not preferred].pop()
        if item is None:
            break
        merged.append(item)

    logger.debug(
        "Interleaved records",
        block_size=block_size,
        placed=len(merged),
        offset=offset,
        limit=limit,
    )
    return merged[offset:end]


class ResultInterleaver:
    """
    Interleaver bound to one blending configuration.

    Example:
        interleaver = ResultInterleaver(BlendingConfig(block_size=5))
        page = interleaver.interleave(primary, secondary, offset=0, limit=10)
        layout = interleaver.source_layout(20)
    """

    def __init__(self, config: Optional[BlendingConfig] = None) -> None:
        self.config = config or BlendingConfig()

    def is_primary_at_offset(self, position: int, block_size: Optional[int] = None) -> bool:
        """Source preference of one position."""
        if block_size is None:
            block_size = self.config.block_size
        return is_primary_at_offset(position, block_size, self.config)

    def source_layout(
        self, positions: int, block_size: Optional[int] = None
    ) -> List[RecordSource]:
        """Preferred source for positions 0 .. positions-1."""
        return [
            RecordSource.PRIMARY
            if self.is_primary_at_offset(position, block_size)
            else RecordSource.SECONDARY
            for position in range(positions)
        ]

    def interleave(
        self,
        primary: Optional[RecordSequence],
        secondary: Optional[RecordSequence],
        offset: int,
        limit: int,
        block_size: Optional[int] = None,
        fetch_more: Optional[Mapping[RecordSource, FetchMore]] = None,
    ) -> List[SourcedRecord]:
        """Interleave with this interleaver's configuration."""
        return interleave(
            primary, secondary, offset, limit, self.config, block_size, fetch_more
        )
