"""
Blending configuration.

Provides the parameters of one blend operation (block size, boost window,
adaptive block sizes, backend timeout) and the identity of the two
backends being blended.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from searchblend.core.exceptions import ConfigValidationError

DEFAULT_BLOCK_SIZE = 10
DEFAULT_BLEND_LIMIT = 20
MAX_SEARCH_TIMEOUT_SECONDS = 60.0


@dataclass
class BlendingConfig:
    """Block alternation and boost window settings.

    ``boost_position`` is the 0-based output position where the boost
    window starts; None means ``block_size``, which places the window
    outside the first block and so disables it.

    ``blend_limit`` is how many records each backend is asked for up front;
    records past that are fetched in further batches when a page needs
    them.
    """

    block_size: int = DEFAULT_BLOCK_SIZE
    boost_position: Optional[int] = None
    boost_count: int = 0
    adaptive_block_sizes: List[str] = field(default_factory=list)
    search_timeout_seconds: float = 5.0
    blend_limit: int = DEFAULT_BLEND_LIMIT

    def __post_init__(self) -> None:
        """Reject values that would produce undefined pagination."""
        if not isinstance(self.block_size, int) or self.block_size <= 0:
            raise ConfigValidationError(
                f"blending.block_size must be a positive integer, got {self.block_size!r}",
                field="blending.block_size",
                value=self.block_size,
            )
        if self.boost_position is not None and (
            not isinstance(self.boost_position, int) or self.boost_position < 0
        ):
            raise ConfigValidationError(
                f"blending.boost_position must be >= 0, got {self.boost_position!r}",
                field="blending.boost_position",
                value=self.boost_position,
            )
        if not isinstance(self.boost_count, int) or self.boost_count < 0:
            raise ConfigValidationError(
                f"blending.boost_count must be >= 0, got {self.boost_count!r}",
                field="blending.boost_count",
                value=self.boost_count,
            )
        if self.search_timeout_seconds <= 0:
            raise ConfigValidationError(
                "blending.search_timeout_seconds must be positive",
                field="blending.search_timeout_seconds",
                value=self.search_timeout_seconds,
            )
        if not isinstance(self.blend_limit, int) or self.blend_limit <= 0:
            raise ConfigValidationError(
                f"blending.blend_limit must be a positive integer, got {self.blend_limit!r}",
                field="blending.blend_limit",
                value=self.blend_limit,
            )
        self.search_timeout_seconds = min(
            float(self.search_timeout_seconds), MAX_SEARCH_TIMEOUT_SECONDS
        )

    @property
    def effective_boost_position(self) -> int:
        """Boost window start with the block-size default applied."""
        if self.boost_position is None:
            return self.block_size
        return self.boost_position


@dataclass
class BackendSideConfig:
    """Identity of one side of the blend."""

    id: str
    label: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ConfigValidationError(
                "backend id must not be empty", field="backends.id", value=self.id
            )
        if not self.label:
            self.label = self.id


@dataclass
class BackendsConfig:
    """The primary and secondary backends."""

    primary: BackendSideConfig = field(
        default_factory=lambda: BackendSideConfig("primary", "Primary")
    )
    secondary: BackendSideConfig = field(
        default_factory=lambda: BackendSideConfig("secondary", "Secondary")
    )

    def __post_init__(self) -> None:
        if self.primary.id == self.secondary.id:
            raise ConfigValidationError(
                f"primary and secondary backends share the id {self.primary.id!r}",
                field="backends",
                value=self.primary.id,
            )
