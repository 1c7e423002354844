"""
Adaptive block sizes.

Small result sets look better with short alternation blocks, large ones
with longer blocks. Rules are strings of the form ``"from-to:size"``,
tried in order against the combined total of both backends:

    adaptive_block_sizes:
      - "0-5000:5"
      - "5001-100000:10"

The first rule whose inclusive range contains the total wins; without a
match the configured block_size applies.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from searchblend.core.config import BlendingConfig
from searchblend.core.exceptions import ConfigValidationError


@dataclass(frozen=True)
class BlockSizeRule:
    """One parsed ``from-to:size`` rule."""

    start: int
    end: int
    size: int

    def matches(self, total: int) -> bool:
        return self.start <= total <= self.end


def _to_int(token: str, rule: str) -> int:
    try:
        return int(token.strip() or 0)
    except ValueError as e:
        raise ConfigValidationError(
            f"Invalid adaptive block size: {rule}",
            field="blending.adaptive_block_sizes",
            value=rule,
        ) from e


def parse_rule(rule: str) -> BlockSizeRule:
    """Parse ``"from-to:size"``; a missing ``to`` means 0.

    Raises:
        ConfigValidationError: For a zero/missing size or from > to.
    """
    range_part, _, size_part = str(rule).partition(":")
    size = _to_int(size_part, rule)
    start_part, _, end_part = range_part.partition("-")
    start = _to_int(start_part, rule)
    end = _to_int(end_part, rule)

    if size <= 0 or start > end:
        raise ConfigValidationError(
            f"Invalid adaptive block size: {rule}",
            field="blending.adaptive_block_sizes",
            value=rule,
        )
    return BlockSizeRule(start, end, size)


def parse_rules(rules: Optional[Sequence[str]]) -> List[BlockSizeRule]:
    """Parse all rules, failing on the first invalid one."""
    return [parse_rule(rule) for rule in rules or []]


def resolve_block_size(config: BlendingConfig, total: int) -> int:
    """Block size to use for a result set of ``total`` records."""
    for rule in parse_rules(config.adaptive_block_sizes):
        if rule.matches(total):
            return rule.size
    return config.block_size
