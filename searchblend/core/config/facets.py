"""
Facet mapping configuration.

Declares how a secondary backend's facet field and value vocabulary maps
onto the primary backend's facets.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from searchblend.core.exceptions import ConfigValidationError

FACET_TYPE_NORMAL = "normal"
FACET_TYPE_BOOLEAN = "boolean"
FACET_TYPE_HIERARCHICAL = "hierarchical"
FACET_TYPES = frozenset({FACET_TYPE_NORMAL, FACET_TYPE_BOOLEAN, FACET_TYPE_HIERARCHICAL})


@dataclass
class FacetFieldMapping:
    """Mapping rule for one primary facet field.

    Attributes:
        field: Primary facet field name
        secondary: Name of the corresponding secondary facet field
        type: "normal", "boolean" or "hierarchical"
        values: Secondary value token -> primary value token
    """

    field: str
    secondary: str
    type: str = FACET_TYPE_NORMAL
    values: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.field:
            raise ConfigValidationError("facet field name must not be empty", field="facets")
        if not self.secondary:
            raise ConfigValidationError(
                f"facet {self.field!r} has no secondary field",
                field=f"facets.{self.field}.secondary",
                value=self.secondary,
            )
        self.type = (self.type or FACET_TYPE_NORMAL).lower()
        if self.type not in FACET_TYPES:
            raise ConfigValidationError(
                f"facet {self.field!r} has unknown type {self.type!r}",
                field=f"facets.{self.field}.type",
                value=self.type,
            )
        # YAML turns keys like 1 or yes into int/bool; facet values are strings
        self.values = {str(k): v for k, v in (self.values or {}).items()}

    @property
    def is_boolean(self) -> bool:
        return self.type == FACET_TYPE_BOOLEAN

    @property
    def is_hierarchical(self) -> bool:
        return self.type == FACET_TYPE_HIERARCHICAL
