"""
Main configuration class for searchblend.

This module provides the Config dataclass that aggregates all sub-configs
and handles dictionary parsing of the YAML configuration.

Architecture Context
--------------------
Configuration sits at the Core layer and is consumed by the blender and
the CLI. The Config object is created once per process and its parts are
handed to every component that needs them:

    searchblend.yaml
           ↓
    load_config() → Config object
           ↓
    Passed to: Blender, ResultInterleaver, FacetMerger

Configuration Hierarchy
-----------------------
    Config
    ├── BackendsConfig        # primary / secondary ids and labels
    ├── BlendingConfig        # block size, boost window, timeouts
    ├── FacetFieldMapping[]   # secondary → primary facet vocabulary
    └── LoggingConfig         # log level and optional file

Key Style
---------
Keys are accepted in snake_case (``boost_position``) and in the CamelCase
style of blender.ini-derived files (``Blending.boostPosition``,
``Facets.<field>.Secondary``). Facet field names and value tokens are
never rewritten.
"""

import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from searchblend.core.config.blending import (
    BackendsConfig,
    BackendSideConfig,
    BlendingConfig,
)
from searchblend.core.config.facets import FacetFieldMapping
from searchblend.core.exceptions import ConfigValidationError

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def snake_case(key: str) -> str:
    """Convert ``boostPosition`` / ``Blending`` to ``boost_position`` / ``blending``."""
    return _CAMEL_BOUNDARY.sub("_", str(key)).lower()


def _snake_keys(data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Normalize the keys of one mapping level."""
    if not data:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError(
            f"expected a mapping, got {type(data).__name__}", value=data
        )
    return {snake_case(k): v for k, v in data.items()}


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class Config:
    """Main searchblend configuration."""

    backends: BackendsConfig = field(default_factory=BackendsConfig)
    blending: BlendingConfig = field(default_factory=BlendingConfig)
    facets: List[FacetFieldMapping] = field(default_factory=list)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    _base_path: Path = field(default_factory=Path.cwd, repr=False)

    def __post_init__(self) -> None:
        """Validate nested config types and facet uniqueness."""
        assert isinstance(self.backends, BackendsConfig), "backends must be BackendsConfig"
        assert isinstance(self.blending, BlendingConfig), "blending must be BlendingConfig"

        seen = set()
        for mapping in self.facets:
            if mapping.field in seen:
                raise ConfigValidationError(
                    f"facet {mapping.field!r} is mapped more than once",
                    field=f"facets.{mapping.field}",
                )
            seen.add(mapping.field)

    @property
    def log_path(self) -> Optional[Path]:
        """Absolute log file path, if file logging is configured."""
        if not self.logging.file:
            return None
        path = Path(self.logging.file)
        return path if path.is_absolute() else self._base_path / path

    def facet_mapping(self, field_name: str) -> Optional[FacetFieldMapping]:
        """Look up the mapping of one primary facet field."""
        for mapping in self.facets:
            if mapping.field == field_name:
                return mapping
        return None

    @staticmethod
    def _filter_fields(cls_type: Any, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Filter dict to only keys that match dataclass fields, handling None."""
        if not data:
            return {}
        valid_keys = {f.name for f in fields(cls_type)}
        return {k: v for k, v in data.items() if k in valid_keys}

    @classmethod
    def from_dict(
        cls, data: Optional[Dict[str, Any]], base_path: Optional[Path] = None
    ) -> "Config":
        """Create Config from dictionary."""
        from searchblend.core.config_loaders import expand_env_vars

        data = _snake_keys(expand_env_vars(data or {}))

        config = cls(
            backends=cls._parse_backends_config(data),
            blending=cls._parse_blending_config(data),
            facets=cls._parse_facet_mappings(data),
            logging=LoggingConfig(
                **cls._filter_fields(LoggingConfig, _snake_keys(data.get("logging")))
            ),
        )
        if base_path:
            config._base_path = base_path
        return config

    @classmethod
    def _parse_blending_config(cls, data: Dict[str, Any]) -> BlendingConfig:
        """Parse the blending section."""
        blending_data = _snake_keys(data.get("blending"))
        return BlendingConfig(**cls._filter_fields(BlendingConfig, blending_data))

    @classmethod
    def _parse_backends_config(cls, data: Dict[str, Any]) -> BackendsConfig:
        """Parse backends given as ``{primary: {id, label}, secondary: {...}}``."""
        backends_data = _snake_keys(data.get("backends"))
        defaults = BackendsConfig()
        sides = {}
        for side in ("primary", "secondary"):
            side_data = backends_data.get(side)
            if side_data is None:
                sides[side] = getattr(defaults, side)
            elif isinstance(side_data, str):
                sides[side] = BackendSideConfig(id=side_data)
            else:
                sides[side] = BackendSideConfig(
                    **cls._filter_fields(BackendSideConfig, _snake_keys(side_data))
                )
        return BackendsConfig(primary=sides["primary"], secondary=sides["secondary"])

    @classmethod
    def _parse_facet_mappings(cls, data: Dict[str, Any]) -> List[FacetFieldMapping]:
        """Parse ``facets.<primary field>`` entries, keeping field names as-is."""
        facets_data = data.get("facets") or {}
        if not isinstance(facets_data, dict):
            raise ConfigValidationError("facets must be a mapping", field="facets")

        mappings = []
        for field_name, settings in facets_data.items():
            settings = _snake_keys(settings)
            mappings.append(
                FacetFieldMapping(
                    field=str(field_name),
                    secondary=settings.get("secondary", ""),
                    type=settings.get("type") or "normal",
                    values=settings.get("values") or {},
                )
            )
        return mappings
