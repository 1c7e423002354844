"""
Configuration Management for searchblend.

Configuration is a hierarchy of dataclasses that map to a YAML file:

    config/
    ├── blending.py      # BlendingConfig, BackendsConfig, BackendSideConfig
    ├── facets.py        # FacetFieldMapping and facet type constants
    └── config.py        # Main Config class

Usage Example
-------------
    from searchblend.core.config_loaders import load_config

    config = load_config()
    block_size = config.blending.block_size
"""

from searchblend.core.config.config import Config, LoggingConfig, snake_case
from searchblend.core.config.blending import (
    BackendsConfig,
    BackendSideConfig,
    BlendingConfig,
)
from searchblend.core.config.facets import (
    FACET_TYPE_BOOLEAN,
    FACET_TYPE_HIERARCHICAL,
    FACET_TYPE_NORMAL,
    FacetFieldMapping,
)

__all__ = [
    "Config",
    "LoggingConfig",
    "snake_case",
    "BackendsConfig",
    "BackendSideConfig",
    "BlendingConfig",
    "FacetFieldMapping",
    "FACET_TYPE_BOOLEAN",
    "FACET_TYPE_HIERARCHICAL",
    "FACET_TYPE_NORMAL",
]

# NOTE: load_config and expand_env_vars live in searchblend.core.config_loaders
# to avoid circular imports.
