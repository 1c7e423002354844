"""searchblend - Blended search over two independently paged backends.

This package interleaves the result pages of a primary and a secondary
search backend into one paginated list and reconciles their facet counts.
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
