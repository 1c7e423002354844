"""
Blending: interleave two backends' results and merge their facets.

Public API
----------
    from searchblend.blending import Blender, blend, interleave, merge_facets
"""

from searchblend.blending.backend import BackendResponse, SearchBackend, StaticBackend
from searchblend.blending.blender import Blender, blend
from searchblend.blending.block_size import resolve_block_size
from searchblend.blending.facets import FacetMerger, merge_facets
from searchblend.blending.interleaver import (
    ResultInterleaver,
    interleave,
    is_primary_at_offset,
)
from searchblend.blending.models import (
    PARTIAL_FAILURE,
    BlendResult,
    RecordSequence,
    RecordSource,
    SourcedRecord,
)

__all__ = [
    "BackendResponse",
    "SearchBackend",
    "StaticBackend",
    "Blender",
    "blend",
    "resolve_block_size",
    "FacetMerger",
    "merge_facets",
    "ResultInterleaver",
    "interleave",
    "is_primary_at_offset",
    "PARTIAL_FAILURE",
    "BlendResult",
    "RecordSequence",
    "RecordSource",
    "SourcedRecord",
]
