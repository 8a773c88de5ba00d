"""
wags_directory.directory — Motor de filtrado y consulta del directorio.

Exports principales:
    DirectoryService      → fachada (browse, list_items, get_by_slug)
    parse_segments()      → path → FilterMap
    normalize_filters()   → FilterMap → variantes tipadas por recurso
    ResourceQueryBuilder  → consulta paginada por tipo de recurso
    FacetCatalog          → facetas globales (países, tipos de mascota)
    assemble_result()     → DirectoryResult
"""

from .assembler import assemble_result
from .errors import DirectoryError, ParseAmbiguity, StoreError
from .facets import FacetCatalog
from .models import DirectoryResult, ResourceQuery, ResourceType
from .normalizer import normalize_filters
from .parser import encode_segments, parse_segments, split_path
from .query_builder import RESOURCE_SPECS, ResourceQueryBuilder
from .service import DirectoryService

__all__ = [
    "DirectoryService",
    "DirectoryResult",
    "ResourceQuery",
    "ResourceType",
    "DirectoryError",
    "ParseAmbiguity",
    "StoreError",
    "FacetCatalog",
    "ResourceQueryBuilder",
    "RESOURCE_SPECS",
    "assemble_result",
    "normalize_filters",
    "parse_segments",
    "encode_segments",
    "split_path",
]
