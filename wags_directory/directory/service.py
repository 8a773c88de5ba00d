"""
DirectoryService — Fachada del motor de directorio.

Flujo de un request:
    segmentos → parse_segments → normalize_filters → ResourceQuery
        ├── ResourceQueryBuilder.execute   (items paginados)
        └── FacetCatalog.facets_for        (facetas globales)
    → assemble_result → DirectoryResult

Items y facetas son lecturas independientes y se lanzan en paralelo; si
una falla, la otra se cancela antes de propagar el error.
El servicio no guarda estado entre requests: se construye con el store
abierto para el request en curso.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..cache import CacheService
from ..config import DEFAULT_PAGE_SIZE, STRICT_PATH_SEGMENTS
from ..store.base import BaseDirectoryStore
from .assembler import assemble_result
from .concurrency import gather_cancelling
from .facets import FacetCatalog
from .models import (
    DirectoryResult,
    FacetSet,
    ResourceDetail,
    ResourceItem,
    ResourceQuery,
    ResourceType,
)
from .normalizer import normalize_filters
from .parser import build_directory_path, parse_segments
from .query_builder import ResourceQueryBuilder

_logger = logging.getLogger("directory.service")


class DirectoryService:

    def __init__(
        self,
        store: BaseDirectoryStore,
        cache: Optional[CacheService] = None,
        strict_segments: bool = STRICT_PATH_SEGMENTS,
    ) -> None:
        """
        Args:
            store: Store ya inicializado para este request
            cache: Caché de facetas (opcional)
            strict_segments: Rechazar paths con cantidad impar de segmentos
        """
        self._builder = ResourceQueryBuilder(store)
        self._facets = FacetCatalog(store, cache=cache)
        self._strict = strict_segments

    @property
    def facets(self) -> FacetCatalog:
        return self._facets

    async def browse(
        self,
        resource_type: ResourceType,
        segments: list[str],
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> DirectoryResult:
        """
        Página del directorio para un path jerárquico.

        Raises:
            ParseAmbiguity: path impar con la política estricta
            StoreError: cualquier falla del store (sin reintentos)
        """
        raw = parse_segments(segments, strict=self._strict)
        normalized = normalize_filters(resource_type, raw)
        if normalized.passthrough:
            _logger.debug(
                "Keys sin filtro en %s: %s",
                resource_type.value, sorted(normalized.passthrough),
            )

        query = ResourceQuery(
            resource_type=resource_type,
            filters=normalized.filters,
            offset=offset,
            limit=limit,
        )
        items, facets = await gather_cancelling(
            self._builder.execute(query),
            self._facets.facets_for(resource_type),
        )
        return assemble_result(
            resource_type=resource_type,
            items=items,
            facets=facets,
            active_filters=normalized.as_filter_map(),
            canonical_path=build_directory_path(
                resource_type.value, normalized.applied_map()
            ),
            offset=offset,
            limit=limit,
        )

    async def list_items(
        self,
        resource_type: ResourceType,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[ResourceItem]:
        """Listado paginado sin filtros (endpoints /api/<recurso>)."""
        return await self._builder.execute(
            ResourceQuery(resource_type=resource_type, offset=offset, limit=limit)
        )

    async def get_by_slug(
        self, resource_type: ResourceType, slug: str
    ) -> Optional[ResourceDetail]:
        return await self._builder.get_by_slug(resource_type, slug)

    async def unique_countries(self) -> FacetSet:
        return await self._facets.unique_countries()

    async def unique_pet_types(self) -> FacetSet:
        return await self._facets.unique_pet_types()
