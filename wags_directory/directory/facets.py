"""
Facet Catalog - Valores seleccionables de cada dimensión de filtro.

Las facetas se calculan sobre la colección completa, sin aplicar los
filtros activos: las opciones del filtro no se achican cuando el usuario
va acotando la búsqueda. Por eso ninguna operación de este módulo recibe
un FilterMap.

Se cachean en Redis con TTL corto (FACET_CACHE_TTL) cuando hay caché.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ..cache import CacheService
from ..config import FACET_CACHE_TTL
from ..store.base import BaseDirectoryStore
from .concurrency import gather_cancelling
from .models import FacetSet, ResourceType
from .query_builder import RESOURCE_SPECS

_logger = logging.getLogger("directory.facets")

RESOURCE_FACETS: dict[ResourceType, tuple[str, ...]] = {
    ResourceType.AIRLINES: ("countries",),
    ResourceType.HOTELS: ("countries",),
    ResourceType.POLICIES: ("countries", "pet_types"),
}


def dedupe_sorted(values: Iterable[Any]) -> FacetSet:
    """Deduplica case-insensitive (gana la primera grafía) y ordena alfabéticamente."""
    seen: dict[str, str] = {}
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text and text.casefold() not in seen:
            seen[text.casefold()] = text
    return sorted(seen.values(), key=str.casefold)


class FacetCatalog:

    def __init__(
        self,
        store: BaseDirectoryStore,
        cache: Optional[CacheService] = None,
        ttl: int = FACET_CACHE_TTL,
    ) -> None:
        self._store = store
        self._cache = cache
        self._ttl = ttl

    async def unique_values(self, resource_type: ResourceType, field: str) -> FacetSet:
        """
        Valores distintos de un campo lógico (``country``, ``pet_type``)
        sobre toda la colección del recurso.
        """
        spec = RESOURCE_SPECS[resource_type]
        target = spec.filter_fields.get(field)
        if target is None:
            raise ValueError(f"'{field}' no es un campo de {resource_type.value}")

        cache_key = f"facets:{resource_type.value}:{field}"
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                _logger.debug("[Cache] HIT: %s", cache_key)
                return cached

        raw = await self._store.distinct_values(spec.collection, target.field, spec.join)
        values = dedupe_sorted(raw)

        if self._cache is not None:
            await self._cache.set(cache_key, values, ttl=self._ttl)
        return values

    async def unique_countries(self) -> FacetSet:
        """Países de las tres colecciones (airlines, hotels, policies), unificados."""
        per_resource = await gather_cancelling(
            *(self.unique_values(rt, "country") for rt in ResourceType)
        )
        return dedupe_sorted(v for values in per_resource for v in values)

    async def unique_pet_types(self) -> FacetSet:
        return await self.unique_values(ResourceType.POLICIES, "pet_type")

    async def facets_for(self, resource_type: ResourceType) -> dict[str, FacetSet]:
        names = RESOURCE_FACETS[resource_type]
        loaders = {
            "countries": self.unique_countries,
            "pet_types": self.unique_pet_types,
        }
        results = await gather_cancelling(*(loaders[name]() for name in names))
        return dict(zip(names, results))

