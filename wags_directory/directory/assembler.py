"""Armado del DirectoryResult. Paso puro: sin I/O."""

from __future__ import annotations

from typing import Sequence

from .models import (
    DirectoryResult,
    FacetSet,
    FilterMap,
    ResourceItem,
    ResourceType,
)


def assemble_result(
    resource_type: ResourceType,
    items: Sequence[ResourceItem],
    facets: dict[str, FacetSet],
    active_filters: FilterMap,
    offset: int,
    limit: int,
    canonical_path: str = "",
) -> DirectoryResult:
    return DirectoryResult(
        resource_type=resource_type,
        items=list(items),
        facets={name: list(values) for name, values in facets.items()},
        active_filters=dict(active_filters),
        canonical_path=canonical_path,
        offset=offset,
        limit=limit,
    )
