"""
Filter Normalizer - Canonicaliza el FilterMap según el tipo de recurso.

- Keys: trim + lowercase, guiones y espacios pasan a "_" ("Pet-Type" → "pet_type").
- Values de matching difuso (country, pet_type): guiones pasan a espacios,
  para tolerar slugs ("costa-rica" → "costa rica").
- Keys reconocidas se convierten en variantes tipadas; el resto queda en
  ``passthrough`` sin tocar. Nunca se lanza error por una key desconocida.
"""

import re

from .models import (
    ALLOWED_FILTERS,
    FILTER_VARIANTS,
    FilterMap,
    NormalizedFilters,
    ResourceType,
)

# Filtros cuyo valor se matchea por substring
FUZZY_KEYS = frozenset({"country", "pet_type"})

_KEY_SEPARATORS = re.compile(r"[-\s]+")


def normalize_key(key: str) -> str:
    return _KEY_SEPARATORS.sub("_", key.strip().lower())


def normalize_value(key: str, value: str) -> str:
    value = value.strip()
    if key in FUZZY_KEYS:
        value = " ".join(value.replace("-", " ").split())
    return value


def normalize_filters(resource_type: ResourceType, raw: FilterMap) -> NormalizedFilters:
    """
    Normaliza un FilterMap crudo para un tipo de recurso.

    Args:
        resource_type: Recurso contra el que se va a consultar
        raw: FilterMap tal como salió del parser

    Returns:
        NormalizedFilters con las variantes permitidas para el recurso
    """
    allowed = ALLOWED_FILTERS[resource_type]
    by_kind: dict[str, str] = {}
    passthrough: FilterMap = {}

    for raw_key, raw_value in raw.items():
        key = normalize_key(raw_key)
        if key not in allowed:
            passthrough[raw_key] = raw_value
            continue
        value = normalize_value(key, raw_value)
        if not value:
            continue
        # "Country" y "country" colapsan en la misma key: gana la última
        by_kind[key] = value

    return NormalizedFilters(
        resource_type=resource_type,
        filters=[FILTER_VARIANTS[k](value=v) for k, v in by_kind.items()],
        passthrough=passthrough,
    )
