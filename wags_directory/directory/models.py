"""
Directory Models — Pydantic models del motor de directorio.

Todos los objetos se construyen por request y se descartan después de
armar la respuesta; no hay estado compartido entre requests.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

FilterMap = dict[str, str]


class ResourceType(str, Enum):
    """Categorías del directorio."""
    AIRLINES = "airlines"
    HOTELS = "hotels"
    POLICIES = "policies"


# ──────────────────────────── Filtros ────────────────────────────


class CountryFilter(BaseModel):
    """País, matcheado por substring case-insensitive."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["country"] = "country"
    value: str


class PetTypeFilter(BaseModel):
    """Tipo de mascota (solo policies), matcheado por substring."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["pet_type"] = "pet_type"
    value: str


class SlugFilter(BaseModel):
    """Slug exacto de un item."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["slug"] = "slug"
    value: str


ResourceFilter = Annotated[
    Union[CountryFilter, PetTypeFilter, SlugFilter],
    Field(discriminator="kind"),
]

FILTER_VARIANTS: dict[str, type[BaseModel]] = {
    "country": CountryFilter,
    "pet_type": PetTypeFilter,
    "slug": SlugFilter,
}

# Qué variantes acepta cada tipo de recurso. Agregar una dimensión nueva
# es agregar la variante acá y su mapeo en query_builder.RESOURCE_SPECS.
ALLOWED_FILTERS: dict[ResourceType, tuple[str, ...]] = {
    ResourceType.AIRLINES: ("country", "slug"),
    ResourceType.HOTELS: ("country", "slug"),
    ResourceType.POLICIES: ("country", "pet_type", "slug"),
}


class NormalizedFilters(BaseModel):
    """Salida del normalizador.

    ``filters`` son las variantes que el query builder respeta;
    ``passthrough`` guarda las keys no reconocidas sin modificar.
    """

    resource_type: ResourceType
    filters: list[ResourceFilter] = Field(default_factory=list)
    passthrough: FilterMap = Field(default_factory=dict)

    def applied_map(self) -> FilterMap:
        """Solo los filtros que se aplican (para el path canónico)."""
        return {f.kind: f.value for f in self.filters}

    def as_filter_map(self) -> FilterMap:
        """FilterMap canónico para devolver a presentación."""
        result: FilterMap = dict(self.passthrough)
        result.update({f.kind: f.value for f in self.filters})
        return result


class ResourceQuery(BaseModel):
    """Query validada contra un tipo de recurso.

    El orden lo define el builder de cada recurso, nunca el caller.
    """

    resource_type: ResourceType
    filters: list[ResourceFilter] = Field(default_factory=list)
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, gt=0, le=MAX_PAGE_SIZE)


# ──────────────────────────── Items ────────────────────────────


class AirlineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["airlines"] = "airlines"

    name: str = Field(validation_alias=AliasChoices("airline", "name"))
    slug: str
    logo: Optional[str] = None
    country: Optional[str] = None
    fee: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("fees_usd", "fee")
    )
    rating: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("user_rating", "rating")
    )
    last_updated: Optional[str] = None


class HotelItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["hotels"] = "hotels"

    id: int
    name: str = Field(validation_alias=AliasChoices("hotel_chain", "name"))
    slug: str
    logo: Optional[str] = None
    country: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("country_scope", "country")
    )
    pet_fees: Optional[str] = None
    last_updated: Optional[str] = None


class PolicyItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["pet_policies"] = "pet_policies"

    policy_id: int
    country_name: str
    slug: str
    flag_path: Optional[str] = None
    iso_code: Optional[str] = None
    pet_type: Optional[str] = None
    # Resumen de cuarentena, tal como lo muestra la grilla de países
    quarantine: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("quarantine_info", "quarantine")
    )
    last_updated: Optional[str] = None


ResourceItem = Annotated[
    Union[AirlineItem, HotelItem, PolicyItem],
    Field(discriminator="type"),
]


# ──────────────────────────── Detalle ────────────────────────────


class HotelFaq(BaseModel):
    model_config = ConfigDict(frozen=True)

    faq_id: int
    question: str
    answer: str


class HotelDetail(HotelItem):
    """Ficha completa de una cadena hotelera (página /hotels/<slug>)."""

    weight_limits: Optional[str] = None
    breed_restrictions: Optional[str] = None
    max_pets_per_room: Optional[str] = None
    types_of_pets_permitted: Optional[str] = None
    required_documentation: Optional[str] = None
    pet_friendly_amenities: Optional[str] = None
    restrictions: Optional[str] = None
    additional_notes: Optional[str] = None
    faqs: list[HotelFaq] = Field(default_factory=list)


class PolicyDetail(PolicyItem):
    """Ficha completa de la política de importación de un país."""

    entry_requirements: Optional[str] = None
    external_link: Optional[str] = None
    external_links: list[str] = Field(default_factory=list)
    pdf_application_link: Optional[str] = None
    questions_answers: Optional[str] = None

    @field_validator("external_links", mode="before")
    @classmethod
    def _parse_links(cls, value):
        # SQLite (TEXT) y jsonb vía asyncpg llegan como string JSON
        if value is None:
            return []
        if isinstance(value, str):
            return json.loads(value) if value.strip() else []
        return value


ResourceDetail = Annotated[
    Union[AirlineItem, HotelDetail, PolicyDetail],
    Field(discriminator="type"),
]

FacetSet = list[str]


class DirectoryResult(BaseModel):
    """Unidad que consume presentación: items + facetas + filtros activos."""

    resource_type: ResourceType
    items: list[ResourceItem] = Field(default_factory=list)
    facets: dict[str, FacetSet] = Field(default_factory=dict)
    active_filters: FilterMap = Field(default_factory=dict)
    # Path del directorio con los filtros aplicados, para links y paginación
    canonical_path: str = ""
    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE
