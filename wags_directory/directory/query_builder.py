"""
Resource Query Builder - Traduce una ResourceQuery a una consulta concreta
contra la colección de cada tipo de recurso y la ejecuta.

Política por recurso (RESOURCE_SPECS):
- airlines: vista ``airline_pet_policies_sorted`` (ya ordenada por rating
  en el store), sin sort explícito.
- hotels: tabla ``hotels``, sin join ni sort explícito.
- policies: ``pet_policies`` con join interno a ``countries``; el filtro
  de país matchea por substring case-insensitive sobre el nombre del país
  joineado, orden ascendente por nombre de país.

La ficha de detalle (get_by_slug) suma columnas propias del recurso y las
colecciones relacionadas (FAQs de hoteles).

Un resultado vacío es una respuesta válida. Cualquier falla del store sale
como StoreError, sin reintentos.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field

from ..store.base import (
    BaseDirectoryStore,
    CollectionQuery,
    Join,
    MatchOp,
    Predicate,
    Record,
    SortSpec,
)
from .models import (
    AirlineItem,
    HotelDetail,
    HotelItem,
    PolicyDetail,
    PolicyItem,
    ResourceDetail,
    ResourceItem,
    ResourceQuery,
    ResourceType,
)
from .normalizer import normalize_value

_logger = logging.getLogger("directory.query")


class FilterField(BaseModel):
    """Campo del store contra el que se evalúa una variante de filtro."""
    field: str
    op: MatchOp


class RelatedCollection(BaseModel):
    """Colección hija (one-to-many) que se adjunta a la ficha de detalle."""
    attribute: str
    collection: str
    fields: list[str]
    foreign_key: str
    local_key: str = "id"
    sort: Optional[SortSpec] = None
    limit: int = 10


class ResourceSpec(BaseModel):
    collection: str
    fields: list[str]
    detail_fields: list[str] = Field(default_factory=list)
    related: list[RelatedCollection] = Field(default_factory=list)
    join: Optional[Join] = None
    filter_fields: dict[str, FilterField] = Field(default_factory=dict)
    sort: Optional[SortSpec] = None
    item_model: type[BaseModel]
    detail_model: Optional[type[BaseModel]] = None


RESOURCE_SPECS: dict[ResourceType, ResourceSpec] = {
    ResourceType.AIRLINES: ResourceSpec(
        collection="airline_pet_policies_sorted",
        fields=["airline", "slug", "logo", "country", "fees_usd", "last_updated", "user_rating"],
        filter_fields={
            "country": FilterField(field="country", op=MatchOp.ILIKE),
            "slug": FilterField(field="slug", op=MatchOp.EQ),
        },
        item_model=AirlineItem,
    ),
    ResourceType.HOTELS: ResourceSpec(
        collection="hotels",
        fields=["id", "hotel_chain", "slug", "logo", "country_scope", "pet_fees", "last_updated"],
        filter_fields={
            "country": FilterField(field="country_scope", op=MatchOp.ILIKE),
            "slug": FilterField(field="slug", op=MatchOp.EQ),
        },
        detail_fields=[
            "weight_limits", "breed_restrictions", "max_pets_per_room",
            "types_of_pets_permitted", "required_documentation",
            "pet_friendly_amenities", "restrictions", "additional_notes",
        ],
        related=[
            RelatedCollection(
                attribute="faqs",
                collection="hotel_faqs",
                fields=["faq_id", "question", "answer"],
                foreign_key="hotel_id",
                sort=SortSpec(field="faq_id"),
            ),
        ],
        item_model=HotelItem,
        detail_model=HotelDetail,
    ),
    ResourceType.POLICIES: ResourceSpec(
        collection="pet_policies",
        fields=["policy_id", "pet_type", "slug", "quarantine_info", "last_updated"],
        join=Join(
            collection="countries",
            local_key="country_id",
            foreign_key="country_id",
            fields=["country_name", "iso_code", "flag_path"],
        ),
        filter_fields={
            "country": FilterField(field="countries.country_name", op=MatchOp.ILIKE),
            "pet_type": FilterField(field="pet_type", op=MatchOp.ILIKE),
            "slug": FilterField(field="slug", op=MatchOp.EQ),
        },
        sort=SortSpec(field="countries.country_name", ascending=True),
        detail_fields=[
            "entry_requirements", "external_link", "external_links",
            "pdf_application_link", "questions_answers",
        ],
        item_model=PolicyItem,
        detail_model=PolicyDetail,
    ),
}


class ResourceQueryBuilder:
    """
    Arma y ejecuta la consulta paginada de un tipo de recurso.

    Garantías:
    - nunca devuelve más de ``limit`` items
    - un ``offset`` más allá del final devuelve lista vacía, no error
    """

    def __init__(self, store: BaseDirectoryStore) -> None:
        self._store = store

    @staticmethod
    def build(query: ResourceQuery) -> CollectionQuery:
        """Traduce la ResourceQuery a la CollectionQuery del store (sin I/O)."""
        spec = RESOURCE_SPECS[query.resource_type]
        predicates: list[Predicate] = []
        for f in query.filters:
            target = spec.filter_fields.get(f.kind)
            if target is None:
                _logger.debug(
                    "Filtro %s no aplica a %s, se ignora", f.kind, query.resource_type.value
                )
                continue
            predicates.append(Predicate(field=target.field, op=target.op, value=f.value))

        return CollectionQuery(
            collection=spec.collection,
            fields=spec.fields,
            join=spec.join,
            predicates=predicates,
            offset=query.offset,
            limit=query.limit,
            sort=spec.sort,
        )

    async def execute(self, query: ResourceQuery) -> list[ResourceItem]:
        spec = RESOURCE_SPECS[query.resource_type]
        collection_query = self.build(query)
        records = await self._store.query(collection_query)

        if len(records) > query.limit:
            _logger.warning(
                "Store devolvió %d filas para limit=%d en %s; se truncan",
                len(records), query.limit, spec.collection,
            )
            records = records[: query.limit]

        _logger.debug(
            "%s offset=%d limit=%d filtros=%d → %d items",
            query.resource_type.value, query.offset, query.limit,
            len(collection_query.predicates), len(records),
        )
        return [spec.item_model.model_validate(r) for r in records]

    async def _lookup_one(self, spec: ResourceSpec, kind: str, value: str) -> Optional[Record]:
        target = spec.filter_fields[kind]
        records = await self._store.query(
            CollectionQuery(
                collection=spec.collection,
                fields=spec.fields + spec.detail_fields,
                join=spec.join,
                predicates=[Predicate(field=target.field, op=target.op, value=value)],
                offset=0,
                limit=1,
                sort=spec.sort,
            )
        )
        return dict(records[0]) if records else None

    async def _attach_related(self, spec: ResourceSpec, record: Record) -> None:
        for rel in spec.related:
            record[rel.attribute] = await self._store.query(
                CollectionQuery(
                    collection=rel.collection,
                    fields=rel.fields,
                    predicates=[
                        Predicate(field=rel.foreign_key, op=MatchOp.EQ, value=record[rel.local_key])
                    ],
                    offset=0,
                    limit=rel.limit,
                    sort=rel.sort,
                )
            )

    async def get_by_slug(
        self, resource_type: ResourceType, slug: str
    ) -> Optional[ResourceDetail]:
        """
        Ficha de detalle de un único item.

        Siempre se busca primero el slug exacto. Solo para policies, si no hay
        match exacto, se cae al nombre del país joineado por substring
        ("costa-rica" → "costa rica"), para links armados con el nombre.
        """
        spec = RESOURCE_SPECS[resource_type]
        record = await self._lookup_one(spec, "slug", slug)
        if record is None and resource_type is ResourceType.POLICIES:
            _logger.debug("Slug %s sin match exacto, se busca por nombre de país", slug)
            record = await self._lookup_one(spec, "country", normalize_value("country", slug))
        if record is None:
            return None

        await self._attach_related(spec, record)
        return (spec.detail_model or spec.item_model).model_validate(record)
