"""Tests del query builder: mapeo por recurso y ejecución contra un store mock."""

from unittest.mock import AsyncMock

import pytest

from wags_directory.directory.errors import StoreError
from wags_directory.directory.models import (
    AirlineItem,
    CountryFilter,
    HotelDetail,
    HotelItem,
    PetTypeFilter,
    PolicyDetail,
    ResourceQuery,
    ResourceType,
    SlugFilter,
)
from wags_directory.directory.query_builder import RESOURCE_SPECS, ResourceQueryBuilder
from wags_directory.store.base import BaseDirectoryStore, MatchOp


def _mock_store(records=None) -> AsyncMock:
    store = AsyncMock(spec=BaseDirectoryStore)
    store.query.return_value = records or []
    return store


def _airline(i: int) -> dict:
    return {
        "airline": f"Airline {i}",
        "slug": f"airline-{i}",
        "logo": None,
        "country": "Japan",
        "fees_usd": 125.0,
        "user_rating": 4.2,
        "last_updated": "2024-05-01",
    }


# ──────────────────────────── build() ────────────────────────────


class TestBuild:
    def test_airlines_reads_sorted_view_without_sort(self):
        query = ResourceQueryBuilder.build(ResourceQuery(resource_type=ResourceType.AIRLINES))
        assert query.collection == "airline_pet_policies_sorted"
        assert query.sort is None
        assert query.join is None
        assert query.predicates == []
        assert (query.offset, query.limit) == (0, 12)

    def test_hotels_country_matches_country_scope(self):
        query = ResourceQueryBuilder.build(
            ResourceQuery(
                resource_type=ResourceType.HOTELS,
                filters=[CountryFilter(value="united states")],
            )
        )
        assert query.collection == "hotels"
        assert len(query.predicates) == 1
        pred = query.predicates[0]
        assert pred.field == "country_scope"
        assert pred.op is MatchOp.ILIKE
        assert pred.value == "united states"

    def test_policies_joins_countries_and_sorts_by_name(self):
        query = ResourceQueryBuilder.build(
            ResourceQuery(
                resource_type=ResourceType.POLICIES,
                filters=[CountryFilter(value="japan"), PetTypeFilter(value="dog")],
                offset=24,
                limit=12,
            )
        )
        assert query.collection == "pet_policies"
        assert query.join is not None
        assert query.join.collection == "countries"
        assert query.join.local_key == "country_id"
        assert query.sort.field == "countries.country_name"
        assert query.sort.ascending is True
        assert [(p.field, p.op) for p in query.predicates] == [
            ("countries.country_name", MatchOp.ILIKE),
            ("pet_type", MatchOp.ILIKE),
        ]
        assert query.offset == 24

    def test_slug_is_exact_match(self):
        query = ResourceQueryBuilder.build(
            ResourceQuery(resource_type=ResourceType.AIRLINES, filters=[SlugFilter(value="delta")])
        )
        assert query.predicates[0].op is MatchOp.EQ

    def test_inapplicable_variant_is_ignored(self):
        query = ResourceQueryBuilder.build(
            ResourceQuery(
                resource_type=ResourceType.AIRLINES,
                filters=[PetTypeFilter(value="dog")],
            )
        )
        assert query.predicates == []

    def test_every_resource_type_is_mapped(self):
        assert set(RESOURCE_SPECS) == set(ResourceType)


# ──────────────────────────── execute() ────────────────────────────


class TestExecute:
    @pytest.mark.asyncio
    async def test_maps_records_to_items(self):
        store = _mock_store([_airline(1)])
        builder = ResourceQueryBuilder(store)

        items = await builder.execute(ResourceQuery(resource_type=ResourceType.AIRLINES))

        assert len(items) == 1
        item = items[0]
        assert isinstance(item, AirlineItem)
        assert item.name == "Airline 1"
        assert item.fee == 125.0
        assert item.rating == 4.2
        store.query.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_never_returns_more_than_limit(self):
        store = _mock_store([_airline(i) for i in range(20)])
        builder = ResourceQueryBuilder(store)

        items = await builder.execute(
            ResourceQuery(resource_type=ResourceType.AIRLINES, limit=5)
        )

        assert len(items) == 5

    @pytest.mark.asyncio
    async def test_empty_result_is_not_an_error(self):
        builder = ResourceQueryBuilder(_mock_store([]))
        items = await builder.execute(
            ResourceQuery(resource_type=ResourceType.HOTELS, offset=1000)
        )
        assert items == []

    @pytest.mark.asyncio
    async def test_store_error_propagates(self):
        store = _mock_store()
        store.query.side_effect = StoreError("permission denied", collection="hotels")
        builder = ResourceQueryBuilder(store)

        with pytest.raises(StoreError, match="permission denied"):
            await builder.execute(ResourceQuery(resource_type=ResourceType.HOTELS))
        assert store.query.await_count == 1

    @pytest.mark.asyncio
    async def test_hotel_columns_map_to_item(self):
        store = _mock_store([{
            "id": 7,
            "hotel_chain": "Kimpton",
            "slug": "kimpton",
            "logo": None,
            "country_scope": "United States",
            "pet_fees": "No fee",
            "last_updated": None,
        }])
        items = await ResourceQueryBuilder(store).execute(
            ResourceQuery(resource_type=ResourceType.HOTELS)
        )
        assert isinstance(items[0], HotelItem)
        assert items[0].name == "Kimpton"
        assert items[0].country == "United States"


_COSTA_RICA = {
    "policy_id": 12,
    "pet_type": "dog",
    "slug": "costa-rica",
    "quarantine_info": "None",
    "last_updated": None,
    "country_name": "Costa Rica",
    "iso_code": "CR",
    "flag_path": "/flags/cr.svg",
    "external_links": '["https://www.senasa.go.cr/"]',
}


class TestGetBySlug:
    @pytest.mark.asyncio
    async def test_policy_exact_slug_is_tried_first(self):
        store = _mock_store([_COSTA_RICA])

        item = await ResourceQueryBuilder(store).get_by_slug(ResourceType.POLICIES, "costa-rica")

        assert isinstance(item, PolicyDetail)
        assert item.country_name == "Costa Rica"
        assert item.external_links == ["https://www.senasa.go.cr/"]
        store.query.assert_awaited_once()
        sent = store.query.await_args.args[0]
        assert sent.limit == 1
        assert (sent.predicates[0].field, sent.predicates[0].op) == ("slug", MatchOp.EQ)
        assert sent.predicates[0].value == "costa-rica"
        assert "entry_requirements" in sent.fields

    @pytest.mark.asyncio
    async def test_policy_falls_back_to_country_name(self):
        store = _mock_store()
        store.query.side_effect = [[], [_COSTA_RICA]]

        item = await ResourceQueryBuilder(store).get_by_slug(ResourceType.POLICIES, "Costa-Rica")

        assert item.slug == "costa-rica"
        first, second = (c.args[0] for c in store.query.await_args_list)
        assert first.predicates[0].field == "slug"
        assert second.predicates[0].field == "countries.country_name"
        assert second.predicates[0].op is MatchOp.ILIKE
        assert second.predicates[0].value == "Costa Rica"

    @pytest.mark.asyncio
    async def test_airline_slug_has_no_fallback(self):
        store = _mock_store([])

        assert await ResourceQueryBuilder(store).get_by_slug(ResourceType.AIRLINES, "delta") is None
        store.query.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_airline_slug_is_exact(self):
        store = _mock_store([_airline(3)])

        item = await ResourceQueryBuilder(store).get_by_slug(ResourceType.AIRLINES, "airline-3")

        assert isinstance(item, AirlineItem)
        assert item.slug == "airline-3"
        sent = store.query.await_args.args[0]
        assert sent.predicates[0].field == "slug"
        assert sent.predicates[0].op is MatchOp.EQ

    @pytest.mark.asyncio
    async def test_hotel_detail_loads_faqs_by_hotel_id(self):
        hotel = {
            "id": 7,
            "hotel_chain": "Kimpton",
            "slug": "kimpton",
            "country_scope": "United States",
            "max_pets_per_room": "2",
        }
        faqs = [{"faq_id": 1, "question": "Cats?", "answer": "Yes."}]
        store = _mock_store()
        store.query.side_effect = [[hotel], faqs]

        item = await ResourceQueryBuilder(store).get_by_slug(ResourceType.HOTELS, "kimpton")

        assert isinstance(item, HotelDetail)
        assert item.max_pets_per_room == "2"
        assert [f.question for f in item.faqs] == ["Cats?"]
        faq_query = store.query.await_args_list[1].args[0]
        assert faq_query.collection == "hotel_faqs"
        assert faq_query.predicates[0].field == "hotel_id"
        assert faq_query.predicates[0].value == 7
        assert faq_query.sort.field == "faq_id"

    @pytest.mark.asyncio
    async def test_missing_slug_returns_none(self):
        store = _mock_store([])
        item = await ResourceQueryBuilder(store).get_by_slug(ResourceType.HOTELS, "nope")
        assert item is None
        # Sin ficha no se buscan FAQs
        store.query.assert_awaited_once()
