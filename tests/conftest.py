"""Datos de prueba compartidos: un directorio chico sembrado en SQLite."""

import pytest_asyncio

from wags_directory.store.sqlite_store import SQLiteDirectoryStore

AIRLINE_COUNTRIES = ["United States", "Japan", "Brazil", "Mexico"]

# 14 aerolíneas: más que una página por default (12)
AIRLINES = [
    {
        "id": i,
        "airline": f"Airline {i:02d}",
        "slug": f"airline-{i:02d}",
        "logo": f"/logos/airline-{i:02d}.png",
        "country": AIRLINE_COUNTRIES[i % len(AIRLINE_COUNTRIES)],
        "fees_usd": 100.0 + i,
        "user_rating": round(1.0 + i * 0.25, 2),
        "last_updated": "2024-05-01",
    }
    for i in range(1, 15)
]

HOTELS = [
    {
        "id": 1,
        "hotel_chain": "Kimpton",
        "slug": "kimpton",
        "logo": "/logos/kimpton.png",
        "country_scope": "United States",
        "pet_fees": "No fee",
        "weight_limits": "No weight limit",
        "breed_restrictions": None,
        "max_pets_per_room": "2",
        "types_of_pets_permitted": "Dogs, cats, birds",
        "required_documentation": None,
        "pet_friendly_amenities": "Beds, bowls and treats",
        "restrictions": "Pets cannot be left unattended",
        "additional_notes": None,
        "last_updated": "2024-04-10",
    },
    {
        "id": 2,
        "hotel_chain": "Four Seasons",
        "slug": "four-seasons",
        "logo": "/logos/four-seasons.png",
        "country_scope": "Worldwide",
        "pet_fees": "Varies by property",
        "last_updated": "2024-03-02",
    },
    {
        "id": 3,
        "hotel_chain": "Red Roof Inn",
        "slug": "red-roof-inn",
        "logo": None,
        "country_scope": "United States, Canada",
        "pet_fees": "None",
        "last_updated": "2024-01-20",
    },
]

COUNTRIES = [
    {"country_id": 1, "country_name": "Japan", "iso_code": "JP", "flag_path": "/flags/jp.svg"},
    {"country_id": 2, "country_name": "Costa Rica", "iso_code": "CR", "flag_path": "/flags/cr.svg"},
    {"country_id": 3, "country_name": "United Kingdom", "iso_code": "GB", "flag_path": "/flags/gb.svg"},
    {"country_id": 4, "country_name": "Brazil", "iso_code": "BR", "flag_path": "/flags/br.svg"},
    # Sin políticas cargadas: no aparece en las facetas de policies
    {"country_id": 5, "country_name": "Chile", "iso_code": "CL", "flag_path": "/flags/cl.svg"},
]

PET_POLICIES = [
    {"policy_id": 10, "country_id": 1, "pet_type": "dog", "slug": "japan",
     "quarantine_info": "Up to 180 days", "last_updated": "2024-02-01"},
    {"policy_id": 11, "country_id": 1, "pet_type": "cat", "slug": "japan",
     "quarantine_info": "Up to 180 days", "last_updated": "2024-02-01"},
    {"policy_id": 12, "country_id": 2, "pet_type": "Dog", "slug": "costa-rica",
     "quarantine_info": "None", "last_updated": "2024-02-15",
     "entry_requirements": "Microchip, rabies vaccine and a health certificate",
     "external_link": "https://www.senasa.go.cr/",
     "external_links": '["https://www.senasa.go.cr/", "https://www.aphis.usda.gov/pet-travel"]',
     "pdf_application_link": None,
     "questions_answers": "Q: Is quarantine required? A: No."},
    {"policy_id": 13, "country_id": 3, "pet_type": "dog", "slug": "united-kingdom",
     "quarantine_info": "None with pet passport", "last_updated": "2024-03-01"},
    {"policy_id": 14, "country_id": 4, "pet_type": "bird", "slug": "brazil",
     "quarantine_info": None, "last_updated": "2024-03-20"},
]


HOTEL_FAQS = [
    {"faq_id": 2, "hotel_id": 1, "question": "Is there a pet fee?", "answer": "No."},
    {"faq_id": 1, "hotel_id": 1, "question": "Are cats allowed?", "answer": "Yes."},
    {"faq_id": 3, "hotel_id": 2, "question": "Is there a size limit?", "answer": "Usually 15 kg."},
]


async def seed(store: SQLiteDirectoryStore) -> None:
    await store.insert_many("airlines", AIRLINES)
    await store.insert_many("hotels", HOTELS)
    await store.insert_many("countries", COUNTRIES)
    await store.insert_many("pet_policies", PET_POLICIES)
    await store.insert_many("hotel_faqs", HOTEL_FAQS)


@pytest_asyncio.fixture
async def seeded_store(tmp_path):
    store = SQLiteDirectoryStore(db_path=str(tmp_path / "directory.db"))
    await store.initialize()
    await seed(store)
    yield store
    await store.close()
