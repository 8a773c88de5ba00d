"""
SQLiteDirectoryStore — Backend local basado en SQLite + aiosqlite.

Pensado para desarrollo local y tests. Replica el esquema del store
hosteado:
  airlines                     → aerolíneas (1 fila por aerolínea)
  airline_pet_policies_sorted  → vista de airlines ordenada por rating
  hotels                       → cadenas hoteleras
  countries                    → países (nombre, ISO, bandera)
  pet_policies                 → políticas de importación, FK a countries
  hotel_faqs                   → preguntas frecuentes por hotel

El esquema se crea una sola vez por archivo y proceso; las conexiones
siguientes solo registran la función de case folding.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

import aiosqlite

from ..directory.errors import StoreError
from .base import BaseDirectoryStore, CollectionQuery, Join, Record
from .sql import SQLCompiler, ident, qmark

_logger = logging.getLogger("directory.store.sqlite")

_DDL = """
PRAGMA journal_mode = WAL;

CREATE TABLE IF NOT EXISTS airlines (
    id            INTEGER PRIMARY KEY,
    airline       TEXT    NOT NULL,
    slug          TEXT    NOT NULL UNIQUE,
    logo          TEXT,
    country       TEXT,
    fees_usd      REAL,
    user_rating   REAL,
    last_updated  TEXT
);

CREATE VIEW IF NOT EXISTS airline_pet_policies_sorted AS
    SELECT * FROM airlines ORDER BY user_rating DESC;

CREATE TABLE IF NOT EXISTS hotels (
    id                       INTEGER PRIMARY KEY,
    hotel_chain              TEXT    NOT NULL,
    slug                     TEXT    NOT NULL UNIQUE,
    logo                     TEXT,
    country_scope            TEXT,
    pet_fees                 TEXT,
    weight_limits            TEXT,
    breed_restrictions       TEXT,
    max_pets_per_room        TEXT,
    types_of_pets_permitted  TEXT,
    required_documentation   TEXT,
    pet_friendly_amenities   TEXT,
    restrictions             TEXT,
    additional_notes         TEXT,
    last_updated             TEXT
);

CREATE TABLE IF NOT EXISTS hotel_faqs (
    faq_id    INTEGER PRIMARY KEY,
    hotel_id  INTEGER NOT NULL REFERENCES hotels(id),
    question  TEXT    NOT NULL,
    answer    TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS countries (
    country_id    INTEGER PRIMARY KEY,
    country_name  TEXT    NOT NULL,
    iso_code      TEXT,
    flag_path     TEXT
);

CREATE TABLE IF NOT EXISTS pet_policies (
    policy_id             INTEGER PRIMARY KEY,
    country_id            INTEGER NOT NULL REFERENCES countries(country_id),
    pet_type              TEXT,
    slug                  TEXT    NOT NULL,
    quarantine_info       TEXT,
    entry_requirements    TEXT,
    external_link         TEXT,
    -- lista JSON de URLs
    external_links        TEXT,
    pdf_application_link  TEXT,
    questions_answers     TEXT,
    last_updated          TEXT
);

CREATE INDEX IF NOT EXISTS idx_pet_policies_country
    ON pet_policies (country_id);
"""


# Archivos cuyo esquema ya se creó en este proceso
_SCHEMA_READY: set[str] = set()


def _casefold(value: Optional[str]) -> Optional[str]:
    # LOWER de SQLite solo pliega ASCII ("Île" vs "ÎLE")
    return value.casefold() if isinstance(value, str) else value


class SQLiteDirectoryStore(BaseDirectoryStore):

    def __init__(self, db_path: str = "data/directory.db") -> None:
        self._db_path = db_path
        self._db: Optional[aiosqlite.Connection] = None
        self._compiler = SQLCompiler(placeholder=qmark, fold="casefold")

    def _schema_key(self) -> Optional[str]:
        if self._db_path == ":memory:":
            return None
        return str(Path(self._db_path).resolve())

    async def initialize(self) -> None:
        key = self._schema_key()
        if key is not None:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._db = await aiosqlite.connect(self._db_path)
            self._db.row_factory = aiosqlite.Row
            await self._db.execute("PRAGMA foreign_keys = ON")
            await self._db.create_function("casefold", 1, _casefold, deterministic=True)
            if key is None or key not in _SCHEMA_READY:
                await self._db.executescript(_DDL)
                await self._db.commit()
                if key is not None:
                    _SCHEMA_READY.add(key)
                _logger.info("Esquema SQLite listo en %s", self._db_path)
        except aiosqlite.Error as exc:
            raise StoreError(f"No se pudo abrir {self._db_path}: {exc}") from exc

    def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StoreError("SQLiteDirectoryStore no inicializado")
        return self._db

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def query(self, query: CollectionQuery) -> list[Record]:
        sql, params = self._compiler.select(query)
        _logger.debug("SQL %s params=%s", sql, params)
        try:
            cur = await self._conn().execute(sql, params)
            rows = await cur.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError(str(exc), collection=query.collection) from exc
        return [dict(row) for row in rows]

    async def distinct_values(
        self,
        collection: str,
        field: str,
        join: Optional[Join] = None,
    ) -> list[Any]:
        sql, params = self._compiler.distinct(collection, field, join)
        try:
            cur = await self._conn().execute(sql, params)
            rows = await cur.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError(str(exc), collection=collection) from exc
        return [row["value"] for row in rows]

    # ------------------------------------------------------------------
    # Write path (solo seed / tests)
    # ------------------------------------------------------------------

    async def insert_many(self, collection: str, rows: Iterable[Record]) -> int:
        rows = list(rows)
        if not rows:
            return 0
        # Unión de columnas de todas las filas; las que falten van como NULL
        columns = list(dict.fromkeys(c for r in rows for c in r))
        sql = (
            f"INSERT INTO {ident(collection)} ({', '.join(ident(c) for c in columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})"
        )
        try:
            await self._conn().executemany(sql, [tuple(r.get(c) for c in columns) for r in rows])
            await self._conn().commit()
        except aiosqlite.Error as exc:
            raise StoreError(str(exc), collection=collection) from exc
        return len(rows)

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None
