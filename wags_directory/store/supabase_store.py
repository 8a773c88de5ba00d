"""
SupabaseDirectoryStore - Backend contra la API REST (PostgREST) de Supabase.

Traduce CollectionQuery a parámetros PostgREST:
    select=policy_id,pet_type,countries!inner(country_name,flag_path)
    countries.country_name=ilike.*costa rica*
    order=countries(country_name).asc
    offset=0&limit=12

El join es ``!inner`` para que el filtro sobre la tabla joineada descarte
las filas padre que no matchean (sin ``!inner`` PostgREST solo vacía el
objeto embebido).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..directory.errors import StoreError
from .base import BaseDirectoryStore, CollectionQuery, Join, MatchOp, Record, split_field
from .sql import escape_like

_logger = logging.getLogger("directory.store.supabase")

# PostgREST responde 416 cuando el offset supera el total de filas
_RANGE_NOT_SATISFIABLE = 416


class SupabaseDirectoryStore(BaseDirectoryStore):

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 10.0,
        distinct_page_size: int = 1000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = f"{url.rstrip('/')}/rest/v1"
        self._api_key = api_key
        self._timeout = timeout
        self._distinct_page_size = distinct_page_size
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "apikey": self._api_key,
                    "Authorization": f"Bearer {self._api_key}",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
                transport=self._transport,
            )

    # ------------------------------------------------------------------
    # Helpers internos
    # ------------------------------------------------------------------

    @staticmethod
    def _select(fields: list[str], join: Optional[Join]) -> str:
        parts = list(fields)
        if join is not None:
            parts.append(f"{join.collection}!inner({','.join(join.fields)})")
        return ",".join(parts)

    @staticmethod
    def _order(field: str, join: Optional[Join], ascending: bool) -> str:
        from_join, column = split_field(field, join)
        direction = "asc" if ascending else "desc"
        if from_join:
            return f"{join.collection}({column}).{direction}"
        return f"{column}.{direction}"

    @staticmethod
    def _flatten(row: Record, join: Optional[Join]) -> Record:
        if join is None:
            return row
        embedded = row.pop(join.collection, None)
        # many-to-one devuelve objeto; algunos esquemas devuelven lista
        if isinstance(embedded, list):
            embedded = embedded[0] if embedded else None
        for f in join.fields:
            row[f] = embedded.get(f) if isinstance(embedded, dict) else None
        return row

    async def _get(self, collection: str, params: list[tuple[str, Any]]) -> list[Record]:
        if self._client is None:
            raise StoreError("SupabaseDirectoryStore no inicializado")
        try:
            response = await self._client.get(f"/{collection}", params=params)
            if response.status_code == _RANGE_NOT_SATISFIABLE:
                return []
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise StoreError(_error_message(exc.response), collection=collection) from exc
        except httpx.HTTPError as exc:
            raise StoreError(f"Error de conexión con Supabase: {exc}", collection=collection) from exc
        except ValueError as exc:
            raise StoreError(f"Respuesta inválida de Supabase: {exc}", collection=collection) from exc
        return data or []

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def query(self, query: CollectionQuery) -> list[Record]:
        params: list[tuple[str, Any]] = [("select", self._select(query.fields, query.join))]
        for pred in query.predicates:
            if pred.op is MatchOp.EQ:
                params.append((pred.field, f"eq.{pred.value}"))
            else:
                params.append((pred.field, f"ilike.*{escape_like(str(pred.value))}*"))
        if query.sort is not None:
            params.append(("order", self._order(query.sort.field, query.join, query.sort.ascending)))
        params.append(("offset", query.offset))
        params.append(("limit", query.limit))

        _logger.debug("GET /%s params=%s", query.collection, params)
        rows = await self._get(query.collection, params)
        return [self._flatten(dict(row), query.join) for row in rows]

    async def distinct_values(
        self,
        collection: str,
        field: str,
        join: Optional[Join] = None,
    ) -> list[Any]:
        """
        PostgREST no tiene DISTINCT: se recorre la columna ordenada en páginas
        de ``distinct_page_size`` filas hasta una página corta (o un 416) y se
        deduplica acá preservando el orden. La página no debe superar el
        ``max-rows`` del servidor (1000 por default en Supabase).
        """
        from_join, column = split_field(field, join)
        if from_join:
            select = f"{join.collection}!inner({column})"
        else:
            select = column
        narrowed = join.model_copy(update={"fields": [column]}) if from_join else None

        seen: set[Any] = set()
        values: list[Any] = []
        offset = 0
        while True:
            params: list[tuple[str, Any]] = [
                ("select", select),
                (field, "not.is.null"),
                ("order", self._order(field, join, True)),
                ("offset", offset),
                ("limit", self._distinct_page_size),
            ]
            rows = await self._get(collection, params)
            for row in rows:
                value = self._flatten(dict(row), narrowed).get(column)
                if value is not None and value not in seen:
                    seen.add(value)
                    values.append(value)
            if len(rows) < self._distinct_page_size:
                break
            offset += len(rows)

        _logger.debug(
            "distinct %s.%s: %d valores en %d filas",
            collection, field, len(values), offset + len(rows),
        )
        return values

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


def _error_message(response: httpx.Response) -> str:
    """Extrae el mensaje de error de PostgREST ({"message": ...}) o el texto crudo."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or f"HTTP {response.status_code}"
