"""
BaseDirectoryStore — Interfaz abstracta para el backend de datos del directorio.

Strategy Pattern: el query builder y el catálogo de facetas hablan con esta
interfaz, no con ninguna implementación concreta.

Los registros se devuelven como dicts planos: las columnas de la tabla
joineada se aplanan con su nombre de columna (``country_name``, no
``countries.country_name``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

Record = dict[str, Any]


class MatchOp(str, Enum):
    EQ = "eq"
    # Substring case-insensitive
    ILIKE = "ilike"


class Join(BaseModel):
    """Join interno (many-to-one) contra otra colección."""
    collection: str
    local_key: str
    foreign_key: str
    fields: list[str] = Field(default_factory=list)


class Predicate(BaseModel):
    # "campo" de la colección base o "coleccion_joineada.campo"
    field: str
    op: MatchOp
    value: Union[int, str]


class SortSpec(BaseModel):
    field: str
    ascending: bool = True


class CollectionQuery(BaseModel):
    collection: str
    fields: list[str]
    join: Optional[Join] = None
    predicates: list[Predicate] = Field(default_factory=list)
    offset: int = Field(default=0, ge=0)
    limit: int = Field(gt=0)
    sort: Optional[SortSpec] = None


class BaseDirectoryStore(ABC):

    @abstractmethod
    async def initialize(self) -> None:
        """Abre conexiones / clientes."""
        ...

    @abstractmethod
    async def query(self, query: CollectionQuery) -> list[Record]:
        """Ejecuta una consulta paginada. Lanza StoreError ante fallas."""
        ...

    @abstractmethod
    async def distinct_values(
        self,
        collection: str,
        field: str,
        join: Optional[Join] = None,
    ) -> list[Any]:
        """Valores distintos (no nulos) de un campo sobre toda la colección."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Cierra conexiones y libera recursos."""
        ...

    async def __aenter__(self) -> "BaseDirectoryStore":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def split_field(field: str, join: Optional[Join]) -> tuple[bool, str]:
    """Devuelve (es_del_join, columna) para un campo posiblemente calificado."""
    if "." in field:
        prefix, column = field.split(".", 1)
        if join is None or prefix != join.collection:
            raise ValueError(f"Campo '{field}' no corresponde a ningún join")
        return True, column
    return False, field
