"""
Compilador SQL compartido por los backends SQLite y PostgreSQL.

Los identificadores (tablas, columnas) vienen de las specs de recurso, no
del usuario, pero igual se validan. Los valores siempre van como
parámetros; solo cambia el estilo de placeholder (``?`` vs ``$1``).
"""

from __future__ import annotations

import re
from typing import Any, Callable, Optional

from .base import CollectionQuery, Join, MatchOp, Predicate, split_field

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def ident(name: str) -> str:
    if not _IDENT.match(name):
        raise ValueError(f"Identificador SQL inválido: {name!r}")
    return name


def escape_like(value: str) -> str:
    """Escapa comodines de LIKE para que el valor matchee literal."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def qmark(_: int) -> str:
    return "?"


def numbered(n: int) -> str:
    return f"${n}"


class SQLCompiler:

    def __init__(
        self, placeholder: Callable[[int], str] = qmark, fold: str = "LOWER"
    ) -> None:
        self._placeholder = placeholder
        # Función SQL que pliega mayúsculas en ambos lados del LIKE
        self._fold = ident(fold)

    # ------------------------------------------------------------------
    # Helpers internos
    # ------------------------------------------------------------------

    @staticmethod
    def _ref(field: str, join: Optional[Join]) -> str:
        from_join, column = split_field(field, join)
        return f"{'j' if from_join else 't'}.{ident(column)}"

    @staticmethod
    def _from_clause(collection: str, join: Optional[Join]) -> str:
        clause = f"{ident(collection)} AS t"
        if join is not None:
            clause += (
                f" INNER JOIN {ident(join.collection)} AS j"
                f" ON j.{ident(join.foreign_key)} = t.{ident(join.local_key)}"
            )
        return clause

    def _condition(
        self, pred: Predicate, join: Optional[Join], params: list[Any]
    ) -> str:
        ref = self._ref(pred.field, join)
        if pred.op is MatchOp.EQ:
            params.append(pred.value)
            return f"{ref} = {self._placeholder(len(params))}"
        params.append(f"%{escape_like(str(pred.value))}%")
        ph = self._placeholder(len(params))
        return f"{self._fold}({ref}) LIKE {self._fold}({ph}) ESCAPE '\\'"

    # ------------------------------------------------------------------
    # API pública
    # ------------------------------------------------------------------

    def select(self, query: CollectionQuery) -> tuple[str, list[Any]]:
        columns = [f"t.{ident(f)}" for f in query.fields]
        if query.join is not None:
            columns += [f"j.{ident(f)} AS {ident(f)}" for f in query.join.fields]

        params: list[Any] = []
        sql = f"SELECT {', '.join(columns)} FROM {self._from_clause(query.collection, query.join)}"

        conditions = [self._condition(p, query.join, params) for p in query.predicates]
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)

        if query.sort is not None:
            direction = "ASC" if query.sort.ascending else "DESC"
            sql += f" ORDER BY {self._ref(query.sort.field, query.join)} {direction}"

        params.append(query.limit)
        limit_ph = self._placeholder(len(params))
        params.append(query.offset)
        offset_ph = self._placeholder(len(params))
        sql += f" LIMIT {limit_ph} OFFSET {offset_ph}"
        return sql, params

    def distinct(
        self, collection: str, field: str, join: Optional[Join] = None
    ) -> tuple[str, list[Any]]:
        ref = self._ref(field, join)
        sql = (
            f"SELECT DISTINCT {ref} AS value FROM {self._from_clause(collection, join)}"
            f" WHERE {ref} IS NOT NULL ORDER BY 1"
        )
        return sql, []
