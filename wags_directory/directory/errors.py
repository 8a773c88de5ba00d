"""
Errores del motor de directorio.

Un resultado vacío NO es un error: cero items es una respuesta válida.
"""

from __future__ import annotations


class DirectoryError(Exception):
    """Base de todos los errores del directorio."""


class ParseAmbiguity(DirectoryError):
    """Path con cantidad impar de segmentos bajo la política estricta."""

    def __init__(self, segments: list[str]) -> None:
        self.segments = list(segments)
        super().__init__(
            f"Cantidad impar de segmentos ({len(self.segments)}): "
            f"'{self.segments[-1] if self.segments else ''}' no tiene valor"
        )


class StoreError(DirectoryError):
    """Falla del backend (conectividad, query malformada, permisos).

    El mensaje original se conserva tal cual; la excepción del driver
    queda encadenada en ``__cause__``.
    """

    def __init__(self, message: str, collection: str | None = None) -> None:
        self.message = message
        self.collection = collection
        super().__init__(message)
