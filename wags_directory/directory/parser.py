"""
Path Segment Parser - Convierte los segmentos de la URL en un FilterMap.

    /directory/policies/country/costa-rica/pet_type/dog
                        └─key─┘ └─value──┘ └─key──┘ └v┘

Los segmentos se consumen de a pares (key, value). Cada segmento se
decodifica (percent-decoding) de forma individual antes de aparear.
"""

from urllib.parse import quote, unquote

from .errors import ParseAmbiguity
from .models import FilterMap


def split_path(path: str) -> list[str]:
    """Separa un path crudo en segmentos, sin decodificar. Ignora vacíos."""
    return [s for s in path.split("/") if s]


def parse_segments(segments: list[str], strict: bool = False) -> FilterMap:
    """
    Arma el FilterMap a partir de los segmentos en orden.

    Args:
        segments: Segmentos del path (sin decodificar), puede ser vacío
        strict: Si True, una cantidad impar de segmentos lanza ParseAmbiguity.
                Si False, el último segmento sin pareja se descarta.

    Returns:
        FilterMap con keys únicas (si una key se repite, gana la última)
    """
    if len(segments) % 2 == 1 and strict:
        raise ParseAmbiguity(segments)

    filters: FilterMap = {}
    # range con paso 2 sobre len - 1 deja afuera el segmento sin pareja
    for i in range(0, len(segments) - 1, 2):
        filters[unquote(segments[i])] = unquote(segments[i + 1])
    return filters


def encode_segments(filters: FilterMap) -> list[str]:
    """Inversa de parse_segments: key, value, key, value... codificados."""
    segments: list[str] = []
    for key, value in filters.items():
        segments.append(quote(key, safe=""))
        segments.append(quote(value, safe=""))
    return segments


def build_directory_path(resource: str, filters: FilterMap) -> str:
    """Path canónico del directorio para un recurso y sus filtros."""
    return "/".join(["", "directory", resource, *encode_segments(filters)])
