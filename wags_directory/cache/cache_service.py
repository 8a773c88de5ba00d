"""
Cache Service - Caché async con Redis para las facetas del directorio.

Las facetas cambian poco, así que se cachean a nivel proceso con un TTL
corto. El caché es una optimización: si Redis no responde, get() devuelve
None y set() devuelve False, y el caller sigue contra el store.
"""

import json
import logging
from typing import Any, Optional

from redis.exceptions import RedisError

from ..config import FACET_CACHE_TTL
from .redis_client import get_redis_client

_logger = logging.getLogger("directory.cache")


class CacheService:
    """
    Servicio de caché async usando Redis.

    Valores serializados a JSON, con TTL y prefijo de key.
    """

    # Prefijo para todas las keys
    KEY_PREFIX = "wags:"

    def __init__(self, default_ttl: int = FACET_CACHE_TTL):
        """Inicializa el servicio de caché."""
        self._redis = None
        self._default_ttl = default_ttl
        self._initialized = False

    async def initialize(self) -> None:
        """Inicializa la conexión async a Redis."""
        if not self._initialized:
            self._redis = await get_redis_client()
            self._initialized = True

    async def is_available(self) -> bool:
        """Verifica si el caché está disponible (reconectando si toca)."""
        if not self._initialized:
            await self.initialize()
        if not await self._redis.ensure_connected():
            return False
        return await self._redis.is_connected()

    def _make_key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{key}"

    async def get(self, key: str) -> Optional[Any]:
        """
        Obtiene un valor del caché.

        Args:
            key: Clave a buscar

        Returns:
            Valor deserializado o None si no existe
        """
        if not await self.is_available():
            return None

        try:
            value = await self._redis.client.get(self._make_key(key))
            if value is None:
                return None
            return json.loads(value)
        except (RedisError, ValueError) as e:
            _logger.warning("[Cache] Error en get(%s): %s", key, e)
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None
    ) -> bool:
        """
        Guarda un valor en el caché.

        Args:
            key: Clave para almacenar
            value: Valor a almacenar (será serializado a JSON)
            ttl: Tiempo de vida en segundos (default: FACET_CACHE_TTL)

        Returns:
            True si se guardó exitosamente
        """
        if not await self.is_available():
            return False

        try:
            serialized = json.dumps(value, ensure_ascii=False)
            await self._redis.client.setex(
                self._make_key(key), ttl or self._default_ttl, serialized
            )
            return True
        except (RedisError, TypeError) as e:
            _logger.warning("[Cache] Error en set(%s): %s", key, e)
            return False


# Instancia global singleton
_cache_service: Optional[CacheService] = None


async def get_cache_service() -> CacheService:
    """
    Obtiene la instancia singleton del servicio de caché async.

    Returns:
        Instancia de CacheService inicializada
    """
    global _cache_service
    if _cache_service is None:
        _cache_service = CacheService()
    if not _cache_service._initialized:
        await _cache_service.initialize()
    return _cache_service
