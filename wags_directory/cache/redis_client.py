"""
Redis Client - Conexión async a Redis compartida por el proceso.

Si Redis no está disponible el cliente queda en None y el caché se
desactiva; el directorio sigue funcionando contra el store. Pasado
REDIS_RETRY_INTERVAL se vuelve a intentar la conexión, así una caída al
arrancar o en medio de la vida del proceso no deja el caché apagado.
"""

import logging
import time
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError, TimeoutError

from ..config import (
    REDIS_DB,
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    REDIS_RETRY_INTERVAL,
)

_logger = logging.getLogger("directory.cache")


class RedisClient:
    """
    Conexión async a Redis con reconexión perezosa.

    Attributes:
        _client: Cliente Redis subyacente, None mientras no haya conexión
        _last_attempt: Momento (monotonic) del último intento de conexión
    """

    def __init__(
        self,
        host: str = REDIS_HOST,
        port: int = REDIS_PORT,
        password: Optional[str] = REDIS_PASSWORD,
        db: int = REDIS_DB,
        retry_interval: float = REDIS_RETRY_INTERVAL,
    ) -> None:
        self._host = host
        self._port = port
        self._password = password
        self._db = db
        self._retry_interval = retry_interval
        self._client: Optional[redis.Redis] = None
        self._last_attempt: Optional[float] = None

    async def connect(self) -> bool:
        """Intenta abrir la conexión. Devuelve True si Redis respondió al ping."""
        self._last_attempt = time.monotonic()
        client = redis.Redis(
            host=self._host,
            port=self._port,
            password=self._password,
            db=self._db,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        try:
            await client.ping()
        except (ConnectionError, TimeoutError) as e:
            _logger.warning(
                "[Redis] Error de conexión a %s:%s: %s (reintento en %ss)",
                self._host, self._port, e, self._retry_interval,
            )
            await client.aclose()
            self._client = None
            return False

        self._client = client
        _logger.info("[Redis] Conectado a %s:%s DB:%s", self._host, self._port, self._db)
        return True

    async def ensure_connected(self) -> bool:
        """Reconecta si no hay cliente y ya pasó el intervalo de reintento."""
        if self._client is not None:
            return True
        if (
            self._last_attempt is not None
            and time.monotonic() - self._last_attempt < self._retry_interval
        ):
            return False
        return await self.connect()

    @property
    def client(self) -> Optional[redis.Redis]:
        """Retorna el cliente Redis async."""
        return self._client

    async def is_connected(self) -> bool:
        """Verifica si hay conexión activa; si el ping falla, suelta el cliente."""
        if self._client is None:
            return False
        try:
            await self._client.ping()
            return True
        except (ConnectionError, TimeoutError) as e:
            _logger.warning("[Redis] Conexión perdida: %s", e)
            await self.close()
            self._last_attempt = time.monotonic()
            return False

    async def close(self) -> None:
        """Cierra la conexión a Redis."""
        if self._client:
            client, self._client = self._client, None
            await client.aclose()


# Instancia global del proceso
_redis_client: Optional[RedisClient] = None


async def get_redis_client() -> RedisClient:
    """
    Obtiene el cliente Redis del proceso, intentando conectar si hace falta.

    Returns:
        Instancia de RedisClient (puede estar sin conexión)
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    await _redis_client.ensure_connected()
    return _redis_client


async def close_redis_client() -> None:
    """Cierra el cliente si alguna vez se creó (shutdown de la app)."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None
