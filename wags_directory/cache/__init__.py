"""
Módulo de caché para el directorio.

Proporciona una capa de caché usando Redis para las facetas, que se
consultan en cada request y cambian muy poco.
"""

from .redis_client import close_redis_client, get_redis_client, RedisClient
from .cache_service import CacheService, get_cache_service

__all__ = [
    "close_redis_client",
    "get_redis_client",
    "RedisClient",
    "CacheService",
    "get_cache_service",
]
