"""
FastAPI — API REST del directorio de viaje con mascotas.

Rutas:
  GET  /                                  → health check
  GET  /directory/{recurso}[/{k}/{v}...]  → página de directorio filtrada
  GET  /api/facets/countries              → todos los países
  GET  /api/facets/pet-types              → todos los tipos de mascota
  GET  /api/{recurso}                     → listado paginado
  GET  /api/{recurso}/{slug}              → ficha de detalle de un item
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from urllib.parse import unquote

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..cache import CacheService, close_redis_client, get_cache_service
from ..config import (
    CACHE_ENABLED,
    DEFAULT_PAGE_SIZE,
    DIRECTORY_BACKEND,
    LOG_LEVEL,
    MAX_PAGE_SIZE,
)
from ..directory import DirectoryService, ParseAmbiguity, ResourceType, StoreError, split_path
from ..directory.models import DirectoryResult, FacetSet, ResourceDetail, ResourceItem
from ..store import open_store

_logger = logging.getLogger("directory.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(f"App iniciando (backend={DIRECTORY_BACKEND})")
    yield
    await close_redis_client()
    print("App cerrando")


app = FastAPI(title="Wags Directory API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


# ── Dependencias ─────────────────────────────────────────────────────────────


async def get_cache() -> Optional[CacheService]:
    if not CACHE_ENABLED:
        return None
    return await get_cache_service()


async def get_service(
    cache: Optional[CacheService] = Depends(get_cache),
) -> AsyncIterator[DirectoryService]:
    # Un store por request; se cierra al terminar la respuesta
    async with open_store() as store:
        yield DirectoryService(store, cache=cache)


# ── Errores ──────────────────────────────────────────────────────────────────


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    _logger.error("[API][ERROR] %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(content={"error": exc.message}, status_code=500)


@app.exception_handler(ParseAmbiguity)
async def parse_ambiguity_handler(request: Request, exc: ParseAmbiguity):
    return JSONResponse(content={"error": str(exc)}, status_code=400)


# ── Rutas ────────────────────────────────────────────────────────────────────


@app.get("/")
async def read_root():
    return {"status": "ok", "backend": DIRECTORY_BACKEND}


def _raw_segments(request: Request, resource_type: ResourceType) -> list[str]:
    """
    Segmentos de filtro tomados del path crudo (sin decodificar), para que
    cada segmento se decodifique una sola vez en el parser. Un "%2F" dentro
    de un valor no parte el segmento.
    """
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    parts = split_path(path)
    for i in range(len(parts) - 1):
        if parts[i] == "directory" and unquote(parts[i + 1]) == resource_type.value:
            return parts[i + 2:]
    return []


@app.get("/directory/{resource_type}", response_model=DirectoryResult)
@app.get("/directory/{resource_type}/{segments:path}", response_model=DirectoryResult)
async def browse_directory(
    request: Request,
    resource_type: ResourceType,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: DirectoryService = Depends(get_service),
) -> DirectoryResult:
    segments = _raw_segments(request, resource_type)
    return await service.browse(resource_type, segments, offset=offset, limit=limit)


@app.get("/api/facets/countries", response_model=FacetSet)
async def list_countries(service: DirectoryService = Depends(get_service)):
    return await service.unique_countries()


@app.get("/api/facets/pet-types", response_model=FacetSet)
async def list_pet_types(service: DirectoryService = Depends(get_service)):
    return await service.unique_pet_types()


@app.get("/api/{resource_type}", response_model=list[ResourceItem])
async def list_resource(
    resource_type: ResourceType,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: DirectoryService = Depends(get_service),
):
    return await service.list_items(resource_type, offset=offset, limit=limit)


@app.get("/api/{resource_type}/{slug}", response_model=ResourceDetail)
async def get_resource(
    resource_type: ResourceType,
    slug: str,
    service: DirectoryService = Depends(get_service),
):
    item = await service.get_by_slug(resource_type, slug)
    if item is None:
        raise HTTPException(status_code=404, detail="Not found")
    return item
