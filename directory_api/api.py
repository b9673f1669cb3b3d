"""
FastAPI application for Directory API.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from . import __version__
from .config import get_settings
from .db.base import create_engine
from .db.services import DirectoryService, ObjectService
from .errors import DirectoryAPIError
from .logging_config import configure_logging
from .schemas.directory_v1 import (
    CreateDirectoryRequest,
    CreateObjectRequest,
    ObjectPage,
    UpdateObjectRequest,
)
from .security import authorize

logger = structlog.get_logger()

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging(settings.log_level, settings.log_format)
    logger.info("Starting Directory API", port=settings.api_port)

    app.state.engine = create_engine(settings)

    yield

    logger.info("Shutting down Directory API")
    await app.state.engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Directory API",
    description="Schema-agnostic CRUD over the tables of a PostgreSQL database",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def request_timeout(request: Request, call_next):
    """Cancel requests that run longer than the configured timeout."""
    try:
        return await asyncio.wait_for(call_next(request), timeout=settings.timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning("Request timed out", path=request.url.path, timeout_ms=settings.timeout)
        return JSONResponse(status_code=408, content={"detail": "Request timed out"})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS"],
    allow_headers=["authorization", "content-type"],
)
app.add_middleware(GZipMiddleware)


@app.exception_handler(DirectoryAPIError)
async def directory_api_error_handler(request: Request, exc: DirectoryAPIError) -> JSONResponse:
    """Report client faults as-is and hide the cause of internal failures."""
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=exc.message,
        )
    else:
        logger.warning("Request rejected", path=request.url.path, error=exc.message)

    return JSONResponse(status_code=exc.status_code, content={"detail": {"error": exc.to_dict()}})


# Dependencies
def get_engine(request: Request) -> AsyncEngine:
    """Return the application's engine, creating it if startup did not run."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        engine = request.app.state.engine = create_engine(settings)
    return engine


def get_directory_service(engine: AsyncEngine = Depends(get_engine)) -> DirectoryService:
    return DirectoryService(engine)


def get_object_service(engine: AsyncEngine = Depends(get_engine)) -> ObjectService:
    return ObjectService(engine)


# Health and Info Endpoints
@app.get("/healthz", tags=["system"])
def healthz() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/version", tags=["system"])
def version() -> Dict[str, str]:
    """Return the version of the application."""
    return {"version": __version__}


router = APIRouter(dependencies=[Depends(authorize)])


# Directory Endpoints
@router.get("/directories", tags=["directories"])
async def list_directories(
    service: DirectoryService = Depends(get_directory_service),
) -> List[str]:
    """List all directories in the public schema."""
    return await service.list_directories()


@router.post("/directory", tags=["directories"])
async def create_directory(
    payload: CreateDirectoryRequest,
    service: DirectoryService = Depends(get_directory_service),
) -> Dict[str, str]:
    """
    Create a directory.

    Each property becomes a column. Constraints other than PRIMARY KEY,
    NOT NULL and UNIQUE are ignored.
    """
    await service.create_directory(payload.directory, payload.properties)
    return {"status": "success"}


@router.delete("/directory", tags=["directories"])
async def delete_directory(
    directory: str = Query(..., min_length=1),
    service: DirectoryService = Depends(get_directory_service),
) -> Dict[str, str]:
    """Drop a directory and all of its objects."""
    await service.delete_directory(directory)
    return {"status": "success"}


@router.post("/generate/dummy", tags=["directories"])
async def generate_dummy(
    service: DirectoryService = Depends(get_directory_service),
) -> Dict[str, str]:
    """Create the sample ``authors`` and ``jokes`` directories."""
    await service.generate_dummy()
    return {"status": "success"}


# Object Endpoints
@router.get("/objects", response_model=ObjectPage, tags=["objects"])
async def list_objects(
    directory: str = Query(..., min_length=1),
    cursor: Optional[int] = Query(None, ge=0),
    service: ObjectService = Depends(get_object_service),
) -> ObjectPage:
    """
    Return one page (10 objects) of a directory.

    JSON and JSONB values are returned as JSON-encoded strings. The
    response also carries the ordered property names, the primary key (if
    any) and the total object count.
    """
    return await service.list_objects(directory, cursor)


@router.post("/object", tags=["objects"])
async def create_object(
    payload: CreateObjectRequest,
    service: ObjectService = Depends(get_object_service),
) -> Dict[str, str]:
    """Create an object from a map of property name to value."""
    await service.create_object(payload.directory, payload.properties)
    return {"status": "success"}


@router.put("/object", tags=["objects"])
async def update_object(
    payload: UpdateObjectRequest,
    service: ObjectService = Depends(get_object_service),
) -> Dict[str, str]:
    """Update the object identified by its primary key value."""
    await service.update_object(payload.directory, payload.id, payload.properties)
    return {"status": "success"}


@router.delete("/object", tags=["objects"])
async def delete_object(
    directory: str = Query(..., min_length=1),
    id: str = Query(..., min_length=1),
    service: ObjectService = Depends(get_object_service),
) -> Dict[str, str]:
    """Delete the object identified by its primary key value."""
    await service.delete_object(directory, id)
    return {"status": "success"}


app.include_router(router)
