"""FastAPI application."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from verdict.errors import ConflictError, ConstraintEvaluationFault, UnknownEntityError
from verdict.lifecycle import EntityMutationService
from verdict.metadata.loader import MetadataLoader
from verdict.persistence import DatabaseConfig, PersistenceAdapter, create_adapter
from verdict.response import MutationResponse
from verdict.validation import register_builtin_constraints

logger = logging.getLogger(__name__)


# Global instances (initialized on startup)
metadata_loader: MetadataLoader | None = None
db: PersistenceAdapter | None = None
mutation_service: EntityMutationService | None = None


def resolve_metadata_path() -> Path:
    """Metadata directory from VERDICT_METADATA_PATH, else <repo>/metadata."""
    configured = os.environ.get("VERDICT_METADATA_PATH")
    if configured:
        return Path(configured)

    cwd = Path.cwd()
    base_path = cwd.parent if cwd.name == "backend" else cwd
    return base_path / "metadata"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize on startup, cleanup on shutdown."""
    global metadata_loader, db, mutation_service

    register_builtin_constraints()

    metadata_path = resolve_metadata_path()
    metadata_loader = MetadataLoader(metadata_path)
    metadata_loader.load_all()
    logger.info(
        "Loaded %d entities from %s", len(metadata_loader.list_entities()), metadata_path
    )

    db_config = DatabaseConfig.from_env()
    if db_config.is_sqlite and db_config.sqlite_path != ":memory:":
        Path(db_config.sqlite_path).parent.mkdir(parents=True, exist_ok=True)

    db = create_adapter(db_config)
    db.connect()
    for entity_name in metadata_loader.list_entities():
        entity = metadata_loader.get_entity(entity_name)
        if entity:
            db.initialize_entity(entity)

    mutation_service = EntityMutationService(db, metadata_loader)

    yield

    # Cleanup
    if db:
        db.close()
    mutation_service = None


app = FastAPI(title="Verdict API", lifespan=lifespan)


# --- Error Handlers ---


@app.exception_handler(ConstraintEvaluationFault)
async def constraint_fault_handler(request: Request, exc: ConstraintEvaluationFault):
    logger.error(
        "Constraint evaluation fault on %s %s", request.method, request.url.path,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    logger.warning("Write conflict on %s: %s", exc.entity, exc.detail)
    return JSONResponse(status_code=409, content={"error": str(exc)})


@app.exception_handler(UnknownEntityError)
async def unknown_entity_handler(request: Request, exc: UnknownEntityError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


def _service() -> EntityMutationService:
    if not mutation_service:
        raise HTTPException(500, "Not initialized")
    return mutation_service


def _respond(response: MutationResponse) -> JSONResponse:
    return JSONResponse(status_code=response.status_code, content=response.payload)


def _coerce_id(service: EntityMutationService, entity: str, id: str) -> Any:
    """Integer primary keys arrive as path strings."""
    entity_model = service.entity(entity)
    pk_field = entity_model.get_field(entity_model.primary_key)
    if pk_field is not None and pk_field.type == "integer":
        try:
            return int(id)
        except ValueError:
            return id
    return id


# --- Metadata Endpoints ---


@app.get("/api/metadata")
async def list_entities() -> dict[str, Any]:
    """List all entities and their declared rules."""
    service = _service()

    entities = []
    for name in service.metadata_loader.list_entities():
        entity = service.entity(name)
        entities.append({
            "name": entity.name,
            "displayName": entity.display_name,
            "pluralName": entity.plural_name,
            "rules": service.ruleset(name).describe(),
        })

    return {"entities": entities}


# --- Entity Endpoints ---


class CreateRequest(BaseModel):
    """Request body for create operations."""
    data: dict[str, Any]


class UpdateRequest(BaseModel):
    """Request body for update operations."""
    data: dict[str, Any]


@app.post("/api/entities/{entity}")
async def create_entity(entity: str, request: CreateRequest):
    """Create a new record with validation."""
    service = _service()
    return _respond(await service.create(entity, request.data))


@app.get("/api/entities/{entity}/{id}")
async def get_entity(entity: str, id: str):
    """Get a single record."""
    service = _service()
    return _respond(await service.show(entity, _coerce_id(service, entity, id)))


@app.put("/api/entities/{entity}/{id}")
async def update_entity(entity: str, id: str, request: UpdateRequest):
    """Update a record with validation."""
    service = _service()
    return _respond(await service.update(entity, _coerce_id(service, entity, id), request.data))
