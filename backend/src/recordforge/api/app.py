"""FastAPI application.

Presentation boundary for the table/form engine: table models, form-build
requests and save/delete outcomes as JSON.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from recordforge.core.settings import (
    configure_logging,
    init_tables_enabled,
    resolve_base_path,
    resolve_metadata_path,
)
from recordforge.core.types import get_field_type
from recordforge.engine import EntityTableEngine, ListOutcome, Outcome, RecordNotFoundError
from recordforge.hooks import HookService, register_builtin_hooks
from recordforge.metadata.loader import MetadataLoader
from recordforge.persistence import (
    DataAccessError,
    DatabaseConfig,
    ErrorKind,
    create_repository,
)
from recordforge.persistence.sql import SQLRepository
from recordforge.registry import FieldMetadataRegistry

logger = logging.getLogger(__name__)


# Global instances (initialized on startup)
metadata_loader: MetadataLoader | None = None
registry: FieldMetadataRegistry | None = None
repository: SQLRepository | None = None
engines: dict[str, EntityTableEngine] = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize on startup, cleanup on shutdown."""
    global metadata_loader, registry, repository

    configure_logging()
    register_builtin_hooks()

    base_path = resolve_base_path()
    metadata_loader = MetadataLoader(resolve_metadata_path(base_path))
    metadata_loader.load_all()
    registry = FieldMetadataRegistry.from_loader(metadata_loader)

    # Initialize database (supports DATABASE_URL or RECORDFORGE_DB_PATH env vars)
    db_config = DatabaseConfig.from_env(base_path)
    repository = create_repository(db_config)

    if init_tables_enabled(db_config.is_sqlite):
        repository.initialize_entities(list(registry.schemas.values()))

    hook_service = HookService()
    engines.clear()
    for name, schema in registry.schemas.items():
        engines[name] = EntityTableEngine(schema, repository, registry, hook_service)
    logger.info("Loaded %d entities", len(engines))

    yield

    # Cleanup
    engines.clear()
    if repository:
        repository.close()


app = FastAPI(title="RecordForge API", lifespan=lifespan)

# CORS for frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.DUPLICATE_KEY: 409,
    ErrorKind.FOREIGN_KEY_VIOLATION: 409,
    ErrorKind.REQUIRED_FIELD_VIOLATION: 422,
    ErrorKind.DATA_TOO_LONG: 422,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
}


def _status_for(outcome: Outcome, success_status: int = 200) -> int:
    if outcome.success:
        return success_status
    if outcome.errors:
        return 422
    if outcome.confirmation_required:
        return 400
    if outcome.error_kind is None:
        # Aborted by a lifecycle hook
        return 409
    return _STATUS_BY_KIND.get(outcome.error_kind, 500)


def _get_engine(entity: str) -> EntityTableEngine:
    if not registry:
        raise HTTPException(500, "Not initialized")
    try:
        schema = registry.get_schema(entity)
    except ValueError:
        raise HTTPException(404, f"Entity '{entity}' not found")
    return engines[schema.name]


def _json_response(outcome: Outcome | ListOutcome, status: int) -> JSONResponse:
    # Records carry driver values (dates from DATE columns) that plain json cannot encode
    return JSONResponse(status_code=status, content=jsonable_encoder(outcome.to_dict()))


def _data_access_response(e: DataAccessError) -> JSONResponse:
    return JSONResponse(
        status_code=_STATUS_BY_KIND.get(e.kind, 500),
        content={"success": False, "message": e.message, "errorKind": e.kind.value},
    )


@app.get("/api/health")
def health() -> dict[str, Any]:
    return {"status": "ok", "entities": len(engines)}


# --- Metadata Endpoints ---


@app.get("/api/metadata")
def list_metadata():
    """List all entity names with their display names."""
    if not registry:
        raise HTTPException(500, "Metadata not initialized")
    return {
        "entities": [
            {"name": s.name, "displayName": s.display_name, "table": s.table}
            for s in registry.schemas.values()
        ]
    }


@app.get("/api/metadata/{entity}")
def get_metadata(entity: str):
    """Field and column metadata for one entity."""
    schema = _get_engine(entity).schema

    fields = []
    for f in schema.fields:
        field_type = get_field_type(f.type)
        field_meta: dict[str, Any] = {
            "name": f.name,
            "label": f.label,
            "type": f.type,
            "primaryKey": f.primary_key,
            "required": f.is_required,
            "maxLength": f.max_length,
            "ui": {
                "control": field_type.ui.edit_control,
                "alignment": field_type.ui.alignment,
            },
        }
        if f.foreign_key:
            field_meta["foreignKey"] = {
                "table": f.foreign_key.table,
                "keyColumn": f.foreign_key.key_column,
                "display": f.foreign_key.display_expression,
            }
        fields.append(field_meta)

    return {
        "entity": schema.name,
        "displayName": schema.display_name,
        "table": schema.table,
        "primaryKey": schema.primary_key,
        "fields": fields,
        "displayFields": [
            {"name": d.name, "label": d.label, "source": d.source_field}
            for d in schema.display_fields
        ],
        "columns": schema.columns(),
        "defaultSort": (
            {"field": schema.default_sort.field, "direction": schema.default_sort.direction}
            if schema.default_sort else None
        ),
    }


# --- Table and Form Endpoints ---


@app.get("/api/entities/{entity}")
def list_entities(entity: str):
    """Table model for an entity. A failed load still returns the last good table."""
    engine = _get_engine(entity)
    outcome = engine.list_entities()
    if outcome.success:
        return outcome.to_dict()
    status = _STATUS_BY_KIND.get(outcome.error_kind, 500) if outcome.error_kind else 500
    return _json_response(outcome, status)


@app.get("/api/entities/{entity}/form")
def add_form(entity: str):
    """Form-build request for a new record."""
    return _get_engine(entity).open_add_form().to_dict()


@app.get("/api/entities/{entity}/{key}/form")
def edit_form(entity: str, key: str):
    """Form-build request for an existing record."""
    engine = _get_engine(entity)
    try:
        return engine.open_edit_form(key).to_dict()
    except RecordNotFoundError:
        raise HTTPException(404, "Record not found")
    except DataAccessError as e:
        return _data_access_response(e)


class SaveRequest(BaseModel):
    """Request body for create and update operations."""
    data: dict[str, Any]


@app.post("/api/entities/{entity}")
def create_entity(entity: str, request: SaveRequest):
    """Create a record. The primary key is generated server-side."""
    engine = _get_engine(entity)
    session = engine.open_add_form()
    outcome = session.save(request.data)
    return _json_response(outcome, _status_for(outcome, 201))


@app.put("/api/entities/{entity}/{key}")
def update_entity(entity: str, key: str, request: SaveRequest):
    """Update a record. The primary key cannot be changed."""
    engine = _get_engine(entity)
    try:
        session = engine.open_edit_form(key)
    except RecordNotFoundError:
        raise HTTPException(404, "Record not found")
    except DataAccessError as e:
        return _data_access_response(e)

    values = {**session.initial_values(), **request.data}
    outcome = session.save(values)
    return _json_response(outcome, _status_for(outcome))


@app.delete("/api/entities/{entity}/{key}")
def delete_entity(entity: str, key: str, confirm: bool = False):
    """Delete a record. Requires ?confirm=true."""
    engine = _get_engine(entity)
    outcome = engine.delete(key, confirm=confirm)
    return _json_response(outcome, _status_for(outcome))
