"""
API routes — health check and the custom variable registry.

Routes:
  GET    /health               → API health check
  GET    /api/variables        → List custom variables
  POST   /api/variables        → Add a custom variable
  PATCH  /api/variables/{id}   → Change a variable's value
  DELETE /api/variables/{id}   → Remove a variable (no-op if absent)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from pipe_pricing.api.dependencies import get_engine
from pipe_pricing.config import get_settings
from pipe_pricing.container import Engine
from pipe_pricing.errors import (
    DuplicateIdentifier,
    InvalidIdentifier,
    InvalidVariableValue,
    VariableNotFound,
)
from pipe_pricing.models.schemas import CustomVariable

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
variable_router = APIRouter()


# ── Request schemas ──────────────────────────────────────
class VariableCreateRequest(BaseModel):
    name: str = ""
    var_name: str = Field(alias="varName")
    value: float

    model_config = {"populate_by_name": True}


class VariableUpdateRequest(BaseModel):
    value: float


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "storage": settings.storage_backend,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Custom variables ─────────────────────────────────────

@variable_router.get("", response_model=list[CustomVariable])
def list_variables(engine: Engine = Depends(get_engine)):
    return engine.variables.list()


@variable_router.post("", response_model=CustomVariable, status_code=201)
def add_variable(req: VariableCreateRequest, engine: Engine = Depends(get_engine)):
    try:
        return engine.variables.add(req.name, req.var_name, req.value)
    except DuplicateIdentifier as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (InvalidIdentifier, InvalidVariableValue) as e:
        raise HTTPException(status_code=400, detail=str(e))


@variable_router.patch("/{variable_id}", response_model=CustomVariable)
def update_variable(variable_id: str, req: VariableUpdateRequest, engine: Engine = Depends(get_engine)):
    try:
        return engine.variables.update(variable_id, req.value)
    except VariableNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidVariableValue as e:
        raise HTTPException(status_code=400, detail=str(e))


@variable_router.delete("/{variable_id}", status_code=204)
def remove_variable(variable_id: str, engine: Engine = Depends(get_engine)):
    engine.variables.remove(variable_id)
