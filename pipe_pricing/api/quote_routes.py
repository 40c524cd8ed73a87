"""
Quote, history and price matrix API routes.

Routes:
  POST   /api/quote          → Price a configuration (nothing recorded)
  GET    /api/history        → Issued quotes, newest first
  POST   /api/history        → Price a configuration and record it
  GET    /api/history/{id}   → One history entry
  DELETE /api/history/{id}   → Remove a history entry (no-op if absent)
  GET    /api/price-matrix   → Metal price by coating and color
  PUT    /api/price-matrix   → Replace the price matrix
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from pipe_pricing.api.dependencies import get_engine
from pipe_pricing.container import Engine
from pipe_pricing.errors import StoreWriteError
from pipe_pricing.models.schemas import HistoryEntry, Quote, QuoteRequest

logger = logging.getLogger(__name__)

quote_router = APIRouter()
history_router = APIRouter()
price_matrix_router = APIRouter()


# ── Quote ────────────────────────────────────────────────

@quote_router.post("", response_model=Quote)
def build_quote(req: QuoteRequest, engine: Engine = Depends(get_engine)):
    return engine.quotes.build_quote(req)


# ── History ──────────────────────────────────────────────

@history_router.get("", response_model=list[HistoryEntry])
def list_history(engine: Engine = Depends(get_engine)):
    return engine.history.list()


@history_router.post("", response_model=HistoryEntry, status_code=201)
def record_quote(req: QuoteRequest, engine: Engine = Depends(get_engine)):
    quote = engine.quotes.build_quote(req)
    try:
        return engine.history.add(quote, req.company)
    except StoreWriteError as e:
        raise HTTPException(status_code=400, detail=str(e))


@history_router.get("/{entry_id}", response_model=HistoryEntry)
def get_history_entry(entry_id: str, engine: Engine = Depends(get_engine)):
    entry = engine.history.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"History entry '{entry_id}' not found")
    return entry


@history_router.delete("/{entry_id}", status_code=204)
def delete_history_entry(entry_id: str, engine: Engine = Depends(get_engine)):
    engine.history.delete(entry_id)


# ── Price matrix ─────────────────────────────────────────

@price_matrix_router.get("")
def get_price_matrix(engine: Engine = Depends(get_engine)) -> dict[str, dict[str, float]]:
    return engine.price_matrix.load()


@price_matrix_router.put("")
def put_price_matrix(
    matrix: dict[str, dict[str, float]], engine: Engine = Depends(get_engine)
) -> dict[str, dict[str, float]]:
    try:
        engine.price_matrix.save(matrix)
    except StoreWriteError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return engine.price_matrix.load()
