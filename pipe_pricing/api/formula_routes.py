"""
Formula editor API routes.

Routes:
  GET  /api/formulas                    → Every model's formula + coefficients
  GET  /api/formulas/{model}            → One model (current, default, overridden flags)
  PUT  /api/formulas/{model}            → Save a formula (saved even if it does not parse)
  POST /api/formulas/{model}/reset      → Restore the default formula
  POST /api/formulas/{model}/preview    → Evaluate a candidate formula/coefficients, nothing saved
  POST /api/formulas/test               → Evaluate a free-form expression
  GET  /api/coefficients                → Full coefficient table
  PUT  /api/coefficients/{model}        → Update some coefficients of one model
  POST /api/coefficients/{model}/reset  → Restore default coefficients
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from pipe_pricing.api.dependencies import get_engine
from pipe_pricing.container import Engine
from pipe_pricing.errors import EvaluationError, StoreWriteError
from pipe_pricing.formula.parser import parse
from pipe_pricing.models.enums import ProductModel
from pipe_pricing.models.schemas import Dimensions, EvaluationResult, FormulaPreview, MaterialPrices

logger = logging.getLogger(__name__)

formula_router = APIRouter()
coefficient_router = APIRouter()


# ── Request / response schemas ───────────────────────────


class FormulaUpdateRequest(BaseModel):
    expression: str


class FormulaUpdateResponse(BaseModel):
    model: str
    expression: str
    syntax_ok: bool
    syntax_error: Optional[str] = None


class PreviewRequest(BaseModel):
    dimensions: Dimensions = Field(default_factory=lambda: Dimensions(X=380, Y=380, H=500))
    prices: MaterialPrices = Field(default_factory=MaterialPrices)
    expression: Optional[str] = None
    coefficients: Optional[dict[str, float]] = None


class ExpressionTestRequest(BaseModel):
    expression: str
    variables: dict[str, float] = {}


class CoefficientUpdateRequest(BaseModel):
    coefficients: dict[str, float]


# ── Formulas ─────────────────────────────────────────────


@formula_router.get("")
def list_formulas(engine: Engine = Depends(get_engine)) -> list[dict[str, Any]]:
    return [engine.editor.describe(model) for model in ProductModel]


@formula_router.post("/test", response_model=EvaluationResult)
def test_expression(req: ExpressionTestRequest, engine: Engine = Depends(get_engine)):
    return engine.editor.test_expression(req.expression, req.variables)


@formula_router.get("/{model}")
def get_formula(model: ProductModel, engine: Engine = Depends(get_engine)) -> dict[str, Any]:
    return engine.editor.describe(model)


@formula_router.put("/{model}", response_model=FormulaUpdateResponse)
def update_formula(model: ProductModel, req: FormulaUpdateRequest, engine: Engine = Depends(get_engine)):
    engine.formulas.update(model, req.expression)
    try:
        parse(req.expression)
    except EvaluationError as e:
        logger.info(f"Saved formula for {model.value} does not parse: {e.message}")
        return FormulaUpdateResponse(
            model=model.value, expression=req.expression, syntax_ok=False, syntax_error=e.message
        )
    return FormulaUpdateResponse(model=model.value, expression=req.expression, syntax_ok=True)


@formula_router.post("/{model}/reset")
def reset_formula(model: ProductModel, engine: Engine = Depends(get_engine)) -> dict[str, Any]:
    engine.formulas.reset_model(model)
    return engine.editor.describe(model)


@formula_router.post("/{model}/preview", response_model=FormulaPreview)
def preview_formula(model: ProductModel, req: PreviewRequest, engine: Engine = Depends(get_engine)):
    return engine.editor.preview(
        model,
        req.dimensions,
        req.prices,
        expression=req.expression,
        coefficients=req.coefficients,
    )


# ── Coefficients ─────────────────────────────────────────


@coefficient_router.get("")
def list_coefficients(engine: Engine = Depends(get_engine)) -> dict[str, dict[str, float]]:
    return engine.coefficients.load()


@coefficient_router.put("/{model}")
def update_coefficients(
    model: ProductModel, req: CoefficientUpdateRequest, engine: Engine = Depends(get_engine)
) -> dict[str, float]:
    table = engine.coefficients.load()
    table[model.value].update(req.coefficients)
    try:
        engine.coefficients.save(table)
    except StoreWriteError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return engine.coefficients.get(model)


@coefficient_router.post("/{model}/reset")
def reset_coefficients(model: ProductModel, engine: Engine = Depends(get_engine)) -> dict[str, float]:
    return engine.coefficients.reset_model(model)
