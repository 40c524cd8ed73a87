"""
Formula Editor Service — live preview and testing of formulas.

Unlike the pricing service this is fail-loud: a broken formula comes back
with its verbatim error message so the person editing it can fix it.
Previews never write to the stores.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pipe_pricing.errors import EvaluationError
from pipe_pricing.formula.evaluator import referenced_names, try_evaluate
from pipe_pricing.models.enums import ProductModel
from pipe_pricing.models.schemas import Dimensions, EvaluationResult, FormulaPreview, MaterialPrices
from pipe_pricing.services.pricing_service import PricingService

logger = logging.getLogger(__name__)


class FormulaEditorService:
    def __init__(self, pricing: PricingService):
        self.pricing = pricing

    def describe(self, model: ProductModel | str) -> dict[str, Any]:
        """Default and current formula/coefficients for one model."""
        model = ProductModel(model)
        formulas = self.pricing.formulas
        coefficients = self.pricing.coefficients
        return {
            "model": model.value,
            "formula": formulas.get(model),
            "default_formula": formulas.get_defaults(model),
            "formula_overridden": formulas.is_overridden(model),
            "coefficients": coefficients.get(model),
            "default_coefficients": coefficients.get_defaults(model),
            "coefficients_overridden": coefficients.is_overridden(model),
        }

    def preview(
        self,
        model: ProductModel | str,
        dimensions: Dimensions,
        prices: MaterialPrices,
        expression: str | None = None,
        coefficients: Mapping[str, float] | None = None,
    ) -> FormulaPreview:
        """
        Evaluate a model's formula against sample inputs. ``expression`` and
        ``coefficients`` replace the stored ones for this preview only;
        partial coefficients are layered on the stored record.
        """
        model = ProductModel(model)
        expression = self.pricing.formulas.get(model) if expression is None else expression
        effective = self.pricing.coefficients.get(model)
        if coefficients:
            effective.update({k: float(v) for k, v in coefficients.items()})

        variables = self.pricing.build_variables(model, dimensions, prices, coefficients=effective)
        result = try_evaluate(expression, variables)
        if not result.ok:
            logger.debug(f"Preview of {model.value} failed: {result.error}")

        return FormulaPreview(
            model=model.value,
            expression=expression,
            coefficients=effective,
            variables=variables,
            unknown_names=self.unknown_names(expression, variables),
            result=result,
        )

    def test_expression(
        self, expression: str, variables: Mapping[str, float] | None = None
    ) -> EvaluationResult:
        """Evaluate free-form ``expression`` with custom variables plus explicit ``variables``."""
        bound = dict(self.pricing.variables.as_variable_map())
        bound.update(variables or {})
        return try_evaluate(expression, bound)

    @staticmethod
    def unknown_names(expression: str, variables: Mapping[str, float]) -> list[str]:
        """Names the formula references that the variable map does not bind."""
        try:
            names = referenced_names(expression)
        except EvaluationError:
            return []
        return sorted(names - set(variables))
