"""Services — PricingService, QuoteService, FormulaEditorService."""

from pipe_pricing.services.pricing_service import PricingService
from pipe_pricing.services.quote_service import QuoteService
from pipe_pricing.services.formula_editor import FormulaEditorService

__all__ = ["PricingService", "QuoteService", "FormulaEditorService"]
