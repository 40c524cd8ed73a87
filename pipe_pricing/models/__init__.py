"""Models — enums and pydantic schemas."""

from pipe_pricing.models.enums import (
    AddonId,
    BoxModel,
    CapModel,
    FlashingModel,
    ProductFamily,
    ProductModel,
)
from pipe_pricing.models.schemas import (
    CompanyInfo,
    CustomVariable,
    Dimensions,
    EvaluationResult,
    FormulaPreview,
    HistoryEntry,
    MaterialPrices,
    Quote,
    QuoteLine,
    QuoteRequest,
)

__all__ = [
    "AddonId",
    "BoxModel",
    "CapModel",
    "FlashingModel",
    "ProductFamily",
    "ProductModel",
    "CompanyInfo",
    "CustomVariable",
    "Dimensions",
    "EvaluationResult",
    "FormulaPreview",
    "HistoryEntry",
    "MaterialPrices",
    "Quote",
    "QuoteLine",
    "QuoteRequest",
]
