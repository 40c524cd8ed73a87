"""
Wires one storage adapter into every store and service.

The engine itself holds no globals; callers build an Engine around the
storage they want (in-memory for tests, file or MongoDB otherwise).
"""

from __future__ import annotations

from dataclasses import dataclass

from pipe_pricing.config import Settings, get_settings
from pipe_pricing.persistence import (
    CoefficientStore,
    CustomVariableRegistry,
    FormulaStore,
    HistoryRepository,
    KeyValueStore,
    PriceMatrixStore,
    build_kv_store,
)
from pipe_pricing.services import FormulaEditorService, PricingService, QuoteService


@dataclass
class Engine:
    kv: KeyValueStore
    coefficients: CoefficientStore
    formulas: FormulaStore
    variables: CustomVariableRegistry
    price_matrix: PriceMatrixStore
    history: HistoryRepository
    pricing: PricingService
    quotes: QuoteService
    editor: FormulaEditorService


def build_engine(kv: KeyValueStore | None = None, settings: Settings | None = None) -> Engine:
    settings = settings or get_settings()
    kv = kv if kv is not None else build_kv_store(settings)

    coefficients = CoefficientStore(kv)
    formulas = FormulaStore(kv)
    variables = CustomVariableRegistry(kv)
    price_matrix = PriceMatrixStore(kv)
    pricing = PricingService(coefficients, formulas, variables)

    return Engine(
        kv=kv,
        coefficients=coefficients,
        formulas=formulas,
        variables=variables,
        price_matrix=price_matrix,
        history=HistoryRepository(kv, limit=settings.history_limit),
        pricing=pricing,
        quotes=QuoteService(pricing, price_matrix, currency=settings.currency_symbol),
        editor=FormulaEditorService(pricing),
    )
