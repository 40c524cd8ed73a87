"""Persistence — key-value adapters and the stores built on them."""

from pipe_pricing.persistence.kv_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    MongoKeyValueStore,
    build_kv_store,
)
from pipe_pricing.persistence.coefficient_store import CoefficientStore
from pipe_pricing.persistence.formula_store import FormulaStore
from pipe_pricing.persistence.custom_variables import CustomVariableRegistry
from pipe_pricing.persistence.price_matrix import PriceMatrixStore
from pipe_pricing.persistence.history_repository import HistoryRepository

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MongoKeyValueStore",
    "build_kv_store",
    "CoefficientStore",
    "FormulaStore",
    "CustomVariableRegistry",
    "PriceMatrixStore",
    "HistoryRepository",
]
