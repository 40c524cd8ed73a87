"""
Coefficient Store — per-model named coefficients (c1..c5).

Built-in defaults are merged key-by-key with the persisted override on
every load, so a partial or stale override never leaves a coefficient
undefined. Saves replace the persisted table wholesale.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pipe_pricing.errors import StoreWriteError
from pipe_pricing.formula.defaults import DEFAULT_COEFFICIENTS, default_coefficient_table
from pipe_pricing.formula.resolve import is_finite_number, resolve_coefficients
from pipe_pricing.models.enums import ProductModel
from pipe_pricing.persistence.json_record import read_json, write_json
from pipe_pricing.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

COEFFICIENTS_KEY = "pipe_formula_coefficients"


def _model_key(model: ProductModel | str) -> str:
    return ProductModel(model).value


class CoefficientStore:
    """Sole reader/writer of the persisted coefficient table."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def get_defaults(self, model: ProductModel | str) -> dict[str, float]:
        return {k: float(v) for k, v in DEFAULT_COEFFICIENTS[ProductModel(model)].items()}

    def load(self) -> dict[str, dict[str, float]]:
        """Full effective table; defaults wherever the override is missing or invalid."""
        return resolve_coefficients(default_coefficient_table(), read_json(self.kv, COEFFICIENTS_KEY))

    def get(self, model: ProductModel | str) -> dict[str, float]:
        return self.load()[_model_key(model)]

    def save(self, table: Mapping[str, Mapping[str, Any]]) -> None:
        self._validate(table)
        write_json(
            self.kv,
            COEFFICIENTS_KEY,
            {_model_key(m): {k: float(v) for k, v in rec.items()} for m, rec in table.items()},
        )
        logger.info(f"Saved coefficients for {len(table)} models")

    def update(self, model: ProductModel | str, name: str, value: float) -> dict[str, float]:
        """Set one coefficient and persist; returns the model's new record."""
        key = _model_key(model)
        table = self.load()
        if name not in table[key]:
            raise StoreWriteError(f"Model '{key}' has no coefficient '{name}'")
        table[key][name] = value
        self.save(table)
        return self.get(key)

    def reset_model(self, model: ProductModel | str) -> dict[str, float]:
        """Drop one model's override; other models keep theirs."""
        key = _model_key(model)
        override = read_json(self.kv, COEFFICIENTS_KEY)
        if isinstance(override, Mapping) and key in override:
            resolved = self.load()
            remaining = {m: resolved[m] for m in override if m in resolved and m != key}
            write_json(self.kv, COEFFICIENTS_KEY, remaining)
            logger.info(f"Reset coefficients for {key} to defaults")
        return self.get_defaults(key)

    def is_overridden(self, model: ProductModel | str) -> bool:
        return self.get(model) != self.get_defaults(model)

    @staticmethod
    def _validate(table: Mapping[str, Mapping[str, Any]]) -> None:
        if not isinstance(table, Mapping):
            raise StoreWriteError("Coefficient table must be a mapping of model → coefficients")
        for model, record in table.items():
            try:
                defaults = DEFAULT_COEFFICIENTS[ProductModel(model)]
            except ValueError:
                raise StoreWriteError(f"Unknown product model '{model}'") from None
            if not isinstance(record, Mapping):
                raise StoreWriteError(f"Coefficients for '{model}' must be a mapping")
            for name, value in record.items():
                if name not in defaults:
                    raise StoreWriteError(f"Model '{model}' has no coefficient '{name}'")
                if not is_finite_number(value):
                    raise StoreWriteError(f"Coefficient {model}.{name} must be a finite number, got {value!r}")
