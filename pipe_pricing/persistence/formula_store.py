"""
Formula Store — one editable expression string per model.

Persisted independently of the coefficients. Any model missing from the
override, or stored as something other than a string, uses the built-in
formula. Saving does not check syntax: a broken formula prices at zero
on the quote and is reported by the formula editor.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pipe_pricing.errors import StoreWriteError
from pipe_pricing.formula.defaults import DEFAULT_FORMULAS, default_formula_table
from pipe_pricing.formula.resolve import resolve_formulas
from pipe_pricing.models.enums import ProductModel
from pipe_pricing.persistence.json_record import read_json, write_json
from pipe_pricing.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

FORMULAS_KEY = "pipe_formula_strings"


def _model_key(model: ProductModel | str) -> str:
    return ProductModel(model).value


class FormulaStore:
    """Sole reader/writer of the persisted formula table."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def get_defaults(self, model: ProductModel | str) -> str:
        return DEFAULT_FORMULAS[ProductModel(model)]

    def load(self) -> dict[str, str]:
        return resolve_formulas(default_formula_table(), read_json(self.kv, FORMULAS_KEY))

    def get(self, model: ProductModel | str) -> str:
        return self.load()[_model_key(model)]

    def save(self, table: Mapping[str, Any]) -> None:
        if not isinstance(table, Mapping):
            raise StoreWriteError("Formula table must be a mapping of model → expression")
        data: dict[str, str] = {}
        for model, expression in table.items():
            try:
                key = _model_key(model)
            except ValueError:
                raise StoreWriteError(f"Unknown product model '{model}'") from None
            if not isinstance(expression, str):
                raise StoreWriteError(f"Formula for '{key}' must be a string")
            data[key] = expression
        write_json(self.kv, FORMULAS_KEY, data)
        logger.info(f"Saved formulas for {len(data)} models")

    def update(self, model: ProductModel | str, expression: str) -> str:
        key = _model_key(model)
        table = self.load()
        table[key] = expression
        self.save(table)
        return expression

    def reset_model(self, model: ProductModel | str) -> str:
        key = _model_key(model)
        override = read_json(self.kv, FORMULAS_KEY)
        if isinstance(override, Mapping) and key in override:
            resolved = self.load()
            remaining = {m: resolved[m] for m in override if m in resolved and m != key}
            write_json(self.kv, FORMULAS_KEY, remaining)
            logger.info(f"Reset formula for {key} to default")
        return self.get_defaults(key)

    def is_overridden(self, model: ProductModel | str) -> bool:
        return self.get(model) != self.get_defaults(model)
