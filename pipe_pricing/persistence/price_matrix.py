"""
Price Matrix Store — metal unit price by coating and color.

Stored as {coating: {color: price}}. A lookup only yields a price when the
matrix holds a positive finite number for that exact pair.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pipe_pricing.errors import StoreWriteError
from pipe_pricing.formula.resolve import is_finite_number
from pipe_pricing.persistence.json_record import read_json, write_json
from pipe_pricing.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

PRICE_MATRIX_KEY = "pipe_price_matrix"


class PriceMatrixStore:
    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def load(self) -> dict[str, dict[str, float]]:
        raw = read_json(self.kv, PRICE_MATRIX_KEY)
        if not isinstance(raw, Mapping):
            return {}
        matrix: dict[str, dict[str, float]] = {}
        for coating, row in raw.items():
            if not isinstance(row, Mapping):
                continue
            matrix[coating] = {color: float(p) for color, p in row.items() if is_finite_number(p)}
        return matrix

    def save(self, matrix: Mapping[str, Mapping[str, float]]) -> None:
        for coating, row in matrix.items():
            if not isinstance(row, Mapping):
                raise StoreWriteError(f"Prices for coating '{coating}' must be a mapping")
            for color, price in row.items():
                if not is_finite_number(price):
                    raise StoreWriteError(f"Price for {coating} / {color} must be a finite number")
        write_json(self.kv, PRICE_MATRIX_KEY, {c: dict(row) for c, row in matrix.items()})
        logger.info(f"Saved price matrix with {len(matrix)} coatings")

    def set_price(self, coating: str, color: str, price: float) -> None:
        matrix = self.load()
        matrix.setdefault(coating, {})[color] = price
        self.save(matrix)

    def remove_price(self, coating: str, color: str) -> None:
        matrix = self.load()
        row = matrix.get(coating)
        if not row or color not in row:
            return
        del row[color]
        if not row:
            del matrix[coating]
        self.save(matrix)

    def lookup(self, coating: str, color: str) -> float | None:
        price = self.load().get(coating, {}).get(color)
        if price is None or price <= 0:
            return None
        return price
