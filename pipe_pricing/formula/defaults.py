"""
Built-in formulas and coefficients.

An unmodified installation must price exactly with these values; user
edits are stored as overrides on top of them and can be reset per model.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from pipe_pricing.models.enums import ProductModel

_CAP_FORMULA = "((X * Y * c1 + c2) + (X + Y) * 0.002 * (c3 + c4 * X) * metalPrice) * 2"

DEFAULT_FORMULAS: Mapping[ProductModel, str] = MappingProxyType({
    ProductModel.CAP_CLASSIC_SIMPLE: _CAP_FORMULA,
    ProductModel.CAP_CLASSIC_SLATTED: _CAP_FORMULA,
    ProductModel.CAP_MODERN_SIMPLE: _CAP_FORMULA,
    ProductModel.CAP_MODERN_SLATTED: _CAP_FORMULA,
    ProductModel.BOX_SMOOTH: "((X * Y * c1 + c2) + (X + Y) * 0.002 * (H * 0.001) * metalPrice) * 2",
    ProductModel.BOX_LAMELLAR: "((X * Y * c1 + c2) * 2 + (X + Y) * 0.002 * c3 * (H * 0.001) * metalPrice) * c4",
    ProductModel.FLASHING_FLAT: "((X * Y * c1 + c2) + (X * c3 + Y * c4) * metalPrice) * 2",
    ProductModel.FLASHING_PROFILED: "((X * Y * c1 + c2) + (X * c3 + Y * c4) * metalPrice + (X + 0.5) * c5) * 2",
    ProductModel.ADDON_MESH: "((X + Y) * c1 * meshPrice * 1.2 + c2) * 2",
    ProductModel.ADDON_HEATPROOF: "(X * Y * c1 * 1.2 * stainlessPrice + c2) * 2",
    ProductModel.ADDON_BOTTOM_CAP: "(X * Y * c1 * 1.2 * metalPrice + c2) * 2",
    ProductModel.ADDON_MOUNT_FRAME: "((X + Y) * c1 * zincPrice065 * 1.2 + c2) * 2",
    ProductModel.ADDON_MOUNT_SKELETON: "(((X + Y) * c1 + H * 0.001 * c2) * zincPrice065 * 1.2 + c3) * 2",
})

DEFAULT_COEFFICIENTS: Mapping[ProductModel, Mapping[str, float]] = MappingProxyType({
    ProductModel.CAP_CLASSIC_SIMPLE:   {"c1": 0.001,  "c2": 1500, "c3": 0.25,  "c4": 0.00075},
    ProductModel.CAP_CLASSIC_SLATTED:  {"c1": 0.0015, "c2": 1500, "c3": 0.625, "c4": 0.00075},
    ProductModel.CAP_MODERN_SIMPLE:    {"c1": 0.001,  "c2": 1000, "c3": 0.25,  "c4": 0.00065},
    ProductModel.CAP_MODERN_SLATTED:   {"c1": 0.0015, "c2": 1500, "c3": 0.625, "c4": 0.00065},
    ProductModel.BOX_SMOOTH:           {"c1": 0.0025, "c2": 2500},
    ProductModel.BOX_LAMELLAR:         {"c1": 0.0025, "c2": 2500, "c3": 1.6,   "c4": 2.15},
    ProductModel.FLASHING_FLAT:        {"c1": 0.002,  "c2": 2000, "c3": 0.00125, "c4": 0.00085},
    ProductModel.FLASHING_PROFILED:    {"c1": 0.002,  "c2": 3000, "c3": 0.00125, "c4": 0.001, "c5": 500},
    ProductModel.ADDON_MESH:           {"c1": 0.0005, "c2": 500},
    ProductModel.ADDON_HEATPROOF:      {"c1": 0.000001, "c2": 500},
    ProductModel.ADDON_BOTTOM_CAP:     {"c1": 0.000001, "c2": 500},
    ProductModel.ADDON_MOUNT_FRAME:    {"c1": 0.0005, "c2": 500},
    ProductModel.ADDON_MOUNT_SKELETON: {"c1": 0.001,  "c2": 0.004, "c3": 2500},
})

# Fixed prices that bypass the formula engine entirely
GAS_PASSTHROUGH_PRICE_CLASSIC = 2500.0
GAS_PASSTHROUGH_PRICE_MODERN = 1800.0

DIMENSION_VARIABLES = ("X", "Y", "H")
MATERIAL_PRICE_VARIABLES = ("metalPrice", "meshPrice", "stainlessPrice", "zincPrice065")

# Every coefficient name any model uses (c1..c5)
COEFFICIENT_NAMES = tuple(sorted({name for rec in DEFAULT_COEFFICIENTS.values() for name in rec}))

# Names the pricing functions always supply; custom variables may not reuse them
RESERVED_VARIABLE_NAMES = frozenset(DIMENSION_VARIABLES + MATERIAL_PRICE_VARIABLES + COEFFICIENT_NAMES)


def default_coefficient_table() -> dict[str, dict[str, float]]:
    """Fresh, mutable copy of the full default coefficient table."""
    return {model.value: {k: float(v) for k, v in rec.items()} for model, rec in DEFAULT_COEFFICIENTS.items()}


def default_formula_table() -> dict[str, str]:
    """Fresh, mutable copy of the full default formula table."""
    return {model.value: expr for model, expr in DEFAULT_FORMULAS.items()}
