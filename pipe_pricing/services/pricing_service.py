"""
Pricing Service — one price function per product family.

Each function resolves the model's formula and coefficients, assembles the
variable map (custom variables, dimensions, the family's material price,
coefficients) and evaluates it. Formula failures are fail-soft here: the
item prices at 0 and a warning is logged, so a broken formula cannot stop
a quote from rendering. The formula editor reports the actual error.
"""

from __future__ import annotations

import logging

from pipe_pricing.errors import FormulaError
from pipe_pricing.formula.defaults import (
    GAS_PASSTHROUGH_PRICE_CLASSIC,
    GAS_PASSTHROUGH_PRICE_MODERN,
)
from pipe_pricing.formula.evaluator import evaluate
from pipe_pricing.models.enums import (
    AddonId,
    BoxModel,
    CapModel,
    FlashingModel,
    ProductFamily,
    ProductModel,
)
from pipe_pricing.models.schemas import Dimensions, MaterialPrices
from pipe_pricing.persistence.coefficient_store import CoefficientStore
from pipe_pricing.persistence.custom_variables import CustomVariableRegistry
from pipe_pricing.persistence.formula_store import FormulaStore
from pipe_pricing.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

# Which material price each formula slot receives
ADDON_PRICE_VARIABLE: dict[AddonId, str] = {
    AddonId.MESH: "meshPrice",
    AddonId.HEATPROOF: "stainlessPrice",
    AddonId.BOTTOM_CAP: "metalPrice",
    AddonId.MOUNT_FRAME: "zincPrice065",
    AddonId.MOUNT_SKELETON: "zincPrice065",
}

# Dimension variables each family's formulas can use
FAMILY_DIMENSIONS: dict[ProductFamily, tuple[str, ...]] = {
    ProductFamily.CAP: ("X", "Y"),
    ProductFamily.BOX: ("X", "Y", "H"),
    ProductFamily.FLASHING: ("X", "Y"),
    ProductFamily.ADDON: ("X", "Y", "H"),
}


def family_of(slot: ProductModel) -> ProductFamily:
    return ProductFamily(slot.value.split("_", 1)[0])


def price_variable_for(slot: ProductModel) -> str:
    if family_of(slot) is ProductFamily.ADDON:
        return ADDON_PRICE_VARIABLE[AddonId(slot.value[len("addon_"):])]
    return "metalPrice"


def cap_slot(model: CapModel) -> ProductModel:
    return ProductModel(f"cap_{model.value}")


def box_slot(model: BoxModel) -> ProductModel:
    return ProductModel(f"box_{model.value}")


def flashing_slot(model: FlashingModel) -> ProductModel:
    return ProductModel(f"flashing_{model.value}")


def addon_slot(addon: AddonId) -> ProductModel:
    return ProductModel(f"addon_{addon.value}")


class PricingService:
    """Reads formulas, coefficients and custom variables; never writes them."""

    def __init__(
        self,
        coefficients: CoefficientStore,
        formulas: FormulaStore,
        variables: CustomVariableRegistry,
    ):
        self.coefficients = coefficients
        self.formulas = formulas
        self.variables = variables

    @classmethod
    def from_store(cls, kv: KeyValueStore) -> "PricingService":
        return cls(CoefficientStore(kv), FormulaStore(kv), CustomVariableRegistry(kv))

    # ── Variable map ─────────────────────────────────────

    def build_variables(
        self,
        slot: ProductModel,
        dimensions: Dimensions,
        prices: MaterialPrices,
        coefficients: dict[str, float] | None = None,
    ) -> dict[str, float]:
        """
        Fresh variable map for one evaluation. Built-in names are layered
        after the custom variables so they can never be shadowed.
        """
        family = family_of(slot)
        price_name = price_variable_for(slot)
        dims = dimensions.model_dump()

        variables = dict(self.variables.as_variable_map())
        variables.update({name: float(dims[name]) for name in FAMILY_DIMENSIONS[family]})
        variables[price_name] = float(prices.as_variables()[price_name])
        variables.update(coefficients if coefficients is not None else self.coefficients.get(slot))
        return variables

    # ── Generic slot pricing ─────────────────────────────

    def price_slot(self, slot: ProductModel, dimensions: Dimensions, prices: MaterialPrices) -> float:
        """Evaluate a slot's stored formula; 0 if the formula fails."""
        expression = self.formulas.get(slot)
        variables = self.build_variables(slot, dimensions, prices)
        try:
            return evaluate(expression, variables)
        except FormulaError as e:
            logger.warning(f"Formula for {slot.value} failed, pricing at 0: {e}")
            return 0.0

    # ── Families ─────────────────────────────────────────

    def price_cap(self, model: CapModel | str, dimensions: Dimensions, prices: MaterialPrices) -> float:
        model = CapModel(model)
        if model is CapModel.CUSTOM:
            return 0.0
        return self.price_slot(cap_slot(model), dimensions, prices)

    def price_box(self, model: BoxModel | str, dimensions: Dimensions, prices: MaterialPrices) -> float:
        model = BoxModel(model)
        if model is BoxModel.NONE:
            return 0.0
        return self.price_slot(box_slot(model), dimensions, prices)

    def price_flashing(
        self, model: FlashingModel | str, dimensions: Dimensions, prices: MaterialPrices
    ) -> float:
        model = FlashingModel(model)
        if model is FlashingModel.NONE:
            return 0.0
        return self.price_slot(flashing_slot(model), dimensions, prices)

    def price_addon(
        self,
        addon: AddonId | str,
        cap_model: CapModel | str,
        dimensions: Dimensions,
        prices: MaterialPrices,
    ) -> float:
        addon = AddonId(addon)
        if addon is AddonId.GAS_PASSTHROUGH:
            if CapModel(cap_model).is_classic:
                return GAS_PASSTHROUGH_PRICE_CLASSIC
            return GAS_PASSTHROUGH_PRICE_MODERN
        return self.price_slot(addon_slot(addon), dimensions, prices)
