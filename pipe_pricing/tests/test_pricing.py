"""
Tests: per-family pricing functions.

Run with:
    pytest pipe_pricing/tests/test_pricing.py -v
"""

import json
import logging

import pytest

from pipe_pricing.formula import evaluate
from pipe_pricing.formula.defaults import DEFAULT_COEFFICIENTS, DEFAULT_FORMULAS
from pipe_pricing.models.enums import AddonId, BoxModel, CapModel, FlashingModel, ProductModel
from pipe_pricing.models.schemas import Dimensions, MaterialPrices
from pipe_pricing.persistence.coefficient_store import COEFFICIENTS_KEY
from pipe_pricing.persistence.custom_variables import CUSTOM_VARIABLES_KEY
from pipe_pricing.services import PricingService
from pipe_pricing.utils import format_price


def _expected(model: ProductModel, **variables) -> float:
    return evaluate(DEFAULT_FORMULAS[model], {**DEFAULT_COEFFICIENTS[model], **variables})


@pytest.fixture
def pricing(kv):
    return PricingService.from_store(kv)


class TestCaps:
    def test_classic_simple_reference_price(self, pricing):
        price = pricing.price_cap(CapModel.CLASSIC_SIMPLE, Dimensions(X=380, Y=380), MaterialPrices(metal_price=510))
        assert price == pytest.approx(4118.264)
        assert format_price(price) == "4\u202f118 ₽"

    @pytest.mark.parametrize("model", [
        CapModel.CLASSIC_SIMPLE, CapModel.CLASSIC_SLATTED, CapModel.MODERN_SIMPLE, CapModel.MODERN_SLATTED,
    ])
    def test_caps_use_their_own_coefficients(self, pricing, model, prices):
        dims = Dimensions(X=500, Y=300)
        slot = ProductModel(f"cap_{model.value}")
        assert pricing.price_cap(model, dims, prices) == pytest.approx(
            _expected(slot, X=500, Y=300, metalPrice=510)
        )

    def test_custom_cap_is_zero(self, pricing, dims, prices):
        assert pricing.price_cap(CapModel.CUSTOM, dims, prices) == 0

    def test_accepts_string_model(self, pricing, dims, prices):
        assert pricing.price_cap("classic_simple", dims, prices) == pricing.price_cap(
            CapModel.CLASSIC_SIMPLE, dims, prices
        )

    def test_deterministic(self, pricing, dims, prices):
        assert pricing.price_cap(CapModel.MODERN_SLATTED, dims, prices) == pricing.price_cap(
            CapModel.MODERN_SLATTED, dims, prices
        )


class TestBoxesAndFlashings:
    def test_box_sentinel(self, pricing, dims, prices):
        assert pricing.price_box(BoxModel.NONE, dims, prices) == 0

    def test_flashing_sentinel(self, pricing, dims, prices):
        assert pricing.price_flashing(FlashingModel.NONE, dims, prices) == 0

    def test_smooth_box_uses_height(self, pricing, prices):
        low = pricing.price_box(BoxModel.SMOOTH, Dimensions(X=380, Y=380, H=300), prices)
        high = pricing.price_box(BoxModel.SMOOTH, Dimensions(X=380, Y=380, H=900), prices)
        assert high > low
        assert low == pytest.approx(_expected(ProductModel.BOX_SMOOTH, X=380, Y=380, H=300, metalPrice=510))

    def test_lamellar_box(self, pricing, dims, prices):
        assert pricing.price_box(BoxModel.LAMELLAR, dims, prices) == pytest.approx(
            _expected(ProductModel.BOX_LAMELLAR, X=380, Y=380, H=500, metalPrice=510)
        )

    @pytest.mark.parametrize("model", [FlashingModel.FLAT, FlashingModel.PROFILED])
    def test_flashings(self, pricing, dims, prices, model):
        assert pricing.price_flashing(model, dims, prices) == pytest.approx(
            _expected(ProductModel(f"flashing_{model.value}"), X=380, Y=380, metalPrice=510)
        )

    def test_flashing_formula_cannot_see_height(self, pricing, kv, dims, prices):
        pricing.formulas.update(ProductModel.FLASHING_FLAT, "H")
        assert pricing.price_flashing(FlashingModel.FLAT, dims, prices) == 0


class TestAddons:
    def test_gas_passthrough_fixed_prices(self, pricing, dims, prices):
        assert pricing.price_addon(AddonId.GAS_PASSTHROUGH, CapModel.CLASSIC_SIMPLE, dims, prices) == 2500
        assert pricing.price_addon(AddonId.GAS_PASSTHROUGH, CapModel.CLASSIC_SLATTED, dims, prices) == 2500
        assert pricing.price_addon(AddonId.GAS_PASSTHROUGH, CapModel.MODERN_SIMPLE, dims, prices) == 1800
        assert pricing.price_addon(AddonId.GAS_PASSTHROUGH, CapModel.MODERN_SLATTED, dims, prices) == 1800

    def test_gas_passthrough_ignores_formulas(self, pricing, dims, prices):
        pricing.coefficients.update(ProductModel.ADDON_MESH, "c2", 99999)
        assert pricing.price_addon(AddonId.GAS_PASSTHROUGH, CapModel.CLASSIC_SIMPLE, dims, prices) == 2500

    @pytest.mark.parametrize("addon, price_var, price", [
        (AddonId.MESH, "meshPrice", 300),
        (AddonId.HEATPROOF, "stainlessPrice", 1200),
        (AddonId.BOTTOM_CAP, "metalPrice", 510),
        (AddonId.MOUNT_FRAME, "zincPrice065", 450),
        (AddonId.MOUNT_SKELETON, "zincPrice065", 450),
    ])
    def test_addon_material_prices(self, pricing, dims, prices, addon, price_var, price):
        expected = _expected(ProductModel(f"addon_{addon.value}"), X=380, Y=380, H=500, **{price_var: price})
        assert pricing.price_addon(addon, CapModel.CLASSIC_SIMPLE, dims, prices) == pytest.approx(expected)

    def test_addon_only_gets_its_own_price(self, pricing, dims, prices):
        pricing.formulas.update(ProductModel.ADDON_MESH, "meshPrice + metalPrice")
        assert pricing.price_addon(AddonId.MESH, CapModel.CLASSIC_SIMPLE, dims, prices) == 0


class TestOverrides:
    def test_coefficient_override_changes_price(self, pricing, dims, prices):
        before = pricing.price_cap(CapModel.CLASSIC_SIMPLE, dims, prices)
        pricing.coefficients.update(ProductModel.CAP_CLASSIC_SIMPLE, "c2", 1600)
        after = pricing.price_cap(CapModel.CLASSIC_SIMPLE, dims, prices)
        assert after - before == pytest.approx(200)

    def test_reset_restores_default_price(self, pricing, dims, prices):
        before = pricing.price_cap(CapModel.CLASSIC_SIMPLE, dims, prices)
        pricing.coefficients.update(ProductModel.CAP_CLASSIC_SIMPLE, "c1", 1)
        pricing.formulas.update(ProductModel.CAP_CLASSIC_SIMPLE, "X * c1")
        pricing.coefficients.reset_model(ProductModel.CAP_CLASSIC_SIMPLE)
        pricing.formulas.reset_model(ProductModel.CAP_CLASSIC_SIMPLE)
        assert pricing.price_cap(CapModel.CLASSIC_SIMPLE, dims, prices) == before

    def test_custom_variable_in_formula(self, pricing, dims, prices):
        pricing.variables.add("Наценка", "markup", 1.5)
        pricing.formulas.update(ProductModel.BOX_SMOOTH, "(X * Y * c1 + c2) * markup")
        expected = (380 * 380 * 0.0025 + 2500) * 1.5
        assert pricing.price_box(BoxModel.SMOOTH, dims, prices) == pytest.approx(expected)


class TestFailSoft:
    def test_broken_formula_prices_zero(self, pricing, dims, prices, caplog):
        pricing.formulas.update(ProductModel.CAP_CLASSIC_SIMPLE, "X * (")
        with caplog.at_level(logging.WARNING):
            assert pricing.price_cap(CapModel.CLASSIC_SIMPLE, dims, prices) == 0
        assert "cap_classic_simple" in caplog.text

    def test_unknown_variable_prices_zero(self, pricing, dims, prices):
        pricing.formulas.update(ProductModel.BOX_SMOOTH, "X * nothing")
        assert pricing.price_box(BoxModel.SMOOTH, dims, prices) == 0

    def test_division_by_zero_prices_zero(self, pricing, prices):
        pricing.formulas.update(ProductModel.BOX_SMOOTH, "X / H")
        assert pricing.price_box(BoxModel.SMOOTH, Dimensions(X=380, Y=380, H=0), prices) == 0

    @pytest.mark.parametrize("stored", ["[" * 100_000, json.dumps({"cap_classic_simple": {"c1": 10**400}})])
    def test_unusable_coefficient_record_prices_with_defaults(self, pricing, kv, stored):
        kv.set(COEFFICIENTS_KEY, stored)
        price = pricing.price_cap(CapModel.CLASSIC_SIMPLE, Dimensions(X=380, Y=380), MaterialPrices(metal_price=510))
        assert price == pytest.approx(4118.264)

    def test_other_models_unaffected(self, pricing, dims, prices):
        pricing.formulas.update(ProductModel.CAP_CLASSIC_SIMPLE, "???")
        assert pricing.price_cap(CapModel.CLASSIC_SLATTED, dims, prices) > 0


class TestVariableMap:
    def test_built_ins_win_over_custom_variables(self, pricing, kv, dims, prices):
        # Written directly; the registry itself refuses reserved names
        kv.set(CUSTOM_VARIABLES_KEY, json.dumps([
            {"id": "1", "name": "X", "varName": "X", "value": 1},
            {"id": "2", "name": "extra", "varName": "extra", "value": 7},
        ]))
        variables = pricing.build_variables(ProductModel.CAP_CLASSIC_SIMPLE, dims, prices)
        assert variables["X"] == 380
        assert variables["extra"] == 7
        assert variables["metalPrice"] == 510
        assert "H" not in variables
        assert "meshPrice" not in variables
        assert set(variables) >= {"c1", "c2", "c3", "c4"}
