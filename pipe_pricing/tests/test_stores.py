"""
Tests: override resolution and the persisted stores.

Run with:
    pytest pipe_pricing/tests/test_stores.py -v
"""

import json

import pytest

from pipe_pricing.errors import StoreWriteError
from pipe_pricing.formula import resolve_coefficients, resolve_formulas
from pipe_pricing.formula.defaults import (
    DEFAULT_COEFFICIENTS,
    DEFAULT_FORMULAS,
    default_coefficient_table,
    default_formula_table,
)
from pipe_pricing.models.enums import ProductModel
from pipe_pricing.models.schemas import CompanyInfo, Quote, QuoteLine
from pipe_pricing.persistence import (
    CoefficientStore,
    FormulaStore,
    HistoryRepository,
    InMemoryKeyValueStore,
    PriceMatrixStore,
)
from pipe_pricing.persistence.coefficient_store import COEFFICIENTS_KEY
from pipe_pricing.persistence.formula_store import FORMULAS_KEY
from pipe_pricing.persistence.history_repository import HISTORY_KEY
from pipe_pricing.persistence.price_matrix import PRICE_MATRIX_KEY
from pipe_pricing.persistence.json_record import read_json, write_json


class TestResolve:
    def test_no_override_is_defaults(self):
        assert resolve_coefficients(default_coefficient_table(), None) == default_coefficient_table()
        assert resolve_formulas(default_formula_table(), None) == default_formula_table()

    def test_partial_override_keeps_other_keys(self):
        merged = resolve_coefficients(default_coefficient_table(), {"cap_classic_simple": {"c2": 1700}})
        assert merged["cap_classic_simple"] == {"c1": 0.001, "c2": 1700.0, "c3": 0.25, "c4": 0.00075}
        assert merged["box_smooth"] == {"c1": 0.0025, "c2": 2500.0}

    def test_override_ignores_unknown_and_non_numeric(self):
        merged = resolve_coefficients(
            default_coefficient_table(),
            {"box_smooth": {"c1": "0.5", "c2": True, "c9": 1.0}, "not_a_model": {"c1": 1}},
        )
        assert merged["box_smooth"] == {"c1": 0.0025, "c2": 2500.0}
        assert "not_a_model" not in merged

    def test_override_of_wrong_shape(self):
        assert resolve_coefficients(default_coefficient_table(), ["junk"]) == default_coefficient_table()
        assert resolve_formulas(default_formula_table(), "junk") == default_formula_table()

    def test_override_ignores_out_of_range_int(self):
        merged = resolve_coefficients(default_coefficient_table(), {"cap_classic_simple": {"c1": 10**400}})
        assert merged == default_coefficient_table()

    def test_formula_override_must_be_string(self):
        merged = resolve_formulas(default_formula_table(), {"box_smooth": 42, "box_lamellar": "X + Y"})
        assert merged["box_smooth"] == DEFAULT_FORMULAS[ProductModel.BOX_SMOOTH]
        assert merged["box_lamellar"] == "X + Y"


class TestCoefficientStore:
    def test_every_model_has_defaults(self, kv):
        store = CoefficientStore(kv)
        table = store.load()
        assert set(table) == {m.value for m in ProductModel}
        for model in ProductModel:
            assert table[model.value] == {k: float(v) for k, v in DEFAULT_COEFFICIENTS[model].items()}

    def test_default_round_trip(self, kv):
        store = CoefficientStore(kv)
        store.save(store.load())
        assert store.load() == default_coefficient_table()
        assert not any(store.is_overridden(m) for m in ProductModel)

    def test_update_one_coefficient(self, kv):
        store = CoefficientStore(kv)
        record = store.update(ProductModel.CAP_MODERN_SIMPLE, "c2", 1200)
        assert record["c2"] == 1200.0
        assert store.is_overridden(ProductModel.CAP_MODERN_SIMPLE)
        assert not store.is_overridden(ProductModel.CAP_CLASSIC_SIMPLE)

    def test_update_unknown_coefficient(self, kv):
        with pytest.raises(StoreWriteError):
            CoefficientStore(kv).update(ProductModel.BOX_SMOOTH, "c5", 1.0)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), 10**400, True, "1"])
    def test_save_rejects_bad_values(self, kv, value):
        store = CoefficientStore(kv)
        with pytest.raises(StoreWriteError):
            store.save({"box_smooth": {"c1": value}})
        assert kv.get(COEFFICIENTS_KEY) is None

    def test_save_rejects_unknown_model(self, kv):
        with pytest.raises(StoreWriteError, match="Unknown product model"):
            CoefficientStore(kv).save({"cap_fancy": {"c1": 1.0}})

    def test_reset_only_touches_one_model(self, kv):
        store = CoefficientStore(kv)
        store.update(ProductModel.BOX_SMOOTH, "c1", 0.5)
        store.update(ProductModel.BOX_LAMELLAR, "c4", 3.0)

        assert store.reset_model(ProductModel.BOX_SMOOTH) == {"c1": 0.0025, "c2": 2500.0}
        assert store.get(ProductModel.BOX_SMOOTH) == {"c1": 0.0025, "c2": 2500.0}
        assert store.get(ProductModel.BOX_LAMELLAR)["c4"] == 3.0
        assert "box_smooth" not in json.loads(kv.get(COEFFICIENTS_KEY))

    def test_corrupt_record_falls_back_to_defaults(self):
        kv = InMemoryKeyValueStore({COEFFICIENTS_KEY: "{not json"})
        assert CoefficientStore(kv).load() == default_coefficient_table()

    @pytest.mark.parametrize("raw", [
        "[" * 100_000,
        json.dumps({"cap_classic_simple": {"c1": 10**400}}),
    ])
    def test_unusable_record_falls_back_to_defaults(self, raw):
        kv = InMemoryKeyValueStore({COEFFICIENTS_KEY: raw})
        assert CoefficientStore(kv).load() == default_coefficient_table()


class TestFormulaStore:
    def test_defaults(self, kv):
        store = FormulaStore(kv)
        for model in ProductModel:
            assert store.get(model) == DEFAULT_FORMULAS[model]

    def test_saves_broken_formula(self, kv):
        store = FormulaStore(kv)
        store.update(ProductModel.ADDON_MESH, "X + (")
        assert store.get(ProductModel.ADDON_MESH) == "X + ("
        assert store.is_overridden(ProductModel.ADDON_MESH)

    def test_save_rejects_non_string(self, kv):
        with pytest.raises(StoreWriteError):
            FormulaStore(kv).save({"addon_mesh": 5})

    def test_reset(self, kv):
        store = FormulaStore(kv)
        store.update(ProductModel.ADDON_MESH, "X")
        store.update(ProductModel.ADDON_HEATPROOF, "Y")
        assert store.reset_model(ProductModel.ADDON_MESH) == DEFAULT_FORMULAS[ProductModel.ADDON_MESH]
        assert store.get(ProductModel.ADDON_HEATPROOF) == "Y"
        assert "addon_mesh" not in json.loads(kv.get(FORMULAS_KEY))

    def test_reset_without_override_writes_nothing(self, kv):
        FormulaStore(kv).reset_model(ProductModel.BOX_SMOOTH)
        assert kv.get(FORMULAS_KEY) is None


class TestJsonRecord:
    def test_write_rejects_nan(self, kv):
        with pytest.raises(StoreWriteError):
            write_json(kv, "k", {"v": float("nan")})
        assert kv.get("k") is None

    def test_read_missing(self, kv):
        assert read_json(kv, "nothing") is None

    def test_read_survives_failing_store(self):
        class Broken:
            def get(self, key):
                raise ConnectionError("down")

            def set(self, key, value):
                raise ConnectionError("down")

        assert read_json(Broken(), "k") is None

    def test_read_too_deeply_nested(self):
        kv = InMemoryKeyValueStore({"k": "[" * 100_000})
        assert read_json(kv, "k") is None


class TestPriceMatrix:
    def test_lookup(self, kv):
        store = PriceMatrixStore(kv)
        store.set_price("polyester", "RAL8017", 620)
        store.set_price("polyester", "RAL7024", 0)
        assert store.lookup("polyester", "RAL8017") == 620
        assert store.lookup("polyester", "RAL7024") is None
        assert store.lookup("pural", "RAL8017") is None

    def test_remove_price(self, kv):
        store = PriceMatrixStore(kv)
        store.set_price("pural", "RAL3005", 700)
        store.remove_price("pural", "RAL3005")
        assert store.load() == {}

    def test_save_rejects_non_numeric(self, kv):
        with pytest.raises(StoreWriteError):
            PriceMatrixStore(kv).save({"pural": {"RAL3005": "cheap"}})

    def test_out_of_range_prices(self, kv):
        with pytest.raises(StoreWriteError):
            PriceMatrixStore(kv).save({"pural": {"RAL3005": 10**400}})
        kv.set(PRICE_MATRIX_KEY, json.dumps({"pural": {"RAL3005": 10**400, "RAL8017": 640}}))
        assert PriceMatrixStore(kv).load() == {"pural": {"RAL8017": 640.0}}


def _quote(total: float) -> Quote:
    line = QuoteLine(key="cap", name="Колпак: Классика простой", price=total, discounted_price=total)
    return Quote(lines=[line], metal_price=510, subtotal=total, items_total=total, total=total)


class TestHistory:
    def test_newest_first(self, kv):
        history = HistoryRepository(kv)
        first = history.add(_quote(100), CompanyInfo(company_name="ООО Кровля"))
        second = history.add(_quote(200))
        entries = history.list()
        assert [e.id for e in entries] == [second.id, first.id]
        assert entries[1].company_name == "ООО Кровля"
        assert entries[0].selected_product_names == ["Колпак: Классика простой"]

    def test_limit(self, kv):
        history = HistoryRepository(kv, limit=3)
        for total in range(5):
            history.add(_quote(total))
        assert [e.total_price for e in history.list()] == [4, 3, 2]

    def test_persisted_with_camel_case_names(self, kv):
        HistoryRepository(kv).add(_quote(100), CompanyInfo(company_name="ACME"))
        stored = json.loads(kv.get(HISTORY_KEY))[0]
        assert stored["companyName"] == "ACME"
        assert stored["totalPrice"] == 100
        assert "pdfData" in stored

    def test_delete_and_get(self, kv):
        history = HistoryRepository(kv)
        entry = history.add(_quote(100))
        assert history.get(entry.id) is not None
        history.delete(entry.id)
        history.delete(entry.id)
        assert history.get(entry.id) is None
        assert history.list() == []
