"""
Reusable data schemas shared by the stores, services and API.
Persisted field names (camelCase) are kept as aliases so stored records
stay compatible with the calculator's original storage format.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field

from .enums import AddonId, BoxModel, CapModel, FlashingModel


# ── Inputs ───────────────────────────────────────────────


class Dimensions(BaseModel):
    """Pipe cross-section X × Y and height H, in millimetres."""
    X: float = 0.0
    Y: float = 0.0
    H: float = 0.0


class MaterialPrices(BaseModel):
    """Unit prices of the sheet materials a formula can reference."""
    metal_price: float = Field(510.0, alias="metalPrice")
    mesh_price: float = Field(0.0, alias="meshPrice")
    stainless_price: float = Field(0.0, alias="stainlessPrice")
    zinc_price_065: float = Field(0.0, alias="zincPrice065")

    model_config = {"populate_by_name": True}

    def as_variables(self) -> dict[str, float]:
        """Formula variable name → price."""
        return self.model_dump(by_alias=True)


# ── Custom variables ─────────────────────────────────────


class CustomVariable(BaseModel):
    """A user-defined constant usable inside any formula by its identifier."""
    id: str
    display_name: str = Field("", alias="name")
    identifier: str = Field(alias="varName")
    value: float

    model_config = {"populate_by_name": True}


# ── Evaluation ───────────────────────────────────────────


class EvaluationResult(BaseModel):
    """Outcome of a fail-loud evaluation, suitable for an editor preview."""
    ok: bool
    value: Optional[float] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    position: Optional[int] = None


class FormulaPreview(BaseModel):
    model: str
    expression: str
    coefficients: dict[str, float] = {}
    variables: dict[str, float] = {}
    unknown_names: list[str] = []
    result: EvaluationResult


# ── Quotes ───────────────────────────────────────────────


class CompanyInfo(BaseModel):
    company_name: str = Field("", alias="companyName")
    contact_person: str = Field("", alias="contactPerson")
    phone: str = ""
    email: str = ""

    model_config = {"populate_by_name": True}


class QuoteRequest(BaseModel):
    """Everything the quote screen sends to price a configuration."""
    dimensions: Dimensions = Field(default_factory=Dimensions)
    prices: MaterialPrices = Field(default_factory=MaterialPrices)
    coating: str = ""
    color: str = ""
    metal_price_from_matrix: bool = False
    cap_model: CapModel = CapModel.CLASSIC_SIMPLE
    box_model: BoxModel = BoxModel.NONE
    flashing_model: FlashingModel = FlashingModel.NONE
    addons: list[AddonId] = []
    item_discounts: dict[str, float] = {}  # line key -> percent
    discount: float = 0.0  # percent, applied to the whole quote
    company: Optional[CompanyInfo] = None
    comment: str = ""


class QuoteLine(BaseModel):
    key: str  # "cap" | "box" | "flashing" | "addon_<id>"
    name: str
    price: float
    discount_percent: float = 0.0
    discounted_price: float


class Quote(BaseModel):
    lines: list[QuoteLine] = []
    metal_price: float
    subtotal: float
    items_total: float
    discount: float = 0.0
    discount_amount: float = 0.0
    total: float
    total_display: str = ""
    request: Optional[QuoteRequest] = None


class HistoryEntry(BaseModel):
    id: str
    date: datetime = Field(default_factory=datetime.now)
    company_name: str = Field("", alias="companyName")
    contact_person: str = Field("", alias="contactPerson")
    total_price: float = Field(0.0, alias="totalPrice")
    selected_product_names: list[str] = Field(default_factory=list, alias="selectedProductNames")
    quote: Optional[dict[str, Any]] = Field(None, alias="pdfData")

    model_config = {"populate_by_name": True}
