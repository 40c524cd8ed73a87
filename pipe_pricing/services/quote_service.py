"""
Quote Service — assembles a line-itemized quote from a QuoteRequest.

Line order is fixed: cap, box, flashing, then add-ons in request order.
Per-line discounts apply first, then the aggregate discount on the sum.
"""

from __future__ import annotations

import logging

from pipe_pricing.models.enums import AddonId, BoxModel, CapModel, FlashingModel
from pipe_pricing.models.schemas import Quote, QuoteLine, QuoteRequest
from pipe_pricing.persistence.price_matrix import PriceMatrixStore
from pipe_pricing.services.pricing_service import PricingService
from pipe_pricing.utils.formatting import format_price

logger = logging.getLogger(__name__)

CAP_NAMES: dict[CapModel, str] = {
    CapModel.CLASSIC_SIMPLE: "Классика простой",
    CapModel.CLASSIC_SLATTED: "Классика реечный",
    CapModel.MODERN_SIMPLE: "Модерн простой",
    CapModel.MODERN_SLATTED: "Модерн реечный",
    CapModel.CUSTOM: "По эскизу",
}

BOX_NAMES: dict[BoxModel, str] = {
    BoxModel.SMOOTH: "Простой гладкий",
    BoxModel.LAMELLAR: "Ламельный",
}

FLASHING_NAMES: dict[FlashingModel, str] = {
    FlashingModel.FLAT: "Для плоских покрытий",
    FlashingModel.PROFILED: "Для профилированных покрытий",
}

ADDON_NAMES: dict[AddonId, str] = {
    AddonId.MESH: "Сетка от птиц",
    AddonId.HEATPROOF: "Жаростойкая вставка",
    AddonId.BOTTOM_CAP: "Нижняя крышка",
    AddonId.GAS_PASSTHROUGH: "Проходка газового котла",
    AddonId.MOUNT_FRAME: "Установочная рамка",
    AddonId.MOUNT_SKELETON: "Установочный каркас",
}


def clamp_percent(value: float) -> float:
    return min(100.0, max(0.0, float(value)))


class QuoteService:
    def __init__(
        self,
        pricing: PricingService,
        price_matrix: PriceMatrixStore | None = None,
        currency: str = "₽",
    ):
        self.pricing = pricing
        self.price_matrix = price_matrix
        self.currency = currency

    def resolve_prices(self, request: QuoteRequest):
        """Material prices for the request, with metalPrice taken from the matrix if asked."""
        prices = request.prices
        if request.metal_price_from_matrix and self.price_matrix is not None:
            matrix_price = self.price_matrix.lookup(request.coating, request.color)
            if matrix_price is not None:
                prices = prices.model_copy(update={"metal_price": matrix_price})
            else:
                logger.debug(f"No matrix price for {request.coating!r} / {request.color!r}")
        return prices

    def build_quote(self, request: QuoteRequest) -> Quote:
        dims = request.dimensions
        prices = self.resolve_prices(request)
        raw_lines: list[tuple[str, str, float]] = []

        if request.cap_model is CapModel.CUSTOM:
            raw_lines.append(("cap", "Колпак: по эскизу (индивидуально)", 0.0))
        else:
            raw_lines.append((
                "cap",
                f"Колпак: {CAP_NAMES[request.cap_model]}",
                self.pricing.price_cap(request.cap_model, dims, prices),
            ))

        if request.box_model is not BoxModel.NONE:
            raw_lines.append((
                "box",
                f"Короб: {BOX_NAMES[request.box_model]}",
                self.pricing.price_box(request.box_model, dims, prices),
            ))

        if request.flashing_model is not FlashingModel.NONE:
            raw_lines.append((
                "flashing",
                f"Оклад: {FLASHING_NAMES[request.flashing_model]}",
                self.pricing.price_flashing(request.flashing_model, dims, prices),
            ))

        for addon in dict.fromkeys(request.addons):
            raw_lines.append((
                f"addon_{addon.value}",
                ADDON_NAMES[addon],
                self.pricing.price_addon(addon, request.cap_model, dims, prices),
            ))

        lines = []
        for key, name, price in raw_lines:
            percent = clamp_percent(request.item_discounts.get(key, 0.0))
            lines.append(QuoteLine(
                key=key,
                name=name,
                price=price,
                discount_percent=percent,
                discounted_price=price * (1 - percent / 100),
            ))

        subtotal = sum(line.price for line in lines)
        items_total = sum(line.discounted_price for line in lines)
        discount = clamp_percent(request.discount)
        total = items_total * (1 - discount / 100)

        logger.info(f"Quoted {len(lines)} items: {format_price(total, self.currency)}")
        return Quote(
            lines=lines,
            metal_price=prices.metal_price,
            subtotal=subtotal,
            items_total=items_total,
            discount=discount,
            discount_amount=items_total - total,
            total=total,
            total_display=format_price(total, self.currency),
            request=request,
        )
