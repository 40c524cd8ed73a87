"""
Chimney Cap Pricing — Main Entry Point

Price a configuration from the command line:
    python -m pipe_pricing quote --x 380 --y 380 --cap classic_simple
    python -m pipe_pricing quote --x 500 --y 400 --h 600 --box smooth --addon mesh --discount 5

Run as an API server:
    python -m pipe_pricing --serve
    # or: uvicorn pipe_pricing.api:app --reload --port 8000

Or import and run programmatically:
    from pipe_pricing.main import run
    quote = run(QuoteRequest(dimensions=Dimensions(X=380, Y=380)))
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from pipe_pricing.config import get_settings
from pipe_pricing.container import Engine, build_engine
from pipe_pricing.models.enums import AddonId, BoxModel, CapModel, FlashingModel
from pipe_pricing.models.schemas import CompanyInfo, Dimensions, MaterialPrices, Quote, QuoteRequest
from pipe_pricing.utils.formatting import format_price
from pipe_pricing.utils.logger import setup_logging


def run(request: QuoteRequest, engine: Engine | None = None, record: bool = False) -> Quote:
    """Price ``request`` and optionally record it in the history."""
    engine = engine or build_engine()
    quote = engine.quotes.build_quote(request)
    if record:
        entry = engine.history.add(quote, request.company)
        logging.getLogger(__name__).info(f"Saved to history as {entry.id}")
    return quote


def _print_summary(quote: Quote, currency: str) -> None:
    """Print a human-readable, line-itemized quote."""
    width = max([len(line.name) for line in quote.lines] + [20])
    print("-" * (width + 16))
    for line in quote.lines:
        price = format_price(line.discounted_price, currency)
        suffix = f"  (-{line.discount_percent:g}%)" if line.discount_percent else ""
        print(f"  {line.name:<{width}}  {price:>12}{suffix}")
    print("-" * (width + 16))
    print(f"  {'Сумма':<{width}}  {format_price(quote.items_total, currency):>12}")
    if quote.discount:
        print(f"  {f'Скидка {quote.discount:g}%':<{width}}  {format_price(-quote.discount_amount, currency):>12}")
    print(f"  {'Итого':<{width}}  {quote.total_display:>12}")


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI server."""
    import uvicorn

    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("pipe_pricing.api:app", host=host, port=port, reload=get_settings().debug)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="pipe_pricing",
        description="Chimney cap pricing calculator",
        # "--h" belongs to the quote command, not a prefix of --help/--host
        allow_abbrev=False,
    )
    parser.add_argument("--serve", action="store_true", help="Run the HTTP API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)

    sub = parser.add_subparsers(dest="command")
    quote = sub.add_parser("quote", help="Price a configuration")
    quote.add_argument("--x", type=float, required=True, help="Flue width, mm")
    quote.add_argument("--y", type=float, required=True, help="Flue depth, mm")
    quote.add_argument("--h", type=float, default=0.0, help="Box height, mm")
    quote.add_argument("--metal-price", type=float, default=settings.default_metal_price)
    quote.add_argument("--mesh-price", type=float, default=0.0)
    quote.add_argument("--stainless-price", type=float, default=0.0)
    quote.add_argument("--zinc-price", type=float, default=0.0, help="0.65 mm zinc sheet price")
    quote.add_argument("--cap", choices=[m.value for m in CapModel], default=CapModel.CLASSIC_SIMPLE.value)
    quote.add_argument("--box", choices=[m.value for m in BoxModel], default=BoxModel.NONE.value)
    quote.add_argument("--flashing", choices=[m.value for m in FlashingModel], default=FlashingModel.NONE.value)
    quote.add_argument(
        "--addon", action="append", default=[], choices=[a.value for a in AddonId],
        help="Add-on to include (repeatable)",
    )
    quote.add_argument("--discount", type=float, default=0.0, help="Discount on the whole quote, %%")
    quote.add_argument("--coating", default="")
    quote.add_argument("--color", default="")
    quote.add_argument(
        "--from-matrix", action="store_true",
        help="Take the metal price from the price matrix for --coating/--color",
    )
    quote.add_argument("--company", default="", help="Customer company name")
    quote.add_argument("--record", action="store_true", help="Save the quote to history")
    return parser


def request_from_args(args: argparse.Namespace) -> QuoteRequest:
    return QuoteRequest(
        dimensions=Dimensions(X=args.x, Y=args.y, H=args.h),
        prices=MaterialPrices(
            metal_price=args.metal_price,
            mesh_price=args.mesh_price,
            stainless_price=args.stainless_price,
            zinc_price_065=args.zinc_price,
        ),
        coating=args.coating,
        color=args.color,
        metal_price_from_matrix=args.from_matrix,
        cap_model=CapModel(args.cap),
        box_model=BoxModel(args.box),
        flashing_model=FlashingModel(args.flashing),
        addons=[AddonId(a) for a in args.addon],
        discount=args.discount,
        company=CompanyInfo(company_name=args.company) if args.company else None,
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.serve:
        serve(args.host, args.port)
        return 0
    if args.command != "quote":
        parser.print_help()
        return 1

    settings = get_settings()
    setup_logging(settings.log_level)
    quote = run(request_from_args(args), record=args.record)
    _print_summary(quote, settings.currency_symbol)
    return 0


if __name__ == "__main__":
    sys.exit(main())
