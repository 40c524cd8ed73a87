from .logger import setup_logging
from .formatting import format_price

__all__ = ["setup_logging", "format_price"]
