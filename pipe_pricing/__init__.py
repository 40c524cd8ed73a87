"""
Chimney Cap Pricing — formula-driven price calculator for chimney caps,
boxes, flashings and add-ons.
"""

__version__ = "0.1.0"
