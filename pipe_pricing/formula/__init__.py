"""Formula engine — parser, evaluator, built-in defaults and override resolution."""

from pipe_pricing.formula.evaluator import evaluate, referenced_names, try_evaluate
from pipe_pricing.formula.parser import is_identifier, parse
from pipe_pricing.formula.resolve import resolve_coefficients, resolve_formulas

__all__ = [
    "evaluate",
    "try_evaluate",
    "referenced_names",
    "is_identifier",
    "parse",
    "resolve_coefficients",
    "resolve_formulas",
]
