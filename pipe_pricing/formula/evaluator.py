"""
Expression Evaluator — computes a formula against a flat variable map.

``evaluate`` is fail-loud: it raises ``EvaluationError`` or
``NonFiniteResult``. ``try_evaluate`` wraps the same computation into an
``EvaluationResult`` for callers that display errors instead of raising.
Neither function touches anything except its two arguments.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Mapping

from pipe_pricing.errors import EvaluationError, FormulaError, NonFiniteResult
from pipe_pricing.formula.parser import Chain, Expr, Name, Number, Unary, names_in, parse
from pipe_pricing.models.schemas import EvaluationResult


def _divide(left: float, right: float) -> float:
    # IEEE 754 semantics: x/0 is ±inf and 0/0 is nan, caught by the final finiteness check
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _apply(op: str, left: float, right: float) -> float:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    return _divide(left, right)


def _lookup(node: Name, variables: Mapping[str, float]) -> float:
    if node.name not in variables:
        raise EvaluationError(f"Unknown variable '{node.name}'", node.position)
    value = variables[node.name]
    if isinstance(value, bool) or not isinstance(value, Real):
        raise EvaluationError(f"Variable '{node.name}' is not a number", node.position)
    return float(value)


def _eval(node: Expr, variables: Mapping[str, float]) -> float:
    if isinstance(node, Number):
        return node.value
    if isinstance(node, Name):
        return _lookup(node, variables)
    if isinstance(node, Unary):
        value = _eval(node.operand, variables)
        return -value if node.op == "-" else value
    if isinstance(node, Chain):
        result = _eval(node.first, variables)
        for op, operand in node.rest:
            result = _apply(op, result, _eval(operand, variables))
        return result
    raise EvaluationError(f"Unsupported formula element: {type(node).__name__}")


def evaluate(expression: str, variables: Mapping[str, float]) -> float:
    """
    Evaluate ``expression`` with every key of ``variables`` bound as a name.

    Returns a finite float. Raises EvaluationError for syntax errors, unknown
    or non-numeric variables; NonFiniteResult when the value is NaN or ±inf.
    """
    tree = parse(expression)
    try:
        value = _eval(tree, variables)
    except FormulaError:
        raise
    except (ArithmeticError, TypeError, ValueError) as e:
        raise EvaluationError(f"Formula could not be evaluated: {e}") from e
    if not math.isfinite(value):
        raise NonFiniteResult(value)
    return value


def try_evaluate(expression: str, variables: Mapping[str, float]) -> EvaluationResult:
    """Evaluate without raising; the error message is kept verbatim for display."""
    try:
        return EvaluationResult(ok=True, value=evaluate(expression, variables))
    except EvaluationError as e:
        return EvaluationResult(ok=False, error=e.message, error_type=e.error_type, position=e.position)
    except NonFiniteResult as e:
        return EvaluationResult(ok=False, error=str(e), error_type=e.error_type)


def referenced_names(expression: str) -> set[str]:
    """Variable names a formula uses; raises EvaluationError if it does not parse."""
    return names_in(parse(expression))
