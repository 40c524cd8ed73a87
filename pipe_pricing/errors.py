"""
Exception hierarchy for the pricing engine.

Formula errors are fail-loud in the editor and fail-soft in quoting;
registry errors are reported synchronously to whoever made the change.
"""

from __future__ import annotations


class PipePricingError(Exception):
    """Base class for every error raised by pipe_pricing."""


# ── Formula evaluation ───────────────────────────────────


class FormulaError(PipePricingError):
    """Base class for expression evaluation failures."""

    error_type = "formula_error"


class EvaluationError(FormulaError):
    """Syntax error, unknown identifier or runtime failure while evaluating."""

    error_type = "evaluation_error"

    def __init__(self, message: str, position: int | None = None):
        super().__init__(message)
        self.message = message
        self.position = position


class NonFiniteResult(FormulaError):
    """The expression evaluated, but not to a finite number."""

    error_type = "non_finite_result"

    def __init__(self, value: float):
        super().__init__(f"Formula result is not a finite number: {value}")
        self.value = value


# ── Custom variables ─────────────────────────────────────


class CustomVariableError(PipePricingError, ValueError):
    """Base class for custom variable registry failures."""


class InvalidIdentifier(CustomVariableError):
    def __init__(self, identifier: str):
        super().__init__(
            f"Invalid variable name '{identifier}': use letters, digits and "
            f"underscore, not starting with a digit"
        )
        self.identifier = identifier


class DuplicateIdentifier(CustomVariableError):
    def __init__(self, identifier: str, reserved: bool = False):
        reason = "is a built-in variable" if reserved else "is already defined"
        super().__init__(f"Variable name '{identifier}' {reason}")
        self.identifier = identifier
        self.reserved = reserved


class InvalidVariableValue(CustomVariableError):
    def __init__(self, value: object):
        super().__init__(f"Variable value must be a finite number, got {value!r}")
        self.value = value


class VariableNotFound(PipePricingError, KeyError):
    def __init__(self, variable_id: str):
        super().__init__(variable_id)
        self.variable_id = variable_id

    def __str__(self) -> str:
        return f"Custom variable '{self.variable_id}' not found"


# ── Persistence ──────────────────────────────────────────


class StoreWriteError(PipePricingError):
    """A record could not be validated or serialized for persistence."""
