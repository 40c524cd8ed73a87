"""
Override resolution — merge persisted overrides onto built-in defaults.

Pure functions: given the defaults and whatever was decoded from storage,
return the effective table. A partial override never blanks out keys it
does not mention, and values of the wrong type fall back to the default.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Mapping


def is_finite_number(value: Any) -> bool:
    """True for a real, non-bool number that converts to a finite float."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        # ints beyond float range
        return False


def resolve_coefficients(
    defaults: Mapping[str, Mapping[str, float]],
    override: Any,
) -> dict[str, dict[str, float]]:
    """Per model: {**default[model], **override[model]} restricted to known, numeric keys."""
    override = override if isinstance(override, Mapping) else {}
    merged: dict[str, dict[str, float]] = {}
    for model, default_record in defaults.items():
        record = {name: float(value) for name, value in default_record.items()}
        persisted = override.get(model)
        if isinstance(persisted, Mapping):
            for name, value in persisted.items():
                if name in record and is_finite_number(value):
                    record[name] = float(value)
        merged[model] = record
    return merged


def resolve_formulas(defaults: Mapping[str, str], override: Any) -> dict[str, str]:
    """Per model: the persisted expression if it is a string, else the default."""
    override = override if isinstance(override, Mapping) else {}
    merged: dict[str, str] = {}
    for model, default_expression in defaults.items():
        persisted = override.get(model)
        merged[model] = persisted if isinstance(persisted, str) else default_expression
    return merged
