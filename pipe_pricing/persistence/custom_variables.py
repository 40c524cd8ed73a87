"""
Custom Variable Registry — user-defined constants usable in any formula.

Identifiers must be valid formula names, unique within the registry and
distinct from the names the pricing functions always supply (dimensions,
material prices, coefficients). Every change is persisted immediately.
"""

from __future__ import annotations

import logging
import math
import uuid

from pydantic import ValidationError

from pipe_pricing.errors import (
    DuplicateIdentifier,
    InvalidIdentifier,
    InvalidVariableValue,
    VariableNotFound,
)
from pipe_pricing.formula.defaults import RESERVED_VARIABLE_NAMES
from pipe_pricing.formula.parser import is_identifier
from pipe_pricing.formula.resolve import is_finite_number
from pipe_pricing.models.schemas import CustomVariable
from pipe_pricing.persistence.json_record import read_json, write_json
from pipe_pricing.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

CUSTOM_VARIABLES_KEY = "pipe_custom_variables"


def _finite_value(value: object) -> float:
    if not is_finite_number(value):
        raise InvalidVariableValue(value)
    return float(value)


class CustomVariableRegistry:
    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    # ── Reads ────────────────────────────────────────────

    def list(self) -> list[CustomVariable]:
        """Variables in insertion order. Malformed stored entries are skipped."""
        raw = read_json(self.kv, CUSTOM_VARIABLES_KEY)
        if not isinstance(raw, list):
            return []
        variables: list[CustomVariable] = []
        seen: set[str] = set()
        for entry in raw:
            try:
                var = CustomVariable.model_validate(entry)
            except (ValidationError, OverflowError) as e:
                logger.warning(f"Skipping malformed custom variable {entry!r}: {e}")
                continue
            if not is_identifier(var.identifier) or var.identifier in seen:
                logger.warning(f"Skipping custom variable with unusable name '{var.identifier}'")
                continue
            if not math.isfinite(var.value):
                logger.warning(f"Skipping custom variable '{var.identifier}' with non-finite value")
                continue
            seen.add(var.identifier)
            variables.append(var)
        return variables

    def as_variable_map(self) -> dict[str, float]:
        return {var.identifier: var.value for var in self.list()}

    # ── Writes ───────────────────────────────────────────

    def add(self, display_name: str, identifier: str, value: float) -> CustomVariable:
        identifier = (identifier or "").strip()
        if not is_identifier(identifier):
            raise InvalidIdentifier(identifier)
        if identifier in RESERVED_VARIABLE_NAMES:
            raise DuplicateIdentifier(identifier, reserved=True)
        variables = self.list()
        if any(var.identifier == identifier for var in variables):
            raise DuplicateIdentifier(identifier)

        var = CustomVariable(
            id=uuid.uuid4().hex,
            display_name=(display_name or "").strip() or identifier,
            identifier=identifier,
            value=_finite_value(value),
        )
        variables.append(var)
        self._save(variables)
        logger.info(f"Added custom variable {identifier} = {var.value}")
        return var

    def update(self, variable_id: str, value: float) -> CustomVariable:
        new_value = _finite_value(value)
        variables = self.list()
        for index, var in enumerate(variables):
            if var.id == variable_id:
                updated = var.model_copy(update={"value": new_value})
                variables[index] = updated
                self._save(variables)
                logger.info(f"Updated custom variable {var.identifier} = {new_value}")
                return updated
        raise VariableNotFound(variable_id)

    def remove(self, variable_id: str) -> None:
        variables = self.list()
        remaining = [var for var in variables if var.id != variable_id]
        if len(remaining) == len(variables):
            return
        self._save(remaining)
        logger.info(f"Removed custom variable {variable_id}")

    def _save(self, variables: list[CustomVariable]) -> None:
        write_json(
            self.kv,
            CUSTOM_VARIABLES_KEY,
            [var.model_dump(by_alias=True) for var in variables],
        )
