"""
Field-tagged validator used for entities and listing parameters.

Usage:
    v = Validator()
    validate_vendor(v, vendor)
    v.raise_if_invalid()
"""

from __future__ import annotations

from typing import Dict, Hashable, Iterable

from vendorstore.domain.errors import ValidationError


class Validator:
    """Collects at most one error message per field."""

    def __init__(self) -> None:
        self.errors: Dict[str, str] = {}

    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        # First message recorded for a field wins.
        self.errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)

    def raise_if_invalid(self) -> None:
        """Raise ValidationError carrying the collected errors, if any."""
        if self.errors:
            raise ValidationError(self.errors)


def permitted_value(value: Hashable, *permitted: Hashable) -> bool:
    return value in permitted


def unique(values: Iterable[Hashable]) -> bool:
    seen = set()
    for value in values:
        if value in seen:
            return False
        seen.add(value)
    return True


__all__ = ["Validator", "permitted_value", "unique"]
