"""
Field-constraint accumulator.

Checks never raise; callers inspect `valid()` and decide what to do.
The first message recorded for a field is the one kept.
"""

from __future__ import annotations

from typing import Iterable

from .errors import ValidationError


class Validator:
    def __init__(self) -> None:
        self.errors: dict[str, str] = {}

    def valid(self) -> bool:
        return not self.errors

    def add_error(self, field: str, message: str) -> None:
        self.errors.setdefault(field, message)

    def check(self, ok: bool, field: str, message: str) -> None:
        if not ok:
            self.add_error(field, message)

    def raise_if_invalid(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


def permitted_value(value: str, permitted: Iterable[str]) -> bool:
    return value in set(permitted)


def unique(values: Iterable[str]) -> bool:
    seen: set[str] = set()
    for value in values:
        if value in seen:
            return False
        seen.add(value)
    return True
