"""Field escaping so a spreadsheet shows pasted values exactly as written."""

from __future__ import annotations

import re
from enum import Enum

FORMULA_PREFIX = '="'
FORMULA_SUFFIX = '"'
ZERO_LEADING_RE = re.compile(r"0[0-9]*")


class EscapePolicy(str, Enum):
    ZERO_PRESERVE = "zero-preserve"
    FORMULA_ALL = "formula-all"

    @classmethod
    def parse(cls, name: "str | EscapePolicy") -> "EscapePolicy":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            choices = ", ".join(policy.value for policy in cls)
            raise ValueError(f"Unknown escape policy '{name}'. Choices: {choices}") from None


def formula_wrap(value: str) -> str:
    """Return ``value`` as a string formula literal, e.g. ``007`` -> ``="007"``."""
    return FORMULA_PREFIX + value.replace('"', '""') + FORMULA_SUFFIX


def needs_zero_guard(value: str) -> bool:
    # "0", "007", "0123"; not "-01", "0.5" or " 01"
    return ZERO_LEADING_RE.fullmatch(value) is not None


def escape_field(value: str, policy: EscapePolicy = EscapePolicy.ZERO_PRESERVE) -> str:
    if policy is EscapePolicy.FORMULA_ALL:
        return formula_wrap(value)
    if needs_zero_guard(value):
        return formula_wrap(value)
    return value
