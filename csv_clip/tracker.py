"""Section-aware column splitting for files that mix header and detail blocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Section(str, Enum):
    NONE = "none"
    HEADER = "header"
    DETAIL = "detail"


def _default_markers() -> dict[str, Section]:
    return {"header": Section.HEADER, "detail": Section.DETAIL}


@dataclass
class SectionRules:
    enabled: bool = False
    markers: dict[str, Section] = field(default_factory=_default_markers)
    split_column: str = "code"
    split_names: tuple[str, str] = ("code_prefix", "code_body")
    separator: str = "_"

    def __post_init__(self) -> None:
        self.markers = {normalize_label(key): Section(value) for key, value in self.markers.items()}
        self.split_names = tuple(self.split_names)
        if len(self.split_names) != 2:
            raise ValueError("split_names must hold exactly two column names")
        if len(self.separator) != 1:
            raise ValueError("separator must be a single character")


def normalize_label(value: str) -> str:
    """Trim, drop one pair of surrounding quotes, and case-fold."""
    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        text = text[1:-1].strip()
    return text.casefold()


def split_value(value: str, separator: str = "_") -> tuple[str, str]:
    """
    Split on the first separator, keeping the separator on the left piece.

    ``"01_zzzz"`` -> ``("01_", "zzzz")``; ``"0123"`` -> ``("0123", "")``.
    """
    head, found, tail = value.partition(separator)
    if not found:
        return value, ""
    return head + separator, tail


@dataclass
class SectionTracker:
    """
    Per-conversion state: the current section and the column to split.

    Create one tracker per input; it is not meant to be shared.
    """

    rules: SectionRules
    section: Section = Section.NONE
    split_index: Optional[int] = None
    rows_split: int = 0

    def _enter_section(self, record: list[str]) -> None:
        if not record:
            return
        marker = self.rules.markers.get(normalize_label(record[0]))
        if marker is not None:
            # Every marker opens a fresh block, even one repeating the section.
            self.section = marker
            self.split_index = None

    def _locate_split_column(self, record: list[str]) -> bool:
        wanted = normalize_label(self.rules.split_column)
        for index, value in enumerate(record):
            if normalize_label(value) == wanted:
                self.split_index = index
                return True
        return False

    def apply(self, record: list[str]) -> list[str]:
        self._enter_section(record)
        if self.section is not Section.DETAIL:
            return list(record)

        is_header = False
        if self.split_index is None:
            is_header = self._locate_split_column(record)
        index = self.split_index
        if index is None or len(record) <= index:
            return list(record)

        if is_header:
            replacement = list(self.rules.split_names)
        else:
            replacement = list(split_value(record[index], self.rules.separator))
            self.rows_split += 1
        return record[:index] + replacement + record[index + 1:]
