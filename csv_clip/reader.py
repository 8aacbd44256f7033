"""
reader.py - CSV record reader for csv-clip

Two modes:
    permissive - heuristic line parser that never fails and keeps every
                 character of the field as read (quotes included)
    strict     - the standard csv module; ragged rows accepted

Public API:
    for line_number, record in iter_records(text):
        ...
"""

from __future__ import annotations

import csv
import io
from enum import Enum
from typing import Iterable, Iterator, Union

from csv_clip.loader import MAX_FILE_BYTES

READER_MODES = ("permissive", "strict")

Source = Union[str, Iterable[str]]


class ReaderError(ValueError):
    """Raised when the strict reader cannot tokenize the input."""


class _State(Enum):
    UNQUOTED = "unquoted-field"
    IN_QUOTED_SPAN = "inside-quoted-span"


def parse_dirty_line(line: str, delimiter: str = ",", quotechar: str = '"') -> list[str]:
    """
    Split one CSV line without rejecting anything.

    The line is cut on every delimiter, then the pieces are glued back
    together while an odd number of quote characters has been seen. An
    unterminated quoted span is closed at end of line.
    """
    parts = line.split(delimiter)
    last = len(parts) - 1
    fields: list[str] = []
    buffer: list[str] = []
    state = _State.UNQUOTED

    for index, part in enumerate(parts):
        if state is _State.IN_QUOTED_SPAN:
            buffer.append(delimiter)
        buffer.append(part)

        if part.count(quotechar) % 2:
            state = _State.IN_QUOTED_SPAN if state is _State.UNQUOTED else _State.UNQUOTED

        if state is _State.UNQUOTED or index == last:
            fields.append("".join(buffer))
            buffer = []
            state = _State.UNQUOTED

    return fields


def _is_blank(line: str) -> bool:
    return not line.strip()


def _lines(source: Source, newline: str = "") -> Iterable[str]:
    if isinstance(source, str):
        return io.StringIO(source, newline=newline)
    return source


def _strip_line_break(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def _iter_permissive(source: Source) -> Iterator[tuple[int, list[str]]]:
    # Lines end at \n only; a lone \r stays inside the line.
    for line_number, line in enumerate(_lines(source, newline="\n"), start=1):
        line = _strip_line_break(line)
        if _is_blank(line):
            continue
        yield line_number, parse_dirty_line(line)


def _iter_strict(source: Source) -> Iterator[tuple[int, list[str]]]:
    # One field may span the whole input the loader accepts.
    if csv.field_size_limit() < MAX_FILE_BYTES:
        csv.field_size_limit(MAX_FILE_BYTES)
    reader = csv.reader(_lines(source), strict=False)
    start = 1
    try:
        for row in reader:
            line_number, start = start, reader.line_num + 1
            if not row or (len(row) == 1 and _is_blank(row[0])):
                continue
            yield line_number, row
    except csv.Error as exc:
        raise ReaderError(f"CSV read error at line {reader.line_num}: {exc}") from exc


def iter_records(source: Source, mode: str = "permissive") -> Iterator[tuple[int, list[str]]]:
    """
    Yield ``(line_number, record)`` for every non-blank record.

    ``line_number`` is the physical line the record starts on.
    """
    if mode == "permissive":
        return _iter_permissive(source)
    if mode == "strict":
        return _iter_strict(source)
    raise ValueError(f"Unknown reader mode '{mode}'. Choices: {', '.join(READER_MODES)}")
