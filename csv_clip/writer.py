from __future__ import annotations

import csv
import io
from typing import Sequence

LINE_ENDINGS = {"crlf": "\r\n", "lf": "\n"}


class WriterError(ValueError):
    """Raised when a record cannot be serialized."""


class TsvWriter:
    """Tab-separated output buffered in memory until the whole input is done."""

    def __init__(self, line_terminator: str = "\r\n") -> None:
        if line_terminator not in LINE_ENDINGS.values():
            raise ValueError(f"Unsupported line terminator: {line_terminator!r}")
        self.line_terminator = line_terminator
        self._buffer = io.StringIO()
        self._writer = csv.writer(
            self._buffer,
            delimiter="\t",
            quotechar='"',
            doublequote=True,
            quoting=csv.QUOTE_MINIMAL,
            lineterminator=line_terminator,
        )
        self.lines_written = 0

    def write_record(self, record: Sequence[str], line_number: int | None = None) -> None:
        try:
            self._writer.writerow(record)
        except csv.Error as exc:
            where = f" (line {line_number})" if line_number is not None else ""
            raise WriterError(f"TSV write error{where}: {exc}") from exc
        self.lines_written += 1

    def getvalue(self) -> str:
        return self._buffer.getvalue()
