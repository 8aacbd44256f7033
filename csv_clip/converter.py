"""
converter.py - CSV to paste-ready TSV for csv-clip

Public API:
    result = convert_text(text, ConvertOptions())
    result.text        - the full tab-separated block
    result.as_metrics() - counters for the run summary

Each call owns its own section tracker and output buffer, so calls are
independent of each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from csv_clip.config import ConvertOptions
from csv_clip.escaper import escape_field
from csv_clip.reader import ReaderError, Source, iter_records
from csv_clip.tracker import SectionTracker
from csv_clip.writer import TsvWriter, WriterError


class ConversionError(Exception):
    """A fatal problem while reading records or writing the TSV block."""


@dataclass
class ConversionResult:
    text: str
    records: int = 0
    wrapped_fields: int = 0
    split_rows: int = 0
    widest_record: int = 0
    narrowest_record: int = 0

    @property
    def ragged(self) -> bool:
        return self.records > 0 and self.widest_record != self.narrowest_record

    def as_metrics(self) -> dict[str, Any]:
        return {
            "records": self.records,
            "wrapped_fields": self.wrapped_fields,
            "split_rows": self.split_rows,
            "widest_record": self.widest_record,
            "narrowest_record": self.narrowest_record,
            "ragged": self.ragged,
            "output_chars": len(self.text),
        }


def convert_text(source: Source, options: Optional[ConvertOptions] = None) -> ConversionResult:
    options = options or ConvertOptions()
    tracker = SectionTracker(options.sections) if options.sections.enabled else None
    writer = TsvWriter(options.line_terminator)

    records = 0
    wrapped = 0
    widest = 0
    narrowest: Optional[int] = None
    last_line = 0

    try:
        for line_number, record in iter_records(source, mode=options.reader):
            last_line = line_number
            if tracker is not None:
                record = tracker.apply(record)
            escaped = [escape_field(value, options.policy) for value in record]
            wrapped += sum(1 for before, after in zip(record, escaped) if before != after)
            writer.write_record(escaped, line_number)
            records += 1
            widest = max(widest, len(record))
            narrowest = len(record) if narrowest is None else min(narrowest, len(record))
    except (ReaderError, WriterError) as exc:
        raise ConversionError(str(exc)) from exc
    except OSError as exc:
        raise ConversionError(f"Could not read input after line {last_line}: {exc}") from exc

    return ConversionResult(
        text=writer.getvalue(),
        records=records,
        wrapped_fields=wrapped,
        split_rows=tracker.rows_split if tracker is not None else 0,
        widest_record=widest,
        narrowest_record=narrowest or 0,
    )


def csv_to_tsv(source: Source, options: Optional[ConvertOptions] = None) -> str:
    """Return only the converted text; see :func:`convert_text`."""
    return convert_text(source, options).text
