from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Sequence

from csv_clip import __version__ as TOOL_VERSION
from csv_clip.clipboard import ClipboardError, SystemClipboard
from csv_clip.config import (
    ConfigError,
    ConvertOptions,
    default_config_path,
    load_config,
    options_to_dict,
    starter_config,
)
from csv_clip.contracts import build_run_summary
from csv_clip.converter import ConversionError, convert_text
from csv_clip.escaper import EscapePolicy
from csv_clip.loader import EncodingError, load_file
from csv_clip.reader import READER_MODES
from csv_clip.writer import LINE_ENDINGS

EXIT_SUCCESS = 0
EXIT_COMMAND_ERROR = 1
EXIT_READ_FAILED = 2
EXIT_CONVERT_FAILED = 3
EXIT_CLIPBOARD_FAILED = 4

NO_PAUSE_ENV = "CSV_CLIP_NO_PAUSE"

USAGE_HINT = "Usage: drag and drop a CSV file onto csv-clip, or run: csv-clip path/to/file.csv"


class CliError(Exception):
    def __init__(self, message: str, code: int = EXIT_COMMAND_ERROR) -> None:
        super().__init__(message)
        self.code = code


class CsvClipArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise CliError(message, EXIT_COMMAND_ERROR)


def eprint(message: str) -> None:
    print(message, file=sys.stderr)


def emit_human(message: str, *, quiet: bool = False) -> None:
    if not quiet:
        eprint(message)


def json_dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def wait_exit() -> None:
    """Keep a drag-and-drop console window open until the user presses Enter."""
    eprint("\nPress Enter to exit...")
    try:
        input()
    except EOFError:
        pass


def write_stdout(text: str) -> None:
    # Bypass newline translation so CRLF output stays CRLF.
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    sys.stdout.flush()
    buffer.write(text.encode("utf-8"))
    buffer.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = CsvClipArgumentParser(
        prog="csv-clip",
        description="Convert a CSV file into spreadsheet-safe tab-separated text on the clipboard.",
    )
    parser.add_argument("inputs", nargs="*", metavar="FILE", help="CSV file to convert (only the first is used)")
    parser.add_argument("--policy", choices=[policy.value for policy in EscapePolicy], help="Field escaping policy")
    parser.add_argument("--reader", choices=list(READER_MODES), help="CSV reader mode")
    parser.add_argument("--line-ending", dest="line_ending", choices=sorted(LINE_ENDINGS), help="Output line terminator")
    parser.add_argument("--split-sections", dest="split_sections", action="store_true", default=None, help="Split the configured column inside detail sections")
    parser.add_argument("--config", help="JSON config file (default: $CSV_CLIP_CONFIG)")
    parser.add_argument("--init-config", dest="init_config", metavar="PATH", help="Write a starter config file and exit")
    parser.add_argument("--print", dest="print_output", action="store_true", help="Write the result to stdout instead of the clipboard")
    parser.add_argument("--json", action="store_true", help="Write a machine JSON run summary to stdout")
    parser.add_argument("--no-pause", dest="no_pause", action="store_true", help="Do not wait for Enter after an error")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")
    parser.add_argument("-v", "--verbose", action="store_true", help="More human logs")
    parser.add_argument("--version", action="version", version=TOOL_VERSION)
    return parser


def resolve_options(args: argparse.Namespace) -> ConvertOptions:
    config_path = Path(args.config) if args.config else default_config_path()
    options = load_config(config_path) if config_path else ConvertOptions()
    if args.policy:
        options.policy = EscapePolicy.parse(args.policy)
    if args.reader:
        options.reader = args.reader
    if args.line_ending:
        options.line_ending = args.line_ending
    if args.split_sections:
        options.sections.enabled = True
    return options


def classify_exception(exc: Exception) -> int:
    if isinstance(exc, CliError):
        return exc.code
    if isinstance(exc, ConfigError):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, (FileNotFoundError, IsADirectoryError)):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, (EncodingError, OSError, ValueError)):
        return EXIT_READ_FAILED
    if isinstance(exc, ConversionError):
        return EXIT_CONVERT_FAILED
    if isinstance(exc, ClipboardError):
        return EXIT_CLIPBOARD_FAILED
    return EXIT_COMMAND_ERROR


def run_init_config(args: argparse.Namespace) -> int:
    config_path = Path(args.init_config)
    if config_path.exists():
        eprint(f"Refusing to overwrite existing config: {config_path}")
        return EXIT_COMMAND_ERROR
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(starter_config(), encoding="utf-8")
    emit_human(f"Config written: {config_path}", quiet=args.quiet)
    return EXIT_SUCCESS


def run_convert(args: argparse.Namespace) -> int:
    if not args.inputs:
        eprint("Error: no CSV file was given.")
        eprint(USAGE_HINT)
        return EXIT_COMMAND_ERROR
    if args.json and args.print_output:
        raise CliError("Use either --print or --json, not both.", EXIT_COMMAND_ERROR)

    input_path = Path(args.inputs[0])
    if len(args.inputs) > 1:
        emit_human(f"Only the first file is converted; ignoring {len(args.inputs) - 1} more.", quiet=args.quiet)

    sink = "stdout" if args.print_output else "clipboard"
    loaded: dict[str, Any] = {}
    options_payload: dict[str, Any] = {}
    try:
        options = resolve_options(args)
        options_payload = options_to_dict(options)

        if args.verbose:
            emit_human(f"Reading {input_path}", quiet=args.quiet)
        loaded = load_file(input_path)
        for warning in loaded["warnings"]:
            emit_human(f"Warning: {warning}", quiet=args.quiet)
        if args.verbose:
            info = loaded["encoding_info"]
            action = f"transcoded to UTF-8 via {loaded['decoded_as']}" if loaded["transcoded"] else "read as UTF-8"
            emit_human(f"Encoding: {info['detected']} (confidence {info['confidence']}), {action}", quiet=args.quiet)
            emit_human(f"Options: {json.dumps(options_payload, ensure_ascii=False, sort_keys=True)}", quiet=args.quiet)

        result = convert_text(loaded["raw_text"], options)
        emit_human(
            f"Converted {result.records} records from {input_path.name} ({len(result.text)} characters)",
            quiet=args.quiet,
        )

        if args.print_output:
            write_stdout(result.text)
        else:
            SystemClipboard().write_all(result.text)
            emit_human("Copied to clipboard.", quiet=args.quiet)

        if args.json:
            print(json_dumps(build_run_summary(
                input_path=input_path,
                sink=sink,
                encoding=loaded["encoding_info"],
                options=options_payload,
                metrics=result.as_metrics(),
                warnings=loaded["warnings"],
            )))
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(f"Error: {exc}")
        if args.json:
            print(json_dumps(build_run_summary(
                input_path=input_path,
                sink=sink,
                status="error",
                encoding=loaded.get("encoding_info"),
                options=options_payload,
                warnings=loaded.get("warnings"),
                error=str(exc),
            )))
        return classify_exception(exc)


def main(argv: Sequence[str] | None = None) -> int:
    raw_args = list(sys.argv[1:] if argv is None else argv)
    pause = not env_flag(NO_PAUSE_ENV) and "--no-pause" not in raw_args
    try:
        args = build_parser().parse_args(raw_args)
        if args.init_config:
            code = run_init_config(args)
        else:
            code = run_convert(args)
    except CliError as exc:
        eprint(str(exc))
        code = exc.code

    # Success exits at once; failures wait so the message can be read.
    if code != EXIT_SUCCESS and pause:
        wait_exit()
    return code


if __name__ == "__main__":
    raise SystemExit(main())
