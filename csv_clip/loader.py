"""
loader.py - file reading and encoding normalization for csv-clip

Public API:
    result = load_file("path/to/file.csv")
    text   = result["raw_text"]

Result dict keys:
    raw_text          - decoded text, ready for the converter
    detected_encoding - chardet's guess, or "unknown"
    encoding_info     - full dict: detected, confidence, is_japanese_legacy
    decoded_as        - codec actually used to decode the bytes
    transcoded        - True when a Japanese legacy encoding was converted
    size_bytes        - size of the raw input
    warnings          - list of warning strings
"""

from __future__ import annotations

from pathlib import Path

import chardet

# Read fully into memory; refuse anything that clearly is not a paste job.
MAX_FILE_BYTES = 256 * 1024 * 1024

JAPANESE_LEGACY_CODECS = {
    "SHIFT_JIS": "shift_jis",
    "SHIFT-JIS": "shift_jis",
    "CP932": "cp932",
    "WINDOWS-31J": "cp932",
}

UTF8_BOM = b"\xef\xbb\xbf"


class EncodingError(ValueError):
    """Raised when a detected legacy encoding cannot be transcoded."""


# ══════════════════════════════════════════════════════════════════════════════
# ENCODING DETECTION
# ══════════════════════════════════════════════════════════════════════════════

def detect_encoding_info(raw: bytes) -> dict:
    """
    Detect encoding from raw bytes with chardet.

    Returns dict with: detected, confidence, is_japanese_legacy.
    """
    result = chardet.detect(raw) if raw else {}
    detected = result.get("encoding") or "unknown"
    confidence = round(result.get("confidence") or 0.0, 2)
    return {
        "detected": detected,
        "confidence": confidence,
        "is_japanese_legacy": detected.upper() in JAPANESE_LEGACY_CODECS,
    }


# ══════════════════════════════════════════════════════════════════════════════
# DECODING
# ══════════════════════════════════════════════════════════════════════════════

def decode_bytes(raw: bytes) -> dict:
    """
    Decode raw bytes to text.

    Only Shift_JIS family encodings are transcoded; a failure there is fatal.
    Everything else is read as UTF-8 and undecodable bytes are replaced.
    """
    enc_info = detect_encoding_info(raw)
    warnings: list[str] = []

    if enc_info["is_japanese_legacy"]:
        codec = JAPANESE_LEGACY_CODECS[enc_info["detected"].upper()]
        try:
            text = raw.decode(codec)
        except UnicodeDecodeError as exc:
            raise EncodingError(
                f"Could not convert from {enc_info['detected']}: {exc}"
            ) from exc
        return {
            "raw_text": text,
            "detected_encoding": enc_info["detected"],
            "encoding_info": enc_info,
            "decoded_as": codec,
            "transcoded": True,
            "size_bytes": len(raw),
            "warnings": warnings,
        }

    payload = raw[len(UTF8_BOM):] if raw.startswith(UTF8_BOM) else raw
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        text = payload.decode("utf-8", errors="replace")
        warnings.append(
            f"Input is not valid UTF-8 (detected {enc_info['detected']}); "
            f"undecodable bytes were replaced, first at byte {exc.start}"
        )

    return {
        "raw_text": text,
        "detected_encoding": enc_info["detected"],
        "encoding_info": enc_info,
        "decoded_as": "utf-8",
        "transcoded": False,
        "size_bytes": len(raw),
        "warnings": warnings,
    }


def load_file(path: "str | Path") -> dict:
    """
    Read a file and decode it.

    Raises:
        FileNotFoundError  if the file does not exist.
        OSError            if the file cannot be read.
        ValueError         if the file is too large.
        EncodingError      if transcoding a legacy encoding fails.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if path.is_dir():
        raise IsADirectoryError(f"Expected a file, got a directory: {path}")

    size = path.stat().st_size
    if size > MAX_FILE_BYTES:
        raise ValueError(
            f"{path.name} is {size} bytes, too large for safe in-memory processing "
            f"(limit {MAX_FILE_BYTES} bytes)"
        )

    return decode_bytes(path.read_bytes())
