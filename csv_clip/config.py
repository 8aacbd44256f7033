"""Conversion options, loaded from defaults, a JSON config file and CLI flags."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from csv_clip.escaper import EscapePolicy
from csv_clip.reader import READER_MODES
from csv_clip.tracker import SectionRules
from csv_clip.writer import LINE_ENDINGS

CONFIG_ENV_VAR = "CSV_CLIP_CONFIG"
SUPPORTED_CONFIG_SUFFIXES = {".json", ".yml", ".yaml"}

_TOP_LEVEL_KEYS = {"policy", "reader", "line_ending", "sections"}
_SECTION_KEYS = {"enabled", "markers", "split_column", "split_names", "separator"}


class ConfigError(ValueError):
    pass


@dataclass
class ConvertOptions:
    policy: EscapePolicy = EscapePolicy.ZERO_PRESERVE
    reader: str = "permissive"
    line_ending: str = "crlf"
    sections: SectionRules = field(default_factory=SectionRules)

    def __post_init__(self) -> None:
        self.policy = EscapePolicy.parse(self.policy)
        if self.reader not in READER_MODES:
            raise ConfigError(f"Unknown reader mode '{self.reader}'. Choices: {', '.join(READER_MODES)}")
        if self.line_ending not in LINE_ENDINGS:
            raise ConfigError(f"Unknown line ending '{self.line_ending}'. Choices: {', '.join(LINE_ENDINGS)}")

    @property
    def line_terminator(self) -> str:
        return LINE_ENDINGS[self.line_ending]


def options_to_dict(options: ConvertOptions) -> dict[str, Any]:
    rules = options.sections
    return {
        "policy": options.policy.value,
        "reader": options.reader,
        "line_ending": options.line_ending,
        "sections": {
            "enabled": rules.enabled,
            "markers": {marker: section.value for marker, section in rules.markers.items()},
            "split_column": rules.split_column,
            "split_names": list(rules.split_names),
            "separator": rules.separator,
        },
    }


def options_from_dict(payload: dict[str, Any]) -> ConvertOptions:
    if not isinstance(payload, dict):
        raise ConfigError("Config root must be a JSON object.")
    unknown = set(payload) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    sections_payload = payload.get("sections", {})
    if not isinstance(sections_payload, dict):
        raise ConfigError("'sections' must be a JSON object.")
    unknown = set(sections_payload) - _SECTION_KEYS
    if unknown:
        raise ConfigError(f"Unknown sections keys: {', '.join(sorted(unknown))}")

    try:
        rules = SectionRules(**sections_payload)
        kwargs = {key: payload[key] for key in ("policy", "reader", "line_ending") if key in payload}
        return ConvertOptions(sections=rules, **kwargs)
    except ConfigError:
        raise
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config: {exc}") from exc


def load_config(path: "str | Path") -> ConvertOptions:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config not found: {config_path}")
    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_CONFIG_SUFFIXES:
        raise ConfigError("Config must be a .json file")
    if suffix in {".yml", ".yaml"}:
        raise ConfigError("YAML configs are not supported. Use JSON.")
    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Could not read config: {exc}") from exc
    return options_from_dict(payload)


def default_config_path() -> Path | None:
    value = os.environ.get(CONFIG_ENV_VAR)
    return Path(value) if value else None


def starter_config() -> str:
    return json.dumps(options_to_dict(ConvertOptions()), indent=2, ensure_ascii=False) + "\n"
