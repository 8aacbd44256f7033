import json
import tempfile
import unittest
from pathlib import Path

from csv_clip.config import (
    ConfigError,
    ConvertOptions,
    load_config,
    options_from_dict,
    options_to_dict,
    starter_config,
)
from csv_clip.escaper import EscapePolicy
from csv_clip.tracker import Section


def write_config(folder: str, payload, name: str = "csv-clip.json") -> Path:
    path = Path(folder) / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class ConvertOptionsTests(unittest.TestCase):
    def test_defaults(self):
        options = ConvertOptions()
        self.assertIs(options.policy, EscapePolicy.ZERO_PRESERVE)
        self.assertEqual(options.reader, "permissive")
        self.assertEqual(options.line_terminator, "\r\n")
        self.assertFalse(options.sections.enabled)

    def test_policy_given_as_text(self):
        self.assertIs(ConvertOptions(policy="formula-all").policy, EscapePolicy.FORMULA_ALL)

    def test_invalid_reader_and_line_ending(self):
        with self.assertRaisesRegex(ConfigError, "reader mode"):
            ConvertOptions(reader="loose")
        with self.assertRaisesRegex(ConfigError, "line ending"):
            ConvertOptions(line_ending="cr")


class LoadConfigTests(unittest.TestCase):
    def test_loads_json_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_config(
                tmpdir,
                {
                    "policy": "formula-all",
                    "line_ending": "lf",
                    "sections": {
                        "enabled": True,
                        "markers": {"H": "header", "D": "detail"},
                        "split_column": "item",
                        "split_names": ["item_group", "item_no"],
                        "separator": "-",
                    },
                },
            )
            options = load_config(path)
        self.assertIs(options.policy, EscapePolicy.FORMULA_ALL)
        self.assertEqual(options.line_terminator, "\n")
        self.assertTrue(options.sections.enabled)
        self.assertEqual(options.sections.markers, {"h": Section.HEADER, "d": Section.DETAIL})
        self.assertEqual(options.sections.split_names, ("item_group", "item_no"))

    def test_starter_config_round_trips_to_defaults(self):
        self.assertEqual(options_from_dict(json.loads(starter_config())), ConvertOptions())
        self.assertEqual(options_to_dict(ConvertOptions())["sections"]["markers"], {"header": "header", "detail": "detail"})

    def test_yaml_is_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "csv-clip.yml"
            path.write_text("policy: formula-all\n", encoding="utf-8")
            with self.assertRaisesRegex(ConfigError, "YAML configs are not supported"):
                load_config(path)

    def test_missing_and_malformed_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaisesRegex(ConfigError, "Config not found"):
                load_config(Path(tmpdir) / "nope.json")
            broken = Path(tmpdir) / "broken.json"
            broken.write_text("{not json", encoding="utf-8")
            with self.assertRaisesRegex(ConfigError, "Could not read config"):
                load_config(broken)

    def test_unknown_keys_are_rejected(self):
        with self.assertRaisesRegex(ConfigError, "Unknown config keys: delimiter"):
            options_from_dict({"delimiter": ";"})
        with self.assertRaisesRegex(ConfigError, "Unknown sections keys: column"):
            options_from_dict({"sections": {"column": "code"}})

    def test_invalid_values_are_reported_as_config_errors(self):
        for payload in (
            {"policy": "sometimes"},
            {"reader": "fast"},
            {"sections": {"separator": ""}},
            {"sections": {"markers": {"x": "footer"}}},
            {"sections": []},
            [],
        ):
            with self.subTest(payload=payload):
                with self.assertRaises(ConfigError):
                    options_from_dict(payload)


if __name__ == "__main__":
    unittest.main()
