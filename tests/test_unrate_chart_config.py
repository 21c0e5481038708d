from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from unrate_chart.config import DEFAULT_CONFIG, config_from_mapping, load_config, validate_color
from unrate_chart.errors import ChartConfigError
from unrate_chart.layout import Margin
from unrate_chart.timeparse import parse_time


class ChartConfigTests(unittest.TestCase):
    def test_defaults_match_fixed_chart_constants(self) -> None:
        cfg = DEFAULT_CONFIG
        self.assertEqual(cfg.data_source, "data/fredgraph.csv")
        self.assertEqual(cfg.selector, ".chart")
        self.assertEqual(cfg.margin, Margin(top=30, right=140, bottom=40, left=50))
        self.assertEqual([s.identifier for s in cfg.series], ["UNRATE", "MOUR", "CLMUR"])
        self.assertEqual(cfg.value_domain, (0.0, 10.0))
        self.assertEqual(cfg.time_domain, (parse_time("2000-01-01"), parse_time("2019-01-01")))
        self.assertEqual(len(cfg.x_tick_values), 3)
        self.assertEqual((cfg.x_tick_size, cfg.y_tick_count, cfg.dot_radius, cfg.label_offset), (20.0, 5, 4.0, 10.0))

    def test_load_toml_overrides(self) -> None:
        text = (
            "[chart]\n"
            'data_source = "other.csv"\n'
            "width = 1200\n"
            'background = "#000000"\n'
            "\n"
            "[margin]\n"
            "right = 200\n"
            "\n"
            "[domain]\n"
            "value = [0, 12]\n"
            "time = [1990-01-01, 2020-01-01]\n"
            "\n"
            "[[series]]\n"
            'id = "UNRATE"\n'
            'name = "Nation"\n'
            'color = "#ffffff"\n'
            "\n"
            "[[recessions]]\n"
            'start = "2020-02-01"\n'
            'end = "2020-04-30"\n'
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "chart.toml"
            path.write_text(text, encoding="utf-8")
            cfg = load_config(path)
        self.assertEqual(cfg.data_source, "other.csv")
        self.assertEqual(cfg.container_width, 1200)
        self.assertEqual(cfg.container_height, DEFAULT_CONFIG.container_height)
        self.assertEqual(cfg.margin, Margin(top=30, right=200, bottom=40, left=50))
        self.assertEqual(cfg.value_domain, (0.0, 12.0))
        self.assertEqual(cfg.time_domain[0], parse_time("1990-01-01"))
        self.assertEqual(cfg.colors, {"UNRATE": "#ffffff"})
        self.assertEqual(cfg.display_names, {"UNRATE": "Nation"})
        self.assertEqual(len(cfg.recessions), 1)
        self.assertEqual(cfg.recessions[0].end, parse_time("2020-04-30"))

    def test_shipped_example_matches_defaults(self) -> None:
        path = Path(__file__).resolve().parent.parent / "data" / "chart.example.toml"
        cfg = load_config(path)
        self.assertEqual(cfg.series, DEFAULT_CONFIG.series)
        self.assertEqual(cfg.margin, DEFAULT_CONFIG.margin)
        self.assertEqual(cfg.recessions, DEFAULT_CONFIG.recessions)
        self.assertEqual((cfg.container_width, cfg.container_height), (960, 500))

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                load_config(Path(tmp) / "nope.toml")

    def test_invalid_toml(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.toml"
            path.write_text("[chart\n", encoding="utf-8")
            with self.assertRaises(ChartConfigError):
                load_config(path)

    def test_rejects_unknown_keys(self) -> None:
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"legend": {}})
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"chart": {"colour": "#fff"}})
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"margin": {"middle": 3}})

    def test_rejects_bad_values(self) -> None:
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"series": [{"id": "A", "name": "a", "color": "red"}]})
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"series": [{"id": "A", "name": "a"}]})
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"series": [
                {"id": "A", "name": "a", "color": "#111111"},
                {"id": "A", "name": "b", "color": "#222222"},
            ]})
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"recessions": [{"start": "2001-13-01", "end": "2001-11-30"}]})
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"chart": {"width": -1}})
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"domain": {"value": [0]}})
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"domain": {"value": [5, 5]}})
        with self.assertRaises(ChartConfigError):
            config_from_mapping({"domain": {"time": ["2000-01-01", "2000-01-01"]}})

    def test_validate_color(self) -> None:
        self.assertEqual(validate_color("#f58667", "c"), "#f58667")
        self.assertEqual(validate_color("#f5866780", "c"), "#f5866780")
        with self.assertRaises(ChartConfigError):
            validate_color("#fff", "c")
        with self.assertRaises(ValueError):
            validate_color(None, "c")


if __name__ == "__main__":
    unittest.main()
