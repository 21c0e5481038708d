from __future__ import annotations

import asyncio
from pathlib import Path
import tempfile
import unittest
from unittest import mock

from unrate_chart.chart import Chart, ChartPhase
from unrate_chart.config import ChartConfig
from unrate_chart.document import HostDocument
from unrate_chart.errors import ChartLoadError
from unrate_chart.loader import LoadResult, fetch, load_dataset, load_dataset_async, parse_rows, read_rows

CSV_TEXT = (
    "DATE,UNRATE,MOUR,CLMUR\n"
    "2000-01-01,4.0,3.5,3.0\n"
    "2000-02-01,4.1,,3.1\n"
    "2000-03-01,4.2,3.7,3.2\n"
)


class LoaderTests(unittest.TestCase):
    def test_read_rows_preserves_order_and_strings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "fredgraph.csv"
            path.write_text(CSV_TEXT, encoding="utf-8")
            rows = read_rows(path)
        self.assertEqual([r["DATE"] for r in rows], ["2000-01-01", "2000-02-01", "2000-03-01"])
        self.assertEqual(rows[1]["MOUR"], "")
        self.assertEqual(rows[2]["UNRATE"], "4.2")

    def test_parse_rows_requires_header(self) -> None:
        with self.assertRaises(ValueError):
            parse_rows("")

    def test_callback_invoked_once_with_rows(self) -> None:
        calls: list[tuple[object, object]] = []
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "fredgraph.csv"
            path.write_text(CSV_TEXT, encoding="utf-8")
            load_dataset(path, lambda error, rows: calls.append((error, rows)))
        self.assertEqual(len(calls), 1)
        error, rows = calls[0]
        self.assertIsNone(error)
        self.assertEqual(len(rows), 3)  # type: ignore[arg-type]

    def test_callback_invoked_once_with_error(self) -> None:
        calls: list[tuple[object, object]] = []
        with tempfile.TemporaryDirectory() as tmp:
            load_dataset(Path(tmp) / "missing.csv", lambda error, rows: calls.append((error, rows)))
        self.assertEqual(len(calls), 1)
        self.assertIsInstance(calls[0][0], FileNotFoundError)
        self.assertIsNone(calls[0][1])

    def test_load_result_is_a_union(self) -> None:
        with self.assertRaises(ValueError):
            LoadResult(source="x")
        with self.assertRaises(ValueError):
            LoadResult(source="x", rows=(), error=OSError("boom"))
        failed = LoadResult(source="x", error=OSError("boom"))
        self.assertFalse(failed.ok)
        with self.assertRaises(ChartLoadError) as ctx:
            failed.unwrap()
        self.assertIsInstance(ctx.exception.__cause__, OSError)

    def test_url_sources_go_through_urllib(self) -> None:
        response = mock.MagicMock()
        response.__enter__.return_value = response
        response.read.return_value = CSV_TEXT.encode("utf-8")
        response.headers.get_content_charset.return_value = "utf-8"
        with mock.patch("unrate_chart.loader.urllib.request.urlopen", return_value=response) as urlopen:
            result = fetch("https://example.invalid/fredgraph.csv")
        urlopen.assert_called_once()
        self.assertTrue(result.ok)
        self.assertEqual(len(result.unwrap()), 3)

    def test_url_source_strips_utf8_bom(self) -> None:
        response = mock.MagicMock()
        response.__enter__.return_value = response
        response.read.return_value = CSV_TEXT.encode("utf-8-sig")
        response.headers.get_content_charset.return_value = "utf-8"
        with mock.patch("unrate_chart.loader.urllib.request.urlopen", return_value=response):
            rows = fetch("https://example.invalid/fredgraph.csv").unwrap()
        self.assertEqual(list(rows[0])[0], "DATE")
        self.assertEqual(rows[0]["DATE"], "2000-01-01")

    def test_async_load(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "fredgraph.csv"
            path.write_text(CSV_TEXT, encoding="utf-8")
            result = asyncio.run(load_dataset_async(path))
        self.assertTrue(result.ok)
        self.assertEqual(len(result.unwrap()), 3)


class ChartStartTests(unittest.TestCase):
    def _chart(self, source: Path) -> tuple[Chart, HostDocument]:
        document = HostDocument()
        document.add_container(width=960, height=500)
        return Chart(document, ChartConfig(data_source=str(source))), document

    def test_start_renders_from_csv(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "fredgraph.csv"
            path.write_text(CSV_TEXT, encoding="utf-8")
            chart, _ = self._chart(path)
            chart.start()
        self.assertIs(chart.phase, ChartPhase.READY)
        self.assertEqual([len(s) for s in chart.series], [3, 3, 3])

    def test_load_failure_is_fatal_and_draws_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            chart, document = self._chart(Path(tmp) / "missing.csv")
            with self.assertRaises(ChartLoadError):
                chart.start()
        self.assertIs(chart.phase, ChartPhase.UNINITIALIZED)
        self.assertEqual(chart.series, ())
        container = document.query_selector(".chart")
        assert container is not None
        self.assertEqual(len(container.element), 0)

    def test_start_async(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "fredgraph.csv"
            path.write_text(CSV_TEXT, encoding="utf-8")
            chart, _ = self._chart(path)
            asyncio.run(chart.start_async())
        self.assertIs(chart.phase, ChartPhase.READY)

    def test_start_async_failure(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            chart, _ = self._chart(Path(tmp) / "missing.csv")
            with self.assertRaises(ChartLoadError):
                asyncio.run(chart.start_async())
        self.assertIs(chart.phase, ChartPhase.UNINITIALIZED)


if __name__ == "__main__":
    unittest.main()
