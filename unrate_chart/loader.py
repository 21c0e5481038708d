from __future__ import annotations

import asyncio
import csv
from dataclasses import dataclass
import io
import logging
from pathlib import Path
from typing import Callable
import urllib.request

from unrate_chart.errors import ChartLoadError

LOGGER = logging.getLogger(__name__)

Row = dict[str, str]
LoadCallback = Callable[[Exception | None, "list[Row] | None"], None]

DEFAULT_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one dataset fetch: either rows or the error that stopped it."""

    source: str
    rows: tuple[Row, ...] | None = None
    error: Exception | None = None

    def __post_init__(self) -> None:
        if (self.rows is None) == (self.error is None):
            raise ValueError("LoadResult needs exactly one of rows/error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> list[Row]:
        if self.error is not None:
            raise ChartLoadError(f"failed to load dataset {self.source}: {self.error}") from self.error
        assert self.rows is not None
        return list(self.rows)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://", "file://"))


def _read_text(source: str | Path, timeout_s: float) -> str:
    text_source = str(source)
    if _is_url(text_source):
        with urllib.request.urlopen(text_source, timeout=timeout_s) as resp:
            charset = resp.headers.get_content_charset() or "utf-8"
            if charset.lower().replace("_", "-") in ("utf-8", "utf8"):
                charset = "utf-8-sig"
            return resp.read().decode(charset)
    return Path(source).read_text(encoding="utf-8-sig")


def parse_rows(text: str) -> list[Row]:
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise ValueError("csv has no header row")
    return [dict(row) for row in reader]


def read_rows(source: str | Path, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> list[Row]:
    text = _read_text(source, timeout_s)
    rows = parse_rows(text)
    LOGGER.info("loaded %d rows from %s", len(rows), source)
    return rows


def fetch(source: str | Path, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> LoadResult:
    try:
        rows = read_rows(source, timeout_s=timeout_s)
    except (OSError, csv.Error, ValueError) as exc:
        LOGGER.error("dataset load failed for %s: %s", source, exc)
        return LoadResult(source=str(source), error=exc)
    return LoadResult(source=str(source), rows=tuple(rows))


def load_dataset(source: str | Path, callback: LoadCallback, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
    """Fetch ``source`` and invoke ``callback(error, rows)`` exactly once."""

    result = fetch(source, timeout_s=timeout_s)
    if result.error is not None:
        callback(result.error, None)
        return
    callback(None, list(result.rows or ()))


async def load_dataset_async(source: str | Path, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> LoadResult:
    return await asyncio.to_thread(fetch, source, timeout_s=timeout_s)
