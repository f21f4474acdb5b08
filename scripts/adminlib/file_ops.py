from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

from .errors import ExportError
from .logging_utils import get_logger

logger = get_logger("adminkit.files")


def ensure_directory(path: Path | str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def write_text(path: Path | str, data: str) -> None:
    path = Path(path)
    ensure_directory(path.parent)
    path.write_text(data, encoding="utf-8")


def read_csv_rows(path: Path | str) -> list[dict[str, str]]:
    """Read a CSV with a header row into a list of dicts.

    The file is opened directly so a file that disappeared since it was last
    checked raises ``FileNotFoundError`` here.
    """
    with open(path, newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        return [dict(row) for row in reader]


def collect_columns(rows: Iterable[Mapping]) -> list[str]:
    """Union of the row keys, in the order they were first seen."""
    columns: dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(str(key), None)
    return list(columns)


def _cell(value) -> str:
    if value is None:
        return ""
    return str(value)


def export_csv(
    rows: Sequence[Mapping],
    path: Path | str,
    columns: Optional[Sequence[str]] = None,
) -> Path:
    """Write ``rows`` to ``path`` as CSV, always including the header row."""
    out_path = Path(path)
    header = list(columns) if columns is not None else collect_columns(rows)
    try:
        ensure_directory(out_path.parent)
        with open(out_path, mode="w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerow(header)
            for row in rows:
                writer.writerow([_cell(row.get(column)) for column in header])
    except OSError as exc:
        raise ExportError(f"Failed to write CSV to {out_path}: {exc}") from exc

    logger.info("Exported %d row(s) to %s", len(rows), out_path)
    return out_path
