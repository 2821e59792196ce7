"""
CSV reading for claim exports.
Turns raw CSV text into header-keyed rows without interpreting values.
"""

import io
import logging
from importlib import resources

import pandas as pd

logger = logging.getLogger(__name__)

RawRow = dict[str, str | int | float | None]


def parse_csv(csv_text: str) -> list[RawRow]:
    """
    Parse CSV text into one dictionary per data line.

    Every cell is read as text; blank lines and rows whose cells are all
    empty are skipped. Interpretation (dates, costs) is left to the cleaner.

    Args:
        csv_text: Full CSV document with a header line

    Returns:
        List of rows keyed by the original header names
    """
    if not csv_text or not csv_text.strip():
        return []

    text = csv_text.lstrip("\ufeff")
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="warn",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        logger.warning("CSV parse failed: %s", exc)
        return []

    frame.columns = [str(column).strip() for column in frame.columns]
    non_empty = frame.apply(lambda row: any(str(cell).strip() for cell in row), axis=1)
    rows = frame[non_empty] if len(frame) else frame
    return rows.to_dict(orient="records")


def read_csv_file(path: str) -> list[RawRow]:
    """Read a CSV file (UTF-8, BOM tolerated) into raw rows."""
    with open(path, encoding="utf-8-sig") as handle:
        return parse_csv(handle.read())


def sample_csv_text() -> str:
    """Return the bundled sample claim export."""
    return (
        resources.files("warranty_engine.data")
        .joinpath("sample_claims.csv")
        .read_text(encoding="utf-8")
    )
