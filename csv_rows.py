"""CSV parsing and exercise metadata extraction."""

import csv
import io
from collections.abc import Iterable

from errors import ParseError

CsvRow = dict[str, str]


def parse_csv(text: str) -> list[CsvRow]:
    """Parse CSV text into rows keyed by the header row.

    Header names are stripped of surrounding whitespace. Blank lines are
    skipped and missing cells read as empty strings.

    Raises:
        ParseError: If the csv module rejects the input.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")), restval="")
    try:
        if reader.fieldnames:
            reader.fieldnames = [(name or "").strip() for name in reader.fieldnames]
        rows = []
        for row in reader:
            # Extra cells beyond the header land under the None key
            row.pop(None, None)
            rows.append({key: value or "" for key, value in row.items()})
    except csv.Error as e:
        raise ParseError(f"Malformed CSV: {e}") from e
    return rows


def extract_label_units(rows: Iterable[CsvRow]) -> tuple[str | None, str | None]:
    """Return the first non-blank label and the first non-blank units.

    Each column is scanned independently, so label and units may come from
    different rows. Values are returned trimmed; None when never found.
    """
    label = None
    units = None
    for row in rows:
        if label is None:
            label = (row.get("label") or "").strip() or None
        if units is None:
            units = (row.get("units") or "").strip() or None
        if label is not None and units is not None:
            break
    return label, units


def group_by_exercise(rows: Iterable[CsvRow], column: str = "exercise") -> dict[str, list[CsvRow]]:
    """Group rows by the trimmed value of the exercise column.

    Rows with an empty or missing value are dropped. Groups keep the order in
    which each value first appears.
    """
    groups: dict[str, list[CsvRow]] = {}
    for row in rows:
        key = (row.get(column) or "").strip()
        if not key:
            continue
        groups.setdefault(key, []).append(row)
    return groups
