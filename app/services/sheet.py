"""Reading reservation rows out of the first sheet of an ``.xlsx`` upload."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple

from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook

from ..exceptions import HeaderMismatchError
from .validation import RawRow

EXPECTED_COLUMNS: Tuple[str, ...] = (
    "reservation_id",
    "guest_name",
    "status",
    "check_in_date",
    "check_out_date",
)

HEADER_ROW = 1
FIRST_DATA_ROW = 2


def cell_text(value: Any) -> Optional[str]:
    """Render a cell value the way it reads in the sheet, ``None`` for blanks."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value)
    return text if text.strip() else None


def validate_header(labels: Iterable[Optional[str]]) -> Dict[str, int]:
    """Map each expected column to its position, ignoring column order.

    Raises HeaderMismatchError when the labels are not exactly the expected set.
    """
    positions = [(index, label) for index, label in enumerate(labels) if label is not None]
    found = [label for _, label in positions]
    if len(set(found)) != len(found) or set(found) != set(EXPECTED_COLUMNS):
        raise HeaderMismatchError(EXPECTED_COLUMNS, found)
    return {label: index for index, label in positions}


def read_row(values: Sequence[Any], mapping: Dict[str, int]) -> RawRow:
    return {
        column: cell_text(values[index]) if index < len(values) else None
        for column, index in mapping.items()
    }


def is_row_empty(row: RawRow) -> bool:
    return all(value is None for value in row.values())


class ReservationSheet:
    def __init__(self, workbook: Workbook):
        self.workbook = workbook
        # only the first sheet carries reservations
        self.worksheet = workbook.worksheets[0]

    @classmethod
    def load(cls, path: str | Path) -> "ReservationSheet":
        return cls(load_workbook(filename=path, read_only=True, data_only=True))

    def close(self) -> None:
        # read-only workbooks keep the archive open
        self.workbook.close()

    def __enter__(self) -> "ReservationSheet":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def header_mapping(self) -> Dict[str, int]:
        header = next(
            self.worksheet.iter_rows(min_row=HEADER_ROW, max_row=HEADER_ROW, values_only=True),
            (),
        )
        labels = (cell_text(value) for value in header)
        return validate_header(label.strip() if label else None for label in labels)

    def rows(self, mapping: Dict[str, int]) -> Iterator[Tuple[int, RawRow]]:
        """Yield ``(row_number, row)`` pairs until the first empty row."""
        values_by_row = self.worksheet.iter_rows(min_row=FIRST_DATA_ROW, values_only=True)
        for row_number, values in enumerate(values_by_row, start=FIRST_DATA_ROW):
            row = read_row(values, mapping)
            if is_row_empty(row):
                return
            yield row_number, row
