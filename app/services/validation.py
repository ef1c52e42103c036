"""Row validation and transformation for uploaded reservation sheets.

Every check is a pure function returning a ``Result``. ``validate_row``
runs all of them and reports every failure, not just the first one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from ..models import Reservation, ReservationStatus
from ..utils.result import Result

RawRow = Dict[str, Optional[str]]

DAY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")

STATUS_TRANSLATIONS: Dict[str, ReservationStatus] = {
    "oczekująca": ReservationStatus.PENDING,
    "anulowana": ReservationStatus.CANCELED,
    "zrealizowana": ReservationStatus.COMPLETED,
}


@dataclass
class RowOutcome:
    row_number: int
    reservation: Optional[Reservation] = None
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.reservation is not None and not self.errors


def format_row_error(message: str, row_number: int) -> str:
    return f"Row {row_number}: {message}"


def translate_status(token: Optional[str]) -> Optional[ReservationStatus]:
    if token is None:
        return None
    return STATUS_TRANSLATIONS.get(token.strip())


def check_required(field_name: str, value: Optional[str]) -> Result[str]:
    text = value.strip() if value is not None else ""
    if not text:
        return Result.fail(f"{field_name} should not be empty")
    return Result.ok(text)


def check_day(field_name: str, value: Optional[str]) -> Result[str]:
    present = check_required(field_name, value)
    if not present.is_success():
        return present
    text = present.data
    if not DAY_REGEX.match(text):
        return Result.fail(f"{field_name} must be in YYYY-MM-DD format")
    try:
        date.fromisoformat(text)
    except ValueError:
        return Result.fail(f"{field_name} must be a valid calendar date")
    return Result.ok(text)


def check_status(value: Optional[str]) -> Result[ReservationStatus]:
    present = check_required("status", value)
    if not present.is_success():
        return Result.fail(present.error)
    status = translate_status(present.data)
    if status is None:
        allowed = ", ".join(STATUS_TRANSLATIONS)
        return Result.fail(
            f'status has unrecognized value "{present.data}". Allowed values: {allowed}'
        )
    return Result.ok(status)


def check_stay_order(check_in: str, check_out: str) -> Result[None]:
    if date.fromisoformat(check_out) <= date.fromisoformat(check_in):
        return Result.fail("check_out_date must be after check_in_date")
    return Result.ok(None)


def validate_row(raw: RawRow, row_number: int) -> RowOutcome:
    reservation_id = check_required("reservation_id", raw.get("reservation_id"))
    guest_name = check_required("guest_name", raw.get("guest_name"))
    status = check_status(raw.get("status"))
    check_in = check_day("check_in_date", raw.get("check_in_date"))
    check_out = check_day("check_out_date", raw.get("check_out_date"))

    checks: List[Result] = [reservation_id, guest_name, status, check_in, check_out]
    if check_in.is_success() and check_out.is_success():
        checks.append(check_stay_order(check_in.data, check_out.data))

    errors = [format_row_error(c.error, row_number) for c in checks if not c.is_success()]
    if errors:
        return RowOutcome(row_number=row_number, errors=errors)

    return RowOutcome(
        row_number=row_number,
        reservation=Reservation(
            reservation_id=reservation_id.data,
            guest_name=guest_name.data,
            status=status.data,
            check_in_date=check_in.data,
            check_out_date=check_out.data,
        ),
    )
