from typing import Dict, Optional

from .validation import format_row_error

UNIQUE_FIELD = "reservation_id"


class DuplicateKeyTracker:
    """Remembers which reservation ids a file has already used, and where."""

    def __init__(self) -> None:
        self._first_seen: Dict[str, int] = {}

    def check(self, reservation_id: Optional[str], row_number: int) -> Optional[str]:
        if reservation_id is None or not reservation_id.strip():
            return None
        key = reservation_id.strip()
        first_row = self._first_seen.get(key)
        if first_row is None:
            self._first_seen[key] = row_number
            return None
        return format_row_error(
            f'Field {UNIQUE_FIELD} with value "{key}" must be unique but appears '
            f"multiple times in the file (first seen in row {first_row}). "
            f"Ensure that each value in the field {UNIQUE_FIELD} is unique before uploading the file.",
            row_number,
        )

    def __len__(self) -> int:
        return len(self._first_seen)
