from pathlib import Path
import sys

import fakeredis
import pytest
from openpyxl import Workbook

sys.path.append(str(Path(__file__).resolve().parents[1]))

HEADER = ["reservation_id", "guest_name", "status", "check_in_date", "check_out_date"]


@pytest.fixture
def redis_client():
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def make_workbook(tmp_path):
    """Write an .xlsx file whose first sheet holds ``header`` followed by ``rows``."""

    def _make(rows, header=HEADER, name="upload.xlsx", extra_sheet_rows=None):
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(header)
        for row in rows:
            sheet.append(row)
        if extra_sheet_rows is not None:
            other = workbook.create_sheet("other")
            for row in extra_sheet_rows:
                other.append(row)
        path = tmp_path / name
        workbook.save(path)
        return path

    return _make
