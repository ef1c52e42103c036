import pytest

from app.exceptions import ReportNotFoundError
from app.services.report import ReportWriter
from app.utils.batching import chunked


@pytest.mark.asyncio
async def test_write_creates_directory_and_keeps_order(tmp_path):
    writer = ReportWriter(tmp_path / "nested" / "reports")
    messages = ["Row 2: a", "Row 3: b", "Row 10: c"]

    path = await writer.write("t-1", messages)

    assert path == str(tmp_path / "nested" / "reports" / "t-1.txt")
    assert (await writer.read("t-1")).splitlines() == messages


@pytest.mark.asyncio
async def test_read_missing_report(tmp_path):
    with pytest.raises(ReportNotFoundError):
        await ReportWriter(tmp_path).read("t-1")


def test_chunked():
    assert list(chunked(list(range(7)), 3)) == [[0, 1, 2], [3, 4, 5], [6]]
    assert list(chunked([], 3)) == []
    with pytest.raises(ValueError):
        list(chunked([1], 0))
