import asyncio
from pathlib import Path
from typing import List
from ..exceptions import ReportNotFoundError

class ReportWriter:
    def __init__(self, reports_dir: str | Path):
        self.reports_dir = Path(reports_dir)

    def path_for(self, task_id: str) -> Path:
        return self.reports_dir / f"{task_id}.txt"

    async def write(self, task_id: str, messages: List[str]) -> str:
        path = self.path_for(task_id)
        await asyncio.to_thread(self._write, path, messages)
        return str(path)

    async def read(self, task_id: str) -> str:
        path = self.path_for(task_id)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            raise ReportNotFoundError(task_id) from None

    def _write(self, path: Path, messages: List[str]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(messages) + "\n", encoding="utf-8")
