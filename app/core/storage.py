from pathlib import Path

from starlette.concurrency import run_in_threadpool

from app.core.config import settings


class ReportStorage:
    """Local bucket for medical report files, keyed by relative path."""

    def __init__(self, root: str | None = None):
        self.root = Path(root or settings.REPORTS_STORAGE_DIR)

    def _resolve(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Invalid storage key: {key}")
        return path

    def _write(self, key: str, data: bytes):
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def _read(self, key: str) -> bytes:
        return self._resolve(key).read_bytes()

    async def upload(self, key: str, data: bytes):
        await run_in_threadpool(self._write, key, data)

    async def download(self, key: str) -> bytes:
        return await run_in_threadpool(self._read, key)


report_storage = ReportStorage()
