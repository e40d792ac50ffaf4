"""File repository rooted at a directory on disk."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath

from nutrition_journal.domain.storage import StoredFile
from nutrition_journal.services.storage import FileRepository


@dataclass
class LocalFileRepository(FileRepository):
    """Maps slash-separated relative paths onto files below ``root``."""

    root: Path

    async def read_text(self, path: str) -> str | None:
        return await asyncio.to_thread(self._read, path)

    async def write_text(self, path: str, content: str) -> None:
        await asyncio.to_thread(self._write, path, content)

    async def delete(self, path: str) -> None:
        await asyncio.to_thread(self._resolve(path).unlink, missing_ok=True)

    async def list_files(self, folder: str) -> list[StoredFile]:
        return await asyncio.to_thread(self._list, folder)

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Path escapes the storage root: {path}")
        return self.root.joinpath(*relative.parts)

    def _read(self, path: str) -> str | None:
        target = self._resolve(path)
        if not target.is_file():
            return None
        return target.read_text(encoding="utf8")

    def _write(self, path: str, content: str) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        temp_path = target.with_name(target.name + ".tmp")
        temp_path.write_text(content, encoding="utf8")
        temp_path.replace(target)

    def _list(self, folder: str) -> list[StoredFile]:
        base = self._resolve(folder)
        if not base.is_dir():
            return []
        files: list[StoredFile] = []
        for candidate in base.rglob("*"):
            if not candidate.is_file():
                continue
            stat = candidate.stat()
            files.append(
                StoredFile(
                    path=candidate.relative_to(self.root).as_posix(),
                    created_at=datetime.fromtimestamp(
                        stat.st_mtime_ns / 1_000_000_000, tz=UTC
                    ),
                )
            )
        return files
