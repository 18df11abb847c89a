"""Local directory tree standing in for the shared drive.

Used for offline runs and tests.  Each configured folder id maps to a
subdirectory of ``root`` (by default a directory named after the id; the
CLI maps ids to the folder labels instead).  File ids are POSIX paths
relative to ``root``, so they stay stable across runs, and the modification
time is reported in the same ISO-8601 form Drive uses.
"""

from __future__ import annotations

import asyncio
import mimetypes
from datetime import datetime, timezone
from pathlib import Path

from src.interfaces.drive_provider import IDriveProvider
from src.models.documents import DriveFile
from src.utils.errors import ProviderUnavailableError
from src.utils.logging import get_logger

# Office formats are not in every platform's mimetypes table.
_EXTENSION_MIME_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
    ".txt": "text/plain",
    ".md": "text/plain",
    ".csv": "text/csv",
    ".rtf": "application/rtf",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def guess_mime_type(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in _EXTENSION_MIME_TYPES:
        return _EXTENSION_MIME_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


def _format_mtime(timestamp: float) -> str:
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class LocalDriveProvider(IDriveProvider):
    """Serve files from a directory tree through the drive interface."""

    def __init__(self, root: str | Path, folder_paths: dict[str, str] | None = None) -> None:
        self._root = Path(root)
        self._folder_paths = dict(folder_paths or {})
        self._logger = get_logger(__name__)

    def _folder_dir(self, folder_id: str) -> Path:
        return self._root / self._folder_paths.get(folder_id, folder_id)

    def _file_path(self, file_id: str) -> Path:
        path = (self._root / file_id).resolve()
        if self._root.resolve() not in path.parents or not path.is_file():
            raise ProviderUnavailableError(
                message=f"No such file: {file_id}",
                provider_name=self.get_provider_name(),
            )
        return path

    def _scan(self, folder_id: str) -> list[DriveFile]:
        folder = self._folder_dir(folder_id)
        if not folder.is_dir():
            raise ProviderUnavailableError(
                message=f"Folder not found: {folder}",
                provider_name=self.get_provider_name(),
            )

        files: list[DriveFile] = []
        for path in sorted(folder.rglob("*")):
            if not path.is_file() or path.name.startswith("."):
                continue
            stat = path.stat()
            files.append(
                DriveFile(
                    id=path.relative_to(self._root).as_posix(),
                    name=path.name,
                    mime_type=guess_mime_type(path),
                    modified_time=_format_mtime(stat.st_mtime),
                    size=stat.st_size,
                    web_view_link=path.resolve().as_uri(),
                )
            )
        return files

    # -- IDriveProvider implementation -----------------------------------------

    async def list_files_recursive(self, folder_id: str) -> list[DriveFile]:
        files = await asyncio.to_thread(self._scan, folder_id)
        self._logger.debug("local_folder_listed", folder_id=folder_id, files=len(files))
        return files

    async def download(self, file_id: str) -> bytes:
        return await asyncio.to_thread(self._file_path(file_id).read_bytes)

    async def export_as_plain_text(self, file_id: str) -> str:
        data = await self.download(file_id)
        return data.decode("utf-8", errors="replace")

    def get_provider_name(self) -> str:
        return "local-drive"
