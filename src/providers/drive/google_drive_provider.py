"""Google Drive v3 provider over the REST API.

Implements :class:`IDriveProvider` with plain HTTP calls through an injected
``httpx.AsyncClient``.  Authentication is a bearer access token (service
account or OAuth, minted outside this process) and/or an API key for
publicly shared folders.  Shared drives are included in every request.
"""

from __future__ import annotations

from typing import Any

import httpx

from src.interfaces.drive_provider import FOLDER_MIME_TYPE, IDriveProvider
from src.models.documents import DriveFile
from src.utils.errors import ConfigurationError, ProviderUnavailableError
from src.utils.logging import get_logger

_FILES_URL = "https://www.googleapis.com/drive/v3/files"
_LIST_FIELDS = "nextPageToken, files(id, name, mimeType, modifiedTime, size, webViewLink)"
_PAGE_SIZE = 100


class GoogleDriveProvider(IDriveProvider):
    """Read-only Google Drive access.

    The ``httpx.AsyncClient`` is injected for testability and connection
    pooling; the caller owns its lifecycle.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        access_token: str = "",
        api_key: str = "",
    ) -> None:
        if not access_token and not api_key:
            raise ConfigurationError(
                message="Google Drive needs GOOGLE_ACCESS_TOKEN or GOOGLE_API_KEY",
                provider_name=self.get_provider_name(),
            )
        self._http = http_client
        self._access_token = access_token
        self._api_key = api_key
        self._logger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        if self._access_token:
            return {"Authorization": f"Bearer {self._access_token}"}
        return {}

    def _params(self, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {k: v for k, v in extra.items() if v is not None}
        if self._api_key:
            params["key"] = self._api_key
        return params

    async def _get(self, url: str, params: dict[str, Any], action: str) -> httpx.Response:
        try:
            response = await self._http.get(url, params=params, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ProviderUnavailableError(
                message=f"Drive {action} failed: HTTP {exc.response.status_code}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                message=f"Drive {action} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return response

    @staticmethod
    def _to_drive_file(item: dict[str, Any]) -> DriveFile:
        size = item.get("size")
        return DriveFile(
            id=item["id"],
            name=item.get("name", ""),
            mime_type=item.get("mimeType", ""),
            modified_time=item.get("modifiedTime", ""),
            size=int(size) if size is not None else None,
            web_view_link=item.get("webViewLink"),
        )

    async def _list_children(self, folder_id: str) -> list[DriveFile]:
        """List the direct children of *folder_id*, following pagination."""
        files: list[DriveFile] = []
        page_token: str | None = None

        while True:
            params = self._params(
                q=f"'{folder_id}' in parents and trashed = false",
                fields=_LIST_FIELDS,
                pageSize=_PAGE_SIZE,
                pageToken=page_token,
                supportsAllDrives="true",
                includeItemsFromAllDrives="true",
            )
            response = await self._get(_FILES_URL, params, action="list")
            payload = response.json()
            files.extend(self._to_drive_file(item) for item in payload.get("files", []))

            page_token = payload.get("nextPageToken")
            if not page_token:
                break

        return files

    # -- IDriveProvider implementation -----------------------------------------

    async def list_files_recursive(self, folder_id: str) -> list[DriveFile]:
        all_files: list[DriveFile] = []
        for child in await self._list_children(folder_id):
            if child.mime_type == FOLDER_MIME_TYPE:
                all_files.extend(await self.list_files_recursive(child.id))
            else:
                all_files.append(child)

        self._logger.debug("drive_folder_listed", folder_id=folder_id, files=len(all_files))
        return all_files

    async def download(self, file_id: str) -> bytes:
        response = await self._get(
            f"{_FILES_URL}/{file_id}",
            self._params(alt="media", supportsAllDrives="true"),
            action="download",
        )
        return response.content

    async def export_as_plain_text(self, file_id: str) -> str:
        response = await self._get(
            f"{_FILES_URL}/{file_id}/export",
            self._params(mimeType="text/plain"),
            action="export",
        )
        return response.text

    def get_provider_name(self) -> str:
        return "google-drive"
