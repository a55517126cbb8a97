"""Google Drive folder listing and spreadsheet CSV export."""

from dataclasses import dataclass

import httpx

from errors import MissingCredential, ParseError, UpstreamError
from fetcher import DEFAULT_TIMEOUT, fetch_json, fetch_text
from logging_setup import get_logger

FILES_API_URL = "https://www.googleapis.com/drive/v3/files"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
PAGE_SIZE = 1000

logger = get_logger()


@dataclass
class RemoteFileEntry:
    id: str
    name: str
    mime_type: str

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE


def export_url(file_id: str) -> str:
    """Spreadsheet export URL (first sheet as CSV)."""
    return f"https://docs.google.com/spreadsheets/d/{file_id}/export?format=csv&gid=0"


def download_url(file_id: str) -> str:
    """Direct download URL, used when the spreadsheet export fails."""
    return f"https://drive.google.com/uc?export=download&id={file_id}"


async def list_folder(
    client: httpx.AsyncClient,
    folder_id: str,
    api_key: str | None,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[RemoteFileEntry]:
    """List all non-trashed files in a Drive folder.

    Pages are requested one after another, following nextPageToken until
    the API stops returning one.

    Raises:
        MissingCredential: If no API key is configured.
        UpstreamError: If any page request fails.
    """
    if not api_key:
        raise MissingCredential("GDRIVE_API_KEY is required to list a Drive folder")

    entries: list[RemoteFileEntry] = []
    page_token = None
    while True:
        params = {
            "q": f"'{folder_id}' in parents and trashed=false",
            "fields": "nextPageToken, files(id, name, mimeType)",
            "pageSize": PAGE_SIZE,
            "key": api_key,
        }
        if page_token:
            params["pageToken"] = page_token

        data = await fetch_json(client, FILES_API_URL, params=params, timeout=timeout)
        if not isinstance(data, dict):
            raise ParseError(f"Unexpected folder listing for {folder_id}: {data!r}")
        files = data.get("files") or []
        if not isinstance(files, list):
            raise ParseError(f"Unexpected files value for {folder_id}: {files!r}")
        for item in files:
            if not isinstance(item, dict):
                continue
            entries.append(
                RemoteFileEntry(
                    id=item.get("id", ""),
                    name=item.get("name") or "",
                    mime_type=item.get("mimeType") or "",
                )
            )

        page_token = data.get("nextPageToken")
        if not page_token:
            break

    logger.debug("Listed %d entries in folder %s", len(entries), folder_id)
    return entries


async def resolve_csv(
    client: httpx.AsyncClient,
    file_id: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Fetch a Drive file as CSV text.

    Tries the spreadsheet export first, then the direct download URL. When
    both fail the export error is raised.
    """
    try:
        return await fetch_text(client, export_url(file_id), timeout=timeout)
    except UpstreamError as primary:
        try:
            return await fetch_text(client, download_url(file_id), timeout=timeout)
        except UpstreamError as fallback:
            logger.debug("Download fallback for %s also failed: %s", file_id, fallback)
            raise primary
