"""Exercise manifest building for exercise-manifest.

A manifest is a list of ExerciseEntry records, one per exercise. Rows come
from one of three sources, chosen per build:

1. bulk: one remote CSV (DATA_SOURCE_URL) grouped by its "exercise" column
2. folder: one Google Sheet per exercise in a Drive folder (GDRIVE_FOLDER_ID)
3. local: the *.csv files in the public directory

A failing remote source falls back to the local files for that build only.
"""

import asyncio
import re
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from pathlib import Path

import httpx

from cache import TTLCache, monotonic_ms
from config import Config
from csv_rows import extract_label_units, group_by_exercise, parse_csv
from drive import RemoteFileEntry, export_url, list_folder, resolve_csv
from errors import LocalIoError, ManifestError, UpstreamError
from fetcher import fetch_text
from logging_setup import get_logger

# File name reported for bulk entries; the raw CSV is served at /data.csv
BULK_FILE_NAME = "data.csv"

logger = get_logger()


@dataclass
class ExerciseEntry:
    key: str
    file: str
    url: str
    label: str | None = None
    units: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def exercise_key(entry: RemoteFileEntry) -> str:
    """Manifest key for a Drive file: lowercased name, whitespace runs as '_'."""
    if not entry.name:
        return entry.id
    return re.sub(r"\s+", "_", entry.name.lower())


def _list_csv_files(directory: Path) -> list[Path]:
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.name.lower().endswith(".csv")),
        key=lambda p: p.name,
    )


class ManifestBuilder:
    """Builds exercise manifests and caches them.

    Owns two independent caches sharing the configured TTL: one for the
    finished manifest and one for the raw bulk CSV text.
    """

    def __init__(
        self,
        config: Config,
        client: httpx.AsyncClient,
        clock: Callable[[], float] = monotonic_ms,
    ):
        self.config = config
        self.client = client
        self.manifest_cache: TTLCache[list[ExerciseEntry]] = TTLCache(
            config.cache_ttl_ms, clock, name="manifest"
        )
        self.csv_cache: TTLCache[str] = TTLCache(config.cache_ttl_ms, clock, name="bulk csv")

    async def build_manifest(self) -> list[ExerciseEntry]:
        """Return the exercise manifest, rebuilding it when the cache is stale."""
        return await self.manifest_cache.get_or_build(self._build)

    async def fetch_bulk_csv(self) -> str:
        """Return the raw bulk CSV text, refetching it when the cache is stale.

        Raises:
            UpstreamError: If no data source is configured or it cannot be fetched.
        """
        url = self.config.data_source_url
        if not url:
            raise UpstreamError("DATA_SOURCE_URL is not configured")

        async def fetch() -> str:
            logger.debug("Fetching bulk CSV from %s", url)
            return await fetch_text(self.client, url, timeout=self.config.fetch_timeout)

        return await self.csv_cache.get_or_build(fetch)

    async def _build(self) -> list[ExerciseEntry]:
        if self.config.bulk_enabled:
            entries, error = await self._attempt(self.build_from_bulk)
            if error is None:
                return entries
            logger.warning("Bulk data source failed, falling back to local files: %s", error)
        elif self.config.folder_enabled:
            entries, error = await self._attempt(self.build_from_folder)
            if error is None:
                return entries
            logger.warning("Drive folder failed, falling back to local files: %s", error)

        return await self.build_from_local()

    async def _attempt(
        self, strategy: Callable[[], Awaitable[list[ExerciseEntry]]]
    ) -> tuple[list[ExerciseEntry] | None, ManifestError | None]:
        """Run a remote strategy, returning (entries, None) or (None, error)."""
        try:
            return await strategy(), None
        except ManifestError as e:
            return None, e

    async def build_from_bulk(self) -> list[ExerciseEntry]:
        """One entry per distinct exercise value in the bulk CSV."""
        rows = parse_csv(await self.fetch_bulk_csv())
        entries = []
        for key, group in group_by_exercise(rows).items():
            label, units = extract_label_units(group)
            entries.append(
                ExerciseEntry(
                    key=key,
                    file=BULK_FILE_NAME,
                    url=self.config.data_source_url,
                    label=label,
                    units=units,
                )
            )
        logger.debug("Built %d entries from bulk CSV", len(entries))
        return entries

    async def build_from_folder(self) -> list[ExerciseEntry]:
        """One entry per spreadsheet in the Drive folder.

        Files that cannot be exported or parsed are skipped.
        """
        files = await list_folder(
            self.client,
            self.config.gdrive_folder_id,
            self.config.gdrive_api_key,
            timeout=self.config.fetch_timeout,
        )

        entries = []
        for remote in files:
            if remote.is_folder:
                logger.debug("Skipping subfolder %s", remote.name)
                continue
            try:
                text = await resolve_csv(self.client, remote.id, timeout=self.config.fetch_timeout)
                rows = parse_csv(text)
            except ManifestError as e:
                logger.warning("Skipping Drive file %s (%s): %s", remote.name, remote.id, e)
                continue

            label, units = extract_label_units(rows)
            entries.append(
                ExerciseEntry(
                    key=exercise_key(remote),
                    file=f"{remote.id}.csv",
                    url=export_url(remote.id),
                    label=label,
                    units=units,
                )
            )
        logger.debug("Built %d entries from Drive folder", len(entries))
        return entries

    async def build_from_local(self) -> list[ExerciseEntry]:
        """One entry per *.csv file in the public directory.

        Raises:
            LocalIoError: If the public directory cannot be listed.
        """
        directory = self.config.public_dir
        try:
            paths = await asyncio.to_thread(_list_csv_files, directory)
        except OSError as e:
            raise LocalIoError(f"Cannot list {directory}: {e}") from e

        entries = []
        for path in paths:
            try:
                text = await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
                rows = parse_csv(text)
            except OSError as e:
                logger.warning("Skipping %s: cannot read file: %s", path.name, e)
                continue
            except ManifestError as e:
                logger.warning("Skipping %s: %s", path.name, e)
                continue

            label, units = extract_label_units(rows)
            entries.append(
                ExerciseEntry(
                    key=path.stem,
                    file=path.name,
                    url=f"/{path.name}",
                    label=label,
                    units=units,
                )
            )
        logger.debug("Built %d entries from %s", len(entries), directory)
        return entries
