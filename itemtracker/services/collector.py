"""Snapshot collection across every source file of one save."""

import asyncio
from pathlib import Path

from itemtracker.config import settings
from itemtracker.logging import get_logger
from itemtracker.models import SaveSnapshot
from itemtracker.services.nbt_reader import TagFormatError, read_nbt_file
from itemtracker.services.scanner import ContainerScanner

logger = get_logger('services.collector')


class SnapshotCollector:
    """Read the level file and per-player files of a save and union their items."""

    def __init__(
        self,
        scanner: ContainerScanner | None = None,
        primary_file: str | None = None,
        player_dir: str | None = None,
        player_extension: str | None = None,
        read_timeout: float | None = None,
    ):
        self.scanner = scanner or ContainerScanner()
        self.primary_file = primary_file or settings.PRIMARY_SAVE_FILE
        self.player_dir = player_dir or settings.PLAYER_DATA_DIR
        self.player_extension = player_extension or settings.PLAYER_DATA_EXTENSION
        self.read_timeout = settings.FILE_READ_TIMEOUT_SECONDS if read_timeout is None else read_timeout

    def source_files(self, save_dir: Path) -> list[Path]:
        """
        List the files that make up one save's inventory state.

        :param save_dir: Save root directory
        :type save_dir: Path
        :return: Primary file (if present) followed by per-player files
        :rtype: list[Path]
        """
        files: list[Path] = []
        primary = save_dir / self.primary_file
        if primary.is_file():
            files.append(primary)

        player_dir = save_dir / self.player_dir
        if player_dir.is_dir():
            try:
                files.extend(
                    sorted(
                        path for path in player_dir.iterdir()
                        if path.is_file() and path.name.endswith(self.player_extension)
                    )
                )
            except OSError as e:
                logger.warning(f"Could not list {player_dir}: {e}")
        return files

    def _read_items(self, path: Path) -> set[str] | None:
        try:
            root = read_nbt_file(path)
        except (OSError, EOFError, TagFormatError, RecursionError) as e:
            logger.warning(f"Skipping unreadable file {path}: {e}")
            return None
        return self.scanner.extract_items(root)

    def scan_file(self, path: Path) -> set[str]:
        """
        Scan a single file, returning an empty set when it cannot be read.

        The game may be writing the file while we read it; such failures are
        skipped for this cycle.
        """
        return self._read_items(path) or set()

    async def _scan_file_bounded(self, path: Path) -> set[str] | None:
        try:
            return await asyncio.wait_for(asyncio.to_thread(self._read_items, path), timeout=self.read_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Reading {path} took longer than {self.read_timeout:.1f}s, skipping this cycle")
            return None

    async def collect(self, save_dir: Path | str) -> SaveSnapshot:
        """
        Scan every source file of a save.

        :param save_dir: Save root directory
        :type save_dir: Path | str
        :return: Union of items found plus per-file bookkeeping
        :rtype: SaveSnapshot
        """
        save_dir = Path(save_dir)
        snapshot = SaveSnapshot(save_path=str(save_dir))
        if not save_dir.is_dir():
            logger.debug(f"Save directory {save_dir} does not exist, empty snapshot")
            return snapshot

        for path in self.source_files(save_dir):
            items = await self._scan_file_bounded(path)
            if items is None:
                snapshot.skipped_files.append(str(path))
                continue
            snapshot.items |= items
            snapshot.scanned_files.append(str(path))
            try:
                modified_at = int(path.stat().st_mtime * 1000)
            except OSError:
                continue
            if snapshot.latest_modified_at is None or modified_at > snapshot.latest_modified_at:
                snapshot.latest_modified_at = modified_at

        return snapshot

    async def collect_snapshot(self, save_dir: Path | str) -> set[str]:
        """Items currently present anywhere in the save."""
        snapshot = await self.collect(save_dir)
        return snapshot.items
