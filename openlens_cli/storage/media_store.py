"""
Copies downloaded artifacts into the user's media library.
"""

import asyncio
import logging
import shutil
from pathlib import Path

from openlens_cli.core.sources import PermissionSource
from openlens_cli.exceptions import PermissionDenied, PersistenceError
from openlens_cli.models.job import LocalFile, PersistedAsset
from openlens_cli.utils.path import build_asset_filename, create_dir, unique_path

from .media_library import MediaLibrary

log = logging.getLogger(__name__)


class PersistenceSink:
    """
    Saves a downloaded file into the media directory and registers it.

    Permission is requested before anything else. On denial nothing is
    touched, including the downloaded file.
    """

    def __init__(
        self, permissions: PermissionSource, library: MediaLibrary, media_dir: Path
    ):
        self.permissions = permissions
        self.library = library
        self.media_dir = Path(media_dir).expanduser()

    def _copy_sync(self, source: Path) -> Path:
        create_dir(self.media_dir)
        target = unique_path(self.media_dir, build_asset_filename(source.name))
        shutil.copy2(source, target)
        return target

    async def persist(self, local_file: LocalFile) -> PersistedAsset:
        """
        Copies `local_file` into the media library.

        Raises:
            PermissionDenied: The user did not grant media library access.
            PersistenceError: The copy or the registration failed.
        """
        if not await self.permissions.request():
            raise PermissionDenied("Permission required to save videos")

        try:
            target = await asyncio.to_thread(self._copy_sync, local_file.path)
        except OSError as e:
            raise PersistenceError(f"Could not copy video into the library: {e}") from e

        try:
            asset_id = await self.library.register(target, local_file.size_bytes)
        except PersistenceError:
            # An unindexed copy would never show up in the library.
            await asyncio.to_thread(target.unlink, missing_ok=True)
            raise
        log.debug(f"Saved asset #{asset_id} at [dim]{target}[/dim]")
        return PersistedAsset(asset_id=asset_id, path=target)
