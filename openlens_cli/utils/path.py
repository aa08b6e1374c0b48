"""
Utilities for handling application directories and media file names.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from pathvalidate import sanitize_filename

APP_DIR_NAME = "openlens-cli"


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / APP_DIR_NAME


def get_data_dir() -> Path:
    """The app's private document area, home of the fixed download slot."""
    if os.name == "nt":
        base_dir = Path(os.getenv("LOCALAPPDATA", "~\\AppData\\Local"))
    else:
        base_dir = Path(os.getenv("XDG_DATA_HOME", "~/.local/share"))
    return base_dir.expanduser() / APP_DIR_NAME


def get_default_media_dir() -> Path:
    """The user-visible folder that plays the role of the media library."""
    return Path(os.getenv("XDG_VIDEOS_DIR", "~/Videos")).expanduser() / "OpenLens"


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def build_asset_filename(source_name: str, now: Optional[datetime] = None) -> str:
    """
    Builds a fresh, sanitized library file name from the downloaded file's name,
    e.g. ``openlens_download.mp4`` -> ``openlens_download_20240131_174502.mp4``.
    """
    now = now or datetime.now()
    source = Path(sanitize_filename(source_name) or "video")
    return f"{source.stem}_{now.strftime('%Y%m%d_%H%M%S')}{source.suffix}"


def unique_path(directory: Path, filename: str) -> Path:
    """Returns `directory/filename`, adding a counter if that name is taken."""
    candidate = directory / filename
    stem, suffix = candidate.stem, candidate.suffix
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}_{counter}{suffix}"
        counter += 1
    return candidate
