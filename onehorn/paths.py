"""Locations of the game's user data and of the mod manager's own data."""

from __future__ import annotations

import os
import re
import sys
from os import PathLike
from pathlib import Path

import platformdirs

BG3_STEAM_APP_ID = "1086940"
DATA_DIR_NAME = "OneHornModManager"

_GAME_DATA = Path("Larian Studios") / "Baldur's Gate 3"
_PROTON_LOCAL_APPDATA = (
    Path("pfx") / "drive_c" / "users" / "steamuser" / "AppData" / "Local"
)
_LIBRARY_PATH = re.compile(r'"path"\s+"([^"]*)"')


def _steam_roots() -> list[Path]:
    home = Path.home()
    return [
        home / ".steam" / "steam",
        home / ".local" / "share" / "Steam",
        home / ".steam" / "root",
        home / ".var" / "app" / "com.valvesoftware.Steam" / ".local" / "share" / "Steam",
    ]


def _library_folders(root: Path) -> list[Path]:
    folders = [root]
    try:
        text = (root / "steamapps" / "libraryfolders.vdf").read_text(
            encoding="utf-8", errors="replace"
        )
    except OSError:
        return folders
    folders.extend(
        Path(match.group(1).replace("\\\\", "\\"))
        for match in _LIBRARY_PATH.finditer(text)
    )
    return folders


def _find_steam_library() -> Path:
    seen: set[Path] = set()
    for root in _steam_roots():
        for library in _library_folders(root):
            if library in seen:
                continue
            seen.add(library)
            manifest = library / "steamapps" / f"appmanifest_{BG3_STEAM_APP_ID}.acf"
            if manifest.is_file():
                return library
    raise FileNotFoundError("Could not find the Steam installation of Baldur's Gate 3")


def find_bg3_app_data() -> Path:
    """Directory where the game keeps its mods and player profiles."""
    if sys.platform.startswith("linux"):
        library = _find_steam_library()
        prefix = library / "steamapps" / "compatdata" / BG3_STEAM_APP_ID
        return prefix / _PROTON_LOCAL_APPDATA / _GAME_DATA
    if sys.platform == "win32":
        local_appdata = os.environ.get("LOCALAPPDATA")
        if not local_appdata:
            raise FileNotFoundError("The local application data folder was not found")
        return Path(local_appdata) / _GAME_DATA
    if sys.platform == "darwin":
        return Path.home() / "Documents" / _GAME_DATA
    raise OSError(f"Unsupported platform: {sys.platform}")


def get_data_dir() -> Path:
    """Directory holding the mod manager's state and stored mods."""
    return Path(platformdirs.user_data_dir(DATA_DIR_NAME, appauthor=False))


def get_mod_store_dir(data_dir: str | PathLike | None = None) -> Path:
    """Directory where unpacked mods are kept."""
    base = Path(data_dir) if data_dir is not None else get_data_dir()
    return base / "Mods"