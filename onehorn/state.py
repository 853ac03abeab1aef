"""The mod manager's persistent state: profiles, cached mod selection and applying mods."""

from __future__ import annotations

import json
import os
import shutil
import threading
import zipfile
from collections.abc import Iterator
from os import PathLike
from pathlib import Path, PurePosixPath

from .errors import (
    AddModError,
    MetaReadError,
    ModDetailsError,
    ModDetailsErrorKind,
    PackageReadError,
)
from .logger import Logger
from .meta import Meta
from .mod_models import SelectedNewModInfo
from .mod_settings import render_mod_settings
from .models import Mod, Profiles
from .package_reader import read_package
from .paths import find_bg3_app_data, get_data_dir, get_mod_store_dir
from .profiles import ProfileSet

STATE_FILE_NAME = "state.json"


def _pak_files(dir_path: Path) -> Iterator[Path]:
    """Package files directly inside ``dir_path``, by name; raises OSError if unreadable."""
    names = sorted(entry.name for entry in os.scandir(dir_path))
    return (dir_path / name for name in names if name.endswith(".pak"))


def meta_to_mod_details(meta: Meta | None, file_path: str | PathLike, enabled: bool) -> Mod:
    """Summarise a mod; without meta data the file name stands in for its name."""
    if meta is not None:
        return Mod(
            name=meta.name.value,
            description=meta.description,
            version=str(meta.version),
            enabled=enabled,
        )
    name = Path(file_path).name
    if not name:
        raise ValueError(f"Path has no file name: {file_path}")
    while name.endswith(".pak"):
        name = name[: -len(".pak")]
    return Mod(name=name, description="", version="", enabled=enabled)


def find_pak_path(dir_path: str | PathLike, logger: Logger | None = None) -> Path | None:
    """The first ``.pak`` file in ``dir_path``, or None."""
    try:
        found = next(_pak_files(Path(dir_path)), None)
    except OSError:
        return None
    if found is not None and logger is not None:
        logger.info(f"Found package: {found.name}")
    return found


def get_mod_metas(dir_path: str | PathLike, logger: Logger | None = None) -> list[Meta]:
    """Read the meta data of the package found in ``dir_path``."""
    file_path = find_pak_path(dir_path, logger)
    if file_path is None:
        if logger is not None:
            logger.error("Cannot find package file")
        raise ModDetailsError(ModDetailsErrorKind.CANNOT_FIND_PACKAGE_FILE)
    try:
        package = read_package(file_path)
    except PackageReadError as error:
        if logger is not None:
            logger.error(f"Cannot reading package: {error}")
        raise ModDetailsError(ModDetailsErrorKind.CANNOT_UNPACK_PACKAGE_FILE) from error
    try:
        return package.get_meta()
    except MetaReadError as error:
        if logger is not None:
            logger.error(f"Cannot read package meta: {error}")
        raise ModDetailsError(ModDetailsErrorKind.CANNOT_READ_PACKAGE_META) from error


def _extract_zip(archive: Path, destination: Path) -> None:
    """Extract ``archive``, dropping a single top level directory shared by every entry."""
    with zipfile.ZipFile(archive) as zip_file:
        members = [
            (member, PurePosixPath(member.filename)) for member in zip_file.infolist()
        ]
        members = [(member, name) for member, name in members if name.parts]
        tops = {name.parts[0] for _, name in members}
        strip = len(tops) == 1 and all(
            len(name.parts) > 1 or member.is_dir() for member, name in members
        )
        for member, name in members:
            parts = name.parts[1:] if strip else name.parts
            if not parts:
                continue
            if name.is_absolute() or ".." in parts:
                raise zipfile.BadZipFile(f"Unsafe path in archive: {member.filename}")
            target = destination.joinpath(*parts)
            if member.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with zip_file.open(member) as source, open(target, "wb") as sink:
                shutil.copyfileobj(source, sink)


class State:
    """Profiles, the mod chosen for addition and the game's data directory."""

    def __init__(
        self,
        data_dir: str | PathLike | None = None,
        bg3_appdata: str | PathLike | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else get_data_dir()
        self._bg3_appdata = Path(bg3_appdata) if bg3_appdata is not None else None
        self.logger = logger if logger is not None else Logger()
        self.selected_new_mod_info: SelectedNewModInfo | None = None
        self.profiles = ProfileSet()
        self.profiles.ensure_default()
        self.gustav_dev_mod_meta: Meta | None = None
        self._lock = threading.RLock()

    @property
    def bg3_appdata(self) -> Path:
        """The game's data directory, located on first use if not given."""
        if self._bg3_appdata is None:
            self._bg3_appdata = find_bg3_app_data()
        return self._bg3_appdata

    @property
    def state_file(self) -> Path:
        return self.data_dir / STATE_FILE_NAME

    @property
    def mod_store(self) -> Path:
        return get_mod_store_dir(self.data_dir)

    # Loading and saving

    def _remove_state_file(self) -> bool:
        try:
            self.state_file.unlink()
        except OSError as error:
            self.logger.error(
                f"Could not delete '{STATE_FILE_NAME}' saving state may not be possible: {error}"
            )
            return False
        return True

    def load(self) -> None:
        """Load saved state; a corrupted state file is removed and defaults kept."""
        with self._lock:
            self.logger.info("Attempting to load state")
            self.data_dir.mkdir(parents=True, exist_ok=True)
            try:
                text = self.state_file.read_text(encoding="utf-8")
            except FileNotFoundError:
                self.logger.info(f"No '{STATE_FILE_NAME}' file found")
                return
            except (OSError, UnicodeDecodeError) as error:
                self.logger.error(
                    f"Could not open '{STATE_FILE_NAME}' attempting to remove possibly "
                    f"corrupted file: {error}"
                )
                self._remove_state_file()
                return

            try:
                data = json.loads(text)
                profiles = ProfileSet.from_dict(data["profiles"])
                gustav = data.get("gustav_dev_mod_meta")
                gustav_meta = Meta.from_dict(gustav) if gustav is not None else None
                selected = data.get("selected_new_mod_info")
                selected_info = (
                    SelectedNewModInfo.from_dict(selected) if selected is not None else None
                )
            except (ValueError, KeyError, TypeError, AttributeError) as error:
                self.logger.error(
                    f"'{STATE_FILE_NAME}' is not valid JSON attempting to remove "
                    f"corrupted file: {error}"
                )
                self.logger.error(text)
                if self._remove_state_file():
                    self.logger.info(f"Removed corrupted '{STATE_FILE_NAME}' successfully")
                return

            self.profiles = profiles
            self.gustav_dev_mod_meta = gustav_meta
            self.selected_new_mod_info = selected_info
            self.profiles.ensure_default()
            self.logger.info("State loaded successfully")

    def _to_dict(self) -> dict:
        return {
            "selected_new_mod_info": (
                self.selected_new_mod_info.to_dict()
                if self.selected_new_mod_info is not None
                else None
            ),
            "profiles": self.profiles.to_dict(),
            "gustav_dev_mod_meta": (
                self.gustav_dev_mod_meta.to_dict()
                if self.gustav_dev_mod_meta is not None
                else None
            ),
        }

    def save(self) -> None:
        """Write the state file; failures are logged."""
        with self._lock:
            self.logger.info("Saving...")
            try:
                text = json.dumps(self._to_dict())
            except (TypeError, ValueError) as error:
                self.logger.error(f"Could not serialize state: {error}")
                return
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                self.state_file.write_text(text, encoding="utf-8")
            except OSError as error:
                self.logger.error(f"Could not save file: {error}")
                return
            self.logger.info("Saved successfully")

    # Applying mods to the game

    def apply(self) -> None:
        """Link enabled mods' packages into the game and write its mod settings."""
        with self._lock:
            self.logger.info("Creating symlinks to mod pak files")
            mods_folder = self.bg3_appdata / "Mods"
            for entry in mods_folder.iterdir():
                if entry.is_symlink():
                    entry.unlink()

            for mod_state in self.profiles.mods():
                if not mod_state.enabled:
                    continue
                src_path = next(_pak_files(mod_state.path), None)
                if src_path is None:
                    raise FileNotFoundError(f"No package file found in {mod_state.path}")
                try:
                    os.symlink(src_path, mods_folder / src_path.name)
                except OSError as error:
                    self.logger.error(f"Could not apply mod '{src_path}': {error}")
                    return

            self.logger.info("Writing mod settings")
            mod_settings_path = self.bg3_appdata / "PlayerProfiles" / "Public" / "modsettings.lsx"
            mod_settings = self.build_mod_settings()
            try:
                mod_settings_path.write_text(mod_settings, encoding="utf-8")
            except OSError as error:
                self.logger.error(f"Could not apply mod_settings: {error}")
                return
            self.logger.info("Mod settings applied")

    def build_mod_settings(self) -> str:
        """The ``modsettings.lsx`` text for the current profile."""
        with self._lock:
            if self.gustav_dev_mod_meta is None:
                self.gustav_dev_mod_meta = Meta.gustav_dev()
            return render_mod_settings(self.profiles.mods(), self.gustav_dev_mod_meta)

    # Mods of the current profile

    def get_mods(self) -> list[Mod]:
        with self._lock:
            return [
                meta_to_mod_details(mod_state.meta, mod_state.path, mod_state.enabled)
                for mod_state in self.profiles.mods()
            ]

    def remove_mod(self, index: int) -> None:
        with self._lock:
            self.profiles.remove_mod(index, self.logger)
            self.save()

    def add_current_mod(self) -> None:
        """Add the mod last inspected with get_mod_details to the current profile."""
        with self._lock:
            mod_info = self.selected_new_mod_info
            if mod_info is None:
                self.logger.error("No mod info cached")
                raise AddModError("No mod info cached")
            self.selected_new_mod_info = None
            self.profiles.add_mod(mod_info.unpacked_data, mod_info.meta)
            self.save()

    def set_mod_enabled_state(self, index: int, enabled: bool) -> None:
        with self._lock:
            self.profiles.set_mod_enabled_state(index, enabled, self.logger)
            self.save()

    def get_mod_details(self, file_path: str | PathLike) -> Mod:
        """Unpack a ``.pak`` or ``.zip`` mod file, read its meta data and remember it."""
        file_path = Path(file_path)
        with self._lock:
            self.logger.info("Fetching mod details")
            self.logger.trace("Checking cache for the meta data for this package")
            cached = self.selected_new_mod_info
            if cached is not None and cached.src_path == file_path:
                self.logger.debug("Retrieved meta from cache")
                details = meta_to_mod_details(cached.meta, file_path, True)
                self._log_details(details)
                return details
            if cached is not None:
                self._clear_mod_addition_cache()
                self.save()

            extension = file_path.suffix[1:]
            if extension == "pak":
                data_path = self._move_pak(file_path)
            elif extension == "zip":
                data_path = self._extract_zip(file_path)
            else:
                self.logger.error(f"File {file_path} does not have a supported extension")
                raise ModDetailsError(ModDetailsErrorKind.FILE_PATH_DOES_NOT_LEAD_TO_VALID_FILE)

            metas = get_mod_metas(data_path, self.logger)
            meta = metas[0] if metas else None
            details = meta_to_mod_details(meta, file_path, True)

            self.selected_new_mod_info = SelectedNewModInfo(file_path, meta, data_path)
            self.save()
            self._log_details(details)
            return details

    def _log_details(self, details: Mod) -> None:
        self.logger.info(
            f"Returning mod details {{name: {details.name}, description: "
            f"{details.description}, version: {details.version}}}"
        )

    def _clear_mod_addition_cache(self) -> None:
        mod_info = self.selected_new_mod_info
        self.selected_new_mod_info = None
        if mod_info is None:
            return
        unpacked = mod_info.unpacked_data
        in_use = any(mod_state.path == unpacked for mod_state in self.profiles.mods())
        if in_use:
            return
        try:
            shutil.rmtree(unpacked)
        except OSError:
            self.logger.warn(f"Could not remove mod data dir for caches data {unpacked}")

    def _move_pak(self, file_path: Path) -> Path:
        data_dir_path = self.profiles.calculate_extraction_path(file_path, self.mod_store)
        data_dir_path.mkdir(parents=True, exist_ok=True)
        shutil.copy2(file_path, data_dir_path / file_path.name)
        return data_dir_path

    def _extract_zip(self, file_path: Path) -> Path:
        data_dir_path = self.profiles.calculate_extraction_path(file_path, self.mod_store)
        data_dir_path.mkdir(parents=True, exist_ok=True)
        self.logger.trace("Unzipping file")
        _extract_zip(file_path, data_dir_path)
        self.logger.trace("File Unzipped")
        return data_dir_path

    # Profiles

    def create_profile(self, name: str) -> None:
        with self._lock:
            self.profiles.add_profile(name)
            self.save()

    def switch_profile(self, index: int) -> None:
        with self._lock:
            self.profiles.switch_profile(index)
            self.save()

    def get_profiles(self) -> Profiles:
        with self._lock:
            return Profiles(
                current_profile=self.profiles.current_profile,
                profiles=self.profiles.names(),
            )