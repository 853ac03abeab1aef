"""Browsing directories for mod files, with back and forward history."""

from __future__ import annotations

import os
import stat
import threading
from dataclasses import replace
from os import PathLike
from pathlib import Path

import platformdirs

from .errors import FileBrowserRedirectError, ModManagerError
from .logger import Logger
from .models import EntryType, FileEntry

SYMLINK_MAX_DEPTH = 10
_ACCEPTED_EXTENSIONS = frozenset({"pak", "zip"})


class SymlinkResolveError(ModManagerError):
    """A symbolic link could not be followed to a real file or directory."""

    def __init__(self, message: str, max_depth: int | None = None) -> None:
        self.max_depth = max_depth
        super().__init__(message)


def _warn(logger: Logger | None, message: str) -> None:
    if logger is not None:
        logger.warn(message)


def resolve_symlink(path: str | PathLike) -> Path:
    """Follow a chain of symbolic links to the first path that is not a link."""
    link_path = Path(path)
    visited: set[Path] = set()
    for _ in range(SYMLINK_MAX_DEPTH):
        visited.add(link_path)
        try:
            target = Path(os.readlink(link_path))
        except OSError:
            raise SymlinkResolveError("Could not read symlink") from None
        link_path = target if target.is_absolute() else link_path.parent / target

        if link_path in visited:
            raise SymlinkResolveError("Loop detected")

        try:
            mode = os.lstat(link_path).st_mode
        except OSError:
            raise SymlinkResolveError("Could not read symlink") from None
        if not stat.S_ISLNK(mode):
            return link_path

    raise SymlinkResolveError(
        f"Max supported symlink depth exceeded (max: {SYMLINK_MAX_DEPTH})",
        SYMLINK_MAX_DEPTH,
    )


def _is_accepted_file(file_name: str) -> bool:
    suffix = Path(file_name).suffix
    return suffix[1:].lower() in _ACCEPTED_EXTENSIONS if suffix else False


def decode_entry(path: str | PathLike, logger: Logger | None = None) -> FileEntry | None:
    """Describe ``path`` as a browser entry, or return None if it is not shown."""
    path = Path(path)
    # .steampath exists for legacy reasons and is never a usable file or directory.
    if path.name == ".steampath":
        return None

    try:
        info = path.stat()
    except OSError as error:
        _warn(logger, f"Cannot determine entry type of {path}: {error}")
        return None

    file_name = path.name
    if not file_name:
        _warn(logger, f"Could not find filename from path {path}")
        return None

    if stat.S_ISDIR(info.st_mode):
        return FileEntry(EntryType.DIRECTORY, path, file_name)
    if stat.S_ISREG(info.st_mode):
        if _is_accepted_file(file_name):
            return FileEntry(EntryType.FILE, path, file_name)
        return None

    if not path.is_symlink():
        _warn(logger, f"Cannot determine entry type of {path}")
        return None

    try:
        target = resolve_symlink(path)
    except SymlinkResolveError as error:
        _warn(logger, f"Symlink {path} could not be resolved: {error}")
        return None
    entry = decode_entry(target, logger)
    if entry is None:
        return None
    return replace(entry, file_name=file_name)


def read_dir(path: str | PathLike, logger: Logger | None = None) -> list[FileEntry]:
    """List the shown entries of a directory: directories first, each sorted by name."""
    try:
        children = list(Path(path).iterdir())
    except OSError:
        children = []
    entries = [
        entry
        for child in children
        if (entry := decode_entry(child, logger)) is not None
    ]
    directories = sorted(
        (entry for entry in entries if entry.entry_type is EntryType.DIRECTORY),
        key=lambda entry: entry.file_name,
    )
    files = sorted(
        (entry for entry in entries if entry.entry_type is EntryType.FILE),
        key=lambda entry: entry.file_name,
    )
    return directories + files


def _optional_path(value: str | PathLike | None) -> Path | None:
    return Path(value) if value is not None else None


class FileBrowser:
    """A current directory with back and forward navigation."""

    def __init__(
        self,
        home: str | PathLike | None = None,
        documents: str | PathLike | None = None,
        downloads: str | PathLike | None = None,
        desktop: str | PathLike | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.home_directory = _optional_path(home)
        self.documents_directory = _optional_path(documents)
        self.downloads_directory = _optional_path(downloads)
        self.desktop_directory = _optional_path(desktop)
        self.current_directory = self.home_directory or Path("/")
        self.history: list[Path] = []
        self.future: list[Path] = []
        self._logger = logger
        self._lock = threading.RLock()

    @classmethod
    def from_environment(cls, logger: Logger | None = None) -> FileBrowser:
        """Create a browser starting in the user's home directory."""
        try:
            home: Path | None = Path.home()
        except RuntimeError:
            home = None
        return cls(
            home,
            platformdirs.user_documents_dir(),
            platformdirs.user_downloads_dir(),
            platformdirs.user_desktop_dir(),
            logger,
        )

    def redirect(self, path: str | PathLike) -> None:
        """Move to ``path``; raise FileBrowserRedirectError if it is not a directory."""
        path = Path(path)
        if not path.is_dir():
            raise FileBrowserRedirectError()
        with self._lock:
            if path == self.current_directory:
                return
            self.history.append(self.current_directory)
            self.current_directory = path
            self.future = []

    def read_current_dir(self) -> tuple[Path, list[FileEntry]]:
        """Return the current directory and its shown entries."""
        with self._lock:
            current = self.current_directory
        return current, read_dir(current, self._logger)

    def common_paths(self) -> list[tuple[str, Path]]:
        """Named shortcuts to the well known user directories that are known."""
        candidates = (
            ("Home", self.home_directory),
            ("Documents", self.documents_directory),
            ("Downloads", self.downloads_directory),
            ("Desktop", self.desktop_directory),
        )
        return [(name, path) for name, path in candidates if path is not None]

    def go_back(self) -> None:
        with self._lock:
            if self.history:
                previous = self.history.pop()
                self.future.append(self.current_directory)
                self.current_directory = previous

    def go_forward(self) -> None:
        with self._lock:
            if self.future:
                following = self.future.pop()
                self.history.append(self.current_directory)
                self.current_directory = following

    def can_go_back_forward(self) -> tuple[bool, bool]:
        with self._lock:
            return bool(self.history), bool(self.future)