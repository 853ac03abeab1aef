"""Plain data records shared between the mod manager's parts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path


class EntryType(Enum):
    """Kind of an entry shown by the file browser."""

    FILE = "File"
    DIRECTORY = "Directory"


@dataclass(frozen=True)
class FileEntry:
    """A file or directory listed by the file browser."""

    entry_type: EntryType
    path: Path
    file_name: str


class LogSeverity(Enum):
    """Severity of a log line."""

    TRACE = "Trace"
    DEBUG = "Debug"
    INFO = "Info"
    WARN = "Warn"
    ERROR = "Error"
    CRITICAL = "Critical"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LogLine:
    """One logged message with its severity and Unix timestamp."""

    severity: LogSeverity
    timestamp: int
    message: str

    def __str__(self) -> str:
        try:
            stamp = datetime.fromtimestamp(self.timestamp, tz=timezone.utc).strftime(
                "%Y-%m-%d %H:%M:%S"
            )
        except (OverflowError, OSError, ValueError):
            stamp = "00-00-00 00:00:00"
        return f"[{stamp}] [{self.severity}]: {self.message}"

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "timestamp": self.timestamp,
            "message": self.message,
        }


@dataclass
class Mod:
    """Summary of an installed mod."""

    name: str
    description: str
    version: str
    enabled: bool

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "enabled": self.enabled,
        }


@dataclass
class Profiles:
    """The current profile and the names of all profiles by index."""

    current_profile: int
    profiles: dict[int, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "current_profile": self.current_profile,
            "profiles": {str(index): name for index, name in self.profiles.items()},
        }