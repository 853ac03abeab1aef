"""Profiles, each holding its own list of mods."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from .logger import Logger
from .meta import Meta
from .mod_models import ModState
from .paths import get_mod_store_dir


def _error(logger: Logger | None, message: str) -> None:
    if logger is not None:
        logger.error(message)


@dataclass
class Profile:
    """A named list of mods."""

    name: str
    mods: list[ModState] = field(default_factory=list)

    def add_mod(self, unpacked_data_path: str | PathLike, meta: Meta | None = None) -> None:
        self.mods.append(ModState(meta=meta, path=Path(unpacked_data_path), enabled=True))

    def remove_mod(self, mod_index: int, logger: Logger | None = None) -> None:
        """Remove a mod, deleting its data unless another entry shares it."""
        if not 0 <= mod_index < len(self.mods):
            _error(logger, f"Could not find mod at position {mod_index}")
            return
        mod_state = self.mods[mod_index]
        has_duplicates = any(
            other.path == mod_state.path
            for index, other in enumerate(self.mods)
            if index != mod_index
        )
        if not has_duplicates:
            try:
                shutil.rmtree(mod_state.path)
            except OSError:
                _error(logger, f"Could not remove mod data dir {mod_state.path}")
        del self.mods[mod_index]

    def set_mod_enabled_state(
        self, mod_index: int, enabled: bool, logger: Logger | None = None
    ) -> None:
        if not 0 <= mod_index < len(self.mods):
            _error(logger, f"Could not find mod to disable at position {mod_index}")
            return
        self.mods[mod_index].enabled = enabled

    def to_dict(self) -> dict:
        return {"name": self.name, "mods": [mod.to_dict() for mod in self.mods]}

    @classmethod
    def from_dict(cls, data: dict) -> Profile:
        return cls(
            name=data["name"],
            mods=[ModState.from_dict(mod) for mod in data.get("mods", [])],
        )


@dataclass
class ProfileSet:
    """All profiles by index, and which one is current."""

    current_profile: int = 0
    next_profile: int = 0
    profiles: dict[int, Profile] = field(default_factory=dict)

    @property
    def _current(self) -> Profile:
        return self.profiles[self.current_profile]

    def ensure_default(self) -> None:
        """Create the "Default" profile if profile 0 does not exist."""
        if 0 not in self.profiles:
            self.add_profile("Default")

    def add_mod(self, unpacked_data_path: str | PathLike, meta: Meta | None = None) -> None:
        self._current.add_mod(unpacked_data_path, meta)

    def remove_mod(self, mod_index: int, logger: Logger | None = None) -> None:
        self._current.remove_mod(mod_index, logger)

    def mods(self) -> list[ModState]:
        """Mods of the current profile."""
        return list(self._current.mods)

    def names(self) -> dict[int, str]:
        return {index: profile.name for index, profile in self.profiles.items()}

    def calculate_extraction_path(
        self, src_path: str | PathLike, mod_store: str | PathLike | None = None
    ) -> Path:
        """Where a mod file is unpacked for the current profile."""
        stem = Path(src_path).stem
        if not stem:
            raise ValueError(f"Path has no file name: {src_path}")
        store = Path(mod_store) if mod_store is not None else get_mod_store_dir()
        return store / self._current.name / stem

    def add_profile(self, name: str) -> int:
        """Add a profile, make it current and return its index."""
        index = self.next_profile
        self.profiles[index] = Profile(name)
        self.current_profile = index
        self.next_profile += 1
        return index

    def switch_profile(self, profile: int) -> None:
        if profile in self.profiles:
            self.current_profile = profile

    def set_mod_enabled_state(
        self, mod_index: int, enabled: bool, logger: Logger | None = None
    ) -> None:
        self._current.set_mod_enabled_state(mod_index, enabled, logger)

    def to_dict(self) -> dict:
        return {
            "current_profile": self.current_profile,
            "next_profile": self.next_profile,
            "profiles": {
                str(index): profile.to_dict() for index, profile in self.profiles.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> ProfileSet:
        return cls(
            current_profile=int(data["current_profile"]),
            next_profile=int(data["next_profile"]),
            profiles={
                int(index): Profile.from_dict(profile)
                for index, profile in data.get("profiles", {}).items()
            },
        )