"""Records of installed mods and of a mod chosen for installation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .meta import Meta


def _meta_to_dict(meta: Meta | None) -> dict | None:
    return meta.to_dict() if meta is not None else None


def _meta_from_dict(data: dict | None) -> Meta | None:
    return Meta.from_dict(data) if data is not None else None


@dataclass
class SelectedNewModInfo:
    """A mod file that was unpacked and awaits being added to a profile."""

    src_path: Path
    meta: Meta | None
    unpacked_data: Path

    def __post_init__(self) -> None:
        self.src_path = Path(self.src_path)
        self.unpacked_data = Path(self.unpacked_data)

    def to_dict(self) -> dict:
        return {
            "src_path": str(self.src_path),
            "meta": _meta_to_dict(self.meta),
            "unpacked_data": str(self.unpacked_data),
        }

    @classmethod
    def from_dict(cls, data: dict) -> SelectedNewModInfo:
        return cls(
            src_path=Path(data["src_path"]),
            meta=_meta_from_dict(data.get("meta")),
            unpacked_data=Path(data["unpacked_data"]),
        )


@dataclass
class ModState:
    """A mod in a profile: its meta data, unpacked location and whether it is on."""

    meta: Meta | None
    path: Path
    enabled: bool = True

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    @classmethod
    def from_selected(cls, info: SelectedNewModInfo) -> ModState:
        return cls(meta=info.meta, path=info.unpacked_data, enabled=True)

    def to_dict(self) -> dict:
        return {
            "meta": _meta_to_dict(self.meta),
            "path": str(self.path),
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ModState:
        return cls(
            meta=_meta_from_dict(data.get("meta")),
            path=Path(data["path"]),
            enabled=bool(data["enabled"]),
        )