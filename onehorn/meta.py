"""Mod meta data read from a package's ``meta.lsx`` file."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from .errors import MetaReadError, MetaReadErrorKind

_U64_PATTERN = re.compile(r"\+?[0-9]+")
_U64_MASK = (1 << 64) - 1


def _parse_u64(text: str | None) -> int:
    if text is None or not _U64_PATTERN.fullmatch(text):
        raise MetaReadError(MetaReadErrorKind.META_DATA_INVALID_VERSION)
    value = int(text)
    if value > _U64_MASK:
        raise MetaReadError(MetaReadErrorKind.META_DATA_INVALID_VERSION)
    return value


@dataclass(frozen=True)
class MetaProperty:
    """A typed attribute of a mod's module info."""

    value_type: str
    value: str

    def to_dict(self) -> dict:
        return {"value_type": self.value_type, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> MetaProperty:
        return cls(value_type=data["value_type"], value=data["value"])


@dataclass(frozen=True)
class Version:
    """Four part version number of a mod."""

    major: int
    minor: int
    revision: int
    build: int

    def version64(self) -> int:
        """Pack the version into the 64 bit form used by mod settings."""
        packed = (
            (self.major << 55) | (self.minor << 47) | (self.revision << 31) | self.build
        )
        return packed & _U64_MASK

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.revision}.{self.build}"

    def to_dict(self) -> dict:
        return {
            "major": self.major,
            "minor": self.minor,
            "revision": self.revision,
            "build": self.build,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Version:
        return cls(
            major=data["major"],
            minor=data["minor"],
            revision=data["revision"],
            build=data["build"],
        )


def _read_property(module_info: ET.Element, property_id: str) -> MetaProperty:
    node = next(
        (child for child in module_info if child.get("id") == property_id), None
    )
    if node is None:
        raise MetaReadError(MetaReadErrorKind.META_DATA_MISSING_MODULE_INFO)
    value_type = node.get("type")
    value = node.get("value")
    if value_type is None or value is None:
        raise MetaReadError(MetaReadErrorKind.META_DATA_MISSING_MODULE_INFO)
    return MetaProperty(value_type=value_type, value=value)


def _read_version(root: ET.Element) -> Version:
    node = next((element for element in root.iter() if element.tag == "version"), None)
    if node is None:
        raise MetaReadError(MetaReadErrorKind.META_DATA_MISSING_VERSION)
    return Version(
        major=_parse_u64(node.get("major")),
        minor=_parse_u64(node.get("minor")),
        revision=_parse_u64(node.get("revision")),
        build=_parse_u64(node.get("build")),
    )


@dataclass(frozen=True)
class Meta:
    """Name, folder, UUID, checksum, description and version of a mod."""

    name: MetaProperty
    description: str
    folder: MetaProperty
    uuid: MetaProperty
    md5: MetaProperty
    version: Version

    @classmethod
    def gustav_dev(cls) -> Meta:
        """Meta data of the base game module that is always loaded first."""
        return cls(
            name=MetaProperty("LSString", "GustavDev"),
            description="",
            folder=MetaProperty("LSString", "GustavDev"),
            uuid=MetaProperty("FixedString", "28ac9ce2-2aba-8cda-b3b5-6e922f71b6b8"),
            md5=MetaProperty("LSString", ""),
            version=Version(1, 0, 0, 0),
        )

    @classmethod
    def from_xml(cls, text: str) -> Meta:
        """Parse the contents of a ``meta.lsx`` file."""
        try:
            root = ET.fromstring(text.removeprefix("\ufeff"))
        except ET.ParseError:
            raise MetaReadError(MetaReadErrorKind.META_NOT_VALID_XML) from None

        module_info = next(
            (element for element in root.iter() if element.get("id") == "ModuleInfo"),
            None,
        )
        if module_info is None:
            raise MetaReadError(MetaReadErrorKind.META_DATA_MISSING_MODULE_INFO)

        version = _read_version(root)

        name = _read_property(module_info, "Name")
        folder = _read_property(module_info, "Folder")
        uuid = _read_property(module_info, "UUID")
        try:
            md5 = _read_property(module_info, "MD5")
        except MetaReadError:
            md5 = MetaProperty("LSString", "")
        try:
            description = _read_property(module_info, "Description").value
        except MetaReadError:
            description = ""

        return cls(
            name=name,
            description=description,
            folder=folder,
            uuid=uuid,
            md5=md5,
            version=version,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name.to_dict(),
            "description": self.description,
            "folder": self.folder.to_dict(),
            "uuid": self.uuid.to_dict(),
            "md5": self.md5.to_dict(),
            "version": self.version.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Meta:
        return cls(
            name=MetaProperty.from_dict(data["name"]),
            description=data["description"],
            folder=MetaProperty.from_dict(data["folder"]),
            uuid=MetaProperty.from_dict(data["uuid"]),
            md5=MetaProperty.from_dict(data["md5"]),
            version=Version.from_dict(data["version"]),
        )