"""Building the game's ``modsettings.lsx`` document."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterable

from .meta import Meta, MetaProperty
from .mod_models import ModState

_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def _meta_attribute(attribute_id: str, prop: MetaProperty) -> ET.Element:
    return ET.Element(
        "attribute", {"id": attribute_id, "type": prop.value_type, "value": prop.value}
    )


def _mod_description(meta: Meta) -> ET.Element:
    desc = ET.Element("node", {"id": "ModuleShortDesc"})
    desc.append(_meta_attribute("Folder", meta.folder))
    desc.append(_meta_attribute("MD5", meta.md5))
    desc.append(_meta_attribute("Name", meta.name))
    desc.append(_meta_attribute("UUID", meta.uuid))
    ET.SubElement(
        desc,
        "attribute",
        {"id": "Version64", "type": "int64", "value": str(meta.version.version64())},
    )
    return desc


def _mods_node(mod_states: Iterable[ModState], gustav_dev_meta: Meta) -> ET.Element:
    mods_node = ET.Element("node", {"id": "Mods"})
    children = ET.SubElement(mods_node, "children")
    children.append(_mod_description(gustav_dev_meta))
    for mod_state in mod_states:
        if mod_state.enabled and mod_state.meta is not None:
            children.append(_mod_description(mod_state.meta))
    return mods_node


def build_mod_settings(mod_states: Iterable[ModState], gustav_dev_meta: Meta) -> ET.Element:
    """The ``save`` element listing the base module and every enabled mod."""
    save = ET.Element("save")
    ET.SubElement(
        save, "version", {"major": "4", "minor": "3", "revision": "0", "build": "300"}
    )
    region = ET.SubElement(save, "region", {"id": "ModuleSettings"})
    root = ET.SubElement(region, "node", {"id": "root"})
    children = ET.SubElement(root, "children")
    ET.SubElement(children, "node", {"id": "ModOrder"})
    children.append(_mods_node(mod_states, gustav_dev_meta))
    return save


def render_mod_settings(mod_states: Iterable[ModState], gustav_dev_meta: Meta) -> str:
    """The mod settings document as text, with its XML declaration."""
    save = build_mod_settings(mod_states, gustav_dev_meta)
    ET.indent(save, space="\t")
    return f"{_DECLARATION}\n{ET.tostring(save, encoding='unicode')}\n"