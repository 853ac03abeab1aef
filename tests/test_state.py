import io
import json
import struct
import zipfile

import lz4.block
import pytest

from onehorn.errors import AddModError, ModDetailsError, ModDetailsErrorKind
from onehorn.logger import Logger
from onehorn.meta import Meta
from onehorn.state import State, find_pak_path, get_mod_metas, meta_to_mod_details

MOD_UUID = "00000000-0000-0000-0000-000000000001"


def meta_xml(name="TestMod"):
    return (
        "<save>"
        '<version major="4" minor="0" revision="9" build="331"/>'
        '<region id="Config"><node id="root"><children>'
        '<node id="ModuleInfo">'
        '<attribute id="Description" type="LSString" value="A test mod"/>'
        f'<attribute id="Folder" type="LSString" value="{name}"/>'
        '<attribute id="MD5" type="LSString" value=""/>'
        f'<attribute id="Name" type="LSString" value="{name}"/>'
        f'<attribute id="UUID" type="FixedString" value="{MOD_UUID}"/>'
        "</node></children></node></region></save>"
    )


def write_pak(path, xml=None, name="Mods/TestMod/meta.lsx"):
    data = (xml if xml is not None else meta_xml()).encode()
    header_end = 40
    entry = name.encode().ljust(256, b"\0") + struct.pack(
        "<IHBBII", header_end, 0, 0, 0, len(data), len(data)
    )
    compressed = lz4.block.compress(entry, store_size=False)
    file_list_offset = header_end + len(data)
    header = (
        b"LSPK"
        + struct.pack("<IQIBB", 18, file_list_offset, 8 + len(compressed), 0, 0)
        + bytes(16)
        + struct.pack("<H", 1)
    )
    assert len(header) == header_end
    path.write_bytes(header + data + struct.pack("<II", 1, len(compressed)) + compressed)
    return path


@pytest.fixture
def logger():
    return Logger(stream=io.StringIO())


@pytest.fixture
def game_dir(tmp_path):
    game = tmp_path / "game"
    (game / "Mods").mkdir(parents=True)
    (game / "PlayerProfiles" / "Public").mkdir(parents=True)
    return game


@pytest.fixture
def state(tmp_path, game_dir, logger):
    s = State(tmp_path / "data", game_dir, logger)
    s.load()
    return s


@pytest.fixture
def pak(tmp_path):
    source = tmp_path / "source"
    source.mkdir()
    return write_pak(source / "TestMod.pak")


def test_meta_to_mod_details_without_meta_uses_file_name():
    details = meta_to_mod_details(None, "/x/mymod.pak.pak", False)
    assert details.name == "mymod"
    assert details.description == ""
    assert details.version == ""
    assert details.enabled is False


def test_meta_to_mod_details_with_meta():
    details = meta_to_mod_details(Meta.gustav_dev(), "/x/other.pak", True)
    assert details.name == "GustavDev"
    assert details.version == "1.0.0.0"
    assert details.enabled is True


def test_find_pak_path(tmp_path, pak):
    assert find_pak_path(pak.parent) == pak
    (tmp_path / "empty").mkdir()
    assert find_pak_path(tmp_path / "empty") is None
    assert find_pak_path(tmp_path / "missing") is None


def test_get_mod_metas_errors(tmp_path):
    (tmp_path / "empty").mkdir()
    with pytest.raises(ModDetailsError) as info:
        get_mod_metas(tmp_path / "empty")
    assert info.value.kind is ModDetailsErrorKind.CANNOT_FIND_PACKAGE_FILE

    bad = tmp_path / "bad"
    bad.mkdir()
    (bad / "x.pak").write_bytes(b"\0" * 64)
    with pytest.raises(ModDetailsError) as info:
        get_mod_metas(bad)
    assert info.value.kind is ModDetailsErrorKind.CANNOT_UNPACK_PACKAGE_FILE


def test_get_mod_metas_reads_package(pak):
    metas = get_mod_metas(pak.parent)
    assert [meta.name.value for meta in metas] == ["TestMod"]
    assert metas[0].uuid.value == MOD_UUID


def test_get_mod_details_from_pak(state, pak, tmp_path):
    details = state.get_mod_details(pak)
    assert details.name == "TestMod"
    assert details.description == "A test mod"
    assert details.version == "4.0.9.331"
    assert details.enabled is True
    assert (tmp_path / "data" / "Mods" / "Default" / "TestMod" / "TestMod.pak").is_file()


def test_get_mod_details_from_zip(state, pak, tmp_path):
    archive = tmp_path / "bundle.zip"
    with zipfile.ZipFile(archive, "w") as zip_file:
        zip_file.write(pak, "TestMod/TestMod.pak")
    details = state.get_mod_details(archive)
    assert details.name == "TestMod"
    assert (tmp_path / "data" / "Mods" / "Default" / "bundle" / "TestMod.pak").is_file()


def test_get_mod_details_rejects_other_extensions(state, tmp_path):
    other = tmp_path / "notes.txt"
    other.write_text("hello")
    with pytest.raises(ModDetailsError) as info:
        state.get_mod_details(other)
    assert info.value.kind is ModDetailsErrorKind.FILE_PATH_DOES_NOT_LEAD_TO_VALID_FILE


def test_get_mod_details_uses_cache(state, pak):
    first = state.get_mod_details(pak)
    pak.unlink()
    assert state.get_mod_details(pak) == first


def test_new_selection_clears_previous_cache(state, pak, tmp_path):
    state.get_mod_details(pak)
    unpacked = tmp_path / "data" / "Mods" / "Default" / "TestMod"
    assert unpacked.is_dir()
    other = write_pak(tmp_path / "source" / "Other.pak", meta_xml("Other"))
    assert state.get_mod_details(other).name == "Other"
    assert not unpacked.exists()


def test_add_current_mod(state, pak):
    state.get_mod_details(pak)
    state.add_current_mod()
    mods = state.get_mods()
    assert [mod.name for mod in mods] == ["TestMod"]
    assert state.selected_new_mod_info is None
    with pytest.raises(AddModError):
        state.add_current_mod()


def test_add_without_selection_raises(state):
    with pytest.raises(AddModError):
        state.add_current_mod()


def test_state_persists(state, pak, tmp_path, game_dir, logger):
    state.get_mod_details(pak)
    state.add_current_mod()
    state.create_profile("Second")
    reloaded = State(tmp_path / "data", game_dir, logger)
    reloaded.load()
    assert reloaded.get_profiles() == state.get_profiles()
    reloaded.switch_profile(0)
    assert [mod.name for mod in reloaded.get_mods()] == ["TestMod"]


def test_corrupted_state_file_is_removed(tmp_path, game_dir, logger):
    data = tmp_path / "data"
    data.mkdir()
    (data / "state.json").write_text("not json")
    s = State(data, game_dir, logger)
    s.load()
    assert not (data / "state.json").exists()
    assert s.get_profiles().profiles == {0: "Default"}


def test_saved_file_is_json(state, tmp_path):
    state.create_profile("Second")
    assert state.get_profiles().current_profile == 1
    saved = json.loads((tmp_path / "data" / "state.json").read_text())
    assert saved["profiles"]["current_profile"] == 1
    assert saved["selected_new_mod_info"] is None


def test_profiles(state):
    state.create_profile("Second")
    profiles = state.get_profiles()
    assert profiles.current_profile == 1
    assert profiles.profiles == {0: "Default", 1: "Second"}
    state.switch_profile(0)
    assert state.get_profiles().current_profile == 0
    state.switch_profile(7)
    assert state.get_profiles().current_profile == 0


def test_mods_are_per_profile(state, pak):
    state.get_mod_details(pak)
    state.add_current_mod()
    state.create_profile("Second")
    assert state.get_mods() == []
    state.switch_profile(0)
    assert len(state.get_mods()) == 1


def test_set_enabled_and_remove(state, pak, tmp_path):
    state.get_mod_details(pak)
    state.add_current_mod()
    state.set_mod_enabled_state(0, False)
    assert state.get_mods()[0].enabled is False
    state.remove_mod(0)
    assert state.get_mods() == []
    assert not (tmp_path / "data" / "Mods" / "Default" / "TestMod").exists()


def test_apply_links_enabled_mods(state, pak, game_dir, tmp_path):
    stale_target = tmp_path / "stale.pak"
    stale_target.write_bytes(b"")
    (game_dir / "Mods" / "Stale.pak").symlink_to(stale_target)
    state.get_mod_details(pak)
    state.add_current_mod()
    state.apply()

    link = game_dir / "Mods" / "TestMod.pak"
    assert link.is_symlink()
    assert link.resolve() == (
        tmp_path / "data" / "Mods" / "Default" / "TestMod" / "TestMod.pak"
    ).resolve()
    assert not (game_dir / "Mods" / "Stale.pak").exists()
    settings = (game_dir / "PlayerProfiles" / "Public" / "modsettings.lsx").read_text()
    assert settings == state.build_mod_settings()
    assert MOD_UUID in settings
    assert "28ac9ce2-2aba-8cda-b3b5-6e922f71b6b8" in settings
    assert [mod.name for mod in state.get_mods()] == ["TestMod"]


def test_apply_skips_disabled_mods(state, pak, game_dir):
    state.get_mod_details(pak)
    state.add_current_mod()
    state.set_mod_enabled_state(0, False)
    state.apply()
    assert not (game_dir / "Mods" / "TestMod.pak").exists()
    settings = (game_dir / "PlayerProfiles" / "Public" / "modsettings.lsx").read_text()
    assert settings == state.build_mod_settings()
    assert MOD_UUID not in settings
    assert state.get_mods()[0].enabled is False


def test_build_mod_settings_lists_base_module(state):
    text = state.build_mod_settings()
    assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert 'value="GustavDev"' in text
    assert state.gustav_dev_mod_meta == Meta.gustav_dev()