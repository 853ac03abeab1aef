import io
import os

import pytest

from onehorn.errors import FileBrowserRedirectError
from onehorn.file_browser import (
    FileBrowser,
    SymlinkResolveError,
    decode_entry,
    read_dir,
    resolve_symlink,
)
from onehorn.logger import Logger
from onehorn.models import EntryType, LogSeverity


@pytest.fixture
def logger():
    return Logger(stream=io.StringIO())


def test_read_dir_orders_directories_then_files(tmp_path, logger):
    (tmp_path / "b").mkdir()
    (tmp_path / "a").mkdir()
    (tmp_path / ".steampath").mkdir()
    (tmp_path / "z.pak").write_bytes(b"")
    (tmp_path / "c.ZIP").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("x")

    entries = read_dir(tmp_path, logger)

    assert [(e.entry_type, e.file_name) for e in entries] == [
        (EntryType.DIRECTORY, "a"),
        (EntryType.DIRECTORY, "b"),
        (EntryType.FILE, "c.ZIP"),
        (EntryType.FILE, "z.pak"),
    ]
    assert entries[0].path == tmp_path / "a"


def test_read_dir_of_missing_directory_is_empty(tmp_path, logger):
    assert read_dir(tmp_path / "missing", logger) == []


def test_decode_entry_skips_steampath(tmp_path, logger):
    (tmp_path / ".steampath").write_text("x")
    assert decode_entry(tmp_path / ".steampath", logger) is None


def test_decode_entry_missing_path_warns(tmp_path, logger):
    missing = tmp_path / "gone.pak"
    assert decode_entry(missing, logger) is None
    last = logger.lines()[-1]
    assert last.severity is LogSeverity.WARN
    assert str(missing) in last.message


def test_decode_entry_rejects_other_extensions(tmp_path, logger):
    (tmp_path / "readme.md").write_text("x")
    assert decode_entry(tmp_path / "readme.md", logger) is None


def test_decode_entry_follows_symlink_and_keeps_link_name(tmp_path, logger):
    (tmp_path / "real.pak").write_bytes(b"")
    os.symlink(tmp_path / "real.pak", tmp_path / "link.pak")
    entry = decode_entry(tmp_path / "link.pak", logger)
    assert entry.entry_type is EntryType.FILE
    assert entry.file_name == "link.pak"


def test_decode_entry_symlink_to_directory(tmp_path, logger):
    (tmp_path / "real").mkdir()
    os.symlink(tmp_path / "real", tmp_path / "shortcut")
    entry = decode_entry(tmp_path / "shortcut", logger)
    assert entry.entry_type is EntryType.DIRECTORY
    assert entry.file_name == "shortcut"


def test_resolve_symlink_to_file(tmp_path):
    (tmp_path / "target.pak").write_bytes(b"")
    os.symlink(tmp_path / "target.pak", tmp_path / "link")
    assert resolve_symlink(tmp_path / "link") == tmp_path / "target.pak"


def test_resolve_relative_symlink(tmp_path):
    (tmp_path / "target.pak").write_bytes(b"")
    os.symlink("target.pak", tmp_path / "link")
    assert resolve_symlink(tmp_path / "link") == tmp_path / "target.pak"


def test_resolve_symlink_detects_loop(tmp_path):
    os.symlink(tmp_path / "b", tmp_path / "a")
    os.symlink(tmp_path / "a", tmp_path / "b")
    with pytest.raises(SymlinkResolveError, match="Loop detected"):
        resolve_symlink(tmp_path / "a")


def test_resolve_non_link_cannot_be_read(tmp_path):
    (tmp_path / "plain.pak").write_bytes(b"")
    with pytest.raises(SymlinkResolveError, match="Could not read symlink"):
        resolve_symlink(tmp_path / "plain.pak")


def _chain(tmp_path, length):
    (tmp_path / "final.pak").write_bytes(b"")
    links = [tmp_path / f"l{i}" for i in range(length)]
    for current, following in zip(links, links[1:] + [tmp_path / "final.pak"]):
        os.symlink(following, current)
    return links[0]


def test_resolve_chain_within_depth(tmp_path):
    start = _chain(tmp_path, 10)
    assert resolve_symlink(start) == tmp_path / "final.pak"


def test_resolve_chain_exceeding_depth(tmp_path):
    start = _chain(tmp_path, 11)
    with pytest.raises(SymlinkResolveError) as info:
        resolve_symlink(start)
    assert info.value.max_depth == 10
    assert str(info.value) == "Max supported symlink depth exceeded (max: 10)"


def test_browser_starts_at_home(tmp_path, logger):
    browser = FileBrowser(tmp_path, logger=logger)
    assert browser.current_directory == tmp_path
    assert browser.can_go_back_forward() == (False, False)


def test_redirect_back_and_forward(tmp_path, logger):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    browser = FileBrowser(tmp_path, logger=logger)

    browser.redirect(first)
    browser.redirect(second)
    assert browser.current_directory == second
    assert browser.can_go_back_forward() == (True, False)

    browser.go_back()
    assert browser.current_directory == first
    assert browser.can_go_back_forward() == (True, True)

    browser.go_back()
    assert browser.current_directory == tmp_path
    assert browser.can_go_back_forward() == (False, True)

    browser.go_forward()
    assert browser.current_directory == first


def test_redirect_clears_future(tmp_path, logger):
    for name in ("a", "b", "c"):
        (tmp_path / name).mkdir()
    browser = FileBrowser(tmp_path, logger=logger)
    browser.redirect(tmp_path / "a")
    browser.redirect(tmp_path / "b")
    browser.go_back()
    browser.redirect(tmp_path / "c")
    assert browser.future == []
    assert browser.history == [tmp_path, tmp_path / "a"]


def test_redirect_to_same_directory_keeps_history(tmp_path, logger):
    browser = FileBrowser(tmp_path, logger=logger)
    browser.redirect(tmp_path)
    assert browser.history == []


def test_redirect_to_file_raises(tmp_path, logger):
    (tmp_path / "mod.pak").write_bytes(b"")
    browser = FileBrowser(tmp_path, logger=logger)
    with pytest.raises(FileBrowserRedirectError):
        browser.redirect(tmp_path / "mod.pak")
    with pytest.raises(FileBrowserRedirectError):
        browser.redirect(tmp_path / "missing")
    assert browser.current_directory == tmp_path


def test_go_back_with_empty_history_does_nothing(tmp_path, logger):
    browser = FileBrowser(tmp_path, logger=logger)
    browser.go_back()
    browser.go_forward()
    assert browser.current_directory == tmp_path


def test_read_current_dir(tmp_path, logger):
    (tmp_path / "mod.pak").write_bytes(b"")
    browser = FileBrowser(tmp_path, logger=logger)
    path, entries = browser.read_current_dir()
    assert path == tmp_path
    assert [entry.file_name for entry in entries] == ["mod.pak"]


def test_common_paths_skip_unknown(tmp_path, logger):
    browser = FileBrowser(
        tmp_path, None, tmp_path / "dl", tmp_path / "desk", logger=logger
    )
    assert browser.common_paths() == [
        ("Home", tmp_path),
        ("Downloads", tmp_path / "dl"),
        ("Desktop", tmp_path / "desk"),
    ]


def test_browser_without_home_starts_at_root(logger):
    browser = FileBrowser(logger=logger)
    assert browser.current_directory.parent == browser.current_directory
    assert browser.common_paths() == []


def test_from_environment_uses_home(logger):
    from pathlib import Path

    browser = FileBrowser.from_environment(logger)
    assert browser.current_directory == Path.home()
    assert browser.common_paths()[0] == ("Home", Path.home())