"""Command line interface of the mod manager."""

from __future__ import annotations

import argparse
import io
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from .errors import ModManagerError
from .file_browser import FileBrowser
from .logger import Logger
from .models import EntryType
from .state import State


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="onehorn", description="Manage Baldur's Gate 3 mods and profiles."
    )
    parser.add_argument("--data-dir", type=Path, help="where state and unpacked mods are kept")
    parser.add_argument("--game-dir", type=Path, help="the game's user data directory")
    parser.add_argument("--log-file", type=Path, help="append log lines to this file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="print log lines to standard error"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("mods", help="list the mods of the current profile")
    details = commands.add_parser("details", help="unpack a mod file and show its details")
    details.add_argument("file", type=Path)
    commands.add_parser("add", help="add the mod last shown with 'details'")
    for name, text in (
        ("remove", "remove a mod"),
        ("enable", "enable a mod"),
        ("disable", "disable a mod"),
    ):
        command = commands.add_parser(name, help=text)
        command.add_argument("index", type=int)
    commands.add_parser("apply", help="install the enabled mods into the game")
    create = commands.add_parser("create-profile", help="create a profile and switch to it")
    create.add_argument("name")
    switch = commands.add_parser("switch-profile", help="switch to another profile")
    switch.add_argument("index", type=int)
    commands.add_parser("profiles", help="list the profiles")
    listing = commands.add_parser("ls", help="list directories and mod files")
    listing.add_argument("path", nargs="?", type=Path)
    commands.add_parser("common-paths", help="show the well known user directories")
    return parser


def _print_mods(state: State, args: argparse.Namespace) -> None:
    for index, mod in enumerate(state.get_mods()):
        flag = "on" if mod.enabled else "off"
        print(f"{index}\t{flag}\t{mod.name}\t{mod.version}\t{mod.description}")


def _print_details(state: State, args: argparse.Namespace) -> None:
    details = state.get_mod_details(args.file)
    print(f"Name: {details.name}")
    print(f"Description: {details.description}")
    print(f"Version: {details.version}")


def _print_profiles(state: State, args: argparse.Namespace) -> None:
    profiles = state.get_profiles()
    for index, name in sorted(profiles.profiles.items()):
        marker = "*" if index == profiles.current_profile else " "
        print(f"{marker} {index}\t{name}")


_STATE_COMMANDS: dict[str, Callable[[State, argparse.Namespace], None]] = {
    "mods": _print_mods,
    "details": _print_details,
    "add": lambda state, args: state.add_current_mod(),
    "remove": lambda state, args: state.remove_mod(args.index),
    "enable": lambda state, args: state.set_mod_enabled_state(args.index, True),
    "disable": lambda state, args: state.set_mod_enabled_state(args.index, False),
    "apply": lambda state, args: state.apply(),
    "create-profile": lambda state, args: state.create_profile(args.name),
    "switch-profile": lambda state, args: state.switch_profile(args.index),
    "profiles": _print_profiles,
}


def _browse(args: argparse.Namespace, logger: Logger) -> None:
    browser = FileBrowser.from_environment(logger)
    if args.command == "common-paths":
        for name, path in browser.common_paths():
            print(f"{name}\t{path}")
        return
    if args.path is not None:
        browser.redirect(args.path)
    current, entries = browser.read_current_dir()
    print(current)
    for entry in entries:
        suffix = "/" if entry.entry_type is EntryType.DIRECTORY else ""
        print(f"{entry.file_name}{suffix}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    stream = sys.stderr if args.verbose else io.StringIO()
    logger = Logger(args.log_file, stream)
    logger.install_excepthook()
    try:
        if args.command in ("ls", "common-paths"):
            _browse(args, logger)
        else:
            state = State(args.data_dir, args.game_dir, logger)
            state.load()
            _STATE_COMMANDS[args.command](state, args)
    except (ModManagerError, OSError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())