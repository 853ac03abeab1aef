# onehorn

A mod manager for Baldur's Gate 3.

onehorn reads Larian `.pak` packages (including multi-part archives), pulls
the `meta.lsx` descriptions out of them, keeps mods organised in named
profiles, and writes the game's `modsettings.lsx` so that the enabled mods
load.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

Installing the package provides the `onehorn` command:

```
onehorn --help
```

Global options, given before the command:

- `--data-dir DIR` – where `state.json` and unpacked mods are kept
  (default: the per-user data directory for `OneHornModManager`)
- `--game-dir DIR` – the game's user data directory (default: located
  automatically, see below)
- `--log-file FILE` – append every log line to this file
- `-v`, `--verbose` – print log lines to standard error

Commands:

| Command | What it does |
| --- | --- |
| `mods` | list the mods of the current profile: index, on/off, name, version, description |
| `details FILE` | unpack a `.pak` or `.zip` mod file into the mod store and show its name, description and version |
| `add` | add the mod last shown with `details` to the current profile |
| `remove INDEX` | remove a mod, deleting its unpacked data unless another entry uses it |
| `enable INDEX` / `disable INDEX` | switch a mod on or off |
| `apply` | link the enabled mods' `.pak` files into the game's `Mods` folder and write `modsettings.lsx` |
| `create-profile NAME` | create a profile and switch to it |
| `switch-profile INDEX` | switch to another profile |
| `profiles` | list the profiles, marking the current one with `*` |
| `ls [PATH]` | list the directories and `.pak`/`.zip` files in `PATH` (default: the home directory) |
| `common-paths` | show the Home, Documents, Downloads and Desktop directories |

On failure the command prints `error: ...` to standard error and exits with
status 1.

A new state starts with a profile named `Default`. A state file that cannot be
read is removed and the defaults are used.

When `--game-dir` is not given, the game's data directory is looked up on
Linux in the Proton prefix of the Steam library that holds the game, on
Windows under `%LOCALAPPDATA%`, and on macOS under `~/Documents`, in each case
in `Larian Studios/Baldur's Gate 3`.

## Using it as a library

Reading a package and its mod metadata:

```python
from pathlib import Path

from onehorn.package_reader import read_package

package = read_package(Path("MyMod.pak"))
for meta in package.get_meta():
    print(meta.name.value, str(meta.version), meta.version.version64())
```

Packages in the formats of older Larian games are recognised and refused with a
`PackageReadError`; a metadata file that cannot be decoded or parsed raises a
`MetaReadError`. All errors of the package derive from
`onehorn.errors.ModManagerError`.

Producing a `modsettings.lsx` document for a list of mods:

```python
from onehorn.meta import Meta
from onehorn.mod_settings import render_mod_settings

xml_text = render_mod_settings([], Meta.gustav_dev())
```

The `GustavDev` module is always written first; after it come the enabled mods
that have metadata, in profile order.

Managing profiles and mods programmatically goes through `onehorn.state.State`,
which offers `load`, `save`, `get_mods`, `get_mod_details`, `add_current_mod`,
`remove_mod`, `set_mod_enabled_state`, `create_profile`, `switch_profile`,
`get_profiles`, `build_mod_settings` and `apply`. Directory browsing with back
and forward history is in `onehorn.file_browser.FileBrowser`, and
`onehorn.logger.Logger` keeps every log line in memory besides printing it.

## What it does not do

- There is no graphical interface; everything is done through the `onehorn`
  command or the library.
- When a package holds several `meta.lsx` files, only the first is used for
  the mod's details and its entry in `modsettings.lsx`.
- Load order cannot be changed other than by the order in which mods are added.