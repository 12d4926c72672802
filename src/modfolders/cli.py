#!/usr/bin/env python3
"""
CLI for inspecting and toggling a character's mod folders.

Usage:
    python -m modfolders.cli list ./Mods/Keqing
    python -m modfolders.cli disable ./Mods/Keqing "Summer Outfit"
    python -m modfolders.cli watch ./Mods/Keqing
"""

import argparse
import logging
import signal
import sys
import time
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .config import ModListConfig
from .exceptions import ModListError, ModNotTrackedError
from .mod_list import CharacterModList
from .models import Character, ModEntry, ModFolderChangedArgs

logger = logging.getLogger("modfolders.cli")


class GracefulShutdown:
    """Handle graceful shutdown on SIGINT/SIGTERM."""

    def __init__(self):
        self.should_exit = False
        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

    def _handler(self, signum, frame):
        logger.info("Received shutdown signal, stopping...")
        self.should_exit = True


def _resolve_folder(folder: str) -> Path:
    path = Path(folder).resolve()
    if not path.exists():
        logger.error(f"Mod folder does not exist: {path}")
        sys.exit(1)
    if not path.is_dir():
        logger.error(f"Mod folder is not a directory: {path}")
        sys.exit(1)
    return path


def _open_mod_list(args) -> CharacterModList:
    """Build and populate a mod list for the folder given on the command line."""
    folder = _resolve_folder(args.folder)
    character = Character(folder.name, args.character or folder.name)
    mod_list = CharacterModList(character, folder, config=ModListConfig.from_env())
    mod_list.scan()
    return mod_list


def _find_entry(mod_list: CharacterModList, name: str) -> ModEntry:
    """Match a mod by exact folder name, else by its enabled form."""
    for entry in mod_list.mods:
        if entry.folder_name == name:
            return entry

    wanted = mod_list.codec.strip_disabled_marker(name).lower()
    for entry in mod_list.mods:
        if mod_list.codec.strip_disabled_marker(entry.folder_name).lower() == wanted:
            return entry

    raise ModNotTrackedError(f"No mod named '{name}' in {mod_list.abs_mods_folder_path}")


def cmd_list(args):
    """List the mods of one character folder."""
    mod_list = _open_mod_list(args)
    try:
        print(f"\n{mod_list}:")
        if not len(mod_list):
            print("  (none)")
        for entry in mod_list.mods:
            state = "enabled " if entry.is_enabled else "disabled"
            print(f"  [{state}] {entry.mod.display_name}  ({entry.folder_name})")
    finally:
        mod_list.dispose()


def cmd_enable(args):
    """Enable one mod."""
    mod_list = _open_mod_list(args)
    try:
        entry = _find_entry(mod_list, args.name)
        mod_list.enable(entry.id)
        print(f"Enabled: {entry.folder_name}")
    finally:
        mod_list.dispose()


def cmd_disable(args):
    """Disable one mod."""
    mod_list = _open_mod_list(args)
    try:
        entry = _find_entry(mod_list, args.name)
        mod_list.disable(entry.id)
        print(f"Disabled: {entry.folder_name}")
    finally:
        mod_list.dispose()


def cmd_delete(args):
    """Delete one mod, to the recycle bin unless --permanent is given."""
    mod_list = _open_mod_list(args)
    try:
        entry = _find_entry(mod_list, args.name)
        mod_list.delete_entry(entry.id, move_to_recycle_bin=not args.permanent)
        print(f"{'Deleted' if args.permanent else 'Recycled'}: {entry.folder_name}")
    finally:
        mod_list.dispose()


def cmd_watch(args):
    """Watch one character folder and log every change."""
    mod_list = _open_mod_list(args)

    def on_changed(change: ModFolderChangedArgs):
        if change.old_path is not None:
            logger.info(f"{change.change_type.value}: {change.old_path.name} -> {change.new_path.name}")
        else:
            logger.info(f"{change.change_type.value}: {change.new_path.name}")

    mod_list.subscribe(on_changed)
    shutdown = GracefulShutdown()

    with mod_list:
        logger.info(f"Watching {mod_list} at {mod_list.abs_mods_folder_path}")
        logger.info("Press Ctrl+C to stop")
        while not shutdown.should_exit:
            time.sleep(args.interval)

    logger.info("Watcher stopped")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect and toggle mod folders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show every mod and whether it is enabled
  python -m modfolders.cli list ./Mods/Keqing

  # Disable a mod (renames the folder to DISABLED_<name>)
  python -m modfolders.cli disable ./Mods/Keqing "Summer Outfit"

  # Log changes made in a file explorer
  python -m modfolders.cli watch ./Mods/Keqing
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--character", default=None, help="Character display name (default: folder name)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List mods and their state")
    list_parser.add_argument("folder", help="Character mod folder")
    list_parser.set_defaults(func=cmd_list)

    enable_parser = subparsers.add_parser("enable", help="Enable a mod")
    enable_parser.add_argument("folder", help="Character mod folder")
    enable_parser.add_argument("name", help="Mod folder name (with or without the disabled prefix)")
    enable_parser.set_defaults(func=cmd_enable)

    disable_parser = subparsers.add_parser("disable", help="Disable a mod")
    disable_parser.add_argument("folder", help="Character mod folder")
    disable_parser.add_argument("name", help="Mod folder name (with or without the disabled prefix)")
    disable_parser.set_defaults(func=cmd_disable)

    delete_parser = subparsers.add_parser("delete", help="Delete a mod")
    delete_parser.add_argument("folder", help="Character mod folder")
    delete_parser.add_argument("name", help="Mod folder name (with or without the disabled prefix)")
    delete_parser.add_argument("--permanent", action="store_true", help="Delete instead of using the recycle bin")
    delete_parser.set_defaults(func=cmd_delete)

    watch_parser = subparsers.add_parser("watch", help="Log changes to a mod folder")
    watch_parser.add_argument("folder", help="Character mod folder")
    watch_parser.add_argument("--interval", type=float, default=1.0, help="Poll interval for shutdown in seconds")
    watch_parser.set_defaults(func=cmd_watch)

    return parser


def main(argv: Optional[List[str]] = None):
    load_dotenv()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        args.func(args)
    except ModListError as e:
        logger.error(str(e))
        sys.exit(1)
    except OSError as e:
        logger.error(f"Filesystem error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
