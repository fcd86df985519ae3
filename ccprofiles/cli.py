"""
Command-line interface for ccprofiles (``ccp``).

Parses arguments, calls exactly one ProfileStore operation per command and
renders the result. All prompting happens here; the store never reads from the
terminal.
"""

import argparse
import json
import sys
import time
from typing import Any, Callable, Dict, List, Optional, TextIO

from . import __version__
from .config.config_schema import ConfigSchema, parse_cli_value
from .config.document import ABSENT, DiffEntry
from .config.errors import PathNotFound, ProfileNotFound, ProfileStoreError
from .config.paths import StorePaths
from .config.profile_manager import DEFAULT_PROFILE
from .config.profile_store import ProfileStore
from .ui.selector import ProfileSelector
from .utils.logging_config import LoggingConfig


logger = LoggingConfig.get_logger('cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ccp",
        description="Claude Code Profiles - manage your Claude Code settings",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config-dir", help="Root configuration directory (default: ~/.claude)")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("list", help="List all available profiles")
    sub.add_parser("current", help="Show current active profile")

    p = sub.add_parser("use", help="Switch to a profile")
    p.add_argument("name")

    p = sub.add_parser("create", help="Create a new profile")
    p.add_argument("name")
    p.add_argument("-f", "--from", dest="from_profile", help="Copy settings from existing profile")

    p = sub.add_parser("delete", help="Delete a profile")
    p.add_argument("name")
    p.add_argument("-f", "--force", action="store_true", help="Skip confirmation")

    p = sub.add_parser("copy", help="Copy a profile")
    p.add_argument("src")
    p.add_argument("dst")

    p = sub.add_parser("rename", help="Rename a profile")
    p.add_argument("old")
    p.add_argument("new")

    p = sub.add_parser("configure", help="Interactive configuration")
    p.add_argument("name", nargs="?", metavar="PROFILE")
    p.add_argument("-p", "--profile", help="Profile to configure (default: current)")

    p = sub.add_parser("set", help="Set a configuration value")
    p.add_argument("key", help='Key path (e.g., "model" or "env.ANTHROPIC_BASE_URL")')
    p.add_argument("value", help="Value; parsed as JSON when possible, otherwise a string")
    p.add_argument("-p", "--profile", help="Profile to modify (default: current)")

    p = sub.add_parser("get", help="Get a configuration value")
    p.add_argument("key")
    p.add_argument("-p", "--profile", help="Profile to read from (default: current)")

    p = sub.add_parser("unset", help="Unset/remove a configuration value")
    p.add_argument("key")
    p.add_argument("-p", "--profile", help="Profile to modify (default: current)")

    p = sub.add_parser("export", help="Export profile to stdout as JSON")
    p.add_argument("name", nargs="?")

    p = sub.add_parser("import", help="Import profile from stdin")
    p.add_argument("name")
    p.add_argument("-f", "--force", action="store_true", help="Overwrite an existing profile")

    p = sub.add_parser("diff", help="Compare two profiles")
    p.add_argument("profile1")
    p.add_argument("profile2")

    p = sub.add_parser("backup", help="Create a backup of current settings")
    p.add_argument("name", nargs="?")

    p = sub.add_parser("restore", help="Restore from a backup")
    p.add_argument("backup")

    sub.add_parser("backups", help="List backups")

    p = sub.add_parser("init", help="Initialize profiles directory structure")
    p.add_argument("--force", action="store_true", help="Re-seed 'default' from the current settings")

    sub.add_parser("status", help="Show current profile and unsaved edits to settings.json")
    sub.add_parser("watch", help="Watch settings.json for external changes")

    return parser


def _format_value(value: Any) -> str:
    if value is ABSENT:
        return "(absent)"
    return json.dumps(value, ensure_ascii=False)


def render_diff(entries: List[DiffEntry], out: TextIO) -> None:
    for entry in entries:
        if entry.left is not ABSENT:
            print(f"- {entry.path}: {_format_value(entry.left)}", file=out)
        if entry.right is not ABSENT:
            print(f"+ {entry.path}: {_format_value(entry.right)}", file=out)


class Cli:
    """Binds parsed arguments to ProfileStore calls and prints the outcome."""

    def __init__(self, store: ProfileStore, stdin: TextIO, stdout: TextIO, stderr: TextIO):
        self.store = store
        self.stdin = stdin
        self.out = stdout
        self.err = stderr

    def say(self, message: str = "") -> None:
        print(message, file=self.out)

    def ask(self, prompt: str) -> str:
        print(prompt, end="", file=self.out, flush=True)
        line = self.stdin.readline()
        if not line:
            raise EOFError(prompt)
        return line.rstrip("\n")

    def confirm(self, prompt: str, default: bool = False) -> bool:
        hint = "[Y/n]" if default else "[y/N]"
        answer = self.ask(f"{prompt} {hint} ").strip().lower()
        if not answer:
            return default
        return answer in ("y", "yes")

    def run(self, args: argparse.Namespace) -> int:
        handler: Callable[[argparse.Namespace], int] = getattr(
            self, f"cmd_{(args.command or 'interactive').replace('-', '_')}"
        )
        return handler(args)

    def cmd_interactive(self, args) -> int:
        names = self.store.list()
        if not names:
            self.say("⚠️  No profiles found. Run 'ccp init' to initialize.")
            return 0

        current = self.store.current()
        selector = ProfileSelector.for_current(names, current)
        while not selector.finished:
            self.say("Select profile (j/k to move, Enter to choose, q to cancel):")
            for index, name in enumerate(names, 1):
                marker = "→" if index - 1 == selector.state.index else " "
                self.say(f"  {marker} {index}. {name}")
            try:
                key = self.ask("> ")
            except EOFError:
                key = "q"
            selector.press(key)

        selected = selector.result()
        if selected is None:
            self.say("Cancelled")
        elif selected == current:
            self.say(f"· Already on '{selected}'")
        else:
            self.store.use(selected)
            self.say(f"✅ Switched to profile '{selected}'")
        return 0

    def cmd_init(self, args) -> int:
        if self.store.is_initialized() and not args.force:
            self.say("✅ Profiles directory already initialized")
        else:
            had_settings = self.store.settings.live_exists()
            self.store.init(force=args.force)
            if had_settings:
                self.say("✅ Created default profile from existing settings")
            else:
                self.say("✅ Initialized with empty default profile")
        self.say(f"  Profiles dir: {self.store.paths.profiles_dir}")
        self.say(f"  Backups dir: {self.store.paths.backups_dir}")
        return 0

    def cmd_list(self, args) -> int:
        names = self.store.list()
        if not names:
            self.say("⚠️  No profiles found. Run 'ccp init' to initialize.")
            return 0
        current = self.store.current()
        self.say("Available profiles:")
        for name in names:
            marker = "→" if name == current else " "
            self.say(f"  {marker} {name}")
        return 0

    def cmd_current(self, args) -> int:
        current = self.store.current()
        if current is None:
            self.say("⚠️  No profile selected. Run 'ccp init' or 'ccp use <profile>'")
        else:
            self.say(current)
        return 0

    def cmd_use(self, args) -> int:
        self.store.use(args.name)
        self.say(f"✅ Switched to profile '{args.name}'")
        return 0

    def cmd_create(self, args) -> int:
        self.store.create(args.name, from_profile=args.from_profile)
        source = f"'{args.from_profile}'" if args.from_profile else "current settings"
        self.say(f"✅ Created profile '{args.name}' from {source}")
        return 0

    def cmd_delete(self, args) -> int:
        if not self.store.profiles.exists(args.name):
            raise ProfileNotFound(args.name)
        if args.name == DEFAULT_PROFILE and not args.force:
            raise ProfileStoreError(f"Cannot delete '{DEFAULT_PROFILE}' profile. Use --force to override.")
        if not args.force and not self.confirm(f"Delete profile '{args.name}'?"):
            self.say("Cancelled")
            return 0
        was_current = self.store.current() == args.name
        self.store.delete(args.name)
        self.say(f"✅ Deleted profile '{args.name}'")
        if was_current:
            self.say("⚠️  No profile is active now. Run 'ccp use <profile>' to pick one.")
        return 0

    def cmd_copy(self, args) -> int:
        self.store.copy(args.src, args.dst)
        self.say(f"✅ Copied '{args.src}' to '{args.dst}'")
        return 0

    def cmd_rename(self, args) -> int:
        self.store.rename(args.old, args.new)
        self.say(f"✅ Renamed '{args.old}' to '{args.new}'")
        return 0

    def cmd_configure(self, args) -> int:
        target = self.store.settings.resolve_target(args.profile or args.name)
        document = self.store.profiles.load(target)

        self.say(f"Configuring profile '{target}'")
        self.say("Press Enter to keep current value, or enter new value.\n")

        answers: Dict[str, Any] = {}
        for field in self.store.schema.fields:
            current = document.get(field.path) if document.has(field.path) else None
            if field.field_type is bool:
                default = bool(current) if current is not None else bool(field.default)
                answers[field.path] = self.confirm(field.description, default=default)
                continue
            shown = field.display(current)
            raw = self.ask(f"{field.description} [{shown}]: " if shown else f"{field.description}: ")
            if raw.strip():
                answers[field.path] = raw.strip()

        name = self.store.configure(answers, profile=target)
        if self.store.current() == name:
            self.say("\n✅ Configuration saved and applied")
        else:
            self.say("\n✅ Configuration saved")
        return 0

    def cmd_set(self, args) -> int:
        name = self.store.set_value(args.key, parse_cli_value(args.value), profile=args.profile)
        self.say(f"✅ Set {args.key}={args.value} in '{name}'")
        return 0

    def cmd_get(self, args) -> int:
        try:
            value = self.store.get_value(args.key, profile=args.profile)
        except PathNotFound:
            self.say("(not set)")
            return 0
        self.say(json.dumps(value, indent=2, ensure_ascii=False))
        return 0

    def cmd_unset(self, args) -> int:
        name = self.store.settings.resolve_target(args.profile)
        if self.store.unset_value(args.key, profile=name):
            self.say(f"✅ Removed '{args.key}' from '{name}'")
        else:
            self.say(f"! Key '{args.key}' not found in '{name}'")
        return 0

    def cmd_export(self, args) -> int:
        data = self.store.export(args.name)
        self.out.write(data.decode("utf-8"))
        self.out.flush()
        return 0

    def cmd_import(self, args) -> int:
        # decoding is left to the document parser so bad UTF-8 is a ParseError
        buffer = getattr(self.stdin, "buffer", None)
        if buffer is not None:
            data = buffer.read()
        else:
            data = self.stdin.read().encode("utf-8")
        self.store.import_profile(args.name, data, overwrite=args.force)
        print(f"✅ Imported profile '{args.name}'", file=self.err)
        return 0

    def cmd_diff(self, args) -> int:
        entries = self.store.diff(args.profile1, args.profile2)
        if not entries:
            self.say("= Profiles are identical")
            return 0
        self.say(f"Diff: {args.profile1} vs {args.profile2}\n")
        render_diff(entries, self.out)
        return 0

    def cmd_backup(self, args) -> int:
        name = self.store.backup(args.name)
        self.say(f"✅ Created backup '{name}'")
        self.say(f"  Path: {self.store.paths.backup_path(name)}")
        return 0

    def cmd_restore(self, args) -> int:
        auto_name = self.store.restore(args.backup)
        if auto_name:
            print(f"ℹ️  Created auto-backup '{auto_name}'", file=self.err)
        self.say(f"✅ Restored from '{args.backup}'")
        return 0

    def cmd_backups(self, args) -> int:
        names = self.store.list_backups()
        if not names:
            self.say("No backups found.")
            return 0
        self.say("Available backups:")
        for name in names:
            self.say(f"  {name}")
        return 0

    def cmd_status(self, args) -> int:
        status = self.store.status()
        if status["current"] is None:
            self.say("⚠️  No profile selected. Run 'ccp init' or 'ccp use <profile>'")
            return 0
        self.say(f"Current profile: {status['current']}")
        self.say(f"Settings file: {status['settings_file']}")
        if not status["drift"]:
            self.say("✅ settings.json matches the current profile")
        else:
            self.say("⚠️  settings.json differs from the current profile:")
            render_diff(status["drift"], self.out)
        return 0

    def cmd_watch(self, args) -> int:
        def report(entries: List[DiffEntry]) -> None:
            if entries:
                self.say("⚠️  settings.json changed outside of ccp:")
                render_diff(entries, self.out)
            else:
                self.say("✅ settings.json matches the current profile")

        self.store.settings.resolve_target(None)
        self.say(f"👀 Watching {self.store.paths.settings_file} (Ctrl+C to stop)")
        with self.store.settings as settings:
            settings.watch(report)
            try:
                while True:
                    time.sleep(1)
            except KeyboardInterrupt:
                self.say("🛑 Stopped watching")
        return 0


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    paths = StorePaths.from_env(args.config_dir)
    try:
        LoggingConfig.setup_logging(paths.logs_dir, paths.log_level)
    except OSError as e:
        print(f"⚠️  File logging disabled: {e}", file=stderr)

    store = ProfileStore(paths, ConfigSchema())
    cli = Cli(store, stdin, stdout, stderr)
    logger.debug(f"Running command: {args.command or 'interactive'}")
    try:
        return cli.run(args)
    except ProfileStoreError as e:
        logger.error(f"Command '{args.command or 'interactive'}' failed: {e}")
        print(f"❌ {e.message}", file=stderr)
        return 1
    except (EOFError, KeyboardInterrupt):
        print("\nCancelled", file=stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
