"""Command line interface: safe-op backup|restore|list|clean|prune."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config import BackupConfig, BackupOptions
from .backup import BackupStore
from .exceptions import SafeOpError, UsageError

COMMANDS = ("backup", "restore", "list", "clean", "prune")

EXAMPLES = """\
Examples:
  safe-op backup src/main.py
  safe-op backup config.json --max-backups 5 --comment "Before refactor"
  safe-op restore .context/backups/main.py.2025-12-30T17-30-00.bak
  safe-op list src/main.py
  safe-op clean src/main.py 3
  safe-op prune --keep 5
"""


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting."""

    def error(self, message):
        raise UsageError(message)


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {number}")
    return number


def build_parser(config: BackupConfig) -> ArgumentParser:
    parser = ArgumentParser(
        prog="safe-op",
        description="Back up files before risky edits and restore them.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log actions to stderr")
    sub = parser.add_subparsers(dest="command", metavar="<command>")

    p = sub.add_parser("backup", help="Create backup of file")
    p.add_argument("file")
    p.add_argument("--max-backups", type=non_negative_int, default=config.max_backups,
                   help=f"Maximum backups to keep (default: {config.max_backups})")
    p.add_argument("--comment", default=None, help="Add comment to backup record")

    p = sub.add_parser("restore", help="Restore from backup")
    p.add_argument("backup")
    p.add_argument("target", nargs="?", default=None)

    p = sub.add_parser("list", help="List backups (all or for specific file)")
    p.add_argument("file", nargs="?", default=None)

    p = sub.add_parser("clean", help="Keep only N most recent backups")
    p.add_argument("file")
    p.add_argument("keep", type=non_negative_int)

    p = sub.add_parser("prune", help="Apply retention to every backed-up file")
    p.add_argument("--keep", type=non_negative_int, default=config.clean_keep,
                   help=f"Backups to keep per file (default: {config.clean_keep})")

    return parser


def configure_logging(verbose: bool = False) -> None:
    level = os.getenv("SAFE_OP_LOG_LEVEL") or ("INFO" if verbose else "WARNING")
    logging.basicConfig(level=level.upper(), format="%(levelname)s %(name)s: %(message)s")


def run_command(args: argparse.Namespace, store: BackupStore) -> None:
    if args.command == "backup":
        options = BackupOptions(max_backups=args.max_backups, comment=args.comment)
        artifact = store.backup(args.file, options)
        print(f"Backup created: {artifact}")

    elif args.command == "restore":
        restored = store.restore(args.backup, args.target)
        print(f"Restored: {restored}")

    elif args.command == "list":
        records = store.list(args.file)
        if not records:
            print("No backups found.")
        for r in records:
            print(f"{r.timestamp_text} - {r.operation.value}: {r.backup_path}")
            if r.comment:
                print(f"  Comment: {r.comment}")

    elif args.command == "clean":
        store.clean(args.file, args.keep)
        print(f"Cleaned backups for {args.file}, keeping {args.keep} most recent")

    elif args.command == "prune":
        deleted = store.prune_all(args.keep)
        print(f"Pruned {deleted} backup(s), keeping {args.keep} most recent per file")


def main(argv: Optional[List[str]] = None, store: Optional[BackupStore] = None) -> int:
    """Run one subcommand and return the process exit code."""
    argv = sys.argv[1:] if argv is None else list(argv)

    try:
        config = store.config if store is not None else BackupConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser = build_parser(config)
    if not argv or argv[0] in ("-h", "--help"):
        parser.print_help()
        return 0

    try:
        command = next((a for a in argv if not a.startswith("-")), None)
        if command not in COMMANDS:
            raise UsageError(f"Unknown command: {command}" if command else "Command required")

        args = parser.parse_args(argv)
        configure_logging(args.verbose)
        run_command(args, store if store is not None else BackupStore(config))

    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (SafeOpError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def main_entry() -> None:
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
