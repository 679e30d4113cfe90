"""
Snapshot store management.

Adds, removes and lists the camera snapshot sources the bot serves, and
shows command usage counts.

    python snapshots.py add frontdoor http://camera.local:8081/current.jpg
    python snapshots.py remove frontdoor
    python snapshots.py list
    python snapshots.py stats
"""

import sys
import argparse
import logging
from pathlib import Path

from unblinkingbot.config import BOT_DIR, ConfigError, load_bot_config
from unblinkingbot.errors import StoreError
from unblinkingbot.models import SNAPSHOT_PREFIX, SnapshotRecord
from unblinkingbot.storage import SqlitePrefixStore, UsageLogger, configure_storage

logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("snapshots")


def snapshot_key(name: str) -> str:
    return f"{SNAPSHOT_PREFIX}{name}"


def cmd_add(store: SqlitePrefixStore, args) -> int:
    record = SnapshotRecord(key=snapshot_key(args.name), name=args.name, url=args.url)
    replaced = store.get(record.key) is not None
    store.put(record.key, record.to_dict())
    action = "Replaced" if replaced else "Saved"
    print(f"{action} snapshot '{args.name}' -> {args.url}")
    return 0


def cmd_remove(store: SqlitePrefixStore, args) -> int:
    if store.delete(snapshot_key(args.name)):
        print(f"Removed snapshot '{args.name}'")
        return 0
    print(f"No snapshot named '{args.name}'")
    return 1


def cmd_list(store: SqlitePrefixStore, args) -> int:
    entries = store.get_by_prefix(SNAPSHOT_PREFIX)
    if not entries:
        print("No snapshots stored.")
        return 0
    for key, value in entries.items():
        record = SnapshotRecord.from_value(key, value)
        if record is None:
            print(f"{key}: <malformed>")
        else:
            print(f"{record.name}\t{record.url}")
    return 0


def cmd_stats(store: SqlitePrefixStore, args) -> int:
    stats = UsageLogger().get_command_stats()
    if not stats:
        print("No commands recorded yet.")
        return 0
    for command, counts in sorted(stats.items()):
        print(f"{command}: {counts['command']} handled, {counts['error']} errors")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage stored camera snapshots")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to bot config JSON file, used for its data_dir"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Add or replace a snapshot source")
    add.add_argument("name", help="Name users ask for, e.g. frontdoor")
    add.add_argument("url", help="URL that returns the current image")
    add.set_defaults(func=cmd_add)

    remove = subparsers.add_parser("remove", help="Remove a snapshot source")
    remove.add_argument("name")
    remove.set_defaults(func=cmd_remove)

    subparsers.add_parser("list", help="List snapshot sources").set_defaults(func=cmd_list)
    subparsers.add_parser("stats", help="Show command usage").set_defaults(func=cmd_stats)

    return parser


def main(argv: list[str] | None = None, base_dir: Path = BOT_DIR) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_bot_config(args.config, base_dir)
        configure_storage(config.data_dir)
        return args.func(SqlitePrefixStore(), args)
    except (ConfigError, StoreError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
