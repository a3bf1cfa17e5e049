"""Create the tracker schema and inspect or clear stored keys."""
from __future__ import annotations

import argparse
import logging
from typing import Iterable

from .sqlite_manager import delete_kv, get_db_path, get_kv, list_keys, transaction

LOGGER = logging.getLogger(__name__)

KV_STATE_DDL = """
CREATE TABLE IF NOT EXISTS kv_state (
    key TEXT PRIMARY KEY,
    value TEXT,
    updated_at INTEGER
)
"""


def initialize_database(db_path: str | None = None) -> None:
    """Idempotently create ``kv_state`` in ``db_path`` (default: configured path)."""
    with transaction(db_path) as conn:
        conn.execute(KV_STATE_DDL)
    LOGGER.info("Database ready at %s", db_path or get_db_path())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solo tracker storage maintenance")
    parser.add_argument("--init", action="store_true", help="create the kv_state table")
    parser.add_argument("--keys", action="store_true", help="list stored keys")
    parser.add_argument("--show", metavar="KEY", help="print the stored JSON for KEY")
    parser.add_argument("--clear", metavar="KEY", help="delete KEY, e.g. shareHistory")
    return parser


def main(argv: Iterable[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not (args.init or args.keys or args.show or args.clear):
        parser.print_usage()
        return
    if args.init:
        initialize_database()
    if args.keys:
        for key in list_keys():
            print(key)
    if args.show:
        row = get_kv(args.show)
        print(row["value"] if row else f"{args.show}: not set")
    if args.clear:
        removed = delete_kv(args.clear)
        LOGGER.info("%s %s", "Cleared" if removed else "Nothing stored under", args.clear)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    main()
