"""Drop and recreate the feedback table in the configured database.

Usage:
    python scripts/reset_local_db.py [--keep-data]

Environment:
    DATABASE_URL and the other required settings (or SECRET_ID) must be
    available in the current shell.
"""

from __future__ import annotations

import argparse

from llm_alert_filter.db import create_schema, drop_schema


def reset_database(*, keep_data: bool = False) -> None:
    if not keep_data:
        drop_schema()
    engine = create_schema()
    print(f"Feedback store ready at {engine.url.render_as_string(hide_password=True)}.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--keep-data",
        action="store_true",
        help="only create missing tables, leaving recorded feedback in place",
    )
    args = parser.parse_args()
    reset_database(keep_data=args.keep_data)
