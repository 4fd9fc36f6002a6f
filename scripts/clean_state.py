#!/usr/bin/env python3
"""Utility script to inspect and clean the local state database."""
import sqlite3
import sys

from numericable.config import config

TABLES = ("bills", "bank_operations")


def _existing_tables(cursor: sqlite3.Cursor) -> set[str]:
    cursor.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {row[0] for row in cursor.fetchall()}


def show_stats() -> None:
    """Show row counts of the state database."""
    conn = sqlite3.connect(config.STATE_DB)
    cursor = conn.cursor()
    existing = _existing_tables(cursor)

    print(f"State database: {config.STATE_DB}")
    for table in TABLES:
        if table not in existing:
            print(f"{table}: (missing)")
            continue
        cursor.execute(f"SELECT COUNT(*) FROM {table}")
        print(f"{table}: {cursor.fetchone()[0]} rows")

    if "bank_operations" in existing:
        cursor.execute("SELECT COUNT(*) FROM bank_operations WHERE bill_ids IS NOT NULL AND bill_ids != '[]'")
        print(f"linked operations: {cursor.fetchone()[0]}")

    conn.close()


def delete_table(table: str) -> None:
    """Delete every row of one table."""
    conn = sqlite3.connect(config.STATE_DB)
    cursor = conn.cursor()
    if table not in _existing_tables(cursor):
        print(f"No {table} table in {config.STATE_DB}")
        conn.close()
        return

    cursor.execute(f"SELECT COUNT(*) FROM {table}")
    count = cursor.fetchone()[0]
    if count == 0:
        print(f"{table} is already empty")
        conn.close()
        return

    cursor.execute(f"DELETE FROM {table}")
    conn.commit()
    print(f"Deleted all {count} rows from {table}")
    conn.close()


def unlink_all() -> None:
    """Forget every bill/operation link, keep the operations."""
    conn = sqlite3.connect(config.STATE_DB)
    cursor = conn.cursor()
    cursor.execute("UPDATE bank_operations SET bill_ids = '[]'")
    conn.commit()
    print(f"Reset links of {cursor.rowcount} operations")
    conn.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage:")
        print("  python scripts/clean_state.py stats              # Show statistics")
        print("  python scripts/clean_state.py delete <table>     # Delete bills or bank_operations")
        print("  python scripts/clean_state.py unlink             # Remove bill links from operations")
        sys.exit(1)

    command = sys.argv[1]

    if command == "stats":
        show_stats()
    elif command == "delete":
        if len(sys.argv) < 3 or sys.argv[2] not in TABLES:
            print(f"Error: Please provide one of {', '.join(TABLES)}")
            sys.exit(1)
        confirm = input(f"Are you sure you want to delete ALL {sys.argv[2]}? (yes/no): ")
        if confirm.lower() == "yes":
            delete_table(sys.argv[2])
        else:
            print("Cancelled")
    elif command == "unlink":
        unlink_all()
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)
