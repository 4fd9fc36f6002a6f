"""SQLite store for bank operations bills get linked to."""
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import aiofiles
import aiosqlite
import orjson

from numericable.config import config
from numericable.parse.models import BankOperation

logger = logging.getLogger(__name__)


def _row_to_operation(row) -> BankOperation:
    return BankOperation(
        id=row[0],
        date=row[1],
        amount=row[2],
        label=row[3] or "",
        bill_ids=orjson.loads(row[4]) if row[4] else [],
    )


class OperationStore:
    """Bank operations imported from the user's bank exports."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or config.STATE_DB

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS bank_operations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    date TEXT NOT NULL,
                    amount REAL NOT NULL,
                    label TEXT,
                    bill_ids TEXT
                )
                """
            )
            await db.execute(
                "CREATE INDEX IF NOT EXISTS idx_operations_date ON bank_operations(date)"
            )
            await db.commit()

    async def add_operations(self, operations: list[BankOperation]) -> list[int]:
        """Insert operations and return their ids."""
        ids = []
        async with aiosqlite.connect(self.db_path) as db:
            for op in operations:
                cursor = await db.execute(
                    "INSERT INTO bank_operations (date, amount, label, bill_ids) VALUES (?, ?, ?, ?)",
                    (op.date.isoformat(), op.amount, op.label, orjson.dumps(op.bill_ids).decode()),
                )
                ids.append(cursor.lastrowid)
            await db.commit()
        return ids

    async def import_json(self, path: Path) -> int:
        """Import a JSON list of ``{date, amount, label}`` objects."""
        async with aiofiles.open(path, "rb") as f:
            raw = orjson.loads(await f.read())
        operations = [BankOperation(**item) for item in raw]
        await self.add_operations(operations)
        logger.info(f"Imported {len(operations)} bank operation(s) from {path}")
        return len(operations)

    async def find_candidates(self, start: date, end: date) -> list[BankOperation]:
        """Operations dated between start and end, both included."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT id, date, amount, label, bill_ids FROM bank_operations
                WHERE date >= ? AND date <= ?
                ORDER BY date
                """,
                (start.isoformat(), end.isoformat()),
            )
            rows = await cursor.fetchall()
        return [_row_to_operation(row) for row in rows]

    async def get(self, operation_id: int) -> Optional[BankOperation]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT id, date, amount, label, bill_ids FROM bank_operations WHERE id = ?",
                (operation_id,),
            )
            row = await cursor.fetchone()
        return _row_to_operation(row) if row else None

    async def link_bill(self, operation_id: int, bill_id: str) -> None:
        """Attach a bill to an operation, once."""
        operation = await self.get(operation_id)
        if operation is None:
            raise KeyError(f"Unknown bank operation {operation_id}")
        if bill_id in operation.bill_ids:
            return
        operation.bill_ids.append(bill_id)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE bank_operations SET bill_ids = ? WHERE id = ?",
                (orjson.dumps(operation.bill_ids).decode(), operation_id),
            )
            await db.commit()
