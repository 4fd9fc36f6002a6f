"""SQLite store for saved bills and the PDF download step."""
import logging
from pathlib import Path
from typing import Optional

import aiofiles
import aiosqlite
import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from numericable.config import config
from numericable.parse.models import Bill, RunParams

logger = logging.getLogger(__name__)


class BillStore:
    """Keeps one row per bill, keyed by its PDF URL."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or config.STATE_DB

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS bills (
                    pdfurl TEXT PRIMARY KEY,
                    date TEXT NOT NULL,
                    amount REAL NOT NULL,
                    vendor TEXT NOT NULL,
                    filename TEXT,
                    saved_at TIMESTAMP
                )
                """
            )
            await db.commit()
            logger.debug(f"Bill store initialized at {self.db_path}")

    async def existing_urls(self) -> set[str]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT pdfurl FROM bills")
            return {row[0] for row in await cursor.fetchall()}

    async def save_bills(self, bills: list[Bill], filenames: Optional[dict[str, str]] = None) -> list[Bill]:
        """Insert bills not stored yet and return them."""
        known = await self.existing_urls()
        new_bills = []
        seen = set(known)
        for bill in bills:
            if bill.pdfurl in seen:
                continue
            seen.add(bill.pdfurl)
            new_bills.append(bill)

        if not new_bills:
            logger.info("No new bill to save")
            return []

        filenames = filenames or {}
        async with aiosqlite.connect(self.db_path) as db:
            await db.executemany(
                """
                INSERT INTO bills (pdfurl, date, amount, vendor, filename, saved_at)
                VALUES (?, ?, ?, ?, ?, datetime('now'))
                """,
                [
                    (
                        bill.pdfurl,
                        bill.date.isoformat(),
                        bill.amount,
                        bill.vendor,
                        filenames.get(bill.pdfurl),
                    )
                    for bill in new_bills
                ],
            )
            await db.commit()
        logger.info(f"Saved {len(new_bills)} new bill(s), {len(bills) - len(new_bills)} already known")
        return new_bills

    async def list_bills(self) -> list[Bill]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT date, amount, pdfurl, vendor FROM bills ORDER BY date DESC"
            )
            rows = await cursor.fetchall()
        return [
            Bill(date=row[0], amount=row[1], pdfurl=row[2], vendor=row[3])
            for row in rows
        ]


@retry(
    stop=stop_after_attempt(config.PDF_MAX_RETRIES),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
    reraise=True,
)
async def download_pdf(client: httpx.AsyncClient, url: str, destination: Path) -> Path:
    """Stream a bill PDF to disk.

    Bytes go to a ``.part`` file next to the destination, renamed only once
    the stream is complete.
    """
    partial = destination.with_name(destination.name + ".part")
    try:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            async with aiofiles.open(partial, "wb") as f:
                async for chunk in response.aiter_bytes():
                    await f.write(chunk)
    except Exception:
        partial.unlink(missing_ok=True)
        raise
    partial.replace(destination)
    logger.debug(f"Downloaded {url} to {destination}")
    return destination


async def save_bills(
    bills: list[Bill],
    params: RunParams,
    client: httpx.AsyncClient,
    store: BillStore,
) -> list[Bill]:
    """Download the PDFs of new bills and record them in the store.

    Bills already known to the store are skipped. Returns every bill passed
    in so the caller can go on with reconciliation.
    """
    known = await store.existing_urls()
    fresh = [bill for bill in bills if bill.pdfurl not in known]

    filenames: dict[str, str] = {}
    if params.download_pdfs and fresh:
        folder = Path(params.folder_path) if params.folder_path else config.BILLS_DIR
        folder.mkdir(parents=True, exist_ok=True)
        for bill in fresh:
            destination = folder / bill.filename
            if destination.exists():
                logger.debug(f"{destination} already on disk")
            else:
                await download_pdf(client, bill.pdfurl, destination)
            filenames[bill.pdfurl] = bill.filename

    await store.save_bills(fresh, filenames)
    return bills
