"""Data models for scraped bills and bank operations."""
import math
import datetime as dt
from typing import Optional
from pydantic import BaseModel, Field

VENDOR = "Numericable"


class Bill(BaseModel):
    """Invoice listed on the billing-history page."""

    date: Optional[dt.date] = Field(default=None, description="Invoice date")
    amount: Optional[float] = Field(default=None, description="Amount in euros")
    pdfurl: Optional[str] = Field(default=None, description="Absolute URL of the PDF")
    vendor: str = Field(default=VENDOR)

    def is_complete(self) -> bool:
        """A bill is kept only when date, amount and link are all usable."""
        if not self.date or not self.pdfurl:
            return False
        if self.amount is None or math.isnan(self.amount):
            return False
        return bool(self.amount)

    @property
    def filename(self) -> str:
        """Name of the downloaded PDF."""
        return f"{self.date.strftime('%Y%m%d')}_{self.vendor.lower()}_{self.amount:.2f}EUR.pdf"


class BankOperation(BaseModel):
    """Bank transaction a bill can be linked to. Debits are negative."""

    id: Optional[int] = None
    date: dt.date
    amount: float
    label: str = ""
    bill_ids: list[str] = Field(default_factory=list)


class MatchingPolicy(BaseModel):
    """Tolerances used to pair a bill with a bank operation."""

    min_date_delta: int = 1
    max_date_delta: int = 1
    amount_delta: float = 0.1
    identifiers: list[str] = Field(default_factory=lambda: [VENDOR.lower()])


class RunParams(BaseModel):
    """Invocation parameters of a konnector run."""

    login: str
    password: str = Field(repr=False)
    folder_path: Optional[str] = None
    download_pdfs: bool = True
    started_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))
