"""Parse the billing-history page into bills."""
import logging
import math
from datetime import date, datetime

from selectolax.parser import HTMLParser, Node

from numericable.fetch.endpoints import absolute_url
from numericable.parse.models import Bill

logger = logging.getLogger(__name__)

FIRST_BILL_ID = "firstFact"
# Older bills are titled "Du DD/MM/YYYY"
DATE_LABEL_PREFIX_LEN = 3


def node_text(node: Node | None) -> str | None:
    """Text content of a node, surrounding whitespace removed."""
    if node is None:
        return None
    return node.text().strip()


def parse_amount(text: str | None) -> float | None:
    """Parse a french euro amount such as ``"45,67 €"``."""
    if not text:
        return None
    cleaned = text.replace("€", "").replace("\xa0", "").replace(" ", "").strip()
    cleaned = cleaned.replace(",", ".")
    try:
        amount = float(cleaned)
    except ValueError:
        logger.debug(f"Failed to parse amount from {text!r}")
        return None
    if math.isnan(amount):
        return None
    return amount


def parse_date(text: str | None) -> date | None:
    """Parse a ``DD/MM/YYYY`` date, nothing else is accepted."""
    if not text:
        return None
    try:
        return datetime.strptime(text.strip(), "%d/%m/%Y").date()
    except ValueError:
        logger.debug(f"Failed to parse date from {text!r}")
        return None


def _link_of(block: Node) -> str | None:
    link = block.css_first("a.linkBtn")
    if link is None:
        return None
    return absolute_url(link.attributes.get("href"))


def parse_first_bill(block: Node) -> Bill:
    """Latest bill: the date sits in a ``<h2><span>``."""
    return Bill(
        date=parse_date(node_text(block.css_first("h2 span"))),
        amount=parse_amount(node_text(block.css_first("p.right"))),
        pdfurl=_link_of(block),
    )


def parse_other_bill(block: Node) -> Bill:
    """Older bill: the date is the ``<h3>`` title minus its label."""
    title = node_text(block.css_first("h3"))
    date_text = title[DATE_LABEL_PREFIX_LEN:] if title else None
    return Bill(
        date=parse_date(date_text),
        amount=parse_amount(node_text(block.css_first("p.right"))),
        pdfurl=_link_of(block),
    )


def parse_bills_page(html: str | None) -> list[Bill]:
    """Extract every complete bill from the billing-history page.

    Incomplete entries are dropped one by one, a page without any bill block
    gives an empty list.
    """
    logger.info("Parsing bill page")
    parser = HTMLParser(html or "")
    candidates: list[Bill] = []

    first = parser.css_first(f"#{FIRST_BILL_ID}")
    if first is not None:
        candidates.append(parse_first_bill(first))

    for block in parser.css("#facture > div"):
        if block.attributes.get("id") == FIRST_BILL_ID:
            continue
        candidates.append(parse_other_bill(block))

    bills = [bill for bill in candidates if bill.is_complete()]
    dropped = len(candidates) - len(bills)
    if dropped:
        logger.debug(f"Dropped {dropped} incomplete bill(s)")

    logger.info(f"{len(bills)} bill(s) retrieved")
    if not bills:
        logger.info("no bills retrieved")
    return bills
