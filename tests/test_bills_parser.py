"""Tests for bill extraction from the billing-history page."""
from datetime import date

import pytest
from numericable.config import config
from numericable.parse.bills_parser import parse_amount, parse_bills_page, parse_date
from pages import FIRST_BILL, bills_page, other_bill


def test_parse_amount_french_format():
    """Test comma decimal and euro suffix."""
    assert parse_amount("45,67 €") == 45.67


def test_parse_amount_non_breaking_space():
    """Test amounts rendered with a non-breaking space."""
    assert parse_amount("1\xa0045,10\xa0€") == 1045.10


@pytest.mark.parametrize("text", ["", None, "gratuit", "nan €"])
def test_parse_amount_invalid(text):
    """Test unparseable amounts."""
    assert parse_amount(text) is None


def test_parse_date_day_month_year():
    """Test DD/MM/YYYY parsing."""
    assert parse_date("01/03/2021") == date(2021, 3, 1)


@pytest.mark.parametrize("text", ["2021-03-01", "32/01/2021", "1 mars 2021", "", None])
def test_parse_date_strict(text):
    """Test that other formats are rejected."""
    assert parse_date(text) is None


def test_first_bill_only():
    """Test a page with only the latest bill."""
    bills = parse_bills_page(bills_page(FIRST_BILL))

    assert len(bills) == 1
    assert bills[0].date == date(2021, 3, 1)
    assert bills[0].amount == 45.67
    assert bills[0].pdfurl == f"{config.ACCOUNT_URL}/pages/billing/Download.aspx?id=3"


def test_first_bill_then_others_in_order():
    """Test N other bills give N+1 entries, first bill first."""
    html = bills_page(
        FIRST_BILL,
        other_bill("01/02/2021", "39,90 €", "/pages/billing/Download.aspx?id=2"),
        other_bill("01/01/2021", "42,00 €", "/pages/billing/Download.aspx?id=1"),
    )
    bills = parse_bills_page(html)

    assert len(bills) == 3
    assert bills[0].date == date(2021, 3, 1)
    assert bills[1].date == date(2021, 2, 1)
    assert bills[1].amount == 39.90
    assert bills[2].date == date(2021, 1, 1)
    assert bills[2].pdfurl.endswith("id=1")


def test_missing_link_drops_entry():
    """Test an entry without link is dropped and only that one."""
    reference = bills_page(FIRST_BILL, other_bill("01/02/2021", "39,90 €"), other_bill("01/01/2021", "42,00 €"))
    broken = bills_page(FIRST_BILL, other_bill("01/02/2021", "39,90 €", href=None), other_bill("01/01/2021", "42,00 €"))

    assert len(parse_bills_page(broken)) == len(parse_bills_page(reference)) - 1
    assert [b.date for b in parse_bills_page(broken)] == [date(2021, 3, 1), date(2021, 1, 1)]


def test_zero_amount_and_bad_date_dropped():
    """Test malformed entries are dropped independently."""
    html = bills_page(
        FIRST_BILL,
        other_bill("01/02/2021", "0,00 €"),
        other_bill("99/99/2021", "12,00 €"),
        other_bill("01/12/2020", "30,00 €"),
    )
    bills = parse_bills_page(html)

    assert [b.date for b in bills] == [date(2021, 3, 1), date(2020, 12, 1)]


def test_no_bill_blocks():
    """Test a page without any bill."""
    assert parse_bills_page("<html><body><div id='facture'></div></body></html>") == []
    assert parse_bills_page("") == []
    assert parse_bills_page(None) == []


def test_other_bills_without_first_bill():
    """Test older bills are read even when the first block is missing."""
    bills = parse_bills_page(bills_page(other_bill("01/02/2021", "39,90 €")))
    assert len(bills) == 1
    assert bills[0].amount == 39.90


def test_parse_is_idempotent():
    """Test re-parsing the same page gives the same bills."""
    html = bills_page(FIRST_BILL, other_bill("01/02/2021", "39,90 €"))
    assert parse_bills_page(html) == parse_bills_page(html)


def test_bill_filename():
    """Test the PDF name derived from date and amount."""
    bill = parse_bills_page(bills_page(FIRST_BILL))[0]
    assert bill.filename == "20210301_numericable_45.67EUR.pdf"
