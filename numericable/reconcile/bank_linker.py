"""Link saved bills to the bank operations that paid them."""
import logging
from datetime import timedelta
from typing import Optional

from numericable.parse.models import BankOperation, Bill, MatchingPolicy
from numericable.store.operations_store import OperationStore

logger = logging.getLogger(__name__)


def amount_distance(operation: BankOperation, bill: Bill) -> float:
    """Distance between an operation and a bill amount.

    Bank exports store debits as negative amounts, refunds as positive ones,
    so both signs are accepted.
    """
    # Rounded to the cent so a 0.10 difference stays within a 0.1 tolerance
    return round(min(abs(operation.amount + bill.amount), abs(operation.amount - bill.amount)), 2)


def label_matches(operation: BankOperation, identifiers: list[str]) -> bool:
    label = operation.label.lower()
    return any(identifier.lower() in label for identifier in identifiers)


def find_matching_operation(
    bill: Bill,
    operations: list[BankOperation],
    policy: MatchingPolicy,
) -> Optional[BankOperation]:
    """Closest operation within the policy tolerances, if any."""
    start = bill.date - timedelta(days=policy.min_date_delta)
    end = bill.date + timedelta(days=policy.max_date_delta)

    candidates = [
        op
        for op in operations
        if start <= op.date <= end
        and amount_distance(op, bill) <= policy.amount_delta
        and label_matches(op, policy.identifiers)
    ]
    if not candidates:
        return None

    candidates.sort(key=lambda op: (amount_distance(op, bill), abs((op.date - bill.date).days)))
    return candidates[0]


async def link_bill(bill: Bill, policy: MatchingPolicy, store: OperationStore) -> Optional[int]:
    """Link one bill; returns the linked operation id."""
    start = bill.date - timedelta(days=policy.min_date_delta)
    end = bill.date + timedelta(days=policy.max_date_delta)
    operations = await store.find_candidates(start, end)

    match = find_matching_operation(bill, operations, policy)
    if match is None:
        logger.debug(f"No bank operation found for bill of {bill.date} ({bill.amount} EUR)")
        return None

    await store.link_bill(match.id, bill.pdfurl)
    logger.info(f"Bill of {bill.date} ({bill.amount} EUR) linked to operation {match.id} '{match.label}'")
    return match.id


async def link_bank_operation(
    bills: list[Bill],
    doctype: str,
    policy: MatchingPolicy,
    store: OperationStore,
) -> dict[str, int]:
    """Try to link every bill to a bank operation.

    ``doctype`` is a reserved selector, callers pass an empty string.
    Errors are not handled here. Returns ``{pdfurl: operation id}`` for the
    bills that found a match.
    """
    linked: dict[str, int] = {}
    for bill in bills:
        operation_id = await link_bill(bill, policy, store)
        if operation_id is not None:
            linked[bill.pdfurl] = operation_id

    logger.info(f"{len(linked)}/{len(bills)} bill(s) linked to a bank operation")
    return linked
