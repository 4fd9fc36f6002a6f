"""Konnector run: authenticate, then fetch, save and reconcile bills."""
import logging
import uuid
from typing import Awaitable, Callable, Optional

import httpx

from numericable.auth.session import Authenticator
from numericable.errors import KonnectorError, UnknownError
from numericable.fetch.client import build_client, fetch_bills_page
from numericable.parse.bills_parser import parse_bills_page
from numericable.parse.models import Bill, MatchingPolicy, RunParams
from numericable.reconcile.bank_linker import link_bank_operation
from numericable.store.bills_store import BillStore, save_bills
from numericable.store.operations_store import OperationStore

logger = logging.getLogger(__name__)

LinkOperations = Callable[[list[Bill], str, MatchingPolicy, OperationStore], Awaitable[dict]]


class KonnectorRunner:
    """Runs one synchronization for one set of credentials.

    Every step is awaited in order. The first failure stops the run: it is
    logged and reported through ``terminate`` with ``LOGIN_FAILED`` or
    ``UNKNOWN_ERROR``, and nothing is retried.
    """

    def __init__(
        self,
        params: RunParams,
        client: Optional[httpx.AsyncClient] = None,
        bill_store: Optional[BillStore] = None,
        operation_store: Optional[OperationStore] = None,
        policy: Optional[MatchingPolicy] = None,
        terminate: Optional[Callable[[str], None]] = None,
        link_operations: LinkOperations = link_bank_operation,
    ):
        self.params = params
        self.client = client
        self.bill_store = bill_store or BillStore()
        self.operation_store = operation_store or OperationStore()
        self.policy = policy or MatchingPolicy()
        self._terminate_hook = terminate
        self.link_operations = link_operations
        self.error_code: Optional[str] = None

        self.run_id = str(uuid.uuid4())
        logger.info(f"Run ID: {self.run_id} (started {params.started_at.isoformat()})")

    def terminate(self, code: str) -> None:
        """Report the terminal error code of the run."""
        self.error_code = code
        logger.critical(code)
        if self._terminate_hook:
            self._terminate_hook(code)

    async def run(self) -> Optional[list[Bill]]:
        """Run the konnector. Returns the bills, or None once terminated."""
        owns_client = self.client is None
        client = self.client or build_client()
        try:
            await Authenticator(client, self.params.login, self.params.password).authenticate()
            return await self.synchronize(client)
        except KonnectorError as e:
            logger.error(f"Run {self.run_id} stopped: {e.code} ({e})")
            self.terminate(e.code)
            return None
        finally:
            if owns_client:
                await client.aclose()

    async def synchronize(self, client: httpx.AsyncClient) -> list[Bill]:
        """Fetch, parse, save and reconcile bills with an authenticated client."""
        response = await fetch_bills_page(client)
        bills = parse_bills_page(response.text)
        await self._save(client, bills)
        await self._reconcile(bills)
        return bills

    async def _save(self, client: httpx.AsyncClient, bills: list[Bill]) -> None:
        try:
            await self.bill_store.initialize()
            await save_bills(bills, self.params, client, self.bill_store)
        except Exception as e:
            logger.error(f"An error occured while saving bills: {e}")
            raise UnknownError(str(e)) from e

    async def _reconcile(self, bills: list[Bill]) -> None:
        try:
            await self.operation_store.initialize()
            await self.link_operations(bills, "", self.policy, self.operation_store)
        except Exception as e:
            logger.error(f"An error occured while linking bank operations: {e}")
            raise UnknownError(str(e)) from e
