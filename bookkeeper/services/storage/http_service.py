"""
HTTP Ledger Service Implementation

Talks to the PHP REST backend:

    GET    /accounts.php            -> {"ok": true, "items": [...]}
    POST   /accounts.php            -> {"ok": true, "id": 12}
    PUT    /accounts.php?id=12      -> {"ok": true}
    DELETE /accounts.php?id=12      -> {"ok": true}

and the same shape for categories.php and transactions.php.

TRADEOFFS:
- Reads are retried (they are idempotent)
- Writes are NOT retried; a failed write goes straight to the
  controller's failure path, which resyncs
- Any non-2xx status is a failure
"""

from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from bookkeeper.config import LedgerApiSettings, get_settings
from bookkeeper.models.remote import (
    AccountRecord,
    AckResponse,
    CategoryRecord,
    CreateResponse,
    ListResponse,
    TransactionRecord,
)
from bookkeeper.services.storage.interface import (
    ConnectionError,
    LedgerServiceInterface,
    NotFoundError,
    StorageError,
)


logger = structlog.get_logger(__name__)


class HttpLedgerService(LedgerServiceInterface):
    """
    httpx-based client for the remote ledger service.

    The underlying AsyncClient is created lazily and reused; call
    close() when done.
    """

    def __init__(
        self,
        settings: Optional[LedgerApiSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings or get_settings().ledger_api
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._settings.base_url,
                timeout=self._settings.request_timeout_seconds,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        record_id: Optional[int] = None,
        body: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON body."""
        params = {"id": record_id} if record_id is not None else None
        try:
            response = await self._get_client().request(
                method,
                path,
                params=params,
                json=body,
            )
        except httpx.TimeoutException as e:
            raise ConnectionError(f"{method} {path} timed out: {e}")
        except httpx.TransportError as e:
            raise ConnectionError(f"{method} {path} failed: {e}")

        if response.status_code == 404:
            raise NotFoundError(f"{method} {path} id={record_id}: HTTP 404: {response.text}")
        if not response.is_success:
            raise StorageError(f"{method} {path}: HTTP {response.status_code}: {response.text}")

        try:
            payload = response.json()
        except ValueError as e:
            raise StorageError(f"{method} {path}: response is not JSON: {e}")

        if isinstance(payload, dict) and payload.get("ok") is False:
            raise StorageError(f"{method} {path}: server reported failure: {payload}")
        return payload

    async def _list(self, path: str, model: type) -> list:
        payload = await self._request("GET", path)
        try:
            rows = ListResponse.model_validate(payload).items
            return [model.model_validate(row) for row in rows]
        except ValidationError as e:
            raise StorageError(f"GET {path}: unexpected response shape: {e}")

    async def _create(self, path: str, body: dict) -> int:
        payload = await self._request("POST", path, body=body)
        try:
            return CreateResponse.model_validate(payload).id
        except ValidationError as e:
            raise StorageError(f"POST {path}: response carried no id: {e}")

    async def _update(self, path: str, record_id: int, body: dict) -> bool:
        payload = await self._request("PUT", path, record_id=record_id, body=body)
        return self._ack("PUT", path, payload)

    async def _delete(self, path: str, record_id: int) -> bool:
        payload = await self._request("DELETE", path, record_id=record_id)
        return self._ack("DELETE", path, payload)

    @staticmethod
    def _ack(method: str, path: str, payload: Any) -> bool:
        try:
            return AckResponse.model_validate(payload).ok
        except ValidationError as e:
            raise StorageError(f"{method} {path}: unexpected response shape: {e}")

    def _read_retry(self):
        return retry(
            retry=retry_if_exception_type(ConnectionError),
            stop=stop_after_attempt(self._settings.read_retry_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    async def list_accounts(self) -> list[AccountRecord]:
        fetch = self._read_retry()(self._list)
        return await fetch(self._settings.accounts_path, AccountRecord)

    async def create_account(self, record: AccountRecord) -> int:
        return await self._create(self._settings.accounts_path, record.to_payload())

    async def update_account(self, account_id: int, record: AccountRecord) -> bool:
        return await self._update(self._settings.accounts_path, account_id, record.to_payload())

    async def delete_account(self, account_id: int) -> bool:
        return await self._delete(self._settings.accounts_path, account_id)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[CategoryRecord]:
        fetch = self._read_retry()(self._list)
        return await fetch(self._settings.categories_path, CategoryRecord)

    async def create_category(self, record: CategoryRecord) -> int:
        return await self._create(self._settings.categories_path, record.to_payload())

    async def update_category(self, category_id: int, record: CategoryRecord) -> bool:
        return await self._update(self._settings.categories_path, category_id, record.to_payload())

    async def delete_category(self, category_id: int) -> bool:
        return await self._delete(self._settings.categories_path, category_id)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(self) -> list[TransactionRecord]:
        fetch = self._read_retry()(self._list)
        return await fetch(self._settings.transactions_path, TransactionRecord)

    async def create_transaction(self, record: TransactionRecord) -> int:
        return await self._create(self._settings.transactions_path, record.to_payload())

    async def update_transaction(self, transaction_id: int, record: TransactionRecord) -> bool:
        return await self._update(
            self._settings.transactions_path, transaction_id, record.to_payload()
        )

    async def delete_transaction(self, transaction_id: int) -> bool:
        return await self._delete(self._settings.transactions_path, transaction_id)
