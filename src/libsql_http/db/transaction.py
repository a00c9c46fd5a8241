"""Client-side transaction handle."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from libsql_http.errors import InvalidStateError, LibSqlError
from libsql_http.models.types import IsolationLevel, TransactionState

if TYPE_CHECKING:
    from libsql_http.db.connection import Connection

logger = logging.getLogger(__name__)


class Transaction:
    """Local state machine standing in for a database transaction.

    Every POST runs in its own remote stream that is closed at the end of
    the batch, so nothing spans two requests: commit and rollback only move
    this object between ACTIVE, COMMITTED and ROLLED_BACK. Statements sent
    through a transaction are NOT atomic as a group. Leaving a ``with`` block
    without committing rolls back.
    """

    def __init__(
        self,
        connection: Connection,
        isolation_level: IsolationLevel = IsolationLevel.SERIALIZABLE,
        *,
        mode: str = "close",
    ) -> None:
        """Initialize an ACTIVE transaction on ``connection``."""
        self.connection = connection
        self.isolation_level = IsolationLevel(isolation_level)
        self.mode = mode
        self.transaction_id = uuid.uuid4().hex
        self._state = TransactionState.ACTIVE
        self._disposed = False

    @property
    def state(self) -> TransactionState:
        """Current state: ACTIVE, COMMITTED or ROLLED_BACK."""
        return self._state

    @property
    def is_active(self) -> bool:
        """True while neither finished nor disposed."""
        return self._state == TransactionState.ACTIVE and not self._disposed

    @property
    def is_disposed(self) -> bool:
        """True once ``dispose`` has run."""
        return self._disposed

    def _ensure_active(self) -> None:
        if self._disposed:
            raise InvalidStateError("The transaction has been disposed.")
        if self._state == TransactionState.COMMITTED:
            raise InvalidStateError("The transaction has already been committed.")
        if self._state == TransactionState.ROLLED_BACK:
            raise InvalidStateError("The transaction has already been rolled back.")

    def commit(self) -> None:
        """Mark the transaction committed; nothing is sent to the server."""
        self._ensure_active()
        self._state = TransactionState.COMMITTED
        logger.debug("Transaction %s committed", self.transaction_id)

    def rollback(self) -> None:
        """Mark the transaction rolled back; nothing is sent to the server."""
        self._ensure_active()
        self._state = TransactionState.ROLLED_BACK
        logger.debug("Transaction %s rolled back", self.transaction_id)

    async def acommit(self) -> None:
        """Async form of ``commit``."""
        self.commit()

    async def arollback(self) -> None:
        """Async form of ``rollback``."""
        self.rollback()

    def dispose(self) -> None:
        """Roll back if still active, then refuse further use. Idempotent."""
        if self._disposed:
            return
        if self._state == TransactionState.ACTIVE:
            try:
                self.rollback()
            except LibSqlError:
                logger.warning(
                    "Implicit rollback of transaction %s failed",
                    self.transaction_id,
                    exc_info=True,
                )
        self._disposed = True

    def __enter__(self) -> Transaction:
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Dispose, rolling back if not committed."""
        self.dispose()

    async def __aenter__(self) -> Transaction:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Dispose, rolling back if not committed."""
        self.dispose()
