"""Ledger store — positions, accounts, undo journal and event outbox.

All engine state lives here. Mutations are only accepted while a transaction
opened by :meth:`LedgerStore.atomic` is active; a failing transaction replays
its undo journal so no partial effect survives.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from .errors import EngineError, ReentrancyError
from .interfaces.transactional import Transactional

logger = logging.getLogger(__name__)

EventListener = Callable[[Any], None]


class LedgerStore:
    """Mapping-backed store owned by a single engine instance."""

    def __init__(self) -> None:
        self._positions: dict[tuple[str, str], int] = {}
        self._accounts: dict[str, int] = {}
        self._users: dict[str, None] = {}
        self._listeners: list[EventListener] = []

        self._active = False
        self._journal: list[tuple[str, Any, Any]] = []
        self._outbox: list[Any] = []

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def position(self, user: str, asset: str) -> int:
        return self._positions.get((user, asset), 0)

    def minted(self, user: str) -> int:
        return self._accounts.get(user, 0)

    def users(self) -> tuple[str, ...]:
        """Every user that ever held a position or an account, in first-seen order."""
        return tuple(self._users)

    @property
    def in_transaction(self) -> bool:
        return self._active

    # ------------------------------------------------------------------
    # Writes (transaction only)
    # ------------------------------------------------------------------

    def set_position(self, user: str, asset: str, amount: int) -> None:
        self._require_transaction()
        if amount < 0:
            raise EngineError(f"Position of '{user}' in '{asset}' cannot be negative")
        key = (user, asset)
        self._journal.append(("position", key, self._positions.get(key)))
        self._touch(user)
        self._positions[key] = amount

    def set_minted(self, user: str, amount: int) -> None:
        self._require_transaction()
        if amount < 0:
            raise EngineError(f"Minted amount of '{user}' cannot be negative")
        self._journal.append(("account", user, self._accounts.get(user)))
        self._touch(user)
        self._accounts[user] = amount

    def emit(self, event: Any) -> None:
        """Queue an event; it is published only if the transaction commits."""
        self._require_transaction()
        self._outbox.append(event)

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def atomic(self, participants: Sequence[Any] = ()) -> Iterator[LedgerStore]:
        """Run a block as one all-or-nothing transaction.

        Raises ``ReentrancyError`` when a transaction is already open, which
        rejects any collaborator callback into a mutating operation.
        Participants implementing ``Transactional`` are snapshotted and
        restored alongside the store.

        Buffered events are published once the transaction has committed and
        the lock is released. A failing listener is logged and skipped; it
        never turns a committed operation into an error.
        """
        if self._active:
            raise ReentrancyError("Engine is already executing a mutating operation")

        snapshots = [
            (p, p.snapshot()) for p in participants if isinstance(p, Transactional)
        ]
        self._active = True
        self._journal = []
        self._outbox = []
        try:
            yield self
        except BaseException:
            try:
                self._rollback()
                for participant, state in reversed(snapshots):
                    participant.restore(state)
            finally:
                self._active = False
            raise
        events = self._outbox
        self._journal = []
        self._outbox = []
        self._active = False
        # Committed; listeners run unlocked and cannot undo the transaction.
        for event in events:
            self._publish(event)

    def _rollback(self) -> None:
        for kind, key, previous in reversed(self._journal):
            if kind == "user":
                self._users.pop(key, None)
                continue
            table: dict[Any, int] = self._positions if kind == "position" else self._accounts
            if previous is None:
                table.pop(key, None)
            else:
                table[key] = previous
        logger.debug("Rolled back %d ledger writes", len(self._journal))
        self._journal = []
        self._outbox = []

    def _publish(self, event: Any) -> None:
        logger.info("Event %s", event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener %r failed on %s", listener, event)

    def _require_transaction(self) -> None:
        if not self._active:
            raise EngineError("Ledger writes must run inside an engine transaction")

    def _touch(self, user: str) -> None:
        if user not in self._users:
            self._journal.append(("user", user, None))
            self._users[user] = None
