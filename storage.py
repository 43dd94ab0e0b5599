# storage.py
import json
import os
import uuid
from datetime import date
from typing import Callable, List, Optional, Tuple

from filelock import FileLock

from logging_setup import get_logger
from models import Transaction, TransactionDraft, seed_transactions

logger = get_logger("smartspend.storage")

MAX_ID_ATTEMPTS = 100

Snapshot = Tuple[Transaction, ...]
Listener = Callable[[Snapshot], None]


class DuplicateIdError(RuntimeError):
    """The id generator kept returning ids that are already in use."""


def new_id() -> str:
    return str(uuid.uuid4())


def _lock_for(path: str) -> FileLock:
    return FileLock(path + ".lock", timeout=5)


def read_snapshot(path: str) -> Optional[List[Transaction]]:
    """
    Reads a saved snapshot. Returns None when there is nothing usable on disk:
    no file, invalid JSON, or any malformed record.
    """
    if not os.path.exists(path):
        return None
    with _lock_for(path):
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s, ignoring it: %s", path, e)
            return None
    if not isinstance(raw, list):
        logger.warning("Ignoring %s: expected a list of transactions, got %s", path, type(raw).__name__)
        return None
    try:
        return [Transaction.from_dict(d) for d in raw]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Ignoring %s: malformed transaction record (%s)", path, e)
        return None


def write_snapshot(path: str, txs) -> None:
    """
    Overwrites the saved snapshot with the full list, holding a file lock.
    """
    with _lock_for(path):
        with open(path, "w", encoding="utf-8") as f:
            json.dump([t.to_dict() for t in txs], f, ensure_ascii=False, indent=2)
    logger.debug("Saved %d transactions to %s", len(txs), path)


class TransactionStore:
    """
    Ordered transaction collection, most recent first.

    Every add/remove writes the full snapshot to ``path`` and then notifies
    the subscribed listeners with the new snapshot.
    """

    def __init__(self, path: str, id_factory: Callable[[], str] = new_id,
                 today: Optional[date] = None):
        self.path = path
        self.id_factory = id_factory
        self._today = today
        self._transactions: List[Transaction] = []
        self._listeners: List[Listener] = []
        self._issued = set()

    def load(self) -> Snapshot:
        saved = read_snapshot(self.path)
        if saved is None:
            logger.info("No saved transactions at %s, starting from seed data", self.path)
            saved = seed_transactions(self._today or date.today())
        self._transactions = saved
        self._issued.update(t.id for t in saved)
        return self.snapshot()

    def snapshot(self) -> Snapshot:
        return tuple(self._transactions)

    def recent(self, limit: int) -> Snapshot:
        return tuple(self._transactions[:limit])

    def get(self, tx_id: str) -> Optional[Transaction]:
        for t in self._transactions:
            if t.id == tx_id:
                return t
        return None

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def add(self, draft: TransactionDraft, id_factory: Optional[Callable[[], str]] = None) -> Transaction:
        tx = draft.with_id(self._fresh_id(id_factory or self.id_factory))
        self._commit([tx] + self._transactions)
        self._issued.add(tx.id)
        logger.info("Added %s %s (%s)", tx.type.value, tx.amount, tx.category)
        return tx

    def remove(self, tx_id: str) -> bool:
        """Deletes the transaction with ``tx_id``. Unknown ids are ignored."""
        kept = [t for t in self._transactions if t.id != tx_id]
        if len(kept) == len(self._transactions):
            logger.debug("remove: no transaction with id %s", tx_id)
            return False
        self._commit(kept)
        logger.info("Removed transaction %s", tx_id)
        return True

    def _fresh_id(self, factory: Callable[[], str]) -> str:
        used = self._issued | {t.id for t in self._transactions}
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = str(factory())
            if candidate not in used:
                return candidate
        raise DuplicateIdError(f"no unused id after {MAX_ID_ATTEMPTS} attempts")

    def _commit(self, txs: List[Transaction]) -> None:
        # a failed write leaves the store as it was
        write_snapshot(self.path, txs)
        self._transactions = txs
        snap = self.snapshot()
        for listener in self._listeners:
            listener(snap)
