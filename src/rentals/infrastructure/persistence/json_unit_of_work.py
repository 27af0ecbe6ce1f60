"""Unit of work over the JSON store.

The repositories write through to their files.  ``_begin`` takes an
exclusive lock on the data directory, shared by every process and every
unit of work that points at it, and keeps the text of every file so
``_rollback`` can put it back.  The lock is held until the outermost
transaction commits or rolls back.
"""

from __future__ import annotations

import logging
from pathlib import Path

from filelock import FileLock

from rentals.domain.repository.unit_of_work import UnitOfWork
from rentals.infrastructure.persistence.json_file import atomic_write
from rentals.infrastructure.persistence.json_finance_record_repository import (
    JsonFinanceRecordRepository,
)
from rentals.infrastructure.persistence.json_item_repository import JsonItemRepository
from rentals.infrastructure.persistence.json_order_repository import JsonOrderRepository
from rentals.infrastructure.persistence.json_payment_repository import (
    JsonPaymentRepository,
)

logger = logging.getLogger(__name__)

_FILES = ("items.json", "orders.json", "payments.json", "finance_records.json")
LOCK_NAME = ".rentals.lock"


class JsonUnitOfWork(UnitOfWork):

    def __init__(self, data_dir: Path, lock_timeout: float = 30.0) -> None:
        super().__init__()
        self._paths = [data_dir / name for name in _FILES]
        self.items = JsonItemRepository(self._paths[0])
        self.orders = JsonOrderRepository(self._paths[1])
        self.payments = JsonPaymentRepository(self._paths[2])
        self.finance_records = JsonFinanceRecordRepository(self._paths[3])
        self._file_lock = FileLock(str(data_dir / LOCK_NAME), timeout=lock_timeout)
        self._snapshot: dict[Path, str] = {}

    def _begin(self) -> None:
        self._file_lock.acquire()
        try:
            self._snapshot = {p: p.read_text(encoding="utf-8") for p in self._paths}
        except BaseException:
            self._file_lock.release()
            raise

    def _commit(self) -> None:
        self._snapshot = {}
        self._file_lock.release()

    def _rollback(self) -> None:
        try:
            for path, text in self._snapshot.items():
                atomic_write(path, text)
            logger.debug("Rolled back JSON store in %s", self._paths[0].parent)
        finally:
            self._snapshot = {}
            self._file_lock.release()
