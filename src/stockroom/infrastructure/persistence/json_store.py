"""JSON-file-backed store.

Same staging semantics as the in-memory store; the committed state lives in
three JSON files under a data directory.  Every commit takes an exclusive OS
lock on ``.lock``, reloads the files (another process may have written
them), applies the staged writes and rewrites the files through temp files
and ``os.replace``.  If any replacement fails, the files already swapped
in are restored from their previous contents, so a failed commit leaves
the directory as it was.
"""

from __future__ import annotations

import fcntl
import json
import os
import time
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterator

from stockroom.domain.exceptions import ConcurrencyConflictError, PersistenceError
from stockroom.domain.model.order import Order, OrderLine, OrderStatus
from stockroom.domain.model.product import Product
from stockroom.domain.model.stock import MovementDirection, StockMovement
from stockroom.domain.model.value_objects import FiscalId, Money, Quantity
from stockroom.infrastructure.persistence.in_memory import (
    InMemoryStore,
    InMemoryUnitOfWork,
)

PRODUCTS_FILE = "products.json"
MOVEMENTS_FILE = "stock_movements.json"
ORDERS_FILE = "orders.json"
LOCK_FILE = ".lock"

_LOCK_POLL_INTERVAL = 0.01


class JsonStore(InMemoryStore):

    def __init__(self, data_dir: Path, lock_timeout: float = 5.0) -> None:
        super().__init__(lock_timeout=lock_timeout)
        self._data_dir = data_dir
        self._lock_timeout = lock_timeout
        self._ensure_files()
        self.refresh()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    # --- InMemoryStore hooks --------------------------------------------------

    def refresh(self) -> None:
        with self.commit_lock, self._file_lock():
            self._load()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self.commit_lock, self._file_lock():
            self._load()
            yield
            try:
                self._persist()
            except PersistenceError:
                # Drop the applied-but-unwritten state.
                self._load()
                raise

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _product_to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": product.price.format_plain(),
            "active": product.active,
        }

    @staticmethod
    def _product_to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=Money(Decimal(raw["price"])),
            active=raw.get("active", True),
        )

    @staticmethod
    def _movement_to_raw(movement: StockMovement) -> dict:
        return {
            "id": movement.id,
            "product_id": movement.product_id,
            "quantity": movement.quantity,
            "direction": movement.direction.value,
            "occurred_at": movement.occurred_at.isoformat(),
            "actor": movement.actor,
            "document_ref": movement.document_ref,
            "notes": movement.notes,
        }

    @staticmethod
    def _movement_to_domain(raw: dict) -> StockMovement:
        return StockMovement(
            id=raw["id"],
            product_id=raw["product_id"],
            quantity=raw["quantity"],
            direction=MovementDirection(raw["direction"]),
            occurred_at=datetime.fromisoformat(raw["occurred_at"]),
            actor=raw["actor"],
            document_ref=raw.get("document_ref"),
            notes=raw.get("notes"),
        )

    @staticmethod
    def _order_to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "customer_document": order.customer_document.digits,
            "customer_name": order.customer_name,
            "actor": order.actor,
            "status": order.status.value,
            "total": order.total.format_plain(),
            "created_at": order.created_at.isoformat(),
            "finalized_at": order.finalized_at.isoformat() if order.finalized_at else None,
            "lines": [
                {
                    "product_id": line.product_id,
                    "product_name": line.product_name,
                    "quantity": line.quantity.value,
                    "unit_price": line.unit_price.format_plain(),
                }
                for line in order.lines
            ],
        }

    @staticmethod
    def _order_to_domain(raw: dict) -> Order:
        lines = [
            OrderLine(
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"])),
            )
            for i in raw["lines"]
        ]
        finalized_at = raw.get("finalized_at")
        return Order(
            id=raw["id"],
            customer_document=FiscalId(raw["customer_document"]),
            customer_name=raw["customer_name"],
            actor=raw["actor"],
            lines=lines,
            status=OrderStatus(raw["status"]),
            total=Money(Decimal(raw["total"])),
            created_at=datetime.fromisoformat(raw["created_at"]),
            finalized_at=datetime.fromisoformat(finalized_at) if finalized_at else None,
        )

    # --- File helpers ---------------------------------------------------------

    def _load(self) -> None:
        try:
            products = [self._product_to_domain(r) for r in self._read(PRODUCTS_FILE)]
            movements = [self._movement_to_domain(r) for r in self._read(MOVEMENTS_FILE)]
            orders = [self._order_to_domain(r) for r in self._read(ORDERS_FILE)]
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Corrupt data in {self._data_dir}: {exc}") from exc
        self.products = {p.id: p for p in products}
        self.movements = movements
        self.orders = {o.id: o for o in orders}  # type: ignore[misc]

    def _persist(self) -> None:
        payloads = {
            PRODUCTS_FILE: [self._product_to_raw(p) for p in self.products.values()],
            MOVEMENTS_FILE: [self._movement_to_raw(m) for m in self.movements],
            ORDERS_FILE: [self._order_to_raw(o) for o in self.orders.values()],
        }
        staged: list[tuple[Path, Path]] = []
        replaced: list[tuple[Path, bytes]] = []
        try:
            for name, records in payloads.items():
                target = self._data_dir / name
                tmp = target.with_suffix(target.suffix + ".tmp")
                tmp.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
                staged.append((tmp, target))
            for tmp, target in staged:
                previous = target.read_bytes()
                os.replace(tmp, target)
                replaced.append((target, previous))
        except OSError as exc:
            self._restore(replaced)
            for tmp, _ in staged:
                tmp.unlink(missing_ok=True)
            raise PersistenceError(f"Could not write {self._data_dir}: {exc}") from exc

    def _restore(self, replaced: list[tuple[Path, bytes]]) -> None:
        """Put back the files a failed commit had already swapped in."""
        for target, previous in reversed(replaced):
            backup = target.with_suffix(target.suffix + ".bak")
            try:
                backup.write_bytes(previous)
                os.replace(backup, target)
            except OSError as exc:
                raise PersistenceError(
                    f"Could not restore {target.name} after a failed commit: {exc}"
                ) from exc

    def _read(self, name: str) -> list[dict]:
        try:
            return json.loads((self._data_dir / name).read_text(encoding="utf-8"))
        except OSError as exc:
            raise PersistenceError(f"Could not read {name}: {exc}") from exc

    @contextmanager
    def _file_lock(self) -> Iterator[None]:
        """Exclusive lock shared with other processes using the same directory."""
        try:
            handle = open(self._data_dir / LOCK_FILE, "a+", encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Could not open lock file: {exc}") from exc
        with handle:
            deadline = time.monotonic() + self._lock_timeout
            while True:
                try:
                    fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except BlockingIOError:
                    if time.monotonic() >= deadline:
                        raise ConcurrencyConflictError(
                            f"Timed out waiting for the store lock in {self._data_dir}"
                        ) from None
                    time.sleep(_LOCK_POLL_INTERVAL)
            try:
                yield
            finally:
                fcntl.flock(handle, fcntl.LOCK_UN)

    def _ensure_files(self) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            for name in (PRODUCTS_FILE, MOVEMENTS_FILE, ORDERS_FILE):
                path = self._data_dir / name
                if not path.exists():
                    path.write_text("[]", encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Could not initialise {self._data_dir}: {exc}") from exc


class JsonUnitOfWork(InMemoryUnitOfWork):
    """Unit of work over a ``JsonStore``; share one store per data directory."""

    def __init__(self, store: JsonStore) -> None:
        super().__init__(store)
