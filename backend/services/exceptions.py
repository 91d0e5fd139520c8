"""
Exceptions typées du ledger de stock.

Chaque erreur porte un ``code`` stable (exposé tel quel par l'API) et les
données utiles à l'appelant ; on ne parse jamais les messages.

    LedgerError
    +-- WarehouseInactiveOrNotFound
    +-- InvalidQuantity
    +-- InvalidTransfer
    +-- StockRecordNotFound
    +-- InsufficientStock
    |   +-- InsufficientStockForTransfer
    +-- MovementLogImmutableError

Aucune n'est transitoire : rejouer l'appel sans nouvelle information échoue
de la même façon.
"""

from __future__ import annotations


class LedgerError(Exception):
    code = "LEDGER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class WarehouseInactiveOrNotFound(LedgerError):
    code = "WAREHOUSE_INACTIVE_OR_NOT_FOUND"

    def __init__(self, warehouse_id: int):
        super().__init__(f"Warehouse {warehouse_id} is inactive or not found")
        self.warehouse_id = warehouse_id


class InvalidQuantity(LedgerError):
    code = "INVALID_QUANTITY"

    def __init__(self, quantity: object, reason: str = "must be a positive integer"):
        super().__init__(f"Invalid quantity {quantity!r}: {reason}")
        self.quantity = quantity


class InvalidTransfer(LedgerError):
    code = "INVALID_TRANSFER"


class StockRecordNotFound(LedgerError):
    code = "STOCK_RECORD_NOT_FOUND"

    def __init__(self, warehouse_id: int, item_id: int):
        super().__init__(f"No stock record for item {item_id} in warehouse {warehouse_id}")
        self.warehouse_id = warehouse_id
        self.item_id = item_id


class InsufficientStock(LedgerError):
    code = "INSUFFICIENT_STOCK"
    label = "Insufficient stock"

    def __init__(self, warehouse_id: int, item_id: int, requested: int, available: int):
        super().__init__(
            f"{self.label} for item {item_id} in warehouse {warehouse_id} "
            f"(requested={requested}, available={available})"
        )
        self.warehouse_id = warehouse_id
        self.item_id = item_id
        self.requested = requested
        self.available = available


class InsufficientStockForTransfer(InsufficientStock):
    code = "INSUFFICIENT_STOCK_FOR_TRANSFER"
    label = "Insufficient stock for transfer"


class MovementLogImmutableError(LedgerError):
    code = "MOVEMENT_LOG_IMMUTABLE"

    def __init__(self, movement_id: int | None, action: str):
        super().__init__(f"Stock movement {movement_id} is immutable ({action} refused)")
        self.movement_id = movement_id
        self.action = action
