from __future__ import annotations

from fastapi import HTTPException

from backend.services.exceptions import (
    InsufficientStock,
    InvalidQuantity,
    InvalidTransfer,
    LedgerError,
    StockRecordNotFound,
    WarehouseInactiveOrNotFound,
)

# ordre important : sous-classes avant classes parentes
_STATUS_BY_ERROR: list[tuple[type[LedgerError], int]] = [
    (WarehouseInactiveOrNotFound, 404),
    (StockRecordNotFound, 404),
    (InsufficientStock, 409),
    (InvalidQuantity, 400),
    (InvalidTransfer, 400),
]


def to_http_exception(exc: LedgerError) -> HTTPException:
    status_code = 400
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break
    return HTTPException(status_code=status_code, detail={"code": exc.code, "message": exc.message})
