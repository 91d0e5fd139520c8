from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.api.errors import to_http_exception
from backend.app.schemas.stock_movement import StockMovementRead
from backend.app.schemas.stock_record import StockRecordRead
from backend.services import inventory, transfers
from backend.services.exceptions import LedgerError

router = APIRouter(prefix="/stock-movements")


# ---------- Schemas ----------
class StockInCreate(BaseModel):
    warehouse_id: int
    item_id: int
    quantity: int = Field(gt=0, le=inventory.MAX_QUANTITY)
    note: str | None = None
    created_by: int | None = None


class StockOutCreate(StockInCreate):
    pass


class AdjustCreate(BaseModel):
    warehouse_id: int
    item_id: int
    new_quantity: int = Field(ge=0, le=inventory.MAX_QUANTITY)
    note: str | None = None
    created_by: int | None = None


class TransferCreate(BaseModel):
    from_warehouse_id: int
    to_warehouse_id: int
    item_id: int
    quantity: int = Field(gt=0, le=inventory.MAX_QUANTITY)
    note: str | None = None
    created_by: int | None = None


# ---------- Endpoints ----------
@router.post("/stock-in", response_model=StockRecordRead)
def stock_in(payload: StockInCreate, db: Session = Depends(get_db)):
    try:
        sl = inventory.stock_in(db, **payload.model_dump())
    except LedgerError as exc:
        raise to_http_exception(exc) from exc
    db.commit()
    return sl


@router.post("/stock-out", response_model=StockRecordRead)
def stock_out(payload: StockOutCreate, db: Session = Depends(get_db)):
    try:
        sl = inventory.stock_out(db, **payload.model_dump())
    except LedgerError as exc:
        raise to_http_exception(exc) from exc
    db.commit()
    return sl


@router.post("/adjust", response_model=StockRecordRead)
def adjust_stock(payload: AdjustCreate, db: Session = Depends(get_db)):
    try:
        sl = inventory.adjust_stock(db, **payload.model_dump())
    except LedgerError as exc:
        raise to_http_exception(exc) from exc
    db.commit()
    return sl


@router.post("/transfer")
def transfer_stock(payload: TransferCreate, db: Session = Depends(get_db)):
    try:
        ok = transfers.transfer_stock(db, **payload.model_dump())
    except LedgerError as exc:
        raise to_http_exception(exc) from exc
    db.commit()
    return {"success": ok}


@router.get("/logs", response_model=list[StockMovementRead])
def get_logs(
    warehouse_id: int | None = None,
    item_id: int | None = None,
    limit: int = Query(default=inventory.DEFAULT_LOG_LIMIT, ge=1, le=inventory.MAX_LOG_LIMIT),
    db: Session = Depends(get_db),
):
    """Journal des mouvements, plus récent d'abord."""
    return inventory.get_movements(db, warehouse_id=warehouse_id, item_id=item_id, limit=limit)
