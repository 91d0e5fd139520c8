from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.schemas.stock_record import StockRecordRead
from backend.services import inventory, low_stock

router = APIRouter(prefix="/stock")


@router.get("/low-stock", response_model=list[StockRecordRead])
def get_low_stock(
    threshold: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
):
    """
    Lignes dont le disponible est sous le seuil.
    - sans threshold : seuil de la table settings (repli sur la valeur par défaut)
    """
    if threshold is None:
        threshold = low_stock.get_low_stock_threshold(db)
    return low_stock.list_low_stock(db, threshold)


@router.get("/item/{item_id}", response_model=list[StockRecordRead])
def get_stock_by_item(item_id: int, db: Session = Depends(get_db)):
    return inventory.get_stock_by_item(db, item_id)


@router.get(
    "/warehouse/{warehouse_id}/item/{item_id}",
    response_model=StockRecordRead,
)
def get_stock_record(warehouse_id: int, item_id: int, db: Session = Depends(get_db)):
    sl = inventory.get_stock_record(db, warehouse_id, item_id)
    if sl is None:
        raise HTTPException(status_code=404, detail="Stock record not found")
    return sl
