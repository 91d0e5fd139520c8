from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.schemas.warehouse import WarehouseRead
from backend.services import warehouses

router = APIRouter(prefix="/warehouses")


@router.get("", response_model=list[WarehouseRead])
def list_warehouses(db: Session = Depends(get_db)):
    """Entrepôts actifs, triés par nom (READ ONLY)."""
    return warehouses.list_active_warehouses(db)


@router.get("/by-code/{code}", response_model=WarehouseRead)
def get_warehouse_by_code(code: str, db: Session = Depends(get_db)):
    wh = warehouses.get_warehouse_by_code(db, code)
    if wh is None:
        raise HTTPException(status_code=404, detail="Warehouse not found")
    return wh


@router.get("/{warehouse_id}", response_model=WarehouseRead)
def get_warehouse(warehouse_id: int, db: Session = Depends(get_db)):
    wh = warehouses.get_warehouse(db, warehouse_id)
    if wh is None:
        raise HTTPException(status_code=404, detail="Warehouse not found")
    return wh
