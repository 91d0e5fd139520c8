"""
Warehouse directory (lecture seule).

Le ledger ne fait que consulter les entrepôts : création, renommage et
désactivation relèvent de l'administration, hors de ce service.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import Warehouse
from backend.services.exceptions import WarehouseInactiveOrNotFound


def get_warehouse(db: Session, warehouse_id: int) -> Warehouse | None:
    # relu en base : le flag actif peut changer entre deux requêtes
    return db.get(Warehouse, warehouse_id, populate_existing=True)


def get_warehouse_by_code(db: Session, code: str) -> Warehouse | None:
    return (
        db.execute(
            select(Warehouse)
            .where(Warehouse.code == code)
            .where(Warehouse.is_active.is_(True))
        )
        .scalars()
        .first()
    )


def list_active_warehouses(db: Session) -> list[Warehouse]:
    stmt = select(Warehouse).where(Warehouse.is_active.is_(True)).order_by(Warehouse.name, Warehouse.id)
    return list(db.execute(stmt).scalars().all())


def require_active_warehouse(db: Session, warehouse_id: int) -> Warehouse:
    """Précondition de toute mutation : l'entrepôt existe et est actif."""
    wh = get_warehouse(db, warehouse_id)
    if wh is None or not wh.is_active:
        raise WarehouseInactiveOrNotFound(warehouse_id)
    return wh
