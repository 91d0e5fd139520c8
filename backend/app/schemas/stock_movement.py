from datetime import datetime

from pydantic import BaseModel

from backend.app.db.models.core_types import MovementType


class StockMovementRead(BaseModel):
    id: int
    warehouse_id: int
    item_id: int

    movement_type: MovementType
    quantity_delta: int
    quantity_before: int
    quantity_after: int
    note: str | None = None

    created_by: int | None = None
    created_at: datetime

    class Config:
        from_attributes = True
