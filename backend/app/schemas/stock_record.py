from datetime import datetime

from pydantic import BaseModel


class StockRecordRead(BaseModel):
    warehouse_id: int
    item_id: int

    quantity: int
    reserved_quantity: int
    available_quantity: int  # READ ONLY : quantity - reserved_quantity
    updated_at: datetime

    class Config:
        from_attributes = True
