from datetime import datetime

from pydantic import BaseModel


class WarehouseRead(BaseModel):
    id: int
    code: str
    name: str
    address: str | None = None
    phone: str | None = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
