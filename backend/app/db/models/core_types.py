import enum

class MovementType(str, enum.Enum):
    stock_in = "in"
    stock_out = "out"
    transfer = "transfer"
    adjustment = "adjustment"
