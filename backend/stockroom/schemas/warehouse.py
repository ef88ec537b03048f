from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, Field
from pydantic import ConfigDict

class StockOutCreate(BaseModel):
    sku: str = Field(..., min_length=1)
    deptId: int = Field(..., ge=1)
    quantity: int = Field(..., gt=0)
    reasonCode: Optional[str] = None
    userId: Optional[str] = None

class WarehouseTxnRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)  # ORM objelerini dönerken işe yarar
    TxnID: int
    ProductID: int
    DeptID: Optional[int] = None
    UserID: Optional[str] = None
    TxnType: Literal["IN", "OUT"]
    Quantity: int
    ReasonCode: Optional[str] = None
    TxnDate: datetime
    ReferenceRequestID: Optional[int] = None
