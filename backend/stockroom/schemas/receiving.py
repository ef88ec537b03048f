from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class ReceivingCreate(BaseModel):
    ItemID: int = Field(..., ge=1)
    ReceivedQty: int = Field(..., gt=0)
    ReceivedBy: Optional[str] = None
    IsDamaged: bool = False
    DamageNotes: Optional[str] = None
    PhotoUrl: Optional[str] = None

class ReceivingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    ReceivingID: int
    ItemID: int
    ReceivedQty: int
    ReceivedDate: datetime
    ReceivedBy: Optional[str] = None
    IsDamaged: bool
    DamageNotes: Optional[str] = None
    PhotoUrl: Optional[str] = None
