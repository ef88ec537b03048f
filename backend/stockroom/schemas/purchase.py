# stockroom/schemas/purchase.py
from datetime import datetime
from typing import List, Optional, Literal
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

MONEY_PLACES = Decimal("0.01")  # 2 hane

RequestStatusLiteral = Literal["Pending", "Approved", "Rejected", "Received"]
ItemStatusLiteral = Literal["Pending", "Received"]


class PRItemCreate(BaseModel):
    ProductID: int = Field(..., ge=1)
    RequestedQty: int = Field(..., gt=0)
    ExpectedDeliveryDate: Optional[datetime] = None
    SupplierName: Optional[str] = None
    UnitPrice: Optional[Decimal] = None

    @field_validator("UnitPrice")
    @classmethod
    def _price_decimal(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return v
        try:
            v = (Decimal(v) if not isinstance(v, Decimal) else v).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
        except (InvalidOperation, TypeError):
            raise ValueError("UnitPrice must be a valid decimal")
        if v < 0:
            raise ValueError("UnitPrice must be >= 0")
        return v


class PRHeaderCreate(BaseModel):
    RequestedBy: Optional[str] = None
    Notes: Optional[str] = None
    Status_s: RequestStatusLiteral = "Pending"


class PRCreate(BaseModel):
    request: PRHeaderCreate = Field(default_factory=PRHeaderCreate)
    items: List[PRItemCreate] = Field(..., min_length=1)


class PRUpdate(BaseModel):
    Status_s: Optional[RequestStatusLiteral] = None
    Notes: Optional[str] = None
    RequestedBy: Optional[str] = None


class PRRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    RequestID: int
    RequestQr: str
    RequestedBy: Optional[str] = None
    RequestDate: datetime
    Status_s: RequestStatusLiteral
    Notes: Optional[str] = None


class PRItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ItemID: int
    RequestID: int
    ProductID: Optional[int] = None
    RequestedQty: int
    ExpectedDeliveryDate: Optional[datetime] = None
    SupplierName: Optional[str] = None
    UnitPrice: Optional[Decimal] = None
    Status_s: ItemStatusLiteral
    ProductName: Optional[str] = None
    ProductSKU: Optional[str] = None
    ProductCategory: Optional[str] = None
    CurrentStock: Optional[int] = None
    ReceivedQty: int = 0

    # İstemci basit görsün diye JSON'da float
    @field_serializer("UnitPrice")
    def _ser_price(self, v: Optional[Decimal]):
        return float(v) if v is not None else None


class PendingItemRead(PRItemRead):
    RequestQr: Optional[str] = None
    RequestedBy: Optional[str] = None
    RequestDate: Optional[datetime] = None
    RequestStatus: Optional[RequestStatusLiteral] = None
    RequestNotes: Optional[str] = None
