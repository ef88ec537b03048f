# stockroom/schemas/product.py
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

class ProductCreate(BaseModel):
    SKU: str = Field(min_length=1, max_length=100)
    SupplierBarcode: Optional[str] = None
    ManufacturerItemName: str = Field(min_length=1, max_length=200)
    InternalItemName: Optional[str] = None
    Category: Optional[str] = None
    CurrentStock: int = Field(default=0, ge=0)
    MinThreshold: int = Field(default=10, ge=0)

# Stok burada değişmez: sadece defter akışları (receive / stock-out) değiştirir
class ProductUpdate(BaseModel):
    SupplierBarcode: Optional[str] = None
    ManufacturerItemName: Optional[str] = Field(default=None, min_length=1, max_length=200)
    InternalItemName: Optional[str] = None
    Category: Optional[str] = None
    MinThreshold: Optional[int] = Field(default=None, ge=0)

    # NOT NULL kolonlar: alan gönderilmeyebilir ama null olamaz
    @field_validator("ManufacturerItemName", "MinThreshold")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    ProductID: int
    SKU: str
    SupplierBarcode: Optional[str] = None
    ManufacturerItemName: str
    InternalItemName: Optional[str] = None
    Category: Optional[str] = None
    CurrentStock: int
    MinThreshold: int

class DepartmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    DeptID: int
    Name: str
    IsITDepartment: bool
