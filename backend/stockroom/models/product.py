from sqlalchemy import Column, Integer, String, CheckConstraint, text
from sqlalchemy.orm import relationship
from ..core.db import Base

class Product(Base):
    __tablename__ = "Product"

    ProductID            = Column(Integer, primary_key=True, autoincrement=True)
    SKU                  = Column(String(100), nullable=False, unique=True)
    SupplierBarcode      = Column(String(100), index=True)
    ManufacturerItemName = Column(String(200), nullable=False)
    InternalItemName     = Column(String(200))
    Category             = Column(String(50))
    CurrentStock         = Column(Integer, nullable=False, default=0, server_default=text("0"))
    MinThreshold         = Column(Integer, nullable=False, default=10, server_default=text("10"))

    __table_args__ = (
        CheckConstraint("CurrentStock >= 0", name="CK_Product_CurrentStock_NonNeg"),
        CheckConstraint("MinThreshold >= 0", name="CK_Product_MinThreshold_NonNeg"),
    )

    # Defter kayıtları
    txns = relationship("WarehouseTxn", back_populates="product")
    request_items = relationship("PurchaseRequestItem", back_populates="product")
