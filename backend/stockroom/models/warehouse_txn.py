from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from ..core.db import Base, utcnow

class WarehouseTxn(Base):
    """Stok defteri: her stok değişimi için tek satır (append-only)."""
    __tablename__ = "WarehouseTxn"

    TxnID              = Column(Integer, primary_key=True, autoincrement=True)
    ProductID          = Column(Integer, ForeignKey("Product.ProductID"), nullable=False, index=True)
    DeptID             = Column(Integer, ForeignKey("Department.DeptID"))
    UserID             = Column(String(100))
    TxnType            = Column(String(3), nullable=False)  # 'IN' | 'OUT'
    Quantity           = Column(Integer, nullable=False)
    ReasonCode         = Column(String(100))
    TxnDate            = Column(DateTime, nullable=False, default=utcnow)
    ReferenceRequestID = Column(Integer, ForeignKey("PurchaseRequest.RequestID"))

    __table_args__ = (
        CheckConstraint("TxnType IN ('IN','OUT')", name="CK_WTxn_TxnType"),
        CheckConstraint("Quantity > 0",            name="CK_WTxn_Quantity_Positive"),
    )

    product    = relationship("Product",    back_populates="txns")
    department = relationship("Department")
