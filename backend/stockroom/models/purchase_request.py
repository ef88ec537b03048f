from sqlalchemy import Column, Integer, String, DateTime, DECIMAL, ForeignKey, CheckConstraint, text
from sqlalchemy.orm import relationship
from ..core.db import Base, utcnow

class PurchaseRequest(Base):
    __tablename__ = "PurchaseRequest"

    RequestID   = Column(Integer, primary_key=True, autoincrement=True)
    # Oluşturma transaction'ında REQ_<RequestID> olarak sabitlenir
    RequestQr   = Column(String(64), nullable=False, unique=True)
    RequestedBy = Column(String(100))
    RequestDate = Column(DateTime, nullable=False, default=utcnow)
    Status_s    = Column(String(20), nullable=False, default="Pending", server_default=text("'Pending'"))
    Notes       = Column(String(1000))

    __table_args__ = (
        CheckConstraint("Status_s IN ('Pending','Approved','Rejected','Received')", name="CK_PR_Status"),
    )

    items = relationship(
        "PurchaseRequestItem",
        back_populates="request",
        cascade="all, delete-orphan",
    )


class PurchaseRequestItem(Base):
    __tablename__ = "PurchaseRequestItem"

    ItemID               = Column(Integer, primary_key=True, autoincrement=True)
    RequestID            = Column(Integer, ForeignKey("PurchaseRequest.RequestID"), nullable=False, index=True)
    ProductID            = Column(Integer, ForeignKey("Product.ProductID"), index=True)
    RequestedQty         = Column(Integer, nullable=False)
    ExpectedDeliveryDate = Column(DateTime)
    SupplierName         = Column(String(200))
    UnitPrice            = Column(DECIMAL(10, 2))
    Status_s             = Column(String(20), nullable=False, default="Pending", server_default=text("'Pending'"))

    __table_args__ = (
        CheckConstraint("RequestedQty > 0", name="CK_PRI_Qty_Positive"),
        CheckConstraint("Status_s IN ('Pending','Received')", name="CK_PRI_Status"),
    )

    request    = relationship("PurchaseRequest", back_populates="items")
    product    = relationship("Product", back_populates="request_items")
    receivings = relationship(
        "ReceivingTxn",
        back_populates="item",
        order_by="ReceivingTxn.ReceivedDate",
    )
