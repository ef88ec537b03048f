from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, CheckConstraint, text
from sqlalchemy.orm import relationship
from ..core.db import Base, utcnow

class ReceivingTxn(Base):
    __tablename__ = "ReceivingTxn"

    ReceivingID  = Column(Integer, primary_key=True, autoincrement=True)
    ItemID       = Column(Integer, ForeignKey("PurchaseRequestItem.ItemID"), nullable=False, index=True)
    ReceivedQty  = Column(Integer, nullable=False)
    ReceivedDate = Column(DateTime, nullable=False, default=utcnow)
    ReceivedBy   = Column(String(100))
    IsDamaged    = Column(Boolean, nullable=False, default=False, server_default=text("0"))
    DamageNotes  = Column(String(1000))
    PhotoUrl     = Column(String(500))

    __table_args__ = (
        CheckConstraint("ReceivedQty > 0", name="CK_Receiving_Qty_Positive"),
    )

    item = relationship("PurchaseRequestItem", back_populates="receivings")
