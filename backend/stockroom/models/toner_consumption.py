from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from ..core.db import Base, utcnow

class TonerConsumption(Base):
    """Sarf (Toner/Ribbon/Rollos) çıkış örneği; sadece IsFlagged güncellenir."""
    __tablename__ = "TonerConsumption"

    ConsumptionID   = Column(Integer, primary_key=True, autoincrement=True)
    ProductID       = Column(Integer, ForeignKey("Product.ProductID"), nullable=False)
    DeptID          = Column(Integer, ForeignKey("Department.DeptID"), nullable=False)
    Quantity        = Column(Integer, nullable=False)
    ConsumptionDate = Column(DateTime, nullable=False, default=utcnow)
    RequestedBy     = Column(String(100))
    ApprovedBy      = Column(String(100))
    IsFlagged       = Column(Boolean, nullable=False, default=False, server_default=text("0"))

    # ortalama sorgusu (ürün, departman, tarih) üzerinden
    __table_args__ = (
        Index("IX_TonerConsumption_Product_Dept_Date", "ProductID", "DeptID", "ConsumptionDate"),
    )

    product    = relationship("Product")
    department = relationship("Department")
