from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, CheckConstraint, text
)
from ..core.db import Base, utcnow

ALLOWED_ROLES = ("viewer", "store", "admin")

class AppUser(Base):
    __tablename__ = "AppUser"

    UserID         = Column(Integer, primary_key=True, autoincrement=True)
    FullName       = Column(String(100), nullable=False)
    # giriş e-posta ile; küçük harfe çevrilmiş saklanır
    Email          = Column(String(200), nullable=False, unique=True)
    HashedPassword = Column(String(255), nullable=False)
    Role           = Column(String(20),  nullable=False, default="viewer", server_default=text("'viewer'"))
    IsActive       = Column(Boolean,     nullable=False, default=True, server_default=text("1"))
    LastLogin      = Column(DateTime)
    CreatedAt      = Column(DateTime,    nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "Role in ('viewer','store','admin')",
            name="CK_AppUser_Role"
        ),
    )
