from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, EmailStr, Field, ConfigDict

RoleLiteral = Literal["viewer", "store", "admin"]

class UserCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)  # bcrypt 72 bayt sınırı
    role: Optional[RoleLiteral] = "viewer"

class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    UserID: int
    FullName: str
    Email: EmailStr
    Role: RoleLiteral
    IsActive: bool
    LastLogin: Optional[datetime] = None

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
