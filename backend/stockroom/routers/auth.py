from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ..core.db import get_db, utcnow
from ..core.security import (
    hash_password, verify_password, create_access_token, get_current_user, require_roles
)
from ..models.user import AppUser, ALLOWED_ROLES
from ..schemas.user import UserCreate, UserRead, Token

router = APIRouter(prefix="/auth", tags=["auth"])


# ---- Uçlar ----
@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(
    payload: UserCreate,
    db: Session = Depends(get_db),
    _admin: AppUser = Depends(require_roles("admin")),
):
    """Kullanıcıları sadece admin açar."""
    email = str(payload.email).strip().lower()
    role = (payload.role or "viewer").strip().lower()
    if role not in ALLOWED_ROLES:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                            detail=f"Invalid role: '{role}'. Allowed: {sorted(ALLOWED_ROLES)}")

    if db.query(AppUser).filter(AppUser.Email == email).first():
        raise HTTPException(status_code=400, detail="email already registered")

    user = AppUser(
        FullName=payload.full_name.strip(),
        Email=email,
        Role=role,
        IsActive=True,
        HashedPassword=hash_password(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

@router.post("/login", response_model=Token)
def login(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    # OAuth2 formunda "username" alanı e-posta taşır
    email = form.username.strip().lower()
    user = db.query(AppUser).filter(AppUser.Email == email).first()

    if (not user) or (not user.IsActive) or (not verify_password(form.password, user.HashedPassword)):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user.LastLogin = utcnow()
    db.commit()

    token = create_access_token(sub=user.Email, role=user.Role)
    return {"access_token": token, "token_type": "bearer"}

@router.get("/me", response_model=UserRead)
def me(current: AppUser = Depends(get_current_user)):
    return current
