import os

# Testler bellek içi SQLite ile koşar; .env'deki DSN'i ez
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient

from stockroom.core.db import Base, SessionLocal, engine, get_db
from stockroom.core.security import get_current_user
from stockroom.main import app
from stockroom.models import AppUser, Department, Product


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def _admin_user() -> AppUser:
    return AppUser(UserID=1, FullName="Depo Sorumlusu", Email="store@stockroom.io", Role="admin", IsActive=True)


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_user] = _admin_user
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def anon_client(db):
    """Auth bypass yok; sadece DB oturumu paylaşılır."""
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_product(db):
    def _make(sku="SKU-1", stock=10, category=None, barcode=None, min_threshold=10):
        p = Product(
            SKU=sku,
            SupplierBarcode=barcode,
            ManufacturerItemName=f"Item {sku}",
            Category=category,
            CurrentStock=stock,
            MinThreshold=min_threshold,
        )
        db.add(p)
        db.commit()
        db.refresh(p)
        return p
    return _make


@pytest.fixture()
def dept(db):
    d = Department(Name="Muhasebe", IsITDepartment=False)
    db.add(d)
    db.commit()
    db.refresh(d)
    return d
