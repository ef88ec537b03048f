# stockroom/routers/products.py
from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import func, desc

from ..core.api import ok
from ..core.db import get_db
from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..core.security import get_current_user, require_roles
from ..models import Department, Product, PurchaseRequestItem, WarehouseTxn
from ..schemas.product import DepartmentRead, ProductCreate, ProductRead, ProductUpdate
from ..services.stock_service import get_product_or_404
from ..services.warehouse_service import ledger_balance

router = APIRouter(prefix="/products", tags=["products"], dependencies=[Depends(get_current_user)])
departments_router = APIRouter(prefix="/departments", tags=["departments"], dependencies=[Depends(get_current_user)])

# Yazma uçları: store ve admin
Guard = require_roles("store", "admin")


@router.get("", response_model=List[ProductRead])
def list_products(db: Session = Depends(get_db)):
    return db.query(Product).order_by(Product.ProductID.asc()).all()


@router.get("/below-min")
def products_below_min(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """CurrentStock <= MinThreshold olan ürünler; açık (gap) büyükten küçüğe."""
    gap_expr = Product.MinThreshold - Product.CurrentStock
    base_q = db.query(Product).filter(Product.CurrentStock <= Product.MinThreshold)
    total = base_q.count()
    rows = base_q.order_by(desc(gap_expr), Product.SKU).offset(skip).limit(limit).all()
    return {
        "value": [
            {
                "ProductID": p.ProductID,
                "SKU": p.SKU,
                "ManufacturerItemName": p.ManufacturerItemName,
                "Category": p.Category,
                "MinThreshold": int(p.MinThreshold or 0),
                "CurrentStock": int(p.CurrentStock or 0),
                "Gap": max(int(p.MinThreshold or 0) - int(p.CurrentStock or 0), 0),
            }
            for p in rows
        ],
        "Count": total,
    }


@router.get("/sku/{sku}", response_model=ProductRead)
def get_product_by_sku(sku: str, db: Session = Depends(get_db)):
    return get_product_or_404(db, sku)


@router.get("/{product_id}/ledger")
def product_ledger(product_id: int, db: Session = Depends(get_db)):
    """Mevcut stok ile defter toplamı (IN - OUT) yan yana."""
    p = db.get(Product, product_id)
    if not p:
        raise NotFoundError("Product not found")
    return ok({
        "ProductID": p.ProductID,
        "CurrentStock": int(p.CurrentStock or 0),
        "LedgerBalance": ledger_balance(db, p.ProductID),
    })


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(Guard)])
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    if db.query(Product).filter(Product.SKU == payload.SKU).first():
        raise ConflictError(f"SKU already exists: {payload.SKU}")
    product = Product(**payload.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@router.patch("/{product_id}", response_model=ProductRead, dependencies=[Depends(Guard)])
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(product, k, v)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Product update violates a constraint")
    db.refresh(product)
    return product


@router.delete("/{product_id}", dependencies=[Depends(Guard)])
def delete_product(product_id: int, db: Session = Depends(get_db)):
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")

    # Defterde ya da talepte referansı olan ürün silinmez
    in_use = (
        db.query(func.count(WarehouseTxn.TxnID)).filter(WarehouseTxn.ProductID == product_id).scalar()
        or db.query(func.count(PurchaseRequestItem.ItemID)).filter(PurchaseRequestItem.ProductID == product_id).scalar()
    )
    if in_use:
        raise ConflictError("Product is referenced by transactions or requests")
    try:
        db.delete(product)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Product is referenced and cannot be deleted")
    return ok({"deleted": product_id})


@departments_router.get("", response_model=List[DepartmentRead])
def list_departments(db: Session = Depends(get_db)):
    return db.query(Department).order_by(Department.DeptID.asc()).all()
