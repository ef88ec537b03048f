# backend/stockroom/services/warehouse_service.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from stockroom.core.db import atomic
from stockroom.core.errors import InsufficientStockError, NotFoundError, ValidationError
from stockroom.domain.constants import TXN_IN, TXN_OUT, is_consumable
from stockroom.models import WarehouseTxn, Product, Department, TonerConsumption
from stockroom.services.consumption_service import ConsumptionWarning, check_consumption
from stockroom.services.stock_service import adjust_stock, get_product_or_404

logger = logging.getLogger(__name__)


@dataclass
class IssueResult:
    transaction: WarehouseTxn
    warning: Optional[ConsumptionWarning]


def issue_stock(
    db: Session,
    *,
    sku: str,
    dept_id: int,
    quantity: int,
    reason_code: str | None = None,
    user_id: str | None = None,
) -> IssueResult:
    """
    Departmana stok çıkışı (OUT).
    - Ürün SKU ya da tedarikçi barkodu ile bulunur (yoksa 404)
    - Yetersiz stokta 409 (mevcut miktar meta'da)
    - Tüketim kontrolü mutasyondan ÖNCE ve transaction DIŞINDA yapılır;
      sadece uyarı üretir, çıkışı engellemez
    - Stok düşümü + defter kaydı (+ sarf ise tüketim örneği) tek transaction
    """
    # 1) Girdi doğrulama (store'a gitmeden)
    if quantity is None or quantity <= 0:
        raise ValidationError("Quantity must be > 0")
    if not sku or not str(sku).strip():
        raise ValidationError("SKU is required")
    if dept_id is None:
        raise ValidationError("Department is required")

    # 2) Ürün + ön stok kontrolü
    product = get_product_or_404(db, str(sku).strip())
    available = int(product.CurrentStock or 0)
    if quantity > available:
        raise InsufficientStockError(available=available, requested=quantity)

    if not db.get(Department, dept_id):
        raise NotFoundError("Department not found")

    # 3) Tüketim kontrolü (bilgi amaçlı)
    warning = check_consumption(db, product.ProductID, dept_id, quantity)

    # 4) Mutasyon
    with atomic(db, "issue_stock"):
        # Koşullu düşüm: arada başka bir çıkış stoğu tükettiyse 409
        adjust_stock(db, product.ProductID, -quantity)

        tx = WarehouseTxn(
            ProductID=product.ProductID,
            DeptID=dept_id,
            UserID=user_id,
            Quantity=quantity,
            TxnType=TXN_OUT,
            ReasonCode=reason_code,
        )
        db.add(tx)

        if is_consumable(product.Category):
            db.add(TonerConsumption(
                ProductID=product.ProductID,
                DeptID=dept_id,
                Quantity=quantity,
                RequestedBy=user_id,
                IsFlagged=warning.isWarning,
            ))
        db.flush()

    db.refresh(tx)
    logger.info(
        "issued: TxnID=%s SKU=%s DeptID=%s qty=%s flagged=%s",
        tx.TxnID, product.SKU, dept_id, quantity, warning.isWarning,
    )
    return IssueResult(transaction=tx, warning=warning if warning.isWarning else None)


# ---- Defter okuma ----
def _txn_columns():
    return (
        WarehouseTxn.TxnID,
        WarehouseTxn.ProductID,
        WarehouseTxn.DeptID,
        WarehouseTxn.UserID,
        WarehouseTxn.Quantity,
        WarehouseTxn.TxnType,
        WarehouseTxn.ReasonCode,
        WarehouseTxn.TxnDate,
        WarehouseTxn.ReferenceRequestID,
        Product.ManufacturerItemName.label("ProductName"),
        Product.SKU.label("ProductSKU"),
        Product.Category.label("ProductCategory"),
        Department.Name.label("DepartmentName"),
    )


def list_txns(
    db: Session,
    *,
    product_id: Optional[int] = None,
    txn_type: Optional[str] = None,   # "IN" | "OUT"
    dept_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[dict]:
    query = (
        db.query(*_txn_columns())
        .outerjoin(Product, Product.ProductID == WarehouseTxn.ProductID)
        .outerjoin(Department, Department.DeptID == WarehouseTxn.DeptID)
    )

    if product_id is not None:
        query = query.filter(WarehouseTxn.ProductID == product_id)
    if txn_type is not None:
        query = query.filter(WarehouseTxn.TxnType == txn_type)
    if dept_id is not None:
        query = query.filter(WarehouseTxn.DeptID == dept_id)

    query = query.order_by(WarehouseTxn.TxnDate.desc(), WarehouseTxn.TxnID.desc())
    rows = query.offset(max(0, skip)).limit(min(max(1, limit), 500)).all()
    return [dict(r._mapping) for r in rows]


def get_txn_details(db: Session, *, txn_id: int) -> dict:
    row = (
        db.query(*_txn_columns())
        .outerjoin(Product, Product.ProductID == WarehouseTxn.ProductID)
        .outerjoin(Department, Department.DeptID == WarehouseTxn.DeptID)
        .filter(WarehouseTxn.TxnID == txn_id)
        .first()
    )
    if not row:
        raise NotFoundError("Transaction not found")
    return dict(row._mapping)


def ledger_balance(db: Session, product_id: int) -> int:
    """Defterdeki işaretli toplam: IN - OUT."""
    total_in = (
        db.query(func.coalesce(func.sum(WarehouseTxn.Quantity), 0))
        .filter(WarehouseTxn.ProductID == product_id, WarehouseTxn.TxnType == TXN_IN)
        .scalar()
    )
    total_out = (
        db.query(func.coalesce(func.sum(WarehouseTxn.Quantity), 0))
        .filter(WarehouseTxn.ProductID == product_id, WarehouseTxn.TxnType == TXN_OUT)
        .scalar()
    )
    return int(total_in or 0) - int(total_out or 0)
