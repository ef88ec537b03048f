from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional
import logging
from uuid import uuid4
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from sqlalchemy.orm import Session
from sqlalchemy import func, text

from stockroom.core.db import atomic
from stockroom.core.errors import ConflictError, NotFoundError, ValidationError
from stockroom.domain.constants import (
    REQUEST_QR_FORMAT,
    REQUEST_QR_TEMP_PREFIX,
    REQUEST_STATUSES,
    STATUS_PENDING,
    STATUS_RECEIVED,
)
from stockroom.models import Product, PurchaseRequest, PurchaseRequestItem, ReceivingTxn
from stockroom.services.stock_service import find_product

logger = logging.getLogger(__name__)

MONEY_PLACES = Decimal("0.01")


def _dialect(db: Session) -> str:
    try:
        return db.bind.dialect.name
    except AttributeError:
        return "unknown"


def _to_money(val) -> Optional[Decimal]:
    if val is None:
        return None
    try:
        d = val if isinstance(val, Decimal) else Decimal(str(val))
        d = d.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("UnitPrice must be a valid decimal")
    if d < 0:
        raise ValidationError("UnitPrice must be >= 0")
    return d


def _item_field(item: Any, name: str, default=None):
    # pydantic model ya da dict kabul et
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def create_purchase_request(
    db: Session,
    *,
    requested_by: Optional[str] = None,
    notes: Optional[str] = None,
    status_s: str = STATUS_PENDING,
    items: Iterable[Any] = (),
) -> PurchaseRequest:
    """
    Talep + kalemleri tek transaction'da oluşturur.
    RequestID insert'ten sonra belli olduğu için QR önce geçici değerle yazılır,
    flush sonrası REQ_<RequestID> olarak sabitlenir (aynı transaction).
    """
    items = list(items)
    if not items:
        raise ValidationError("At least one item is required")
    if status_s not in REQUEST_STATUSES:
        raise ValidationError(f"Invalid status: '{status_s}'")

    # kalem doğrulaması (store'a gitmeden)
    prepared: List[Dict[str, Any]] = []
    for it in items:
        product_id = _item_field(it, "ProductID")
        qty = _item_field(it, "RequestedQty")
        if product_id is None:
            raise ValidationError("ProductID is required")
        if qty is None or isinstance(qty, bool) or not isinstance(qty, int):
            raise ValidationError("RequestedQty must be an integer")
        if qty <= 0:
            raise ValidationError("RequestedQty must be > 0")
        prepared.append({
            "ProductID": int(product_id),
            "RequestedQty": qty,
            "ExpectedDeliveryDate": _item_field(it, "ExpectedDeliveryDate"),
            "SupplierName": _item_field(it, "SupplierName"),
            "UnitPrice": _to_money(_item_field(it, "UnitPrice")),
        })

    with atomic(db, "create_purchase_request"):
        for p in prepared:
            if not db.get(Product, p["ProductID"]):
                raise NotFoundError(f"Product not found: {p['ProductID']}")

        req = PurchaseRequest(
            RequestQr=f"{REQUEST_QR_TEMP_PREFIX}{uuid4().hex}",
            RequestedBy=requested_by,
            Notes=notes,
            Status_s=status_s,
        )
        db.add(req)
        db.flush()  # RequestID almak için

        req.RequestQr = REQUEST_QR_FORMAT.format(req.RequestID)

        for p in prepared:
            db.add(PurchaseRequestItem(RequestID=req.RequestID, Status_s=STATUS_PENDING, **p))
        db.flush()

    db.refresh(req)
    logger.info("purchase request created: %s (%d items)", req.RequestQr, len(prepared))
    return req


def _lock_request_for_update(db: Session, request_id: int) -> Optional[PurchaseRequest]:
    """
    Talep satırını güncelleme için kilitle ve taze oku.
    MSSQL'de UPDLOCK+ROWLOCK; diğerlerinde SELECT ... FOR UPDATE
    (SQLite bunu yok sayar).
    """
    if _dialect(db) == "mssql":
        db.execute(
            text("SELECT RequestID FROM PurchaseRequest WITH (UPDLOCK, ROWLOCK) WHERE RequestID=:rid"),
            {"rid": request_id},
        )
        req = db.get(PurchaseRequest, request_id)
        if req:
            db.refresh(req)
        return req
    return (
        db.query(PurchaseRequest)
        .filter(PurchaseRequest.RequestID == request_id)
        .with_for_update()
        .one_or_none()
    )


def update_purchase_request(
    db: Session,
    *,
    request_id: int,
    status_s: Optional[str] = None,
    notes: Optional[str] = None,
    requested_by: Optional[str] = None,
) -> PurchaseRequest:
    """RequestQr hiçbir zaman değişmez; 'Received' talep geri alınamaz."""
    if status_s is not None and status_s not in REQUEST_STATUSES:
        raise ValidationError(f"Invalid status: '{status_s}'")

    with atomic(db, "update_purchase_request"):
        req = _lock_request_for_update(db, request_id)
        if not req:
            raise NotFoundError("Purchase request not found")

        if status_s is not None and status_s != req.Status_s:
            if req.Status_s == STATUS_RECEIVED:
                raise ConflictError(f"Cannot move a '{STATUS_RECEIVED}' request to '{status_s}'")
            if status_s == STATUS_RECEIVED:
                # Received sadece teslim akışıyla (tüm kalemler gelince) verilir
                raise ConflictError("Request status becomes 'Received' only through receiving")
            req.Status_s = status_s
        if notes is not None:
            req.Notes = notes
        if requested_by is not None:
            req.RequestedBy = requested_by

    db.refresh(req)
    return req


def delete_purchase_request(db: Session, *, request_id: int) -> None:
    """
    Kalemler + talep tek transaction'da silinir.
    Teslim kaydı olan talep silinemez (defter geçmişi değişmez).
    """
    with atomic(db, "delete_purchase_request"):
        req = _lock_request_for_update(db, request_id)
        if not req:
            raise NotFoundError("Purchase request not found")

        has_receivings = (
            db.query(ReceivingTxn.ReceivingID)
            .join(PurchaseRequestItem, PurchaseRequestItem.ItemID == ReceivingTxn.ItemID)
            .filter(PurchaseRequestItem.RequestID == request_id)
            .first()
        )
        if has_receivings:
            raise ConflictError("Request has receivings and cannot be deleted")

        db.query(PurchaseRequestItem).filter(
            PurchaseRequestItem.RequestID == request_id
        ).delete(synchronize_session=False)
        db.delete(req)

    logger.info("purchase request deleted: RequestID=%s", request_id)


# ---- Listeleme servisleri ----
def list_purchase_requests(
    db: Session,
    *,
    status_s: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[PurchaseRequest]:
    q = db.query(PurchaseRequest)
    if status_s:
        q = q.filter(PurchaseRequest.Status_s == status_s)
    q = q.order_by(PurchaseRequest.RequestDate.desc(), PurchaseRequest.RequestID.desc())
    return q.offset(max(0, skip)).limit(min(max(1, limit), 500)).all()


def _received_subquery(db: Session):
    return (
        db.query(
            ReceivingTxn.ItemID.label("ItemID"),
            func.sum(ReceivingTxn.ReceivedQty).label("ReceivedQty"),
        )
        .group_by(ReceivingTxn.ItemID)
    ).subquery()


def get_request_items(db: Session, *, request_id: int) -> List[dict]:
    if not db.get(PurchaseRequest, request_id):
        raise NotFoundError("Purchase request not found")

    recv = _received_subquery(db)
    rows = (
        db.query(
            PurchaseRequestItem.ItemID,
            PurchaseRequestItem.RequestID,
            PurchaseRequestItem.ProductID,
            PurchaseRequestItem.RequestedQty,
            PurchaseRequestItem.ExpectedDeliveryDate,
            PurchaseRequestItem.SupplierName,
            PurchaseRequestItem.UnitPrice,
            PurchaseRequestItem.Status_s,
            Product.ManufacturerItemName.label("ProductName"),
            Product.SKU.label("ProductSKU"),
            Product.Category.label("ProductCategory"),
            Product.CurrentStock.label("CurrentStock"),
            func.coalesce(recv.c.ReceivedQty, 0).label("ReceivedQty"),
        )
        .outerjoin(Product, Product.ProductID == PurchaseRequestItem.ProductID)
        .outerjoin(recv, recv.c.ItemID == PurchaseRequestItem.ItemID)
        .filter(PurchaseRequestItem.RequestID == request_id)
        .order_by(PurchaseRequestItem.ItemID.asc())
        .all()
    )
    return [dict(r._mapping) for r in rows]


def pending_items_by_sku(db: Session, *, sku: str) -> List[dict]:
    """Ürünün (SKU/barkod) bekleyen talep kalemleri + şimdiye kadar gelen miktar."""
    product = find_product(db, sku)
    if not product:
        return []

    recv = _received_subquery(db)
    rows = (
        db.query(
            PurchaseRequestItem.ItemID,
            PurchaseRequestItem.RequestID,
            PurchaseRequestItem.ProductID,
            PurchaseRequestItem.RequestedQty,
            PurchaseRequestItem.ExpectedDeliveryDate,
            PurchaseRequestItem.SupplierName,
            PurchaseRequestItem.UnitPrice,
            PurchaseRequestItem.Status_s,
            PurchaseRequest.RequestQr,
            PurchaseRequest.RequestedBy,
            PurchaseRequest.RequestDate,
            PurchaseRequest.Status_s.label("RequestStatus"),
            PurchaseRequest.Notes.label("RequestNotes"),
            Product.ManufacturerItemName.label("ProductName"),
            Product.SKU.label("ProductSKU"),
            func.coalesce(recv.c.ReceivedQty, 0).label("ReceivedQty"),
        )
        .outerjoin(PurchaseRequest, PurchaseRequest.RequestID == PurchaseRequestItem.RequestID)
        .outerjoin(Product, Product.ProductID == PurchaseRequestItem.ProductID)
        .outerjoin(recv, recv.c.ItemID == PurchaseRequestItem.ItemID)
        .filter(
            PurchaseRequestItem.ProductID == product.ProductID,
            PurchaseRequestItem.Status_s == STATUS_PENDING,
        )
        .order_by(PurchaseRequest.RequestDate.desc(), PurchaseRequestItem.ItemID.desc())
        .all()
    )
    return [dict(r._mapping) for r in rows]
