# backend/stockroom/services/receiving_service.py
from __future__ import annotations
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from stockroom.core.db import atomic, utcnow
from stockroom.core.errors import NotFoundError, ValidationError
from stockroom.domain.constants import REASON_PR_RECEIVE, STATUS_PENDING, STATUS_RECEIVED, TXN_IN
from stockroom.models import PurchaseRequest, PurchaseRequestItem, ReceivingTxn, WarehouseTxn
from stockroom.services.stock_service import adjust_stock

logger = logging.getLogger(__name__)


def received_total(db: Session, item_id: int) -> int:
    total = (
        db.query(func.coalesce(func.sum(ReceivingTxn.ReceivedQty), 0))
        .filter(ReceivingTxn.ItemID == item_id)
        .scalar()
    )
    return int(total or 0)


def receive_item(
    db: Session,
    *,
    item_id: int,
    received_qty: int,
    received_by: Optional[str] = None,
    is_damaged: bool = False,
    damage_notes: Optional[str] = None,
    photo_url: Optional[str] = None,
) -> ReceivingTxn:
    """
    Talep kalemine gelen miktarı işler (kısmi teslimler birikir).
    Hepsi tek transaction:
      1) Kalem yoksa 404
      2) ReceivingTxn kaydı
      3) Kalemin ürünü varsa stok += miktar ve IN defter kaydı
      4) Toplam gelen >= istenen ise kalem 'Received';
         talepte 'Pending' kalem kalmadıysa talep de 'Received'
    Durum geçişi tek yönlü; 'Received' geri dönmez.
    """
    if received_qty is None or received_qty <= 0:
        raise ValidationError("ReceivedQty must be > 0")

    with atomic(db, "receive_item"):
        item = db.get(PurchaseRequestItem, item_id)
        if not item:
            raise NotFoundError("Purchase request item not found")

        receiving = ReceivingTxn(
            ItemID=item_id,
            ReceivedQty=received_qty,
            ReceivedBy=received_by,
            IsDamaged=bool(is_damaged),
            DamageNotes=damage_notes,
            PhotoUrl=photo_url,
        )
        db.add(receiving)
        db.flush()

        if item.ProductID:
            adjust_stock(db, item.ProductID, received_qty)
            db.add(WarehouseTxn(
                ProductID=item.ProductID,
                Quantity=received_qty,
                TxnType=TXN_IN,
                UserID=received_by,
                ReasonCode=REASON_PR_RECEIVE.format(item.RequestID),
                ReferenceRequestID=item.RequestID,
            ))

        total = received_total(db, item_id)
        if total > item.RequestedQty:
            logger.warning(
                "over-receipt: ItemID=%s received=%s requested=%s",
                item_id, total, item.RequestedQty,
            )

        if total >= item.RequestedQty and item.Status_s != STATUS_RECEIVED:
            item.Status_s = STATUS_RECEIVED
            db.flush()

            if item.RequestID:
                pending = (
                    db.query(func.count(PurchaseRequestItem.ItemID))
                    .filter(
                        PurchaseRequestItem.RequestID == item.RequestID,
                        PurchaseRequestItem.Status_s == STATUS_PENDING,
                    )
                    .scalar()
                )
                if int(pending or 0) == 0:
                    req = db.get(PurchaseRequest, item.RequestID)
                    if req and req.Status_s != STATUS_RECEIVED:
                        req.Status_s = STATUS_RECEIVED
                        logger.info("request completed: RequestID=%s", item.RequestID)

    db.refresh(receiving)
    logger.info("received: ItemID=%s qty=%s total=%s", item_id, received_qty, total)
    return receiving


# ---- Zaman çizelgesi ----
@dataclass
class TimelineEvent:
    type: str                 # created | received | completed
    label: str
    detail: str
    date: datetime
    quantity: Optional[int] = None
    isDamaged: Optional[bool] = None
    damageNotes: Optional[str] = None

    def as_dict(self) -> dict:
        return asdict(self)


def receiving_timeline(db: Session, *, item_id: int) -> List[TimelineEvent]:
    """
    Kalem için olay geçmişi: created -> received* -> completed.
    Salt okuma; tarih sırasına göre (artan) döner. Kalem yoksa boş liste.
    """
    item = db.get(PurchaseRequestItem, item_id)
    if not item:
        return []
    req = db.get(PurchaseRequest, item.RequestID) if item.RequestID else None

    receivings = (
        db.query(ReceivingTxn)
        .filter(ReceivingTxn.ItemID == item_id)
        .order_by(ReceivingTxn.ReceivedDate.asc(), ReceivingTxn.ReceivingID.asc())
        .all()
    )

    events: List[TimelineEvent] = [
        TimelineEvent(
            type="created",
            label="Request Created",
            detail=f"{req.RequestQr if req else '-'} by {(req.RequestedBy if req else None) or 'System'}",
            date=(req.RequestDate if req and req.RequestDate else utcnow()),
            quantity=item.RequestedQty,
        )
    ]

    for r in receivings:
        by = f" by {r.ReceivedBy}" if r.ReceivedBy else ""
        events.append(TimelineEvent(
            type="received",
            label="Items Received",
            detail=f"{r.ReceivedQty} units received{by}",
            date=r.ReceivedDate,
            quantity=r.ReceivedQty,
            isDamaged=bool(r.IsDamaged),
            damageNotes=r.DamageNotes,
        ))

    if item.Status_s == STATUS_RECEIVED:
        # en son teslim tarihi; teslim kaydı yoksa (tutarsız veri) şimdi
        events.append(TimelineEvent(
            type="completed",
            label="Order Completed",
            detail="All items received and verified",
            date=receivings[-1].ReceivedDate if receivings else utcnow(),
        ))

    # sort stabil: aynı tarihte ekleme sırası (created, teslimler ID sırasıyla, completed) korunur
    events.sort(key=lambda e: e.date)
    return events
