from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from stockroom.core.api import ok, list_meta
from stockroom.core.db import get_db
from stockroom.core.security import get_current_user, require_roles
from stockroom.schemas.receiving import ReceivingCreate, ReceivingRead
from stockroom.services.receiving_service import receive_item, receiving_timeline

router = APIRouter(prefix="/receiving", tags=["receiving"], dependencies=[Depends(get_current_user)])

Guard = require_roles("store", "admin")


@router.post("", response_model=ReceivingRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(Guard)])
def receive(payload: ReceivingCreate, db: Session = Depends(get_db)):
    """
    Kısmi teslim desteklenir; kalem/talep durumu servis içinde güncellenir.
    Stok IN kaydı receiving_service.receive_item içinde oluşturulur.
    """
    return receive_item(
        db,
        item_id=payload.ItemID,
        received_qty=payload.ReceivedQty,
        received_by=payload.ReceivedBy,
        is_damaged=payload.IsDamaged,
        damage_notes=payload.DamageNotes,
        photo_url=payload.PhotoUrl,
    )


@router.get("/timeline/{item_id}")
def timeline(item_id: int, db: Session = Depends(get_db)):
    events = [e.as_dict() for e in receiving_timeline(db, item_id=item_id)]
    return ok(events, meta=list_meta(events))
