# stockroom/routers/purchase.py
from typing import List, Optional, Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockroom.core.api import ok
from stockroom.core.db import get_db
from stockroom.core.security import get_current_user, require_roles
from stockroom.schemas.purchase import PRCreate, PRItemRead, PRRead, PRUpdate, PendingItemRead
from stockroom.services.purchase_service import (
    create_purchase_request,
    delete_purchase_request,
    get_request_items,
    list_purchase_requests,
    pending_items_by_sku,
    update_purchase_request,
)

router = APIRouter(prefix="/purchase-requests", tags=["purchase-requests"], dependencies=[Depends(get_current_user)])

# Role guard (store veya admin)
Guard = require_roles("store", "admin")


# --- LIST ---
@router.get("", response_model=List[PRRead])
def list_requests(
    status_s: Optional[Literal["Pending", "Approved", "Rejected", "Received"]] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return list_purchase_requests(db, status_s=status_s, skip=skip, limit=limit)


# --- CREATE ---
@router.post("", response_model=PRRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(Guard)])
def create_request(payload: PRCreate, db: Session = Depends(get_db)):
    return create_purchase_request(
        db,
        requested_by=payload.request.RequestedBy,
        notes=payload.request.Notes,
        status_s=payload.request.Status_s,
        items=payload.items,
    )


# --- ITEMS ---
@router.get("/pending/{sku}", response_model=List[PendingItemRead])
def pending_items(sku: str, db: Session = Depends(get_db)):
    """Teslim alma ekranı: SKU/barkod okutulunca bekleyen kalemler."""
    return pending_items_by_sku(db, sku=sku)


@router.get("/{request_id}/items", response_model=List[PRItemRead])
def request_items(request_id: int, db: Session = Depends(get_db)):
    return get_request_items(db, request_id=request_id)


# --- WORKFLOW ---
@router.patch("/{request_id}", response_model=PRRead, dependencies=[Depends(Guard)])
def update_request(request_id: int, payload: PRUpdate, db: Session = Depends(get_db)):
    return update_purchase_request(
        db,
        request_id=request_id,
        status_s=payload.Status_s,
        notes=payload.Notes,
        requested_by=payload.RequestedBy,
    )


@router.delete("/{request_id}", dependencies=[Depends(Guard)])
def delete_request(request_id: int, db: Session = Depends(get_db)):
    delete_purchase_request(db, request_id=request_id)
    return ok({"deleted": request_id})
