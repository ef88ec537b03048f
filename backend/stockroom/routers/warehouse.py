from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockroom.core.api import ok, list_meta
from stockroom.core.db import get_db
from stockroom.core.security import get_current_user, require_roles
from stockroom.schemas.warehouse import StockOutCreate, WarehouseTxnRead
from stockroom.services.warehouse_service import get_txn_details, issue_stock, list_txns

router = APIRouter(tags=["warehouse"], dependencies=[Depends(get_current_user)])

# store|admin guard
Guard = require_roles("store", "admin")


# --- Stok Çıkışı (OUT) ---
@router.post("/stock-out", dependencies=[Depends(Guard)])
def stock_out(payload: StockOutCreate, db: Session = Depends(get_db)):
    result = issue_stock(
        db,
        sku=payload.sku,
        dept_id=payload.deptId,
        quantity=payload.quantity,
        reason_code=payload.reasonCode,
        user_id=payload.userId,
    )
    # uyarı çıkışı engellemez; istemci sadece bilgilendirir
    return ok({
        "transaction": WarehouseTxnRead.model_validate(result.transaction).model_dump(),
        "warning": result.warning.as_dict() if result.warning else None,
    })


# --- Defter ---
@router.get("/transactions")
def transactions(
    product_id: Optional[int] = Query(None, ge=1),
    txn_type: Optional[Literal["IN", "OUT"]] = Query(None),
    dept_id: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    items = list_txns(db, product_id=product_id, txn_type=txn_type, dept_id=dept_id, skip=skip, limit=limit)
    return ok(items, meta=list_meta(items))


@router.get("/transactions/{txn_id}")
def transaction_details(txn_id: int, db: Session = Depends(get_db)):
    return ok(get_txn_details(db, txn_id=txn_id))
