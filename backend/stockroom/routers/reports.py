# backend/stockroom/routers/reports.py
from datetime import date, datetime, time
from typing import Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, desc
from sqlalchemy.orm import Session

from stockroom.core.api import ok, list_meta
from stockroom.core.db import get_db
from stockroom.core.security import get_current_user, require_roles
from stockroom.models import Product, TonerConsumption, WarehouseTxn
from stockroom.services.consumption_service import dismiss_alert, list_usage

router = APIRouter(prefix="/analytics", tags=["analytics"], dependencies=[Depends(get_current_user)])

Guard = require_roles("store", "admin")

# ---------- Ortak: tarih aralığı doğrulaması ----------
def validate_period(
    start: date = Query(..., description="UTC tarih, örn: 2026-08-01"),
    end:   date = Query(..., description="UTC tarih (hariç), örn: 2026-09-01"),
) -> Tuple[date, date]:
    if end <= start:
        raise HTTPException(
            status_code=422,
            detail="Invalid period: 'end' must be after 'start' ('end' is exclusive).",
        )
    if (end - start).days > 366:
        raise HTTPException(status_code=422, detail="Period too long: max 366 days.")
    return (start, end)

# =========================
# DASHBOARD
# =========================
@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    total_stock, total_products = db.query(
        func.coalesce(func.sum(Product.CurrentStock), 0),
        func.count(Product.ProductID),
    ).one()
    low_stock = (
        db.query(func.count(Product.ProductID))
        .filter(Product.CurrentStock <= Product.MinThreshold)
        .scalar()
    )
    by_type = dict(
        db.query(WarehouseTxn.TxnType, func.coalesce(func.sum(WarehouseTxn.Quantity), 0))
        .group_by(WarehouseTxn.TxnType)
        .all()
    )
    abuse_alerts = (
        db.query(func.count(TonerConsumption.ConsumptionID))
        .filter(TonerConsumption.IsFlagged.is_(True))
        .scalar()
    )
    return ok({
        "totalStock": int(total_stock or 0),
        "totalProducts": int(total_products or 0),
        "lowStockCount": int(low_stock or 0),
        "totalIssued": int(by_type.get("OUT", 0) or 0),
        "totalReceived": int(by_type.get("IN", 0) or 0),
        "abuseAlerts": int(abuse_alerts or 0),
    })

# =========================
# TONER / SARF KULLANIMI
# =========================
@router.get("/toner-usage")
def toner_usage(
    flagged_only: bool = Query(False),
    limit: int = Query(500, ge=1, le=500),
    db: Session = Depends(get_db),
):
    rows = list_usage(db, flagged_only=flagged_only, limit=limit)
    return ok(rows, meta=list_meta(rows))

@router.post("/toner-usage/{consumption_id}/dismiss", dependencies=[Depends(Guard)])
def dismiss_toner_alert(consumption_id: int, db: Session = Depends(get_db)):
    row = dismiss_alert(db, consumption_id=consumption_id)
    return ok({"ConsumptionID": row.ConsumptionID, "IsFlagged": bool(row.IsFlagged)})

# =========================
# TOP CONSUMED PRODUCTS
# =========================
@router.get("/top-consumed-products")
def top_consumed_products(
    period: Tuple[date, date] = Depends(validate_period),
    top:   int  = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    start, end = period
    start_dt = datetime.combine(start, time.min)
    end_dt   = datetime.combine(end,   time.min)

    subq = (
        db.query(
            WarehouseTxn.ProductID.label("ProductID"),
            func.sum(WarehouseTxn.Quantity).label("QtyOut"),
        )
        .filter(
            WarehouseTxn.TxnDate >= start_dt,
            WarehouseTxn.TxnDate <  end_dt,
            WarehouseTxn.TxnType == "OUT",
        )
        .group_by(WarehouseTxn.ProductID)
    ).subquery()

    q = (
        db.query(
            Product.ProductID.label("productId"),
            Product.SKU.label("sku"),
            Product.ManufacturerItemName.label("productName"),
            func.coalesce(subq.c.QtyOut, 0).label("qtyOut"),
        )
        .join(subq, subq.c.ProductID == Product.ProductID)
        .order_by(desc(func.coalesce(subq.c.QtyOut, 0)), Product.ManufacturerItemName)
        .limit(top)
    )
    rows = [dict(r._mapping) for r in q.all()]
    meta = {**list_meta(rows), "start": start.isoformat(), "end": end.isoformat(), "top": top}
    return ok(rows, meta=meta)
