# backend/stockroom/services/consumption_service.py
from __future__ import annotations
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockroom.core.db import atomic, utcnow
from stockroom.core.errors import NotFoundError
from stockroom.domain.constants import ABUSE_THRESHOLD_RATIO, ABUSE_WINDOW_DAYS
from stockroom.models import Department, Product, TonerConsumption

logger = logging.getLogger(__name__)

AVERAGE_PLACES = Decimal("0.01")


def _half_up(value: float, places: Decimal = Decimal("1")) -> Decimal:
    return Decimal(str(value)).quantize(places, rounding=ROUND_HALF_UP)


@dataclass
class ConsumptionWarning:
    isWarning: bool
    average: float
    current: int
    message: Optional[str] = None

    def as_dict(self) -> dict:
        return asdict(self)


def check_consumption(
    db: Session,
    product_id: int,
    dept_id: int,
    new_quantity: int,
    *,
    now: Optional[datetime] = None,
) -> ConsumptionWarning:
    """
    (ürün, departman) için son ABUSE_WINDOW_DAYS gündeki ortalama tüketim ile
    yeni miktarı karşılaştırır. Uyarı: en az bir örnek var VE
    yeni miktar > ortalama * ABUSE_THRESHOLD_RATIO.

    Sadece bilgi amaçlı: hata fırlatmaz, veri okunamazsa uyarısız döner.
    """
    since = (now or utcnow()) - timedelta(days=ABUSE_WINDOW_DAYS)
    try:
        total_qty, count = (
            db.query(
                func.coalesce(func.sum(TonerConsumption.Quantity), 0),
                func.count(TonerConsumption.ConsumptionID),
            )
            .filter(
                TonerConsumption.ProductID == product_id,
                TonerConsumption.DeptID == dept_id,
                TonerConsumption.ConsumptionDate >= since,
            )
            .one()
        )
    except SQLAlchemyError:
        logger.exception("consumption average read failed (ProductID=%s, DeptID=%s)", product_id, dept_id)
        return ConsumptionWarning(isWarning=False, average=0.0, current=new_quantity)

    total_qty = int(total_qty or 0)
    count = int(count or 0)
    average = total_qty / count if count > 0 else 0.0
    is_warning = count > 0 and new_quantity > average * ABUSE_THRESHOLD_RATIO

    message = None
    if is_warning:
        pct = int(_half_up((new_quantity - average) / average * 100))
        message = f"{pct}% above 1-month average"
        logger.warning(
            "consumption flagged: ProductID=%s DeptID=%s qty=%s avg=%.2f (%s)",
            product_id, dept_id, new_quantity, average, message,
        )

    return ConsumptionWarning(
        isWarning=is_warning,
        average=float(_half_up(average, AVERAGE_PLACES)),
        current=new_quantity,
        message=message,
    )


def list_usage(db: Session, *, flagged_only: bool = False, limit: int = 500) -> List[dict]:
    q = (
        db.query(
            TonerConsumption.ConsumptionID,
            TonerConsumption.ProductID,
            TonerConsumption.DeptID,
            TonerConsumption.Quantity,
            TonerConsumption.ConsumptionDate,
            TonerConsumption.RequestedBy,
            TonerConsumption.IsFlagged,
            Product.ManufacturerItemName.label("ProductName"),
            Product.SKU.label("ProductSKU"),
            Product.Category.label("ProductCategory"),
            Department.Name.label("DepartmentName"),
        )
        .outerjoin(Product, Product.ProductID == TonerConsumption.ProductID)
        .outerjoin(Department, Department.DeptID == TonerConsumption.DeptID)
    )
    if flagged_only:
        q = q.filter(TonerConsumption.IsFlagged.is_(True))
    q = q.order_by(TonerConsumption.ConsumptionDate.desc(), TonerConsumption.ConsumptionID.desc())
    return [dict(r._mapping) for r in q.limit(min(max(1, limit), 500)).all()]


def dismiss_alert(db: Session, *, consumption_id: int) -> TonerConsumption:
    """IsFlagged -> False (idempotent). Kaydın geri kalanı değişmez."""
    with atomic(db, "dismiss_alert"):
        row = db.get(TonerConsumption, consumption_id)
        if not row:
            raise NotFoundError("Consumption record not found")
        row.IsFlagged = False
    db.refresh(row)
    return row
