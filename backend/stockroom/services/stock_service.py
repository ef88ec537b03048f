# backend/stockroom/services/stock_service.py
from __future__ import annotations
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from stockroom.core.errors import InsufficientStockError, NotFoundError
from stockroom.models import Product

logger = logging.getLogger(__name__)


def find_product(db: Session, code: str) -> Optional[Product]:
    """Önce SKU, bulunamazsa tedarikçi barkodu ile ara."""
    product = db.query(Product).filter(Product.SKU == code).first()
    if product:
        return product
    return db.query(Product).filter(Product.SupplierBarcode == code).first()


def get_product_or_404(db: Session, code: str) -> Product:
    product = find_product(db, code)
    if not product:
        raise NotFoundError(f"Product not found with SKU: {code}")
    return product


def adjust_stock(db: Session, product_id: int, delta: int) -> None:
    """
    CurrentStock += delta, tek UPDATE ifadesi ile (read-modify-write yok).
    Çağıranın transaction'ı içinde çalışır; commit yapmaz.
    Negatif delta'da stok tabanı koşulu aynı ifadeye eklenir:
      UPDATE Product SET CurrentStock = CurrentStock + :d
       WHERE ProductID = :pid AND CurrentStock >= :qty
    Satır güncellenmezse eşzamanlı bir çıkış stoğu tüketmiştir.
    """
    stmt = (
        update(Product)
        .where(Product.ProductID == product_id)
        .values(CurrentStock=Product.CurrentStock + delta)
        .execution_options(synchronize_session=False)
    )
    if delta < 0:
        stmt = stmt.where(Product.CurrentStock >= -delta)

    res = db.execute(stmt)
    if res.rowcount == 0:
        product = db.get(Product, product_id)
        if product is None:
            raise NotFoundError(f"Product not found: {product_id}")
        db.refresh(product)
        raise InsufficientStockError(available=int(product.CurrentStock or 0), requested=-delta)

    # Oturumdaki nesne bayat kalmasın
    product = db.get(Product, product_id)
    if product is not None:
        db.expire(product, ["CurrentStock"])

    logger.info("stock adjusted: ProductID=%s delta=%+d", product_id, delta)
