import pytest

from stockroom.core.errors import InsufficientStockError, NotFoundError, ValidationError
from stockroom.models import Product, TonerConsumption, WarehouseTxn
from stockroom.services.purchase_service import create_purchase_request
from stockroom.services.receiving_service import receive_item
from stockroom.services.stock_service import adjust_stock, find_product
from stockroom.services.warehouse_service import issue_stock, ledger_balance


def _stock(db, product_id):
    return db.get(Product, product_id).CurrentStock


def test_issue_decrements_stock_and_writes_out_txn(db, make_product, dept):
    p = make_product("SKU-1", stock=10, category="Toner")

    result = issue_stock(db, sku="SKU-1", dept_id=dept.DeptID, quantity=3, user_id="u1")

    assert _stock(db, p.ProductID) == 7
    tx = result.transaction
    assert tx.TxnType == "OUT"
    assert tx.Quantity == 3
    assert tx.DeptID == dept.DeptID
    assert tx.UserID == "u1"
    # geçmiş yok -> uyarı yok
    assert result.warning is None
    assert db.query(TonerConsumption).count() == 1


def test_issue_insufficient_stock_leaves_everything_unchanged(db, make_product, dept):
    p = make_product("SKU-1", stock=2, category="Toner")

    with pytest.raises(InsufficientStockError) as ei:
        issue_stock(db, sku="SKU-1", dept_id=dept.DeptID, quantity=5)

    assert ei.value.status_code == 409
    assert ei.value.meta == {"available": 2, "requested": 5}
    assert "Available: 2" in ei.value.detail
    assert _stock(db, p.ProductID) == 2
    assert db.query(WarehouseTxn).count() == 0
    assert db.query(TonerConsumption).count() == 0


def test_issue_by_supplier_barcode(db, make_product, dept):
    p = make_product("SKU-9", stock=5, barcode="8690001112223")

    issue_stock(db, sku="8690001112223", dept_id=dept.DeptID, quantity=2)

    assert _stock(db, p.ProductID) == 3


def test_issue_non_consumable_records_no_consumption(db, make_product, dept):
    make_product("CAB-1", stock=5, category="Cable")

    result = issue_stock(db, sku="CAB-1", dept_id=dept.DeptID, quantity=5)

    assert result.transaction.Quantity == 5
    assert db.query(TonerConsumption).count() == 0


def test_issue_unknown_sku_and_department(db, make_product, dept):
    make_product("SKU-1", stock=5)

    with pytest.raises(NotFoundError) as ei:
        issue_stock(db, sku="NOPE", dept_id=dept.DeptID, quantity=1)
    assert ei.value.detail == "Product not found with SKU: NOPE"

    with pytest.raises(NotFoundError):
        issue_stock(db, sku="SKU-1", dept_id=999, quantity=1)
    assert db.query(WarehouseTxn).count() == 0


@pytest.mark.parametrize("quantity", [0, -3])
def test_issue_rejects_non_positive_quantity(db, make_product, dept, quantity):
    p = make_product("SKU-1", stock=5)

    with pytest.raises(ValidationError):
        issue_stock(db, sku="SKU-1", dept_id=dept.DeptID, quantity=quantity)
    assert _stock(db, p.ProductID) == 5


def test_adjust_stock_conditional_decrement(db, make_product):
    p = make_product("SKU-1", stock=4)

    adjust_stock(db, p.ProductID, 6)
    adjust_stock(db, p.ProductID, -10)
    db.commit()
    assert _stock(db, p.ProductID) == 0

    # taban koşulu: stok eksiye düşmez
    with pytest.raises(InsufficientStockError) as ei:
        adjust_stock(db, p.ProductID, -1)
    db.rollback()
    assert ei.value.meta["available"] == 0
    assert _stock(db, p.ProductID) == 0


def test_adjust_stock_unknown_product(db):
    with pytest.raises(NotFoundError):
        adjust_stock(db, 12345, -1)


def test_find_product_prefers_sku(db, make_product):
    a = make_product("X-1", stock=1, barcode="X-2")
    b = make_product("X-2", stock=1)

    assert find_product(db, "X-2").ProductID == b.ProductID
    assert find_product(db, "X-1").ProductID == a.ProductID
    assert find_product(db, "missing") is None


def test_stock_equals_initial_plus_signed_ledger(db, make_product, dept):
    p = make_product("SKU-1", stock=10, category="Toner")
    initial = 10
    req = create_purchase_request(db, requested_by="ali", items=[{"ProductID": p.ProductID, "RequestedQty": 6}])
    item_id = req.items[0].ItemID

    receive_item(db, item_id=item_id, received_qty=6, received_by="depo")
    issue_stock(db, sku="SKU-1", dept_id=dept.DeptID, quantity=4)
    issue_stock(db, sku="SKU-1", dept_id=dept.DeptID, quantity=1)

    assert _stock(db, p.ProductID) == 11
    assert _stock(db, p.ProductID) == initial + ledger_balance(db, p.ProductID)
