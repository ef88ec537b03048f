from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from stockroom.core.db import utcnow
from stockroom.models import Product, TonerConsumption, WarehouseTxn
from stockroom.services import warehouse_service


def _seed_request(client, product_id, qty=10):
    r = client.post(
        "/purchase-requests",
        json={"request": {"RequestedBy": "ali"}, "items": [{"ProductID": product_id, "RequestedQty": qty, "UnitPrice": "4.50"}]},
    )
    assert r.status_code == 201, r.text
    return r.json()


# ---- products ----
def test_product_crud_and_lookup(client):
    r = client.post("/products", json={"SKU": "TNR-1", "ManufacturerItemName": "HP 85A", "Category": "Toner",
                                       "SupplierBarcode": "869000", "CurrentStock": 3, "MinThreshold": 5})
    assert r.status_code == 201
    pid = r.json()["ProductID"]

    dup = client.post("/products", json={"SKU": "TNR-1", "ManufacturerItemName": "x"})
    assert dup.status_code == 409
    assert dup.json()["ok"] is False

    assert client.get("/products/sku/869000").json()["SKU"] == "TNR-1"
    assert client.get("/products/sku/none").status_code == 404

    r = client.patch(f"/products/{pid}", json={"MinThreshold": 2, "InternalItemName": "Siyah toner"})
    assert r.status_code == 200
    assert r.json()["MinThreshold"] == 2
    assert r.json()["CurrentStock"] == 3

    assert client.get("/products/below-min").json()["Count"] == 0
    assert len(client.get("/products").json()) == 1

    assert client.delete(f"/products/{pid}").json() == {"ok": True, "data": {"deleted": pid}}
    assert client.delete(f"/products/{pid}").status_code == 404


def test_product_delete_blocked_when_referenced(client, make_product, dept):
    p = make_product("SKU-1", stock=5)
    client.post("/stock-out", json={"sku": "SKU-1", "deptId": dept.DeptID, "quantity": 1})

    r = client.delete(f"/products/{p.ProductID}")
    assert r.status_code == 409


def test_departments_list(client, dept):
    r = client.get("/departments")
    assert r.status_code == 200
    assert r.json() == [{"DeptID": dept.DeptID, "Name": "Muhasebe", "IsITDepartment": False}]


# ---- stock-out ----
def test_stock_out_returns_transaction_without_warning(client, make_product, dept):
    make_product("SKU-1", stock=10, category="Toner")

    r = client.post("/stock-out", json={"sku": "SKU-1", "deptId": dept.DeptID, "quantity": 3, "userId": "u1"})

    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["data"]["transaction"]["TxnType"] == "OUT"
    assert body["data"]["transaction"]["Quantity"] == 3
    assert body["data"]["warning"] is None


def test_stock_out_insufficient_stock_envelope(client, make_product, dept):
    make_product("SKU-1", stock=2)

    r = client.post("/stock-out", json={"sku": "SKU-1", "deptId": dept.DeptID, "quantity": 5})

    assert r.status_code == 409
    assert r.json() == {
        "ok": False,
        "error": "Insufficient stock. Available: 2, Requested: 5",
        "meta": {"available": 2, "requested": 5},
    }


def test_stock_out_unknown_sku_and_bad_body(client, dept):
    r = client.post("/stock-out", json={"sku": "NOPE", "deptId": dept.DeptID, "quantity": 1})
    assert r.status_code == 404
    assert r.json()["error"] == "Product not found with SKU: NOPE"

    r = client.post("/stock-out", json={"sku": "NOPE", "deptId": dept.DeptID, "quantity": 0})
    assert r.status_code == 422
    assert r.json()["ok"] is False


def test_stock_out_with_abuse_warning(client, db, make_product, dept):
    p = make_product("TNR-1", stock=50, category="Toner")
    db.add(TonerConsumption(ProductID=p.ProductID, DeptID=dept.DeptID, Quantity=10,
                            ConsumptionDate=utcnow() - timedelta(days=3)))
    db.commit()

    r = client.post("/stock-out", json={"sku": "TNR-1", "deptId": dept.DeptID, "quantity": 13})

    assert r.status_code == 200
    warning = r.json()["data"]["warning"]
    assert warning["isWarning"] is True
    assert warning["message"] == "30% above 1-month average"

    usage = client.get("/analytics/toner-usage", params={"flagged_only": True}).json()
    assert usage["meta"]["count"] == 1
    cid = usage["data"][0]["ConsumptionID"]

    r = client.post(f"/analytics/toner-usage/{cid}/dismiss")
    assert r.json()["data"] == {"ConsumptionID": cid, "IsFlagged": False}
    assert client.get("/analytics/dashboard").json()["data"]["abuseAlerts"] == 0


# ---- purchase -> receiving -> timeline ----
def test_purchase_receive_timeline_flow(client, make_product):
    p = make_product("SKU-1", stock=0)
    req = _seed_request(client, p.ProductID, qty=10)
    assert req["RequestQr"] == f"REQ_{req['RequestID']}"
    assert req["Status_s"] == "Pending"

    items = client.get(f"/purchase-requests/{req['RequestID']}/items").json()
    assert len(items) == 1
    assert items[0]["UnitPrice"] == 4.5
    item_id = items[0]["ItemID"]

    r = client.post("/receiving", json={"ItemID": item_id, "ReceivedQty": 4, "ReceivedBy": "depo"})
    assert r.status_code == 201
    assert r.json()["ReceivedQty"] == 4

    pending = client.get("/purchase-requests/pending/SKU-1").json()
    assert pending[0]["ReceivedQty"] == 4

    client.post("/receiving", json={"ItemID": item_id, "ReceivedQty": 6})

    requests = client.get("/purchase-requests", params={"status_s": "Received"}).json()
    assert [x["RequestID"] for x in requests] == [req["RequestID"]]

    timeline = client.get(f"/receiving/timeline/{item_id}").json()
    assert timeline["ok"] is True
    assert [e["type"] for e in timeline["data"]] == ["created", "received", "received", "completed"]

    ledger = client.get(f"/products/{p.ProductID}/ledger").json()["data"]
    assert ledger == {"ProductID": p.ProductID, "CurrentStock": 10, "LedgerBalance": 10}

    # teslim görmüş talep silinemez / değiştirilemez
    assert client.delete(f"/purchase-requests/{req['RequestID']}").status_code == 409
    assert client.patch(f"/purchase-requests/{req['RequestID']}", json={"Status_s": "Pending"}).status_code == 409


def test_receiving_unknown_item(client):
    r = client.post("/receiving", json={"ItemID": 77, "ReceivedQty": 1})
    assert r.status_code == 404
    assert client.get("/receiving/timeline/77").json()["data"] == []


def test_purchase_request_validation(client, make_product):
    p = make_product("SKU-1")
    r = client.post("/purchase-requests", json={"request": {}, "items": []})
    assert r.status_code == 422

    r = client.post("/purchase-requests", json={"items": [{"ProductID": 999, "RequestedQty": 1}]})
    assert r.status_code == 404

    req = _seed_request(client, p.ProductID)
    r = client.patch(f"/purchase-requests/{req['RequestID']}", json={"Status_s": "Received"})
    assert r.status_code == 409
    r = client.patch(f"/purchase-requests/{req['RequestID']}", json={"Status_s": "Approved"})
    assert r.json()["Status_s"] == "Approved"
    assert client.delete(f"/purchase-requests/{req['RequestID']}").json()["data"] == {"deleted": req["RequestID"]}


# ---- ledger / analytics ----
def test_transactions_listing(client, make_product, dept):
    make_product("SKU-1", stock=10)
    client.post("/stock-out", json={"sku": "SKU-1", "deptId": dept.DeptID, "quantity": 2})
    client.post("/stock-out", json={"sku": "SKU-1", "deptId": dept.DeptID, "quantity": 1})

    body = client.get("/transactions", params={"txn_type": "OUT"}).json()
    assert body["meta"]["count"] == 2
    txn_id = body["data"][0]["TxnID"]

    detail = client.get(f"/transactions/{txn_id}").json()["data"]
    assert detail["ProductSKU"] == "SKU-1"
    assert detail["DepartmentName"] == "Muhasebe"
    assert client.get("/transactions/9999").status_code == 404

    dash = client.get("/analytics/dashboard").json()["data"]
    assert dash["totalIssued"] == 3
    assert dash["totalStock"] == 7


def test_top_consumed_products_period_validation(client, make_product, dept):
    make_product("SKU-1", stock=10)
    client.post("/stock-out", json={"sku": "SKU-1", "deptId": dept.DeptID, "quantity": 4})

    today = utcnow().date()
    r = client.get("/analytics/top-consumed-products",
                   params={"start": today.isoformat(), "end": (today + timedelta(days=1)).isoformat()})
    assert r.status_code == 200
    assert r.json()["data"][0]["qtyOut"] == 4

    r = client.get("/analytics/top-consumed-products",
                   params={"start": today.isoformat(), "end": today.isoformat()})
    assert r.status_code == 422


# ---- hata yolları ----
def test_product_patch_rejects_null_for_required_fields(client, make_product):
    p = make_product("SKU-1", stock=5)

    r = client.patch(f"/products/{p.ProductID}", json={"ManufacturerItemName": None})
    assert r.status_code == 422
    assert r.json()["ok"] is False

    r = client.patch(f"/products/{p.ProductID}", json={"MinThreshold": None})
    assert r.status_code == 422

    # null olabilen alanlar temizlenebilir
    r = client.patch(f"/products/{p.ProductID}", json={"Category": None})
    assert r.status_code == 200
    assert r.json()["ManufacturerItemName"] == "Item SKU-1"
    assert r.json()["Category"] is None


def test_product_patch_constraint_error_becomes_envelope(client, db, make_product, monkeypatch):
    p = make_product("SKU-1", stock=5)

    def _failing_commit():
        raise IntegrityError("UPDATE Product", {}, Exception("constraint failed"))

    monkeypatch.setattr(db, "commit", _failing_commit)
    r = client.patch(f"/products/{p.ProductID}", json={"InternalItemName": "yeni"})

    assert r.status_code == 422
    assert r.json() == {"ok": False, "error": "Product update violates a constraint"}
    monkeypatch.undo()
    assert db.get(Product, p.ProductID).InternalItemName is None


def test_stock_out_store_failure_leaves_no_partial_rows(client, db, make_product, dept, monkeypatch):
    p = make_product("TNR-1", stock=10, category="Toner")
    real_txn = warehouse_service.WarehouseTxn
    # defter satırı CK_WTxn_Quantity_Positive'i ihlal etsin
    monkeypatch.setattr(warehouse_service, "WarehouseTxn", lambda **kw: real_txn(**{**kw, "Quantity": 0}))

    r = client.post("/stock-out", json={"sku": "TNR-1", "deptId": dept.DeptID, "quantity": 3})

    assert r.status_code == 500
    assert r.json() == {"ok": False, "error": "issue_stock failed: IntegrityError"}
    assert db.get(Product, p.ProductID).CurrentStock == 10
    assert db.query(WarehouseTxn).count() == 0
    assert db.query(TonerConsumption).count() == 0
