from .product import Product
from .department import Department
from .purchase_request import PurchaseRequest, PurchaseRequestItem
from .receiving_txn import ReceivingTxn
from .warehouse_txn import WarehouseTxn
from .toner_consumption import TonerConsumption
from .user import AppUser
__all__ = [
    "Product", "Department", "PurchaseRequest", "PurchaseRequestItem",
    "ReceivingTxn", "WarehouseTxn", "TonerConsumption", "AppUser",
]
