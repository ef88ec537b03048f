# backend/stockroom/domain/constants.py

"""
Stok defteri ve tüketim kontrolü için sabitlerin tek kaynağı.
"""

import os
from typing import Final, FrozenSet, Tuple

# Depo hareket türleri
TXN_IN: Final[str] = "IN"
TXN_OUT: Final[str] = "OUT"

# Satın alma talebi / kalem durumları
STATUS_PENDING: Final[str] = "Pending"
STATUS_APPROVED: Final[str] = "Approved"
STATUS_REJECTED: Final[str] = "Rejected"
STATUS_RECEIVED: Final[str] = "Received"

REQUEST_STATUSES: Final[Tuple[str, ...]] = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED, STATUS_RECEIVED)
ITEM_STATUSES: Final[Tuple[str, ...]] = (STATUS_PENDING, STATUS_RECEIVED)

# Tüketim takibine giren sarf kategorileri
CONSUMABLE_CATEGORIES: Final[FrozenSet[str]] = frozenset({"Toner", "Ribbon", "Rollos"})

# Talep kalemi teslim alındığında defterdeki standart reason
REASON_PR_RECEIVE: Final[str] = "PR Receive #{}"

# Talep QR: id bilinmeden önce geçici, sonra REQ_<id>
REQUEST_QR_TEMP_PREFIX: Final[str] = "TEMP_"
REQUEST_QR_FORMAT: Final[str] = "REQ_{}"

# Kötüye kullanım eşiği: son N gün ortalamasının oranı (kesin büyük)
ABUSE_THRESHOLD_RATIO: Final[float] = float(os.getenv("ABUSE_THRESHOLD_RATIO", "1.2"))
ABUSE_WINDOW_DAYS: Final[int] = int(os.getenv("ABUSE_WINDOW_DAYS", "30"))


def is_consumable(category) -> bool:
    return bool(category) and category in CONSUMABLE_CATEGORIES
