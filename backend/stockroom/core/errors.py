# backend/stockroom/core/errors.py
"""
Servis katmanının fırlattığı hata türleri.

Hepsi HTTPException türevi: main.py'deki global handler bunları
{"ok": false, "error": ..., "meta": ...} zarfına çevirir.
"""
from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class StockroomError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=self.status_code, detail=detail)
        self.meta = meta or {}


class NotFoundError(StockroomError):
    status_code = status.HTTP_404_NOT_FOUND


class InsufficientStockError(StockroomError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, available: int, requested: int):
        super().__init__(
            f"Insufficient stock. Available: {available}, Requested: {requested}",
            meta={"available": available, "requested": requested},
        )
        self.available = available
        self.requested = requested


class ValidationError(StockroomError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class TransactionFailure(StockroomError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ConflictError(StockroomError):
    status_code = status.HTTP_409_CONFLICT
