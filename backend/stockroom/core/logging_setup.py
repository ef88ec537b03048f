# backend/stockroom/core/logging_setup.py
from __future__ import annotations
import os
import logging, logging.handlers
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> Optional[Path]:
    """Root logger'ı kur: konsol + (LOG_FILE verilmişse) dönen dosya."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_file = log_file or os.getenv("LOG_FILE") or None

    fmt = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(level_name)

    # tekrar çağrıldığında handler çoğaltma
    if not any(getattr(h, "_stockroom", False) for h in root.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(fmt)
        stream._stockroom = True
        root.addHandler(stream)

    log_path: Optional[Path] = None
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        if not any(getattr(h, "baseFilename", "") == str(log_path.resolve()) for h in root.handlers):
            handler = logging.handlers.RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
            handler.setFormatter(fmt)
            root.addHandler(handler)

    # uvicorn logger'ları root'a aksın
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level_name)

    return log_path
