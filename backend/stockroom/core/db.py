# backend/stockroom/core/db.py
import os
import logging
from contextlib import contextmanager
from datetime import datetime, timezone

from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool
from dotenv import dotenv_values, load_dotenv, find_dotenv

from .errors import TransactionFailure

logger = logging.getLogger(__name__)

# Proje kökü ve .env yolu
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
DEFAULT_DOTENV = os.path.join(BASE_DIR, ".env")

def _norm_key(k: str) -> str:
    return k.replace("\ufeff", "").strip() if isinstance(k, str) else k

# .env yolunu bul ve ortamı yükle (CI'daki env'i ezmeden)
dotenv_path = DEFAULT_DOTENV if os.path.exists(DEFAULT_DOTENV) else find_dotenv(filename=".env", usecwd=True)
if dotenv_path:
    cfg = dotenv_values(dotenv_path, encoding="utf-8-sig")
    for k, v in cfg.items():
        nk = _norm_key(k)
        if v is not None and (nk not in os.environ or not os.environ[nk].strip()):
            os.environ[nk] = v
    load_dotenv(dotenv_path, override=False)

DSN = os.environ.get("DATABASE_URL") or os.environ.get("MSSQL_DSN")
if not DSN or not DSN.strip():
    raise RuntimeError(f"DATABASE_URL / MSSQL_DSN tanımlı değil. .env: {dotenv_path or '(bulunamadı)'}")

url = make_url(DSN)
engine_kwargs = dict(pool_pre_ping=True)

# Dialect'e göre güvenli ayarlar
backend = url.get_backend_name()  # örn: 'sqlite', 'mssql', 'postgresql'
if backend.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    # Bellek içi SQLite: tüm oturumlar aynı bağlantıyı paylaşmalı
    if url.database in (None, "", ":memory:"):
        engine_kwargs["poolclass"] = StaticPool
elif backend.startswith("mssql"):
    engine_kwargs.update(pool_size=5, max_overflow=10, fast_executemany=True)
elif backend.startswith("postgresql"):
    engine_kwargs.update(pool_size=5, max_overflow=10)

engine = create_engine(DSN, **engine_kwargs)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC zaman damgası (DateTime kolonları tz'siz tutuluyor)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session, label: str = "transaction"):
    """
    Çok adımlı yazma işlemleri için tek transaction kapsamı.
    Başarıda commit; herhangi bir hatada rollback.
    - Domain hataları (HTTPException türevleri) aynen yukarı fırlatılır
    - SQLAlchemy hataları TransactionFailure'a çevrilir
    """
    try:
        yield db
        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("%s aborted", label)
        raise TransactionFailure(f"{label} failed: {type(e).__name__}") from e
    except Exception:
        db.rollback()
        raise
