# backend/stockroom/main.py
import os, json, logging
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.orm import Session
from sqlalchemy import text

# .env yükle
from dotenv import load_dotenv, find_dotenv
load_dotenv(find_dotenv())

from stockroom.core.logging_setup import setup_logging
setup_logging()

from stockroom.core.db import get_db, engine, Base
from stockroom import models  # noqa: F401  (metadata dolsun)

# --- Router importları ---
from stockroom.routers.auth import router as auth_router
from stockroom.routers.products import router as products_router, departments_router
from stockroom.routers.purchase import router as purchase_router
from stockroom.routers.receiving import router as receiving_router
from stockroom.routers.warehouse import router as warehouse_router
from stockroom.routers.reports import router as reports_router

# --- API zarfları ---
from stockroom.core.api import ok, fail, UTF8JSONResponse

# --- CORS ---
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)

app = FastAPI(title="STOCKROOM", default_response_class=UTF8JSONResponse)


# JSON Content-Type charset düzeltmesi
@app.middleware("http")
async def _force_json_charset(request, call_next):
    resp = await call_next(request)
    ct = resp.headers.get("content-type", "")
    if ct.lower().startswith("application/json") and "charset=" not in ct.lower():
        resp.headers["content-type"] = "application/json; charset=utf-8"
    return resp


# -----------------------------
# Global hata zarfı
# -----------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_to_envelope(request: Request, exc: StarletteHTTPException):
    # Domain hataları (core/errors.py) meta taşıyabilir, örn. available stok
    return fail(
        str(exc.detail) if exc.detail else exc.__class__.__name__,
        status_code=exc.status_code,
        meta=getattr(exc, "meta", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_to_envelope(request: Request, exc: RequestValidationError):
    return fail("Validation error", status_code=422, meta={"errors": exc.errors()})


# -----------------------------
# CORS yapılandırması (.env)
# -----------------------------
def _parse_origins(env_val: str | None):
    if not env_val or env_val.strip() == "*":
        return ["*"]
    try:
        parsed = json.loads(env_val)
        if isinstance(parsed, list):
            return [str(x) for x in parsed]
    except ValueError:
        pass
    return [s.strip() for s in env_val.split(",") if s.strip()]

ALLOWED_ORIGINS = _parse_origins(os.getenv("CORS_ALLOW_ORIGINS", "*"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- startup: tablolar yoksa oluştur (prod'da alembic) ----
@app.on_event("startup")
def _ensure_tables():
    if os.getenv("AUTO_CREATE_TABLES", "1").strip().lower() in ("0", "false", "no"):
        return
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("tables ensured on %s", engine.url.get_backend_name())

# ---- Sağlık uçları ----
@app.get("/health")
def health():
    return ok({"service": "STOCKROOM"})

@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    val = db.execute(text("SELECT 1")).scalar()
    return ok({"db": "ok", "select1": val})


# =========================
# Router kayıtları
# =========================
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(departments_router)
app.include_router(purchase_router)        # /purchase-requests
app.include_router(receiving_router)       # /receiving
app.include_router(warehouse_router)       # /stock-out, /transactions
app.include_router(reports_router)         # /analytics

logger.info("CORS allow_origins = %s", ALLOWED_ORIGINS)
