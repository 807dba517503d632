import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stockledger.api import movements, products, references, stock
from stockledger.config import settings
from stockledger.database import init_db
from stockledger.exceptions import PartialLedgerError, TransientStoreError
from stockledger.services.reference_cache import ReferenceCache

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Stock balances derived from receipts, realizations and orders",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.reference_cache = ReferenceCache(settings.REFERENCE_CACHE_TTL_SECONDS)


@app.exception_handler(TransientStoreError)
async def transient_store_handler(request: Request, exc: TransientStoreError):
    logger.warning("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(PartialLedgerError)
async def partial_ledger_handler(request: Request, exc: PartialLedgerError):
    logger.error("Partial ledger used for a decision on %s", request.url.path)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return JSON for unhandled exceptions so clients can parse the error."""
    logger.error("Unhandled error: %s\n%s", exc, traceback.format_exc())
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.include_router(products.router, prefix="/api/v1")
app.include_router(references.router, prefix="/api/v1")
app.include_router(movements.router, prefix="/api/v1")
app.include_router(stock.router, prefix="/api/v1")


@app.get("/health")
def health():
    return {"status": "ok"}
