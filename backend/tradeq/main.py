import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tradeq.config import settings
from tradeq.database import init_db
from tradeq.exceptions import AppError
from tradeq.routers import system_router, trades_router
from tradeq.routers.system_router import set_trade_worker
from tradeq.services.trade_worker import TradeWorker

logger = logging.getLogger(__name__)

app = FastAPI(title="Trade Stats Queue")

app.include_router(trades_router.router)
app.include_router(system_router.router)

# Embedded worker, only started when settings.run_worker_in_api is enabled
trade_worker = None


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed JSON and wrong field types are reported the same way
    logger.debug(f"Rejected request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": "Invalid JSON"})


@app.on_event("startup")
async def startup_event():
    global trade_worker

    logger.info("Initializing database...")
    await init_db()
    logger.info("Database initialized")

    if settings.run_worker_in_api:
        trade_worker = TradeWorker(name="api-worker")
        set_trade_worker(trade_worker)
        await trade_worker.start()
        logger.info("Embedded trade worker started")


@app.on_event("shutdown")
async def shutdown_event():
    global trade_worker

    if trade_worker:
        await trade_worker.stop()
        set_trade_worker(None)
        trade_worker = None
    logger.info("Shutdown complete")
