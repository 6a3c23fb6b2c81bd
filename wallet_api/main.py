from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wallet_api.db.core import init_db
from wallet_api.logging_config import setup_logging, get_logger
from wallet_api.routers.accounts import router as accounts_router
from wallet_api.routers.budgets import router as budgets_router
from wallet_api.routers.categories import router as categories_router
from wallet_api.routers.transactions import router as transactions_router
from wallet_api.routers.user_settings import router as user_settings_router
from wallet_api.routers.reports import router as reports_router
from wallet_api.routers.stats import router as stats_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    init_db()
    logger.info("Wallet API started")
    yield


app = FastAPI(title="Wallet API", lifespan=lifespan)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "; ".join(messages)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Internal server error"})


app.include_router(accounts_router)
app.include_router(budgets_router)
app.include_router(categories_router)
app.include_router(transactions_router)
app.include_router(user_settings_router)
app.include_router(reports_router)
app.include_router(stats_router)


@app.get("/")
def read_root():
    return "Server is running."
