"""ShopStream cart service FastAPI application.

Serves the shopping domain (carts, login merge, pricing) over HTTP. Commands
are processed synchronously; each request runs inside the shopping domain
context and blocking store and catalogue I/O runs in the threadpool.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from shopping/domain.toml:
#   - "test" -> in-memory provider
#   - unset  -> SQLite at SHOPPING_DATABASE_URL
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError as DomainValidationError
from pydantic import ValidationError

from shopping.catalogue import reset_catalogue
from shopping.config import get_settings
from shopping.domain import shopping
from shopping.exceptions import CartError
from shopping.utils.db import setup_db
from shopping.utils.logging import add_context, clear_context, configure_logging, get_logger

shopping.init()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level, log_dir=settings.log_dir, log_to_file=settings.log_to_file)
    setup_db(shopping)
    logger.info("Shopping domain ready", domain=shopping.name)
    yield
    reset_catalogue()
    logger.info("Shopping domain stopped", domain=shopping.name)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="ShopStream Cart API",
    description="E-commerce platform shopping domain: carts, login merge and pricing",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the shopping domain context and bind the request path to every log line."""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    try:
        with shopping.domain_context():
            response = await call_next(request)
        return response
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
@app.exception_handler(CartError)
async def cart_error_handler(request: Request, exc: CartError):
    logger.info("Cart request rejected", error=exc.code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(DomainValidationError)
async def domain_validation_handler(request: Request, exc: DomainValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Invalid command",
            "details": {"errors": exc.messages},
        },
    )


@app.exception_handler(ValidationError)
async def command_validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Invalid command",
            "details": {"errors": exc.errors(include_url=False, include_context=False)},
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from shopping.api import router as shopping_router  # noqa: E402

app.include_router(shopping_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "shopping": {"name": shopping.name},
            },
        }
    )
