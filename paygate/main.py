from __future__ import annotations

import logging
import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pythonjsonlogger import jsonlogger

from .config import settings
from .database import init_db
from .security_headers import SecurityHeadersMiddleware, default_policy
from .api import routes_payments
from .auth.routes_auth import router as auth_router

logger = logging.getLogger("paygate.main")

GENERIC_FAILURE_MESSAGE = "An unexpected error occurred on the server."


# ---------------------------------------------------------------------------
# Structured logging
# ---------------------------------------------------------------------------

def _configure_logging() -> None:
    """Configure structured JSON logging when log_format=json (default)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
        handler.setFormatter(formatter)
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    root.addHandler(handler)

_configure_logging()

# Initialise the transaction table on startup
init_db()

app = FastAPI(
    title="paygate",
    version="0.1.0",
    description=(
        "Request-security gatekeeping for customer login and international "
        "payment submission: whitelist field validation, bcrypt credential "
        "checks, per-client rate limiting and strict security headers."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(SecurityHeadersMiddleware, policy=default_policy)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(auth_router)
app.include_router(routes_payments.router)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Unparseable JSON bodies get the same 400 shape as field errors."""
    return JSONResponse(
        status_code=400,
        content={"errors": [{"field": "body", "message": "Request body must be valid JSON."}]},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    response = JSONResponse(status_code=500, content={"message": GENERIC_FAILURE_MESSAGE})
    # Runs outside the middleware stack, so apply the header policy here.
    default_policy.apply(response.headers)
    return response


@app.get("/health", tags=["meta"])
def health() -> dict:
    return {"status": "healthy"}
