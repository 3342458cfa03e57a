from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from textile_erp.api.routes import (
    auth,
    companies,
    customers,
    financial_documents,
    inventory,
    locations,
    machines,
    orders,
    payments,
    products,
    purchase_orders,
    quality,
    reports,
    suppliers,
    users,
)
from textile_erp.core.deps import get_tenant_id
from textile_erp.core.errors import AppError
from textile_erp.core.logging import configure_logging, correlation_id_var, tenant_id_var
from textile_erp.core.settings import get_app_settings
from textile_erp.db.run_migrations import main as run_alembic
from textile_erp.db.seed import seed_all
from textile_erp.db.session import dispose_engine, get_engine
from textile_erp.schemas.common import ErrorInfo, ErrorResponse, MessageResponse, TenantEcho

settings = get_app_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# (router module, tag, description); order is the order in the docs.
RESOURCES = [
    (auth, "Auth", "Registration, login and tokens."),
    (companies, "Companies", "Companies (tenants), switching and invitations."),
    (users, "Users", "Members of the current company."),
    (locations, "Locations", "Branches, warehouses, factories and stores."),
    (products, "Products", "Catalog, categories and stock adjustments."),
    (inventory, "Inventory", "Location stock, movements, reservations and alerts."),
    (customers, "Customers", "Customer master."),
    (suppliers, "Suppliers", "Supplier master."),
    (orders, "Orders", "Sales orders and their status workflow."),
    (machines, "Machines", "Machines, breakdowns and maintenance."),
    (quality, "Quality", "Inspections, checkpoints, defects, metrics and compliance."),
    (purchase_orders, "Purchase orders", "Purchase orders to suppliers and their receiving workflow."),
    (financial_documents, "Financial documents", "Invoices and supplier bills."),
    (payments, "Payments", "Payment ledger for invoices and bills."),
    (reports, "Reports", "Business reports as JSON or CSV/Excel/PDF exports."),
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=[
        {"name": "System", "description": "Service information."},
        {"name": "Health", "description": "Liveness and readiness checks."},
    ]
    + [{"name": tag, "description": description} for _, tag, description in RESOURCES],
)

allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if "*" in settings.CORS_ORIGINS and allow_credentials:
    logger.warning("Credentialed CORS is not allowed with '*' origins; credentials disabled")
    allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=allow_credentials,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Bind correlation and company ids for logs and error bodies; echo the correlation id."""
    corr = request.headers.get(CORRELATION_HEADER) or request.headers.get("X-Request-ID") or uuid4().hex
    company = request.headers.get("X-Tenant-ID")
    request.state.correlation_id = corr
    request.state.tenant_id = company
    tokens = (correlation_id_var.set(corr), tenant_id_var.set(company))
    try:
        logger.info("%s %s", request.method, request.url.path)
        response = await call_next(request)
    finally:
        correlation_id_var.reset(tokens[0])
        tenant_id_var.reset(tokens[1])
    response.headers[CORRELATION_HEADER] = corr
    return response


def error_response(request: Request, status_code: int, error_type: str, message: str, details: Any = None) -> JSONResponse:
    """ErrorResponse envelope shared by every exception handler."""
    body = ErrorResponse(
        status=status_code,
        message=message,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=getattr(request.state, "correlation_id", None),
        tenant_id=getattr(request.state, "tenant_id", None),
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(level, "%s: %s", exc.code, exc.message)
    return error_response(request, exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Constraint violations the services did not pre-check."""
    logger.warning("Integrity error: %s", exc.orig)
    return error_response(request, 409, "conflict", "Resource conflicts with existing data")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    if isinstance(exc.detail, str):
        return error_response(request, exc.status_code, "http_error", exc.detail)
    return error_response(request, exc.status_code, "http_error", "HTTP Error", exc.detail)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(request, 422, "validation_error", "Request validation failed", exc.errors())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(request, 500, "internal_error", "An unexpected error occurred")


@app.on_event("startup")
async def on_startup() -> None:
    """
    Migrate and optionally seed. Failures are logged and the API still starts;
    /health/ready reports whether the database is usable.
    """
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            # env.py runs its own event loop
            await asyncio.to_thread(run_alembic, ["upgrade", "head"])
            logger.info("Database schema is at head")
        except Exception:
            logger.exception("Alembic upgrade failed")

    if settings.AUTO_SEED:
        try:
            await seed_all()
        except Exception:
            logger.exception("Demo seeding failed")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await dispose_engine()


api_v1 = APIRouter(prefix="/api/v1")


# PUBLIC_INTERFACE
@api_v1.get("", response_model=MessageResponse, summary="API information", tags=["System"])
def api_info() -> MessageResponse:
    """Name, version and the mounted resource groups."""
    return MessageResponse(
        message=f"{settings.APP_NAME} {settings.APP_VERSION}",
        details={"resources": [tag for _, tag, _ in RESOURCES]},
    )


# PUBLIC_INTERFACE
@api_v1.get("/health", response_model=MessageResponse, summary="Liveness", tags=["Health"])
def health_check() -> MessageResponse:
    return MessageResponse(message="Healthy")


# PUBLIC_INTERFACE
@api_v1.get(
    "/health/ready",
    response_model=MessageResponse,
    summary="Readiness",
    description="503 unless a trivial query succeeds against the database.",
    tags=["Health"],
)
async def readiness_check() -> MessageResponse:
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Database not ready: %s", exc)
        raise HTTPException(status_code=503, detail="Database unavailable")
    return MessageResponse(message="Ready")


# PUBLIC_INTERFACE
@api_v1.get(
    "/health/tenant",
    response_model=TenantEcho,
    summary="Tenant header echo",
    description="Validates and echoes X-Tenant-ID.",
    tags=["Health"],
)
async def tenant_health_echo(tenant_id=Depends(get_tenant_id)) -> TenantEcho:
    return TenantEcho(tenant_id=tenant_id)


for module, _, _ in RESOURCES:
    api_v1.include_router(module.router)

app.include_router(api_v1)
