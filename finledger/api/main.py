"""FastAPI application factory"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finledger.api.v1 import (
    accounts,
    budgets,
    categories,
    dashboard,
    expenses,
    incomes,
    investments,
    transactions,
    users,
)
from finledger.domain.exceptions import (
    ConsistencyError,
    DomainException,
    NotFoundError,
    ValidationError,
)
from finledger.infrastructure.observability.logging import log_domain_error, setup_logging
from finledger.infrastructure.observability.metrics import domain_error_counter
from finledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)

# Consistency violations are unprocessable requests, not conflicts on a resource
STATUS_BY_ERROR = {
    ValidationError: 422,
    NotFoundError: 404,
    ConsistencyError: 422,
}


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    domain_error_counter.labels(error=exc.error_code).inc()
    log_domain_error(exc, getattr(request.state, "request_id", None))
    status_code = STATUS_BY_ERROR.get(type(exc), 400)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Finledger",
        description="Personal finance ledger: accounts, budgets, investments and transactions",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(users.router, prefix="/v1", tags=["users"])
    app.include_router(categories.router, prefix="/v1", tags=["categories"])
    app.include_router(accounts.router, prefix="/v1", tags=["bank-accounts"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(expenses.router, prefix="/v1", tags=["expenses"])
    app.include_router(incomes.router, prefix="/v1", tags=["incomes"])
    app.include_router(budgets.router, prefix="/v1", tags=["budgets"])
    app.include_router(investments.router, prefix="/v1", tags=["investments"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])

    return app


app = create_app()
