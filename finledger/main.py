"""
FastAPI application factory
"""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from finledger.api.v1 import analytics, budgets, debts, goals, transactions
from finledger.config import get_settings
from finledger.domain.errors import ConflictError, NotFoundError, OverpaymentError, ValidationError
from finledger.infrastructure.db.session import check_db_connection

logger = logging.getLogger(__name__)


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every unhandled exception with its traceback, including sync routes"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "\n%s\nERROR on %s %s\n%s%s",
                "=" * 60, request.method, request.url.path, traceback.format_exc(), "=" * 60,
            )
            return Response(content=f"Internal Server Error: {exc}", status_code=500)


def _error_response(status_code: int, exc: Exception, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map ledger errors to HTTP statuses

    Handlers are looked up along the exception MRO, so OverpaymentError gets
    its own 409 even though it is a ValidationError.
    """

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return _error_response(422, exc, "validation_error")

    @app.exception_handler(OverpaymentError)
    async def overpayment_error(request: Request, exc: OverpaymentError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return _error_response(409, exc, "overpayment")

    @app.exception_handler(NotFoundError)
    async def not_found_error(request: Request, exc: NotFoundError):
        return _error_response(404, exc, "not_found")

    @app.exception_handler(ConflictError)
    async def conflict_error(request: Request, exc: ConflictError):
        logger.warning("Conflict on %s %s after retries: %s", request.method, request.url.path, exc)
        return _error_response(409, exc, "conflict")


def create_app() -> FastAPI:
    """
    Application factory - builds and configures the FastAPI app

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    app = FastAPI(
        title="FinLedger",
        debug=settings.DEBUG,
    )

    app.add_middleware(ErrorLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(debts.router)
    app.include_router(budgets.router)
    app.include_router(goals.router)
    app.include_router(transactions.router)
    app.include_router(analytics.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (checks the database is reachable)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "finledger.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
