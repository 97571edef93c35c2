"""Error handling middleware and exception handlers."""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from src.domain.exceptions import (
    NOT_FOUND_EXCEPTIONS,
    DomainException,
    InvalidPaymentAmountException,
    MissingUserIdentityException,
    PaymentConflictException,
    PaymentGatewayException,
    PaymentGatewayTimeoutException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    content = {
        "error": code,
        "message": message,
        "request_id": get_request_id(),
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses. Handlers are
    resolved by the exception's MRO, so the most specific one wins.
    """

    async def not_found_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle missing plan, course, user and payment errors."""
        return _error_response(404, exc.code, exc.message)

    for exc_class in NOT_FOUND_EXCEPTIONS:
        app.add_exception_handler(exc_class, not_found_handler)

    @app.exception_handler(InvalidPaymentAmountException)
    async def invalid_amount_handler(
        request: Request,
        exc: InvalidPaymentAmountException,
    ) -> JSONResponse:
        """Handle amounts that match no prefix of the payment queue."""
        logger.info(
            "emi_payment_amount_rejected",
            request_id=get_request_id(),
            **exc.details,
        )
        return _error_response(400, exc.code, exc.message, details=exc.details)

    @app.exception_handler(MissingUserIdentityException)
    async def missing_identity_handler(
        request: Request,
        exc: MissingUserIdentityException,
    ) -> JSONResponse:
        """Handle requests without a caller identity."""
        return _error_response(401, exc.code, exc.message)

    @app.exception_handler(PaymentConflictException)
    async def payment_conflict_handler(
        request: Request,
        exc: PaymentConflictException,
    ) -> JSONResponse:
        """Handle payments that no longer match the plan."""
        logger.warning(
            "payment_conflict",
            request_id=get_request_id(),
            message=exc.message,
        )
        return _error_response(409, exc.code, exc.message)

    @app.exception_handler(PaymentGatewayTimeoutException)
    async def gateway_timeout_handler(
        request: Request,
        exc: PaymentGatewayTimeoutException,
    ) -> JSONResponse:
        """Handle payment gateway timeout errors."""
        logger.error(
            "payment_gateway_timeout",
            request_id=get_request_id(),
        )
        return _error_response(
            504,
            exc.code,
            "Payment gateway did not respond in time. Please try again.",
        )

    @app.exception_handler(PaymentGatewayException)
    async def gateway_error_handler(
        request: Request,
        exc: PaymentGatewayException,
    ) -> JSONResponse:
        """Handle payment gateway errors."""
        logger.error(
            "payment_gateway_error",
            request_id=get_request_id(),
            message=exc.message,
            status_code=exc.status_code,
        )
        return _error_response(
            502,
            exc.code,
            "Unable to reach the payment gateway. Please try again later.",
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle generic domain exceptions."""
        logger.warning(
            "domain_exception",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            request_id=get_request_id(),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error_response(
            500,
            "INTERNAL_ERROR",
            "An unexpected error occurred.",
        )
