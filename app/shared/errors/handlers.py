"""
Centralized error handlers for FastAPI.

Maps domain-specific errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.vending.errors import (
    ConflictError,
    InsufficientFundsError,
    InsufficientStockError,
    InvalidAmountError,
    InvalidDenominationError,
    InvalidProductError,
    InvalidQuantityError,
    InvalidUsernameError,
    LedgerInvariantError,
    NotFoundError,
    UnauthorizedError,
    UsernameTakenError,
    VendingDomainError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_403 = 403
HTTP_404 = 404
HTTP_409 = 409
HTTP_500 = 500


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        """Handle missing account or product errors."""
        logger.warning("Not found: %s", exc.message)
        return _error_response(HTTP_404, "Not found", exc.message)

    @app.exception_handler(InsufficientStockError)
    async def handle_insufficient_stock(
        _request: Request, exc: InsufficientStockError
    ) -> JSONResponse:
        """Handle purchases larger than the available stock."""
        logger.warning(
            "Insufficient stock: product=%d requested=%d", exc.product_id, exc.requested
        )
        return _error_response(
            HTTP_400, "Insufficient stock", "Requested quantity is greater than stock"
        )

    @app.exception_handler(InsufficientFundsError)
    async def handle_insufficient_funds(
        _request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        """Handle insufficient funds errors."""
        logger.warning("Insufficient funds")
        return _error_response(
            HTTP_400, "Insufficient funds", "Not enough funds to complete the order"
        )

    @app.exception_handler(InvalidDenominationError)
    async def handle_invalid_denomination(
        _request: Request, exc: InvalidDenominationError
    ) -> JSONResponse:
        """Handle deposits of unaccepted coins."""
        logger.warning("Invalid denomination: %s", exc.amount)
        return _error_response(
            HTTP_400, "Invalid denomination", "Accepted coins: 5, 10, 20, 50, 100"
        )

    @app.exception_handler(InvalidQuantityError)
    async def handle_invalid_quantity(
        _request: Request, exc: InvalidQuantityError
    ) -> JSONResponse:
        """Handle non-positive purchase quantities."""
        logger.warning("Invalid quantity: %s", exc.quantity)
        return _error_response(HTTP_400, "Invalid quantity", exc.message)

    @app.exception_handler(InvalidAmountError)
    async def handle_invalid_amount(
        _request: Request, exc: InvalidAmountError
    ) -> JSONResponse:
        """Handle amounts the ledger or coin system cannot represent."""
        logger.warning("Invalid amount: %s", exc.reason)
        return _error_response(HTTP_400, "Invalid amount", exc.message)

    @app.exception_handler(InvalidProductError)
    async def handle_invalid_product(
        _request: Request, exc: InvalidProductError
    ) -> JSONResponse:
        """Handle product fields that break a listing invariant."""
        logger.warning("Invalid product: %s", exc.reason)
        return _error_response(HTTP_400, "Invalid product", exc.reason)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(
        _request: Request, exc: UnauthorizedError
    ) -> JSONResponse:
        """Handle mutations of resources the caller does not own."""
        logger.warning("Ownership check failed for caller=%d", exc.caller_id)
        return _error_response(HTTP_403, "Not the owner of this resource")

    @app.exception_handler(ConflictError)
    async def handle_conflict(_request: Request, exc: ConflictError) -> JSONResponse:
        """Handle lock contention that outlasted the retry budget."""
        logger.warning("Conflict on %s", exc.resource)
        return _error_response(HTTP_409, "Concurrent modification, retry later")

    @app.exception_handler(InvalidUsernameError)
    async def handle_invalid_username(
        _request: Request, exc: InvalidUsernameError
    ) -> JSONResponse:
        """Handle usernames that are blank once trimmed."""
        logger.warning("Invalid username")
        return _error_response(HTTP_400, "Invalid username", "Username must not be blank")

    @app.exception_handler(UsernameTakenError)
    async def handle_username_taken(
        _request: Request, exc: UsernameTakenError
    ) -> JSONResponse:
        """Handle duplicate registrations."""
        logger.warning("Username already exists")
        return _error_response(HTTP_409, "Username already exists")

    @app.exception_handler(LedgerInvariantError)
    async def handle_ledger_invariant(
        _request: Request, exc: LedgerInvariantError
    ) -> JSONResponse:
        """Handle stored balances that cannot be paid out in coins."""
        logger.error(
            "Ledger invariant violated: account=%d residue=%d",
            exc.account_id,
            exc.residue,
        )
        return _error_response(
            HTTP_409,
            "Unpayable balance residue",
            f"A residue of {exc.residue} is below the smallest coin (5); "
            "the balance was left unchanged",
        )

    @app.exception_handler(VendingDomainError)
    async def handle_vending_domain(
        _request: Request, exc: VendingDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled vending domain errors."""
        logger.error("Unhandled vending domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
