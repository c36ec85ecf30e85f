"""
Pydantic schemas for vending API request/response validation.

These schemas enforce input validation and define the API contract.
All fields use strict typing with constraints.
No business logic belongs here.
"""

from typing import Literal

from pydantic import BaseModel, Field

NAME_MAX_LEN = 255
USERNAME_MAX_LEN = 150


class RegisterAccountRequest(BaseModel):
    """Request schema for account registration.

    Attributes:
        username: Login name (stored lower-cased).
        role: Capability of the account holder.
    """

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)
    role: Literal["buyer", "seller"]


class RenameAccountRequest(BaseModel):
    """Request schema for renaming the caller's account."""

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)


class AccountResponse(BaseModel):
    """Response schema for an account."""

    id: int
    username: str
    role: str
    balance: int


class CreateProductRequest(BaseModel):
    """Request schema for listing a product.

    Attributes:
        name: Product name.
        unit_cost: Price of one unit in the smallest currency unit (>= 1).
        quantity: Initial stock (>= 1).
    """

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    unit_cost: int = Field(..., ge=1, description="Price of one unit")
    quantity: int = Field(..., ge=1, description="Initial stock")


class UpdateProductRequest(BaseModel):
    """Request schema for replacing a product's fields."""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    unit_cost: int = Field(..., ge=1, description="Price of one unit")
    stock: int = Field(..., ge=0, description="Units available")


class ProductResponse(BaseModel):
    """Response schema for a product."""

    id: int
    name: str
    unit_cost: int
    stock: int
    seller_id: int


class BalanceResponse(BaseModel):
    """Response schema for the balance after a deposit."""

    account_id: int
    balance: int


class BuyRequest(BaseModel):
    """Request schema for a purchase.

    Attributes:
        product_id: Product to buy.
        quantity: Units to buy (>= 1).
    """

    product_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1)


class ReceiptResponse(BaseModel):
    """Response schema for a completed purchase.

    ``amount`` is the number of units bought.

    ``change`` is the part of the remaining balance payable in coins.
    It is informational and has not been deducted.
    """

    product_name: str
    amount: int
    total_price: int
    change: int


class ChangeResponse(BaseModel):
    """Response schema for a reset: coin counts keyed by denomination."""

    new_balance: int
    change: dict[int, int]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    storage: str


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    detail: str | None = None
