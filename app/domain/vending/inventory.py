"""
Domain service: product listings and stock.

Inventory enforces the listing invariants (positive cost, non-negative
stock, non-empty name) and ownership on mutation. Existence is always
checked before ownership, so a non-owner touching a missing product sees
ProductNotFoundError rather than UnauthorizedError.
"""

import logging

from app.domain.vending.entities import Product, ProductFields, StockReservation
from app.domain.vending.errors import (
    InsufficientStockError,
    InvalidProductError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from app.domain.vending.ownership import authorize
from app.domain.vending.ports import ProductRepository

logger = logging.getLogger(__name__)


def _validate_fields(name: str, unit_cost: int, stock: int, min_stock: int) -> None:
    if not name or not name.strip():
        raise InvalidProductError("name must not be empty")
    if unit_cost < 1:
        raise InvalidProductError(f"unit cost must be at least 1, got {unit_cost}")
    if stock < min_stock:
        raise InvalidProductError(
            f"stock must be at least {min_stock}, got {stock}"
        )


class Inventory:
    """Owns product stock, cost and listing lifecycle.

    Bound to the ProductRepository of the current unit of work.
    """

    def __init__(self, products: ProductRepository) -> None:
        self._products = products

    def get(self, product_id: int) -> Product:
        """Return a product or raise ProductNotFoundError."""
        product = self._products.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def list_all(self) -> list[Product]:
        """Return every listed product."""
        return self._products.list_all()

    def reserve(self, product_id: int, quantity: int) -> StockReservation:
        """Decrement stock by ``quantity`` in a single atomic step.

        Returns:
            Cost and name as they were at the moment of the decrement.

        Raises:
            InvalidQuantityError: If quantity is below 1.
            ProductNotFoundError: If the product does not exist.
            InsufficientStockError: If quantity exceeds the stock.
        """
        if quantity < 1:
            raise InvalidQuantityError(quantity)

        reservation = self._products.reserve_if_available(product_id, quantity)
        if reservation is not None:
            logger.debug(
                "Reserved product=%d qty=%d remaining=%d",
                product_id,
                quantity,
                reservation.remaining_stock,
            )
            return reservation

        product = self.get(product_id)
        raise InsufficientStockError(product_id, quantity, product.stock)

    def create(self, seller_id: int, name: str, unit_cost: int, quantity: int) -> Product:
        """List a new product owned by ``seller_id``.

        Raises:
            InvalidProductError: If cost or quantity is below 1 or name is empty.
        """
        _validate_fields(name, unit_cost, quantity, min_stock=1)
        product = self._products.add(
            Product(name=name, unit_cost=unit_cost, stock=quantity, seller_id=seller_id)
        )
        logger.info("Created product=%d seller=%d", product.id, seller_id)
        return product

    def update(self, product_id: int, caller_id: int, fields: ProductFields) -> Product:
        """Replace name, cost and stock of a product owned by the caller.

        The seller is re-asserted to the caller; ownership cannot be
        handed over through an update.

        Raises:
            ProductNotFoundError: If the product does not exist.
            UnauthorizedError: If the caller does not own the product.
            InvalidProductError: If the new fields break an invariant.
        """
        current = self.get(product_id)
        authorize(current.seller_id, caller_id)
        _validate_fields(fields.name, fields.unit_cost, fields.stock, min_stock=0)

        updated = self._products.replace(
            Product(
                id=product_id,
                name=fields.name,
                unit_cost=fields.unit_cost,
                stock=fields.stock,
                seller_id=caller_id,
            )
        )
        if updated is None:
            raise ProductNotFoundError(product_id)

        logger.info("Updated product=%d seller=%d", product_id, caller_id)
        return updated

    def remove(self, product_id: int, caller_id: int) -> None:
        """Delete a product owned by the caller.

        Raises:
            ProductNotFoundError: If the product does not exist.
            UnauthorizedError: If the caller does not own the product.
        """
        current = self.get(product_id)
        authorize(current.seller_id, caller_id)

        if not self._products.delete(product_id):
            raise ProductNotFoundError(product_id)
        logger.info("Removed product=%d seller=%d", product_id, caller_id)

    def remove_all_for_seller(self, seller_id: int) -> int:
        """Delete every product of a seller. Returns the count removed."""
        removed = self._products.delete_by_seller(seller_id)
        if removed:
            logger.info("Removed %d products of seller=%d", removed, seller_id)
        return removed
