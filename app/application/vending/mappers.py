"""
Entity-to-DTO mapping shared by the vending use cases.
"""

from app.application.vending.dtos import AccountResult, ProductResult
from app.domain.vending.entities import Account, Product


def to_product_result(product: Product) -> ProductResult:
    return ProductResult(
        id=product.id,
        name=product.name,
        unit_cost=product.unit_cost,
        stock=product.stock,
        seller_id=product.seller_id,
    )


def to_account_result(account: Account) -> AccountResult:
    return AccountResult(
        id=account.id,
        username=account.username,
        role=account.role.value,
        balance=account.balance,
    )
