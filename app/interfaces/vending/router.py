"""
FastAPI router for the vending bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas, role gating by the
identity dependencies. Error mapping is handled by centralized error
handlers.
"""

from fastapi import APIRouter, Depends, Request, status

from app.application.vending.buy_product import BuyProductUseCase
from app.application.vending.create_product import CreateProductUseCase
from app.application.vending.delete_account import DeleteAccountUseCase
from app.application.vending.delete_product import DeleteProductUseCase
from app.application.vending.deposit import DepositUseCase
from app.application.vending.dtos import (
    AccountQuery,
    AccountResult,
    BuyCommand,
    CreateProductCommand,
    DeleteProductCommand,
    DepositCommand,
    GetProductQuery,
    ProductResult,
    RegisterAccountCommand,
    RenameAccountCommand,
    ResetCommand,
    UpdateProductCommand,
)
from app.application.vending.get_account import GetAccountUseCase
from app.application.vending.get_product import GetProductUseCase
from app.application.vending.list_accounts import ListAccountsUseCase
from app.application.vending.list_products import ListProductsUseCase
from app.application.vending.register_account import RegisterAccountUseCase
from app.application.vending.rename_account import RenameAccountUseCase
from app.application.vending.reset_balance import ResetBalanceUseCase
from app.application.vending.update_product import UpdateProductUseCase
from app.core.config import settings
from app.interfaces.vending.dependencies import (
    get_buy_product_use_case,
    get_create_product_use_case,
    get_delete_account_use_case,
    get_delete_product_use_case,
    get_deposit_use_case,
    get_get_account_use_case,
    get_get_product_use_case,
    get_list_accounts_use_case,
    get_list_products_use_case,
    get_register_account_use_case,
    get_rename_account_use_case,
    get_reset_balance_use_case,
    get_update_product_use_case,
)
from app.interfaces.vending.identity import (
    get_caller_id,
    require_account,
    require_buyer,
    require_seller,
)
from app.interfaces.vending.schemas import (
    AccountResponse,
    BalanceResponse,
    BuyRequest,
    ChangeResponse,
    CreateProductRequest,
    ErrorResponse,
    ProductResponse,
    ReceiptResponse,
    RegisterAccountRequest,
    RenameAccountRequest,
    UpdateProductRequest,
)
from app.shared.security.rate_limiting import limiter

router = APIRouter()


def _product_response(result: ProductResult) -> ProductResponse:
    return ProductResponse(
        id=result.id,
        name=result.name,
        unit_cost=result.unit_cost,
        stock=result.stock,
        seller_id=result.seller_id,
    )


def _account_response(result: AccountResult) -> AccountResponse:
    return AccountResponse(
        id=result.id,
        username=result.username,
        role=result.role,
        balance=result.balance,
    )


# ------------------------------------------------------------------
# Accounts
# ------------------------------------------------------------------


@router.post(
    "/accounts",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["accounts"],
    summary="Register an account",
)
def register_account(
    request: RegisterAccountRequest,
    use_case: RegisterAccountUseCase = Depends(get_register_account_use_case),
) -> AccountResponse:
    """Open a buyer or seller account with a zero balance."""
    result = use_case.execute(
        RegisterAccountCommand(username=request.username, role=request.role)
    )
    return _account_response(result)


@router.get(
    "/accounts",
    response_model=list[AccountResponse],
    responses={401: {"model": ErrorResponse}},
    tags=["accounts"],
    summary="List accounts",
)
def list_accounts(
    _caller_id: int = Depends(require_account),
    use_case: ListAccountsUseCase = Depends(get_list_accounts_use_case),
) -> list[AccountResponse]:
    return [_account_response(r) for r in use_case.execute()]


@router.get(
    "/accounts/me",
    response_model=AccountResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["accounts"],
    summary="Get the caller's account",
)
def get_my_account(
    caller_id: int = Depends(get_caller_id),
    use_case: GetAccountUseCase = Depends(get_get_account_use_case),
) -> AccountResponse:
    return _account_response(use_case.execute(AccountQuery(account_id=caller_id)))


@router.put(
    "/accounts/me",
    response_model=AccountResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    tags=["accounts"],
    summary="Rename the caller's account",
)
def rename_my_account(
    request: RenameAccountRequest,
    caller_id: int = Depends(get_caller_id),
    use_case: RenameAccountUseCase = Depends(get_rename_account_use_case),
) -> AccountResponse:
    """Change the caller's username; it is stored lower-cased."""
    result = use_case.execute(
        RenameAccountCommand(account_id=caller_id, username=request.username)
    )
    return _account_response(result)


@router.delete(
    "/accounts/me",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    tags=["accounts"],
    summary="Delete the caller's account",
    description="Deletes the account and every product it sells.",
)
def delete_my_account(
    caller_id: int = Depends(get_caller_id),
    use_case: DeleteAccountUseCase = Depends(get_delete_account_use_case),
) -> None:
    use_case.execute(AccountQuery(account_id=caller_id))


@router.get(
    "/accounts/{account_id}",
    response_model=AccountResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["accounts"],
    summary="Get an account",
)
def get_account(
    account_id: int,
    _caller_id: int = Depends(require_account),
    use_case: GetAccountUseCase = Depends(get_get_account_use_case),
) -> AccountResponse:
    return _account_response(use_case.execute(AccountQuery(account_id=account_id)))


# ------------------------------------------------------------------
# Products
# ------------------------------------------------------------------


@router.get(
    "/products",
    response_model=list[ProductResponse],
    tags=["products"],
    summary="List products",
)
def list_products(
    use_case: ListProductsUseCase = Depends(get_list_products_use_case),
) -> list[ProductResponse]:
    return [_product_response(r) for r in use_case.execute()]


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["products"],
    summary="Get a product",
)
def get_product(
    product_id: int,
    use_case: GetProductUseCase = Depends(get_get_product_use_case),
) -> ProductResponse:
    return _product_response(use_case.execute(GetProductQuery(product_id=product_id)))


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    tags=["products"],
    summary="List a new product",
)
def create_product(
    request: CreateProductRequest,
    caller_id: int = Depends(require_seller),
    use_case: CreateProductUseCase = Depends(get_create_product_use_case),
) -> ProductResponse:
    """Create a product owned by the calling seller."""
    result = use_case.execute(
        CreateProductCommand(
            caller_id=caller_id,
            name=request.name,
            unit_cost=request.unit_cost,
            quantity=request.quantity,
        )
    )
    return _product_response(result)


@router.put(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["products"],
    summary="Update a product",
)
def update_product(
    product_id: int,
    request: UpdateProductRequest,
    caller_id: int = Depends(require_seller),
    use_case: UpdateProductUseCase = Depends(get_update_product_use_case),
) -> ProductResponse:
    """Replace a product's fields. Only its seller may do this."""
    result = use_case.execute(
        UpdateProductCommand(
            product_id=product_id,
            caller_id=caller_id,
            name=request.name,
            unit_cost=request.unit_cost,
            stock=request.stock,
        )
    )
    return _product_response(result)


@router.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["products"],
    summary="Delete a product",
)
def delete_product(
    product_id: int,
    caller_id: int = Depends(require_seller),
    use_case: DeleteProductUseCase = Depends(get_delete_product_use_case),
) -> None:
    use_case.execute(DeleteProductCommand(product_id=product_id, caller_id=caller_id))


# ------------------------------------------------------------------
# Vending
# ------------------------------------------------------------------


@router.post(
    "/deposit/{amount}",
    response_model=BalanceResponse,
    responses={400: {"model": ErrorResponse}},
    tags=["vending"],
    summary="Deposit a coin",
    description="Accepts one coin of 5, 10, 20, 50 or 100.",
)
def deposit(
    amount: int,
    caller_id: int = Depends(require_buyer),
    use_case: DepositUseCase = Depends(get_deposit_use_case),
) -> BalanceResponse:
    result = use_case.execute(DepositCommand(account_id=caller_id, amount=amount))
    return BalanceResponse(account_id=result.account_id, balance=result.balance)


@router.post(
    "/buy",
    response_model=ReceiptResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    tags=["vending"],
    summary="Buy a product",
)
@limiter.limit(settings.rate_limit_heavy)
def buy(
    request: Request,
    body: BuyRequest,
    caller_id: int = Depends(require_buyer),
    use_case: BuyProductUseCase = Depends(get_buy_product_use_case),
) -> ReceiptResponse:
    """Buy a quantity of a product with the caller's balance."""
    result = use_case.execute(
        BuyCommand(
            account_id=caller_id,
            product_id=body.product_id,
            quantity=body.quantity,
        )
    )
    return ReceiptResponse(
        product_name=result.product_name,
        amount=result.quantity,
        total_price=result.total_price,
        change=result.change_amount,
    )


@router.post(
    "/reset",
    response_model=ChangeResponse,
    responses={409: {"model": ErrorResponse}},
    tags=["vending"],
    summary="Pay out the balance",
    description="Returns the whole balance as coins and sets it to zero.",
)
def reset(
    caller_id: int = Depends(require_buyer),
    use_case: ResetBalanceUseCase = Depends(get_reset_balance_use_case),
) -> ChangeResponse:
    result = use_case.execute(ResetCommand(account_id=caller_id))
    return ChangeResponse(new_balance=result.new_balance, change=result.coins)
