"""
Caller identity and role gate for the vending API.

Identity is asserted by the upstream gateway through the X-Account-Id
header; this service never authenticates. The role gate is a capability
check done here, before any use case runs. The core only checks ownership.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException

from app.application.vending.dtos import AccountQuery
from app.application.vending.get_account import GetAccountUseCase
from app.domain.vending.entities import Role
from app.domain.vending.errors import AccountNotFoundError
from app.interfaces.vending.dependencies import get_get_account_use_case

logger = logging.getLogger(__name__)

IDENTITY_HEADER = "X-Account-Id"

HTTP_401 = 401
HTTP_403 = 403


def get_caller_id(
    x_account_id: Optional[str] = Header(default=None, alias=IDENTITY_HEADER),
) -> int:
    """Return the caller identity asserted by the gateway."""
    if x_account_id is None or not x_account_id.isdigit():
        raise HTTPException(status_code=HTTP_401, detail="Missing caller identity")
    return int(x_account_id)


def require_role(role: Optional[Role] = None) -> Callable[..., int]:
    """Build a dependency that admits only callers holding ``role``.

    With no role, any registered caller is admitted.

    Returns:
        A FastAPI dependency resolving to the caller's account ID.
    """

    def dependency(
        caller_id: int = Depends(get_caller_id),
        use_case: GetAccountUseCase = Depends(get_get_account_use_case),
    ) -> int:
        try:
            account = use_case.execute(AccountQuery(account_id=caller_id))
        except AccountNotFoundError:
            raise HTTPException(status_code=HTTP_401, detail="Unknown caller") from None
        if role is not None and account.role != role.value:
            logger.warning("Caller=%d lacks role=%s", caller_id, role.value)
            raise HTTPException(status_code=HTTP_403, detail=f"Requires role {role.value}")
        return caller_id

    return dependency


require_buyer = require_role(Role.BUYER)
require_seller = require_role(Role.SELLER)
require_account = require_role()
