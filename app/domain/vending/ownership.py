"""
Ownership guard for seller-owned resources.

The core only checks ownership. Role gating (buyer vs seller) happens
in the request layer before the core is invoked.
"""

from app.domain.vending.errors import UnauthorizedError


def authorize(resource_owner_id: int, caller_id: int) -> None:
    """Succeed iff the caller owns the resource.

    Raises:
        UnauthorizedError: If the identities differ.
    """
    if resource_owner_id != caller_id:
        raise UnauthorizedError(caller_id)
