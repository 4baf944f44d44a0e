"""Role requirements per operation and the guard that enforces them."""

import logging

from fastapi import Depends

from order_api.auth.dependencies import Principal, get_current_principal
from order_api.core.errors import ForbiddenError

logger = logging.getLogger(__name__)

ADMIN = 'admin'
CUSTOMER = 'customer'

# Operations missing from this table only need an authenticated principal.
ROUTE_ROLES: dict[str, str] = {
    'create_order': CUSTOMER,
    'list_all_orders': ADMIN,
    'list_own_orders': CUSTOMER,
    'delete_order': ADMIN,
    'total_revenue': ADMIN,
    'order_count': ADMIN,
    'unique_customers': ADMIN,
    'orders_by_category': ADMIN,
    'revenue_trend': ADMIN,
}


def authorize(principal: Principal | None, required_role: str | None) -> Principal:
    if principal is None:
        raise ForbiddenError('User not found in request. Ensure JWT is valid.')

    if required_role is None:
        return principal

    if principal.role != required_role:
        logger.info('Denied %s (role %s), %s required', principal.email, principal.role, required_role)
        raise ForbiddenError('Access Denied')

    return principal


def require_role(operation: str):
    required_role = ROUTE_ROLES.get(operation)

    def guard(principal: Principal = Depends(get_current_principal)) -> Principal:
        return authorize(principal, required_role)

    guard.__name__ = f'require_role_{operation}'
    return guard
