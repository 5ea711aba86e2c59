"""
SALE LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Sale entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth

States:
- Draft / Validating live only in the POS client and inside create_sale();
  they are never persisted.
- completed -> cancelled is the only persisted transition; cancelled is terminal
  and the cancel workflow purges the aggregate after validating it.
- pending is a stored status value only (rows loaded from outside the POS).
  No transition leaves it, so such sales are never reversed against stock.
"""

from sales.models import Sale

# ============================================================
# DOMAIN ERRORS
# ============================================================


class SaleLifecycleError(Exception):
    code = "SALE_LIFECYCLE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidSaleTransitionError(SaleLifecycleError):
    code = "INVALID_SALE_TRANSITION"


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Sale.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Sale.STATUS_COMPLETED: {
        Sale.STATUS_CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, sale: Sale, target_status: str):
    if not can_transition(
        from_status=sale.status,
        to_status=target_status,
    ):
        raise InvalidSaleTransitionError(
            f"Sale {sale.id} cannot transition from "
            f"'{sale.status}' to '{target_status}'"
        )
