# backend/errors.py

"""
API ERROR NORMALIZATION

Every domain error raised by a service carries a stable `code`.
Views translate them into the canonical body:

    {"error": {"code": "<CODE>", "message": "<human readable>"}}

Unknown exceptions never reach this helper: views let them propagate so
Django logs them and returns a generic 500.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

# code -> HTTP status. Anything unlisted is a 400.
ERROR_STATUS = {
    "EMPTY_CART": status.HTTP_400_BAD_REQUEST,
    "INVALID_CART": status.HTTP_400_BAD_REQUEST,
    "PRODUCT_NOT_FOUND": status.HTTP_400_BAD_REQUEST,
    "CUSTOMER_NOT_FOUND": status.HTTP_400_BAD_REQUEST,
    "INVALID_PERIOD": status.HTTP_400_BAD_REQUEST,
    "SALE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "LEDGER_ENTRY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INSUFFICIENT_STOCK": status.HTTP_409_CONFLICT,
    "LEDGER_ENTRY_LINKED_TO_SALE": status.HTTP_409_CONFLICT,
    "CUSTOMER_HAS_SALES": status.HTTP_409_CONFLICT,
    "DUPLICATE_POSTING": status.HTTP_409_CONFLICT,
    "INVALID_SALE_TRANSITION": status.HTTP_409_CONFLICT,
    "STORE_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(*, code: str, message: str, http_status: int):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def domain_error_response(exc: Exception):
    code = getattr(exc, "code", "ERROR")
    message = getattr(exc, "message", None) or str(exc)
    return error_response(
        code=code,
        message=message,
        http_status=ERROR_STATUS.get(code, status.HTTP_400_BAD_REQUEST),
    )
