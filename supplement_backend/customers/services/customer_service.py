# customers/services/customer_service.py

"""
CUSTOMER SERVICE

Responsibilities:
- Guarded deletion: customers with sales history are kept
  (their name is also snapshotted on each sale, but the FK must stay valid).
"""

from __future__ import annotations

import logging

from django.db import transaction

from customers.models import Customer

logger = logging.getLogger(__name__)


class CustomerServiceError(Exception):
    code = "CUSTOMER_ERROR"
    default_message = "Customer operation failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class CustomerNotFoundError(CustomerServiceError):
    code = "CUSTOMER_NOT_FOUND"
    default_message = "Customer not found."


class CustomerHasSalesError(CustomerServiceError):
    code = "CUSTOMER_HAS_SALES"
    default_message = "Customer has sales and cannot be deleted."


@transaction.atomic
def delete_customer(*, customer_id) -> None:
    customer = Customer.objects.select_for_update().filter(pk=customer_id).first()
    if customer is None:
        raise CustomerNotFoundError()

    if customer.sales.exists():
        logger.warning("Refused to delete customer %s: has sales", customer_id)
        raise CustomerHasSalesError()

    customer.delete()
    logger.info("Customer %s deleted", customer_id)
