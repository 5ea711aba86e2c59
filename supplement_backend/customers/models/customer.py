# customers/models/customer.py

import re
import uuid

from django.core.validators import RegexValidator
from django.db import models

PHONE_PATTERN = r"^\+55\d{11}$"

phone_validator = RegexValidator(
    regex=PHONE_PATTERN,
    message="Phone must be +55 followed by 11 digits (area code + number).",
)


def normalize_phone(raw: str) -> str:
    """
    Accepts common WhatsApp input shapes and returns +55XXXXXXXXXXX.

    "(11) 98765-4321"   -> "+5511987654321"
    "5511987654321"     -> "+5511987654321"
    "+55 11 98765 4321" -> "+5511987654321"

    Anything that does not reduce to 11 national digits is returned digits-only
    with a leading "+" so the validator rejects it with a clear message.
    """
    digits = re.sub(r"\D", "", raw or "")
    if len(digits) == 11:
        digits = f"55{digits}"
    return f"+{digits}"


class Customer(models.Model):
    """
    Store customer.

    Rules:
    - phone (WhatsApp) is required: +55 + 11 digits
    - a customer referenced by any sale cannot be deleted
      (Sale.customer uses on_delete=PROTECT; see customers.services)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    phone = models.CharField(max_length=14, validators=[phone_validator])

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def save(self, *args, **kwargs):
        self.name = (self.name or "").strip()
        self.phone = normalize_phone(self.phone)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.phone})"
