# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS

- In-memory SQLite (fast, isolated)
- Fast password hashing
- Quiet logging (warnings and above)
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING

DEBUG = False

SECRET_KEY = "test-only-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

SALES_LEDGER_CATEGORY = "Vendas"
LOW_STOCK_DASHBOARD_LIMIT = 10
RECENT_SALES_LIMIT = 5

for _logger in LOGGING["loggers"].values():
    _logger["level"] = "WARNING"
