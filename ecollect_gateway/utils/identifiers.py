"""Identifier hygiene for upstream customer and account numbers"""

from typing import Any

# Placeholder strings the upstream tables use in place of a real identifier
PLACEHOLDER_VALUES = frozenset({"", "NULL", "N/A", "NONE", "UNDEFINED"})

SMS_ACCOUNT_PREFIX = "SMS-"


def is_valid_value(value: Any) -> bool:
    """Return True when value is a usable identifier (not empty or a placeholder)"""
    if not value:
        return False
    return str(value).strip().upper() not in PLACEHOLDER_VALUES


def synthesize_account_key(customer_key: str) -> str:
    """Account key for a customer known only from SMS logs"""
    return f"{SMS_ACCOUNT_PREFIX}{customer_key}"
