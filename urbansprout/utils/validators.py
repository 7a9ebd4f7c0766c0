"""Custom validators and input sanitizers"""

import re
from typing import List

from bson import ObjectId
from bson.errors import InvalidId

REQUIRED_ADDRESS_FIELDS = ["full_name", "address", "city", "state", "pincode", "country", "phone"]

_PHONE_DISALLOWED = re.compile(r"[^0-9\s\-+]")
_PINCODE_DISALLOWED = re.compile(r"[^0-9]")
_ALPHA_DISALLOWED = re.compile(r"[^a-zA-Z\s]")
_ADDRESS_DISALLOWED = re.compile(r"[^a-zA-Z0-9\s.,\-#/]")


def validate_object_id(id_str: str) -> bool:
    """
    Validate if a string is a valid MongoDB ObjectId

    Args:
        id_str: String to validate

    Returns:
        True if valid ObjectId, False otherwise
    """
    # ObjectId(None) would mint a fresh id
    if not id_str:
        return False

    try:
        ObjectId(id_str)
        return True
    except (InvalidId, TypeError):
        return False


def sanitize_phone(value: str) -> str:
    """Keep digits, spaces, hyphens and plus signs"""
    return _PHONE_DISALLOWED.sub("", value or "")


def sanitize_pincode(value: str) -> str:
    return _PINCODE_DISALLOWED.sub("", value or "")


def sanitize_alpha(value: str) -> str:
    """Letters and spaces only (names, cities, states, countries)"""
    return _ALPHA_DISALLOWED.sub("", value or "")


def sanitize_address_text(value: str) -> str:
    """Letters, digits, spaces and . , - # / for street addresses"""
    return _ADDRESS_DISALLOWED.sub("", value or "")


ADDRESS_SANITIZERS = {
    "full_name": sanitize_alpha,
    "address": sanitize_address_text,
    "city": sanitize_alpha,
    "state": sanitize_alpha,
    "pincode": sanitize_pincode,
    "country": sanitize_alpha,
    "phone": sanitize_phone,
}


def missing_address_fields(address: dict) -> List[str]:
    """Return the required shipping fields that are absent or blank"""
    return [
        field for field in REQUIRED_ADDRESS_FIELDS
        if not str(address.get(field) or "").strip()
    ]
