"""Default contact details for staff members created without them.

``create_staff`` runs its arguments through a ``ContactDefaults`` callable
before validation. ``synthesize_contact`` fills a unique placeholder email and
a random phone number; ``no_contact_defaults`` leaves the arguments alone, in
which case an explicit email is required.
"""
import random
import string
import time
from typing import Callable

ContactDefaults = Callable[[dict], dict]

PLACEHOLDER_DOMAIN = "staff.example.com"


def placeholder_email() -> str:
    """Return ``staff_<epoch millis>_<5 base36 chars>@staff.example.com``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=5))
    return f"staff_{int(time.time() * 1000)}_{suffix}@{PLACEHOLDER_DOMAIN}"


def placeholder_phone() -> str:
    """Return a ``+1`` number with ten digits, the first non-zero."""
    return f"+1{random.randint(1_000_000_000, 9_999_999_999)}"


def synthesize_contact(arguments: dict) -> dict:
    """Fill in email and phone when absent."""
    filled = dict(arguments)
    if not filled.get("email"):
        filled["email"] = placeholder_email()
    if not filled.get("phone"):
        filled["phone"] = placeholder_phone()
    return filled


def no_contact_defaults(arguments: dict) -> dict:
    return arguments


def contact_defaults_for(enabled: bool) -> ContactDefaults:
    """Pick the contact default policy from configuration."""
    return synthesize_contact if enabled else no_contact_defaults
