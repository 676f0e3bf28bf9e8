"""Generators for codes and tokens.

All values come from the ``secrets`` CSPRNG. Uniqueness is enforced by the
unique constraints on the corresponding columns.
"""

import secrets

# Consonants and digits 2-9 only: users type these by hand
USER_CODE_ALPHABET = "BCDFGHJKLMNPQRSTVWXZ23456789"


def access_token() -> str:
    return secrets.token_hex(16)


def refresh_token() -> str:
    return secrets.token_hex(32)


def authorization_code() -> str:
    return secrets.token_urlsafe(24)


def device_code() -> str:
    return secrets.token_hex(20)


def user_code(length: int = 8) -> str:
    return "".join(secrets.choice(USER_CODE_ALPHABET) for _ in range(length))


def normalize_user_code(value: str) -> str:
    """Canonical form of a user code as typed: uppercase, no separators or spaces."""
    return "".join(ch for ch in value.upper() if ch.isalnum())
