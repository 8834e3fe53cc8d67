"""Salted SHA-256 credential hashing."""

from __future__ import annotations

import hashlib
import hmac
import secrets

from books_api.config import get_settings


def generate_salt(length: int | None = None) -> str:
    """Random hex salt of ``length`` bytes (``salt_length`` setting by default)."""
    return secrets.token_hex(length or get_settings().salt_length)


def generate_hash(password: str, salt: str) -> str:
    return hashlib.sha256(f"{password}{salt}".encode("utf-8")).hexdigest()


def hash_password(password: str) -> tuple[str, str]:
    """Returns ``(salted_hash, salt)`` for storage."""
    salt = generate_salt()
    return generate_hash(password, salt), salt


def verify_password(password: str, salted_hash: str, salt: str) -> bool:
    return hmac.compare_digest(generate_hash(password, salt), salted_hash)
