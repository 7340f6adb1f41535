"""Security helpers: per-family key derivation and location encryption for familyloc.

This package provides:
- Argon2id derivation of a family key from the family id
- AES-256-GCM encryption/decryption of a location reading into a base64 envelope

Every function is stateless and safe to call from multiple threads.
"""

from .kdf import derive_family_key, decode_family_key
from .crypto import (
    encrypt_location,
    decrypt_location,
    try_decrypt_location,
)

__all__ = [
    "derive_family_key",
    "decode_family_key",
    "encrypt_location",
    "decrypt_location",
    "try_decrypt_location",
]
