"""Per-family key derivation for familyloc."""
import base64
import binascii
import logging
from typing import Dict

from argon2.low_level import Type, hash_secret_raw

from familyloc.core.exceptions import InvalidInputError, InvalidKeyError

logger = logging.getLogger(__name__)

KEY_LEN = 32

# Fixed application constants. Every family device must derive the same key
# from the same family id, so none of these may vary per call or per install.
KEY_SALT = b"familyloc-location-key-v1"
TIME_COST = 3
MEMORY_COST = 65536
PARALLELISM = 1


def derive_family_key(family_id: str) -> str:
    """
    Derive the family's location key from its family id using Argon2id.

    Returns the 32 raw key bytes as base64 text. The result is a pure function
    of ``family_id``; the key is never stored and can be recomputed by any
    member who knows the id.
    """
    if not isinstance(family_id, str) or not family_id.strip():
        raise InvalidInputError("family id must be a non-empty string")

    raw = hash_secret_raw(
        secret=family_id.encode("utf-8"),
        salt=KEY_SALT,
        time_cost=TIME_COST,
        memory_cost=MEMORY_COST,
        parallelism=PARALLELISM,
        hash_len=KEY_LEN,
        type=Type.ID,
    )
    logger.debug("derived family key")
    return base64.b64encode(raw).decode("ascii")


def decode_family_key(key: str) -> bytes:
    """Return the raw bytes of a base64 family key or raise InvalidKeyError."""
    if not isinstance(key, str):
        raise InvalidKeyError("key must be base64 text")
    try:
        raw = base64.b64decode(key, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidKeyError("key is not valid base64") from e
    if len(raw) != KEY_LEN:
        raise InvalidKeyError(f"key must decode to {KEY_LEN} bytes, got {len(raw)}")
    return raw


def kdf_params_to_dict() -> Dict:
    return {
        "algo": "argon2id",
        "salt": KEY_SALT.hex(),
        "time": TIME_COST,
        "memory": MEMORY_COST,
        "parallelism": PARALLELISM,
        "key_len": KEY_LEN,
    }
