"""AES-256-GCM encryption of location readings.

Envelope layout (both fields standard base64):
- iv: 12-byte random nonce, fresh per call
- ciphertext: AES-GCM output of the UTF-8 JSON payload with the 16-byte tag appended

Payload: {"latitude": <float>, "longitude": <float>, "address": <str>}

Nothing here keeps state between calls; the only shared resource is the OS
random source behind os.urandom.
"""
import base64
import binascii
import json
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from familyloc.core.exceptions import (
    DecryptionFailedError,
    FamilyLocError,
    SerializationError,
)
from familyloc.core.models import (
    Decrypted,
    DecryptFailed,
    DecryptResult,
    EncryptedEnvelope,
    LocationReading,
)
from .kdf import decode_family_key

logger = logging.getLogger(__name__)

NONCE_LEN = 12


def serialize_reading(reading: LocationReading) -> bytes:
    reading.validate()
    try:
        return json.dumps(reading.to_dict(), ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"cannot serialize location: {e}") from e


def deserialize_reading(raw: bytes) -> LocationReading:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise SerializationError("decrypted payload is not valid JSON") from e
    if not isinstance(data, dict):
        raise SerializationError("decrypted payload is not a JSON object")
    return LocationReading.from_dict(data)


def _b64decode_field(value: str, name: str) -> bytes:
    if not isinstance(value, str):
        logger.warning("location decryption failed: envelope %s is not text", name)
        raise DecryptionFailedError(f"envelope {name} must be base64 text")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.warning("location decryption failed: envelope %s is not valid base64", name)
        raise DecryptionFailedError(f"envelope {name} is not valid base64") from e


def encrypt_location(reading: LocationReading, key: str) -> EncryptedEnvelope:
    """
    Encrypt a reading under a family key.

    Each call draws a new random nonce, so encrypting the same reading twice
    yields different ``iv`` and ``ciphertext`` values.
    """
    raw_key = decode_family_key(key)
    plaintext = serialize_reading(reading)

    nonce = os.urandom(NONCE_LEN)
    ct = AESGCM(raw_key).encrypt(nonce, plaintext, None)
    logger.debug("encrypted location payload (%d bytes)", len(ct))

    return EncryptedEnvelope(
        ciphertext=base64.b64encode(ct).decode("ascii"),
        iv=base64.b64encode(nonce).decode("ascii"),
    )


def decrypt_location(envelope: EncryptedEnvelope, key: str) -> LocationReading:
    """
    Decrypt an envelope produced by :func:`encrypt_location`.

    A wrong key or any change to ciphertext or iv fails the GCM tag check and
    raises DecryptionFailedError; a partial or garbled reading is never returned.
    """
    raw_key = decode_family_key(key)
    ct = _b64decode_field(envelope.ciphertext, "ciphertext")
    nonce = _b64decode_field(envelope.iv, "iv")
    if len(nonce) != NONCE_LEN:
        logger.warning("location decryption failed: iv is %d bytes", len(nonce))
        raise DecryptionFailedError(f"envelope iv must be {NONCE_LEN} bytes, got {len(nonce)}")

    try:
        plaintext = AESGCM(raw_key).decrypt(nonce, ct, None)
    except InvalidTag as e:
        logger.warning("location decryption failed: authentication tag mismatch")
        raise DecryptionFailedError("authentication failed (wrong key or tampered envelope)") from e

    return deserialize_reading(plaintext)


def try_decrypt_location(envelope: EncryptedEnvelope, key: str) -> DecryptResult:
    """Like :func:`decrypt_location` but returns Decrypted or DecryptFailed instead of raising."""
    try:
        return Decrypted(decrypt_location(envelope, key))
    except FamilyLocError as e:
        return DecryptFailed(e)
