"""
Data models shared by the location crypto core and its callers
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Union

from .exceptions import FamilyLocError, InvalidInputError, SerializationError


# field names of the encrypted location map inside a family document
DOC_CIPHERTEXT_FIELD = "encrypted"
DOC_IV_FIELD = "iv"


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a coordinate
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class LocationReading:
    """A plaintext position: latitude, longitude and a free-form address."""

    latitude: float
    longitude: float
    address: str = ""

    def validate(self) -> None:
        """
        Check the reading can be encrypted.

        Raises SerializationError for values JSON cannot carry losslessly
        (non-numbers, NaN, infinities, non-str address) and InvalidInputError
        for coordinates outside [-90, 90] / [-180, 180].
        """
        for name in ("latitude", "longitude"):
            value = getattr(self, name)
            if not _is_number(value):
                raise SerializationError(f"{name} must be a number, got {type(value).__name__}")
            try:
                finite = math.isfinite(value)
            except OverflowError as e:
                # ints beyond float range
                raise SerializationError(f"{name} is too large to encode as a float") from e
            if not finite:
                raise SerializationError(f"{name} must be finite")
        if not isinstance(self.address, str):
            raise SerializationError(f"address must be a str, got {type(self.address).__name__}")
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidInputError("latitude out of range [-90, 90]")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidInputError("longitude out of range [-180, 180]")

    def to_dict(self) -> dict:
        return {
            "latitude": float(self.latitude),
            "longitude": float(self.longitude),
            "address": self.address,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LocationReading":
        """Rebuild a reading from its decoded JSON form; ints are widened to float."""
        try:
            lat = data["latitude"]
            lon = data["longitude"]
            address = data["address"]
        except (KeyError, TypeError) as e:
            raise SerializationError(f"location payload missing field: {e}") from e
        if not _is_number(lat) or not _is_number(lon):
            raise SerializationError("location payload coordinates must be numbers")
        try:
            reading = cls(latitude=float(lat), longitude=float(lon), address=address)
        except OverflowError as e:
            raise SerializationError("location payload coordinate is too large") from e
        try:
            reading.validate()
        except InvalidInputError as e:
            raise SerializationError(f"location payload invalid: {e}") from e
        return reading


@dataclass(frozen=True)
class EncryptedEnvelope:
    """
    Ciphertext and IV of one encrypted reading, both base64 text.

    Opaque to callers and meaningful only with the family key that produced it.
    """

    ciphertext: str
    iv: str

    def to_document(self) -> dict:
        return {DOC_CIPHERTEXT_FIELD: self.ciphertext, DOC_IV_FIELD: self.iv}

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "EncryptedEnvelope":
        """
        Read the envelope back out of a family document's location map.

        A location that was never published has null fields; that is reported
        as InvalidInputError rather than an envelope nobody can decrypt.
        """
        ciphertext = doc.get(DOC_CIPHERTEXT_FIELD)
        iv = doc.get(DOC_IV_FIELD)
        if not isinstance(ciphertext, str) or not ciphertext:
            raise InvalidInputError(f"document has no '{DOC_CIPHERTEXT_FIELD}' field")
        if not isinstance(iv, str) or not iv:
            raise InvalidInputError(f"document has no '{DOC_IV_FIELD}' field")
        return cls(ciphertext=ciphertext, iv=iv)


@dataclass(frozen=True)
class Decrypted:
    reading: LocationReading
    ok = True


@dataclass(frozen=True)
class DecryptFailed:
    error: FamilyLocError
    ok = False


DecryptResult = Union[Decrypted, DecryptFailed]
