"""
Command line front end for the familyloc location crypto core.

Commands:
    derive-key FAMILY_ID [--copy]
    -> prints the base64 family key (optionally copies it to the clipboard)

    kdf-params
    -> prints the fixed key derivation parameters as JSON

    encrypt --key KEY --lat LAT --lon LON [--address TEXT]
    -> prints {"encrypted": ..., "iv": ...} as JSON

    decrypt --key KEY --ciphertext C --iv IV
    -> prints {"latitude": ..., "longitude": ..., "address": ...} as JSON

    should-publish --lat LAT --lon LON [--last-lat LAT --last-lon LON --last-time ISO] [--now ISO]
    -> prints {"publish": ..., "distance_km": ...}; thresholds come from FAMILYLOC_THROTTLE_*

    selftest [FAMILY_ID]
    -> derive, encrypt, decrypt and wrong-key check; exit status 0 on success

    new-family
    -> prints a fresh family id and connection code

Usage:
    python -m familyloc.frontend.cli.app derive-key f_test123
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import Optional, Sequence

import pyperclip

from familyloc.core.config import load_settings
from familyloc.core.exceptions import DecryptionFailedError, FamilyLocError, InvalidInputError
from familyloc.core.family import generate_connection_code, generate_family_id
from familyloc.core.models import EncryptedEnvelope, LocationReading
from familyloc.core.throttle import LocationThrottler, haversine_km
from familyloc.frontend.cli.logging_config import configure_logging
from familyloc.security import (
    decrypt_location,
    derive_family_key,
    encrypt_location,
)
from familyloc.security.kdf import kdf_params_to_dict

logger = logging.getLogger(__name__)

SELFTEST_FAMILY_ID = "f_test123"
SELFTEST_READING = LocationReading(37.7749, -122.4194, "San Francisco, CA")


def _print_json(obj) -> None:
    print(json.dumps(obj, ensure_ascii=False))


def _parse_time(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise InvalidInputError(f"not an ISO 8601 timestamp: {value!r}") from e


def cmd_derive_key(args) -> int:
    key = derive_family_key(args.family_id)
    print(key)
    if args.copy:
        # pasted into the other device's setup screen instead of retyped
        try:
            pyperclip.copy(key)
        except pyperclip.PyperclipException as e:
            logger.warning("could not copy key to clipboard: %s", e)
            return 1
        logger.info("family key copied to clipboard")
    return 0


def cmd_kdf_params(args) -> int:
    _print_json(kdf_params_to_dict())
    return 0


def cmd_encrypt(args) -> int:
    reading = LocationReading(args.lat, args.lon, args.address)
    envelope = encrypt_location(reading, args.key)
    _print_json(envelope.to_document())
    return 0


def cmd_decrypt(args) -> int:
    envelope = EncryptedEnvelope(ciphertext=args.ciphertext, iv=args.iv)
    reading = decrypt_location(envelope, args.key)
    _print_json(reading.to_dict())
    return 0


def cmd_should_publish(args) -> int:
    last = (args.last_lat, args.last_lon, args.last_time)
    if any(v is not None for v in last) and not all(v is not None for v in last):
        raise InvalidInputError("--last-lat, --last-lon and --last-time must be given together")

    throttler = LocationThrottler.from_settings(args.settings)
    now = _parse_time(args.now) if args.now else datetime.now()
    distance = None
    if args.last_lat is not None:
        throttler.record_update(args.last_lat, args.last_lon, now=_parse_time(args.last_time))
        distance = haversine_km(args.last_lat, args.last_lon, args.lat, args.lon)

    publish = not throttler.should_throttle(args.lat, args.lon, now=now)
    _print_json({"publish": publish, "distance_km": distance})
    return 0


def cmd_selftest(args) -> int:
    family_id = args.family_id
    key = derive_family_key(family_id)
    if key != derive_family_key(family_id):
        print("FAIL: key derivation is not deterministic")
        return 1

    first = encrypt_location(SELFTEST_READING, key)
    second = encrypt_location(SELFTEST_READING, key)
    if first.iv == second.iv or first.ciphertext == second.ciphertext:
        print("FAIL: repeated encryption reused an iv or ciphertext")
        return 1

    if decrypt_location(first, key) != SELFTEST_READING:
        print("FAIL: round trip changed the reading")
        return 1

    other_key = derive_family_key(family_id + "_other")
    try:
        decrypt_location(first, other_key)
    except DecryptionFailedError:
        pass
    else:
        print("FAIL: wrong key was accepted")
        return 1

    print("OK")
    return 0


def cmd_new_family(args) -> int:
    _print_json({"family_id": generate_family_id(), "connection_code": generate_connection_code()})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="familyloc", description="Family location encryption tools")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("derive-key", help="derive the family key from a family id")
    p.add_argument("family_id")
    p.add_argument("--copy", action="store_true", help="also copy the key to the clipboard")
    p.set_defaults(func=cmd_derive_key)

    p = sub.add_parser("kdf-params", help="show the key derivation parameters")
    p.set_defaults(func=cmd_kdf_params)

    p = sub.add_parser("encrypt", help="encrypt a location reading")
    p.add_argument("--key", required=True)
    p.add_argument("--lat", type=float, required=True)
    p.add_argument("--lon", type=float, required=True)
    p.add_argument("--address", default="")
    p.set_defaults(func=cmd_encrypt)

    p = sub.add_parser("decrypt", help="decrypt an envelope")
    p.add_argument("--key", required=True)
    p.add_argument("--ciphertext", required=True)
    p.add_argument("--iv", required=True)
    p.set_defaults(func=cmd_decrypt)

    p = sub.add_parser("should-publish", help="decide whether a new reading is worth publishing")
    p.add_argument("--lat", type=float, required=True)
    p.add_argument("--lon", type=float, required=True)
    p.add_argument("--last-lat", type=float, default=None)
    p.add_argument("--last-lon", type=float, default=None)
    p.add_argument("--last-time", default=None, help="ISO 8601 time of the last published reading")
    p.add_argument("--now", default=None, help="ISO 8601 time of the new reading (default: now)")
    p.set_defaults(func=cmd_should_publish)

    p = sub.add_parser("selftest", help="check derivation, round trip and wrong-key rejection")
    p.add_argument("family_id", nargs="?", default=SELFTEST_FAMILY_ID)
    p.set_defaults(func=cmd_selftest)

    p = sub.add_parser("new-family", help="generate a family id and connection code")
    p.set_defaults(func=cmd_new_family)

    return parser


# Main entry point
def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        args.settings = load_settings()
    except FamilyLocError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    configure_logging(args.settings.log_level)

    try:
        return args.func(args)
    except FamilyLocError as e:
        print(f"error: {args.command}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
