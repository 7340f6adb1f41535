"""Unit tests for family key derivation."""

import base64
from unittest.mock import patch

import pytest
import familyloc.security.kdf as kdf_mod
from familyloc.core.exceptions import InvalidInputError, InvalidKeyError
from familyloc.security.kdf import (
    KEY_SALT,
    decode_family_key,
    derive_family_key,
    kdf_params_to_dict,
)


def test_derive_family_key_is_32_bytes_base64():
    key = derive_family_key("f_test123")

    assert isinstance(key, str)
    assert len(key) == 44  # base64 of 32 bytes
    assert len(base64.b64decode(key)) == 32


def test_derive_family_key_is_deterministic():
    """Same family id -> same key, every time."""
    assert derive_family_key("f_test123") == derive_family_key("f_test123")


def test_different_family_ids_produce_different_keys():
    assert derive_family_key("f_family1") != derive_family_key("f_family2")


# Pinned outputs: every family device must derive these exact keys, so a
# change to the salt or cost parameters has to show up here.
@pytest.mark.parametrize(
    "family_id, expected",
    [
        ("f_test123", "6j+dxAngcqtcxqxkbeR3RcDJM4YozPZHmVgIaLs4038="),
        ("f_family1", "fwUSjBWlECeqxbPvnmplVNyAk82eTyHvrPHEAmQNZmA="),
    ],
)
def test_derive_family_key_known_answers(family_id, expected):
    assert derive_family_key(family_id) == expected


def test_derive_family_key_handles_unicode_ids():
    key = derive_family_key("가족_🏠")
    assert len(base64.b64decode(key)) == 32


def test_derive_family_key_uses_fixed_salt():
    """The salt is an application constant, never random."""
    with patch("familyloc.security.kdf.hash_secret_raw", wraps=kdf_mod.hash_secret_raw) as spy:
        derive_family_key("f_a")
        derive_family_key("f_b")

    first, second = spy.call_args_list
    assert first.kwargs["salt"] == KEY_SALT
    assert second.kwargs["salt"] == KEY_SALT
    assert first.kwargs["hash_len"] == 32


@pytest.mark.parametrize("bad", ["", "   ", None, 123, b"f_test123"])
def test_derive_family_key_rejects_invalid_ids(bad):
    with pytest.raises(InvalidInputError):
        derive_family_key(bad)


def test_invalid_input_is_also_value_error():
    with pytest.raises(ValueError):
        derive_family_key("")


def test_decode_family_key_roundtrip():
    raw = bytes(range(32))
    assert decode_family_key(base64.b64encode(raw).decode()) == raw


@pytest.mark.parametrize(
    "bad",
    [
        "",
        "not base64!!",
        base64.b64encode(b"\x00" * 16).decode(),  # too short
        base64.b64encode(b"\x00" * 33).decode(),  # too long
        "ключ",
        None,
        b"\x00" * 32,
    ],
)
def test_decode_family_key_rejects_bad_keys(bad):
    with pytest.raises(InvalidKeyError):
        decode_family_key(bad)


def test_kdf_params_to_dict():
    params = kdf_params_to_dict()

    assert params == {
        "algo": "argon2id",
        "salt": KEY_SALT.hex(),
        "time": 3,
        "memory": 65536,
        "parallelism": 1,
        "key_len": 32,
    }
