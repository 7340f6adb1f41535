""" Generators for family identifiers and shareable connection codes. """

import secrets
import uuid


FAMILY_ID_PREFIX = "family_"


def generate_family_id() -> str:
    # uuid4 draws from os.urandom
    return f"{FAMILY_ID_PREFIX}{uuid.uuid4()}"


def generate_connection_code() -> str:
    # 4 digits, 1000-9999, read out loud between family members
    return str(1000 + secrets.randbelow(9000))
