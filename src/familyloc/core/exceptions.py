"""
Exceptions for familyloc
Everything raised on purpose derives from FamilyLocError so callers have one catch-all
"""


class FamilyLocError(Exception):
    # general container for errors
    pass


class InvalidInputError(FamilyLocError, ValueError):
    # raised for an empty or malformed family id, reading or config value
    pass


class InvalidKeyError(FamilyLocError, ValueError):
    # raised when a key is not base64 text decoding to 32 bytes
    pass


class DecryptionFailedError(FamilyLocError):
    # raised on a wrong key, tampered ciphertext/iv or malformed envelope
    pass


class SerializationError(FamilyLocError):
    # raised when a reading cannot be encoded or decoded losslessly
    pass
