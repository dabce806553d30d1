# timegate/auth_control/otp_engine.py

"""
Code engine: maps a shared secret and an integer counter to a fixed-width
numeric code (HOTP, RFC 4226). The HMAC work is done by pyotp.
"""
import base64
import hashlib
from abc import ABC, abstractmethod
from typing import Union

import pyotp

from auth_control.otp_errors import (
    ComputationError,
    InvalidConfigurationError,
    InvalidSecretError,
)

Secret = Union[bytes, str]

DEFAULT_DIGITS = 6

# RFC 4226 counters are 8-byte unsigned integers
MAX_COUNTER = 2 ** 64 - 1

SUPPORTED_DIGESTS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
}


def normalize_secret(secret: Secret) -> str:
    """
    Returns the secret as unpadded upper-case base32 text, the form pyotp expects.

    Raw bytes are encoded. Text is treated as base32 as shown by authenticator
    apps, so spaces are dropped and case is folded.
    """
    if isinstance(secret, (bytes, bytearray, memoryview)):
        raw = bytes(secret)
        if not raw:
            raise InvalidSecretError("secret key is empty")
        return base64.b32encode(raw).decode("ascii").rstrip("=")

    if not isinstance(secret, str):
        raise InvalidSecretError(f"unsupported secret type: {type(secret).__name__}")

    cleaned = secret.replace(" ", "").rstrip("=").upper()
    try:
        raw = base64.b32decode(cleaned + "=" * (-len(cleaned) % 8), casefold=True)
    except ValueError as e:
        raise InvalidSecretError("secret is not valid base32") from e

    if not raw:
        raise InvalidSecretError("secret key is empty")
    return cleaned


class CodeEngine(ABC):
    """Deterministic (secret, counter) -> code function."""

    digits: int = DEFAULT_DIGITS

    @abstractmethod
    def compute(self, secret: Secret, counter: int) -> str:
        """
        Computes the code for a counter value.

        Raises:
            InvalidSecretError: the secret is malformed
            ComputationError: any other failure
        """


class HotpCodeEngine(CodeEngine):
    def __init__(self, digits: int = DEFAULT_DIGITS, digest: str = "sha1"):
        if isinstance(digits, bool) or not isinstance(digits, int) or not 6 <= digits <= 10:
            raise InvalidConfigurationError("digits has to be an integer between 6 and 10")
        if digest not in SUPPORTED_DIGESTS:
            raise InvalidConfigurationError(f"unsupported digest: {digest}")

        self.digits = digits
        self.digest = digest

    def compute(self, secret: Secret, counter: int) -> str:
        key = normalize_secret(secret)

        if isinstance(counter, bool) or not isinstance(counter, int) or not 0 <= counter <= MAX_COUNTER:
            raise ComputationError("counter has to be an unsigned 64-bit integer")

        try:
            hotp = pyotp.HOTP(key, digits=self.digits, digest=SUPPORTED_DIGESTS[self.digest])
            return hotp.at(counter)
        except Exception as e:
            raise ComputationError("failed to compute code") from e
