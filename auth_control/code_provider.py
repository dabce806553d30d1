# timegate/auth_control/code_provider.py

import hmac
from abc import ABC, abstractmethod
from typing import Optional

from auth_control.otp_engine import CodeEngine, HotpCodeEngine, Secret
from auth_control.otp_errors import InvalidArgumentError


def constant_time_equals(expected: str, candidate: str) -> bool:
    """
    Compares two codes without short-circuiting on the first differing character.
    """
    return hmac.compare_digest(
        expected.encode("utf-8", "surrogatepass"),
        candidate.encode("utf-8", "surrogatepass"),
    )


def require_value(value, name: str):
    if not value:
        raise InvalidArgumentError(f"{name} cannot be empty")
    return value


class CodeProvider(ABC):
    """
    Something that hands out one-time codes and checks them.
    TimeAuthenticator is the time-based implementation.
    """

    def __init__(self, engine: Optional[CodeEngine] = None):
        self._engine = engine or HotpCodeEngine()

    @property
    def engine(self) -> CodeEngine:
        return self._engine

    @abstractmethod
    def generate(self, secret: Secret, *args) -> str:
        """Returns the code currently expected for the secret."""

    @abstractmethod
    def check_code(self, secret: Secret, code: str, user_id: str) -> bool:
        """Returns True only if the code is valid and should be accepted."""

    def _code_at(self, secret: Secret, counter: int) -> str:
        return self._engine.compute(secret, counter)
