# timegate/auth_control/time_authenticator.py

"""
Time-based one-time password verification (RFC 6238).

Codes are checked against a window of intervals around the current time to
tolerate clock drift, and every accepted code is claimed in a replay guard so
it can be used only once per user.
"""
import time
from typing import Callable, Optional, Union

from auth_control.code_provider import CodeProvider, constant_time_equals, require_value
from auth_control.otp_engine import CodeEngine, Secret
from auth_control.otp_errors import ComputationError, InvalidConfigurationError, InvalidSecretError
from auth_control.time_buckets import DEFAULT_INTERVAL_SECONDS, time_bucket, validate_interval
from monitor_unit.audit_log import log_event
from monitor_unit.replay_guard import ReplayGuard

CHECK_BACK_INTERVALS = 5
CHECK_FORWARD_INTERVALS = 5


def _validate_offset(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidConfigurationError(f"{name} has to be a non-negative integer")
    return value


class TimeAuthenticator(CodeProvider):
    def __init__(
            self,
            replay_guard: ReplayGuard,
            interval_seconds: int = DEFAULT_INTERVAL_SECONDS,
            *,
            engine: Optional[CodeEngine] = None,
            check_back: int = CHECK_BACK_INTERVALS,
            check_forward: int = CHECK_FORWARD_INTERVALS,
            clock: Callable[[], float] = time.time,
    ):
        if replay_guard is None:
            raise InvalidConfigurationError("replay_guard cannot be None")

        super().__init__(engine)
        self.replay_guard = replay_guard
        self.interval_seconds = validate_interval(interval_seconds)
        self.check_back = _validate_offset(check_back, "check_back")
        self.check_forward = _validate_offset(check_forward, "check_forward")
        self._clock = clock

    @property
    def retention_buckets(self) -> int:
        """How many intervals behind the newest used code a replay guard must remember."""
        return self.check_back + self.check_forward

    def generate(self, secret: Secret, at_epoch_seconds: Optional[Union[int, float]] = None) -> str:
        """
        Gets the code for a moment in time, the current time by default.

        Raises:
            InvalidArgumentError: secret is empty
            InvalidSecretError: secret has an invalid format
            ComputationError: any other problem computing the code
        """
        require_value(secret, "secret")
        if at_epoch_seconds is None:
            at_epoch_seconds = self._clock()
        return self._code_at(secret, time_bucket(at_epoch_seconds, self.interval_seconds))

    def check_code(self, secret: Secret, code: str, user_id: str) -> bool:
        """
        Checks a code against every interval in the window around now.

        Returns:
            bool: True if the code matched an interval and had not been used for
            it yet. Everything else, engine failures included, is False.
        """
        require_value(secret, "secret")
        code = str(require_value(code, "code"))
        user_id = user_id or ""

        # One anchor for the whole window
        base_time = self._clock()

        replayed = False
        for offset in range(-self.check_back, self.check_forward + 1):
            shifted = base_time + self.interval_seconds * offset
            if shifted < 0:
                continue
            interval = time_bucket(shifted, self.interval_seconds)

            try:
                expected = self._code_at(secret, interval)
            except (InvalidSecretError, ComputationError) as e:
                print(f"[OTP_ERROR] Error computing code: {type(e).__name__}")
                log_event(user_id, f"OTP rejected - code engine failure ({type(e).__name__})")
                return False

            if not constant_time_equals(expected, code):
                continue

            try:
                claimed = self.replay_guard.claim(interval, code, user_id)
            except Exception as e:
                print(f"[OTP_ERROR] Replay guard failure for interval {interval}: {e}")
                log_event(user_id, f"OTP refused for interval {interval} - replay guard failure")
                continue

            if claimed:
                log_event(user_id, f"OTP accepted for interval {interval}")
                return True

            replayed = True
            log_event(user_id, f"OTP replay refused for interval {interval}")

        if not replayed:
            log_event(user_id, "OTP rejected - no matching interval")
        return False
