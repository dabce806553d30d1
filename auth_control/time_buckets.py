# timegate/auth_control/time_buckets.py

from typing import Union

from auth_control.otp_errors import InvalidArgumentError, InvalidConfigurationError

# Default value used by Google Authenticator and most other apps
DEFAULT_INTERVAL_SECONDS = 30


def validate_interval(interval_seconds: int) -> int:
    if isinstance(interval_seconds, bool) or not isinstance(interval_seconds, int):
        raise InvalidConfigurationError("interval_seconds has to be an integer")
    if interval_seconds <= 0:
        raise InvalidConfigurationError("interval_seconds has to be positive")
    return interval_seconds


def time_bucket(epoch_seconds: Union[int, float], interval_seconds: int = DEFAULT_INTERVAL_SECONDS) -> int:
    """
    Converts an epoch timestamp into its interval index.

    Args:
        epoch_seconds: seconds since the epoch; fractions are dropped
        interval_seconds: interval length in seconds

    Returns:
        int: floor(epoch_seconds / interval_seconds)
    """
    validate_interval(interval_seconds)
    if epoch_seconds < 0:
        raise InvalidArgumentError("epoch_seconds cannot be negative")
    return int(epoch_seconds) // interval_seconds
