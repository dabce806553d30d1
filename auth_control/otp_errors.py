# timegate/auth_control/otp_errors.py


class OTPError(Exception):
    """Base class for every error raised by the OTP layer."""


class InvalidConfigurationError(OTPError, ValueError):
    """Bad construction parameters or settings. Raised at startup."""


class InvalidArgumentError(OTPError, ValueError):
    """Empty secret or code passed to an operation."""


class InvalidSecretError(OTPError):
    """Secret does not meet the code engine's format requirements."""


class ComputationError(OTPError):
    """Any other failure while computing a code."""
