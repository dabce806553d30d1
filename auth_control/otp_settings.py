"""
OTP settings loaded from the environment (.env supported)
Validated once at startup so a bad value fails fast instead of defaulting
"""
from pydantic import BaseModel, Field, ValidationError, field_validator
from typing import Optional
import os
from dotenv import load_dotenv

from auth_control.otp_errors import InvalidConfigurationError
from auth_control.otp_engine import SUPPORTED_DIGESTS

load_dotenv()

ENV_FIELDS = {
    "OTP_INTERVAL_SECONDS": "interval_seconds",
    "OTP_DIGITS": "digits",
    "OTP_DIGEST": "digest",
    "OTP_CHECK_BACK": "check_back",
    "OTP_CHECK_FORWARD": "check_forward",
    "OTP_REPLAY_BACKEND": "replay_backend",
    "OTP_REPLAY_DB_PATH": "replay_db_path",
}


class OTPSettings(BaseModel):
    """Validation model for verifier configuration"""
    interval_seconds: int = Field(30, gt=0, description="Interval length in seconds")
    digits: int = Field(6, ge=6, le=10, description="Code length")
    digest: str = Field("sha1", description="HMAC digest name")
    check_back: int = Field(5, ge=0, description="Intervals accepted before now")
    check_forward: int = Field(5, ge=0, description="Intervals accepted after now")
    replay_backend: str = Field("memory", description="Used codes storage: memory or sqlite")
    replay_db_path: Optional[str] = Field(None, description="SQLite file for the sqlite backend")

    @field_validator('digest')
    @classmethod
    def validate_digest(cls, v):
        """Validate digest name"""
        clean_digest = v.strip().lower()
        if clean_digest not in SUPPORTED_DIGESTS:
            raise ValueError(f'Digest must be one of {", ".join(sorted(SUPPORTED_DIGESTS))}')
        return clean_digest

    @field_validator('replay_backend')
    @classmethod
    def validate_replay_backend(cls, v):
        """Validate storage backend"""
        clean_backend = v.strip().lower()
        if clean_backend not in ("memory", "sqlite"):
            raise ValueError('Replay backend must be memory or sqlite')
        return clean_backend


def load_settings(environ=None) -> OTPSettings:
    """
    Builds settings from environment variables; unset variables keep their defaults.

    Raises:
        InvalidConfigurationError: any value fails validation
    """
    environ = os.environ if environ is None else environ
    values = {
        field: environ[name]
        for name, field in ENV_FIELDS.items()
        if environ.get(name) not in (None, "")
    }
    try:
        return OTPSettings(**values)
    except ValidationError as e:
        raise InvalidConfigurationError(f"Invalid OTP settings: {e}") from e
