# timegate/auth_control/otp_module.py

from typing import Optional

from auth_control.otp_engine import HotpCodeEngine
from auth_control.otp_settings import OTPSettings, load_settings
from auth_control.time_authenticator import TimeAuthenticator
from monitor_unit.persistent_replay_guard import SqliteReplayGuard
from monitor_unit.replay_guard import InMemoryReplayGuard, ReplayGuard


def build_replay_guard(settings: OTPSettings) -> ReplayGuard:
    """
    Creates the used-codes store named by the settings.

    Retention covers the whole verification window: any later window starts at
    most check_back + check_forward intervals behind the newest recorded code.
    """
    retention = settings.check_back + settings.check_forward
    if settings.replay_backend == "sqlite":
        return SqliteReplayGuard(settings.replay_db_path, retention_buckets=retention)
    return InMemoryReplayGuard(retention_buckets=retention)


def build_authenticator(settings: Optional[OTPSettings] = None,
                        replay_guard: Optional[ReplayGuard] = None) -> TimeAuthenticator:
    """
    Wires a TimeAuthenticator from settings, loading them from the environment if not given.
    """
    settings = settings or load_settings()
    return TimeAuthenticator(
        replay_guard if replay_guard is not None else build_replay_guard(settings),
        settings.interval_seconds,
        engine=HotpCodeEngine(settings.digits, settings.digest),
        check_back=settings.check_back,
        check_forward=settings.check_forward,
    )
