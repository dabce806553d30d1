import os
from datetime import datetime, timezone
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

LOG_FILE_NAME = "security_audit.log"


def get_log_file() -> Path:
    """Resolves the audit log location, creating its directory on first use."""
    log_dir = Path(os.getenv("AUDIT_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / LOG_FILE_NAME


def log_event(actor: str, action: str) -> None:
    """
    Logs a verification event with UTC timestamp.

    Args:
        actor (str): User identifier the event concerns.
        action (str): Description of what happened. Never include codes or secrets.
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    # One line per event: control characters in the actor are escaped
    safe_actor = (actor or "-").encode("unicode_escape").decode("ascii")
    log_entry = f"[{timestamp}] {safe_actor} - {action}\n"

    try:
        with get_log_file().open("a", encoding="utf-8") as log_file:
            log_file.write(log_entry)
    except Exception as e:
        # Auditing must never block verification
        print(f"[AUDIT_LOG_ERROR] Failed to write log: {e}")
