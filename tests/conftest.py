import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("AUDIT_LOG_DIR", tempfile.mkdtemp(prefix="timegate-audit-"))

# RFC 6238 appendix B secret: ASCII "12345678901234567890"
RFC_SECRET_BYTES = b"12345678901234567890"
RFC_SECRET_BASE32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


class FixedClock:
    """Clock returning a settable epoch timestamp."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def audit_dir(tmp_path, monkeypatch):
    log_dir = tmp_path / "audit"
    monkeypatch.setenv("AUDIT_LOG_DIR", str(log_dir))
    return log_dir
