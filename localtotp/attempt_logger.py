import json
import threading
from datetime import datetime, timezone
from pathlib import Path

from localtotp.config import load_config

_cfg = load_config()
_lock = threading.Lock()
_total_attempts = 0


def log_attempt(
    username: str,
    authenticator: str,
    result: str,
    latency_ms: float,
    extra: dict | None = None,
    path: str | None = None,
):
    """Append one attempt record as a JSON line. Never pass secrets or codes."""
    global _total_attempts
    with _lock:
        _total_attempts += 1
        attempt_id = _total_attempts

    record = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "username": username,
        "authenticator": authenticator,
        "result": result,
        "latency_ms": round(latency_ms, 3),
        "attempt_id": attempt_id,
    }
    if extra:
        record.update(extra)

    log_path = Path(path or _cfg.attempts_log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with _lock, log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(record) + "\n")
