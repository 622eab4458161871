import json
import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)

SESSION_KEY = "khandeshwar_auth"


def default_session_path() -> Path:
    base = os.getenv("KHANDESHWAR_HOME") or os.path.join(Path.home(), ".khandeshwar")
    return Path(base) / f"{SESSION_KEY}.json"


class SessionStore:
    """Persists ``{token, refresh_token, user}`` between runs and restores it on start-up."""

    def __init__(self, path=None):
        self.path = Path(path) if path else default_session_path()
        self.token = None
        self.refresh_token = None
        self.user = None
        self.load()

    def load(self):
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return
        self.token = data.get("token")
        self.refresh_token = data.get("refresh_token")
        self.user = data.get("user")

    def save(self, token, user, refresh_token=None):
        self.token = token
        self.refresh_token = refresh_token
        self.user = user
        self.path.parent.mkdir(parents=True, exist_ok=True)
        body = {"token": token, "refresh_token": refresh_token, "user": user}
        self.path.write_text(json.dumps(body), encoding="utf-8")

    def clear(self):
        self.token = None
        self.refresh_token = None
        self.user = None
        if self.path.exists():
            self.path.unlink()

    @property
    def role(self):
        return (self.user or {}).get("role")

    @property
    def authenticated(self):
        return bool(self.token)
