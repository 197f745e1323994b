# gymii/deps/sessions.py
from functools import lru_cache

from gymii.settings import get_settings
from gymii.training.manager import SessionManager
from gymii.training.snapshots import FileKeyValueStore

@lru_cache
def get_session_manager() -> SessionManager:
    """One manager per process; it owns the running timers of every user."""
    s = get_settings()
    return SessionManager(FileKeyValueStore(s.snapshot_path), tick_interval=s.SESSION_TICK_SECONDS)
