import threading
from collections import deque
from typing import Callable, Deque, Optional

from .logger import get_logger
from .models import Table
from .settings import settings
from . import state as st

logger = get_logger(__name__)

def _settled(state: st.DashboardState) -> st.DashboardState:
    # history never holds an in-flight upload, undo lands on a usable table
    if state.loading:
        return state.model_copy(update={"loading": False})
    return state

class DashboardStore:
    """Holds the current state version for the session.

    Uploads are tagged with a generation number: only the most recently
    started upload may commit or fail, completions of older ones are dropped.
    Starting and failing an upload are not undo steps; only the loaded table is.
    """

    def __init__(self, history_limit: Optional[int] = None):
        limit = settings.HISTORY_LIMIT if history_limit is None else history_limit
        self._state = st.DashboardState()
        self._history: Deque[st.DashboardState] = deque(maxlen=max(0, limit))
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> st.DashboardState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def apply(self, transition: Callable[..., st.DashboardState], *args, **kwargs) -> st.DashboardState:
        with self._lock:
            return self._apply_locked(transition, *args, **kwargs)

    def _apply_locked(self, transition, *args, record: bool = True, **kwargs) -> st.DashboardState:
        prev = self._state
        nxt = transition(prev, *args, **kwargs)
        if nxt is not prev:
            if record:
                self._history.append(_settled(prev))
            self._state = nxt
        return nxt

    def undo(self) -> bool:
        with self._lock:
            if not self._history:
                return False
            self._state = self._history.pop()
            return True

    def begin_upload(self) -> int:
        with self._lock:
            self._generation += 1
            self._apply_locked(st.begin_loading, record=False)
            return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def commit_upload(self, token: int, table: Table, file_name: Optional[str]) -> bool:
        with self._lock:
            if not self.is_current(token):
                logger.warning("Discarding stale upload %s (latest is %s): %s", token, self._generation, file_name)
                return False
            self._apply_locked(st.load_table, table, file_name)
            return True

    def fail_upload(self, token: int, message: str) -> bool:
        with self._lock:
            if not self.is_current(token):
                logger.warning("Ignoring failure of stale upload %s: %s", token, message)
                return False
            self._apply_locked(st.fail_loading, message, record=False)
            return True

store = DashboardStore()

def get_store() -> DashboardStore:
    return store
