import threading
from typing import Optional

from dealsim.core.actions import Reset
from dealsim.core.reducer import apply, make_initial_state
from dealsim.observability.logging import log
from dealsim.store.models import SimConfig, SimState
from dealsim.utils.lock import dispatch_lock


class SessionStore:
    """
    Owns the one live SimState for this process.
    Readers get the current immutable snapshot; writers go through dispatch().
    Nothing is persisted: a restart starts a fresh simulation.
    """

    def __init__(self, config: Optional[SimConfig] = None):
        self._lock = threading.Lock()
        self._state = make_initial_state(config)

    def snapshot(self) -> SimState:
        return self._state

    def dispatch(self, action) -> SimState:
        with dispatch_lock(self._lock):
            self._state = apply(self._state, action)
            log(
                "session_dispatch",
                action=type(action).__name__,
                stage=self._state.stage,
                events=len(self._state.events),
            )
            return self._state

    def reset(self) -> SimState:
        return self.dispatch(Reset())


_store: Optional[SessionStore] = None
_store_lock = threading.Lock()

def get_store() -> SessionStore:
    """Process-wide store; built once even when first requests race."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = SessionStore()
    return _store
