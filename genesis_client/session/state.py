"""
Process-wide session state with per-key subscriber notification.

Holds the connected account, the contract handle and the last-fetched
project / backer / stats snapshots. Writers replace a whole entry on every
set (lists are frozen to tuples), so subscribers never observe a partially
updated collection. reset() is the hard reset used on chain changes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

from genesis_client.genesis_logging import get_logger
from genesis_client.ledger.models import Backer, Project, Stats

logger = get_logger(__name__)

Subscriber = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class StateKey(str, Enum):
    CONNECTED_ACCOUNT = "connectedAccount"
    CONTRACT = "contract"
    PROJECTS = "projects"
    PROJECT = "project"
    BACKERS = "backers"
    STATS = "stats"


def _key(key: StateKey | str) -> StateKey:
    """Accept a StateKey, its value ("connectedAccount") or its snake_case name."""
    try:
        return StateKey(key)
    except ValueError:
        pass
    try:
        return StateKey[str(key).upper()]
    except KeyError:
        raise KeyError(f"Unknown session state key: {key!r}") from None


class StateView:
    """
    Component-scoped subscription to one key.

    `value` always reflects the latest set(); close() (or leaving the with
    block) detaches it from the store.
    """

    def __init__(self, store: "SessionStore", key: StateKey) -> None:
        self.key = key
        self.value = store.get(key)
        self._unsubscribe: Unsubscribe | None = store.subscribe(key, self._on_change)

    def _on_change(self, value: Any) -> None:
        self.value = value

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "StateView":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class SessionStore:
    """Typed observable key/value store. One instance per process (get_session_store())."""

    def __init__(self) -> None:
        self._values: dict[StateKey, Any] = {}
        self._subscribers: dict[StateKey, list[Subscriber]] = {k: [] for k in StateKey}

    def get(self, key: StateKey | str, default: Any = None) -> Any:
        return self._values.get(_key(key), default)

    def set(self, key: StateKey | str, value: Any) -> None:
        """Replace the entry for key and notify its subscribers."""
        k = _key(key)
        if isinstance(value, list):
            value = tuple(value)
        self._values[k] = value
        self._notify(k, value)

    def subscribe(self, key: StateKey | str, callback: Subscriber) -> Unsubscribe:
        k = _key(key)
        self._subscribers[k].append(callback)

        def unsubscribe() -> None:
            try:
                self._subscribers[k].remove(callback)
            except ValueError:
                pass

        return unsubscribe

    def use(self, key: StateKey | str) -> StateView:
        return StateView(self, _key(key))

    def reset(self) -> None:
        """Discard every entry; subscribers of previously set keys receive None."""
        cleared = list(self._values)
        self._values = {}
        logger.info("session_state_reset", keys=[k.value for k in cleared])
        for k in cleared:
            self._notify(k, None)

    def _notify(self, key: StateKey, value: Any) -> None:
        for callback in list(self._subscribers[key]):
            try:
                callback(value)
            except Exception as e:
                logger.exception("session_subscriber_failed", key=key.value, error=str(e))

    # Typed accessors

    @property
    def connected_account(self) -> str | None:
        return self.get(StateKey.CONNECTED_ACCOUNT)

    @property
    def contract(self) -> Any:
        return self.get(StateKey.CONTRACT)

    @property
    def projects(self) -> tuple[Project, ...] | None:
        return self.get(StateKey.PROJECTS)

    @property
    def project(self) -> Project | None:
        return self.get(StateKey.PROJECT)

    @property
    def backers(self) -> tuple[Backer, ...] | None:
        return self.get(StateKey.BACKERS)

    @property
    def stats(self) -> Stats | None:
        return self.get(StateKey.STATS)


_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Return the process-wide session store, creating it on first use."""
    global _store
    if _store is None:
        _store = SessionStore()
    return _store


def reset_session_store_for_test() -> None:
    """Drop the process-wide store so the next get_session_store() starts empty."""
    global _store
    _store = None
