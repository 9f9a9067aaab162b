"""
Wallet session: process-wide state, user notices and the session manager.
"""

from genesis_client.session.manager import SessionManager
from genesis_client.session.notices import CollectingNotifier, LogNotifier, Notice, NoticeLevel
from genesis_client.session.state import SessionStore, StateKey, get_session_store

__all__ = [
    "CollectingNotifier",
    "LogNotifier",
    "Notice",
    "NoticeLevel",
    "SessionManager",
    "SessionStore",
    "StateKey",
    "get_session_store",
]
