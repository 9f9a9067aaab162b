"""
Structured logging for the Genesis client.

JSON logs with timestamp, account, event_type. Use get_logger() in every module.
"""

from genesis_client.genesis_logging.logger import bind_account, get_logger

__all__ = ["bind_account", "get_logger"]
