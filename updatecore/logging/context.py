"""Context propagation for structured logging.

Fields bound with ``log_context`` (run id, pipeline id, crawler kind...) are
attached to every record emitted inside the scope by ``ContextualFilter``.
Storage is a ``ContextVar`` so nested scopes restore their parent's fields.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, Dict, Iterator

_log_fields: ContextVar[Dict[str, Any]] = ContextVar("updatecore_log_fields", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields bound in the current scope."""
    return dict(_log_fields.get())


def push_log_context(**fields: Any) -> Token:
    """Bind fields on top of the current ones; undo with ``pop_log_context``."""
    return _log_fields.set({**_log_fields.get(), **fields})


def pop_log_context(token: Token) -> None:
    """Restore the fields that were bound before ``push_log_context``."""
    _log_fields.reset(token)


def clear_log_context() -> None:
    """Drop every bound field. Mostly useful in tests."""
    _log_fields.set({})


@contextmanager
def log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """Bind fields for the duration of a ``with`` block.

    Example:
        >>> with log_context(run_id="abc123", pipeline_id="local"):
        ...     logger.info("Running crawlers")  # carries run_id and pipeline_id
    """
    token = push_log_context(**fields)
    try:
        yield get_log_context()
    finally:
        pop_log_context(token)
