"""
Logging filters for structured log output.

Every record emitted while a request is handled carries that request's
correlation id, so wizard submissions, admin actions and their alerts can
be traced together.
"""
import logging
import threading

_local = threading.local()


def get_correlation_id() -> str:
    """Current correlation id ('-' outside a request)."""
    return getattr(_local, "correlation_id", "") or "-"


def set_correlation_id(cid: str) -> None:
    _local.correlation_id = cid


def clear_correlation_id() -> None:
    _local.correlation_id = ""


class CorrelationIdFilter(logging.Filter):
    """Attach correlation_id to every log record."""

    def filter(self, record):
        record.correlation_id = get_correlation_id()
        return True
