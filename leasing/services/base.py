# leasing/services/base.py
import functools
import logging

from django.db import OperationalError, transaction

from leasing.exceptions import ConcurrentModification

logger = logging.getLogger(__name__)


def atomic_or_conflict(func):
    """
    Run ``func`` in a single transaction. Lock timeouts, deadlocks and
    serialization failures surface as ConcurrentModification.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            with transaction.atomic():
                return func(*args, **kwargs)
        except OperationalError as exc:
            logger.warning("%s aborted by a conflicting transaction: %s", func.__name__, exc)
            raise ConcurrentModification(
                "The record was modified by another operation. Please retry."
            ) from exc
    return wrapper
