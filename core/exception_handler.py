# core/exception_handler.py
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from leasing.exceptions import ConcurrentModification, LeasingError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """DRF exception handler that also renders lease/payment lifecycle errors."""
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, ConcurrentModification):
        return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
    if isinstance(exc, LeasingError):
        view = context.get("view")
        logger.info("%s rejected: %s", type(view).__name__ if view else "request", exc)
        return Response({"detail": str(exc), "code": type(exc).__name__}, status=status.HTTP_400_BAD_REQUEST)
    return None
