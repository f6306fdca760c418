"""
core.domain.exception_handler — DRF-compatible global exception handler.

Maps domain exceptions from ``core.domain.exceptions`` to DRF
``Response`` objects so views don't need per-endpoint try/except.

Registered in ``settings.py``::

    REST_FRAMEWORK = {
        ...
        'EXCEPTION_HANDLER': 'core.domain.exception_handler.domain_exception_handler',
    }
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    Conflict,
    DomainError,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)

logger = logging.getLogger(__name__)

# Most specific first; DomainError is the catch-all.
_STATUS_MAP: dict[type, int] = {
    PermissionDenied:  403,
    NotFound:          404,
    InvalidTransition: 409,
    Conflict:          409,
    DomainError:       400,
}


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    DRF exception handler that also understands domain exceptions.

    DRF's default handler runs first (validation, authentication, ...).
    Anything it does not recognise is matched against ``_STATUS_MAP``;
    unknown exceptions propagate as server errors.
    """
    response = drf_default_handler(exc, context)
    if response is not None:
        return response

    for exc_class, status_code in _STATUS_MAP.items():
        if isinstance(exc, exc_class):
            view = context.get("view")
            request = context.get("request")
            logger.warning(
                "Domain exception [%s] in %s on %s %s by %s: %s",
                exc_class.__name__,
                type(view).__name__ if view is not None else "unknown",
                getattr(request, "method", "-"),
                getattr(request, "path", "-"),
                getattr(request, "user", None) or "anonymous",
                exc,
            )
            return Response({"detail": str(exc)}, status=status_code)

    return None
