"""DRF exception handler that understands the domain error taxonomy."""

import logging

from django_ratelimit.exceptions import Ratelimited  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.info(
            "Domain error in %s: %s (%s)",
            view.__class__.__name__ if view else "unknown view",
            exc.message,
            exc.code,
        )
        return Response({"detail": exc.message, "code": exc.code}, status=exc.status_code)
    if isinstance(exc, Ratelimited):
        return Response(
            {"detail": "Too many requests. Please try again later.", "code": "rate_limited"},
            status=status.HTTP_429_TOO_MANY_REQUESTS,
        )
    return exception_handler(exc, context)
