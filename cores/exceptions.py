import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from assessments.exceptions import ExamEngineError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Render engine errors as ``{"error", "code"}`` payloads; defer the rest to DRF."""
    if isinstance(exc, ExamEngineError):
        if exc.status_code >= 500:
            logger.error(f"Engine failure in {context.get('view').__class__.__name__}: {exc.message}", exc_info=exc)
        payload = {"error": exc.message, "code": exc.code}
        payload.update(exc.extra)
        return Response(payload, status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        return Response(
            {"error": " ".join(exc.messages), "code": "invalid"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    return exception_handler(exc, context)
