"""
Error taxonomy for the Demoday API.

Every domain failure is an ``APIException`` subclass carrying an HTTP status,
a machine-readable ``code`` and a human-readable (Portuguese) message.
``custom_exception_handler`` wraps all of them, plus DRF/Django errors, in a
single envelope:

    {"success": false, "status_code": 409,
     "errors": {"code": "already_voted", "detail": "...", "fields": {...}}}
"""
import logging

from django.core.exceptions import ObjectDoesNotExist
from django.db import IntegrityError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger("demoday.api")


class DemodayError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Erro na requisição."
    default_code = "error"

    def __init__(self, detail=None, code=None, fields=None):
        super().__init__(detail=detail, code=code)
        self.code = code or self.default_code
        self.fields = fields

    @property
    def message(self):
        return str(self.detail)


class Unauthorized(DemodayError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Não autorizado."
    default_code = "unauthorized"


class Forbidden(DemodayError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Acesso negado."
    default_code = "forbidden"


class NotFound(DemodayError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Recurso não encontrado."
    default_code = "not_found"


class ValidationError(DemodayError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Dados inválidos."
    default_code = "validation_error"


class Conflict(DemodayError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflito com o estado atual."
    default_code = "conflict"


class PhaseClosed(DemodayError):
    """An action was attempted outside the window that permits it."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Esta ação não está disponível na fase atual."
    default_code = "phase_closed"


class Internal(DemodayError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Erro interno do servidor."
    default_code = "internal_error"


def _envelope(status_code, code, detail, fields=None):
    errors = {"code": code, "detail": detail}
    if fields:
        errors["fields"] = fields
    return Response(
        {
            "success": False,
            "status_code": status_code,
            "errors": errors,
        },
        status=status_code,
    )


def _translate(exc):
    """Map storage-layer errors onto the taxonomy before DRF sees them."""
    if isinstance(exc, IntegrityError):
        return Conflict("Operação viola uma restrição de unicidade.", code="conflict")
    if isinstance(exc, ObjectDoesNotExist):
        return NotFound()
    return exc


def custom_exception_handler(exc, context):
    """
    Wrap domain, DRF and Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    exc = _translate(exc)

    if isinstance(exc, DemodayError):
        if exc.status_code >= 500:
            logger.error("API error %s: %s", exc.code, exc.message)
        return _envelope(exc.status_code, exc.code, exc.message, exc.fields)

    if isinstance(exc, drf_exceptions.ValidationError):
        return _envelope(
            status.HTTP_400_BAD_REQUEST,
            ValidationError.default_code,
            str(ValidationError.default_detail),
            exc.detail,
        )

    response = drf_exception_handler(exc, context)

    # Other DRF errors (auth, 404, method not allowed, throttling...)
    if response is not None:
        detail = response.data.get("detail", "") if isinstance(response.data, dict) else response.data
        code = getattr(detail, "code", None)
        if response.status_code == status.HTTP_401_UNAUTHORIZED:
            code = Unauthorized.default_code
        elif response.status_code == status.HTTP_403_FORBIDDEN:
            code = Forbidden.default_code
        elif response.status_code == status.HTTP_404_NOT_FOUND:
            code = NotFound.default_code
        wrapped = _envelope(response.status_code, code or "error", str(detail))
        for header in ("WWW-Authenticate", "Retry-After", "Allow"):
            if header in response:
                wrapped[header] = response[header]
        return wrapped

    # Unhandled exceptions -> 500
    view = context.get("view")
    logger.exception(
        "Unhandled API exception in %s", view.__class__.__name__ if view else "unknown view",
        exc_info=exc,
    )
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        Internal.default_code,
        str(Internal.default_detail),
    )
