"""
Error taxonomy shared by every app and the DRF exception handler that renders it.

Every failure leaves the API as ``{"success": false, "message": "..."}`` with the
matching status code; validation failures also carry the per-field ``errors``.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BadRequest(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"
    default_code = "bad_request"


class Unauthorized(exceptions.APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"
    default_code = "unauthorized"


class NotFound(exceptions.APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"
    default_code = "not_found"


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"
    default_code = "conflict"


class InternalError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"
    default_code = "internal_error"


def _first_error_message(detail):
    """Flatten a DRF validation ``detail`` into a single readable line."""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = _first_error_message(value)
            if field == "non_field_errors":
                return message
            return f"{field}: {message}"
        return "Invalid input"
    if isinstance(detail, list):
        return _first_error_message(detail[0]) if detail else "Invalid input"
    return str(detail)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}")
        return Response(
            {"success": False, "message": InternalError.default_detail},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            "success": False,
            "message": _first_error_message(exc.detail),
            "errors": exc.detail,
        }
    else:
        response.data = {"success": False, "message": _first_error_message(exc.detail)}

    return response
