import logging

from django.conf import settings
from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, (list, tuple)) and detail:
        return _first_message(detail[0])
    return str(detail)


def api_exception_handler(exc, context):
    """
    Every error leaves the API as {"error": "..."}; validation failures keep the
    per-field messages under "details". Internal details of unexpected failures
    are only exposed while DEBUG is on.
    """
    if isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error: {exc}")
        return Response(
            {"error": "Resource already exists.", "statusCode": status.HTTP_409_CONFLICT},
            status=status.HTTP_409_CONFLICT,
        )

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}")
        body = {"error": "Internal server error", "statusCode": status.HTTP_500_INTERNAL_SERVER_ERROR}
        if settings.DEBUG:
            body["details"] = f"{exc.__class__.__name__}: {exc}"
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = response.data
    # views that already answer with {"error": ...} pass straight through
    if isinstance(data, dict) and "error" in data:
        return response

    if isinstance(exc, ValidationError):
        response.data = {
            "error": _first_message(data) if not isinstance(data, dict) else "Invalid request data.",
            "details": data,
            "statusCode": response.status_code,
        }
    else:
        response.data = {"error": _first_message(data), "statusCode": response.status_code}
    return response
