from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger('cocreate.api')

# Auth challenge and throttle back-off must survive the re-wrap
PRESERVED_HEADERS = ("WWW-Authenticate", "Retry-After")


def _error_code(exc, response):
    """
    Stable machine-readable code the dashboard maps to its own message.
    Domain errors carry one code; serializer field errors report "validation_error".
    """
    get_codes = getattr(exc, "get_codes", None)
    if get_codes is None:
        # Django Http404 / PermissionDenied, converted by DRF
        return {404: "not_found", 403: "permission_denied"}.get(response.status_code, "error")
    codes = get_codes()
    if isinstance(codes, str):
        return codes
    if isinstance(codes, list) and len(codes) == 1 and isinstance(codes[0], str):
        return codes[0]
    return "validation_error"


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        if response.status_code < 500:
            logger.info(
                f"API error {response.status_code} on {getattr(context.get('request'), 'path', '?')}: "
                f"{exc.__class__.__name__}"
            )
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "code": _error_code(exc, response),
                "errors": response.data,
            },
            status=response.status_code,
            headers={
                header: response[header]
                for header in PRESERVED_HEADERS
                if response.has_header(header)
            },
        )

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "code": "server_error",
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
