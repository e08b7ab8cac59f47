"""
API exception handling for InstallDesk.
"""
import logging
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Render errors as {'error': ...}: auth failures as 401, unhandled ones as 500."""
    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed,
                        exceptions.PermissionDenied)):
        return Response({'error': 'Unauthorized'}, status=status.HTTP_401_UNAUTHORIZED)

    response = exception_handler(exc, context)
    if response is None:
        logger.exception(f"Unhandled API error: {exc!r}")
        set_rollback()
        return Response(
            {'error': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = {'error': 'Invalid request data', 'details': response.data}
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {'error': response.data['detail']}
    return response
