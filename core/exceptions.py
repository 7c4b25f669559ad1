import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.db.models import ProtectedError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class StoreUnavailable(APIException):
    """A read against the database failed during a render pass.

    The client shows a retry affordance; no partial data is returned.
    """
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'No se pudieron cargar los datos. Inténtalo de nuevo.'
    default_code = 'store_unavailable'
    retryable = True


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'El registro está en uso y no puede eliminarse.'
    default_code = 'conflict'


def api_exception_handler(exc, context):
    if isinstance(exc, ProtectedError):
        exc = Conflict()
    elif isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'))
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = getattr(exc, 'default_code', None) or 'api_error'
    error = {'code': code, 'message': detail}
    if getattr(exc, 'retryable', False):
        error['retry'] = True
    resp.data = {'ok': False, 'error': error}
    return resp
