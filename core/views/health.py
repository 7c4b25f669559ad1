import logging

from django.core.cache import cache
from django.db import DatabaseError, connections
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def healthz(request):
    """Liveness probe: database round trip plus cache status."""
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except DatabaseError as e:
        logger.error('healthz: database unreachable: %s', e)
        return JsonResponse({'ok': False, 'db': False, 'error': str(e)}, status=503)
    cache_backend = type(cache).__name__
    return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1), 'cache': cache_backend})
