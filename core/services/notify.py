"""
Refresh notifications for open planning screens.

Writes publish a small ``planning.refresh`` event to the ``updates``
channel group; :class:`core.realtime.consumers.UpdatesConsumer` forwards
it to connected browsers, which then refetch their grid.  Nothing about
the edit itself is sent.
"""
from __future__ import annotations

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)

UPDATES_GROUP = 'updates'


def broadcast(event_type: str, **payload) -> bool:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False
    now = timezone.now()
    event = {'type': event_type, 'version': int(now.timestamp()), 'ts': now.isoformat(), **payload}
    try:
        async_to_sync(channel_layer.group_send)(UPDATES_GROUP, event)
    except Exception as exc:  # the write already succeeded
        logger.warning('could not broadcast %s: %s', event_type, exc)
        return False
    return True


def broadcast_planning_refresh(start=None, end=None) -> bool:
    return broadcast(
        'planning.refresh',
        start=start.isoformat() if start else None,
        end=end.isoformat() if end else None,
    )


def broadcast_cache_refresh(keys) -> bool:
    return broadcast('broadcast.refresh', keys=list(keys)[:50])
