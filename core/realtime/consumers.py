import json
from channels.generic.websocket import AsyncWebsocketConsumer

from core.services.notify import UPDATES_GROUP


class UpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes refresh hints to open planning screens.

    Events carry no data beyond the affected date window; clients refetch
    through the HTTP API.
    """
    GROUP = UPDATES_GROUP

    async def connect(self):
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def planning_refresh(self, event):
        # {"type": "planning.refresh", "version": int, "ts": "...", "start": "...", "end": "..."}
        await self.send(json.dumps(event))

    async def counters_refresh(self, event):
        await self.send(json.dumps(event))

    async def broadcast_refresh(self, event):
        # {"type": "broadcast.refresh", "version": int, "ts": "...", "keys": [...]}
        await self.send(json.dumps(event))
