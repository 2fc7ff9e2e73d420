# core/realtime.py

"""
Supabase Realtime subscription to parking_zones changes.

Delivery is at-least-once and unordered relative to other tables; callers
treat each event as "something changed, re-fetch".
"""

from typing import Callable, Optional

from supabase import acreate_client, AsyncClient

from core.config import settings
from core.logging_config import logger


ZONES_TABLE = "parking_zones"


class ZoneSubscription:
    """Handle returned by subscribe_zone_changes(); close() unsubscribes."""

    def __init__(self, client: AsyncClient, channel):
        self._client = client
        self._channel = channel

    async def close(self):
        try:
            await self._client.remove_channel(self._channel)
        except Exception as e:
            logger.warning(f"Failed to remove realtime channel: {e}")


async def subscribe_zone_changes(
    on_change: Callable[[dict], None],
    location_id: Optional[str] = None,
) -> ZoneSubscription:
    """
    Listen to INSERT/UPDATE/DELETE on parking_zones.
    With location_id the stream is filtered to that location, otherwise global.
    """
    client: AsyncClient = await acreate_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_ROLE_KEY,
    )

    channel_name = f"parking_zones_changes:{location_id or 'all'}"
    zone_filter = f"location_id=eq.{location_id}" if location_id else None

    channel = client.channel(channel_name)
    channel.on_postgres_changes(
        "*",
        schema="public",
        table=ZONES_TABLE,
        filter=zone_filter,
        callback=on_change,
    )
    await channel.subscribe()

    logger.info(f"Subscribed to {ZONES_TABLE} changes ({channel_name})")
    return ZoneSubscription(client, channel)
