# services/zone_availability.py

"""
Per-location occupancy statistics.

Statistics are always recomputed from the full current zone list. Change
notifications only act as a trigger: their payload is never applied as a
delta, so a missed or duplicated event cannot make the numbers drift.
"""

from threading import Lock
from typing import Callable, Iterable, List, Optional

from core.logging_config import logger
from models.zone import ZoneAvailability
from services.zones import list_zones


def compute_availability(zones: Iterable[dict], location_id: Optional[str] = None) -> ZoneAvailability:
    zones = list(zones)
    total_slots = sum(int(z.get("total_slots") or 0) for z in zones)
    available_slots = sum(int(z.get("available_slots") or 0) for z in zones)
    occupied = total_slots - available_slots

    percentage = 0.0
    if total_slots > 0:
        percentage = round(occupied / total_slots * 100, 2)

    return ZoneAvailability(
        location_id=location_id,
        total_zones=len(zones),
        total_slots=total_slots,
        available_slots=available_slots,
        occupied_slots=occupied,
        occupancy_percentage=percentage,
    )


def location_availability(client, location_id: str) -> ZoneAvailability:
    return compute_availability(list_zones(client, location_id), location_id=location_id)


class AvailabilityWatcher:
    """
    Keeps the latest ZoneAvailability for one location.

    fetch_zones: returns the location's complete zone list
    on_update:   receives every freshly computed snapshot
    """

    def __init__(
        self,
        location_id: str,
        fetch_zones: Callable[[], List[dict]],
        on_update: Optional[Callable[[ZoneAvailability], None]] = None,
    ):
        self.location_id = location_id
        self._fetch_zones = fetch_zones
        self._on_update = on_update
        self._lock = Lock()
        self.latest: Optional[ZoneAvailability] = None
        self.refresh_count = 0

    def refresh(self) -> ZoneAvailability:
        with self._lock:
            snapshot = compute_availability(self._fetch_zones(), location_id=self.location_id)
            self.latest = snapshot
            self.refresh_count += 1

        if self._on_update:
            self._on_update(snapshot)
        return snapshot

    def handle_change(self, payload: Optional[dict] = None) -> ZoneAvailability:
        """Realtime callback. The payload is deliberately ignored."""
        logger.debug(f"Zone change for location {self.location_id}; recomputing availability")
        return self.refresh()
