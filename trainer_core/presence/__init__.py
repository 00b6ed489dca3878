from trainer_core.presence.controller import PresenceController
from trainer_core.presence.location_feed import LocationFeed

__all__ = ["PresenceController", "LocationFeed"]
