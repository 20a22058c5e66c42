"""Client for the OC Transpo real-time arrivals API with stale-data fallback."""
from octranspo_fetch.api.errors import (
    MissingFieldError,
    NoReplyError,
    NoRoutesFoundError,
    OCTranspoError,
    TransportError,
    UpstreamError,
)
from octranspo_fetch.api.models import (
    NextTripsResult,
    RouteInfo,
    RouteSummary,
    RouteTrips,
    SimpleTrip,
    TripRecord,
)
from octranspo_fetch.client import OCTranspo

__all__ = [
    "MissingFieldError",
    "NextTripsResult",
    "NoReplyError",
    "NoRoutesFoundError",
    "OCTranspo",
    "OCTranspoError",
    "RouteInfo",
    "RouteSummary",
    "RouteTrips",
    "SimpleTrip",
    "TransportError",
    "TripRecord",
    "UpstreamError",
]
