"""Count cached arrival estimates down by the wall-clock time since they were stored."""
import math
from datetime import timedelta

from octranspo_fetch.api.models import RouteTrips, TripRecord


def elapsed_minutes_rounded(elapsed_seconds: float) -> int:
    """Whole minutes, halves rounded up (90s -> 2, 150s -> 3)."""
    return int(math.floor(elapsed_seconds / 60 + 0.5))


def adjust_trips(trips: list[TripRecord], elapsed_seconds: float) -> list[TripRecord]:
    """
    Return adjusted deep copies of trips as seen elapsed_seconds later.
    Arrivals count down; live estimates (adjustment_age > 0) get older;
    trips that have already left are dropped. The input list is not touched.
    """
    elapsed_seconds = max(0.0, elapsed_seconds)
    shift = elapsed_minutes_rounded(elapsed_seconds)
    adjusted: list[TripRecord] = []
    for trip in trips:
        t = trip.model_copy(deep=True)
        t.adjusted_schedule_time -= shift
        if t.adjustment_age > 0:
            t.adjustment_age += elapsed_seconds / 60
        if t.adjusted_schedule_time < 0:
            continue
        adjusted.append(t)
    return adjusted


def adjust_route_trips(route: RouteTrips, trips: list[TripRecord], elapsed_seconds: float) -> RouteTrips:
    """
    Copy of route carrying trips adjusted by elapsed_seconds, marked as cached.
    When every trip has already left, the copy has no trips and keeps route.cached.
    """
    elapsed_seconds = max(0.0, elapsed_seconds)
    adjusted = adjust_trips(trips, elapsed_seconds)
    if not adjusted:
        return route.model_copy(update={"trips": []}, deep=True)
    return route.model_copy(
        update={
            "cached": True,
            "request_processing_time": route.request_processing_time + timedelta(seconds=elapsed_seconds),
            "trips": adjusted,
        },
        deep=True,
    )
