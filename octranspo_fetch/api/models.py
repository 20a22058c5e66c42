"""Pydantic models for OC Transpo API results."""
from datetime import datetime

from pydantic import BaseModel


class RouteInfo(BaseModel):
    route_no: str
    direction_id: str
    direction: str
    heading: str


class RouteSummary(BaseModel):
    stop_id: str
    stop_description: str
    routes: list[RouteInfo]


class TripRecord(BaseModel):
    destination: str
    start_time: str  # e.g. "14:25", kept as the API sends it
    adjusted_schedule_time: int  # minutes until arrival
    adjustment_age: float  # minutes since the estimate was adjusted; <= 0 means scheduled, not live
    last_trip: bool = False
    bus_type: str = ""
    gps_speed: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0


class RouteTrips(BaseModel):
    cached: bool = False
    route_no: str
    route_label: str
    direction: str
    request_processing_time: datetime
    trips: list[TripRecord]


class NextTripsResult(BaseModel):
    stop_id: str
    stop_description: str
    routes: list[RouteTrips]
    fetch_time: datetime


class SimpleTrip(TripRecord):
    """One trip flattened with its stop and route context."""

    stop_id: str
    stop_description: str
    route_no: str
    route_label: str
    direction: str
    arrival_in_minutes: int
    live: bool
