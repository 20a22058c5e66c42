"""Pytest configuration, fixtures and canned OC Transpo XML replies."""
import sys
from pathlib import Path

import pytest

# Ensure project root is on path when running pytest without installing
root = Path(__file__).resolve().parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from octranspo_fetch.api.gateway import parse_result  # noqa: E402
from octranspo_fetch.client import OCTranspo  # noqa: E402

SOAP_OPEN = '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/"><soap:Body>'
SOAP_CLOSE = "</soap:Body></soap:Envelope>"
T = 'xmlns="http://tempuri.org/"'


def _wrap(resource: str, inner: str) -> str:
    return (
        f'{SOAP_OPEN}<{resource}Response xmlns="http://octranspo.com">'
        f"<{resource}Result>{inner}</{resource}Result>"
        f"</{resource}Response>{SOAP_CLOSE}"
    )


def route_summary_xml(stop="3017", description="RIDEAU A", routes=(("95", "0", "Eastbound", "Orléans"),), error=""):
    rows = "".join(
        f"<Route><RouteNo>{no}</RouteNo><DirectionID>{did}</DirectionID>"
        f"<Direction>{d}</Direction><RouteHeading>{h}</RouteHeading></Route>"
        for no, did, d, h in routes
    )
    return _wrap(
        "GetRouteSummaryForStop",
        f"<StopNo {T}>{stop}</StopNo><StopDescription {T}>{description}</StopDescription>"
        f"<Error {T}>{error}</Error><Routes {T}>{rows}</Routes>",
    )


def trip_xml(
    destination="Orléans",
    start_time="14:25",
    adjusted=10,
    age=2.0,
    last="false",
    bus_type="6EB - 60",
    speed="41.5",
    lat="45.425",
    lon="-75.692",
):
    return (
        f"<Trip><TripDestination>{destination}</TripDestination><TripStartTime>{start_time}</TripStartTime>"
        f"<AdjustedScheduleTime>{adjusted}</AdjustedScheduleTime><AdjustmentAge>{age}</AdjustmentAge>"
        f"<LastTripOfSchedule>{last}</LastTripOfSchedule><BusType>{bus_type}</BusType>"
        f"<Latitude>{lat}</Latitude><Longitude>{lon}</Longitude><GPSSpeed>{speed}</GPSSpeed></Trip>"
    )


def direction_xml(route_no="95", route_label="Orléans", direction="Eastbound", trips=(), error="",
                  processing_time="20150218101802"):
    return (
        f"<RouteDirection><RouteNo>{route_no}</RouteNo><RouteLabel>{route_label}</RouteLabel>"
        f"<Direction>{direction}</Direction><Error>{error}</Error>"
        f"<RequestProcessingTime>{processing_time}</RequestProcessingTime>"
        f"<Trips>{''.join(trips)}</Trips></RouteDirection>"
    )


def next_trips_xml(stop="3017", label="RIDEAU A", directions=(), error=""):
    return _wrap(
        "GetNextTripsForStop",
        f"<StopNo {T}>{stop}</StopNo><StopLabel {T}>{label}</StopLabel>"
        f"<Error {T}>{error}</Error><Route {T}>{''.join(directions)}</Route>",
    )


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGateway:
    """Serves queued XML bodies per resource; the last body repeats."""

    def __init__(self):
        self.replies: dict[str, list[str]] = {}
        self.calls: list[tuple[str, list]] = []

    def queue(self, resource: str, *bodies: str) -> None:
        self.replies.setdefault(resource, []).extend(bodies)

    def fetch(self, resource, params):
        self.calls.append((resource, list(params)))
        bodies = self.replies[resource]
        body = bodies.pop(0) if len(bodies) > 1 else bodies[0]
        return parse_result(body, resource)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(gateway, clock):
    return OCTranspo("app-id", "app-key", gateway=gateway, clock=clock)
