"""
OC Transpo client: route summaries and next trips for a stop, with in-memory LRU caches.

When the API returns a route direction with no trips (it intermittently does for
routes that are running), the trips last seen for that stop/route/direction are
substituted, counted down by the time elapsed since they were fetched.
"""
import logging
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from octranspo_fetch.api.errors import MissingFieldError, NoRoutesFoundError
from octranspo_fetch.api.gateway import OCT_BASE, OCT_REQUEST_TIMEOUT_SECONDS, OCTranspoGateway, ResultNode
from octranspo_fetch.api.models import (
    NextTripsResult,
    RouteInfo,
    RouteSummary,
    RouteTrips,
    SimpleTrip,
    TripRecord,
)
from octranspo_fetch.cache.lru import DEFAULT_CACHE_SIZE, LRUCache
from octranspo_fetch.monitoring.stats import ClientStats
from octranspo_fetch.settings import Settings, get_settings
from octranspo_fetch.trips.adjust import adjust_route_trips

logger = logging.getLogger(__name__)

ROUTE_SUMMARY_MAX_AGE_SECONDS = 24 * 60 * 60
NEXT_TRIPS_MAX_AGE_SECONDS = 5 * 60
# RequestProcessingTime is sent as local time, e.g. "20150218101802"
PROCESSING_TIME_FORMAT = "%Y%m%d%H%M%S"


def _parse_processing_time(raw: str) -> datetime:
    raw = raw.strip()
    try:
        return datetime.strptime(raw, PROCESSING_TIME_FORMAT)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw)
    except ValueError as e:
        raise MissingFieldError("t:RequestProcessingTime", f"unparseable value {raw!r}") from e


def _float_value(node: ResultNode, path: str) -> float:
    """Numeric child; empty text counts as 0."""
    raw = node.value(path).strip()
    if not raw:
        return 0.0
    try:
        return float(raw)
    except ValueError as e:
        raise MissingFieldError(path, f"non-numeric value {raw!r}") from e


def _parse_trip(node: ResultNode) -> TripRecord:
    return TripRecord(
        destination=node.value("t:TripDestination"),
        start_time=node.value("t:TripStartTime"),
        # occasionally sent as "5.0"
        adjusted_schedule_time=int(_float_value(node, "t:AdjustedScheduleTime")),
        adjustment_age=_float_value(node, "t:AdjustmentAge"),
        last_trip=node.value("t:LastTripOfSchedule").strip().lower() == "true",
        bus_type=node.value("t:BusType"),
        gps_speed=_float_value(node, "t:GPSSpeed"),
        latitude=_float_value(node, "t:Latitude"),
        longitude=_float_value(node, "t:Longitude"),
    )


def _normalize_route_nos(route_nos: str | Iterable[str]) -> list[str]:
    """Accept one route number or many; drop duplicates keeping first-seen order."""
    if isinstance(route_nos, str):
        route_nos = [route_nos]
    return list(dict.fromkeys(str(r) for r in route_nos))


class OCTranspo:
    """Client for the OC Transpo real-time API. Caches and counters belong to the instance."""

    def __init__(
        self,
        application_id: str,
        application_key: str,
        *,
        route_cache_size: int = DEFAULT_CACHE_SIZE,
        trip_cache_size: int = DEFAULT_CACHE_SIZE,
        base_url: str = OCT_BASE,
        timeout: float = OCT_REQUEST_TIMEOUT_SECONDS,
        route_summary_max_age: float = ROUTE_SUMMARY_MAX_AGE_SECONDS,
        next_trips_max_age: float = NEXT_TRIPS_MAX_AGE_SECONDS,
        gateway: OCTranspoGateway | None = None,
        clock: Callable[[], float] | None = None,
    ):
        self._gateway = gateway or OCTranspoGateway(
            application_id, application_key, base_url=base_url, timeout=timeout
        )
        self._clock = clock or time.time
        self._route_summary_max_age = route_summary_max_age
        self._next_trips_max_age = next_trips_max_age
        self._route_summary_cache = LRUCache(route_cache_size, clock=self._clock)
        # (stop, route_no, direction) -> list[TripRecord]
        self._trips_cache = LRUCache(trip_cache_size, clock=self._clock)
        # (stop, route_no) -> NextTripsResult
        self._results_cache = LRUCache(trip_cache_size, clock=self._clock)
        self._stats = ClientStats()

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs) -> "OCTranspo":
        settings = settings or get_settings()
        return cls(
            settings.application_id,
            settings.application_key,
            route_cache_size=settings.route_cache_size,
            trip_cache_size=settings.trip_cache_size,
            base_url=settings.base_url,
            timeout=settings.request_timeout_seconds,
            route_summary_max_age=settings.route_summary_max_age_seconds,
            next_trips_max_age=settings.next_trips_max_age_seconds,
            **kwargs,
        )

    def clear_cache(self) -> None:
        self._route_summary_cache.clear()
        self._trips_cache.clear()
        self._results_cache.clear()

    def requests(self) -> int:
        """Number of API calls made by this instance since it was created."""
        return self._stats.total_requests()

    def stats(self) -> dict:
        return self._stats.snapshot()

    def cache_stats(self) -> dict[str, int]:
        caches = (self._route_summary_cache, self._trips_cache, self._results_cache)
        return {
            "hits": sum(c.hits for c in caches),
            "misses": sum(c.misses for c in caches),
        }

    def _fetch(self, resource: str, params: list[tuple[str, str]]) -> ResultNode:
        self._stats.record_request(resource)
        return self._gateway.fetch(resource, params)

    def get_route_summary_for_stop(
        self, stop: str, max_age: float | None = None
    ) -> RouteSummary:
        """
        Routes serving a stop. Cached per stop for max_age seconds (default one day).
        Raises NoRoutesFoundError when the API lists none.
        """
        if max_age is None:
            max_age = self._route_summary_max_age
        cached = self._route_summary_cache.get(stop, max_age=max_age)
        if cached is not None:
            logger.info(
                "telemetry route_summary_served cache_hit=true stop=%s",
                stop,
                extra={"stop": stop, "cache_hit": True},
            )
            return cached.payload

        logger.info(
            "telemetry route_summary_served cache_hit=false stop=%s",
            stop,
            extra={"stop": stop, "cache_hit": False},
        )
        xresult = self._fetch("GetRouteSummaryForStop", [("stopNo", stop)])
        summary = RouteSummary(
            stop_id=xresult.value("t:StopNo"),
            stop_description=xresult.value("t:StopDescription"),
            routes=[
                RouteInfo(
                    route_no=route.value("t:RouteNo"),
                    direction_id=route.value("t:DirectionID"),
                    direction=route.value("t:Direction"),
                    heading=route.value("t:RouteHeading"),
                )
                for route in xresult.children("t:Routes/t:Route")
            ],
        )
        if not summary.routes:
            raise NoRoutesFoundError(stop)

        self._route_summary_cache.put(stop, summary)
        logger.info(
            "telemetry route_summary_fetched stop=%s count=%s",
            stop,
            len(summary.routes),
            extra={"stop": stop, "count": len(summary.routes)},
        )
        return summary

    def get_next_trips_for_stop(
        self, stop: str, route_no: str, max_age: float | None = None
    ) -> NextTripsResult:
        """
        Next trips for a route at a stop; may hold several directions of the route.

        A result fetched at most max_age seconds ago (default five minutes) is
        returned from memory, counted down to now. Directions that come back empty
        are filled from the last trips seen for them, if any, and marked cached.
        """
        if max_age is None:
            max_age = self._next_trips_max_age
        result_key = (stop, route_no)
        if max_age > 0:
            recent = self._results_cache.get(result_key, max_age=max_age)
            if recent is not None:
                now = self._clock()
                elapsed = recent.age(now)
                logger.info(
                    "telemetry next_trips_served cache_hit=true stop=%s route=%s age_s=%.0f",
                    stop,
                    route_no,
                    elapsed,
                    extra={"stop": stop, "route": route_no, "cache_hit": True},
                )
                result: NextTripsResult = recent.payload
                result.routes = [
                    adjust_route_trips(r, r.trips, elapsed)
                    if r.trips
                    else self._fill_from_cache((stop, r.route_no, r.direction), r, now)
                    for r in result.routes
                ]
                return result

        logger.info(
            "telemetry next_trips_served cache_hit=false stop=%s route=%s",
            stop,
            route_no,
            extra={"stop": stop, "route": route_no, "cache_hit": False},
        )
        now = self._clock()
        xresult = self._fetch("GetNextTripsForStop", [("stopNo", stop), ("routeNo", route_no)])
        result = NextTripsResult(
            stop_id=xresult.value("t:StopNo"),
            stop_description=xresult.value("t:StopLabel"),
            routes=[],
            fetch_time=datetime.fromtimestamp(now, tz=timezone.utc),
        )

        # Directions as the API sent them; filled ones stay empty here so that a
        # later refill is measured from the trip cache entry, not from this call.
        fetched: list[RouteTrips] = []
        for xroute in xresult.children("t:Route/t:RouteDirection"):
            xroute.raise_for_error(f"Error for route: {route_no}")
            route = RouteTrips(
                cached=False,
                route_no=xroute.value("t:RouteNo"),
                route_label=xroute.value("t:RouteLabel"),
                direction=xroute.value("t:Direction"),
                request_processing_time=_parse_processing_time(xroute.value("t:RequestProcessingTime")),
                trips=[_parse_trip(t) for t in xroute.children("t:Trips/t:Trip")],
            )
            fetched.append(route)
            trips_key = (stop, route.route_no, route.direction)
            if route.trips:
                self._trips_cache.put(trips_key, route.trips, now=now)
            else:
                route = self._fill_from_cache(trips_key, route, now)
            result.routes.append(route)

        if any(r.trips for r in fetched):
            self._results_cache.put(result_key, result.model_copy(update={"routes": fetched}), now=now)
        return result

    def _fill_from_cache(self, key: tuple[str, str, str], route: RouteTrips, now: float) -> RouteTrips:
        entry = self._trips_cache.get(key)
        if entry is None or not entry.payload:
            logger.info(
                "telemetry trips_fallback_miss stop=%s route=%s direction=%s",
                *key,
                extra={"stop": key[0], "route": key[1], "direction": key[2]},
            )
            return route
        elapsed = entry.age(now)
        logger.info(
            "telemetry trips_fallback_hit stop=%s route=%s direction=%s age_s=%.0f",
            *key,
            elapsed,
            extra={"stop": key[0], "route": key[1], "direction": key[2], "age_s": elapsed},
        )
        return adjust_route_trips(route, entry.payload, elapsed)

    def simple_get_next_trips_for_stop(
        self,
        stop: str,
        route_nos: str | Iterable[str] | None = None,
        route_label: str | None = None,
    ) -> list[SimpleTrip]:
        """
        Every upcoming trip at a stop, flattened and sorted by arrival_in_minutes.

        route_nos may be one route number, several, or None for every route serving
        the stop. With route_label, only directions carrying that label are kept.
        """
        if route_nos is None:
            summary = self.get_route_summary_for_stop(stop)
            route_nos = [r.route_no for r in summary.routes]

        answer: list[SimpleTrip] = []
        for route_no in _normalize_route_nos(route_nos):
            oct_result = self.get_next_trips_for_stop(stop, route_no)
            for route in oct_result.routes:
                if route_label is not None and route.route_label != route_label:
                    continue
                for trip in route.trips:
                    answer.append(
                        SimpleTrip(
                            **trip.model_dump(),
                            stop_id=oct_result.stop_id,
                            stop_description=oct_result.stop_description,
                            route_no=route.route_no,
                            route_label=route.route_label,
                            direction=route.direction,
                            arrival_in_minutes=trip.adjusted_schedule_time,
                            live=trip.adjustment_age > 0,
                        )
                    )

        # list.sort is stable: equal arrivals keep discovery order
        answer.sort(key=lambda t: t.arrival_in_minutes)
        return answer


