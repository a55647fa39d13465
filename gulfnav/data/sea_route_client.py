"""
Client for the external sea-route provider (Datalastic extended API).

GET <base_url>/route?api-key=..&lat_from=..&lon_from=..&lat_to=..&lon_to=..

The response is GeoJSON: ``data.route.geometry.coordinates`` holds
``[lon, lat]`` pairs and ``data.route.properties.total_dist_nm`` the
provider's distance. Every failure mode (HTTP, timeout, malformed body)
surfaces as SeaRouteError; the route engine catches it and falls back to
the local network.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import requests

from gulfnav.config import Settings, get_settings
from gulfnav.resilience import CircuitBreaker, CircuitOpenError, with_retry
from gulfnav.routes.models import SeaRouteWaypoint

logger = logging.getLogger(__name__)


class SeaRouteError(RuntimeError):
    """The sea-route provider could not produce a route."""


@dataclass
class ProviderRoute:
    """Raw provider result before land correction."""
    waypoints: List[SeaRouteWaypoint]
    distance_nm: float


class SeaRouteClient:
    """
    Thin synchronous client for coordinate-to-coordinate sea routes.

    Each request is bounded by ``settings.sea_route_timeout_s`` and retried
    up to ``settings.sea_route_max_attempts`` times on transport errors.
    Consecutive failures open a circuit breaker, after which calls fail
    fast with SeaRouteError until the recovery timeout passes.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        breaker: Optional[CircuitBreaker] = None,
        retry_min_wait: float = 0.5,
        retry_max_wait: float = 8.0,
    ):
        self.settings = settings or get_settings()
        self.session = session or requests.Session()
        self.breaker = breaker or CircuitBreaker(name="sea_route_api")

        self._get_with_retry = with_retry(
            max_attempts=self.settings.sea_route_max_attempts,
            min_wait=retry_min_wait,
            max_wait=retry_max_wait,
            exceptions=(requests.ConnectionError, requests.Timeout),
        )(self._get)

    @property
    def configured(self) -> bool:
        return self.settings.sea_route_configured

    @property
    def available(self) -> bool:
        """Configured and not currently short-circuited."""
        return self.configured and not self.breaker.is_open

    def _get(self, url: str, params: dict) -> dict:
        response = self.session.get(
            url,
            params=params,
            headers={"Accept": "application/json"},
            timeout=self.settings.sea_route_timeout_s,
        )
        if not response.ok:
            raise SeaRouteError(_error_message(response))
        return response.json()

    def get_sea_route_by_coordinates(
        self,
        from_lat: float,
        from_lon: float,
        to_lat: float,
        to_lon: float,
    ) -> ProviderRoute:
        """
        Fetch a sea route between two coordinates.

        Raises:
            SeaRouteError: provider unconfigured, unreachable, short-circuited,
                or returned an unusable body
        """
        if not self.configured:
            raise SeaRouteError("Sea route provider is not configured")

        url = self.settings.sea_route_base_url.rstrip("/") + "/route"
        params = {
            "api-key": self.settings.sea_route_api_key,
            "lat_from": from_lat,
            "lon_from": from_lon,
            "lat_to": to_lat,
            "lon_to": to_lon,
        }
        logger.info(f"Requesting sea route ({from_lat:.4f}, {from_lon:.4f}) -> ({to_lat:.4f}, {to_lon:.4f})")

        try:
            body = self.breaker(self._get_with_retry)(url, params)
        except CircuitOpenError as e:
            raise SeaRouteError(str(e)) from e
        except requests.RequestException as e:
            raise SeaRouteError(f"Sea route request failed: {e}") from e
        except ValueError as e:
            # requests raises a ValueError subclass on a non-JSON body
            raise SeaRouteError(f"Sea route response is not JSON: {e}") from e

        return parse_route_response(body)


def _error_message(response: requests.Response) -> str:
    message = f"Sea route API error: {response.status_code} {response.reason}"
    try:
        body = response.json()
    except ValueError:
        return message
    if isinstance(body, dict):
        meta = body.get("meta") or {}
        detail = meta.get("message") if isinstance(meta, dict) else None
        detail = detail or body.get("message")
        if detail:
            return str(detail)
    return message


def parse_route_response(body: dict) -> ProviderRoute:
    """Convert the provider's GeoJSON body into waypoints and distance."""
    try:
        route = body["data"]["route"]
        coordinates = route["geometry"]["coordinates"]
        distance = float(route.get("properties", {}).get("total_dist_nm", 0.0))
        waypoints = [SeaRouteWaypoint(lat=float(lat), lon=float(lon)) for lon, lat in coordinates]
    except (KeyError, TypeError, ValueError) as e:
        raise SeaRouteError(f"Malformed sea route response: {e}") from e

    return ProviderRoute(waypoints=waypoints, distance_nm=distance)
