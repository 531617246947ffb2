"""
US location lookups.

Resolves zip codes and coordinates to stored US cities. Cities missing from
the database are fetched from public geocoding APIs (zippopotam.us for zip
codes, Nominatim for reverse geocoding) and saved for the next lookup.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from cracksense_ai.core.database.entities.professionals import UsCity
from cracksense_ai.core.database.repositories.professionals import UsCityRepository
from cracksense_ai.core.logging_config import get_logger
from cracksense_ai.server.core.config import settings

logger = get_logger(__name__)

EARTH_RADIUS_MILES = 3959
# Stored cities further than this from a coordinate are not treated as "nearest".
NEAREST_CITY_MAX_MILES = 25.0

_US_ZIP = re.compile(r"^\d{5}(-\d{4})?$")


@dataclass
class ZipCodeInfo:
    """A coordinate resolved to a zip code and its city."""

    zip_code: str
    city: UsCity
    latitude: float
    longitude: float


def is_valid_us_zip_code(zip_code: str) -> bool:
    """Accept ``12345`` and ``12345-6789``."""
    return bool(_US_ZIP.match(zip_code or ""))


def normalize_zip_code(zip_code: str) -> str:
    """Drop the +4 extension of a zip code."""
    return zip_code.split("-")[0]


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates, in miles."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = math.sin(d_lat / 2) ** 2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


class LocationService:
    """
    City lookups backed by the database and two public geocoding APIs.

    Args:
        session: Database session
        client: HTTP client for the external APIs. When omitted the service
            creates one and closes it in ``aclose``
        zippopotam_base_url: Override of the configured zip code API URL
        nominatim_base_url: Override of the configured reverse geocoding URL
    """

    def __init__(
        self,
        session: AsyncSession,
        client: Optional[httpx.AsyncClient] = None,
        zippopotam_base_url: Optional[str] = None,
        nominatim_base_url: Optional[str] = None,
    ) -> None:
        location = settings.location
        self.session = session
        self.cities = UsCityRepository(session)
        self._owns_client = client is None
        self._http = client or httpx.AsyncClient(timeout=location.timeout_seconds, follow_redirects=True)
        self._zippopotam = (zippopotam_base_url or location.zippopotam_base_url).rstrip("/")
        self._nominatim = (nominatim_base_url or location.nominatim_base_url).rstrip("/")

    async def aclose(self) -> None:
        """Close the HTTP client when this service created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> LocationService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def get_city_from_zip_code(self, zip_code: str) -> Optional[UsCity]:
        """Find the city of a zip code, fetching and saving it when unknown."""
        city = await self.cities.get_by_zip_code(zip_code)
        if city is not None:
            logger.debug(f"Found stored city for zip code {zip_code}: {city.city_name}")
            return city
        logger.info(f"No stored city for zip code {zip_code}, querying zip code API")
        return await self._fetch_city_from_zip_api(zip_code)

    async def get_zip_code_from_coordinates(self, latitude: float, longitude: float) -> Optional[ZipCodeInfo]:
        """
        Resolve coordinates to the nearest stored city and one of its zip codes.

        Falls back to reverse geocoding when no stored city is close enough.
        """
        nearest = await self._nearest_city(latitude, longitude)
        if nearest is not None:
            zip_codes = await self.cities.get_zip_codes(nearest.id)
            if zip_codes:
                return ZipCodeInfo(zip_code=zip_codes[0], city=nearest, latitude=latitude, longitude=longitude)
        return await self._fetch_location_from_reverse_geocoding(latitude, longitude)

    async def get_city_by_name_and_state(self, city_name: str, state_code: str) -> Optional[UsCity]:
        return await self.cities.get_by_name_and_state(city_name, state_code)

    async def get_cities_in_radius(self, latitude: float, longitude: float, radius_miles: float) -> List[UsCity]:
        """Stored cities within ``radius_miles``, nearest first."""
        in_range = []
        for city in await self.cities.list_with_coordinates():
            distance = calculate_distance(latitude, longitude, city.latitude, city.longitude)
            if distance <= radius_miles:
                in_range.append((distance, city))
        in_range.sort(key=lambda pair: pair[0])
        return [city for _, city in in_range]

    async def _nearest_city(self, latitude: float, longitude: float) -> Optional[UsCity]:
        cities = await self.get_cities_in_radius(latitude, longitude, NEAREST_CITY_MAX_MILES)
        return cities[0] if cities else None

    async def _save_city(self, city: UsCity, zip_code: str) -> UsCity:
        city = await self.cities.create(city)
        await self.cities.add_zip_code(city.id, zip_code)
        return city

    async def _fetch_city_from_zip_api(self, zip_code: str) -> Optional[UsCity]:
        try:
            response = await self._http.get(f"{self._zippopotam}/us/{zip_code}")
            if response.status_code != 200:
                return None
            places = response.json().get("places") or []
            if not places:
                return None
            place = places[0]
            city = UsCity(
                city_name=place["place name"],
                state_code=place["state abbreviation"],
                state_name=place["state"],
                latitude=float(place["latitude"]),
                longitude=float(place["longitude"]),
            )
            return await self._save_city(city, zip_code)
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error(f"Failed to fetch city from zip code API: {e}")
            return None

    async def _fetch_location_from_reverse_geocoding(self, latitude: float, longitude: float) -> Optional[ZipCodeInfo]:
        try:
            response = await self._http.get(
                f"{self._nominatim}/reverse",
                params={
                    "format": "json",
                    "lat": latitude,
                    "lon": longitude,
                    "zoom": 18,
                    "addressdetails": 1,
                },
            )
            if response.status_code != 200:
                return None
            address = response.json().get("address") or {}
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch location from reverse geocoding: {e}")
            return None

        zip_code = address.get("postcode")
        city_name = address.get("city") or address.get("town") or address.get("village")
        state = address.get("state")
        if not (zip_code and city_name and state):
            return None

        zip_code = normalize_zip_code(zip_code)
        city = await self.get_city_from_zip_code(zip_code)
        if city is None:
            city = await self._save_city(
                UsCity(
                    city_name=city_name,
                    state_code=state,
                    state_name=state,
                    latitude=latitude,
                    longitude=longitude,
                ),
                zip_code,
            )
        return ZipCodeInfo(zip_code=zip_code, city=city, latitude=latitude, longitude=longitude)
