"""
Domain services for the mosques app: geospatial queries over any model
carrying latitude/longitude/geohash columns, and the two outbound HTTP
integrations (address geocoding and prayer time calendars).
"""
import logging
import math
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

import geohash2
import requests
from django.conf import settings
from django.db.models import Q, QuerySet
from django.utils import timezone

from core.exceptions import GeocodingError

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6371000

# Geohash prefix length used to group markers at a given map zoom level
ZOOM_PRECISION = [
    (3, 2),
    (5, 3),
    (8, 4),
    (11, 5),
    (14, 6),
]
MAX_CLUSTER_PRECISION = 7


class GeoService:
    """
    Spatial helpers shared by mosques and businesses. Distances are computed
    with the haversine formula after a bounding box prefilter on the
    indexed coordinate columns.
    """

    @staticmethod
    def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """
        Great-circle distance in meters between two coordinates.
        """
        phi1 = math.radians(lat1)
        phi2 = math.radians(lat2)
        d_phi = math.radians(lat2 - lat1)
        d_lambda = math.radians(lon2 - lon1)
        a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
        return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))

    @staticmethod
    def bounding_box(lat: float, lon: float, radius_m: float) -> Tuple[float, float, float, float]:
        """
        Returns (north, south, east, west) enclosing a circle of radius_m.
        """
        d_lat = math.degrees(radius_m / EARTH_RADIUS_M)
        cos_lat = math.cos(math.radians(lat))
        if cos_lat < 1e-9:
            d_lon = 180.0
        else:
            d_lon = min(180.0, math.degrees(radius_m / (EARTH_RADIUS_M * cos_lat)))
        north = min(90.0, lat + d_lat)
        south = max(-90.0, lat - d_lat)
        east = lon + d_lon
        west = lon - d_lon
        if east > 180:
            east -= 360
        if west < -180:
            west += 360
        return north, south, east, west

    @staticmethod
    def find_in_viewport(queryset: QuerySet, north: float, south: float, east: float, west: float) -> QuerySet:
        """
        Records whose coordinates fall inside the box. A west edge greater
        than the east edge means the box crosses the antimeridian.
        """
        queryset = queryset.filter(
            latitude__isnull=False,
            longitude__isnull=False,
            latitude__gte=south,
            latitude__lte=north,
        )
        if west <= east:
            return queryset.filter(longitude__gte=west, longitude__lte=east)
        return queryset.filter(Q(longitude__gte=west) | Q(longitude__lte=east))

    @staticmethod
    def find_nearby(queryset: QuerySet, lat: float, lon: float, radius_m: float) -> List:
        """
        Records within radius_m of the point, closest first. Each returned
        instance carries a ``distance_meters`` attribute.
        """
        north, south, east, west = GeoService.bounding_box(lat, lon, radius_m)
        results = []
        for obj in GeoService.find_in_viewport(queryset, north, south, east, west):
            distance = GeoService.haversine_m(lat, lon, obj.latitude, obj.longitude)
            if distance <= radius_m:
                obj.distance_meters = round(distance, 1)
                results.append(obj)
        results.sort(key=lambda obj: obj.distance_meters)
        return results

    @staticmethod
    def precision_for_zoom(zoom: int) -> int:
        for max_zoom, precision in ZOOM_PRECISION:
            if zoom <= max_zoom:
                return precision
        return MAX_CLUSTER_PRECISION

    @staticmethod
    def get_cluster_aggregates(queryset: QuerySet, bbox: Tuple[float, float, float, float], zoom: int) -> List[Dict]:
        """
        Groups the records inside bbox by geohash prefix. Lower zoom levels
        use shorter prefixes and therefore larger clusters.

        Args:
            queryset: records with latitude/longitude/geohash columns
            bbox: (north, south, east, west)
            zoom: map zoom level, 0-20

        Returns:
            List of {'geohash', 'center': [lat, lon], 'count'} dictionaries
        """
        precision = GeoService.precision_for_zoom(zoom)
        buckets = OrderedDict()
        points = GeoService.find_in_viewport(queryset, *bbox).values_list('geohash', 'latitude', 'longitude')
        for geohash, lat, lon in points.order_by('geohash'):
            key = geohash[:precision]
            bucket = buckets.setdefault(key, {'lat': 0.0, 'lon': 0.0, 'count': 0})
            bucket['lat'] += lat
            bucket['lon'] += lon
            bucket['count'] += 1

        return [
            {
                'geohash': key,
                'center': [bucket['lat'] / bucket['count'], bucket['lon'] / bucket['count']],
                'count': bucket['count'],
            }
            for key, bucket in buckets.items()
        ]

    @staticmethod
    def encode_geohash(lat: float, lon: float, precision: int = 6) -> str:
        return geohash2.encode(lat, lon, precision)

    @staticmethod
    def is_location_valid(lat: float, lon: float) -> bool:
        return -90 <= lat <= 90 and -180 <= lon <= 180


class GeocodingService:
    """
    Adapter around the Google Geocoding API. Coordinates are returned
    exactly as the provider reports them.
    """

    def __init__(self, api_key: str = None, api_url: str = None):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.api_url = api_url or settings.GEOCODING_API_URL

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def geocode(self, address: str) -> Optional[Tuple[float, float]]:
        """
        Resolves a postal address to (latitude, longitude).

        Returns None when no key is configured or the address has no match.
        Raises GeocodingError on transport failures and provider errors.
        """
        if not self.enabled:
            logger.debug("Geocoding skipped, no API key configured")
            return None

        try:
            response = requests.get(
                self.api_url,
                params={'address': address, 'key': self.api_key},
                timeout=settings.HTTP_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Geocoding request failed for %r: %s", address, e)
            raise GeocodingError()

        api_status = payload.get('status')
        if api_status == 'ZERO_RESULTS':
            return None
        if api_status != 'OK' or not payload.get('results'):
            logger.warning("Geocoding returned %s for %r", api_status, address)
            raise GeocodingError(f"Geocoding failed: {api_status}")

        location = payload['results'][0]['geometry']['location']
        return location['lat'], location['lng']


class PrayerTimesService:
    """
    Forwards prayer time calendar lookups to the Aladhan API.
    """

    DEFAULT_LATITUDE = '40.7128'
    DEFAULT_LONGITUDE = '-74.0060'
    DEFAULT_METHOD = '2'

    def __init__(self, api_url: str = None):
        self.api_url = (api_url or settings.PRAYER_TIMES_API_URL).rstrip('/')

    def fetch_calendar(self, latitude=None, longitude=None, method=None, month=None, year=None) -> Dict:
        today = timezone.now()
        year = year or today.year
        month = month or today.month
        response = requests.get(
            f"{self.api_url}/{year}/{month}",
            params={
                'latitude': latitude or self.DEFAULT_LATITUDE,
                'longitude': longitude or self.DEFAULT_LONGITUDE,
                'method': method or self.DEFAULT_METHOD,
            },
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return response.json()
