# utils/geo_utils.py
import math
from dataclasses import dataclass

EARTH_RADIUS_METERS = 6371000

# Parul University, Waghodia, Vadodara
CAMPUS_LAT = 22.3039
CAMPUS_LNG = 73.3620
RADIUS_METERS = 2000


def distance_meters(lat1, lng1, lat2, lng2):
    """Great-circle distance in meters between two points given in degrees (haversine)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)
    a = (math.sin(dphi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2)
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@dataclass(frozen=True)
class CampusBoundary:
    lat: float = CAMPUS_LAT
    lng: float = CAMPUS_LNG
    radius: float = RADIUS_METERS

    def distance_from_center(self, lat, lng):
        return distance_meters(lat, lng, self.lat, self.lng)

    def contains(self, lat, lng):
        # the boundary circle itself counts as inside
        return self.distance_from_center(lat, lng) <= self.radius


def within_campus(lat, lng, boundary=None):
    return (boundary or CampusBoundary()).contains(lat, lng)
