"""
DevCamper Backend — Spherical Geometry Helpers
================================================

What:  Pure functions behind the radius search.
How:   A distance is turned into an angular radius (distance / Earth radius).
       The store is queried with a latitude/longitude bounding box that
       encloses the spherical cap, then each candidate is checked exactly
       with the haversine central angle.

Units:
    EARTH_RADIUS is 6378, so distances are kilometres. Callers that want
    miles would pass 3963 as the radius instead.
"""

import math
from typing import Tuple

EARTH_RADIUS = 6378

# Absorbs floating point noise for points exactly on the cap boundary
_EPSILON = 1e-12


def angular_radius(distance: float, sphere_radius: float = EARTH_RADIUS) -> float:
    """Angular radius in radians of a cap whose surface radius is `distance`."""
    return distance / sphere_radius


def central_angle(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle angle in radians between two points given in degrees (haversine)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lng2 - lng1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * math.asin(min(1.0, math.sqrt(a)))


def within_cap(
    center_lat: float,
    center_lng: float,
    lat: float,
    lng: float,
    radius: float,
) -> bool:
    """True when (lat, lng) lies inside the spherical cap, boundary included."""
    return central_angle(center_lat, center_lng, lat, lng) <= radius + _EPSILON


def bounding_box(lat: float, lng: float, radius: float) -> Tuple[float, float, float, float]:
    """
    Smallest latitude/longitude box containing the cap.

    Returns (min_lat, max_lat, min_lng, max_lng) in degrees. When the cap
    reaches a pole or crosses the antimeridian the longitude range widens to
    the whole circle; the exact test in within_cap() still filters correctly.
    """
    if radius >= math.pi:
        return -90.0, 90.0, -180.0, 180.0

    d_lat = math.degrees(radius)
    min_lat = lat - d_lat
    max_lat = lat + d_lat

    if min_lat <= -90.0 or max_lat >= 90.0:
        return max(min_lat, -90.0), min(max_lat, 90.0), -180.0, 180.0

    ratio = math.sin(radius) / math.cos(math.radians(lat))
    if ratio >= 1.0:
        return min_lat, max_lat, -180.0, 180.0

    d_lng = math.degrees(math.asin(ratio))
    min_lng = lng - d_lng
    max_lng = lng + d_lng
    if min_lng < -180.0 or max_lng > 180.0:
        return min_lat, max_lat, -180.0, 180.0

    return min_lat, max_lat, min_lng, max_lng
