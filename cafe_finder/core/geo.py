"""
Great-circle helpers used to annotate cafés with distances.

Haversine on a spherical Earth; good to a fraction of a percent, which is
plenty for "how far is this café". No special handling near the poles or
the antimeridian beyond what the formula itself gives.
"""
import math

EARTH_RADIUS_M = 6371e3
METERS_PER_MILE = 1609.34


def distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance between two points, in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def format_distance(meters: float) -> str:
    """
    Short meters below 1 km, miles (one decimal) from 1 km upwards.
    The mixed units are what the client renders, keep them.
    """
    if meters < 1000:
        # half-up like the browser's Math.round
        return f"{math.floor(meters + 0.5)} m"
    return f"{meters / METERS_PER_MILE:.1f} mi"


def destination_point(lat: float, lng: float, bearing_rad: float, distance_m: float) -> tuple[float, float]:
    """Point reached from (lat, lng) after distance_m along bearing_rad."""
    delta = distance_m / EARTH_RADIUS_M
    phi1 = math.radians(lat)
    lambda1 = math.radians(lng)

    sin_phi2 = (
        math.sin(phi1) * math.cos(delta)
        + math.cos(phi1) * math.sin(delta) * math.cos(bearing_rad)
    )
    phi2 = math.asin(max(-1.0, min(1.0, sin_phi2)))
    lambda2 = lambda1 + math.atan2(
        math.sin(bearing_rad) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * sin_phi2,
    )

    out_lat = max(-90.0, min(90.0, math.degrees(phi2)))
    out_lng = (math.degrees(lambda2) + 540.0) % 360.0 - 180.0
    return out_lat, out_lng
