"""Great-circle distance helpers"""
import math

EARTH_RADIUS_METERS = 6371e3


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Distance between two lat/lng points in meters (haversine formula)

    Args:
        lat1, lng1: First point in decimal degrees
        lat2, lng2: Second point in decimal degrees

    Returns:
        Distance in meters on a sphere of radius 6371 km
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Latitude within [-90, 90], longitude within [-180, 180], both finite"""
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0
