# region Imports
import math
from typing import Iterable
from .config import EARTH_RADIUS_KM
from .models import HorizontalPosition
# endregion

# region Great-circle Distance and Azimuth
def epicentral_distance_deg(p0: HorizontalPosition, p1: HorizontalPosition) -> float:
    lat0, lat1 = math.radians(p0.latitude), math.radians(p1.latitude)
    dlon = math.radians(p1.longitude - p0.longitude)
    y = math.hypot(
        math.cos(lat1) * math.sin(dlon),
        math.cos(lat0) * math.sin(lat1) - math.sin(lat0) * math.cos(lat1) * math.cos(dlon),
    )
    x = math.sin(lat0) * math.sin(lat1) + math.cos(lat0) * math.cos(lat1) * math.cos(dlon)
    return math.degrees(math.atan2(y, x))


def azimuth_deg(p0: HorizontalPosition, p1: HorizontalPosition) -> float:
    """Azimuth of p1 seen from p0, clockwise from north, in [0, 360)."""
    if epicentral_distance_deg(p0, p1) < 1e-12:
        return 0.0
    lat0, lat1 = math.radians(p0.latitude), math.radians(p1.latitude)
    dlon = math.radians(p1.longitude - p0.longitude)
    y = math.sin(dlon) * math.cos(lat1)
    x = math.cos(lat0) * math.sin(lat1) - math.sin(lat0) * math.cos(lat1) * math.cos(dlon)
    return math.degrees(math.atan2(y, x)) % 360.0


def point_along_azimuth(p: HorizontalPosition, azimuth: float, distance: float) -> HorizontalPosition:
    """
    Walk `distance` degrees from p along the great circle leaving p at
    `azimuth`. A negative distance walks the opposite way.
    """
    az = math.radians(azimuth)
    d = math.radians(distance)
    theta0 = math.radians(90.0 - p.latitude)

    cos_theta = math.cos(d) * math.cos(theta0) + math.sin(d) * math.sin(theta0) * math.cos(az)
    theta = math.acos(max(-1.0, min(1.0, cos_theta)))

    # both terms carry a common positive factor sin(theta0)*sin(theta), dropped for atan2
    sin_dphi = math.sin(d) * math.sin(az) * math.sin(theta0)
    cos_dphi = math.cos(d) - math.cos(theta0) * math.cos(theta)
    lon = p.longitude + math.degrees(math.atan2(sin_dphi, cos_dphi))

    return HorizontalPosition(90.0 - math.degrees(theta), lon)
# endregion

# region Degree-to-Kilometer Conversions
def km2deg(km: float, radius: float = EARTH_RADIUS_KM) -> float:
    return math.degrees(km / radius)


def km2deg_lon(km: float, lat: float, radius: float = EARTH_RADIUS_KM) -> float:
    small_circle = radius * math.cos(math.radians(lat))
    if small_circle <= 0:
        return 360.0
    return math.degrees(km / small_circle)
# endregion

# region Date Line
def crosses_date_line(positions: Iterable[HorizontalPosition]) -> bool:
    """
    True when the positions straddle the date line but not the prime
    meridian, i.e. longitudes are better handled in [0, 360).
    """
    lons = sorted({p.longitude for p in positions})
    if len(lons) <= 1:
        return False

    largest_gap = lons[0] + 360.0 - lons[-1]
    gap_start, gap_end = lons[-1], lons[0]
    for a, b in zip(lons[:-1], lons[1:]):
        if b - a > largest_gap:
            largest_gap = b - a
            gap_start, gap_end = a, b

    return gap_start <= 0.0 <= gap_end
# endregion
