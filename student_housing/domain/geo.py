"""
Great-circle distance and radius filtering for listing search.

Distances use the haversine formula on (lat, lng) in degrees with a
spherical Earth of radius 6371 km.

The radius filter is a post-filter: callers pass an already paginated,
price-filtered candidate page, so a page can hold fewer than ``pageSize``
results after filtering. Listings without usable coordinates are dropped
from the result instead of failing the whole query.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if coerce_coordinates(self.lat, self.lng) is None:
            raise ValueError(f"Invalid coordinates: lat={self.lat!r}, lng={self.lng!r}")


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """
    Great-circle distance between two points in kilometres.

    Example:
        >>> la = GeoPoint(34.0522, -118.2437)
        >>> round(haversine_km(la, GeoPoint(34.05, -118.25)), 2)
        0.63
    """
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def coerce_coordinates(lat: Any, lng: Any) -> Optional[tuple[float, float]]:
    """
    Return (lat, lng) as floats, or None when they are not usable.

    bool is rejected even though it is an int subclass; NaN, infinities and
    values outside [-90, 90] / [-180, 180] are rejected too.
    """
    if isinstance(lat, bool) or isinstance(lng, bool):
        return None
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return None

    lat_f, lng_f = float(lat), float(lng)
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        return None
    if not (-90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0):
        return None
    return lat_f, lng_f


def filter_by_radius(
    listings: Iterable[Mapping[str, Any]],
    center: GeoPoint,
    radius_km: float,
) -> list[tuple[Mapping[str, Any], float]]:
    """
    Keep listings within radius_km of center, nearest first.

    Args:
        listings: Candidate listings, each with "id", "lat" and "lng" keys
        center: Search origin
        radius_km: Inclusive search radius in kilometres

    Returns:
        list[tuple[Mapping, float]]: (listing, distance_km) pairs ordered by
        distance, ties broken by listing id
    """
    if radius_km < 0:
        raise ValueError("radius_km must not be negative")

    matches: list[tuple[Mapping[str, Any], float]] = []
    for listing in listings:
        coords = coerce_coordinates(listing.get("lat"), listing.get("lng"))
        if coords is None:
            continue

        distance = haversine_km(center, GeoPoint(*coords))
        if distance <= radius_km:
            matches.append((listing, distance))

    matches.sort(key=lambda match: (match[1], match[0]["id"]))
    return matches
