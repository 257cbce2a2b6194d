"""Extract an animatable path from route GeoJSON."""

from __future__ import annotations

import logging
import math
from typing import Any

logger = logging.getLogger(__name__)


def _is_valid_point(lat: Any, lng: Any) -> bool:
    if isinstance(lat, bool) or isinstance(lng, bool):
        return False
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def _feature_points(geometry: dict[str, Any]) -> list[Any]:
    geometry_type = geometry.get("type")
    coordinates = geometry.get("coordinates") or []
    if geometry_type == "LineString":
        return list(coordinates)
    if geometry_type == "MultiLineString":
        return [point for line in coordinates for point in line]
    return []


def extract_coordinates(geojson: dict[str, Any] | None) -> list[tuple[float, float]]:
    """Return (lat, lng) pairs from LineString/MultiLineString features.

    GeoJSON stores (lng, lat); the result is flipped for map libraries. Invalid
    or out-of-range points are dropped, as are consecutive duplicates.
    """
    if not isinstance(geojson, dict):
        logger.warning("Missing GeoJSON data")
        return []

    if geojson.get("type") == "Feature":
        features = [geojson]
    else:
        features = geojson.get("features")
    if not isinstance(features, list):
        logger.warning("GeoJSON has no features")
        return []

    coordinates: list[tuple[float, float]] = []
    for feature in features:
        geometry = feature.get("geometry") if isinstance(feature, dict) else None
        if not isinstance(geometry, dict):
            continue

        for point in _feature_points(geometry):
            if not isinstance(point, (list, tuple)) or len(point) < 2:
                continue
            lng, lat = point[0], point[1]
            if not _is_valid_point(lat, lng):
                continue
            pair = (float(lat), float(lng))
            if coordinates and coordinates[-1] == pair:
                continue
            coordinates.append(pair)

    return coordinates
