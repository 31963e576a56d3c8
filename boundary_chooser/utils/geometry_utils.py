"""
Geometry helpers for highlighting and zooming to selected boundaries.

Boundary files often carry invalid rings (self-intersections, missing
coordinates). Such geometries are logged and left out rather than raised.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from shapely.errors import ShapelyError
from shapely.geometry import mapping, shape
from shapely.ops import unary_union


logger = logging.getLogger(__name__)

Bounds = Tuple[float, float, float, float]

GEOMETRY_ERRORS = (ShapelyError, ValueError, TypeError, KeyError, AttributeError)


def merge_geometries(geometries: Iterable[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Merge GeoJSON geometries into a single geometry.

    Args:
        geometries: GeoJSON geometry dicts (Polygon/MultiPolygon)

    Returns:
        GeoJSON geometry dict of the union, or None when nothing could be merged
    """
    geometries = [geometry for geometry in geometries if geometry]
    if not geometries:
        return None

    try:
        merged = unary_union([shape(geometry) for geometry in geometries])
        if merged.is_empty:
            return None
        return mapping(merged)
    except GEOMETRY_ERRORS as e:
        logger.error(f"Error merging {len(geometries)} geometries: {e}")
        return None


def geometry_bounds(geometries: Iterable[Dict[str, Any]]) -> Optional[Bounds]:
    """
    Compute the combined bounding box of GeoJSON geometries.

    Returns:
        (min_x, min_y, max_x, max_y), or None for no usable geometry
    """
    bounds = None
    for geometry in geometries:
        if not geometry:
            continue
        try:
            geom = shape(geometry)
        except GEOMETRY_ERRORS as e:
            logger.warning(f"Skipping unreadable geometry in bounds: {e}")
            continue
        if geom.is_empty:
            continue

        min_x, min_y, max_x, max_y = geom.bounds
        if bounds is None:
            bounds = (min_x, min_y, max_x, max_y)
        else:
            bounds = (
                min(bounds[0], min_x),
                min(bounds[1], min_y),
                max(bounds[2], max_x),
                max(bounds[3], max_y)
            )
    return bounds
