"""
Utility functions and helpers.
"""

from .data_utils import (
    normalize_name,
    safe_string_conversion,
    is_null_or_empty,
    first_present
)
from .geometry_utils import merge_geometries, geometry_bounds

__all__ = [
    'normalize_name',
    'safe_string_conversion',
    'is_null_or_empty',
    'first_present',
    'merge_geometries',
    'geometry_bounds'
]
