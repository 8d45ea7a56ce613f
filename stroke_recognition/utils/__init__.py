"""
Utilities package for stroke geometry.

This package provides the point and stroke types and the geometric
helpers shared by region filtering, preprocessing and feature extraction.
"""

from .stroke_utils import (
    Point,
    Stroke,
    BoundingBox,
    GeometryUtils
)

__all__ = [
    'Point',
    'Stroke',
    'BoundingBox',
    'GeometryUtils'
]
