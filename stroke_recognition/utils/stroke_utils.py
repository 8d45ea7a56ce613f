"""
Shared geometry primitives for pen strokes.

This module provides the point and stroke types captured from the pen
together with the geometric helpers used by region filtering,
preprocessing and feature extraction.
"""

import math
from dataclasses import dataclass
from typing import List, Dict, Tuple, Optional, Iterable, Any

from ..exceptions import DegenerateStrokeError

FAILED_COORD = -1


@dataclass(frozen=True)
class Point:
    """A captured pen sample in integer coordinates with a timestamp.

    A point with x == -1 or y == -1 marks a capture dropout. Callers must
    test ``is_failed_coord()`` before doing arithmetic with it.
    """

    x: int
    y: int
    time: int = 0

    @classmethod
    def failed(cls, time: int = 0) -> 'Point':
        """Create a failed capture sentinel."""
        return cls(FAILED_COORD, FAILED_COORD, time)

    def is_failed_coord(self) -> bool:
        return self.x == FAILED_COORD or self.y == FAILED_COORD

    def __mul__(self, factor: float) -> 'Point':
        return Point(int(self.x * factor), int(self.y * factor), self.time)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: 'Point') -> float:
        """Calculate Euclidean distance to another point."""
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle, edges inclusive."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0

    def contains(self, x: int, y: int) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    @classmethod
    def union(cls, boxes: Iterable['BoundingBox']) -> 'BoundingBox':
        boxes = list(boxes)
        return cls(min(b.left for b in boxes), min(b.top for b in boxes),
                   max(b.right for b in boxes), max(b.bottom for b in boxes))


class Stroke:
    """A single pen-down to pen-up trace.

    The bounding box is supplied by the capture source and is not
    recomputed from the points.
    """

    def __init__(self, stroke_id: int, start_time: int = 0, stop_time: int = 0,
                 left: int = 0, top: int = 0, right: int = 0, bottom: int = 0,
                 points: Optional[List[Point]] = None):
        self.id = stroke_id
        self.start_time = start_time
        self.stop_time = stop_time
        self.left = left
        self.top = top
        self.right = right
        self.bottom = bottom
        self.points: List[Point] = list(points) if points else []

    def __repr__(self):
        return f"Stroke(id={self.id}, points={len(self.points)})"

    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox(self.left, self.top, self.right, self.bottom)

    def add_point(self, point: Point):
        self.points.append(point)

    def sort_points(self):
        """Sort points by ascending timestamp."""
        self.points = sorted(self.points, key=lambda p: p.time)

    def valid_points(self) -> List[Point]:
        return [p for p in self.points if not p.is_failed_coord()]

    def number_of_failed_coords(self) -> int:
        return sum(1 for p in self.points if p.is_failed_coord())

    def get_length(self) -> float:
        """Arc length over the valid points, stepping over dropouts."""
        return GeometryUtils.calculate_path_length(self.points)

    def derive(self, points: List[Point], box: Optional[BoundingBox] = None) -> 'Stroke':
        """Create a new stroke with the same identity and timing but new points."""
        box = box or self.bounding_box
        return Stroke(self.id, self.start_time, self.stop_time,
                      box.left, box.top, box.right, box.bottom, points)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Stroke':
        """Build a stroke from a plain record.

        Expected keys: 'id', 'points' (list of [x, y] or [x, y, t]), and
        optionally 'start_time', 'stop_time', 'left', 'top', 'right', 'bottom'.
        Missing bounds are computed from the valid points.

        Raises:
            ValueError: If the record is malformed
        """
        if not isinstance(data, dict) or 'id' not in data or 'points' not in data:
            raise ValueError("Each stroke must be a dictionary with 'id' and 'points'")

        points = []
        for raw in data['points']:
            if not isinstance(raw, (list, tuple)) or len(raw) not in (2, 3):
                raise ValueError("Each point must be [x, y] or [x, y, t]")
            try:
                x, y = int(raw[0]), int(raw[1])
                t = int(raw[2]) if len(raw) == 3 else 0
            except (ValueError, TypeError):
                raise ValueError(f"Point {raw!r} must be numeric")
            points.append(Point(x, y, t))

        valid = [p for p in points if not p.is_failed_coord()]
        bounds = {
            'left': min((p.x for p in valid), default=0),
            'top': min((p.y for p in valid), default=0),
            'right': max((p.x for p in valid), default=0),
            'bottom': max((p.y for p in valid), default=0),
        }
        for key in bounds:
            if key in data:
                bounds[key] = int(data[key])

        times = [p.time for p in points]
        return cls(int(data['id']),
                   int(data.get('start_time', min(times, default=0))),
                   int(data.get('stop_time', max(times, default=0))),
                   points=points, **bounds)


class GeometryUtils:
    """Utility class for geometric calculations."""

    @staticmethod
    def calculate_distance(p1: Point, p2: Point) -> float:
        """Calculate Euclidean distance between two points."""
        return math.sqrt((p1.x - p2.x) ** 2 + (p1.y - p2.y) ** 2)

    @staticmethod
    def calculate_path_length(points: List[Point]) -> float:
        """Sum of distances between consecutive valid points."""
        valid = [p for p in points if not p.is_failed_coord()]
        length = 0.0
        for i in range(1, len(valid)):
            length += GeometryUtils.calculate_distance(valid[i-1], valid[i])
        return length

    @staticmethod
    def calculate_centroid(points: List[Point]) -> Tuple[int, int]:
        """Integer centroid over the valid points.

        Raises:
            DegenerateStrokeError: If there is no valid point
        """
        valid = [p for p in points if not p.is_failed_coord()]
        if not valid:
            raise DegenerateStrokeError("Cannot compute a centroid without valid points")
        # truncate toward zero like the capture side does
        return (int(sum(p.x for p in valid) / len(valid)),
                int(sum(p.y for p in valid) / len(valid)))

    @staticmethod
    def merged_points(strokes: List[Stroke]) -> List[Point]:
        """All points of a sequence, stroke after stroke."""
        merged = []
        for stroke in strokes:
            merged.extend(stroke.points)
        return merged

    @staticmethod
    def gravity_center(strokes: List[Stroke]) -> Tuple[int, int]:
        """Gravity center of a sequence over its valid points."""
        return GeometryUtils.calculate_centroid(GeometryUtils.merged_points(strokes))

    @staticmethod
    def sequence_bounding_box(strokes: List[Stroke]) -> BoundingBox:
        """Union of the capture bounding boxes of a sequence."""
        return BoundingBox.union(s.bounding_box for s in strokes)

    @staticmethod
    def mean_distance_to(strokes: List[Stroke], x: int, y: int) -> float:
        """Mean Euclidean distance of the valid points of a sequence to (x, y)."""
        valid = [p for p in GeometryUtils.merged_points(strokes) if not p.is_failed_coord()]
        if not valid:
            raise DegenerateStrokeError("Cannot compute a mean distance without valid points")
        return sum(math.sqrt((x - p.x) ** 2 + (y - p.y) ** 2) for p in valid) / len(valid)

    @staticmethod
    def calculate_angle(first: Point, vertex: Point, third: Point) -> Optional[float]:
        """Angle at ``vertex`` between the rays to ``first`` and ``third``, in degrees.

        Returns None when one of the rays has zero length.
        """
        ax, ay = first.x - vertex.x, first.y - vertex.y
        bx, by = third.x - vertex.x, third.y - vertex.y
        denominator = math.sqrt(ax * ax + ay * ay) * math.sqrt(bx * bx + by * by)
        if denominator == 0:
            return None
        fraction = (ax * bx + ay * by) / denominator
        fraction = max(-1.0, min(1.0, fraction))
        return math.degrees(math.acos(fraction))

    @staticmethod
    def remove_near_duplicates(points: List[Point], min_dist: float) -> List[Point]:
        """Drop points closer than ``min_dist`` to the last kept point.

        Failed coordinates are always kept so dropouts stay visible.
        """
        if not points:
            return []
        kept = [points[0]]
        for point in points[1:]:
            previous = kept[-1]
            if point.is_failed_coord() or previous.is_failed_coord():
                kept.append(point)
            elif GeometryUtils.calculate_distance(previous, point) >= min_dist:
                kept.append(point)
        return kept

    @staticmethod
    def trim_failed_coordinates(points: List[Point]) -> List[Point]:
        """Strip failed coordinates from both ends of a point list."""
        start = 0
        end = len(points)
        while start < end and points[start].is_failed_coord():
            start += 1
        while end > start and points[end - 1].is_failed_coord():
            end -= 1
        return points[start:end]
