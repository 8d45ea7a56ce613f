"""
Feature extraction for pictorial pen patterns.

Every candidate sequence is reduced to five numbers, in this order:

1. variance of the change of turning angle along the merged points
2. mean angle of the segment directions against the horizontal
3. percentage of segment angles between 10 and 80 degrees
4. percentage of segment angles between 100 and 170 degrees
5. percentage of canvas pixels covered when the sequence is drawn
   into a square canvas sized from its spread around the gravity center

Features are measured on the preprocessed sequence. Failed coordinates
are never used in arithmetic: the angle features walk the chain of
valid points, and the ink canvas is drawn along the valid points of
each stroke.
"""

import math
from typing import List, Optional, Tuple

import numpy as np

from ..config.settings import RecognitionConfig
from ..utils.stroke_utils import Point, Stroke, GeometryUtils
from .preprocessor import SequencePreprocessor


class FeatureExtractor:
    """Computes the five-dimensional pattern feature vector of a sequence."""

    def __init__(self, preprocessor: Optional[SequencePreprocessor] = None):
        self.preprocessor = preprocessor or SequencePreprocessor()

    def extract(self, strokes: List[Stroke]) -> List[float]:
        """Preprocess a sequence and compute its feature vector."""
        preprocessed = self.preprocessor.preprocess(strokes)
        return self.extract_preprocessed(preprocessed)

    def extract_preprocessed(self, strokes: List[Stroke]) -> List[float]:
        """Compute the feature vector of an already preprocessed sequence."""
        features = [self.angle_change_variance(strokes)]
        features.extend(self.baseline_angles(self.segment_vectors(strokes)))
        features.append(self.ink_density(strokes))
        return features

    @staticmethod
    def _valid_chain(strokes: List[Stroke]) -> List[Point]:
        return [p for p in GeometryUtils.merged_points(strokes) if not p.is_failed_coord()]

    def angle_change_variance(self, strokes: List[Stroke]) -> float:
        """
        Population variance of the absolute change of the turning angle.

        The first angle contributes a change of 0. Triples with a
        zero-length ray have no angle and are skipped.
        """
        points = self._valid_chain(strokes)
        changes = []
        previous_angle = None

        for i in range(len(points) - 2):
            angle = GeometryUtils.calculate_angle(points[i], points[i+1], points[i+2])
            if angle is None:
                continue
            changes.append(0.0 if previous_angle is None else abs(previous_angle - angle))
            previous_angle = angle

        if not changes:
            return 0.0
        return float(np.var(changes))

    def segment_vectors(self, strokes: List[Stroke]) -> List[Point]:
        """Direction vectors between consecutive valid points of the sequence."""
        points = self._valid_chain(strokes)
        return [points[i] - points[i-1] for i in range(1, len(points))]

    def baseline_angles(self, vectors: List[Point]) -> List[float]:
        """
        Mean baseline angle and the share of angles in the two diagonal bands.

        Each vector is first folded so that a stroke and its reverse get
        the same angle, then measured against the horizontal (1, 0).

        Returns:
            [mean angle, percent in 10..80 degrees, percent in 100..170 degrees]
        """
        low_min, low_max = RecognitionConfig.ANGLE_BAND_LOW
        high_min, high_max = RecognitionConfig.ANGLE_BAND_HIGH
        origin = Point(0, 0)
        reference = Point(1, 0)

        angles = []
        for vector in vectors:
            if vector.y != 0 and ((vector.x < 0 < vector.y) or (vector.x > 0 and vector.y > 0)):
                vector = vector * -1
            angle = GeometryUtils.calculate_angle(reference, origin, vector)
            if angle is not None:
                angles.append(angle)

        if not angles:
            return [0.0, 0.0, 0.0]

        angles = np.array(angles)
        in_low = np.count_nonzero((angles >= low_min) & (angles <= low_max))
        in_high = np.count_nonzero((angles >= high_min) & (angles <= high_max))
        return [float(angles.mean()),
                in_low * 100.0 / len(angles),
                in_high * 100.0 / len(angles)]

    def ink_density(self, strokes: List[Stroke]) -> float:
        """
        Percentage of canvas pixels covered by the sequence's ink.

        The canvas is a square of side 2 * mean distance to the gravity
        center, reduced by CANVAS_SHRINK_PERCENT for every full hundred
        units, centered on the gravity center. Segments leaving the
        canvas are clipped to its edges.
        """
        gravity_x, gravity_y = GeometryUtils.gravity_center(strokes)
        mean_dist = int(GeometryUtils.mean_distance_to(strokes, gravity_x, gravity_y))

        width = 2 * mean_dist
        width -= (width // 100) * RecognitionConfig.CANVAS_SHRINK_PERCENT
        height = width
        if width <= 0:
            return 0.0

        pen_width = max(1, (width * RecognitionConfig.PEN_WIDTH_PERCENT) // 100)
        offset_x = gravity_x - width // 2
        offset_y = gravity_y - height // 2

        canvas = InkCanvas(width, height, pen_width)
        for stroke in strokes:
            valid = stroke.valid_points()
            for i in range(1, len(valid)):
                start = Point(valid[i-1].x - offset_x, valid[i-1].y - offset_y)
                end = Point(valid[i].x - offset_x, valid[i].y - offset_y)
                canvas.draw_segment(start, end)

        return canvas.coverage()


class InkCanvas:
    """Boolean pixel grid that records thick line segments."""

    def __init__(self, width: int, height: int, pen_width: int):
        self.width = width
        self.height = height
        self.pen_width = pen_width
        self.pixels = np.zeros((height, width), dtype=bool)
        self._ys, self._xs = np.mgrid[0:height, 0:width]

    def contains(self, point: Point) -> bool:
        return 0 <= point.x < self.width and 0 <= point.y < self.height

    def draw_segment(self, start: Point, end: Point) -> bool:
        """Draw a segment, clipped to the canvas. Returns True if anything was drawn."""
        if not (self.contains(start) and self.contains(end)):
            clipped = clip_segment(start, end, self.width, self.height)
            if clipped is None:
                return False
            start, end = clipped

        dx = end.x - start.x
        dy = end.y - start.y
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            t = np.zeros(self.pixels.shape)
        else:
            t = ((self._xs - start.x) * dx + (self._ys - start.y) * dy) / length_sq
            t = np.clip(t, 0.0, 1.0)
        dist_sq = (self._xs - (start.x + t * dx)) ** 2 + (self._ys - (start.y + t * dy)) ** 2
        self.pixels |= dist_sq <= (self.pen_width / 2.0) ** 2
        return True

    def coverage(self) -> float:
        """Percentage of covered pixels."""
        return np.count_nonzero(self.pixels) * 100.0 / self.pixels.size


def _line_intersection(a1: Point, a2: Point, b1: Point, b2: Point) -> Optional[Tuple[float, float]]:
    """Intersection of segment a1-a2 with segment b1-b2, or None."""
    A1 = a2.y - a1.y
    B1 = a1.x - a2.x
    C1 = A1 * a1.x + B1 * a1.y

    A2 = b2.y - b1.y
    B2 = b1.x - b2.x
    C2 = A2 * b1.x + B2 * b1.y

    det = A1 * B2 - A2 * B1
    if det == 0:
        return None

    x = (B2 * C1 - B1 * C2) / det
    y = (A1 * C2 - A2 * C1) / det

    if (min(a1.x, a2.x) <= x <= max(a1.x, a2.x) and min(a1.y, a2.y) <= y <= max(a1.y, a2.y)
            and min(b1.x, b2.x) <= x <= max(b1.x, b2.x) and min(b1.y, b2.y) <= y <= max(b1.y, b2.y)):
        return x, y
    return None


def clip_segment(start: Point, end: Point, width: int, height: int) -> Optional[Tuple[Point, Point]]:
    """
    Clip a segment against the rectangle [0, width-1] x [0, height-1].

    Each canvas edge is intersected with the segment; where they cross,
    the endpoint lying beyond that edge is moved onto the intersection.

    Returns:
        The clipped (start, end) pair, or None if the segment misses the canvas
    """
    right = width - 1
    bottom = height - 1
    edges = [
        # edge endpoints, which endpoint to move
        (Point(0, 0), Point(0, bottom), lambda p, q: p.x < q.x),
        (Point(right, 0), Point(right, bottom), lambda p, q: p.x > q.x),
        (Point(0, 0), Point(right, 0), lambda p, q: p.y < q.y),
        (Point(0, bottom), Point(right, bottom), lambda p, q: p.y > q.y),
    ]

    for edge_start, edge_end, start_is_outside in edges:
        hit = _line_intersection(edge_start, edge_end, start, end)
        if hit is None:
            continue
        moved = Point(int(hit[0]), int(hit[1]))
        if start_is_outside(start, end):
            start = moved
        else:
            end = moved

    inside = lambda p: 0 <= p.x < width and 0 <= p.y < height
    if inside(start) and inside(end):
        return start, end
    return None


def extract_feature_set(strokes: List[Stroke]) -> List[float]:
    """
    Convenience function for feature extraction.

    Args:
        strokes: Candidate sequence in capture coordinates

    Returns:
        [angle change variance, mean baseline angle, % 10..80, % 100..170, ink density]
    """
    return FeatureExtractor().extract(strokes)
