"""
Sequence preprocessing for pattern feature extraction.

A candidate sequence is size-normalized into a 100x100 frame, smoothed
and thinned out before any feature is measured on it. Every stage
produces new strokes; the captured strokes are never modified.
"""

import math
from typing import List

from ..config.settings import RecognitionConfig
from ..utils.stroke_utils import Point, Stroke, BoundingBox, GeometryUtils


class SequencePreprocessor:
    """
    Rescale, smooth and resample a sequence of strokes.

    Failed coordinates pass through every stage untouched so that the
    feature extractor can still see capture dropouts.
    """

    def __init__(self, size: int = RecognitionConfig.NORMALIZED_SIZE):
        self.size = size
        self.weights = RecognitionConfig.SMOOTHING_WEIGHTS

    def preprocess(self, strokes: List[Stroke]) -> List[Stroke]:
        """Run rescale, smooth and resample on a sequence."""
        if not strokes:
            return []
        return self.resample(self.smooth(self.rescale(strokes)))

    def rescale(self, strokes: List[Stroke]) -> List[Stroke]:
        """
        Scale the sequence so its longer side spans ``size`` units and
        center its bounding box at (size/2, size/2).

        Args:
            strokes: Sequence of strokes with capture bounding boxes

        Returns:
            New strokes in the normalized frame
        """
        box = GeometryUtils.sequence_bounding_box(strokes)
        scale_factor = self._scale_factor(box)

        scaled_box = BoundingBox(int(box.left * scale_factor), int(box.top * scale_factor),
                                 int(box.right * scale_factor), int(box.bottom * scale_factor))
        mid_x = scaled_box.right - int(scaled_box.width / 2)
        mid_y = scaled_box.bottom - int(scaled_box.height / 2)
        shift_x = mid_x - self.size // 2
        shift_y = mid_y - self.size // 2

        rescaled = []
        for stroke in strokes:
            points = []
            for point in stroke.points:
                if not point.is_failed_coord():
                    point = point * scale_factor
                    point = Point(point.x - shift_x, point.y - shift_y, point.time)
                points.append(point)

            own = stroke.bounding_box
            new_box = BoundingBox(int(own.left * scale_factor) - shift_x,
                                  int(own.top * scale_factor) - shift_y,
                                  int(own.right * scale_factor) - shift_x,
                                  int(own.bottom * scale_factor) - shift_y)
            rescaled.append(stroke.derive(points, new_box))

        return rescaled

    def _scale_factor(self, box: BoundingBox) -> float:
        factors = []
        if box.width > 0:
            factors.append(self.size / box.width)
        if box.height > 0:
            factors.append(self.size / box.height)
        # a single dot has no extent to normalize
        return min(factors) if factors else 1.0

    def smooth(self, strokes: List[Stroke]) -> List[Stroke]:
        """Replace interior points by a weighted sum of their neighbours."""
        w_prev, w_cur, w_next = self.weights
        smoothed = []
        for stroke in strokes:
            points = stroke.points
            if len(points) < 3:
                smoothed.append(stroke.derive(list(points)))
                continue

            new_points = [points[0]]
            for i in range(1, len(points) - 1):
                prev, cur, nxt = points[i-1], points[i], points[i+1]
                if prev.is_failed_coord() or cur.is_failed_coord() or nxt.is_failed_coord():
                    new_points.append(cur)
                    continue
                new_points.append(Point(int(w_prev * prev.x + w_cur * cur.x + w_next * nxt.x),
                                        int(w_prev * prev.y + w_cur * cur.y + w_next * nxt.y),
                                        cur.time))
            new_points.append(points[-1])
            smoothed.append(stroke.derive(new_points))

        return smoothed

    def resample(self, strokes: List[Stroke]) -> List[Stroke]:
        """
        Thin out each stroke so that its point density does not fall
        below the configured floor.

        This is a density floor, not an exact resampling: points closer
        than RESAMPLE_DISTANCE are dropped, and if the rounded-up arc
        length per point is still below MIN_POINT_DENSITY the stroke is
        thinned again with RESAMPLE_COARSE_DISTANCE.
        """
        resampled = []
        for stroke in strokes:
            points = GeometryUtils.remove_near_duplicates(stroke.points,
                                                          RecognitionConfig.RESAMPLE_DISTANCE)
            if points:
                length = GeometryUtils.calculate_path_length(points)
                rate = math.ceil(length / len(points))
                if rate < RecognitionConfig.MIN_POINT_DENSITY:
                    points = GeometryUtils.remove_near_duplicates(
                        points, RecognitionConfig.RESAMPLE_COARSE_DISTANCE)
            resampled.append(stroke.derive(points))
        return resampled


def preprocess(strokes: List[Stroke]) -> List[Stroke]:
    """
    Convenience function for sequence preprocessing.

    Args:
        strokes: Candidate sequence in capture coordinates

    Returns:
        Rescaled, smoothed and resampled copy of the sequence
    """
    return SequencePreprocessor().preprocess(strokes)
