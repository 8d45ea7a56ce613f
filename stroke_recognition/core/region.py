"""
Pattern region that collects strokes and recognizes the patterns drawn in it.
"""

import logging
from typing import Any, Dict, List, Optional

from ..config.settings import RecognitionConfig
from ..gestures.pattern_classifier import get_shared_classifier
from ..gestures.sequencer import SequenceStitcher, SequencingResult, rough_sequencing
from ..utils.stroke_utils import Stroke, GeometryUtils

logger = logging.getLogger(__name__)


class PatternRegion:
    """A rectangular area of a layout in which one or more patterns are drawn."""

    def __init__(self, left: int = 0, top: int = 0, right: int = 0, bottom: int = 0,
                 extension: int = 0, strokes: Optional[List[Stroke]] = None, name: str = ''):
        self.left = left
        self.top = top
        self.right = right
        self.bottom = bottom
        self.extension = extension
        self.name = name
        self.strokes: List[Stroke] = list(strokes) if strokes else []

    def __repr__(self):
        return (f"PatternRegion({self.name!r}, {self.left}, {self.top}, "
                f"{self.right}, {self.bottom}, strokes={len(self.strokes)})")

    def contains(self, x: int, y: int, extension: int = 0) -> bool:
        """Check if a point lies within the region grown by ``extension``."""
        return (self.left - extension <= x <= self.right + extension
                and self.top - extension <= y <= self.bottom + extension)

    def add_stroke(self, stroke: Stroke, min_length: float = 0.0) -> bool:
        """
        Add a stroke if it belongs to this region.

        Near-duplicate points are removed from the stroke in place first.
        The stroke is accepted when its centroid lies within the extended
        region, it has at least MIN_VALID_POINTS valid points and its
        length exceeds ``min_length``. Failed coordinates at both ends of
        an accepted stroke are removed.

        Args:
            stroke: Captured stroke
            min_length: Minimum stroke length

        Returns:
            True if the stroke was added

        Raises:
            DegenerateStrokeError: If the stroke has no valid point
        """
        stroke.points = GeometryUtils.remove_near_duplicates(
            stroke.points, RecognitionConfig.REGION_DUPLICATE_DISTANCE)

        center_x, center_y = GeometryUtils.calculate_centroid(stroke.points)
        valid_count = len(stroke.points) - stroke.number_of_failed_coords()
        length = stroke.get_length()

        if (self.contains(center_x, center_y, self.extension)
                and valid_count >= RecognitionConfig.MIN_VALID_POINTS
                and length > min_length):
            stroke.points = GeometryUtils.trim_failed_coordinates(stroke.points)
            self.strokes.append(stroke)
            return True

        logger.debug(f"Region {self.name!r} rejected stroke {stroke.id} "
                     f"(center=({center_x}, {center_y}), valid={valid_count}, length={length:.1f})")
        return False

    def recognize(self, show_empty_regions: bool = False, classifier=None) -> List[SequencingResult]:
        """
        Split the strokes of this region into sequences and classify each.

        Args:
            show_empty_regions: Report an all-zero placeholder for an empty region
            classifier: Sequence classifier; the shared model is used when omitted

        Returns:
            List of sequencing results

        Raises:
            ModelUnavailableError: If the shared model cannot be loaded
            UnknownPredictedLabelError: If the model predicts an unknown pattern
        """
        if classifier is None:
            classifier = get_shared_classifier()

        if not self.strokes:
            return [SequencingResult.empty()] if show_empty_regions else []

        sequences = rough_sequencing(self.strokes)
        logger.debug(f"Region {self.name!r}: {len(self.strokes)} strokes in "
                     f"{len(sequences)} rough sequences")
        return SequenceStitcher(classifier).stitch(sequences)

    def clear(self):
        """Remove all strokes."""
        self.strokes.clear()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PatternRegion':
        """
        Build a region from a plain record.

        Raises:
            ValueError: If a bound is missing or not numeric
        """
        if not isinstance(data, dict):
            raise ValueError("Each region must be a dictionary")
        try:
            return cls(int(data['left']), int(data['top']), int(data['right']),
                       int(data['bottom']), int(data.get('extension', 0)),
                       name=str(data.get('name', '')))
        except KeyError as e:
            raise ValueError(f"Region is missing {e.args[0]!r}")
        except (ValueError, TypeError):
            raise ValueError("Region bounds must be numeric")
