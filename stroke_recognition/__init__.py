"""
Stroke Recognition Package
Recognizes pictorial pen patterns (cross, crossed-out, circle, slash,
back-slash) drawn into the regions of a fixed layout.
"""

from .core.region import PatternRegion
from .gestures.pattern_classifier import PatternClassifier, PatternLabel, get_shared_classifier
from .gestures.sequencer import SequencingResult
from .utils.stroke_utils import Point, Stroke

__version__ = "1.0.0"
__all__ = ["PatternRegion", "PatternClassifier", "PatternLabel", "get_shared_classifier",
           "SequencingResult", "Point", "Stroke"]
