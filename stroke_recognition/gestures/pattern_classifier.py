"""
Pattern classifier adapter.

Wraps a persisted scikit-learn probability classifier (an RBF SVC by
default) that maps the five pattern features to one of the pictorial
patterns. Features are divided by a fixed scale range before every
prediction, the same way the training set was scaled.
"""

import logging
import os
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Dict, Optional, Sequence

import joblib
import numpy as np

from ..config.settings import RecognitionConfig
from ..exceptions import ModelUnavailableError
from ..utils.stroke_utils import Stroke
from .feature_extractor import FeatureExtractor

logger = logging.getLogger(__name__)


class PatternLabel(IntEnum):
    """Pattern classes as labelled in the training data."""

    CROSS = 1
    CROSSED_OUT = 2
    CIRCLE = 3
    SLASH = 4
    BACK_SLASH = 5


@dataclass(frozen=True)
class Classification:
    """Predicted label with per-pattern likelihoods in percent."""

    label: int
    likelihoods: Dict[int, float]

    @property
    def confidence(self) -> float:
        """Likelihood of the predicted label."""
        return self.likelihoods.get(int(self.label), 0.0)


def scale_features(features: Sequence[float], scale_range: Sequence[float]) -> List[float]:
    """
    Divide each feature by its scale range entry.

    Indices beyond the end of ``scale_range`` and indices with a zero
    divisor are left unscaled.
    """
    scaled = [float(value) for value in features]
    for i, divisor in enumerate(scale_range):
        if i < len(scaled) and divisor != 0:
            scaled[i] /= divisor
    return scaled


def calculate_scale_range(samples) -> List[float]:
    """
    Per-feature maximum absolute value over a training set.

    A feature that is 0 in every sample gets a range of 1.0.
    """
    samples = np.abs(np.asarray(samples, dtype=float))
    if samples.ndim != 2 or samples.shape[0] == 0:
        raise ValueError("Scale range needs a non-empty 2D sample matrix")
    return [float(v) if v > 0 else 1.0 for v in samples.max(axis=0)]


def load_scale_range(path: str) -> List[float]:
    """Load a scale range stored as one float per line."""
    if not os.path.exists(path):
        raise ModelUnavailableError(path, "file not existing")

    ranges = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line:
                ranges.append(float(line))
    return ranges


def save_scale_range(path: str, ranges: Sequence[float]):
    """Save a scale range as one float per line."""
    with open(path, 'w', encoding='utf-8') as f:
        for value in ranges:
            f.write(f"{float(value)!r}\n")


class PatternClassifier:
    """
    Probability classifier for the five pictorial patterns.

    The model file is a joblib dump of ``{'classifier': estimator,
    'scale_range': [...]}``; the estimator must provide
    ``predict_proba`` and ``classes_``.

    A model without a scale range is scaled with the range file at
    ``RecognitionConfig.scale_range_path()`` when it exists, else with
    the built-in default.
    """

    def __init__(self, model_path: Optional[str] = None,
                 scale_range: Optional[Sequence[float]] = None,
                 classifier=None):
        self.model_path = model_path or RecognitionConfig.model_path()
        self.classifier = classifier
        self.scale_range = list(scale_range) if scale_range is not None else None
        self.extractor = FeatureExtractor()

        if self.classifier is None:
            self._load_model()
        if self.scale_range is None:
            self.scale_range = self._default_scale_range()

    def _load_model(self):
        """Load the persisted model; any failure is fatal."""
        try:
            model_data = joblib.load(self.model_path)
        except Exception as e:
            raise ModelUnavailableError(self.model_path, str(e)) from e

        if isinstance(model_data, dict):
            self.classifier = model_data.get('classifier')
            if self.scale_range is None and model_data.get('scale_range') is not None:
                self.scale_range = list(model_data['scale_range'])
        else:
            self.classifier = model_data

        if self.classifier is None or not hasattr(self.classifier, 'predict_proba'):
            raise ModelUnavailableError(self.model_path, "no probability classifier in model file")

        logger.info(f"Loaded pattern model from {self.model_path}")

    @staticmethod
    def _default_scale_range() -> List[float]:
        """Scale range file written by training, else the built-in range."""
        path = RecognitionConfig.scale_range_path()
        if os.path.exists(path):
            logger.info(f"Loaded scale range from {path}")
            return load_scale_range(path)
        return list(RecognitionConfig.DEFAULT_SCALE_RANGE)

    def classify(self, features: Sequence[float]) -> Classification:
        """
        Classify one feature vector.

        Args:
            features: Unscaled feature vector

        Returns:
            Most likely label and the likelihood of every pattern (0..100, 2 decimals)
        """
        scaled = scale_features(features, self.scale_range)
        probabilities = self.classifier.predict_proba(np.array([scaled]))[0]

        likelihoods = {int(label): 0.0 for label in PatternLabel}
        for label, probability in zip(self.classifier.classes_, probabilities):
            likelihoods[int(label)] = round(float(probability) * 100, 2)

        predicted = int(self.classifier.classes_[int(np.argmax(probabilities))])
        return Classification(predicted, likelihoods)

    def classify_strokes(self, strokes: List[Stroke]) -> Classification:
        """Extract features from a stroke sequence and classify them."""
        return self.classify(self.extractor.extract(strokes))

    def get_feature_names(self) -> List[str]:
        """Get names of extracted features."""
        return list(RecognitionConfig.FEATURE_NAMES)


# Global instance
_classifier = None
_classifier_error = None
_classifier_lock = threading.Lock()


def get_shared_classifier(model_path: Optional[str] = None) -> PatternClassifier:
    """
    Process-wide classifier, loaded on first use.

    Concurrent first callers block until one of them has loaded the
    model. A load failure is remembered and raised to every caller.
    """
    global _classifier, _classifier_error
    if _classifier is None and _classifier_error is None:
        with _classifier_lock:
            if _classifier is None and _classifier_error is None:
                try:
                    _classifier = PatternClassifier(model_path)
                except ModelUnavailableError as e:
                    logger.error(f"Pattern model unavailable: {e}")
                    _classifier_error = e
    if _classifier_error is not None:
        raise _classifier_error
    return _classifier


def reset_shared_classifier():
    """Forget the shared classifier and any cached load failure."""
    global _classifier, _classifier_error
    with _classifier_lock:
        _classifier = None
        _classifier_error = None


def classify_sequence(strokes: List[Stroke]) -> Classification:
    """Classify a stroke sequence with the shared classifier."""
    return get_shared_classifier().classify_strokes(strokes)
