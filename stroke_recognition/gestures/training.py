"""
Training set construction, model training and feature export.

Training samples are built with the same feature extraction as
recognition and stored in svmlight (libSVM) text format:
``label 1:value 2:value ...``.
"""

import csv
import logging
import os
from typing import List, Optional, Sequence

import joblib
import numpy as np
from sklearn.datasets import dump_svmlight_file, load_svmlight_file
from sklearn.model_selection import GridSearchCV
from sklearn.svm import SVC

from ..config.settings import RecognitionConfig
from ..utils.stroke_utils import Stroke
from .feature_extractor import FeatureExtractor
from .pattern_classifier import (calculate_scale_range, save_scale_range,
                                 scale_features, PatternClassifier)

logger = logging.getLogger(__name__)

# libsvm's grid.py defaults
DEFAULT_PARAM_GRID = {
    'C': [2.0 ** e for e in range(-5, 16, 2)],
    'gamma': [2.0 ** e for e in range(-15, 4, 2)],
}


def write_training_sample(strokes: List[Stroke], path: str, label: int = 0) -> List[float]:
    """
    Append the features of one sequence to a training file.

    Args:
        strokes: Sequence of strokes forming one pattern
        path: svmlight file, created if missing
        label: Pattern label, 0 if unknown

    Returns:
        The written feature vector
    """
    features = FeatureExtractor().extract(strokes)
    with open(path, 'ab') as f:
        dump_svmlight_file(np.array([features]), np.array([label]), f, zero_based=False)
    return features


def load_training_set(path: str):
    """Load an svmlight training file as dense features and labels."""
    X, y = load_svmlight_file(path, n_features=len(RecognitionConfig.FEATURE_NAMES),
                              zero_based=False)
    return X.toarray(), y.astype(int)


def train_model(data_path: str, model_path: Optional[str] = None,
                scale_range_path: Optional[str] = None, folds: int = 10,
                param_grid: Optional[dict] = None) -> PatternClassifier:
    """
    Train a probability SVC on a training file and persist it.

    The scale range is computed from the training set, saved next to the
    model and applied before fitting. C and gamma are chosen by a
    cross-validated grid search.

    Returns:
        A classifier wrapping the trained model
    """
    model_path = model_path or RecognitionConfig.model_path()
    scale_range_path = scale_range_path or RecognitionConfig.scale_range_path()

    X, y = load_training_set(data_path)
    X, y = X[y != 0], y[y != 0]
    if len(y) == 0:
        raise ValueError(f"No labelled samples in {data_path}")

    scale_range = calculate_scale_range(X)
    save_scale_range(scale_range_path, scale_range)
    X_scaled = np.array([scale_features(row, scale_range) for row in X])

    logger.info(f"Training pattern model on {len(y)} samples ({folds}-fold grid search)")
    search = GridSearchCV(SVC(kernel='rbf'), param_grid or DEFAULT_PARAM_GRID, cv=folds)
    search.fit(X_scaled, y)
    logger.info(f"Best parameters: {search.best_params_} (accuracy {search.best_score_:.3f})")

    classifier = SVC(kernel='rbf', probability=True, random_state=42, **search.best_params_)
    classifier.fit(X_scaled, y)

    if os.path.exists(model_path):
        os.remove(model_path)
    joblib.dump({'classifier': classifier, 'scale_range': scale_range}, model_path)

    return PatternClassifier(model_path, scale_range=scale_range, classifier=classifier)


def evaluate_model(data_path: str, model_path: Optional[str] = None,
                   scale_range: Optional[Sequence[float]] = None) -> float:
    """Accuracy of a persisted model on a labelled svmlight file."""
    classifier = PatternClassifier(model_path, scale_range=scale_range)
    X, y = load_training_set(data_path)
    if len(y) == 0:
        return 0.0

    predicted = [classifier.classify(row).label for row in X]
    return float(np.mean(np.array(predicted) == y))


def write_features_csv(region, path: str) -> List[float]:
    """
    Append the features of all strokes of a region to a ';'-separated file.

    A header row is written when the file does not exist yet.
    """
    features = FeatureExtractor().extract(region.strokes) if region.strokes else []
    is_new = not os.path.exists(path)

    with open(path, 'a', newline='', encoding='utf-8') as f:
        writer = csv.writer(f, delimiter=';')
        if is_new:
            writer.writerow(['Region'] + RecognitionConfig.FEATURE_NAMES)
        writer.writerow([region.name] + features)

    return features
