"""Stroke builders and a scripted classifier for the test suite."""

import math

import numpy as np

from stroke_recognition.gestures.pattern_classifier import Classification, PatternLabel
from stroke_recognition.utils.stroke_utils import Point, Stroke


def make_stroke(stroke_id, coords, start_time=None, stop_time=None):
    """Build a stroke from (x, y) pairs; None stands for a capture dropout."""
    points = []
    for t, coord in enumerate(coords):
        points.append(Point.failed(t) if coord is None else Point(coord[0], coord[1], t))

    valid = [p for p in points if not p.is_failed_coord()]
    left = min((p.x for p in valid), default=0)
    top = min((p.y for p in valid), default=0)
    right = max((p.x for p in valid), default=0)
    bottom = max((p.y for p in valid), default=0)

    if start_time is None:
        start_time = stroke_id * 100
    if stop_time is None:
        stop_time = start_time + len(points)
    return Stroke(stroke_id, start_time, stop_time, left, top, right, bottom, points)


def line(start, end, steps=20):
    """Evenly spaced integer points from start to end."""
    return [(int(start[0] + (end[0] - start[0]) * i / steps),
             int(start[1] + (end[1] - start[1]) * i / steps)) for i in range(steps + 1)]


def circle(center, radius, steps=32):
    return [(int(center[0] + radius * math.cos(2 * math.pi * i / steps)),
             int(center[1] + radius * math.sin(2 * math.pi * i / steps))) for i in range(steps + 1)]


class ScriptedClassifier:
    """
    Answers ``classify_strokes`` from a table keyed by stroke ids.

    Table values are (label, confidence); the rest of the probability
    mass is spread over the other patterns.
    """

    def __init__(self, table):
        self.table = table
        self.calls = []

    def classify_strokes(self, strokes):
        key = tuple(s.id for s in strokes)
        self.calls.append(key)
        label, confidence = self.table[key]

        others = [int(l) for l in PatternLabel if int(l) != label]
        rest = round((100.0 - confidence) / len(others), 2)
        likelihoods = {l: rest for l in others}
        if label in [int(l) for l in PatternLabel]:
            likelihoods[label] = confidence
        return Classification(label, likelihoods)


# one feature-space cluster center per pattern label
CLUSTER_CENTERS = {label: [label * 10.0] * 5 for label in range(1, 6)}


def cluster_samples(per_label=20, seed=0):
    """Well separated synthetic feature vectors for labels 1..5."""
    rng = np.random.RandomState(seed)
    X, y = [], []
    for label, center in CLUSTER_CENTERS.items():
        X.append(rng.normal(center, 0.5, size=(per_label, 5)))
        y.extend([label] * per_label)
    return np.vstack(X), np.array(y)
