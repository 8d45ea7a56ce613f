"""
Pattern sequencing and classification.

This package turns the strokes of a region into candidate sequences,
measures their features and classifies them into pictorial patterns.
"""

from .preprocessor import SequencePreprocessor, preprocess
from .feature_extractor import FeatureExtractor, extract_feature_set
from .pattern_classifier import (
    PatternClassifier,
    PatternLabel,
    Classification,
    get_shared_classifier,
    reset_shared_classifier,
)
from .sequencer import SequenceStitcher, SequencingResult, rough_sequencing

__all__ = [
    'SequencePreprocessor',
    'preprocess',
    'FeatureExtractor',
    'extract_feature_set',
    'PatternClassifier',
    'PatternLabel',
    'Classification',
    'get_shared_classifier',
    'reset_shared_classifier',
    'SequenceStitcher',
    'SequencingResult',
    'rough_sequencing'
]
