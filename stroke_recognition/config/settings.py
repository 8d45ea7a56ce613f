"""
Configuration settings for the stroke pattern recognizer.
"""

import os


class RecognitionConfig:
    """Configuration constants for pattern region recognition."""

    # Region acceptance
    REGION_DUPLICATE_DISTANCE = 5
    MIN_VALID_POINTS = 5

    # Preprocessing (normalized frame is NORMALIZED_SIZE x NORMALIZED_SIZE)
    NORMALIZED_SIZE = 100
    SMOOTHING_WEIGHTS = (0.25, 0.5, 0.25)
    RESAMPLE_DISTANCE = 2
    RESAMPLE_COARSE_DISTANCE = 6
    MIN_POINT_DENSITY = 6

    # Feature extraction (angles in degrees, sizes in percent)
    ANGLE_BAND_LOW = (10.0, 80.0)
    ANGLE_BAND_HIGH = (100.0, 170.0)
    CANVAS_SHRINK_PERCENT = 20
    PEN_WIDTH_PERCENT = 8

    # Sequence stitching
    TAIL_CONFIDENCE_THRESHOLD = 85.0

    # Per-feature divisors fixed from the training set
    DEFAULT_SCALE_RANGE = [
        7866.8283337476,
        155.405508377214,
        100.0,
        100.0,
        72.4173553719008,
    ]

    # Persisted files
    MODEL_FILENAME = 'pattern_model.pkl'
    SCALE_RANGE_FILENAME = 'scale_range.txt'
    MODEL_PATH_ENV = 'STROKE_RECOGNITION_MODEL'
    SCALE_RANGE_PATH_ENV = 'STROKE_RECOGNITION_SCALE_RANGE'

    FEATURE_NAMES = [
        'angle_change_variance',
        'mean_baseline_angle',
        'angles_10_80',
        'angles_100_170',
        'ink_density',
    ]

    @classmethod
    def model_path(cls) -> str:
        """Location of the persisted classifier model."""
        return os.environ.get(cls.MODEL_PATH_ENV,
                              os.path.join(os.getcwd(), cls.MODEL_FILENAME))

    @classmethod
    def scale_range_path(cls) -> str:
        """Location of the plain-text scale range file."""
        return os.environ.get(cls.SCALE_RANGE_PATH_ENV,
                              os.path.join(os.getcwd(), cls.SCALE_RANGE_FILENAME))
