"""
Error types raised by the stroke pattern recognizer.
"""


class StrokeRecognitionError(Exception):
    """Base class for recognition errors."""


class ModelUnavailableError(StrokeRecognitionError):
    """The persisted classifier model (or its scale range) could not be loaded."""

    def __init__(self, path: str, reason: str = ''):
        self.path = path
        self.reason = reason
        message = f"Could not load {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DegenerateStrokeError(StrokeRecognitionError):
    """A centroid or gravity center was requested for strokes without valid points."""


class UnknownPredictedLabelError(StrokeRecognitionError):
    """The classifier predicted a label outside the known pattern set."""

    def __init__(self, label):
        self.label = label
        super().__init__(f"Predicted pattern {label!r} is not in predetermined list")
