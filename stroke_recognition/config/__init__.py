"""
Recognition configuration.
"""

from .settings import RecognitionConfig

__all__ = ["RecognitionConfig"]
