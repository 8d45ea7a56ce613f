"""
Region containers.
"""

from .region import PatternRegion

__all__ = ["PatternRegion"]
