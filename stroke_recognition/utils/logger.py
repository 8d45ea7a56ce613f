"""
Logging utilities for recognition results.
"""

import datetime
import logging
from typing import List, Optional

from ..gestures.pattern_classifier import PatternLabel
from ..gestures.sequencer import SequencingResult

logger = logging.getLogger(__name__)

PATTERN_SYMBOLS = {
    PatternLabel.CROSS: '✖️ CROSS',
    PatternLabel.CROSSED_OUT: '🚫 CROSSED OUT',
    PatternLabel.CIRCLE: '⭕ CIRCLE',
    PatternLabel.SLASH: '／ SLASH',
    PatternLabel.BACK_SLASH: '＼ BACK-SLASH',
}


def configure_logging(verbose: bool = False):
    """Route library log records to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


class RecognitionLogger:
    """Handles reporting of recognized patterns."""

    def __init__(self, debug_file: Optional[str] = None):
        self.debug_file = None
        if debug_file:
            try:
                self.debug_file = open(debug_file, 'w', encoding='utf-8')
                self.debug_file.write(f"Debug logging started at {datetime.datetime.now()}\n")
                self.debug_file.flush()
            except OSError as e:
                logger.warning(f"Could not open debug file: {e}")

    def log_results(self, region_name: str, results: List[SequencingResult]):
        """Print the results of one region."""
        timestamp = datetime.datetime.now().strftime("%H:%M:%S.%f")[:-3]

        if not results:
            print(f"[{timestamp}] ▫️ {region_name or 'region'}: no pattern")

        for result in results:
            best = result.best_pattern()
            name = PATTERN_SYMBOLS[best] if best is not None else '▫️ EMPTY'
            print(f"[{timestamp}] {name}: {region_name or 'region'} #{result.sequence_number}")
            print(f"   Strokes: {result.start_time} - {result.stop_time}")
            print(f"   Cross {result.cross_likelihood:.2f}% | "
                  f"Crossed out {result.crossed_out_likelihood:.2f}% | "
                  f"Circle {result.circle_likelihood:.2f}% | "
                  f"Slash {result.slash_likelihood:.2f}% | "
                  f"Back-slash {result.back_slash_likelihood:.2f}%")

            if self.debug_file:
                self.debug_file.write(f"[{timestamp}] {region_name} {result}\n")
                self.debug_file.flush()

    def close(self):
        """Close the debug file."""
        if self.debug_file:
            self.debug_file.close()
            self.debug_file = None
