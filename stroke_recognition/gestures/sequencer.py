"""
Stroke sequencing and stitching.

Strokes of a region are first split into rough sequences by their
identifiers. The stitcher then decides, with the classifier as an
oracle, which strokes of a rough sequence belong to one pattern and
which rough sequences have to be combined.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Optional, Tuple

from ..config.settings import RecognitionConfig
from ..exceptions import UnknownPredictedLabelError
from ..utils.stroke_utils import Stroke, BoundingBox, GeometryUtils
from .pattern_classifier import Classification, PatternLabel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SequencingResult:
    """One recognized pattern of a region."""

    sequence_number: str
    start_time: int
    stop_time: int
    cross_likelihood: float = 0.0
    crossed_out_likelihood: float = 0.0
    circle_likelihood: float = 0.0
    slash_likelihood: float = 0.0
    back_slash_likelihood: float = 0.0

    @classmethod
    def from_classification(cls, number: int, strokes: List[Stroke],
                            classification: Classification) -> 'SequencingResult':
        likelihoods = classification.likelihoods
        return cls(
            sequence_number=str(number),
            start_time=strokes[0].start_time,
            stop_time=strokes[-1].stop_time,
            cross_likelihood=likelihoods.get(PatternLabel.CROSS, 0.0),
            crossed_out_likelihood=likelihoods.get(PatternLabel.CROSSED_OUT, 0.0),
            circle_likelihood=likelihoods.get(PatternLabel.CIRCLE, 0.0),
            slash_likelihood=likelihoods.get(PatternLabel.SLASH, 0.0),
            back_slash_likelihood=likelihoods.get(PatternLabel.BACK_SLASH, 0.0),
        )

    @classmethod
    def empty(cls) -> 'SequencingResult':
        """Placeholder reported for a region without strokes."""
        return cls(sequence_number='0', start_time=0, stop_time=0)

    def likelihoods(self) -> Dict[PatternLabel, float]:
        return {
            PatternLabel.CROSS: self.cross_likelihood,
            PatternLabel.CROSSED_OUT: self.crossed_out_likelihood,
            PatternLabel.CIRCLE: self.circle_likelihood,
            PatternLabel.SLASH: self.slash_likelihood,
            PatternLabel.BACK_SLASH: self.back_slash_likelihood,
        }

    def best_pattern(self) -> Optional[PatternLabel]:
        """Pattern with the highest likelihood, None for an all-zero result."""
        likelihoods = self.likelihoods()
        best = max(likelihoods, key=likelihoods.get)
        return best if likelihoods[best] > 0 else None


def rough_sequencing(strokes: List[Stroke]) -> List[List[Stroke]]:
    """
    Split strokes into runs of contiguous identifiers.

    A stroke whose identifier differs from the previous one by more
    than 1 starts a new run. Identifier wraparound is not treated
    specially.
    """
    if not strokes:
        return []

    sequences = []
    current = []
    last_id = strokes[0].id
    for stroke in strokes:
        if abs(stroke.id - last_id) > 1:
            sequences.append(current)
            current = []
        current.append(stroke)
        last_id = stroke.id

    sequences.append(current)
    return sequences


class PeelAction(Enum):
    """Outcome of one step of the backward peeling loop."""

    CONTINUE = 'continue'
    EMIT_NONE = 'emit_none'
    EMIT_ONE = 'emit_one'
    EMIT_TWO = 'emit_two'


@dataclass
class PeelOutcome:
    action: PeelAction
    results: List[SequencingResult] = field(default_factory=list)
    count: int = 0
    prior_box: Optional[BoundingBox] = None

    @classmethod
    def emit(cls, results: List[SequencingResult], count: int,
             prior_box: Optional[BoundingBox]) -> 'PeelOutcome':
        action = [PeelAction.EMIT_NONE, PeelAction.EMIT_ONE, PeelAction.EMIT_TWO][len(results)]
        return cls(action, results, count, prior_box)


class SequenceStitcher:
    """
    Turns the rough sequences of one region into sequencing results.

    The classifier must provide ``classify_strokes(strokes) -> Classification``.
    A stitcher holds the state of one region and is used for one
    ``stitch`` call.
    """

    def __init__(self, classifier,
                 confidence_threshold: float = RecognitionConfig.TAIL_CONFIDENCE_THRESHOLD):
        self.classifier = classifier
        self.confidence_threshold = confidence_threshold

    def _classify(self, strokes: List[Stroke]) -> Tuple[PatternLabel, Classification]:
        classification = self.classifier.classify_strokes(strokes)
        try:
            label = PatternLabel(int(classification.label))
        except ValueError:
            raise UnknownPredictedLabelError(classification.label)
        return label, classification

    @staticmethod
    def _inside(box: BoundingBox, strokes: List[Stroke]) -> bool:
        x, y = GeometryUtils.gravity_center(strokes)
        return box.contains(x, y)

    def stitch(self, sequences: List[List[Stroke]]) -> List[SequencingResult]:
        """
        Stitch rough sequences into results.

        Args:
            sequences: Rough sequences of one region in arrival order

        Returns:
            Results in emission order
        """
        results: List[SequencingResult] = []
        count = 0
        saved: Optional[Tuple[List[Stroke], SequencingResult]] = None
        prior_box: Optional[BoundingBox] = None

        for index, strokes in enumerate(sequences):
            count += 1
            more_follow = index < len(sequences) - 1

            if len(strokes) == 1:
                label, classification = self._classify(strokes)
                result = SequencingResult.from_classification(count, strokes, classification)

                if label in (PatternLabel.SLASH, PatternLabel.BACK_SLASH):
                    if saved is not None:
                        # the pending single stroke and this one form one pattern
                        count -= 1
                        combined = saved[0] + strokes
                        _, combined_classification = self._classify(combined)
                        results.append(SequencingResult.from_classification(
                            count, combined, combined_classification))
                        logger.debug(f"Combined strokes {[s.id for s in combined]} into one pattern")
                        saved = None
                    elif more_follow:
                        saved = (strokes, result)
                    else:
                        results.append(result)
                else:
                    if saved is not None:
                        results.append(saved[1])
                        saved = None
                    if prior_box is not None and prior_box.has_area:
                        if self._inside(prior_box, strokes):
                            results.append(result)
                        else:
                            logger.debug(f"Dropped stroke {strokes[0].id} outside previous pattern")
                    else:
                        results.append(result)
            else:
                # a pending slash never pairs across a multi-stroke sequence;
                # emit it first so results stay in arrival order
                if saved is not None:
                    results.append(saved[1])
                    saved = None
                outcome = self._peel(strokes, count, prior_box)
                results.extend(outcome.results)
                count = outcome.count
                prior_box = outcome.prior_box

        return results

    def _peel(self, strokes: List[Stroke], count: int,
              prior_box: Optional[BoundingBox]) -> PeelOutcome:
        """Move a cursor back from the end until a step decides the sequence."""
        for cursor in range(len(strokes) - 1, -1, -1):
            outcome = self.peel_step(strokes, cursor, count, prior_box)
            if outcome.action is not PeelAction.CONTINUE:
                return outcome
        return PeelOutcome(PeelAction.EMIT_NONE, [], count, prior_box)

    def peel_step(self, strokes: List[Stroke], cursor: int, count: int,
                  prior_box: Optional[BoundingBox]) -> PeelOutcome:
        """
        Decide on the split of ``strokes`` at ``cursor``.

        ``strokes[:cursor]`` is the remaining group and ``strokes[cursor:]``
        the tail. A tail whose predicted likelihood is below the
        confidence threshold is treated as unclassified while strokes
        remain, so that peeling continues.
        """
        remaining = strokes[:cursor]
        tail = strokes[cursor:]

        tail_label, tail_classification = self._classify(tail)
        label: Optional[PatternLabel] = tail_label
        if remaining and tail_classification.confidence < self.confidence_threshold:
            label = None

        logger.debug(f"Tail {[s.id for s in tail]} -> {label!r} "
                     f"({tail_classification.confidence:.2f}%)")

        if label is None:
            return PeelOutcome(PeelAction.CONTINUE, count=count, prior_box=prior_box)

        def tail_result(number):
            return SequencingResult.from_classification(number, tail, tail_classification)

        if label in (PatternLabel.CIRCLE, PatternLabel.CROSSED_OUT):
            if not remaining:
                return PeelOutcome.emit([tail_result(count)], count, prior_box)

            first_label, first_classification = self._classify(remaining)
            if first_label == label:
                merged = SequencingResult.from_classification(count, strokes, first_classification)
                return PeelOutcome.emit([merged], count, prior_box)

            emitted = [SequencingResult.from_classification(count, remaining, first_classification)]
            count += 1
            prior_box = GeometryUtils.sequence_bounding_box(remaining)
            if self._inside(prior_box, tail):
                emitted.append(tail_result(count))
            else:
                logger.debug(f"Dropped tail {[s.id for s in tail]} as noise")
            return PeelOutcome.emit(emitted, count, prior_box)

        if label == PatternLabel.CROSS:
            tail_box = GeometryUtils.sequence_bounding_box(tail)
            if not remaining:
                return PeelOutcome.emit([tail_result(count)], count, tail_box)

            first_label, first_classification = self._classify(remaining)
            if first_label in (PatternLabel.CROSS, PatternLabel.SLASH, PatternLabel.BACK_SLASH):
                _, combined_classification = self._classify(strokes)
                combined = SequencingResult.from_classification(count, strokes, combined_classification)
                return PeelOutcome.emit([combined], count, tail_box)

            emitted = [SequencingResult.from_classification(count, remaining, first_classification)]
            count += 1
            emitted.append(tail_result(count))
            return PeelOutcome.emit(emitted, count, tail_box)

        # slash or back-slash: only decided once nothing remains
        if remaining:
            return PeelOutcome(PeelAction.CONTINUE, count=count, prior_box=prior_box)

        if prior_box is not None and prior_box.has_area:
            if not self._inside(prior_box, tail):
                logger.debug(f"Dropped tail {[s.id for s in tail]} outside previous pattern")
                return PeelOutcome.emit([], count, prior_box)
        return PeelOutcome.emit([tail_result(count)], count,
                                GeometryUtils.sequence_bounding_box(tail))
