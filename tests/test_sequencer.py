"""Tests for rough sequencing and stitching with a scripted classifier."""

import pytest

from stroke_recognition.exceptions import UnknownPredictedLabelError
from stroke_recognition.gestures.pattern_classifier import Classification, PatternLabel
from stroke_recognition.gestures.sequencer import (PeelAction, SequenceStitcher,
                                                   SequencingResult, rough_sequencing)
from stroke_recognition.utils.stroke_utils import BoundingBox

from helpers import ScriptedClassifier, make_stroke, line, circle

CROSS = int(PatternLabel.CROSS)
CROSSED_OUT = int(PatternLabel.CROSSED_OUT)
CIRCLE = int(PatternLabel.CIRCLE)
SLASH = int(PatternLabel.SLASH)
BACK_SLASH = int(PatternLabel.BACK_SLASH)


def stitch(table, strokes):
    classifier = ScriptedClassifier(table)
    return SequenceStitcher(classifier).stitch(rough_sequencing(strokes)), classifier


def test_rough_sequencing_splits_on_id_gaps():
    strokes = [make_stroke(i, [(0, 0), (10, 10)]) for i in [1, 2, 2, 5, 6]]
    groups = rough_sequencing(strokes)
    assert [[s.id for s in g] for g in groups] == [[1, 2, 2], [5, 6]]


def test_rough_sequencing_keeps_descending_neighbours():
    strokes = [make_stroke(i, [(0, 0), (10, 10)]) for i in [4, 3, 9]]
    assert [[s.id for s in g] for g in rough_sequencing(strokes)] == [[4, 3], [9]]


def test_rough_sequencing_edge_cases():
    assert rough_sequencing([]) == []
    single = make_stroke(1, [(0, 0), (10, 10)])
    assert rough_sequencing([single]) == [[single]]


def test_contiguous_slash_and_back_slash_form_one_result():
    first = make_stroke(1, line((0, 0), (100, 100)))
    second = make_stroke(2, line((100, 0), (0, 100)))
    table = {
        (1,): (SLASH, 92.0),
        (2,): (BACK_SLASH, 90.0),
        (1, 2): (CROSS, 95.0),
    }
    results, classifier = stitch(table, [first, second])

    assert len(results) == 1
    result = results[0]
    assert result.sequence_number == '1'
    assert (result.start_time, result.stop_time) == (first.start_time, second.stop_time)
    assert result.cross_likelihood == 95.0
    assert classifier.calls == [(2,), (1, 2)]


def test_separate_slash_and_back_slash_are_combined():
    first = make_stroke(1, line((0, 0), (100, 100)))
    second = make_stroke(5, line((100, 0), (0, 100)))
    table = {
        (1,): (SLASH, 92.0),
        (5,): (BACK_SLASH, 90.0),
        (1, 5): (CROSS, 97.0),
    }
    results, _ = stitch(table, [first, second])

    assert len(results) == 1
    assert results[0].sequence_number == '1'
    assert results[0].cross_likelihood == 97.0
    assert (results[0].start_time, results[0].stop_time) == (first.start_time, second.stop_time)


def test_circle_with_overlay_stroke_gives_two_results():
    ring = make_stroke(1, circle((50, 50), 40))
    overlay = make_stroke(2, line((30, 30), (70, 70)))
    table = {
        (2,): (CROSSED_OUT, 90.0),
        (1,): (CIRCLE, 95.0),
    }
    results, _ = stitch(table, [ring, overlay])

    assert [r.sequence_number for r in results] == ['1', '2']
    assert results[0].circle_likelihood == 95.0
    assert results[1].crossed_out_likelihood == 90.0
    assert (results[1].start_time, results[1].stop_time) == (overlay.start_time, overlay.stop_time)


def test_tail_outside_circle_is_noise():
    ring = make_stroke(1, circle((50, 50), 40))
    far = make_stroke(2, line((400, 400), (450, 450)))
    table = {
        (2,): (CROSSED_OUT, 90.0),
        (1,): (CIRCLE, 95.0),
    }
    results, _ = stitch(table, [ring, far])
    assert len(results) == 1
    assert results[0].circle_likelihood == 95.0


def test_tail_with_same_label_is_merged():
    first = make_stroke(1, circle((50, 50), 40))
    second = make_stroke(2, circle((52, 50), 38))
    table = {
        (2,): (CIRCLE, 90.0),
        (1,): (CIRCLE, 88.0),
    }
    results, _ = stitch(table, [first, second])

    assert len(results) == 1
    assert results[0].circle_likelihood == 88.0
    assert (results[0].start_time, results[0].stop_time) == (first.start_time, second.stop_time)


def test_unconfident_tail_keeps_peeling():
    first = make_stroke(1, circle((50, 50), 40))
    second = make_stroke(2, line((30, 50), (70, 50)))
    table = {
        (2,): (CIRCLE, 50.0),
        (1, 2): (CIRCLE, 60.0),
    }
    results, classifier = stitch(table, [first, second])

    assert len(results) == 1
    assert results[0].circle_likelihood == 60.0
    assert classifier.calls == [(2,), (1, 2)]


def test_cross_tail_after_slash_is_classified_combined():
    first = make_stroke(1, line((0, 0), (100, 100)))
    second = make_stroke(2, line((100, 0), (0, 100)))
    table = {
        (2,): (CROSS, 90.0),
        (1,): (SLASH, 90.0),
        (1, 2): (CROSS, 97.0),
    }
    results, _ = stitch(table, [first, second])
    assert len(results) == 1
    assert results[0].cross_likelihood == 97.0


def test_cross_tail_after_circle_gives_two_results():
    first = make_stroke(1, circle((50, 50), 40))
    second = make_stroke(2, line((30, 30), (70, 70)))
    table = {
        (2,): (CROSS, 90.0),
        (1,): (CIRCLE, 90.0),
    }
    results, _ = stitch(table, [first, second])
    assert [r.sequence_number for r in results] == ['1', '2']
    assert [r.best_pattern() for r in results] == [PatternLabel.CIRCLE, PatternLabel.CROSS]


def test_single_strokes_after_cross_must_lie_inside_it():
    first = make_stroke(1, line((0, 0), (100, 100)))
    second = make_stroke(2, line((100, 0), (0, 100)))
    inside = make_stroke(10, circle((50, 50), 10))
    outside = make_stroke(20, circle((500, 500), 10))
    table = {
        (2,): (CROSS, 90.0),
        (1,): (SLASH, 90.0),
        (1, 2): (CROSS, 95.0),
        (10,): (CIRCLE, 90.0),
        (20,): (CIRCLE, 90.0),
    }
    results, _ = stitch(table, [first, second, inside, outside])

    assert [r.sequence_number for r in results] == ['1', '2']
    assert results[1].start_time == inside.start_time


def test_pending_slash_is_emitted_before_other_pattern():
    slash = make_stroke(1, line((0, 0), (100, 100)))
    ring = make_stroke(10, circle((300, 300), 40))
    table = {
        (1,): (SLASH, 92.0),
        (10,): (CIRCLE, 95.0),
    }
    results, _ = stitch(table, [slash, ring])

    assert [r.sequence_number for r in results] == ['1', '2']
    assert [r.best_pattern() for r in results] == [PatternLabel.SLASH, PatternLabel.CIRCLE]


def test_pending_slash_is_emitted_before_multi_stroke_sequence():
    slash = make_stroke(1, line((0, 0), (100, 100)))
    ring = make_stroke(10, circle((300, 300), 40))
    overlay = make_stroke(11, line((280, 280), (320, 320)))
    table = {
        (1,): (SLASH, 92.0),
        (11,): (CIRCLE, 90.0),
        (10,): (CIRCLE, 90.0),
    }
    results, _ = stitch(table, [slash, ring, overlay])

    assert [r.sequence_number for r in results] == ['1', '2']
    assert results[0].slash_likelihood == 92.0
    assert results[1].start_time == ring.start_time


def test_last_single_slash_is_emitted():
    slash = make_stroke(1, line((0, 0), (100, 100)))
    results, _ = stitch({(1,): (SLASH, 60.0)}, [slash])
    assert len(results) == 1
    assert results[0].slash_likelihood == 60.0


def test_unknown_predicted_label_raises():
    stroke = make_stroke(1, line((0, 0), (100, 100)))
    with pytest.raises(UnknownPredictedLabelError) as excinfo:
        stitch({(1,): (7, 90.0)}, [stroke])
    assert excinfo.value.label == 7


def test_peel_step_continues_on_slash_with_remaining_strokes():
    strokes = [make_stroke(1, line((0, 0), (100, 100))), make_stroke(2, line((100, 0), (0, 100)))]
    stitcher = SequenceStitcher(ScriptedClassifier({(2,): (SLASH, 99.0)}))
    outcome = stitcher.peel_step(strokes, 1, 1, None)
    assert outcome.action is PeelAction.CONTINUE
    assert outcome.results == []


def test_peel_step_drops_slash_outside_prior_box():
    strokes = [make_stroke(30, line((500, 500), (600, 600)))]
    stitcher = SequenceStitcher(ScriptedClassifier({(30,): (SLASH, 99.0)}))
    prior_box = BoundingBox(0, 0, 100, 100)
    outcome = stitcher.peel_step(strokes, 0, 3, prior_box)
    assert outcome.action is PeelAction.EMIT_NONE
    assert outcome.prior_box == prior_box


def test_result_helpers():
    empty = SequencingResult.empty()
    assert empty.sequence_number == '0'
    assert empty.best_pattern() is None
    assert all(v == 0.0 for v in empty.likelihoods().values())

    strokes = [make_stroke(1, [(0, 0), (5, 5)], start_time=10, stop_time=20)]
    result = SequencingResult.from_classification(4, strokes, Classification(3, {3: 80.0, 1: 20.0}))
    assert result.sequence_number == '4'
    assert (result.start_time, result.stop_time) == (10, 20)
    assert result.best_pattern() == PatternLabel.CIRCLE


def test_pending_slash_does_not_pair_across_multi_stroke_sequence():
    slash = make_stroke(1, line((0, 0), (100, 100)))
    ring = make_stroke(10, circle((300, 300), 40))
    overlay = make_stroke(11, line((280, 280), (320, 320)))
    back_slash = make_stroke(20, line((100, 0), (0, 100)))
    table = {
        (1,): (SLASH, 92.0),
        (11,): (CIRCLE, 90.0),
        (10,): (CIRCLE, 90.0),
        (20,): (BACK_SLASH, 93.0),
    }
    results, classifier = stitch(table, [slash, ring, overlay, back_slash])

    assert [r.best_pattern() for r in results] == [PatternLabel.SLASH, PatternLabel.CIRCLE,
                                                   PatternLabel.BACK_SLASH]
    assert [r.sequence_number for r in results] == ['1', '2', '3']
    assert (1, 20) not in classifier.calls


def test_tail_strokes_stay_in_drawing_order():
    strokes = [make_stroke(1, circle((50, 50), 40)),
               make_stroke(2, line((30, 30), (70, 70))),
               make_stroke(3, line((70, 30), (30, 70)))]
    table = {
        (3,): (CIRCLE, 50.0),
        (2, 3): (CROSSED_OUT, 90.0),
        (1,): (CIRCLE, 95.0),
    }
    results, classifier = stitch(table, strokes)

    assert classifier.calls == [(3,), (2, 3), (1,)]
    assert [r.sequence_number for r in results] == ['1', '2']
    assert (results[1].start_time, results[1].stop_time) == (strokes[1].start_time,
                                                             strokes[2].stop_time)
