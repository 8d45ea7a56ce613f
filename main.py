#!/usr/bin/env python3
"""
Stroke Recognition - Main Entry Point
Recognizes pen patterns in the regions of a layout, or trains the pattern model.

Input document for ``recognize``::

    {
      "regions": [{"name": "q1", "left": 0, "top": 0, "right": 200, "bottom": 100,
                   "extension": 10}],
      "strokes": [{"id": 1, "start_time": 0, "stop_time": 120,
                   "points": [[10, 10, 0], [12, 14, 8], ...]}]
    }
"""

import argparse
import json
import sys

from stroke_recognition.core.region import PatternRegion
from stroke_recognition.exceptions import StrokeRecognitionError
from stroke_recognition.gestures.pattern_classifier import PatternClassifier
from stroke_recognition.gestures.training import train_model
from stroke_recognition.utils.logger import RecognitionLogger, configure_logging
from stroke_recognition.utils.stroke_utils import Stroke


def load_regions(path: str, min_length: float = 0.0):
    """Read a recognition document and distribute its strokes over the regions."""
    with open(path, 'r', encoding='utf-8') as f:
        document = json.load(f)

    regions = [PatternRegion.from_dict(r) for r in document.get('regions', [])]
    for record in document.get('strokes', []):
        stroke = Stroke.from_dict(record)
        if not stroke.valid_points():
            continue
        stroke.sort_points()
        for region in regions:
            if region.add_stroke(stroke, min_length):
                break

    return regions


def recognize(args) -> int:
    regions = load_regions(args.input, args.min_length)
    classifier = PatternClassifier(args.model)
    results_logger = RecognitionLogger(args.debug_file)
    try:
        for region in regions:
            results = region.recognize(args.show_empty, classifier=classifier)
            results_logger.log_results(region.name, results)
    finally:
        results_logger.close()
    return 0


def train(args) -> int:
    classifier = train_model(args.data, args.model, args.scale_range, folds=args.folds)
    print(f"✅ Model saved to {classifier.model_path}")
    return 0


def main(argv=None) -> int:
    """Main entry point for the stroke recognizer."""
    parser = argparse.ArgumentParser(description="Recognize pen patterns drawn into layout regions.")
    parser.add_argument('-v', '--verbose', action='store_true', help="log sequencing decisions")
    subparsers = parser.add_subparsers(dest='command', required=True)

    recognize_parser = subparsers.add_parser('recognize', help="recognize the patterns of a document")
    recognize_parser.add_argument('input', help="JSON document with regions and strokes")
    recognize_parser.add_argument('--model', help="persisted pattern model")
    recognize_parser.add_argument('--min-length', type=float, default=0.0,
                                  help="minimum stroke length")
    recognize_parser.add_argument('--show-empty', action='store_true',
                                  help="report empty regions")
    recognize_parser.add_argument('--debug-file', help="mirror results to this file")
    recognize_parser.set_defaults(handler=recognize)

    train_parser = subparsers.add_parser('train', help="train the pattern model")
    train_parser.add_argument('data', help="training samples in svmlight format")
    train_parser.add_argument('--model', help="where to save the model")
    train_parser.add_argument('--scale-range', help="where to save the scale range")
    train_parser.add_argument('--folds', type=int, default=10, help="cross-validation folds")
    train_parser.set_defaults(handler=train)

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        return args.handler(args)
    except (StrokeRecognitionError, ValueError, OSError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
