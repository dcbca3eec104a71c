"""
Command-line driver for training and using language classifiers.

    code-language-classifier train samples/ 100 models.json
    code-language-classifier sweep samples/ 10 50 100
    code-language-classifier classify models.json main.go
    code-language-classifier evaluate models.json test-samples/
"""

import argparse
import logging
import os
import sys
import threading
from typing import List, Optional

from .dataset_loader import load_samples
from .evaluation import evaluate_classifier, split_corpus
from .exceptions import ClassifierError
from .language_classifier import LanguageClassifier
from .model_store import load_bundle, save_bundle
from .registry import BACKEND_NAMES, describe_backends
from .trainer import ClassifierTrainer

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


def _fraction(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if not 0.0 < number < 1.0:
        raise argparse.ArgumentTypeError(f"must be between 0 and 1: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="code-language-classifier",
        description="Train and apply programming language classifiers.",
        epilog="Backends:\n  " + "\n  ".join(describe_backends()),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    train = subparsers.add_parser("train", help="Train classifiers and write a model bundle")
    train.add_argument("sample_dir", help="Directory with one subdirectory of samples per language")
    train.add_argument("max_tokens", type=_positive_int, help="Maximum vocabulary size")
    train.add_argument("output", help="Output bundle path (JSON)")
    train.add_argument("--backend", action="append", choices=BACKEND_NAMES, dest="backends",
                       help="Backend to train (repeatable, default: all)")
    train.add_argument("--best", action="store_true",
                       help="Only keep the backend with the best holdout accuracy")
    train.add_argument("--holdout", type=_fraction, default=None,
                       help="Fraction of each language held out to pick the best backend (requires --best)")
    train.add_argument("--workers", type=_positive_int, default=None, help="Worker threads")

    sweep = subparsers.add_parser("sweep", help="Compare backends over several vocabulary sizes")
    sweep.add_argument("sample_dir", help="Directory with one subdirectory of samples per language")
    sweep.add_argument("sizes", type=_positive_int, nargs="+", help="Vocabulary sizes to try")
    sweep.add_argument("--backend", action="append", choices=BACKEND_NAMES, dest="backends",
                       help="Backend to train (repeatable, default: all)")
    sweep.add_argument("--holdout", type=_fraction, default=None,
                       help="Fraction of each language held out for scoring")
    sweep.add_argument("--workers", type=_positive_int, default=None, help="Worker threads")

    classify = subparsers.add_parser("classify", help="Classify source files with a model bundle")
    classify.add_argument("bundle", help="Bundle written by 'train'")
    classify.add_argument("files", nargs="+", help="Source files to classify")
    classify.add_argument("--backend", choices=BACKEND_NAMES, default=None,
                          help="Backend to use (default: vote across all)")

    evaluate = subparsers.add_parser("evaluate", help="Measure bundle accuracy on labeled samples")
    evaluate.add_argument("bundle", help="Bundle written by 'train'")
    evaluate.add_argument("sample_dir", help="Directory with one subdirectory of samples per language")

    return parser


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def _holdout_fraction(value: Optional[float]) -> float:
    from .config import config
    return value if value is not None else config.training.default_holdout_fraction


def _run_train(args: argparse.Namespace) -> int:
    corpus = load_samples(args.sample_dir)
    trainer = ClassifierTrainer(backends=args.backends, max_workers=args.workers)

    if args.best:
        training, holdout = split_corpus(corpus, _holdout_fraction(args.holdout))
        scoring = trainer.train(training, args.max_tokens)
        best_name, _ = scoring.best(holdout)
        logger.info(f"Best backend on holdout: {best_name}")
        trainer = ClassifierTrainer(backends=[best_name], max_workers=args.workers)

    report = trainer.train(corpus, args.max_tokens)
    for name, result in report.results.items():
        if result.succeeded:
            print(f"{name}: trained in {result.training_time:.2f}s")
        else:
            print(f"{name}: failed to train ({result.error})")

    if not report.classifiers:
        logger.error("No backend trained successfully")
        return 1

    save_bundle(report, args.output)
    return 0


def _run_sweep(args: argparse.Namespace) -> int:
    corpus = load_samples(args.sample_dir)
    training, holdout = split_corpus(corpus, _holdout_fraction(args.holdout))
    trainer = ClassifierTrainer(backends=args.backends, max_workers=args.workers)
    cancel = threading.Event()
    interrupted = False

    try:
        for report in trainer.sweep(training, args.sizes, cancel_event=cancel):
            try:
                _print_scores(report, holdout)
            except KeyboardInterrupt:
                # The sweep stops before training the next size
                cancel.set()
                interrupted = True
    except KeyboardInterrupt:
        interrupted = True

    if interrupted:
        logger.warning("Sweep interrupted")
        return 1
    return 0


def _print_scores(report, holdout) -> None:
    for name, result in report.results.items():
        if result.succeeded:
            accuracy = evaluate_classifier(result.classifier, holdout).accuracy
            print(f"{report.max_tokens}\t{name}\t{accuracy:.4f}")
        else:
            print(f"{report.max_tokens}\t{name}\tfailed ({result.error})")


def _run_classify(args: argparse.Namespace) -> int:
    classifier = LanguageClassifier(args.bundle, backend=args.backend)
    for path in args.files:
        result = classifier.predict_file(path)
        print(f"{path}\t{result.language}")
    return 0


def _run_evaluate(args: argparse.Namespace) -> int:
    bundle = load_bundle(args.bundle)
    corpus = load_samples(args.sample_dir)
    for name, classifier in bundle.classifiers.items():
        result = evaluate_classifier(classifier, corpus)
        print(f"{name}\t{result.accuracy:.4f}\t({result.correct}/{result.total})")
    return 0


_COMMANDS = {
    "train": _run_train,
    "sweep": _run_sweep,
    "classify": _run_classify,
    "evaluate": _run_evaluate,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "train" and args.holdout is not None and not args.best:
        parser.error("--holdout only applies together with --best")
    _configure_logging(args.verbose)

    try:
        return _COMMANDS[args.command](args)
    except ClassifierError as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
