"""
Training orchestration for the code language classifier.

This module selects one vocabulary per run, reduces the corpus to it and
trains every requested backend on the reduced corpus in a worker pool. A
backend that fails is reported alongside the ones that succeeded; it never
aborts the run.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from .exceptions import ConfigurationError
from .models.data_models import BackendResult, SampleCorpus, TrainingReport
from .registry import Backend, get_backend
from .vocabulary import VocabularySelector

logger = logging.getLogger(__name__)


class ClassifierTrainer:
    """
    Trains every selected backend against the same vocabulary.

    Backend trainings share nothing but the immutable reduced corpus, so they
    run concurrently in a thread pool.
    """

    def __init__(
        self,
        backends: Optional[Sequence[Union[str, Backend]]] = None,
        max_workers: Optional[int] = None
    ):
        """
        Initialize the trainer.

        Args:
            backends: Backends (or their identifiers) to train; defaults to all of them
            max_workers: Worker threads (defaults to config value)

        Raises:
            ConfigurationError: If a backend is unknown, listed twice, or max_workers is invalid
        """
        from .config import config

        if backends is None:
            self.backends: List[Backend] = list(Backend)
        else:
            resolved = [b if isinstance(b, Backend) else get_backend(b) for b in backends]
            if not resolved:
                raise ConfigurationError("At least one backend must be selected")
            if len(set(resolved)) != len(resolved):
                raise ConfigurationError("Backends must not be listed more than once")
            # Keep registry order so reports are stable regardless of argument order
            self.backends = [b for b in Backend if b in resolved]

        self.max_workers = max_workers if max_workers is not None else config.training.max_workers
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")

    def train(self, corpus: SampleCorpus, max_tokens: int) -> TrainingReport:
        """
        Run one training pass.

        Args:
            corpus: Full (unreduced) training corpus
            max_tokens: Maximum vocabulary size

        Returns:
            TrainingReport with one BackendResult per selected backend

        Raises:
            ConfigurationError: If the corpus or max_tokens is invalid (before any training starts)
        """
        self._validate_corpus(corpus)
        selector = VocabularySelector(max_tokens)

        vocabulary = selector.select(corpus)
        reduced = corpus.restrict(vocabulary)
        logger.info(
            f"Training {len(self.backends)} backends on {corpus.num_samples} samples "
            f"of {len(corpus.languages)} languages with {len(vocabulary)} tokens"
        )

        report = TrainingReport(max_tokens=max_tokens, vocabulary=vocabulary)
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(self.backends))) as pool:
            futures = [(backend, pool.submit(_train_backend, backend, reduced)) for backend in self.backends]
            for backend, future in futures:
                report.results[backend.identifier] = future.result()
        return report

    def sweep(
        self,
        corpus: SampleCorpus,
        sizes: Iterable[int],
        cancel_event: Optional[threading.Event] = None
    ) -> Iterator[TrainingReport]:
        """
        Train once per vocabulary size.

        Every size is validated before the first pass starts. Cancellation is
        checked before each size, never in the middle of a pass.

        Args:
            corpus: Full training corpus
            sizes: Vocabulary sizes to try, in order
            cancel_event: Set it to stop before the next size

        Yields:
            One TrainingReport per completed size
        """
        sizes = list(sizes)
        if not sizes:
            raise ConfigurationError("At least one vocabulary size is required")
        for size in sizes:
            VocabularySelector(size)
        self._validate_corpus(corpus)

        for size in sizes:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Sweep cancelled before vocabulary size {size}")
                return
            yield self.train(corpus, size)

    @staticmethod
    def _validate_corpus(corpus: SampleCorpus) -> None:
        if not isinstance(corpus, SampleCorpus):
            raise ConfigurationError(f"Expected a SampleCorpus, got {type(corpus).__name__}")


def _train_backend(backend: Backend, corpus: SampleCorpus) -> BackendResult:
    start = time.perf_counter()
    try:
        classifier = backend.train(corpus)
    except Exception as e:
        elapsed = time.perf_counter() - start
        logger.error(f"Backend '{backend.identifier}' failed to train after {elapsed:.2f}s: {e}")
        return BackendResult(
            backend=backend.identifier,
            error=f"{type(e).__name__}: {e}",
            training_time=elapsed
        )

    elapsed = time.perf_counter() - start
    logger.info(f"Backend '{backend.identifier}' trained in {elapsed:.2f}s")
    return BackendResult(backend=backend.identifier, classifier=classifier, training_time=elapsed)


def train_classifiers(
    corpus: SampleCorpus,
    max_tokens: Optional[int] = None,
    backends: Optional[Sequence[Union[str, Backend]]] = None
) -> TrainingReport:
    """
    Train the given backends (all by default) on one vocabulary of at most max_tokens tokens.

    max_tokens defaults to the configured vocabulary size.
    """
    if max_tokens is None:
        from .config import config
        max_tokens = config.vocabulary.default_max_tokens
    return ClassifierTrainer(backends=backends).train(corpus, max_tokens)
