"""
Sample loader that builds a training corpus from a directory of labeled files.

The expected layout is one subdirectory per language:

    samples/
        Go/main.go
        Python/app.py
        Python/lib/util.py
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from .exceptions import ConfigurationError, DatasetLoadingError
from .models.data_models import FrequencyVector, SampleCorpus
from .tokens import count_tokens

logger = logging.getLogger(__name__)


class SampleDirectory:
    """Loads a SampleCorpus from a directory of per-language sample files."""

    def __init__(self, root: str):
        """
        Initialize the loader with a sample directory path.

        Args:
            root: Directory containing one subdirectory per language
        """
        self.root = Path(root)
        self._corpus: Optional[SampleCorpus] = None
        self._skipped_files: List[Path] = []

    def load(self) -> SampleCorpus:
        """
        Tokenize every sample file.

        Hidden files and directories are ignored. Files without any token are
        skipped with a warning, as are languages left without samples.

        Returns:
            SampleCorpus keyed by subdirectory name

        Raises:
            DatasetLoadingError: If the directory is missing or holds no usable samples
        """
        if not self.root.exists():
            raise DatasetLoadingError(f"Sample directory not found: {self.root}")

        if not self.root.is_dir():
            raise DatasetLoadingError(f"Path is not a directory: {self.root}")

        self._skipped_files = []
        samples: Dict[str, List[FrequencyVector]] = {}
        for language_dir in sorted(self.root.iterdir()):
            if language_dir.name.startswith(".") or not language_dir.is_dir():
                continue

            vectors = self._load_language(language_dir)
            if not vectors:
                logger.warning(f"Skipping language '{language_dir.name}': no usable samples")
                continue
            samples[language_dir.name] = vectors
            logger.debug(f"Loaded {len(vectors)} samples for '{language_dir.name}'")

        if not samples:
            raise DatasetLoadingError(f"No language samples found in {self.root}")

        try:
            self._corpus = SampleCorpus(samples=samples)
        except ConfigurationError as e:
            raise DatasetLoadingError(f"Invalid samples in {self.root}: {e}") from e

        logger.info(
            f"Loaded {self._corpus.num_samples} samples for {len(samples)} languages from {self.root}"
        )
        return self._corpus

    def _load_language(self, language_dir: Path) -> List[FrequencyVector]:
        vectors = []
        for path in sorted(language_dir.rglob("*")):
            relative = path.relative_to(language_dir)
            if any(part.startswith(".") for part in relative.parts) or not path.is_file():
                continue

            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                raise DatasetLoadingError(f"Failed to read sample file {path}: {e}") from e

            vector = count_tokens(text)
            if not vector:
                logger.warning(f"Skipping sample without tokens: {path}")
                self._skipped_files.append(path)
                continue
            vectors.append(vector)
        return vectors

    @property
    def corpus(self) -> SampleCorpus:
        """
        Get the loaded corpus.

        Raises:
            DatasetLoadingError: If the directory hasn't been loaded yet
        """
        if self._corpus is None:
            raise DatasetLoadingError("Samples not loaded. Call load() first.")
        return self._corpus

    @property
    def skipped_files(self) -> List[Path]:
        """Sample files skipped during the last load because they had no tokens."""
        return list(self._skipped_files)


def load_samples(root: str) -> SampleCorpus:
    """Load a SampleCorpus from a directory of per-language sample files."""
    return SampleDirectory(root).load()
