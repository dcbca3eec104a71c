"""
Core interfaces for the code language classifier.
"""

from abc import ABC, abstractmethod
from typing import List, Mapping


class Classifier(ABC):
    """Interface every trained model implements, whichever algorithm produced it."""

    @abstractmethod
    def classify(self, vector: Mapping[str, float]) -> str:
        """
        Classify a tokenized source file.

        Args:
            vector: Token to raw count mapping. Tokens the model was not
                trained on are ignored; an empty mapping is valid.

        Returns:
            Name of the most likely language, always a member of labels()
        """
        pass

    @abstractmethod
    def labels(self) -> List[str]:
        """
        Return every language classify() might return.

        Returns:
            Non-empty list of language names. Callers may modify it freely.
        """
        pass

    @abstractmethod
    def encode(self) -> bytes:
        """
        Serialize this classifier as binary data.

        Returns:
            Bytes accepted by the matching backend's decode function
        """
        pass
