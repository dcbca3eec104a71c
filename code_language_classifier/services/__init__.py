"""
Service interfaces for the code language classifier.
"""

from .interfaces import Classifier

__all__ = [
    "Classifier"
]
