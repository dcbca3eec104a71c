"""
Classifier backends. Each module exposes train(corpus, config=None) and decode(data).
"""

from .idtree import IDTreeClassifier
from .neuralnet import NeuralNetClassifier
from .knn import KNNClassifier
from .svm import SVMClassifier
from .gaussbayes import GaussBayesClassifier

__all__ = [
    "IDTreeClassifier",
    "NeuralNetClassifier",
    "KNNClassifier",
    "SVMClassifier",
    "GaussBayesClassifier"
]
