"""
Decision trees generated with ID3.

Each internal node thresholds one vocabulary token's length-normalized
frequency; the (token, threshold) pair is chosen to maximize information gain.
"""

from typing import List, Optional, Union

import numpy as np
from sklearn.tree import DecisionTreeClassifier

from ..codec import ModelReader, ModelWriter
from ..config import MAX_TREE_DEPTH, IDTreeConfig
from ..exceptions import DecodeError
from ..features import normalize_rows
from ..models.data_models import SampleCorpus, Vocabulary
from .base import VocabularyClassifier

_LEAF = 0
_SPLIT = 1

# Child id scikit-learn uses for leaves
_NO_CHILD = -1


class Leaf:
    __slots__ = ("label",)

    def __init__(self, label: int):
        self.label = label


class Split:
    """Samples with frequency <= threshold go below, the rest above."""
    __slots__ = ("feature", "threshold", "below", "above")

    def __init__(self, feature: int, threshold: float, below: 'Node', above: 'Node'):
        self.feature = feature
        self.threshold = threshold
        self.below = below
        self.above = above


Node = Union[Leaf, Split]


class IDTreeClassifier(VocabularyClassifier):
    """Decision tree classifier."""

    MAGIC = b"IDT\x01"

    def __init__(self, vocabulary: Vocabulary, labels: List[str], root: Node):
        super().__init__(vocabulary, labels)
        self._root = root

    def _predict(self, features: np.ndarray) -> int:
        node = self._root
        while isinstance(node, Split):
            node = node.below if features[node.feature] <= node.threshold else node.above
        return node.label

    def depth(self) -> int:
        """Number of splits on the longest root-to-leaf path."""
        def measure(node: Node) -> int:
            if isinstance(node, Leaf):
                return 0
            return 1 + max(measure(node.below), measure(node.above))
        return measure(self._root)

    def _write_parameters(self, writer: ModelWriter) -> None:
        stack = [self._root]
        while stack:
            node = stack.pop()
            if isinstance(node, Leaf):
                writer.write_byte(_LEAF)
                writer.write_uint(node.label)
            else:
                writer.write_byte(_SPLIT)
                writer.write_uint(node.feature)
                writer.write_float(node.threshold)
                # Pre-order: below is written before above
                stack.append(node.above)
                stack.append(node.below)

    @classmethod
    def _read_parameters(cls, reader: ModelReader, vocabulary: Vocabulary,
                         labels: List[str]) -> 'IDTreeClassifier':
        def read_node(depth: int) -> Node:
            if depth > MAX_TREE_DEPTH:
                raise DecodeError(f"Tree deeper than {MAX_TREE_DEPTH} levels")
            tag = reader.read_byte()
            if tag == _LEAF:
                label = reader.read_uint()
                if label >= len(labels):
                    raise DecodeError(f"Leaf label {label} out of range for {len(labels)} labels")
                return Leaf(label)
            if tag == _SPLIT:
                feature = reader.read_uint()
                if feature >= len(vocabulary):
                    raise DecodeError(f"Split feature {feature} out of range for {len(vocabulary)} tokens")
                threshold = reader.read_float()
                below = read_node(depth + 1)
                above = read_node(depth + 1)
                return Split(feature, threshold, below, above)
            raise DecodeError(f"Unknown tree node tag {tag}")

        return cls(vocabulary, labels, read_node(0))


def train(corpus: SampleCorpus, config: Optional[IDTreeConfig] = None) -> IDTreeClassifier:
    """
    Grow a decision tree on a corpus.

    Splits are chosen by scikit-learn's DecisionTreeClassifier with the entropy
    criterion, i.e. by information gain, and the fitted tree is copied node by
    node into Leaf and Split objects.

    Args:
        corpus: Training corpus, usually reduced to a vocabulary
        config: Tree settings (defaults to the global configuration)

    Returns:
        Trained decision tree classifier
    """
    if config is None:
        from ..config import config as global_config
        config = global_config.idtree

    counts, targets, labels, vocabulary = corpus.to_arrays()
    estimator = DecisionTreeClassifier(
        criterion="entropy",
        max_depth=config.max_depth,
        min_samples_split=config.min_samples_split,
        random_state=config.seed,
    )
    estimator.fit(normalize_rows(counts), targets)
    return IDTreeClassifier(vocabulary, labels, _copy_tree(estimator.tree_, estimator.classes_))


def decode(data: bytes) -> IDTreeClassifier:
    return IDTreeClassifier.decode(data)


def _copy_tree(tree, classes: np.ndarray) -> Node:
    def copy(node: int) -> Node:
        if tree.children_left[node] == _NO_CHILD:
            # Majority label, lowest label index on ties
            return Leaf(int(classes[np.argmax(tree.value[node][0])]))
        return Split(
            int(tree.feature[node]),
            float(tree.threshold[node]),
            copy(int(tree.children_left[node])),
            copy(int(tree.children_right[node])),
        )

    return copy(0)
