"""
Tests for the classifier contract shared by every backend.
"""

import struct
from unittest.mock import MagicMock, patch

import pytest
import numpy as np

from code_language_classifier.backends import (
    GaussBayesClassifier,
    IDTreeClassifier,
    KNNClassifier,
    NeuralNetClassifier,
    SVMClassifier,
)
from code_language_classifier.backends import idtree, knn, neuralnet, svm, gaussbayes
from code_language_classifier.codec import ModelWriter
from code_language_classifier.config import IDTreeConfig, KNNConfig, NeuralNetConfig
from code_language_classifier.exceptions import DecodeError, TrainingFailure
from code_language_classifier.features import normalize
from code_language_classifier.models.data_models import SampleCorpus
from code_language_classifier.registry import Backend
from code_language_classifier.services.interfaces import Classifier

from conftest import GO_LIKE, PYTHON_LIKE

ALL_BACKENDS = list(Backend)


@pytest.mark.parametrize("backend", ALL_BACKENDS, ids=lambda b: b.identifier)
class TestClassifierContract:
    """Properties every backend's classifier must satisfy."""

    def test_scenario_labels_func_and_def(self, backend, reduced_scenario_corpus):
        """Test a 'func' dominated vector is go and a 'def' dominated one is python."""
        classifier = backend.train(reduced_scenario_corpus)

        assert classifier.classify(GO_LIKE) == "go"
        assert classifier.classify(PYTHON_LIKE) == "python"

    def test_classify_returns_known_label(self, backend, reduced_scenario_corpus, query_vectors):
        """Test classify always returns a member of labels()."""
        classifier = backend.train(reduced_scenario_corpus)

        assert isinstance(classifier, Classifier)
        for vector in query_vectors:
            assert classifier.classify(vector) in classifier.labels()

    def test_labels_match_corpus(self, backend, reduced_scenario_corpus):
        """Test labels() reports every language of the training corpus."""
        classifier = backend.train(reduced_scenario_corpus)

        assert sorted(classifier.labels()) == ["go", "python"]

    def test_labels_returns_copy(self, backend, reduced_scenario_corpus):
        """Test mutating the returned labels does not affect the classifier."""
        classifier = backend.train(reduced_scenario_corpus)

        labels = classifier.labels()
        labels.clear()
        assert sorted(classifier.labels()) == ["go", "python"]

    def test_all_zero_vector(self, backend, reduced_scenario_corpus):
        """Test an empty or all-zero vector still yields a valid label."""
        classifier = backend.train(reduced_scenario_corpus)

        assert classifier.classify({}) in classifier.labels()
        assert classifier.classify({"func": 0.0, "def": 0.0}) in classifier.labels()

    def test_round_trip(self, backend, reduced_scenario_corpus, query_vectors):
        """Test decode(encode(c)) behaves identically to c."""
        classifier = backend.train(reduced_scenario_corpus)
        encoded = classifier.encode()

        decoded = backend.decode(encoded)

        assert isinstance(encoded, bytes)
        assert type(decoded) is type(classifier)
        assert decoded.labels() == classifier.labels()
        for vector in query_vectors:
            assert decoded.classify(vector) == classifier.classify(vector)
        assert decoded.encode() == encoded

    def test_single_language(self, backend, single_language_corpus, query_vectors):
        """Test a one-language corpus always classifies as that language."""
        classifier = backend.train(single_language_corpus)

        assert classifier.labels() == ["go"]
        for vector in query_vectors:
            assert classifier.classify(vector) == "go"

    def test_unreduced_corpus(self, backend, scenario_corpus):
        """Test training on a corpus without an attached vocabulary uses every token."""
        classifier = backend.train(scenario_corpus)

        assert classifier.vocabulary.tokens == tuple(scenario_corpus.tokens())
        assert classifier.classify(GO_LIKE) == "go"

    def test_single_sample_per_language(self, backend):
        """Test training succeeds with the smallest possible corpus."""
        corpus = SampleCorpus(samples={"go": [{"func": 10, "def": 1}], "python": [{"def": 10, "func": 1}]})

        classifier = backend.train(corpus)

        assert classifier.classify({"func": 5}) == "go"
        assert classifier.classify({"def": 5}) == "python"

    def test_corrupted_magic(self, backend, reduced_scenario_corpus):
        """Test a corrupted magic tag raises DecodeError."""
        data = bytearray(backend.train(reduced_scenario_corpus).encode())
        data[0] ^= 0xFF

        with pytest.raises(DecodeError, match="Bad magic tag"):
            backend.decode(bytes(data))

    def test_corrupted_version(self, backend, reduced_scenario_corpus):
        """Test an unknown format version raises DecodeError."""
        data = bytearray(backend.train(reduced_scenario_corpus).encode())
        data[4:6] = b"\xff\xff"

        with pytest.raises(DecodeError, match="Unsupported format version"):
            backend.decode(bytes(data))

    def test_corrupted_label_count(self, backend, reduced_scenario_corpus):
        """Test an impossible length field raises DecodeError."""
        data = bytearray(backend.train(reduced_scenario_corpus).encode())
        data[6:10] = b"\xff\xff\xff\xff"

        with pytest.raises(DecodeError):
            backend.decode(bytes(data))

    def test_truncated_data(self, backend, reduced_scenario_corpus):
        """Test truncated bytes raise DecodeError at every length."""
        data = backend.train(reduced_scenario_corpus).encode()

        for length in (0, 3, 6, 10, len(data) // 2, len(data) - 1):
            with pytest.raises(DecodeError):
                backend.decode(data[:length])

    def test_trailing_bytes(self, backend, reduced_scenario_corpus):
        """Test extra bytes after a valid classifier raise DecodeError."""
        data = backend.train(reduced_scenario_corpus).encode()

        with pytest.raises(DecodeError, match="trailing bytes"):
            backend.decode(data + b"\x00")

    def test_non_bytes_input(self, backend):
        """Test decoding something other than bytes raises DecodeError."""
        with pytest.raises(DecodeError, match="Expected bytes"):
            backend.decode("not bytes")

    def test_other_backend_bytes(self, backend, reduced_scenario_corpus):
        """Test bytes of another backend are rejected."""
        for other in ALL_BACKENDS:
            if other is backend:
                continue
            data = other.train(reduced_scenario_corpus).encode()
            with pytest.raises(DecodeError, match="Bad magic tag"):
                backend.decode(data)

    def test_flipped_bytes(self, backend, reduced_scenario_corpus):
        """Test flipping any single byte either still decodes or raises DecodeError."""
        classifier = backend.train(reduced_scenario_corpus)
        data = classifier.encode()

        for position in range(len(data)):
            corrupted = bytearray(data)
            corrupted[position] ^= 0xFF
            try:
                decoded = backend.decode(bytes(corrupted))
            except DecodeError:
                continue
            assert type(decoded) is type(classifier)


class TestIDTree:
    """Test cases specific to the decision tree backend."""

    def test_pure_corpus_is_a_leaf(self, single_language_corpus):
        """Test a single-label corpus grows no splits."""
        classifier = idtree.train(single_language_corpus)

        assert isinstance(classifier, IDTreeClassifier)
        assert classifier.depth() == 0

    def test_max_depth_is_respected(self):
        """Test the tree never grows deeper than max_depth."""
        samples = {
            "a": [{"x": 1, "y": 9}, {"x": 5, "y": 5}, {"x": 9, "y": 1}],
            "b": [{"x": 3, "y": 7}, {"x": 7, "y": 3}],
        }
        corpus = SampleCorpus(samples=samples)

        shallow = idtree.train(corpus, IDTreeConfig(max_depth=1))
        deep = idtree.train(corpus, IDTreeConfig(max_depth=10))

        assert shallow.depth() == 1
        assert deep.depth() > 1
        # A deep enough tree separates the interleaved training samples
        for label, vectors in samples.items():
            for vector in vectors:
                assert deep.classify(vector) == label

    def test_identical_samples_with_different_labels(self):
        """Test indistinguishable samples fall back to the lowest label."""
        corpus = SampleCorpus(samples={"b": [{"x": 1}], "a": [{"x": 1}]})

        classifier = idtree.train(corpus)

        assert classifier.depth() == 0
        assert classifier.classify({"x": 1}) == "a"

    def test_bad_node_tag(self, reduced_scenario_corpus):
        """Test an unknown node tag raises DecodeError."""
        classifier = idtree.train(reduced_scenario_corpus)
        data = bytearray(classifier.encode())
        header_length = len(IDTreeClassifier(classifier.vocabulary, classifier.labels(), idtree.Leaf(0)).encode()) - 5
        data[header_length] = 7

        with pytest.raises(DecodeError, match="Unknown tree node tag"):
            idtree.decode(bytes(data))

    def test_leaf_label_out_of_range(self, reduced_scenario_corpus):
        """Test a leaf pointing past the label list raises DecodeError."""
        vocabulary = reduced_scenario_corpus.feature_vocabulary()
        data = bytearray(IDTreeClassifier(vocabulary, ["go"], idtree.Leaf(0)).encode())
        data[-4:] = b"\x00\x00\x00\x05"

        with pytest.raises(DecodeError, match="out of range"):
            idtree.decode(bytes(data))


class TestNeuralNet:
    """Test cases specific to the neural network backend."""

    def test_training_is_deterministic(self, reduced_scenario_corpus):
        """Test the same seed produces byte-identical networks."""
        first = neuralnet.train(reduced_scenario_corpus)
        second = neuralnet.train(reduced_scenario_corpus)

        assert first.encode() == second.encode()

    def test_hidden_size_from_config(self, reduced_scenario_corpus):
        """Test the hidden layer width follows the configuration."""
        classifier = neuralnet.train(reduced_scenario_corpus, NeuralNetConfig(hidden_size=3, iterations=50))

        assert isinstance(classifier, NeuralNetClassifier)
        assert classifier.hidden_size == 3

    def test_two_labels_score_both_outputs(self, reduced_scenario_corpus):
        """Test a two-label network still exposes one output per label."""
        classifier = neuralnet.train(reduced_scenario_corpus)

        scores = classifier.scores(normalize(classifier.vocabulary.vectorize(GO_LIKE)))
        assert scores.shape == (2,)
        assert scores[0] == 0.0
        assert classifier.labels()[int(np.argmax(scores))] == "go"

    def test_three_labels(self):
        """Test a network separates three languages."""
        corpus = SampleCorpus(samples={
            "go": [{"func": 5, "x": 1}, {"func": 6}],
            "python": [{"def": 5, "x": 1}, {"def": 4}],
            "ruby": [{"end": 5, "x": 1}, {"end": 7}],
        })

        classifier = neuralnet.train(corpus)

        assert classifier.labels() == ["go", "python", "ruby"]
        assert classifier.classify({"func": 6}) == "go"
        assert classifier.classify({"def": 4}) == "python"
        assert classifier.classify({"end": 7}) == "ruby"

    def test_divergence_raises_training_failure(self, reduced_scenario_corpus):
        """Test non-finite weights are reported as TrainingFailure."""
        diverged = MagicMock()
        diverged.coefs_ = [np.full((2, 16), np.nan), np.full((16, 1), np.nan)]
        diverged.intercepts_ = [np.zeros(16), np.zeros(1)]
        diverged.n_iter_ = 5

        with patch("code_language_classifier.backends.neuralnet.MLPClassifier", return_value=diverged):
            with pytest.raises(TrainingFailure, match="diverged"):
                neuralnet.train(reduced_scenario_corpus, NeuralNetConfig(iterations=5))

    def test_solver_error_raises_training_failure(self, reduced_scenario_corpus):
        """Test a solver error is reported as TrainingFailure."""
        failing = MagicMock()
        failing.fit.side_effect = ValueError("Solver produced non-finite parameter weights")

        with patch("code_language_classifier.backends.neuralnet.MLPClassifier", return_value=failing):
            with pytest.raises(TrainingFailure, match="non-finite parameter weights"):
                neuralnet.train(reduced_scenario_corpus)


class TestKNN:
    """Test cases specific to the nearest neighbor backend."""

    def test_k_is_capped_by_sample_count(self, reduced_scenario_corpus):
        """Test k larger than the training set still classifies."""
        classifier = knn.train(reduced_scenario_corpus, KNNConfig(k=50))

        assert isinstance(classifier, KNNClassifier)
        assert classifier.k == 50
        assert len(classifier.neighbors(np.array([0.5, 0.5]))) == 6

    def test_vote_tie_goes_to_nearest(self):
        """Test a tied vote picks the label of the closest neighbor."""
        corpus = SampleCorpus(samples={"a": [{"x": 1}], "b": [{"y": 1}]})

        classifier = knn.train(corpus, KNNConfig(k=2))

        assert classifier.classify({"x": 3, "y": 1}) == "a"
        assert classifier.classify({"x": 1, "y": 3}) == "b"

    def test_majority_wins(self):
        """Test the majority label among k neighbors wins."""
        corpus = SampleCorpus(samples={
            "a": [{"x": 1}, {"x": 1, "y": 0.1}],
            "b": [{"y": 1}, {"x": 1, "y": 0.05}],
        })

        classifier = knn.train(corpus, KNNConfig(k=3))

        assert classifier.classify({"x": 1}) == "a"

    def test_equal_distances_keep_training_order(self):
        """Test neighbors at the same distance come back in training order."""
        corpus = SampleCorpus(samples={"a": [{"x": 1}, {"y": 1}], "b": [{"x": 1}]})

        classifier = knn.train(corpus, KNNConfig(k=3))

        assert list(classifier.neighbors(np.array([1.0, 0.0]))) == [0, 2, 1]
        assert classifier.classify({"x": 1}) == "a"

    @staticmethod
    def _encoded_header(k: int = 1) -> bytes:
        writer = ModelWriter(KNNClassifier.MAGIC)
        writer.write_strings(["go"])
        writer.write_strings(["func"])
        writer.write_uint(k)
        return writer.getvalue()

    def test_sample_matrix_with_extra_dimensions(self):
        """Test a sample matrix of rank three with huge dimensions raises DecodeError."""
        data = self._encoded_header() + struct.pack("!BIII", 3, 0, 2 ** 31, 2 ** 31)

        with pytest.raises(DecodeError):
            knn.decode(data)

    def test_empty_sample_matrix(self):
        """Test a sample matrix without rows raises DecodeError."""
        data = self._encoded_header() + struct.pack("!BII", 2, 0, 2 ** 32 - 1)

        with pytest.raises(DecodeError, match="invalid shape"):
            knn.decode(data)


class TestSVM:
    """Test cases specific to the SVM backend."""

    def test_scores_one_per_label(self, reduced_scenario_corpus):
        """Test every label gets a hyperplane score."""
        classifier = svm.train(reduced_scenario_corpus)

        assert isinstance(classifier, SVMClassifier)
        scores = classifier.scores(normalize(classifier.vocabulary.vectorize(GO_LIKE)))
        assert scores.shape == (2,)
        assert classifier.labels()[int(np.argmax(scores))] == "go"

    def test_two_labels_share_one_hyperplane(self, reduced_scenario_corpus):
        """Test the first label's hyperplane mirrors the second's."""
        classifier = svm.train(reduced_scenario_corpus)

        for vector in (GO_LIKE, PYTHON_LIKE, {"func": 1, "def": 1}):
            scores = classifier.scores(normalize(classifier.vocabulary.vectorize(vector)))
            assert scores[0] == pytest.approx(-scores[1])

    def test_three_labels(self):
        """Test one-vs-rest separates three languages."""
        corpus = SampleCorpus(samples={
            "go": [{"func": 5, "x": 1}, {"func": 6}],
            "python": [{"def": 5, "x": 1}, {"def": 4}],
            "ruby": [{"end": 5, "x": 1}, {"end": 7}],
        })

        classifier = svm.train(corpus)

        assert classifier.classify({"func": 3}) == "go"
        assert classifier.classify({"def": 3}) == "python"
        assert classifier.classify({"end": 3}) == "ruby"


class TestGaussBayes:
    """Test cases specific to the Gaussian naive Bayes backend."""

    def test_priors_follow_label_frequency(self):
        """Test an all-zero vector falls back on the more frequent label."""
        corpus = SampleCorpus(samples={
            "rare": [{"x": 1, "y": 1}],
            "common": [{"x": 1, "y": 1}, {"x": 1, "y": 1}, {"x": 1, "y": 1}],
        })

        classifier = gaussbayes.train(corpus)

        assert isinstance(classifier, GaussBayesClassifier)
        assert classifier.classify({}) == "common"

    def test_non_positive_variance_rejected(self, reduced_scenario_corpus):
        """Test decoding refuses zero variances."""
        classifier = gaussbayes.train(reduced_scenario_corpus)
        broken = GaussBayesClassifier(
            classifier.vocabulary,
            classifier.labels(),
            np.zeros(2),
            np.zeros((2, 2)),
            np.zeros((2, 2)),
        )

        with pytest.raises(DecodeError, match="Variances must be positive"):
            gaussbayes.decode(broken.encode())
