"""Tests for evaluation metrics and cross-validation."""

from __future__ import annotations

import pytest

from nb_categorizer import NaiveBayesClassifier, RegexTokenizer
from nb_categorizer.evaluation import (
    NO_CATEGORY,
    ClassificationMetrics,
    compute_metrics,
    cross_validate,
    evaluate,
    stratified_k_fold,
)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

class TestMetrics:
    """Tests for compute_metrics."""

    def test_perfect_predictions(self):
        y = ["a", "b", "a", "b"]
        m = compute_metrics(y, y)
        assert m.accuracy == 1.0
        assert m.macro_f1 == 1.0
        assert m.weighted_f1 == 1.0

    def test_all_wrong_predictions(self):
        m = compute_metrics(["a", "a", "b"], ["b", "b", "a"])
        assert m.accuracy == 0.0
        assert m.macro_f1 == 0.0

    def test_partial_accuracy(self):
        m = compute_metrics(["a", "a", "b", "b"], ["a", "b", "b", "b"])
        assert m.accuracy == pytest.approx(0.75)
        assert m.per_class["a"]["precision"] == pytest.approx(1.0)
        assert m.per_class["a"]["recall"] == pytest.approx(0.5)
        assert m.per_class["b"]["precision"] == pytest.approx(2 / 3)

    def test_confusion_matrix_structure(self):
        m = compute_metrics(["a", "b", "b"], ["a", "a", "b"])
        assert m.confusion_matrix == {"a": {"a": 1, "b": 0}, "b": {"a": 1, "b": 1}}

    def test_support_counts(self):
        m = compute_metrics(["a", "a", "b"], ["a", "a", "a"])
        assert m.support == {"a": 2, "b": 1}

    def test_none_predictions_count_as_wrong(self):
        m = compute_metrics(["a", "b"], [None, "b"])
        assert m.accuracy == pytest.approx(0.5)
        assert NO_CATEGORY in m.confusion_matrix["a"]
        assert m.confusion_matrix["a"][NO_CATEGORY] == 1
        assert m.per_class["a"]["recall"] == 0.0

    def test_mismatched_lengths_raises(self):
        with pytest.raises(ValueError, match="same length"):
            compute_metrics(["a"], ["a", "b"])

    def test_empty(self):
        m = compute_metrics([], [])
        assert m.accuracy == 0.0
        assert m.per_class == {}

    def test_to_dict_structure(self):
        data = compute_metrics(["a", "b"], ["a", "b"]).to_dict()
        for key in ("accuracy", "macro_precision", "macro_recall", "macro_f1",
                    "weighted_f1", "per_class", "confusion_matrix", "support"):
            assert key in data

    def test_summary_format(self):
        summary = compute_metrics(["spam", "ham"], ["spam", "spam"]).summary()
        assert "Accuracy: 50.00%" in summary
        assert "spam" in summary
        assert "ham" in summary

    def test_summary_reports_unclassified_documents(self):
        m = compute_metrics(["spam", "ham", "ham"], [None, "ham", None])
        assert m.unclassified == 2
        summary = m.summary()
        assert "Unclassified: 2" in summary
        assert NO_CATEGORY not in summary
        assert m.to_dict()["unclassified"] == 2

    def test_summary_omits_unclassified_when_none(self):
        m = compute_metrics(["spam"], ["spam"])
        assert m.unclassified == 0
        assert "Unclassified" not in m.summary()


# ---------------------------------------------------------------------------
# Cross-Validation
# ---------------------------------------------------------------------------

class TestCrossValidation:
    """Tests for stratified k-fold cross-validation."""

    def test_stratified_fold_count(self):
        labels = ["a"] * 10 + ["b"] * 10
        assert len(stratified_k_fold(labels, k=5)) == 5

    def test_stratified_no_overlap_and_full_coverage(self):
        labels = ["a"] * 10 + ["b"] * 10
        folds = stratified_k_fold(labels, k=5)
        all_test: set[int] = set()
        for train_idx, test_idx in folds:
            assert not set(train_idx) & set(test_idx)
            assert len(train_idx) + len(test_idx) == 20
            all_test.update(test_idx)
        assert all_test == set(range(20))

    def test_stratified_class_distribution(self):
        labels = ["a"] * 20 + ["b"] * 20
        for _, test_idx in stratified_k_fold(labels, k=5):
            test_labels = [labels[i] for i in test_idx]
            assert test_labels.count("a") == 4
            assert test_labels.count("b") == 4

    def test_stratified_reproducible_with_seed(self):
        labels = ["a"] * 10 + ["b"] * 10
        assert stratified_k_fold(labels, k=5, seed=7) == stratified_k_fold(labels, k=5, seed=7)

    def test_stratified_different_seeds_differ(self):
        labels = ["a"] * 10 + ["b"] * 10
        folds1 = stratified_k_fold(labels, k=5, seed=42)
        folds2 = stratified_k_fold(labels, k=5, seed=99)
        assert any(set(t1) != set(t2) for (t1, _), (t2, _) in zip(folds1, folds2))

    def test_k_below_two_raises(self):
        with pytest.raises(ValueError, match="at least 2"):
            stratified_k_fold(["a", "b"], k=1)

    def test_k_above_document_count_raises(self):
        with pytest.raises(ValueError, match="must not exceed"):
            stratified_k_fold(["a", "a", "b", "b"], k=5)

    def test_small_categories_fill_every_fold(self):
        labels = ["a", "a", "b", "b", "c"]
        folds = stratified_k_fold(labels, k=5)
        assert all(len(test_idx) == 1 for _, test_idx in folds)

    def test_cross_validate_has_no_empty_folds(self):
        docs = ["spam spam", "spam eggs", "ham ham", "ham eggs"]
        labels = ["spam", "spam", "ham", "ham"]
        results = cross_validate(docs, labels, k=4)
        assert len(results) == 4
        assert all(sum(r.support.values()) == 1 for r in results)
        with pytest.raises(ValueError, match="must not exceed"):
            cross_validate(docs, labels, k=5)

    def test_cross_validate_returns_k_results(self, corpus):
        docs, labels = corpus
        results = cross_validate(docs, labels, k=3)
        assert len(results) == 3
        assert all(isinstance(r, ClassificationMetrics) for r in results)

    def test_cross_validate_uses_factory(self, corpus):
        docs, labels = corpus
        built: list[NaiveBayesClassifier] = []

        def factory() -> NaiveBayesClassifier:
            nb = NaiveBayesClassifier(RegexTokenizer(use_stopwords=True))
            built.append(nb)
            return nb

        results = cross_validate(docs, labels, k=3, factory=factory)
        assert len(built) == 3
        assert all(nb.training_count == 12 for nb in built)
        avg_accuracy = sum(r.accuracy for r in results) / len(results)
        assert avg_accuracy > 0.3, f"Average CV accuracy should be > 30%, got {avg_accuracy:.2%}"

    def test_cross_validate_mismatched_lengths(self):
        with pytest.raises(ValueError, match="same length"):
            cross_validate(["a", "b"], ["x"], k=2)

    def test_evaluate_trained_classifier(self, trained_classifier, corpus):
        docs, labels = corpus
        metrics = evaluate(trained_classifier, docs, labels)
        assert metrics.accuracy > 0.5
        assert sum(metrics.support.values()) == len(docs)

    def test_evaluate_untrained_classifier(self, corpus):
        docs, labels = corpus
        metrics = evaluate(NaiveBayesClassifier(), docs, labels)
        assert metrics.accuracy == 0.0
