"""Offline evaluation: metrics and stratified cross-validation.

Trains a fresh classifier per fold through the incremental ``train`` API
and scores the held-out documents, reporting accuracy, per-category
precision/recall/F1 and a confusion matrix.
"""

from __future__ import annotations

import logging
import random
from collections import Counter, defaultdict
from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass, field
from typing import Optional

from .classifier import NaiveBayesClassifier, TextOrTokens

logger = logging.getLogger(__name__)

#: Label recorded when the classifier returns no category.
NO_CATEGORY = "<none>"


# ---------------------------------------------------------------------------
# Evaluation Metrics
# ---------------------------------------------------------------------------

@dataclass
class ClassificationMetrics:
    """Evaluation metrics for a set of predictions.

    Attributes:
        accuracy: Overall accuracy.
        per_class: Per-category precision, recall, F1 scores.
        macro_precision: Unweighted mean precision across categories.
        macro_recall: Unweighted mean recall across categories.
        macro_f1: Unweighted mean F1 across categories.
        weighted_f1: Support-weighted mean F1 across categories.
        confusion_matrix: Nested dict ``{true: {predicted: count}}``.
        support: Per-category sample counts in the true labels.
    """

    accuracy: float = 0.0
    per_class: dict[str, dict[str, float]] = field(default_factory=dict)
    macro_precision: float = 0.0
    macro_recall: float = 0.0
    macro_f1: float = 0.0
    weighted_f1: float = 0.0
    confusion_matrix: dict[str, dict[str, int]] = field(default_factory=dict)
    support: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "accuracy": round(self.accuracy, 4),
            "macro_precision": round(self.macro_precision, 4),
            "macro_recall": round(self.macro_recall, 4),
            "macro_f1": round(self.macro_f1, 4),
            "weighted_f1": round(self.weighted_f1, 4),
            "per_class": {
                cls: {k: round(v, 4) for k, v in metrics.items()}
                for cls, metrics in self.per_class.items()
            },
            "confusion_matrix": self.confusion_matrix,
            "support": self.support,
            "unclassified": self.unclassified,
        }

    @property
    def unclassified(self) -> int:
        """Documents for which the classifier returned no category."""
        return sum(row.get(NO_CATEGORY, 0) for row in self.confusion_matrix.values())

    def summary(self) -> str:
        """Plain-text report: headline scores, then one row per category."""
        total = sum(self.support.values())
        header = f"{'Category':<20} {'Precision':>10} {'Recall':>10} {'F1':>10} {'Support':>10}"
        lines = [
            f"Accuracy: {self.accuracy:.2%} of {total} documents",
            f"Macro F1: {self.macro_f1:.4f} | Weighted F1: {self.weighted_f1:.4f}",
        ]
        if self.unclassified:
            lines.append(f"Unclassified: {self.unclassified}")
        lines += ["", header, "-" * len(header)]
        for cls, m in sorted(self.per_class.items()):
            if cls == NO_CATEGORY:
                continue
            lines.append(
                f"{cls:<20} {m['precision']:>10.4f} {m['recall']:>10.4f} "
                f"{m['f1']:>10.4f} {self.support.get(cls, 0):>10}"
            )
        return "\n".join(lines)


def _label(value: Optional[Hashable]) -> str:
    return NO_CATEGORY if value is None else str(value)


def compute_metrics(
    y_true: Sequence[Hashable],
    y_pred: Sequence[Optional[Hashable]],
) -> ClassificationMetrics:
    """Compute classification metrics from true and predicted labels.

    Labels are compared by ``str()``. A ``None`` prediction (no category)
    is recorded as ``NO_CATEGORY`` and always counts as wrong.

    Args:
        y_true: Ground truth labels.
        y_pred: Predicted labels, possibly ``None``.

    Returns:
        ClassificationMetrics with accuracy, per-category, and aggregate scores.

    Raises:
        ValueError: If the sequences differ in length.
    """
    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    true_labels = [_label(t) for t in y_true]
    pred_labels = [_label(p) for p in y_pred]
    classes = sorted(set(true_labels) | set(pred_labels))
    n = len(true_labels)

    cm: dict[str, dict[str, int]] = {c: {c2: 0 for c2 in classes} for c in classes}
    for true, pred in zip(true_labels, pred_labels):
        cm[true][pred] += 1

    correct = sum(1 for t, p in zip(true_labels, pred_labels) if t == p and p != NO_CATEGORY)
    accuracy = correct / n if n > 0 else 0.0

    per_class: dict[str, dict[str, float]] = {}
    support = Counter(true_labels)

    for cls in classes:
        tp = cm[cls][cls] if cls != NO_CATEGORY else 0
        fp = sum(cm[other][cls] for other in classes if other != cls)
        fn = sum(cm[cls][other] for other in classes if other != cls)

        precision = tp / (tp + fp) if (tp + fp) > 0 else 0.0
        recall = tp / (tp + fn) if (tp + fn) > 0 else 0.0
        f1 = (
            2 * precision * recall / (precision + recall)
            if (precision + recall) > 0
            else 0.0
        )
        per_class[cls] = {"precision": precision, "recall": recall, "f1": f1}

    scored = [c for c in classes if c != NO_CATEGORY]
    macro_p = sum(per_class[c]["precision"] for c in scored) / len(scored) if scored else 0.0
    macro_r = sum(per_class[c]["recall"] for c in scored) / len(scored) if scored else 0.0
    macro_f1 = sum(per_class[c]["f1"] for c in scored) / len(scored) if scored else 0.0

    total_support = sum(support.values())
    weighted_f1 = (
        sum(per_class[c]["f1"] * support.get(c, 0) for c in scored) / total_support
        if total_support > 0
        else 0.0
    )

    return ClassificationMetrics(
        accuracy=accuracy,
        per_class=per_class,
        macro_precision=macro_p,
        macro_recall=macro_r,
        macro_f1=macro_f1,
        weighted_f1=weighted_f1,
        confusion_matrix=cm,
        support=dict(support),
    )


def evaluate(
    classifier: NaiveBayesClassifier,
    documents: Sequence[TextOrTokens],
    labels: Sequence[Hashable],
) -> ClassificationMetrics:
    """Classify ``documents`` and compare against ``labels``."""
    if len(documents) != len(labels):
        raise ValueError(
            f"documents ({len(documents)}) and labels ({len(labels)}) must have same length"
        )
    return compute_metrics(labels, classifier.classify_batch(documents))


# ---------------------------------------------------------------------------
# Cross-Validation
# ---------------------------------------------------------------------------

def stratified_k_fold(
    labels: Sequence[Hashable],
    k: int = 5,
    seed: int = 42,
) -> list[tuple[list[int], list[int]]]:
    """Generate stratified k-fold train/test index splits.

    Each fold gets approximately the same category distribution as the
    full dataset.

    Args:
        labels: Category label of each document.
        k: Number of folds (>= 2).
        seed: Random seed for reproducibility.

    Returns:
        List of ``(train_indices, test_indices)`` tuples.

    Every fold gets at least one test document.

    Raises:
        ValueError: If ``k`` is less than 2 or greater than the number of
            documents.
    """
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")
    if k > len(labels):
        raise ValueError(f"k ({k}) must not exceed the number of documents ({len(labels)})")

    rng = random.Random(seed)

    class_indices: dict[Hashable, list[int]] = defaultdict(list)
    for idx, label in enumerate(labels):
        class_indices[label].append(idx)

    ordered = sorted(class_indices, key=str)
    for label in ordered:
        rng.shuffle(class_indices[label])

    # Round-robin continues across categories
    fold_assignments: list[int] = [0] * len(labels)
    position = 0
    for label in ordered:
        for idx in class_indices[label]:
            fold_assignments[idx] = position % k
            position += 1

    folds: list[tuple[list[int], list[int]]] = []
    for fold_idx in range(k):
        test_indices = [i for i, f in enumerate(fold_assignments) if f == fold_idx]
        train_indices = [i for i, f in enumerate(fold_assignments) if f != fold_idx]
        folds.append((train_indices, test_indices))

    return folds


def cross_validate(
    documents: Sequence[TextOrTokens],
    labels: Sequence[Hashable],
    k: int = 5,
    seed: int = 42,
    factory: Optional[Callable[[], NaiveBayesClassifier]] = None,
) -> list[ClassificationMetrics]:
    """Run stratified k-fold cross-validation.

    Args:
        documents: Raw texts or token sequences.
        labels: Corresponding category labels.
        k: Number of folds.
        seed: Random seed for fold generation.
        factory: Zero-argument callable returning a fresh, untrained
            classifier. Defaults to ``NaiveBayesClassifier()``.

    Returns:
        List of ClassificationMetrics (one per fold).

    Raises:
        ValueError: If documents and labels differ in length, ``k < 2``
            or ``k`` exceeds the number of documents.
    """
    if len(documents) != len(labels):
        raise ValueError(
            f"documents ({len(documents)}) and labels ({len(labels)}) must have same length"
        )
    build = factory or NaiveBayesClassifier

    folds = stratified_k_fold(labels, k=k, seed=seed)
    results: list[ClassificationMetrics] = []

    for fold_idx, (train_idx, test_idx) in enumerate(folds, 1):
        classifier = build()
        classifier.train_many((documents[i], labels[i]) for i in train_idx)

        metrics = evaluate(
            classifier,
            [documents[i] for i in test_idx],
            [labels[i] for i in test_idx],
        )
        logger.debug(
            "Fold %d/%d: trained %d, tested %d, accuracy %.4f",
            fold_idx, k, len(train_idx), len(test_idx), metrics.accuracy,
        )
        results.append(metrics)

    return results
