"""Incrementally trainable Naive Bayes text classifier.

Keeps per-category document counts and per-token/per-category
co-occurrence counts, updated one training example at a time, and scores
categories in log space:

    score(c) = log P(c) + sum_t log((co(t, c) + alpha) / (D(c) + alpha * V))

where ``P(c)`` is the empirical prior, ``co(t, c)`` the number of training
examples containing both ``t`` and ``c``, ``V`` the number of distinct
tokens seen so far and ``D(c)`` depends on the scoring mode:

- ``ScoringMode.ORIGINAL`` (default): ``D(c) = P(c)``, the prior
  probability. This mixes a probability with a count and under-penalizes
  rare categories, but it is the established behavior and stays the
  default. The numerator is the raw co-occurrence count ``co(t, c)``,
  not the joint probability ``co(t, c) / N``.
- ``ScoringMode.LAPLACE``: ``D(c) = count(c)``, textbook Laplace smoothing.

Training de-duplicates tokens (set semantics per example); classification
does not, so a token repeated in a query counts once per occurrence.
"""

from __future__ import annotations

import logging
import math
import threading
from collections import Counter
from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union

from .tokenizers import Tokenizer, as_tokenizer

if TYPE_CHECKING:
    from .config import ClassifierConfig

logger = logging.getLogger(__name__)

Category = Hashable
Token = Hashable
TextOrTokens = Union[str, Sequence[Token]]

DEFAULT_ALPHA = 1.0


class ScoringMode(str, Enum):
    """Denominator used for the per-token likelihood term."""

    ORIGINAL = "original"
    LAPLACE = "laplace"


class ClassifierState(str, Enum):
    """Lifecycle of a classifier instance."""

    UNTRAINED = "untrained"
    TRAINED = "trained"


def _tie_break_key(category: Category) -> tuple[str, str]:
    # the type name separates categories with the same text, such as 1 and "1"
    return str(category), type(category).__qualname__


# ---------------------------------------------------------------------------
# Classification result
# ---------------------------------------------------------------------------


@dataclass
class ClassificationResult:
    """Winning category with the scores of every known category.

    Attributes:
        category: The arg-max category.
        score: Log score of the winning category.
        scores: Log score per category, in tie-break order.
        probabilities: Scores normalized to sum to 1 (log-sum-exp).
    """

    category: Category
    score: float
    scores: dict[Any, float] = field(default_factory=dict)
    probabilities: dict[Any, float] = field(default_factory=dict)

    @property
    def confidence(self) -> float:
        """Normalized probability of the winning category."""
        return self.probabilities.get(self.category, 0.0)

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "score": round(self.score, 6),
            "confidence": round(self.confidence, 4),
            "scores": {str(k): round(v, 6) for k, v in self.scores.items()},
            "probabilities": {
                str(k): round(v, 4) for k, v in sorted(
                    self.probabilities.items(),
                    key=lambda x: x[1],
                    reverse=True,
                )
            },
        }


def normalize_log_scores(scores: dict[Any, float]) -> dict[Any, float]:
    """Turn log scores into probabilities using log-sum-exp."""
    if not scores:
        return {}
    max_score = max(scores.values())
    exp_scores = {k: math.exp(s - max_score) for k, s in scores.items()}
    total = sum(exp_scores.values())
    return {k: v / total for k, v in exp_scores.items()}


# ---------------------------------------------------------------------------
# Naive Bayes classifier
# ---------------------------------------------------------------------------


class NaiveBayesClassifier:
    """Naive Bayes classifier trained one example at a time.

    Example::

        classifier = NaiveBayesClassifier(RegexTokenizer())
        classifier.train_text("spammy spam spam", "spam")
        classifier.train_text("please put the ham and eggs in the fridge", "ham")

        classifier.classify_text("do you like spam")   # "spam"

    An untrained classifier returns ``None`` from every ``classify*`` call.
    Statistics only grow: there is no forgetting or un-training.

    Args:
        tokenizer: A ``Tokenizer`` or any callable ``str -> Sequence[token]``.
            Defaults to ``WhitespaceTokenizer``.
        alpha: Additive smoothing constant (> 0).
        scoring: ``ScoringMode`` or its string value.

    Raises:
        ValueError: If ``alpha`` is not a finite positive number or
            ``scoring`` is unknown.
    """

    def __init__(
        self,
        tokenizer: Optional[Union[Tokenizer, Callable[[str], Sequence[Token]]]] = None,
        alpha: float = DEFAULT_ALPHA,
        scoring: Union[ScoringMode, str] = ScoringMode.ORIGINAL,
    ) -> None:
        if isinstance(alpha, bool) or not isinstance(alpha, (int, float)):
            raise ValueError(f"alpha must be a number, got {type(alpha).__name__}")
        if not math.isfinite(alpha) or alpha <= 0:
            raise ValueError(f"alpha must be a finite number > 0, got {alpha!r}")
        try:
            self._scoring = ScoringMode(scoring)
        except ValueError:
            supported = ", ".join(m.value for m in ScoringMode)
            raise ValueError(f"Unknown scoring mode '{scoring}'. Supported: {supported}") from None

        self._tokenizer = as_tokenizer(tokenizer)
        self._alpha = float(alpha)

        self._category_occurrences: Counter = Counter()
        self._token_occurrences: dict[Token, Counter] = {}
        self._training_count = 0
        self._token_count = 0
        self._lock = threading.RLock()

    @classmethod
    def from_config(
        cls,
        config: "ClassifierConfig",
        tokenizer: Optional[Union[Tokenizer, Callable[[str], Sequence[Token]]]] = None,
    ) -> "NaiveBayesClassifier":
        """Build a classifier from a ``ClassifierConfig``.

        An explicit ``tokenizer`` takes precedence over the configured one.
        """
        return cls(
            tokenizer=tokenizer if tokenizer is not None else config.build_tokenizer(),
            alpha=config.alpha,
            scoring=config.scoring,
        )

    def __repr__(self) -> str:
        return (
            f"NaiveBayesClassifier(tokenizer={self._tokenizer!r}, alpha={self._alpha}, "
            f"scoring={self._scoring.value!r}, categories={len(self._category_occurrences)}, "
            f"training_count={self._training_count})"
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def tokenizer(self) -> Tokenizer:
        return self._tokenizer

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def scoring(self) -> ScoringMode:
        return self._scoring

    @property
    def training_count(self) -> int:
        """Number of training examples seen."""
        return self._training_count

    @property
    def token_count(self) -> int:
        """Number of distinct tokens seen in training."""
        return self._token_count

    @property
    def categories(self) -> list[Category]:
        """Known categories in tie-break order."""
        with self._lock:
            return sorted(self._category_occurrences, key=_tie_break_key)

    @property
    def vocabulary(self) -> frozenset:
        """All tokens seen in training."""
        with self._lock:
            return frozenset(self._token_occurrences)

    @property
    def state(self) -> ClassifierState:
        if self._category_occurrences:
            return ClassifierState.TRAINED
        return ClassifierState.UNTRAINED

    @property
    def is_trained(self) -> bool:
        """Whether at least one example has been trained."""
        return self.state is ClassifierState.TRAINED

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train_tokens(self, tokens: Iterable[Token], category: Category) -> None:
        """Record one training example.

        Each distinct token is counted once for ``category`` no matter how
        often it repeats in ``tokens``.

        Args:
            tokens: Tokens of the example. Duplicates are ignored.
            category: Label of the example (hashable).

        Raises:
            TypeError: If ``category`` or a token is unhashable. No
                statistics are changed in that case.
        """
        hash(category)  # unhashable labels fail before any update
        distinct = set(tokens)

        with self._lock:
            for token in distinct:
                self._increment_token(token, category)
            self._category_occurrences[category] += 1
            self._training_count += 1
            trained, vocabulary = self._training_count, self._token_count

        logger.debug(
            "Trained example %d as %r (%d distinct tokens, vocabulary %d)",
            trained, category, len(distinct), vocabulary,
        )

    def train_text(self, text: str, category: Category) -> None:
        """Tokenize ``text`` and record it as one training example."""
        self.train_tokens(self._tokenizer.tokenize(text), category)

    def train(self, text_or_tokens: TextOrTokens, category: Category) -> None:
        """Train from raw text or from an already tokenized sequence."""
        if isinstance(text_or_tokens, str):
            self.train_text(text_or_tokens, category)
        else:
            self.train_tokens(text_or_tokens, category)

    def train_many(self, examples: Iterable[tuple[TextOrTokens, Category]]) -> int:
        """Train from ``(text_or_tokens, category)`` pairs.

        Returns:
            Number of examples trained.
        """
        count = 0
        for text_or_tokens, category in examples:
            self.train(text_or_tokens, category)
            count += 1
        logger.debug("Trained %d examples in batch", count)
        return count

    def _increment_token(self, token: Token, category: Category) -> None:
        occurrences = self._token_occurrences.get(token)
        if occurrences is None:
            occurrences = self._token_occurrences.setdefault(token, Counter())
            self._token_count += 1
        occurrences[category] += 1

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify_tokens(self, tokens: Sequence[Token]) -> Optional[Category]:
        """Return the best-scoring category for ``tokens``.

        Repeated tokens contribute once per occurrence.

        Returns:
            The arg-max category, or ``None`` if nothing has been trained.
            Ties go to the category whose ``str()`` sorts first, then
            whose type name sorts first.
        """
        scores = self.scores(tokens)
        if not scores:
            return None
        best = max(scores, key=scores.get)  # type: ignore[arg-type]
        logger.debug("Classified as %r among %d categories (score %.6f)", best, len(scores), scores[best])
        return best

    def classify_text(self, text: str) -> Optional[Category]:
        """Tokenize ``text`` and classify it."""
        return self.classify_tokens(self._tokenizer.tokenize(text))

    def classify(self, text_or_tokens: TextOrTokens) -> Optional[Category]:
        """Classify raw text or an already tokenized sequence."""
        if isinstance(text_or_tokens, str):
            return self.classify_text(text_or_tokens)
        return self.classify_tokens(text_or_tokens)

    def classify_batch(self, items: Iterable[TextOrTokens]) -> list[Optional[Category]]:
        """Classify several documents."""
        return [self.classify(item) for item in items]

    def explain(self, text_or_tokens: TextOrTokens) -> Optional[ClassificationResult]:
        """Classify and return every category's score.

        Returns:
            ``ClassificationResult`` or ``None`` if nothing has been trained.
        """
        tokens = self._as_tokens(text_or_tokens)
        scores = self.scores(tokens)
        if not scores:
            return None
        best = max(scores, key=scores.get)  # type: ignore[arg-type]
        return ClassificationResult(
            category=best,
            score=scores[best],
            scores=scores,
            probabilities=normalize_log_scores(scores),
        )

    def scores(self, tokens: Sequence[Token]) -> dict[Any, float]:
        """Compute the log score of every known category.

        Returns:
            Dict of ``{category: log_score}`` in tie-break order, empty when
            nothing has been trained.
        """
        tokens = list(tokens)
        with self._lock:
            if not self._training_count:
                return {}
            return {
                category: self._score(category, tokens)
                for category in sorted(self._category_occurrences, key=_tie_break_key)
            }

    def _score(self, category: Category, tokens: list[Token]) -> float:
        p_category = self.prior(category)
        if self._scoring is ScoringMode.LAPLACE:
            base = self._category_occurrences[category]
        else:
            base = p_category
        denominator = base + self._alpha * self._token_count

        score = math.log(p_category)
        for token in tokens:
            numerator = self.token_category_count(token, category) + self._alpha
            score += math.log(numerator / denominator)
        return score

    def _as_tokens(self, text_or_tokens: TextOrTokens) -> list[Token]:
        if isinstance(text_or_tokens, str):
            return self._tokenizer.tokenize(text_or_tokens)
        return list(text_or_tokens)

    # ------------------------------------------------------------------
    # Probabilities and counts
    # ------------------------------------------------------------------

    def prior(self, category: Category) -> float:
        """Empirical prior ``P(category)``; ``0.0`` when untrained."""
        with self._lock:
            if not self._training_count:
                return 0.0
            return self.category_count(category) / self._training_count

    def joint_probability(self, token: Token, category: Category) -> float:
        """Fraction of training examples containing both ``token`` and ``category``."""
        with self._lock:
            if not self._training_count:
                return 0.0
            return self.token_category_count(token, category) / self._training_count

    def category_count(self, category: Category) -> int:
        """Number of training examples labeled ``category``."""
        with self._lock:
            return self._category_occurrences.get(category, 0)

    def token_category_count(self, token: Token, category: Category) -> int:
        """Number of training examples containing ``token`` labeled ``category``."""
        with self._lock:
            occurrences = self._token_occurrences.get(token)
            if occurrences is None:
                return 0
            return occurrences.get(category, 0)

    def token_total(self, token: Token) -> int:
        """Number of training examples containing ``token`` across all categories."""
        with self._lock:
            occurrences = self._token_occurrences.get(token)
            if occurrences is None:
                return 0
            return sum(occurrences.values())

    def category_counts(self) -> dict[Any, int]:
        """Snapshot of per-category example counts, in tie-break order."""
        with self._lock:
            return {
                c: self._category_occurrences[c]
                for c in sorted(self._category_occurrences, key=_tie_break_key)
            }

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def most_informative_tokens(
        self,
        category: Category,
        top_n: int = 20,
    ) -> list[tuple[Token, float]]:
        """Return the tokens that most favor ``category``.

        Each token is ranked by the difference between its log likelihood
        term under ``category`` and the mean of that term under the other
        categories. With a single category, tokens are ranked by their own
        log likelihood term.

        Args:
            category: A trained category.
            top_n: Number of tokens to return.

        Returns:
            List of ``(token, log_likelihood_ratio)`` tuples, best first.
            Equal ratios are ordered by ``str(token)``.

        Raises:
            ValueError: If ``category`` has never been trained.
        """
        with self._lock:
            if category not in self._category_occurrences:
                raise ValueError(f"Unknown category: {category!r}. Known: {self.categories}")

            others = [c for c in self._category_occurrences if c != category]
            ratios: list[tuple[Token, float]] = []
            for token in self._token_occurrences:
                target = self._score(category, [token]) - math.log(self.prior(category))
                if others:
                    other_terms = [
                        self._score(c, [token]) - math.log(self.prior(c)) for c in others
                    ]
                    target -= sum(other_terms) / len(other_terms)
                ratios.append((token, round(target, 6)))

        ratios.sort(key=lambda x: (-x[1], str(x[0])))
        return ratios[:top_n]
