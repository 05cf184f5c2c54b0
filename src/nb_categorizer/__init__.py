"""nb-categorizer -- incremental Naive Bayes text categorization."""

__version__ = "0.1.0"

from .classifier import (
    ClassificationResult,
    ClassifierState,
    NaiveBayesClassifier,
    ScoringMode,
    normalize_log_scores,
)
from .config import ClassifierConfig
from .datasets import DatasetError, LabeledExample, load_examples, parse_examples
from .evaluation import (
    ClassificationMetrics,
    compute_metrics,
    cross_validate,
    evaluate,
    stratified_k_fold,
)
from .tokenizers import (
    CallableTokenizer,
    RegexTokenizer,
    Tokenizer,
    WhitespaceTokenizer,
    as_tokenizer,
    available_tokenizers,
    get_tokenizer,
)

__all__ = [
    # Core
    "NaiveBayesClassifier",
    "ClassificationResult",
    "ClassifierState",
    "ScoringMode",
    "normalize_log_scores",
    # Configuration
    "ClassifierConfig",
    # Tokenizers
    "Tokenizer",
    "WhitespaceTokenizer",
    "RegexTokenizer",
    "CallableTokenizer",
    "as_tokenizer",
    "available_tokenizers",
    "get_tokenizer",
    # Datasets
    "LabeledExample",
    "DatasetError",
    "load_examples",
    "parse_examples",
    # Evaluation
    "ClassificationMetrics",
    "compute_metrics",
    "cross_validate",
    "evaluate",
    "stratified_k_fold",
]
