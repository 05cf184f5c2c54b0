"""Classifier configuration with environment-variable overrides."""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace

from .classifier import ScoringMode
from .tokenizers import Tokenizer, available_tokenizers, get_tokenizer

ENV_PREFIX = "NB_CATEGORIZER_"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True)
class ClassifierConfig:
    """Settings used to build a classifier and its tokenizer.

    Attributes:
        alpha: Additive smoothing constant. Must be finite and > 0.
        scoring: Likelihood formula, ``"original"`` or ``"laplace"``.
        tokenizer: Registered tokenizer name (see ``get_tokenizer``).
        lowercase: Lowercase tokens.
        use_stopwords: Drop English stop words (regex tokenizer only).
        ngram_max: Largest n-gram emitted (regex tokenizer only).
    """

    alpha: float = 1.0
    scoring: str = "original"
    tokenizer: str = "whitespace"
    lowercase: bool = False
    use_stopwords: bool = False
    ngram_max: int = 1

    def __post_init__(self) -> None:
        if not math.isfinite(self.alpha) or self.alpha <= 0:
            raise ValueError(f"alpha must be a finite number > 0, got {self.alpha!r}")
        if self.ngram_max < 1:
            raise ValueError(f"ngram_max must be >= 1, got {self.ngram_max!r}")
        modes = [m.value for m in ScoringMode]
        if self.scoring not in modes:
            raise ValueError(f"Unknown scoring mode '{self.scoring}'. Supported: {', '.join(modes)}")
        if self.tokenizer not in available_tokenizers():
            raise ValueError(
                f"Unknown tokenizer '{self.tokenizer}'. "
                f"Supported tokenizers: {', '.join(available_tokenizers())}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClassifierConfig":
        """Build configuration from defaults overridden by the environment.

        Recognized variables (all optional): ``NB_CATEGORIZER_ALPHA``,
        ``NB_CATEGORIZER_SCORING``, ``NB_CATEGORIZER_TOKENIZER``,
        ``NB_CATEGORIZER_LOWERCASE``, ``NB_CATEGORIZER_STOPWORDS`` and
        ``NB_CATEGORIZER_NGRAM_MAX``.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Raises:
            ValueError: If a variable holds a value of the wrong type.
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {}

        raw = env.get(f"{ENV_PREFIX}ALPHA")
        if raw is not None:
            overrides["alpha"] = _parse_float(f"{ENV_PREFIX}ALPHA", raw)
        raw = env.get(f"{ENV_PREFIX}SCORING")
        if raw is not None:
            overrides["scoring"] = raw.strip().lower()
        raw = env.get(f"{ENV_PREFIX}TOKENIZER")
        if raw is not None:
            overrides["tokenizer"] = raw.strip().lower()
        raw = env.get(f"{ENV_PREFIX}LOWERCASE")
        if raw is not None:
            overrides["lowercase"] = _parse_bool(f"{ENV_PREFIX}LOWERCASE", raw)
        raw = env.get(f"{ENV_PREFIX}STOPWORDS")
        if raw is not None:
            overrides["use_stopwords"] = _parse_bool(f"{ENV_PREFIX}STOPWORDS", raw)
        raw = env.get(f"{ENV_PREFIX}NGRAM_MAX")
        if raw is not None:
            overrides["ngram_max"] = _parse_int(f"{ENV_PREFIX}NGRAM_MAX", raw)

        return cls(**overrides)

    def with_overrides(self, **kwargs) -> "ClassifierConfig":
        """Return a copy with non-``None`` keyword values applied.

        Raises:
            TypeError: If a keyword is not a config field.
        """
        known = {f.name for f in fields(self)}
        unknown = set(kwargs) - known
        if unknown:
            raise TypeError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in kwargs.items() if v is not None}
        return replace(self, **changes) if changes else self

    def build_tokenizer(self) -> Tokenizer:
        """Instantiate the configured tokenizer."""
        if self.tokenizer == "regex":
            return get_tokenizer(
                "regex",
                lowercase=self.lowercase,
                use_stopwords=self.use_stopwords,
                ngram_range=(1, self.ngram_max),
            )
        return get_tokenizer(self.tokenizer, lowercase=self.lowercase)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {raw!r}")
