"""Pluggable tokenizers that turn raw text into token sequences.

The classifier never looks at raw text. Everything it learns and scores
comes from a ``Tokenizer``: a single-method capability object mapping a
string to an ordered list of hashable tokens. Several implementations are
provided; any plain function ``str -> Sequence[str]`` can be adapted with
``CallableTokenizer``.
"""

from __future__ import annotations

import re
import unicodedata
from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, Sequence

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------

_WORD_RE = re.compile(r"\b[^\W\d_][\w'-]*[^\W_]\b|\b[^\W\d_]\b")

STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "be",
    "been", "being", "have", "has", "had", "do", "does", "did", "will",
    "would", "could", "should", "may", "might", "shall", "can", "must",
    "not", "no", "nor", "so", "if", "then", "than", "that", "this",
    "these", "those", "it", "its", "he", "she", "they", "them", "their",
    "his", "her", "our", "your", "we", "you", "who", "whom", "which",
    "what", "where", "when", "how", "all", "each", "every", "both",
    "few", "more", "most", "other", "some", "such", "any", "only",
    "own", "same", "too", "very", "just", "about", "above", "after",
    "again", "also", "because", "before", "between", "during", "into",
    "through", "under", "until", "up", "out", "over", "here", "there",
})

# Typographic characters folded to ASCII before matching words
_TYPOGRAPHIC_MAP = str.maketrans({
    "“": '"',
    "”": '"',
    "‘": "'",
    "’": "'",
    "–": "-",
    "—": "-",
    "\xa0": " ",
})


def normalize_text(text: str) -> str:
    """Apply NFC normalization and fold typographic quotes and dashes."""
    if not text:
        return ""
    return unicodedata.normalize("NFC", text).translate(_TYPOGRAPHIC_MAP)


def ngrams(tokens: list[str], n: int, joiner: str = "_") -> list[str]:
    """Generate joined n-grams from a token list."""
    if n <= 1:
        return list(tokens)
    return [joiner.join(tokens[i : i + n]) for i in range(len(tokens) - n + 1)]


# ---------------------------------------------------------------------------
# Tokenizer interface
# ---------------------------------------------------------------------------


class Tokenizer(ABC):
    """Abstract base class for tokenizers.

    Implementations must provide ``tokenize``, which maps a unit of text to
    an ordered sequence of hashable tokens. Duplicates and order are
    preserved; the classifier decides whether to de-duplicate.

    Tokenizers are also callable, so an instance can be passed anywhere a
    plain ``str -> list`` function is expected.
    """

    name: str = ""

    @abstractmethod
    def tokenize(self, text: str) -> list[Hashable]:
        """Split ``text`` into tokens.

        Args:
            text: Raw text. May be empty.

        Returns:
            Ordered list of tokens (possibly empty).
        """
        ...

    def __call__(self, text: str) -> list[Hashable]:
        return self.tokenize(text)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class WhitespaceTokenizer(Tokenizer):
    """Split on runs of whitespace, keeping punctuation attached."""

    name = "whitespace"

    def __init__(self, lowercase: bool = False) -> None:
        self.lowercase = lowercase

    def tokenize(self, text: str) -> list[str]:
        if self.lowercase:
            text = text.lower()
        return text.split()

    def __repr__(self) -> str:
        return f"WhitespaceTokenizer(lowercase={self.lowercase})"


class RegexTokenizer(Tokenizer):
    """Word tokenizer with optional stop-word filtering and n-grams.

    Words are runs of letters that may contain inner apostrophes, hyphens
    or digits. Punctuation and bare numbers are dropped.

    Example::

        tokenizer = RegexTokenizer(use_stopwords=True, ngram_range=(1, 2))
        tokenizer("Please put the ham in the fridge")
        # ['please', 'put', 'ham', 'fridge', 'please_put', 'put_ham', 'ham_fridge']

    Args:
        lowercase: Lowercase tokens before filtering.
        use_stopwords: Drop common English function words.
        ngram_range: ``(min_n, max_n)`` n-gram sizes to emit, in order.
        normalize_unicode: NFC-normalize and fold typographic punctuation.
    """

    name = "regex"

    def __init__(
        self,
        lowercase: bool = True,
        use_stopwords: bool = False,
        ngram_range: tuple[int, int] = (1, 1),
        normalize_unicode: bool = True,
    ) -> None:
        min_n, max_n = ngram_range
        if min_n < 1 or max_n < min_n:
            raise ValueError(f"Invalid ngram_range {ngram_range!r}: need 1 <= min_n <= max_n")
        self.lowercase = lowercase
        self.use_stopwords = use_stopwords
        self.ngram_range = (min_n, max_n)
        self.normalize_unicode = normalize_unicode

    def tokenize(self, text: str) -> list[str]:
        if self.normalize_unicode:
            text = normalize_text(text)
        words = [m.group() for m in _WORD_RE.finditer(text)]
        if self.lowercase:
            words = [w.lower() for w in words]
        if self.use_stopwords:
            words = [w for w in words if w.lower() not in STOP_WORDS]

        terms: list[str] = []
        min_n, max_n = self.ngram_range
        for n in range(min_n, max_n + 1):
            terms.extend(ngrams(words, n))
        return terms

    def __repr__(self) -> str:
        return (
            f"RegexTokenizer(lowercase={self.lowercase}, "
            f"use_stopwords={self.use_stopwords}, ngram_range={self.ngram_range})"
        )


class CallableTokenizer(Tokenizer):
    """Adapt a plain function ``str -> Sequence[token]`` to ``Tokenizer``."""

    name = "callable"

    def __init__(self, func: Callable[[str], Sequence[Hashable]]) -> None:
        if not callable(func):
            raise TypeError(f"Expected a callable, got {type(func).__name__}")
        self.func = func

    def tokenize(self, text: str) -> list[Hashable]:
        return list(self.func(text))

    def __repr__(self) -> str:
        return f"CallableTokenizer({getattr(self.func, '__name__', self.func)!r})"


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------

_REGISTRY: dict[str, type[Tokenizer]] = {
    WhitespaceTokenizer.name: WhitespaceTokenizer,
    RegexTokenizer.name: RegexTokenizer,
}


def available_tokenizers() -> list[str]:
    """Names accepted by ``get_tokenizer``."""
    return sorted(_REGISTRY)


def get_tokenizer(name: str, **kwargs) -> Tokenizer:
    """Build a registered tokenizer by name.

    Args:
        name: Registered tokenizer name (case-insensitive).
        **kwargs: Forwarded to the tokenizer constructor.

    Returns:
        A new ``Tokenizer`` instance.

    Raises:
        ValueError: If no tokenizer is registered under ``name``.
    """
    try:
        tokenizer_cls = _REGISTRY[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown tokenizer '{name}'. "
            f"Supported tokenizers: {', '.join(available_tokenizers())}"
        ) from None
    return tokenizer_cls(**kwargs)


def as_tokenizer(obj: Tokenizer | Callable[[str], Sequence[Hashable]] | None) -> Tokenizer:
    """Coerce ``obj`` into a ``Tokenizer``.

    ``None`` gives the default ``WhitespaceTokenizer``, a ``Tokenizer`` is
    returned unchanged and any other callable is wrapped.

    Raises:
        TypeError: If ``obj`` is neither a tokenizer nor callable.
    """
    if obj is None:
        return WhitespaceTokenizer()
    if isinstance(obj, Tokenizer):
        return obj
    if callable(obj):
        return CallableTokenizer(obj)
    raise TypeError(f"Tokenizer must be a Tokenizer or a callable, got {type(obj).__name__}")
