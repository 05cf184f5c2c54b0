"""Tests for classifier configuration."""

from __future__ import annotations

import pytest

from nb_categorizer import ClassifierConfig, RegexTokenizer, WhitespaceTokenizer


class TestClassifierConfig:
    """Tests for defaults, validation and environment overrides."""

    def test_defaults(self):
        config = ClassifierConfig()
        assert config.alpha == 1.0
        assert config.scoring == "original"
        assert config.tokenizer == "whitespace"
        assert not config.lowercase
        assert not config.use_stopwords
        assert config.ngram_max == 1

    @pytest.mark.parametrize("kwargs, match", [
        ({"alpha": 0}, "alpha"),
        ({"alpha": float("inf")}, "alpha"),
        ({"ngram_max": 0}, "ngram_max"),
        ({"scoring": "bogus"}, "scoring mode"),
        ({"tokenizer": "lemma"}, "tokenizer"),
    ])
    def test_validation(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            ClassifierConfig(**kwargs)

    def test_from_env_empty(self):
        assert ClassifierConfig.from_env({}) == ClassifierConfig()

    def test_from_env_overrides(self):
        config = ClassifierConfig.from_env({
            "NB_CATEGORIZER_ALPHA": "0.5",
            "NB_CATEGORIZER_SCORING": "Laplace",
            "NB_CATEGORIZER_TOKENIZER": "regex",
            "NB_CATEGORIZER_LOWERCASE": "yes",
            "NB_CATEGORIZER_STOPWORDS": "1",
            "NB_CATEGORIZER_NGRAM_MAX": "2",
            "UNRELATED": "ignored",
        })
        assert config == ClassifierConfig(
            alpha=0.5,
            scoring="laplace",
            tokenizer="regex",
            lowercase=True,
            use_stopwords=True,
            ngram_max=2,
        )

    def test_from_env_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("NB_CATEGORIZER_ALPHA", "2")
        assert ClassifierConfig.from_env().alpha == 2.0

    @pytest.mark.parametrize("name, value", [
        ("NB_CATEGORIZER_ALPHA", "lots"),
        ("NB_CATEGORIZER_NGRAM_MAX", "1.5"),
        ("NB_CATEGORIZER_LOWERCASE", "maybe"),
    ])
    def test_from_env_invalid_values(self, name, value):
        with pytest.raises(ValueError, match=name):
            ClassifierConfig.from_env({name: value})

    def test_with_overrides_ignores_none(self):
        config = ClassifierConfig().with_overrides(alpha=None, scoring="laplace")
        assert config.alpha == 1.0
        assert config.scoring == "laplace"

    def test_with_overrides_no_changes_returns_self(self):
        config = ClassifierConfig()
        assert config.with_overrides(alpha=None) is config

    def test_with_overrides_unknown_field(self):
        with pytest.raises(TypeError, match="Unknown config fields"):
            ClassifierConfig().with_overrides(beta=1)

    def test_build_tokenizer(self):
        tokenizer = ClassifierConfig(lowercase=True).build_tokenizer()
        assert isinstance(tokenizer, WhitespaceTokenizer)
        assert tokenizer.lowercase

        regex = ClassifierConfig(tokenizer="regex", use_stopwords=True, ngram_max=3).build_tokenizer()
        assert isinstance(regex, RegexTokenizer)
        assert regex.use_stopwords
        assert regex.ngram_range == (1, 3)

    def test_to_dict(self):
        assert ClassifierConfig().to_dict() == {
            "alpha": 1.0,
            "scoring": "original",
            "tokenizer": "whitespace",
            "lowercase": False,
            "use_stopwords": False,
            "ngram_max": 1,
        }
