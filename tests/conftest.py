"""Shared test fixtures for nb-categorizer tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from nb_categorizer import NaiveBayesClassifier, RegexTokenizer

# Each category has distinctive vocabulary to make classification feasible
SPORTS_DOCS = [
    "The striker scored twice and the home team won the match.",
    "A late goal in the final minute sealed the championship title.",
    "The coach praised the defense after a hard fought league win.",
    "Fans cheered as the goalkeeper saved the penalty kick.",
    "The team trained all week before the cup match on Saturday.",
    "The midfielder signed a new contract with the football club.",
]

POLITICS_DOCS = [
    "The senate passed the budget bill after a long debate.",
    "Voters head to the polls in the national election next week.",
    "The minister announced a new policy on taxes and spending.",
    "Parliament debated the proposed reform of the election law.",
    "The president vetoed the bill passed by the senate.",
    "Opposition leaders criticized the government budget plan.",
]

COOKING_DOCS = [
    "Whisk the eggs with sugar and fold in the flour gently.",
    "Roast the chicken with garlic, lemon and fresh thyme.",
    "Simmer the tomato sauce and season with basil and salt.",
    "Bake the bread until the crust is golden and crisp.",
    "Chop the onions and fry them in butter until soft.",
    "Knead the dough and let it rise before you bake it.",
]


@pytest.fixture
def corpus() -> tuple[list[str], list[str]]:
    """Synthetic corpus with documents and labels."""
    docs = SPORTS_DOCS + POLITICS_DOCS + COOKING_DOCS
    labels = (
        ["sports"] * len(SPORTS_DOCS)
        + ["politics"] * len(POLITICS_DOCS)
        + ["cooking"] * len(COOKING_DOCS)
    )
    return docs, labels


@pytest.fixture
def spam_ham() -> NaiveBayesClassifier:
    """Whitespace classifier trained on two tiny examples."""
    classifier = NaiveBayesClassifier()
    classifier.train_text("spam spam spam", "spam")
    classifier.train_text("ham ham", "ham")
    return classifier


@pytest.fixture
def trained_classifier(corpus) -> NaiveBayesClassifier:
    """Regex-tokenized classifier trained on the full corpus."""
    docs, labels = corpus
    classifier = NaiveBayesClassifier(RegexTokenizer(use_stopwords=True))
    classifier.train_many(zip(docs, labels))
    return classifier


@pytest.fixture
def train_tsv(tmp_path: Path, corpus) -> Path:
    """Corpus written as a ``category<TAB>text`` file."""
    docs, labels = corpus
    file = tmp_path / "train.tsv"
    lines = ["# category\ttext"] + [f"{label}\t{doc}" for doc, label in zip(docs, labels)]
    file.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return file
