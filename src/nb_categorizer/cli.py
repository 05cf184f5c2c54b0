"""Command-line interface for nb-categorizer.

Provides ``classify``, ``evaluate``, and ``inspect`` commands with rich
terminal output using the ``click`` and ``rich`` libraries. Models are
never saved: every command trains in-process from a labeled dataset.

Usage::

    nb-categorizer classify train.tsv "do you like spam?"
    nb-categorizer evaluate --folds 5 corpus.jsonl
    nb-categorizer inspect --top 10 train.tsv
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .classifier import NaiveBayesClassifier, ScoringMode
from .config import ClassifierConfig
from .datasets import DatasetError, LabeledExample, load_examples
from .evaluation import ClassificationMetrics, cross_validate
from .tokenizers import available_tokenizers

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _classifier_options(func):
    """Attach the shared classifier/tokenizer options to a command."""
    options = [
        click.option("--alpha", type=float, default=None,
                     help="Smoothing constant (default 1.0)."),
        click.option("--scoring", type=click.Choice([m.value for m in ScoringMode]), default=None,
                     help="Likelihood denominator: prior probability or category count."),
        click.option("--tokenizer", type=click.Choice(available_tokenizers()), default=None,
                     help="Tokenizer used for training and classification."),
        click.option("--lowercase/--no-lowercase", default=None,
                     help="Lowercase tokens."),
        click.option("--stopwords/--no-stopwords", "use_stopwords", default=None,
                     help="Drop English stop words (regex tokenizer)."),
        click.option("--ngram-max", type=click.IntRange(min=1), default=None,
                     help="Largest n-gram size (regex tokenizer)."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(**overrides) -> ClassifierConfig:
    try:
        return ClassifierConfig.from_env().with_overrides(**overrides)
    except ValueError as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        sys.exit(1)


def _load(path: Path) -> list[LabeledExample]:
    try:
        examples = load_examples(path)
    except (DatasetError, OSError) as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        sys.exit(1)
    if not examples:
        console.print(f"[bold red]Error:[/] {path} contains no examples")
        sys.exit(1)
    return examples


def _train(config: ClassifierConfig, examples: list[LabeledExample]) -> NaiveBayesClassifier:
    classifier = NaiveBayesClassifier.from_config(config)
    classifier.train_many(ex.as_pair() for ex in examples)
    logging.getLogger(__name__).info(
        "Trained on %d examples, %d categories, %d distinct tokens",
        classifier.training_count, len(classifier.categories), classifier.token_count,
    )
    return classifier


@click.group()
@click.version_option(__version__, package_name="nb-categorizer")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def main(verbose: bool) -> None:
    """🏷️  nb-categorizer: incremental Naive Bayes text categorization.

    Train on a labeled dataset (TSV, CSV or JSONL) and classify, evaluate,
    or inspect the resulting model.
    """
    _configure_logging(verbose)


@main.command()
@click.argument("train_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("texts", nargs=-1)
@click.option("--explain", "-e", is_flag=True, help="Show per-category scores.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@_classifier_options
def classify(train_file: Path, texts: tuple[str, ...], explain: bool, output: str,
             **overrides) -> None:
    """Train on TRAIN_FILE, then classify each TEXT.

    When no TEXT is given, each non-empty line of stdin is classified.

    Example: nb-categorizer classify train.tsv "ham and eggs"
    """
    config = _build_config(**overrides)
    classifier = _train(config, _load(train_file))

    queries = list(texts) or [line.strip() for line in sys.stdin if line.strip()]
    results = [(text, classifier.explain(text)) for text in queries]

    if output == "json":
        click.echo(json.dumps([
            {"text": text, **(result.to_dict() if result else {"category": None})}
            for text, result in results
        ], indent=2))
        return

    table = Table(title=f"Classification (trained on {train_file.name})", show_lines=explain)
    table.add_column("#", justify="right", width=4)
    table.add_column("Text", style="white", max_width=60)
    table.add_column("Category", style="cyan")
    table.add_column("Conf.", justify="center", width=7)
    if explain:
        table.add_column("Log scores", style="dim")

    for i, (text, result) in enumerate(results, 1):
        excerpt = escape(text[:120]) + ("..." if len(text) > 120 else "")
        if result is None:
            row = [str(i), excerpt, "[dim]-[/]", "-"]
        else:
            row = [str(i), excerpt, escape(str(result.category)), f"{result.confidence:.0%}"]
        if explain:
            row.append("\n".join(
                f"{escape(str(c))}: {s:.4f}" for c, s in (result.scores.items() if result else [])
            ))
        table.add_row(*row)

    console.print(table)


@main.command()
@click.argument("data_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--folds", "-k", type=click.IntRange(min=2), default=5, show_default=True,
              help="Number of cross-validation folds.")
@click.option("--seed", type=int, default=42, show_default=True, help="Fold shuffling seed.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@_classifier_options
def evaluate(data_file: Path, folds: int, seed: int, output: str, **overrides) -> None:
    """Run stratified k-fold cross-validation on DATA_FILE.

    Example: nb-categorizer evaluate --folds 3 corpus.csv
    """
    config = _build_config(**overrides)
    examples = _load(data_file)

    try:
        with err_console.status("[bold blue]Cross-validating...", spinner="dots"):
            results = cross_validate(
                [ex.text for ex in examples],
                [ex.category for ex in examples],
                k=folds,
                seed=seed,
                factory=lambda: NaiveBayesClassifier.from_config(config),
            )
    except ValueError as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        sys.exit(1)

    mean_accuracy = sum(r.accuracy for r in results) / len(results)
    mean_f1 = sum(r.macro_f1 for r in results) / len(results)

    if output == "json":
        click.echo(json.dumps({
            "config": config.to_dict(),
            "folds": [r.to_dict() for r in results],
            "mean_accuracy": round(mean_accuracy, 4),
            "mean_macro_f1": round(mean_f1, 4),
        }, indent=2))
        return

    _render_folds(results)
    console.print(
        f"Mean accuracy: [bold]{mean_accuracy:.2%}[/] | Mean macro F1: [bold]{mean_f1:.4f}[/]"
    )
    console.print()


@main.command()
@click.argument("train_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--top", "-n", type=click.IntRange(min=1), default=10, show_default=True,
              help="Tokens to show per category.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@_classifier_options
def inspect(train_file: Path, top: int, output: str, **overrides) -> None:
    """Show training statistics and the most informative tokens.

    Example: nb-categorizer inspect --top 5 train.tsv
    """
    config = _build_config(**overrides)
    classifier = _train(config, _load(train_file))
    informative = {
        str(c): classifier.most_informative_tokens(c, top_n=top) for c in classifier.categories
    }

    if output == "json":
        click.echo(json.dumps({
            "training_count": classifier.training_count,
            "token_count": classifier.token_count,
            "categories": {str(c): n for c, n in classifier.category_counts().items()},
            "most_informative": {
                c: [[str(t), r] for t, r in tokens] for c, tokens in informative.items()
            },
        }, indent=2))
        return

    console.print(Panel(
        f"[bold]{train_file.name}[/]\n"
        f"Examples: {classifier.training_count} | "
        f"Categories: {len(classifier.categories)} | "
        f"Distinct tokens: {classifier.token_count}\n"
        f"Tokenizer: {classifier.tokenizer!r} | "
        f"alpha={classifier.alpha} | scoring={classifier.scoring.value}",
        title="🏷️  Model Statistics",
        border_style="blue",
    ))

    for category in classifier.categories:
        table = Table(
            title=f"{escape(str(category))}: {classifier.category_count(category)} examples "
                  f"(prior {classifier.prior(category):.2%})",
        )
        table.add_column("Token", style="cyan")
        table.add_column("Examples", justify="right")
        table.add_column("Log ratio", justify="right")
        for token, ratio in informative[str(category)]:
            table.add_row(
                escape(str(token)),
                str(classifier.token_category_count(token, category)),
                f"{ratio:+.4f}",
            )
        console.print(table)
    console.print()


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_folds(results: list[ClassificationMetrics]) -> None:
    """Render per-fold metrics as a rich table."""
    table = Table(title="Cross-Validation", show_lines=False)
    table.add_column("Fold", justify="right", width=5)
    table.add_column("Accuracy", justify="right")
    table.add_column("Macro P", justify="right")
    table.add_column("Macro R", justify="right")
    table.add_column("Macro F1", justify="right")
    table.add_column("Weighted F1", justify="right")

    for i, m in enumerate(results, 1):
        if m.accuracy > 0.8:
            style = "green"
        elif m.accuracy > 0.5:
            style = "yellow"
        else:
            style = "red"
        table.add_row(
            str(i),
            f"[{style}]{m.accuracy:.2%}[/]",
            f"{m.macro_precision:.4f}",
            f"{m.macro_recall:.4f}",
            f"{m.macro_f1:.4f}",
            f"{m.weighted_f1:.4f}",
        )

    console.print()
    console.print(table)


if __name__ == "__main__":
    main()
