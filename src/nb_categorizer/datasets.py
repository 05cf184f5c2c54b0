"""Loading labeled training examples from text files.

Supported formats, chosen by file extension:

- ``.tsv`` / ``.txt``: one ``category<TAB>text`` example per line. Blank
  lines and lines starting with ``#`` are skipped.
- ``.csv``: header row with ``category`` and ``text`` columns.
- ``.jsonl``: one JSON object per line with ``category`` and ``text`` keys.
"""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path


class DatasetError(ValueError):
    """A dataset file is malformed."""


@dataclass(frozen=True)
class LabeledExample:
    """A single training document and its category."""

    text: str
    category: str

    def as_pair(self) -> tuple[str, str]:
        return self.text, self.category


def parse_examples(lines: Iterable[str], source: str = "<input>") -> Iterator[LabeledExample]:
    """Parse ``category<TAB>text`` lines.

    Args:
        lines: Lines to parse (trailing newlines allowed).
        source: Name used in error messages.

    Yields:
        One ``LabeledExample`` per non-blank, non-comment line.

    Raises:
        DatasetError: If a line has no tab or an empty category.
    """
    for lineno, raw_line in enumerate(lines, 1):
        line = raw_line.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        if "\t" not in line:
            raise DatasetError(f"{source}:{lineno}: expected 'category<TAB>text'")
        category, text = line.split("\t", 1)
        category = category.strip()
        if not category:
            raise DatasetError(f"{source}:{lineno}: empty category")
        yield LabeledExample(text=text.strip(), category=category)


def _parse_csv(path: Path) -> Iterator[LabeledExample]:
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        columns = set(reader.fieldnames or [])
        if not {"category", "text"} <= columns:
            raise DatasetError(f"{path}: CSV header must contain 'category' and 'text' columns")
        for row in reader:
            category = (row.get("category") or "").strip()
            if not category:
                raise DatasetError(f"{path}:{reader.line_num}: empty category")
            yield LabeledExample(text=(row.get("text") or "").strip(), category=category)


def _parse_jsonl(path: Path) -> Iterator[LabeledExample]:
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise DatasetError(f"{path}:{lineno}: invalid JSON ({exc.msg})") from exc
            if not isinstance(record, dict) or "category" not in record or "text" not in record:
                raise DatasetError(f"{path}:{lineno}: expected an object with 'category' and 'text'")
            category = str(record["category"]).strip()
            if not category:
                raise DatasetError(f"{path}:{lineno}: empty category")
            yield LabeledExample(text=str(record["text"]), category=category)


def load_examples(path: str | Path) -> list[LabeledExample]:
    """Load labeled examples from a file.

    Args:
        path: Path to a ``.tsv``, ``.txt``, ``.csv`` or ``.jsonl`` file.

    Returns:
        Examples in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        DatasetError: If the extension is unsupported or a row is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix in (".tsv", ".txt"):
        with open(path, "r", encoding="utf-8") as f:
            return list(parse_examples(f, source=str(path)))
    if suffix == ".csv":
        return list(_parse_csv(path))
    if suffix == ".jsonl":
        return list(_parse_jsonl(path))

    raise DatasetError(
        f"Unsupported dataset format '{suffix}'. Supported formats: .csv, .jsonl, .tsv, .txt"
    )
