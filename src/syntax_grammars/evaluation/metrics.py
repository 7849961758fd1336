"""Inspection and metrics for token streams."""

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass

from syntax_grammars.languages import Token


@dataclass
class TokenizationMetrics:
    """Metrics for one tokenization."""

    coverage_ok: bool
    classified_ratio: float
    num_tokens: int
    num_leaves: int
    num_classified: int
    max_depth: int
    text_length: int

    # Per-type details
    type_counts: dict[str, int]


def token_text(tokens: list[Token]) -> str:
    """Reconstruct the source text covered by a token sequence."""
    return "".join(t.text for t in tokens)


def iter_tokens(tokens: list[Token], depth: int = 0) -> Iterator[tuple[int, Token]]:
    """Walk a token tree depth-first, yielding ``(depth, token)`` pairs."""
    for token in tokens:
        yield depth, token
        if token.is_nested:
            yield from iter_tokens(token.content, depth + 1)


def flatten(tokens: list[Token]) -> list[tuple[str | None, str]]:
    """Leaf spans as ``(type, text)`` pairs.

    A leaf inside a nested token with no type of its own is reported with
    the type of the closest classified ancestor.
    """
    leaves: list[tuple[str | None, str]] = []

    def walk(items: list[Token], inherited: str | None) -> None:
        for token in items:
            kind = token.type or inherited
            if token.is_nested:
                walk(token.content, kind)
            else:
                leaves.append((kind, token.content))

    walk(tokens, None)
    return leaves


def type_counts(tokens: list[Token]) -> dict[str, int]:
    """Count classified tokens by reported type, nested tokens included."""
    counts = Counter(t.type for _, t in iter_tokens(tokens) if t.is_classified)
    return dict(sorted(counts.items()))


def compute_tokenization_metrics(text: str, tokens: list[Token]) -> TokenizationMetrics:
    """Compute metrics for the tokenization of ``text``.

    Args:
        text: Source text that was tokenized
        tokens: Top-level token sequence

    Returns:
        TokenizationMetrics with coverage and per-type results
    """
    walked = list(iter_tokens(tokens))
    leaves = flatten(tokens)

    if not text:
        return TokenizationMetrics(
            coverage_ok=not tokens,
            classified_ratio=0.0,
            num_tokens=len(walked),
            num_leaves=len(leaves),
            num_classified=0,
            max_depth=0,
            text_length=0,
            type_counts={},
        )

    classified_chars = sum(len(s) for kind, s in leaves if kind is not None)

    return TokenizationMetrics(
        coverage_ok=token_text(tokens) == text,
        classified_ratio=classified_chars / len(text),
        num_tokens=len(walked),
        num_leaves=len(leaves),
        num_classified=sum(1 for _, t in walked if t.is_classified),
        max_depth=max((d for d, _ in walked), default=0),
        text_length=len(text),
        type_counts=type_counts(tokens),
    )


def format_token_tree(tokens: list[Token]) -> list[str]:
    """One line per token, indented by nesting depth."""
    lines = []
    for depth, token in iter_tokens(tokens):
        indent = "  " * depth
        label = token.type or "-"
        if token.alias and token.name != token.alias:
            label = f"{token.alias} ({token.name})"
        if token.is_nested:
            lines.append(f"{indent}{label} [{token.start}:{token.end}]")
        else:
            lines.append(f"{indent}{label} [{token.start}:{token.end}] {token.content!r}")
    return lines


def print_token_analysis(text: str, tokens: list[Token], max_show: int = 50) -> None:
    """Print the token tree and metrics of a tokenization.

    Args:
        text: Source text that was tokenized
        tokens: Top-level token sequence
        max_show: Maximum number of tree lines to show
    """
    metrics = compute_tokenization_metrics(text, tokens)
    lines = format_token_tree(tokens)

    print(f"\nTokens ({len(lines)} total):")
    for line in lines[:max_show]:
        print(f"  {line}")
    if len(lines) > max_show:
        print(f"  ... and {len(lines) - max_show} more")

    print(f"\n{'='*60}")
    print("Tokenization Metrics")
    print(f"{'='*60}")
    print(f"Text length:         {metrics.text_length}")
    print(f"Coverage:            {'ok' if metrics.coverage_ok else 'BROKEN'}")
    print(f"Classified chars:    {metrics.classified_ratio:.2%}")
    print(f"Classified tokens:   {metrics.num_classified}")
    print(f"Max nesting depth:   {metrics.max_depth}")

    print("\nTypes:")
    for kind, count in metrics.type_counts.items():
        print(f"  {kind:<20} {count}")
