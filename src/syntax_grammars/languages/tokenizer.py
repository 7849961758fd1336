"""Priority-ordered, recursive pattern-matching tokenizer.

The tokenizer walks the input with a single cursor. At each step every rule
of the grammar proposes its first match at or after the cursor; the match
with the smallest start wins, ties going to the rule declared first.

Rules see the text through a window:

- A non-greedy rule may not run past the start of the best candidate
  proposed by a rule declared before it. When it does, it is searched again
  inside the window, so ``$`` and lookaheads see the window end.
- A greedy rule ignores the window and may swallow a higher-priority
  candidate that starts inside its own match (a string containing ``--``
  stays one string).

A lookbehind rule's first capture group is context: it may overlap text that
was already consumed and is never part of the classified span.

Besides line starts, ``^`` also matches at the cursor, so a rule anchored
with ``^`` can match right after the previous token.
"""

import logging
import warnings
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from syntax_grammars.config import EngineConfig

from .base import Grammar, GrammarRef, Rule, Token
from .errors import GrammarError, NonTerminatingRuleWarning

if TYPE_CHECKING:
    from .registry import GrammarRegistry

logger = logging.getLogger(__name__)

# Upper bound on chained ``rest`` grammars merged into one level
MAX_REST_CHAIN = 16


class _RuleCursor:
    """Per-level matching state of one rule.

    Caches the rule's first match at or after the cursor. The cached match
    stays valid until the cursor moves past its start, so each rule scans
    the text of a level roughly once.
    """

    __slots__ = ("name", "rule", "text", "raw", "span", "exhausted", "skipped")

    def __init__(self, name: str, rule: Rule, text: str, skipped: dict[str, int]):
        self.name = name
        self.rule = rule
        self.text = text
        self.skipped = skipped  # rule name -> offset of its first empty match
        self.raw = -1  # start of the raw match behind ``span``
        self.span: tuple[int, int] | None = None
        self.exhausted = False

    def _classify(self, match) -> tuple[int, int]:
        start = match.start()
        if self.rule.lookbehind:
            start += len(match.group(1) or "")
        return start, match.end()

    def _skip_empty(self, offset: int) -> None:
        if self.name not in self.skipped:
            self.skipped[self.name] = offset
            logger.debug("Rule '%s' matched the empty string at offset %d", self.name, offset)

    def _match_at(self, cursor: int, limit: int | None = None) -> tuple[int, int] | None:
        # ``^`` also anchors where the unconsumed text begins
        anchored = self.rule.anchored
        if anchored is None or cursor == 0:
            return None
        if limit is None:
            match = anchored.match(self.text, cursor)
        else:
            match = anchored.match(self.text, cursor, limit)
        if match is None:
            return None
        start, end = self._classify(match)
        if end > start:
            return start, end
        self._skip_empty(start)
        return None

    def find(self, cursor: int) -> tuple[int, int] | None:
        """First non-empty match whose classified span starts at or after ``cursor``."""
        span = self._scan(cursor)
        head = self._match_at(cursor)
        if head is not None and (span is None or head[0] <= span[0]):
            return head
        return span

    def _scan(self, cursor: int) -> tuple[int, int] | None:
        if self.exhausted:
            return None
        if self.span is not None and self.span[0] >= cursor:
            return self.span

        pattern = self.rule.pattern
        pos = self.raw + 1
        if not self.rule.lookbehind:
            pos = max(pos, cursor)
        while pos <= len(self.text):
            match = pattern.search(self.text, pos)
            if match is None:
                break
            start, end = self._classify(match)
            if start >= cursor and end > start:
                self.raw = match.start()
                self.span = (start, end)
                return self.span
            if end == start and start >= cursor:
                self._skip_empty(start)
            pos = match.start() + 1

        self.exhausted = True
        self.span = None
        return None

    def find_within(self, cursor: int, limit: int) -> tuple[int, int] | None:
        """Like ``find`` but the match must end at or before ``limit``. Not cached.

        The window end changes what ``$`` and lookaheads see, so matches
        rejected by the unbounded scan are tried again from the cursor (from
        the level start for lookbehind rules, whose context may precede it).
        """
        head = self._match_at(cursor, limit)
        if head is not None:
            return head
        pattern = self.rule.pattern
        pos = 0 if self.rule.lookbehind else cursor
        while pos <= limit:
            match = pattern.search(self.text, pos, limit)
            if match is None:
                return None
            start, end = self._classify(match)
            if start >= cursor and end > start:
                return start, end
            pos = match.start() + 1
        return None


@dataclass
class Tokenizer:
    """Tokenizes text against a grammar.

    Holds no per-call state, so one instance may be shared between threads.

    Args:
        registry: Registry used to resolve grammar names and lazy references
            (the default registry when None)
        config: Engine settings
    """

    registry: "GrammarRegistry | None" = None
    config: EngineConfig = field(default_factory=EngineConfig)

    def _registry(self) -> "GrammarRegistry":
        if self.registry is None:
            from .registry import default_registry

            return default_registry()
        return self.registry

    def resolve(self, grammar) -> Grammar:
        """Resolve a grammar name, lazy reference or authoring literal."""
        if isinstance(grammar, Grammar):
            return grammar
        if isinstance(grammar, (str, GrammarRef)):
            return self._registry().resolve(grammar)
        if isinstance(grammar, Mapping):
            return Grammar.from_mapping(grammar)
        raise GrammarError(f"Cannot tokenize with {grammar!r}")

    def expand(self, grammar: Grammar) -> Grammar:
        """Merge a grammar's ``rest`` chain into a single grammar.

        A named grammar is merged at most once, so ``rest`` cycles end where
        they would repeat.
        """
        merged = set()
        for _ in range(MAX_REST_CHAIN):
            rest = grammar.rest
            if rest is None:
                return grammar
            grammar = grammar.with_rest(None)
            key = rest.name if isinstance(rest, GrammarRef) else id(rest)
            if key in merged:
                logger.debug("'rest' grammar %s already merged; chain stops", rest)
                return grammar
            merged.add(key)
            grammar = grammar.with_overrides(self.resolve(rest))
        logger.warning("'rest' chain longer than %d grammars; remainder ignored", MAX_REST_CHAIN)
        return grammar.with_rest(None)

    def tokenize(self, text: str, grammar) -> list[Token]:
        """Tokenize text.

        Args:
            text: Source text
            grammar: Grammar, registered name, GrammarRef or authoring literal

        Returns:
            Tokens covering the whole text, in order
        """
        return self._tokenize(text, grammar, stacklevel=3)

    def _tokenize(self, text: str, grammar, stacklevel: int) -> list[Token]:
        skipped: dict[str, int] = {}
        tokens = self._tokenize_level(text, 0, self.expand(self.resolve(grammar)), 0, skipped)
        if self.config.warn_empty_matches:
            for name, offset in skipped.items():
                warnings.warn(
                    f"Rule '{name}' matched the empty string at offset {offset}; skipped",
                    NonTerminatingRuleWarning,
                    stacklevel=stacklevel,
                )
        return tokens

    def _tokenize_level(
        self,
        text: str,
        offset: int,
        grammar: Grammar,
        depth: int,
        skipped: dict[str, int],
    ) -> list[Token]:
        cursors = [
            _RuleCursor(name, rule, text, skipped) for name, rules in grammar for rule in rules
        ]
        tokens: list[Token] = []
        cursor = 0
        length = len(text)

        while cursor < length:
            best = None
            for rc in cursors:
                span = rc.find(cursor)
                if span is None:
                    continue
                if best is not None:
                    if span[0] >= best[0]:
                        continue
                    if not rc.rule.greedy and span[1] > best[0]:
                        span = rc.find_within(cursor, best[0])
                        if span is None:
                            continue
                best = (span[0], span[1], rc)
                if span[0] == cursor:
                    break

            if best is None:
                break

            start, end, rc = best
            if start > cursor:
                self._append_literal(tokens, text[cursor:start], offset + cursor)
            tokens.append(self._make_token(text[start:end], offset + start, rc, depth, skipped))
            cursor = end

        if cursor < length:
            self._append_literal(tokens, text[cursor:], offset + cursor)
        return tokens

    def _make_token(
        self,
        matched: str,
        start: int,
        rc: _RuleCursor,
        depth: int,
        skipped: dict[str, int],
    ) -> Token:
        rule = rc.rule
        content: str | list[Token] = matched
        if rule.inside is not None:
            if depth + 1 > self.config.max_depth:
                logger.warning(
                    "Nesting depth %d exceeded in token '%s'; emitting literal text",
                    self.config.max_depth,
                    rc.name,
                )
            else:
                inside = self.expand(self.resolve(rule.inside))
                content = self._tokenize_level(matched, start, inside, depth + 1, skipped)
        return Token(rc.name, content, start, start + len(matched), alias=rule.alias)

    @staticmethod
    def _append_literal(tokens: list[Token], text: str, start: int) -> None:
        last = tokens[-1] if tokens else None
        if last is not None and not last.is_classified and last.end == start:
            last.content += text
            last.end += len(text)
        else:
            tokens.append(Token(None, text, start, start + len(text)))


def tokenize(text: str, grammar, registry=None, config: EngineConfig | None = None) -> list[Token]:
    """Tokenize text against a grammar.

    Args:
        text: Source text
        grammar: Grammar, registered name, GrammarRef or authoring literal
        registry: Registry for names and lazy references (default registry if None)
        config: Engine settings

    Returns:
        Tokens covering the whole text, in order
    """
    tokenizer = Tokenizer(registry=registry, config=config or EngineConfig())
    return tokenizer._tokenize(text, grammar, stacklevel=3)
