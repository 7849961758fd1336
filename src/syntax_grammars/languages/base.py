"""Core grammar data types: rules, grammars, lazy grammar references and tokens."""

import copy
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

from .errors import GrammarError, MalformedPatternError, UnknownTokenError

# Letters accepted in a rule's ``flags`` string
FLAG_LETTERS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "a": re.ASCII,
    "u": re.UNICODE,
}

# Reserved grammar key naming a grammar merged in at tokenization time
REST_KEY = "rest"


def parse_flags(flags: str | int) -> int:
    """Convert a flag string such as ``"im"`` to ``re`` flags.

    Args:
        flags: Flag letters, or an already combined ``re`` flag value

    Returns:
        Combined ``re`` flags

    Raises:
        ValueError: If a letter is not a known flag
    """
    if isinstance(flags, int):
        return flags
    value = 0
    for letter in flags:
        if letter not in FLAG_LETTERS:
            raise ValueError(f"Unknown regex flag '{letter}'. Available: {''.join(FLAG_LETTERS)}")
        value |= FLAG_LETTERS[letter]
    return value


def compile_pattern(
    pattern: "str | re.Pattern",
    flags: str | int = "",
    token: str | None = None,
) -> re.Pattern:
    """Compile a rule pattern, reporting failures as MalformedPatternError.

    Args:
        pattern: Regular expression source or compiled pattern
        flags: Extra flags, as letters or ``re`` flag value
        token: Token name the pattern belongs to (for error messages)

    Returns:
        Compiled pattern
    """
    source = pattern.pattern if isinstance(pattern, re.Pattern) else pattern
    try:
        extra = parse_flags(flags)
        if isinstance(pattern, re.Pattern):
            if not extra or pattern.flags & extra == extra:
                return pattern
            return re.compile(pattern.pattern, pattern.flags | extra)
        return re.compile(pattern, extra)
    except (re.error, ValueError, TypeError) as e:
        raise MalformedPatternError(str(source), e, token) from e


# Splits a pattern into escapes, character classes, carets and plain runs
_CARET_SCAN = re.compile(r"\\.|\[\^?\]?(?:\\.|[^\]\\])*\]|\^|[^\\\[\^]+", re.S)


def cursor_anchored(pattern: re.Pattern) -> re.Pattern | None:
    """Variant of ``pattern`` in which ``^`` also holds at the match position.

    Used with ``Pattern.match(text, pos)`` so that ``^`` anchors at the
    tokenizer cursor without slicing the text. Returns None when the pattern
    has no ``^`` anchor.
    """
    parts = []
    found = False
    for m in _CARET_SCAN.finditer(pattern.pattern):
        if m.group() == "^":
            found = True
        else:
            parts.append(m.group())
    if not found:
        return None
    try:
        return re.compile("".join(parts), pattern.flags)
    except re.error:
        return None


def keyword_pattern(words: Iterable[str], prefix: str = r"\b", suffix: str = r"\b") -> str:
    """Build an alternation of literal words wrapped in boundary assertions."""
    return prefix + "(?:" + "|".join(re.escape(w) for w in words) + ")" + suffix


@dataclass(frozen=True)
class GrammarRef:
    """Lazy handle to a registered grammar, resolved at tokenization time."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Rule:
    """One way of matching a token.

    Attributes:
        pattern: Compiled regular expression (strings are compiled on construction)
        inside: Sub-grammar used to tokenize the matched text
        lookbehind: Exclude capture group 1 from the classified span
        greedy: Match against the full remaining text instead of the window
        alias: Reported token type, when different from the token name
        anchored: ``pattern`` with ``^`` holding at the cursor (None without ``^``)
    """

    pattern: re.Pattern
    inside: "Grammar | GrammarRef | None" = None
    lookbehind: bool = False
    greedy: bool = False
    alias: str | None = None
    anchored: re.Pattern | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.pattern, re.Pattern):
            object.__setattr__(self, "pattern", compile_pattern(self.pattern))
        object.__setattr__(self, "anchored", cursor_anchored(self.pattern))
        if isinstance(self.inside, str):
            object.__setattr__(self, "inside", GrammarRef(self.inside))
        elif isinstance(self.inside, Mapping):
            object.__setattr__(self, "inside", Grammar.from_mapping(self.inside))
        elif self.inside is not None and not isinstance(self.inside, (Grammar, GrammarRef)):
            raise GrammarError(f"Unsupported inside grammar: {self.inside!r}")
        if self.lookbehind and self.pattern.groups < 1:
            raise MalformedPatternError(
                self.pattern.pattern,
                ValueError("lookbehind requires a capturing group"),
            )

    @classmethod
    def from_spec(cls, spec, token: str | None = None) -> "Rule":
        """Build a rule from its authoring form.

        Accepts a pattern string, a compiled pattern, a Rule, or a mapping
        with ``pattern`` and optional ``flags``, ``inside``, ``lookbehind``,
        ``greedy`` and ``alias`` keys.
        """
        if isinstance(spec, Rule):
            return spec
        if isinstance(spec, (str, re.Pattern)):
            return cls(compile_pattern(spec, token=token))
        if isinstance(spec, Mapping):
            options = dict(spec)
            if "pattern" not in options:
                raise GrammarError(f"Rule for token '{token}' has no pattern")
            pattern = compile_pattern(options.pop("pattern"), options.pop("flags", ""), token)
            unknown = set(options) - {"inside", "lookbehind", "greedy", "alias"}
            if unknown:
                raise GrammarError(f"Unknown rule options for token '{token}': {sorted(unknown)}")
            try:
                return cls(pattern, **options)
            except MalformedPatternError as e:
                if e.token is not None:
                    raise
                raise MalformedPatternError(e.pattern, e.error, token) from e
        raise GrammarError(f"Unsupported rule for token '{token}': {spec!r}")


def _as_rules(spec, token: str) -> tuple[Rule, ...]:
    if isinstance(spec, (list, tuple)):
        return tuple(Rule.from_spec(s, token) for s in spec)
    return (Rule.from_spec(spec, token),)


def _as_rest(rest) -> "Grammar | GrammarRef | None":
    if rest is None or isinstance(rest, (Grammar, GrammarRef)):
        return rest
    if isinstance(rest, str):
        return GrammarRef(rest)
    if isinstance(rest, Mapping):
        return Grammar.from_mapping(rest)
    raise GrammarError(f"Unsupported rest grammar: {rest!r}")


class Grammar:
    """Ordered, immutable sequence of token definitions.

    Each entry maps a unique token name to one or more rules. Entry order is
    matching priority. Derivation methods return new grammars.
    """

    def __init__(
        self,
        entries: Iterable[tuple[str, Iterable[Rule]]] = (),
        rest: "Grammar | GrammarRef | str | None" = None,
    ):
        items = []
        seen = set()
        for name, rules in entries:
            if name in seen:
                raise GrammarError(f"Duplicate token '{name}'")
            if name == REST_KEY:
                raise GrammarError(f"'{REST_KEY}' is reserved and cannot name a token")
            seen.add(name)
            items.append((name, tuple(rules)))
        self._entries: tuple[tuple[str, tuple[Rule, ...]], ...] = tuple(items)
        self._index = {name: i for i, (name, _) in enumerate(self._entries)}
        self.rest = _as_rest(rest)

    @classmethod
    def from_mapping(cls, mapping: "Mapping | Grammar") -> "Grammar":
        """Build a grammar from an authoring literal ``{token: rule | [rules]}``.

        The reserved ``rest`` key names a grammar merged in at tokenization time.
        Entries whose value is None are skipped.
        """
        if isinstance(mapping, Grammar):
            return mapping
        entries = []
        rest = None
        for name, spec in mapping.items():
            if name == REST_KEY:
                rest = spec
            elif spec is not None:
                entries.append((name, _as_rules(spec, name)))
        return cls(entries, rest=rest)

    def names(self) -> list[str]:
        """Token names in priority order."""
        return [name for name, _ in self._entries]

    def rules(self, name: str) -> tuple[Rule, ...]:
        """Rules defined for a token name."""
        if name not in self._index:
            raise UnknownTokenError(name)
        return self._entries[self._index[name]][1]

    def __getitem__(self, name: str) -> tuple[Rule, ...]:
        return self.rules(name)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[tuple[str, tuple[Rule, ...]]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grammar):
            return NotImplemented
        return self._entries == other._entries and self.rest == other.rest

    def __hash__(self):
        return hash((self._entries, self.rest))

    def __repr__(self) -> str:
        rest = f", rest={self.rest!r}" if self.rest is not None else ""
        return f"Grammar({self.names()!r}{rest})"

    def with_overrides(self, overrides: "Mapping | Grammar") -> "Grammar":
        """Merge entries on top: same names replace in place, new names append.

        A ``rest`` in the overrides replaces this grammar's rest.
        """
        overrides = Grammar.from_mapping(overrides)
        replaced = dict(overrides._entries)
        entries = [(name, replaced.pop(name, rules)) for name, rules in self._entries]
        entries.extend((name, rules) for name, rules in overrides._entries if name in replaced)
        rest = overrides.rest if overrides.rest is not None else self.rest
        return Grammar(entries, rest=rest)

    def inserted(self, target: str, new: "Mapping | Grammar", after: bool = False) -> "Grammar":
        """Splice entries before (or after) the entry named ``target``.

        New entries whose name already exists elsewhere are moved to the
        splice point.

        Raises:
            UnknownTokenError: If ``target`` is not in the grammar
        """
        if target not in self._index:
            raise UnknownTokenError(target)
        new = Grammar.from_mapping(new)
        added = list(new._entries)
        entries = []
        for name, rules in self._entries:
            if name == target:
                if not after:
                    entries.extend(added)
                if name not in new:
                    entries.append((name, rules))
                if after:
                    entries.extend(added)
            elif name not in new:
                entries.append((name, rules))
        return Grammar(entries, rest=self.rest)

    def without(self, *names: str) -> "Grammar":
        """Return a grammar with the named entries removed."""
        for name in names:
            if name not in self._index:
                raise UnknownTokenError(name)
        return Grammar(
            [(name, rules) for name, rules in self._entries if name not in names],
            rest=self.rest,
        )

    def with_rest(self, rest: "Grammar | GrammarRef | str | None") -> "Grammar":
        """Return a grammar with a different ``rest``."""
        return Grammar(self._entries, rest=rest)

    def copy(self) -> "Grammar":
        """Deep copy. Lazy GrammarRef handles keep pointing at their names."""
        return copy.deepcopy(self)


@dataclass
class Token:
    """A classified (or unclassified) span of the input.

    ``name`` is None for unclassified literal text. ``content`` is the
    literal text, or the nested tokens when the rule had a sub-grammar.
    ``start`` and ``end`` are offsets into the top-level input.
    """

    name: str | None
    content: "str | list[Token]"
    start: int
    end: int
    alias: str | None = field(default=None)

    @property
    def type(self) -> str | None:
        """Reported type: the alias when set, otherwise the token name."""
        return self.alias or self.name

    @property
    def is_classified(self) -> bool:
        return self.name is not None

    @property
    def is_nested(self) -> bool:
        return not isinstance(self.content, str)

    @property
    def text(self) -> str:
        """Source text covered by this token."""
        if isinstance(self.content, str):
            return self.content
        return "".join(t.text for t in self.content)

    def __len__(self) -> int:
        return self.end - self.start
