"""Grammar registry for name-based lookup."""

import logging
import threading
from collections.abc import Mapping

from .base import Grammar, GrammarRef
from .errors import UnknownGrammarError, UnknownTokenError

logger = logging.getLogger(__name__)


class GrammarRegistry:
    """Mapping from language names to grammars.

    Grammars are immutable values: every operation stores a new grammar
    under the name, so tokenizations already running keep the grammar
    they started with. Writes are serialized by ``lock``, which callers may
    hold to make a read-modify-define sequence atomic.
    """

    def __init__(self):
        self._grammars: dict[str, Grammar] = {}
        self._aliases: dict[str, str] = {}
        self.lock = threading.RLock()

    def _canonical(self, name: str) -> str:
        seen = set()
        while name in self._aliases:
            if name in seen:
                raise UnknownGrammarError(name)
            seen.add(name)
            name = self._aliases[name]
        return name

    def define(self, name: str, grammar: "Grammar | Mapping") -> Grammar:
        """Register a grammar under a name, replacing any previous definition.

        Args:
            name: Language name
            grammar: Grammar or authoring literal ``{token: rule | [rules]}``

        Returns:
            The registered grammar

        Raises:
            MalformedPatternError: If a pattern does not compile (nothing is registered)
        """
        grammar = Grammar.from_mapping(grammar)
        with self.lock:
            self._aliases.pop(name, None)
            self._grammars[name] = grammar
        logger.debug("Defined grammar '%s' with %d tokens", name, len(grammar))
        return grammar

    def extend(
        self,
        name: str,
        base_name: str,
        overrides: "Grammar | Mapping | None" = None,
    ) -> Grammar:
        """Register a deep copy of ``base_name`` with overrides merged on top.

        Overrides with an existing token name replace it in place; new names
        are appended (lowest priority).

        Raises:
            UnknownGrammarError: If ``base_name`` is not registered
        """
        with self.lock:
            grammar = self.resolve(base_name).copy()
            if overrides:
                grammar = grammar.with_overrides(overrides)
            return self.define(name, grammar)

    def insert_before(self, name: str, target: str, new_rules: "Grammar | Mapping") -> Grammar:
        """Splice rules into grammar ``name`` just before token ``target``.

        Raises:
            UnknownGrammarError: If ``name`` is not registered
            UnknownTokenError: If ``target`` is not a token of the grammar
        """
        return self._insert(name, target, new_rules, after=False)

    def insert_after(self, name: str, target: str, new_rules: "Grammar | Mapping") -> Grammar:
        """Splice rules into grammar ``name`` just after token ``target``.

        Raises:
            UnknownGrammarError: If ``name`` is not registered
            UnknownTokenError: If ``target`` is not a token of the grammar
        """
        return self._insert(name, target, new_rules, after=True)

    def _insert(self, name: str, target: str, new_rules, after: bool) -> Grammar:
        with self.lock:
            canonical = self._canonical(name)
            grammar = self.resolve(canonical)
            try:
                grammar = grammar.inserted(target, new_rules, after=after)
            except UnknownTokenError as e:
                raise UnknownTokenError(e.token, canonical) from None
            return self.define(canonical, grammar)

    def remove(self, name: str, *tokens: str) -> Grammar:
        """Drop tokens from grammar ``name``.

        Raises:
            UnknownGrammarError: If ``name`` is not registered
            UnknownTokenError: If a token is not in the grammar
        """
        with self.lock:
            canonical = self._canonical(name)
            try:
                grammar = self.resolve(canonical).without(*tokens)
            except UnknownTokenError as e:
                raise UnknownTokenError(e.token, canonical) from None
            return self.define(canonical, grammar)

    def alias(self, name: str, target: str) -> None:
        """Make ``name`` resolve to whatever ``target`` currently resolves to.

        Raises:
            UnknownGrammarError: If ``target`` is not registered
        """
        with self.lock:
            target = self._canonical(target)
            if target not in self._grammars:
                raise UnknownGrammarError(target, self.list_languages())
            if name == target:
                return
            self._grammars.pop(name, None)
            self._aliases[name] = target
        logger.debug("Aliased grammar '%s' to '%s'", name, target)

    def resolve(self, name: "str | GrammarRef") -> Grammar:
        """Look up a grammar by name.

        Raises:
            UnknownGrammarError: If the name is not registered
        """
        if isinstance(name, GrammarRef):
            name = name.name
        grammar = self._grammars.get(self._canonical(name))
        if grammar is None:
            raise UnknownGrammarError(name, self.list_languages())
        return grammar

    def list_languages(self) -> list[str]:
        """List registered names, aliases included."""
        return list(self._grammars.keys()) + list(self._aliases.keys())

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self._canonical(name) in self._grammars

    def __len__(self) -> int:
        return len(self._grammars) + len(self._aliases)


def register_builtin_grammars(registry: GrammarRegistry) -> GrammarRegistry:
    """Register every bundled language grammar into a registry."""
    from . import bash, clike, euluna, lua, nelua

    lua.register(registry)
    nelua.register(registry)
    euluna.register(registry)
    clike.register(registry)
    bash.register(registry)
    return registry


# Global registry, created on first use
_DEFAULT: GrammarRegistry | None = None
_DEFAULT_LOCK = threading.Lock()


def default_registry() -> GrammarRegistry:
    """Process-wide registry pre-loaded with the bundled grammars."""
    global _DEFAULT
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            _DEFAULT = register_builtin_grammars(GrammarRegistry())
        return _DEFAULT


def define(name: str, grammar: "Grammar | Mapping") -> Grammar:
    """Register a grammar in the default registry."""
    return default_registry().define(name, grammar)


def extend(name: str, base_name: str, overrides: "Grammar | Mapping | None" = None) -> Grammar:
    """Extend a grammar in the default registry."""
    return default_registry().extend(name, base_name, overrides)


def insert_before(name: str, target: str, new_rules: "Grammar | Mapping") -> Grammar:
    """Insert rules before a token in the default registry."""
    return default_registry().insert_before(name, target, new_rules)


def insert_after(name: str, target: str, new_rules: "Grammar | Mapping") -> Grammar:
    """Insert rules after a token in the default registry."""
    return default_registry().insert_after(name, target, new_rules)


def resolve(name: "str | GrammarRef") -> Grammar:
    """Look up a grammar in the default registry."""
    return default_registry().resolve(name)


def get_grammar(name: str) -> Grammar:
    """Get a grammar by name.

    Args:
        name: Registered language name

    Returns:
        Grammar instance

    Raises:
        UnknownGrammarError: If the name is not registered
    """
    return default_registry().resolve(name)


def list_languages() -> list[str]:
    """List all languages in the default registry."""
    return default_registry().list_languages()
