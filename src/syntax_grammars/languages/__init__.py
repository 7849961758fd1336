"""Grammar definitions, the grammar registry and the tokenizer."""

from .base import Grammar, GrammarRef, Rule, Token
from .errors import (
    GrammarError,
    MalformedPatternError,
    NonTerminatingRuleWarning,
    UnknownGrammarError,
    UnknownTokenError,
)
from .registry import (
    GrammarRegistry,
    default_registry,
    get_grammar,
    list_languages,
    register_builtin_grammars,
)
from .tokenizer import Tokenizer, tokenize

__all__ = [
    "Grammar",
    "GrammarRef",
    "Rule",
    "Token",
    "GrammarError",
    "MalformedPatternError",
    "NonTerminatingRuleWarning",
    "UnknownGrammarError",
    "UnknownTokenError",
    "GrammarRegistry",
    "default_registry",
    "get_grammar",
    "list_languages",
    "register_builtin_grammars",
    "Tokenizer",
    "tokenize",
]
