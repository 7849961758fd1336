"""Errors raised by the grammar registry and the tokenizer."""


class GrammarError(Exception):
    """Base class for grammar configuration errors."""


class UnknownGrammarError(GrammarError, KeyError):
    """A language name is not registered."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = available or []
        message = f"Unknown grammar '{name}'"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would repr() the message
        return self.args[0]


class UnknownTokenError(GrammarError, KeyError):
    """A token name is absent from the grammar it was looked up in."""

    def __init__(self, token: str, grammar: str | None = None):
        self.token = token
        self.grammar = grammar
        where = f" in grammar '{grammar}'" if grammar else ""
        super().__init__(f"Unknown token '{token}'{where}")

    def __str__(self) -> str:
        return self.args[0]


class MalformedPatternError(GrammarError, ValueError):
    """A rule pattern failed to compile."""

    def __init__(self, pattern: str, error: Exception, token: str | None = None):
        self.pattern = pattern
        self.error = error
        self.token = token
        owner = f" for token '{token}'" if token else ""
        super().__init__(f"Malformed pattern{owner}: {pattern!r} ({error})")


class NonTerminatingRuleWarning(UserWarning):
    """A rule matched the empty string and was skipped."""
