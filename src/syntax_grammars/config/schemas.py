"""Pydantic configuration schemas."""

from pathlib import Path
from typing import Union

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Configuration for the tokenization engine."""

    max_depth: int = Field(default=32, ge=1, description="Maximum sub-grammar nesting depth")
    warn_empty_matches: bool = Field(
        default=True, description="Warn when a rule matches the empty string"
    )


class RuleConfig(BaseModel):
    """Configuration for a single matching rule."""

    pattern: str = Field(description="Regular expression source")
    flags: str = Field(default="", pattern=r"^[imsxau]*$", description="Regex flag letters")
    lookbehind: bool = Field(default=False, description="Exclude group 1 from the token")
    greedy: bool = Field(default=False, description="Match past higher-priority candidates")
    alias: str | None = Field(default=None, description="Reported token type")
    inside: "str | dict[str, RuleSpec] | None" = Field(
        default=None, description="Grammar name or inline grammar for the matched text"
    )

    def to_rule_spec(self) -> dict:
        """Convert to the mapping form accepted by ``Rule.from_spec``."""
        spec = {
            "pattern": self.pattern,
            "flags": self.flags,
            "lookbehind": self.lookbehind,
            "greedy": self.greedy,
            "alias": self.alias,
        }
        if isinstance(self.inside, dict):
            spec["inside"] = {name: to_authoring(s) for name, s in self.inside.items()}
        elif self.inside is not None:
            spec["inside"] = self.inside
        return spec


RuleSpec = Union[str, RuleConfig, list[Union[str, RuleConfig]]]
RuleConfig.model_rebuild()


def to_authoring(spec: RuleSpec):
    """Convert a configured rule (or list of rules) to the authoring form."""
    if isinstance(spec, list):
        return [to_authoring(s) for s in spec]
    if isinstance(spec, RuleConfig):
        return spec.to_rule_spec()
    return spec


class GrammarConfig(BaseModel):
    """Configuration for one grammar definition."""

    name: str = Field(description="Language name to register under")
    extends: str | None = Field(default=None, description="Base grammar to copy and override")
    rules: dict[str, RuleSpec] = Field(default_factory=dict, description="Ordered token rules")
    rest: str | None = Field(default=None, description="Grammar merged in at tokenization time")
    insert_before: dict[str, dict[str, RuleSpec]] = Field(
        default_factory=dict, description="Rules spliced before a target token"
    )
    insert_after: dict[str, dict[str, RuleSpec]] = Field(
        default_factory=dict, description="Rules spliced after a target token"
    )
    remove: list[str] = Field(default_factory=list, description="Tokens to drop")
    aliases: list[str] = Field(default_factory=list, description="Extra names for this grammar")

    def to_mapping(self) -> dict:
        """Authoring literal for the ``rules`` and ``rest`` of this grammar."""
        mapping = {name: to_authoring(spec) for name, spec in self.rules.items()}
        if self.rest is not None:
            mapping["rest"] = self.rest
        return mapping

    def build(self, registry):
        """Assemble the grammar without registering it.

        Args:
            registry: GrammarRegistry holding the ``extends`` base

        Returns:
            The finished Grammar
        """
        from syntax_grammars.languages import Grammar, UnknownTokenError

        grammar = Grammar.from_mapping(self.to_mapping())
        if self.extends is not None:
            grammar = registry.resolve(self.extends).copy().with_overrides(grammar)
        try:
            for target, rules in self.insert_before.items():
                grammar = grammar.inserted(target, {n: to_authoring(s) for n, s in rules.items()})
            for target, rules in self.insert_after.items():
                grammar = grammar.inserted(
                    target, {n: to_authoring(s) for n, s in rules.items()}, after=True
                )
            if self.remove:
                grammar = grammar.without(*self.remove)
        except UnknownTokenError as e:
            raise UnknownTokenError(e.token, self.name) from None
        return grammar

    def apply(self, registry):
        """Register this grammar into a registry.

        Nothing is registered when any step fails.

        Args:
            registry: GrammarRegistry to update

        Returns:
            The registered Grammar
        """
        with registry.lock:
            grammar = registry.define(self.name, self.build(registry))
            for alias in self.aliases:
                registry.alias(alias, self.name)
        return grammar


class GrammarFile(BaseModel):
    """A file of grammar definitions plus engine settings."""

    grammars: list[GrammarConfig] = Field(default_factory=list)
    engine: EngineConfig = Field(default_factory=EngineConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "GrammarFile":
        """Load grammar definitions from a YAML file."""
        import yaml

        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: str | Path) -> None:
        """Save grammar definitions to a YAML file."""
        import yaml

        with open(path, "w") as f:
            yaml.safe_dump(
                self.model_dump(exclude_defaults=True),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

    def apply(self, registry) -> list[str]:
        """Register every grammar, in file order.

        Returns:
            Names of the registered grammars
        """
        for grammar in self.grammars:
            grammar.apply(registry)
        return [g.name for g in self.grammars]
