"""Configuration schemas."""

from .schemas import (
    EngineConfig,
    GrammarConfig,
    GrammarFile,
    RuleConfig,
)

__all__ = [
    "EngineConfig",
    "GrammarConfig",
    "GrammarFile",
    "RuleConfig",
]
