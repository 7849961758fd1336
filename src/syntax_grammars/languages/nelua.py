"""Nelua grammar: Lua extended with types, annotations and a Lua preprocessor.

Preprocessor blocks embed the full Lua grammar through ``rest``; the
reference is resolved lazily by name.
"""

from .base import Grammar, GrammarRef, keyword_pattern
from .lua import COMMENT, CONCAT, FUNCTION, KEYWORDS as LUA_KEYWORDS, PUNCTUATION, STRING

KEYWORDS = LUA_KEYWORDS + ["switch", "case", "continue", "fallthrough", "global", "defer"]

BUILTINS = ["false", "true", "nil", "nilptr"]

# Number literals may carry a type suffix such as 10_u8
NUMBER = (
    r"\b0x[a-f\d]+\.?[a-f\d]*(?:p[+-]?\d+)?(_\w+)?\b"
    r"|\b\d+(?:\.\B|\.?\d*(?:e[+-]?\d+)?(_\w+)?\b)"
    r"|\B\.\d+(?:e[+-]?\d+)?(_\w+)?\b"
)


def preprocessor_rules() -> list[dict]:
    lua = GrammarRef("lua")
    return [
        {
            # ##[[ ... ]] and ##[==[ ... ]==]
            "pattern": r"##\[(=*)\[[\s\S]*?\]\1\]",
            "flags": "m",
            "inside": {
                "macro": r"##\[=*\[",
                "rest": lua,
                "macro_end": {"pattern": r"\]=*\]", "alias": "macro"},
            },
        },
        {
            "pattern": r"##.*",
            "inside": {"macro": r"##", "rest": lua},
        },
        {
            "pattern": r"#\|[\s\S]*?\|#",
            "flags": "m",
            "inside": {"macro": r"#\||\|#", "rest": lua},
        },
        {
            "pattern": r"#\[[\s\S]*?\]#",
            "flags": "m",
            "inside": {"macro": r"#\[|\]#", "rest": lua},
        },
    ]


def grammar() -> Grammar:
    return Grammar.from_mapping(
        {
            "preprocessor": preprocessor_rules(),
            "comment": {"pattern": COMMENT, "flags": "m"},
            "special": r"\bself\b",
            "builtin": keyword_pattern(BUILTINS),
            "keyword": keyword_pattern(KEYWORDS),
            "type": [
                {"pattern": r"(@)\w+", "lookbehind": True},
                {"pattern": r"(\:)\s+\w+", "lookbehind": True},
            ],
            "function": FUNCTION,
            "annotation": {
                "pattern": r"\<[\w]+\s*(,\s*[\w]+\s*)*\>",
                "inside": GrammarRef("lua"),
            },
            "string": {"pattern": STRING, "greedy": True},
            "number": {"pattern": NUMBER, "flags": "i"},
            "operator": [r"[-@$+*%^&|#?]|\/\/?|<[<=]?|>[>=]?|[=~]=?", CONCAT],
            "punctuation": PUNCTUATION,
        }
    )


def register(registry) -> None:
    registry.define("nelua", grammar())
