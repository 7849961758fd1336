"""Lua grammar."""

from .base import Grammar, keyword_pattern

KEYWORDS = [
    "and", "break", "do", "else", "elseif", "end", "for", "function", "goto", "if",
    "in", "local", "not", "or", "repeat", "return", "then", "until", "while",
]

BUILTINS = ["false", "true", "nil"]

# Long brackets [[ ]], [==[ ]==] and quoted strings; \z skips the following space
STRING = r"""(["'])(?:(?!\1)[^\\\r\n]|\\z(?:\r\n|\s)|\\(?:\r\n|[\s\S]))*\1|\[(=*)\[[\s\S]*?\]\2\]"""

COMMENT = r"^#!.+|--(?:\[(=*)\[[\s\S]*?\]\1\]|.*)"

FUNCTION = r"""(?!\d)\w+(?=\s*(?:[({'"]))"""

# Match ".." but don't break "..."
CONCAT = {"pattern": r"(^|[^.])\.\.(?!\.)", "lookbehind": True}

PUNCTUATION = r"[\[\](){},;]|\.+|:+"


def grammar() -> Grammar:
    return Grammar.from_mapping(
        {
            "comment": {"pattern": COMMENT, "flags": "m"},
            "special": r"\bself\b",
            "builtin": keyword_pattern(BUILTINS),
            "keyword": keyword_pattern(KEYWORDS),
            "function": FUNCTION,
            "string": {"pattern": STRING, "greedy": True},
            "number": {
                "pattern": r"\b0x[a-f\d]+\.?[a-f\d]*(?:p[+-]?\d+)?\b"
                r"|\b\d+(?:\.\B|\.?\d*(?:e[+-]?\d+)?\b)"
                r"|\B\.\d+(?:e[+-]?\d+)?\b",
                "flags": "i",
            },
            "operator": [r"[-+*%^&|#]|\/\/?|<[<=]?|>[>=]?|[=~]=?", CONCAT],
            "punctuation": PUNCTUATION,
        }
    )


def register(registry) -> None:
    registry.define("lua", grammar())
