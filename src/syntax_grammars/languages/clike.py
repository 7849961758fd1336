"""C-family grammars: the generic ``clike`` base and ``c`` derived from it."""

from .base import GrammarRef, keyword_pattern

CLIKE_KEYWORDS = [
    "if", "else", "while", "do", "for", "return", "in", "instanceof", "function", "new",
    "try", "throw", "catch", "finally", "null", "break", "continue",
]

C_KEYWORDS = [
    "__attribute__", "_Alignas", "_Alignof", "_Atomic", "_Bool", "_Complex", "_Generic",
    "_Imaginary", "_Noreturn", "_Static_assert", "_Thread_local", "asm", "typeof", "inline",
    "auto", "break", "case", "char", "const", "continue", "default", "do", "double", "else",
    "enum", "extern", "float", "for", "goto", "if", "int", "long", "register", "return",
    "short", "signed", "sizeof", "static", "struct", "switch", "typedef", "union",
    "unsigned", "void", "volatile", "while",
]

C_CONSTANTS = [
    "__FILE__", "__LINE__", "__DATE__", "__TIME__", "__TIMESTAMP__", "__func__", "EOF",
    "NULL", "SEEK_CUR", "SEEK_END", "SEEK_SET", "stdin", "stdout", "stderr",
]

CLIKE = {
    "comment": [
        {"pattern": r"(^|[^\\])\/\*[\s\S]*?(?:\*\/|\Z)", "lookbehind": True},
        {"pattern": r"(^|[^\\:])\/\/.*", "lookbehind": True, "greedy": True},
    ],
    "string": {
        "pattern": r"""(["'])(?:\\(?:\r\n|[\s\S])|(?!\1)[^\\\r\n])*\1""",
        "greedy": True,
    },
    "class-name": {
        "pattern": r"(\b(?:class|interface|extends|implements|trait|instanceof|new)\s+"
        r"|\bcatch\s+\()[\w.\\]+",
        "flags": "i",
        "lookbehind": True,
        "inside": {"punctuation": r"[.\\]"},
    },
    "keyword": keyword_pattern(CLIKE_KEYWORDS),
    "boolean": r"\b(?:true|false)\b",
    "function": r"\w+(?=\()",
    "number": {"pattern": r"\b0x[\da-f]+\b|(?:\b\d+\.?\d*|\B\.\d+)(?:e[+-]?\d+)?", "flags": "i"},
    "operator": r"[<>]=?|[!=]=?=?|--?|\+\+?|&&?|\|\|?|[?*/~^%]",
    "punctuation": r"[{}[\];(),.:]",
}

C_OVERRIDES = {
    "comment": {
        "pattern": r"\/\/(?:[^\r\n\\]|\\(?:\r\n?|\n|(?![\r\n])))*|\/\*[\s\S]*?(?:\*\/|\Z)",
        "greedy": True,
    },
    "class-name": {
        "pattern": r"(\b(?:enum|struct)\s+(?:__attribute__\s*\(\([\s\S]*?\)\)\s*)?)\w+",
        "lookbehind": True,
    },
    "keyword": keyword_pattern(C_KEYWORDS),
    "function": {"pattern": r"[a-z_]\w*(?=\s*\()", "flags": "i"},
    "operator": r">>=?|<<=?|->|([-+&|:])\1|[?:~]|[-+*/%&|^!=<>]=?",
    "number": {
        "pattern": r"(?:\b0x(?:[\da-f]+\.?[\da-f]*|\.[\da-f]+)(?:p[+-]?\d+)?"
        r"|(?:\b\d+\.?\d*|\B\.\d+)(?:e[+-]?\d+)?)[ful]*",
        "flags": "i",
    },
}


def macro_rules(c_grammar) -> dict:
    """Preprocessor rules for C, borrowing its string and comment rules.

    Macro bodies are tokenized as C again through a lazy reference.
    """
    return {
        "macro": {
            # Multiline macro definitions; spaces after '#' are allowed
            "pattern": r"(^\s*)#\s*[a-z]+"
            r"(?:[^\r\n\\/]|\/(?!\*)|\/\*(?:[^*]|\*(?!\/))*\*\/|\\(?:\r\n|[\s\S]))*",
            "flags": "im",
            "lookbehind": True,
            "greedy": True,
            "alias": "property",
            "inside": {
                "string": [
                    # Path of an include statement
                    {"pattern": r"^(#\s*include\s*)<[^>]+>", "lookbehind": True},
                    *c_grammar["string"],
                ],
                "comment": list(c_grammar["comment"]),
                "directive": {
                    "pattern": r"^(#\s*)[a-z]+",
                    "lookbehind": True,
                    "alias": "keyword",
                },
                "directive-hash": r"^#",
                "punctuation": r"##|\\(?=[\r\n])",
                "expression": {"pattern": r"\S[\s\S]*", "inside": GrammarRef("c")},
            },
        },
        "constant": keyword_pattern(C_CONSTANTS),
    }


def register(registry) -> None:
    registry.define("clike", CLIKE)
    c_grammar = registry.extend("c", "clike", C_OVERRIDES)
    registry.insert_before("c", "string", macro_rules(c_grammar))
    registry.remove("c", "boolean")
