"""Euluna grammar, the earlier extended-Lua dialect."""

from .base import Grammar, keyword_pattern

LITERALS = ["true", "false", "nil"]

KEYWORDS = [
    # Lua
    "function", "and", "break", "do", "else", "elseif", "end", "for", "goto", "if",
    "in", "local", "not", "or", "repeat", "return", "then", "until", "while",
    # Extensions
    "switch", "case", "try", "except", "raise", "defer", "continue", "import",
    "typedef", "export", "struct", "enum", "template", "concept", "literal",
    "var", "val", "const",
]

BUILTINS = [
    # Metatags and globals
    "_G", "_ENV", "_VERSION", "__index", "__newindex", "__mode", "__call", "__metatable",
    "__tostring", "__len", "__gc", "__add", "__sub", "__mul", "__div", "__mod", "__pow",
    "__concat", "__unm", "__eq", "__lt", "__le", "assert",
    # Standard functions
    "collectgarbage", "dofile", "error", "getfenv", "getmetatable", "ipairs", "load",
    "loadfile", "loadstring", "module", "next", "pairs", "pcall", "print", "rawequal",
    "rawget", "rawset", "require", "select", "setfenv", "setmetatable", "tonumber",
    "tostring", "type", "unpack", "xpcall", "arg", "self",
    # Libraries and their members
    "coroutine", "resume", "status", "wrap", "create", "running",
    "debug", "getupvalue", "sethook", "gethook", "setlocal", "traceback", "getinfo",
    "setupvalue", "getlocal", "getregistry",
    "io", "lines", "write", "close", "flush", "open", "output", "read", "stderr", "stdin",
    "input", "stdout", "popen", "tmpfile",
    "math", "log", "max", "acos", "huge", "ldexp", "pi", "cos", "tanh", "pow", "deg", "tan",
    "cosh", "sinh", "random", "randomseed", "frexp", "ceil", "floor", "rad", "abs", "sqrt",
    "modf", "asin", "min", "mod", "fmod", "log10", "atan2", "exp", "sin", "atan",
    "os", "exit", "setlocale", "date", "getenv", "difftime", "remove", "time", "clock",
    "tmpname", "rename", "execute",
    "package", "preload", "loadlib", "loaded", "loaders", "cpath", "config", "path", "seeall",
    "string", "sub", "upper", "len", "gfind", "rep", "find", "match", "dump", "gmatch",
    "reverse", "byte", "format", "gsub", "lower",
    "table", "setn", "insert", "getn", "foreachi", "maxn", "foreach", "concat", "sort",
    # Primitive types
    "char", "uchar", "int", "uint", "int16", "uint16", "int32", "uint32", "int64",
    "uint64", "isize", "usize", "float", "double", "ptr", "typed", "untyped", "void",
]

# Library members repeat across libraries
BUILTINS = list(dict.fromkeys(BUILTINS))

LONG_BRACKET = r"\[(=*)\[[\s\S]*?\]\1\]"


def grammar() -> Grammar:
    return Grammar.from_mapping(
        {
            "comment": [
                {"pattern": r"--\[(=*)\[[\s\S]*?\]\1\]", "greedy": True},
                r"--.*",
            ],
            "string": [
                {"pattern": r'"(?:[^"\\\r\n]|\\[\s\S])*"', "greedy": True},
                {"pattern": r"'(?:[^'\\\r\n]|\\[\s\S])*'", "greedy": True},
                {"pattern": LONG_BRACKET, "greedy": True},
            ],
            "literal": keyword_pattern(LITERALS),
            "keyword": keyword_pattern(KEYWORDS),
            "builtin": keyword_pattern(BUILTINS),
            "number": r"\b0[xX][a-fA-F0-9]+|(?:\b\d+(?:\.\d*)?|\B\.\d+)(?:[eE][-+]?\d+)?",
        }
    )


def register(registry) -> None:
    registry.define("euluna", grammar())
