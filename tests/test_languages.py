"""Tests for the bundled language grammars."""

import pytest

from syntax_grammars.languages import GrammarRegistry, register_builtin_grammars, tokenize


@pytest.fixture(scope="module")
def registry():
    return register_builtin_grammars(GrammarRegistry())


def classified(tokens):
    return [(t.type, t.text) for t in tokens if t.is_classified]


def pairs(tokens):
    return [(t.type, t.text) for t in tokens]


class TestLua:
    """Tests for the Lua grammar."""

    def test_statement(self, registry):
        tokens = tokenize('local x = "a -- b" -- note', "lua", registry=registry)
        assert pairs(tokens) == [
            ("keyword", "local"),
            (None, " x "),
            ("operator", "="),
            (None, " "),
            ("string", '"a -- b"'),
            (None, " "),
            ("comment", "-- note"),
        ]

    def test_long_comment(self, registry):
        tokens = tokenize("--[[ multi\nline ]] x", "lua", registry=registry)
        assert tokens[0].type == "comment"
        assert tokens[0].text == "--[[ multi\nline ]]"

    def test_concat_and_varargs(self, registry):
        assert ("operator", "..") in classified(tokenize("a .. b", "lua", registry=registry))
        assert ("punctuation", "...") in classified(tokenize("f(...)", "lua", registry=registry))

    def test_function_call(self, registry):
        tokens = tokenize("print(self)", "lua", registry=registry)
        assert classified(tokens) == [
            ("function", "print"),
            ("punctuation", "("),
            ("special", "self"),
            ("punctuation", ")"),
        ]


class TestNelua:
    """Tests for the Nelua grammar."""

    def test_preprocessor_block(self, registry):
        tokens = tokenize("##[[ local a = 1 ]]", "nelua", registry=registry)
        assert len(tokens) == 1
        assert tokens[0].name == "preprocessor"
        assert pairs(tokens[0].content) == [
            ("macro", "##[["),
            (None, " "),
            ("keyword", "local"),
            (None, " a "),
            ("operator", "="),
            (None, " "),
            ("number", "1"),
            (None, " "),
            ("macro", "]]"),
        ]
        assert tokens[0].content[-1].name == "macro_end"

    def test_type_annotation(self, registry):
        tokens = tokenize("local n: integer", "nelua", registry=registry)
        assert pairs(tokens) == [
            ("keyword", "local"),
            (None, " n"),
            ("punctuation", ":"),
            ("type", " integer"),
        ]

    def test_number_suffix(self, registry):
        tokens = tokenize("local n = 10_u8", "nelua", registry=registry)
        assert ("number", "10_u8") in classified(tokens)

    def test_extra_keywords(self, registry):
        tokens = tokenize("defer x() end", "nelua", registry=registry)
        assert ("keyword", "defer") in classified(tokens)
        assert ("keyword", "end") in classified(tokens)


class TestC:
    """Tests for the C grammar."""

    def test_include(self, registry):
        text = "#include <stdio.h>\nint main(void) { return 0; }"
        tokens = tokenize(text, "c", registry=registry)

        macro = tokens[0]
        assert macro.name == "macro"
        assert macro.type == "property"
        assert pairs(macro.content) == [
            ("directive-hash", "#"),
            ("keyword", "include"),
            (None, " "),
            ("string", "<stdio.h>"),
        ]

        rest = classified(tokens[1:])
        for expected in [
            ("keyword", "int"),
            ("function", "main"),
            ("keyword", "void"),
            ("keyword", "return"),
            ("number", "0"),
        ]:
            assert expected in rest

    def test_macro_body_is_c(self, registry):
        tokens = tokenize("#define SQUARE(x) ((x) * (x))", "c", registry=registry)
        expression = [t for t in tokens[0].content if t.name == "expression"]
        assert len(expression) == 1
        assert expression[0].content[0].type == "function"
        assert expression[0].content[0].text == "SQUARE"

    def test_comment_inside_string(self, registry):
        tokens = tokenize('char *s = "a // b";', "c", registry=registry)
        types = classified(tokens)
        assert ("string", '"a // b"') in types
        assert all(kind != "comment" for kind, _ in types)

    def test_no_boolean(self, registry):
        tokens = tokenize("x = true;", "c", registry=registry)
        assert all(kind != "boolean" for kind, _ in classified(tokens))


class TestBash:
    """Tests for the Bash grammar."""

    def test_string_interpolation(self, registry):
        tokens = tokenize('echo "Hello $USER"', "bash", registry=registry)
        assert tokens[0].type == "class-name"
        assert tokens[0].text == "echo"

        string = tokens[2]
        assert string.type == "string"
        assert pairs(string.content) == [
            (None, '"Hello '),
            ("constant", "$USER"),
            (None, '"'),
        ]
        assert string.content[1].start == 12

    def test_command_substitution(self, registry):
        tokens = tokenize("x=$(ls -l)", "bash", registry=registry)
        assert classified(tokens) == [
            ("variable", "x"),
            ("operator", "="),
            ("variable", "$(ls -l)"),
        ]
        assert tokens[0].name == "assign-left"
        assert pairs(tokens[2].content) == [
            ("variable", "$("),
            ("function", "ls"),
            (None, " -l"),
            ("variable", ")"),
        ]

    def test_comment(self, registry):
        tokens = tokenize("ls # list", "bash", registry=registry)
        assert classified(tokens) == [("function", "ls"), ("comment", "# list")]

    def test_special_variable_is_not_comment(self, registry):
        tokens = tokenize("echo $#", "bash", registry=registry)
        assert classified(tokens) == [("class-name", "echo"), ("variable", "$#")]

    def test_shell_alias(self, registry):
        text = "ls # list"
        assert tokenize(text, "shell", registry=registry) == tokenize(
            text, "bash", registry=registry
        )


class TestEuluna:
    """Tests for the Euluna grammar."""

    def test_statement(self, registry):
        tokens = tokenize("local x = 10 --[[ block ]] .. 'str'", "euluna", registry=registry)
        assert classified(tokens) == [
            ("keyword", "local"),
            ("number", "10"),
            ("comment", "--[[ block ]]"),
            ("string", "'str'"),
        ]

    def test_library_members(self, registry):
        tokens = tokenize("string.format(math.sqrt(2))", "euluna", registry=registry)
        assert classified(tokens) == [
            ("builtin", "string"),
            ("builtin", "format"),
            ("builtin", "math"),
            ("builtin", "sqrt"),
            ("number", "2"),
        ]
