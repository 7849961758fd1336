"""Tests for the tokenizer engine."""

import logging
import random
import warnings

import pytest

from syntax_grammars.config import EngineConfig
from syntax_grammars.evaluation import compute_tokenization_metrics, token_text
from syntax_grammars.languages import (
    Grammar,
    GrammarRegistry,
    NonTerminatingRuleWarning,
    Token,
    Tokenizer,
    UnknownGrammarError,
    register_builtin_grammars,
    tokenize,
)


def classified(tokens):
    return [(t.type, t.text) for t in tokens if t.is_classified]


@pytest.fixture
def registry():
    return register_builtin_grammars(GrammarRegistry())


class TestCoverage:
    """Tokens always reproduce the input."""

    SAMPLES = [
        ("lua", 'local t = { "a", [[long\nstring]] } -- done\nprint(#t .. "x")\n'),
        ("nelua", "##[[ local n = 3 ]]\nlocal x: integer <const> = #[n]#\n"),
        ("c", '#include <stdio.h>\n/* c */ int main(void) { printf("%d\\n", 1); }\n'),
        ("bash", '#!/bin/bash\nfor f in $(ls *.txt); do echo "$f ${HOME}"; done\n'),
        ("euluna", "local x = 10 --[[ block ]] .. 'str'"),
    ]

    @pytest.mark.parametrize("language,text", SAMPLES)
    def test_text_is_reproduced(self, registry, language, text):
        tokens = tokenize(text, language, registry=registry)
        assert token_text(tokens) == text
        assert compute_tokenization_metrics(text, tokens).coverage_ok

    @pytest.mark.parametrize("language,text", SAMPLES)
    def test_offsets_are_contiguous(self, registry, language, text):
        tokens = tokenize(text, language, registry=registry)
        position = 0
        for token in tokens:
            assert token.start == position
            assert text[token.start:token.end] == token.text
            position = token.end
        assert position == len(text)

    @pytest.mark.parametrize("language,text", SAMPLES)
    def test_deterministic(self, registry, language, text):
        first = tokenize(text, language, registry=registry)
        second = tokenize(text, language, registry=registry)
        assert first == second

    def test_empty_text(self):
        assert tokenize("", {"word": r"\w+"}) == []

    def test_no_match_is_literal(self):
        tokens = tokenize("...", {"word": r"\w+"})
        assert tokens == [Token(None, "...", 0, 3)]


class TestPriority:
    """Earliest match wins; ties go to the earlier rule."""

    def test_tie_goes_to_first_rule(self):
        tokens = tokenize("ab", {"A": "ab", "B": "a"})
        assert tokens == [Token("A", "ab", 0, 2)]

    def test_order_reversed(self):
        tokens = tokenize("ab", {"B": "a", "A": "ab"})
        assert tokens == [Token("B", "a", 0, 1), Token(None, "b", 1, 2)]

    def test_earliest_start_wins(self):
        tokens = tokenize("ab", {"A": "b", "B": "a"})
        assert tokens == [Token("B", "a", 0, 1), Token("A", "b", 1, 2)]


class TestGreedy:
    """Greedy rules may swallow higher-priority candidates."""

    TEXT = "x = '--not a comment'"

    def test_greedy_string_after_comment_rule(self):
        grammar = {"comment": r"--.*", "string": {"pattern": r"'[^']*'", "greedy": True}}
        tokens = tokenize(self.TEXT, grammar)
        assert tokens == [
            Token(None, "x = ", 0, 4),
            Token("string", "'--not a comment'", 4, 21),
        ]

    def test_greedy_string_before_comment_rule(self):
        grammar = {"string": {"pattern": r"'[^']*'", "greedy": True}, "comment": r"--.*"}
        assert classified(tokenize(self.TEXT, grammar)) == [("string", "'--not a comment'")]

    def test_non_greedy_string_is_cut_by_comment(self):
        grammar = {"comment": r"--.*", "string": r"'[^']*'"}
        tokens = tokenize(self.TEXT, grammar)
        assert tokens == [
            Token(None, "x = '", 0, 5),
            Token("comment", "--not a comment'", 5, 21),
        ]

    def test_window_reaches_back_to_cursor(self):
        # Unbounded, "a\w*(?!\S)" fails at 0; inside the window it matches "ab"
        grammar = {"dash": "-", "word": r"a\w*(?!\S)|b.*"}
        tokens = tokenize("ab-", grammar)
        assert tokens == [Token("word", "ab", 0, 2), Token("dash", "-", 2, 3)]

    def test_window_end_anchors_dollar(self):
        grammar = {"semi": ";", "tail": r"x+$|x.*"}
        tokens = tokenize("xx;", grammar)
        assert tokens == [Token("tail", "xx", 0, 2), Token("semi", ";", 2, 3)]


class TestLookbehind:
    """Group 1 of a lookbehind rule is context, not token."""

    GRAMMAR = {"comment": {"pattern": r"(^|[^\\])\/\/.*", "lookbehind": True}}

    def test_prefix_is_excluded(self):
        tokens = tokenize("a // c", self.GRAMMAR)
        assert tokens == [Token(None, "a ", 0, 2), Token("comment", "// c", 2, 6)]

    def test_escaped_prefix_prevents_match(self):
        tokens = tokenize(r"a \// c", self.GRAMMAR)
        assert classified(tokens) == []

    def test_prefix_may_overlap_previous_token(self):
        grammar = {
            "keyword": r"\bclass\b",
            "class-name": {"pattern": r"(\bclass\s+)\w+", "lookbehind": True},
        }
        tokens = tokenize("class Foo", grammar)
        assert tokens == [
            Token("keyword", "class", 0, 5),
            Token(None, " ", 5, 6),
            Token("class-name", "Foo", 6, 9),
        ]

    def test_caret_anchors_after_previous_token(self):
        grammar = {
            "open": r"\(",
            "command": {"pattern": r"(^|\s)ls\b", "lookbehind": True},
        }
        tokens = tokenize("(ls", grammar)
        assert classified(tokens) == [("open", "("), ("command", "ls")]

    def test_caret_does_not_anchor_inside_literal_text(self):
        tokens = tokenize("xls", {"command": r"^ls"})
        assert classified(tokens) == []


class TestNesting:
    """Sub-grammars tokenize the matched text."""

    GRAMMAR = {
        "macro": {
            "pattern": r"#\w+.*",
            "inside": {"string": r'"[^"]*"'},
        },
    }

    def test_nested_tokens(self):
        tokens = tokenize('#define X "hi"\ny', self.GRAMMAR)
        assert tokens == [
            Token(
                "macro",
                [Token(None, "#define X ", 0, 10), Token("string", '"hi"', 10, 14)],
                0,
                14,
            ),
            Token(None, "\ny", 14, 16),
        ]

    def test_nested_offsets_are_absolute(self):
        tokens = tokenize('y\n#define X "hi"', self.GRAMMAR)
        macro = tokens[1]
        assert macro.start == 2
        assert macro.content[1] == Token("string", '"hi"', 12, 16)

    def test_alias(self):
        tokens = tokenize("if x", {"kw": {"pattern": r"\bif\b", "alias": "keyword"}})
        assert tokens[0].name == "kw"
        assert tokens[0].type == "keyword"

    def test_grammar_reference_by_name(self):
        registry = GrammarRegistry()
        registry.define("inner", {"number": r"\d+"})
        grammar = {"group": {"pattern": r"\[[^\]]*\]", "inside": "inner"}}
        tokens = tokenize("[1 2]", grammar, registry=registry)
        assert classified(tokens[0].content) == [("number", "1"), ("number", "2")]

    def test_reference_resolved_at_tokenization_time(self):
        registry = GrammarRegistry()
        registry.define("outer", {"group": {"pattern": r"\(.*\)", "inside": "inner"}})
        registry.define("inner", {"word": r"\w+"})
        tokens = tokenize("(a)", "outer", registry=registry)
        assert classified(tokens[0].content) == [("word", "a")]

    def test_unknown_reference(self):
        grammar = {"group": {"pattern": r"\(.*\)", "inside": "missing"}}
        with pytest.raises(UnknownGrammarError):
            tokenize("(a)", grammar, registry=GrammarRegistry())


class TestRest:
    """``rest`` merges another grammar in at tokenization time."""

    @pytest.fixture
    def base_registry(self):
        registry = GrammarRegistry()
        registry.define("base", {"number": r"\d+", "word": r"[a-z]+"})
        return registry

    def test_rest_tokens_follow(self, base_registry):
        grammar = {"tag": r"<\w+>", "rest": "base"}
        tokens = tokenize("<a> b 1", grammar, registry=base_registry)
        assert classified(tokens) == [("tag", "<a>"), ("word", "b"), ("number", "1")]

    def test_rest_overrides_same_name(self, base_registry):
        grammar = {"number": {"pattern": r"\d", "alias": "digit"}, "rest": "base"}
        tokens = tokenize("12", grammar, registry=base_registry)
        assert classified(tokens) == [("number", "12")]

    def test_expand(self, base_registry):
        tokenizer = Tokenizer(registry=base_registry)
        grammar = tokenizer.expand(Grammar.from_mapping({"tag": r"<\w+>", "rest": "base"}))
        assert grammar.names() == ["tag", "number", "word"]
        assert grammar.rest is None

    def test_rest_cycle(self):
        registry = GrammarRegistry()
        registry.define("a", {"x": "x", "rest": "b"})
        registry.define("b", {"y": "y", "rest": "a"})
        tokens = tokenize("xy", "a", registry=registry)
        assert classified(tokens) == [("x", "x"), ("y", "y")]

    def test_rest_refers_to_itself(self):
        registry = GrammarRegistry()
        registry.define("self", {"z": "z", "rest": "self"})
        grammar = Tokenizer(registry=registry).expand(registry.resolve("self"))
        assert grammar.names() == ["z"]
        assert grammar.rest is None


class TestTermination:
    """Empty matches are skipped with a warning."""

    def test_empty_match_warns(self):
        grammar = {"empty": r"x*", "word": r"\w+"}
        with pytest.warns(NonTerminatingRuleWarning):
            tokens = tokenize("abc", grammar)
        assert tokens == [Token("word", "abc", 0, 3)]

    def test_non_empty_matches_still_used(self):
        grammar = {"empty": r"x*", "word": r"\w+"}
        with pytest.warns(NonTerminatingRuleWarning):
            tokens = tokenize("xxa", grammar)
        assert classified(tokens) == [("empty", "xx"), ("word", "a")]

    def test_warning_disabled(self):
        config = EngineConfig(warn_empty_matches=False)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            tokens = tokenize("abc", {"empty": r"x*"}, config=config)
        assert tokens == [Token(None, "abc", 0, 3)]

    def test_warning_points_at_caller(self):
        with pytest.warns(NonTerminatingRuleWarning) as record:
            tokenize("abc", {"empty": r"x*"})
        assert record[0].filename == __file__

        with pytest.warns(NonTerminatingRuleWarning) as record:
            Tokenizer().tokenize("abc", {"empty": r"x*"})
        assert record[0].filename == __file__

    def test_warned_once_per_call(self):
        tokenizer = Tokenizer()
        for _ in range(2):
            with pytest.warns(NonTerminatingRuleWarning) as record:
                tokenizer.tokenize("abcabc", {"empty": r"x*"})
            assert len(record) == 1

    def test_depth_bound(self, caplog):
        registry = GrammarRegistry()
        # The matched text is matched again by the same rule at every level
        registry.define("loop", {"group": {"pattern": r"\(.*\)", "inside": "loop"}})
        config = EngineConfig(max_depth=5)

        with caplog.at_level(logging.WARNING):
            tokens = tokenize("(1)", "loop", registry=registry, config=config)

        metrics = compute_tokenization_metrics("(1)", tokens)
        assert metrics.coverage_ok
        assert metrics.max_depth == 5
        assert "depth" in caplog.text


class TestRandomText:
    """Coverage holds for arbitrary input in every bundled grammar."""

    PIECES = [
        "local ", "function", "end", "x", "foo", "1", "0x1F", "3.5", " ", "\n", "\t",
        '"', "'", "`", "\\", "--", "[[", "]]", "[=[", "]=]", "##", "#", "#!", "$", "$(",
        "${", "((", "))", "(", ")", "{", "}", "[", "]", "=", "..", "...", ":", ";", "@",
        "<", ">", "<<EOF\n", "EOF", "/*", "*/", "//", "include ", "define ", "|", "&",
    ]

    def random_text(self, rng):
        return "".join(rng.choice(self.PIECES) for _ in range(rng.randint(0, 40)))

    def assert_covers(self, tokens, text, start, end):
        position = start
        for token in tokens:
            assert token.start == position
            assert token.end >= token.start
            assert text[token.start:token.end] == token.text
            if token.is_nested:
                self.assert_covers(token.content, text, token.start, token.end)
            position = token.end
        assert position == end

    def test_random_text(self, registry):
        rng = random.Random(0)
        tokenizer = Tokenizer(registry=registry, config=EngineConfig(warn_empty_matches=False))
        for language in registry.list_languages():
            for _ in range(100):
                text = self.random_text(rng)
                tokens = tokenizer.tokenize(text, language)
                assert token_text(tokens) == text, (language, text)
                self.assert_covers(tokens, text, 0, len(text))
