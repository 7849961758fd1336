#!/usr/bin/env python3
"""Tokenize a source file with a registered grammar and print the token tree."""

import argparse
import logging
import sys

from syntax_grammars.config import GrammarFile
from syntax_grammars.evaluation import print_token_analysis
from syntax_grammars.languages import GrammarRegistry, Tokenizer, register_builtin_grammars


def main():
    parser = argparse.ArgumentParser(description="Tokenize source code with a grammar")
    parser.add_argument(
        "--language",
        type=str,
        required=True,
        help="Registered grammar name (e.g. lua, nelua, c, bash)",
    )
    parser.add_argument(
        "--file",
        type=str,
        default=None,
        help="Source file to tokenize (default: stdin)",
    )
    parser.add_argument(
        "--grammars",
        type=str,
        default=None,
        help="YAML file with extra grammar definitions",
    )
    parser.add_argument(
        "--max_show",
        type=int,
        default=200,
        help="Maximum number of tokens to print",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    registry = register_builtin_grammars(GrammarRegistry())
    tokenizer = Tokenizer(registry=registry)

    # Load extra grammars
    if args.grammars:
        grammar_file = GrammarFile.from_yaml(args.grammars)
        names = grammar_file.apply(registry)
        tokenizer.config = grammar_file.engine
        print(f"Loaded grammars: {', '.join(names)}")

    if args.file:
        with open(args.file, encoding="utf-8") as f:
            text = f.read()
    else:
        text = sys.stdin.read()

    tokens = tokenizer.tokenize(text, args.language)
    print(f"Language: {args.language}")
    print_token_analysis(text, tokens, max_show=args.max_show)


if __name__ == "__main__":
    main()
