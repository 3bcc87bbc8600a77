import os
import re

from soit.soit_ast import Program
from soit.soit_parser import Parser
from soit.soit_tokens import (
    IDENTIFIER,
    KEYWORD,
    NUMBER,
    PUNCTUATION,
    RESERVED_WORDS,
    STRING,
    Token,
)

# Subprocess-based CLI tests report coverage too
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()


# Test-only stand-in for the external lexer: just enough to write grammar
# tests as source snippets.
TOKEN_RE = re.compile(
    r"""
    (?P<newline>\n)
    | (?P<space>[ \t\r]+)
    | (?P<number>\d+(?:\.\d+)?)
    | (?P<string>"[^"\n]*")
    | (?P<word>[^\W\d]\w*)
    | (?P<punct>==|!=|<=|>=|[-+*/.=<>(){}\[\],:])
    """,
    re.VERBOSE,
)


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    line, line_start, pos = 1, 0, 0
    while pos < len(source):
        m = TOKEN_RE.match(source, pos)
        if m is None:
            raise ValueError(f"cannot tokenize {source[pos:pos + 10]!r}")
        kind, text = m.lastgroup, m.group()
        column = pos - line_start + 1
        pos = m.end()
        if kind == "newline":
            line += 1
            line_start = pos
        elif kind == "number":
            value = float(text) if "." in text else int(text)
            tokens.append(Token(NUMBER, value, line, column))
        elif kind == "string":
            tokens.append(Token(STRING, text[1:-1], line, column))
        elif kind == "word":
            type_ = KEYWORD if text in RESERVED_WORDS else IDENTIFIER
            tokens.append(Token(type_, text, line, column))
        elif kind == "punct":
            tokens.append(Token(PUNCTUATION, text, line, column))
    return tokens


def parse(source: str) -> Program:
    return Parser(tokenize(source)).parse()


def first_statement(source: str):  # type: ignore[no-untyped-def]
    program = parse(source)
    assert len(program.body) == 1
    return program.body[0]


def first_expression(source: str):  # type: ignore[no-untyped-def]
    return first_statement(source).expression
