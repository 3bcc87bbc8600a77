"""
Token records consumed by the SOIT parser.

Tokenizing raw source text is the job of an external lexer. This module only
defines the shape of what that lexer hands over, plus the reserved words the
parser dispatches on.

Classes:
    Token: A single lexical unit with kind, value, and source location.

Functions:
    load_tokens(text): Decode a JSON array of token objects into `Token`s.

Exports:
    - Token
    - load_tokens
    - NUMBER, STRING, IDENTIFIER, KEYWORD, PUNCTUATION
    - STATEMENT_KEYWORDS, LITERAL_KEYWORDS, VISIBILITY_KEYWORDS, RESERVED_WORDS

Example:
    >>> load_tokens('[{"type": "KEYWORD", "value": "soit", "line": 1, "column": 1}]')
    [Token(KEYWORD, 'soit')]
"""

import json
from typing import Any

NUMBER = "NUMBER"
STRING = "STRING"
IDENTIFIER = "IDENTIFIER"
KEYWORD = "KEYWORD"
PUNCTUATION = "PUNCTUATION"

TOKEN_TYPES: frozenset[str] = frozenset(
    {NUMBER, STRING, IDENTIFIER, KEYWORD, PUNCTUATION}
)

# Literal token kinds; their value is data, never syntax.
LITERAL_TYPES: frozenset[str] = frozenset({NUMBER, STRING})

STATEMENT_KEYWORDS: frozenset[str] = frozenset(
    {
        "soit",
        "montre",
        "si",
        "tantque",
        "fonction",
        "renvoie",
        "classe",
        "abstrait",
        "interface",
        "essaye",
        "lance",
        "inclure",
        "pour",
    }
)

LITERAL_KEYWORDS: dict[str, bool | None] = {
    "vrai": True,
    "faux": False,
    "nul": None,
}

VISIBILITY_KEYWORDS: frozenset[str] = frozenset({"public", "prive"})

# Every word a lexer must emit as KEYWORD rather than IDENTIFIER.
RESERVED_WORDS: frozenset[str] = (
    STATEMENT_KEYWORDS
    | frozenset(LITERAL_KEYWORDS)
    | VISIBILITY_KEYWORDS
    | frozenset(
        {
            "sinon",
            "herite",
            "de",
            "attrape",
            "enfin",
            "chaque",
            "dans",
            "ou",
            "et",
            "non",
            "typeof",
            "nouveau",
        }
    )
)


class Token:
    """Represents a single lexical token handed over by the lexer.

    Attributes:
        type (str): Token kind (NUMBER, STRING, IDENTIFIER, KEYWORD, PUNCTUATION).
        value (str | int | float): Raw value; numbers arrive already converted.
        line (int): The 1-based line number where the token appears.
        column (int): The 1-based column number where the token starts.
    """

    def __init__(
        self, type_: str, value: Any, line: int = 0, column: int = 0
    ) -> None:
        self.type = type_
        self.value = value
        self.line = line
        self.column = column

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Token":
        """Builds a Token from a `{type, value, line, column}` mapping.

        Raises:
            ValueError: If `type` or `value` is missing, or a field has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Token must be an object, got {type(data).__name__}")
        if "type" not in data or "value" not in data:
            raise ValueError(f"Token is missing 'type' or 'value': {data!r}")
        value = data["value"]
        # bool is an int subclass; JSON true/false is neither text nor a number.
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValueError(f"Token value must be a string or a number: {value!r}")
        line, column = data.get("line", 0), data.get("column", 0)
        if any(isinstance(n, bool) or not isinstance(n, int) for n in (line, column)):
            raise ValueError(f"Token position must be integers: {data!r}")
        return cls(str(data["type"]), value, line, column)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "value": self.value,
            "line": self.line,
            "column": self.column,
        }

    def matches(self, *values: str) -> bool:
        """True if this is a syntax token (not a literal) whose text is one of `values`."""
        return self.type not in LITERAL_TYPES and self.value in values

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.column == other.column
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.column))


def load_tokens(text: str) -> list[Token]:
    """Decode a JSON array of token objects.

    Raises:
        ValueError: If the payload is not valid JSON, not an array, or holds a
            malformed token object.
    """
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("Token stream must be a JSON array")
    return [Token.from_dict(item) for item in data]


__all__ = [
    "IDENTIFIER",
    "KEYWORD",
    "LITERAL_KEYWORDS",
    "LITERAL_TYPES",
    "NUMBER",
    "PUNCTUATION",
    "RESERVED_WORDS",
    "STATEMENT_KEYWORDS",
    "STRING",
    "TOKEN_TYPES",
    "Token",
    "VISIBILITY_KEYWORDS",
    "load_tokens",
]
