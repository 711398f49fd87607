"""
Quark Lexer (Tokenizer)
=======================

This module converts Quark source text into a flat token sequence for
the parser.

Token Categories
----------------
- Keywords: fnc, let, ret, if, else, while, for, match, end
- Type keywords: int, float, string, bool
- Identifiers: ASCII letter or underscore, then letters, digits, underscores
- Numbers: decimal integer literals
- Strings: "double quoted", kept verbatim (no escape sequences)
- Operators: + - * / % = == != < > <= >=
- Punctuation: ( ) [ ] , : ->

Scanning Rules
--------------
The source is scanned once, left to right, with a single character of
lookahead. Whitespace (space, tab, newline, carriage return) separates
tokens and is otherwise discarded. There are no comments.

At each position the first matching rule wins:

1. ( ) [ ] , :          punctuation
2. ->                   ARROW (a lone '-' is the minus operator)
3. digit                maximal digit run, NUMBER
4. letter / underscore  maximal identifier run, keyword or IDENTIFIER
5. operator characters  + * / % = == != < > <= >=
6. "                    string literal up to the next "
7. anything else        LexicalError

The token list always ends with exactly one EOF token.

Example Usage
-------------
>>> from quark.lexer import tokenize
>>> for token in tokenize("let x = 5"):
...     print(token)
Token(LET, 'let', 0)
Token(IDENTIFIER, 'x', 4)
Token(OPERATOR, '=', 6)
Token(NUMBER, 5, 8)
Token(EOF, None, 9)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional
import string

from quark.errors import LexicalError


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token types for the Quark language.

    Keywords are distinguished from identifiers so the parser can
    dispatch on the token type alone. Operators share one OPERATOR type
    and are told apart by their symbol.
    """

    # === Keywords ===
    FNC = auto()            # fnc
    LET = auto()            # let
    RET = auto()            # ret
    IF = auto()             # if
    ELSE = auto()           # else
    WHILE = auto()          # while
    FOR = auto()            # for
    MATCH = auto()          # match (reserved)
    END = auto()            # end

    # === Identifiers and Literals ===
    IDENTIFIER = auto()     # Variable/function names
    NUMBER = auto()         # Integer literals
    STRING = auto()         # String literals "..."
    OPERATOR = auto()       # Arithmetic, comparison, assignment

    # === Punctuation ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACKET = auto()       # [
    RBRACKET = auto()       # ]
    COMMA = auto()          # ,
    COLON = auto()          # :
    ARROW = auto()          # ->

    # === Type Keywords ===
    TYPE_INT = auto()       # int
    TYPE_FLOAT = auto()     # float
    TYPE_STRING = auto()    # string
    TYPE_BOOL = auto()      # bool

    # === Structural ===
    EOF = auto()            # End of input


# Map keyword strings to their token types
KEYWORDS: dict[str, TokenType] = {
    # Control flow and declarations
    "fnc": TokenType.FNC,
    "let": TokenType.LET,
    "ret": TokenType.RET,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "for": TokenType.FOR,
    "match": TokenType.MATCH,
    "end": TokenType.END,

    # Type names
    "int": TokenType.TYPE_INT,
    "float": TokenType.TYPE_FLOAT,
    "string": TokenType.TYPE_STRING,
    "bool": TokenType.TYPE_BOOL,
}

PUNCTUATION: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
}

# Operators that may be followed by '=' to form a two-character operator
_EQ_SUFFIXABLE = "=!<>"


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from Quark source.

    Attributes:
        type: The TokenType classification
        value: Lexeme text; int for NUMBER; None for EOF
        offset: Character offset of the lexeme in the source. Not part
            of token equality, so tokens compare by kind and text.
    """
    type: TokenType
    value: str | int | None = None
    offset: int = field(default=0, compare=False)

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if isinstance(self.value, int):
            return f"Token({self.type.name}, {self.value}, {self.offset})"
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.offset})"
        return f"Token({self.type.name}, None, {self.offset})"

    def is_type_keyword(self) -> bool:
        """Return True if this token is a type keyword."""
        return self.type in (
            TokenType.TYPE_INT,
            TokenType.TYPE_FLOAT,
            TokenType.TYPE_STRING,
            TokenType.TYPE_BOOL,
        )

    def is_operator(self, symbol: Optional[str] = None) -> bool:
        """Return True if this is an operator (optionally a specific one)."""
        if self.type != TokenType.OPERATOR:
            return False
        return symbol is None or self.value == symbol


# =============================================================================
# Lexer Implementation
# =============================================================================

class QuarkLexer:
    """
    Tokenizes Quark source code.

    Usage:
        lexer = QuarkLexer(source_text)
        tokens = list(lexer.tokenize())

    Tokenizing is pure: the same source always produces the same tokens,
    and a lexer instance can be discarded after one pass.

    Attributes:
        source: The source code being tokenized
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"
    WHITESPACE = " \t\n\r"

    def __init__(self, source: str):
        self.source = source
        self._pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects, always ending with one EOF token

        Raises:
            LexicalError: On a character that starts no token, or on a
                string literal without a closing quote
        """
        while True:
            self._skip_whitespace()
            if self._at_end():
                break
            yield self._scan_token()

        yield Token(TokenType.EOF, None, self._pos)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Look at the character at current position + offset, '' past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        char = self._peek()
        if char:
            self._pos += 1
        return char

    def _byte_offset(self, pos: int) -> int:
        """Convert a character position to a UTF-8 byte offset."""
        return len(self.source[:pos].encode("utf-8"))

    def _skip_whitespace(self) -> None:
        while self._peek() and self._peek() in self.WHITESPACE:
            self._pos += 1

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        start = self._pos
        char = self._peek()

        if char in PUNCTUATION:
            self._advance()
            return Token(PUNCTUATION[char], char, start)

        if char == "-":
            self._advance()
            if self._peek() == ">":
                self._advance()
                return Token(TokenType.ARROW, "->", start)
            return Token(TokenType.OPERATOR, "-", start)

        # ASCII digits only
        if char in string.digits:
            return self._scan_number(start)

        if char in self.IDENT_START:
            return self._scan_identifier(start)

        if char in "+*/%":
            self._advance()
            return Token(TokenType.OPERATOR, char, start)

        if char in _EQ_SUFFIXABLE:
            return self._scan_comparison(start)

        if char == '"':
            return self._scan_string(start)

        raise LexicalError(
            f"Unexpected character '{char}' at position {self._byte_offset(start)}"
        )

    def _scan_number(self, start: int) -> Token:
        """Scan a maximal run of decimal digits."""
        chars = []
        while self._peek() and self._peek() in string.digits:
            chars.append(self._advance())
        try:
            value = int("".join(chars))
        except ValueError:
            raise LexicalError(
                f"Number literal too long at position {self._byte_offset(start)}"
            ) from None
        return Token(TokenType.NUMBER, value, start)

    def _scan_identifier(self, start: int) -> Token:
        """
        Scan an identifier or keyword.

        Identifiers start with a letter or underscore and continue with
        letters, digits, and underscores. Keywords are recognized by
        checking the completed word against the keyword table.
        """
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)
        return Token(KEYWORDS.get(name, TokenType.IDENTIFIER), name, start)

    def _scan_comparison(self, start: int) -> Token:
        """Scan '=', '==', '!=', '<', '<=', '>', '>='."""
        char = self._advance()
        if self._peek() == "=":
            self._advance()
            return Token(TokenType.OPERATOR, char + "=", start)
        if char == "!":
            raise LexicalError(
                f"Unexpected character '!' at position {self._byte_offset(start)}",
                hint="'!' is only valid as part of '!='",
            )
        return Token(TokenType.OPERATOR, char, start)

    def _scan_string(self, start: int) -> Token:
        """
        Scan a double-quoted string literal.

        Everything up to the next double quote is kept verbatim,
        including newlines and backslashes.
        """
        self._advance()  # consume opening "
        end = self.source.find('"', self._pos)
        if end < 0:
            raise LexicalError(
                "unterminated string literal starting at offset "
                f"{self._byte_offset(start)}",
                hint='add a closing \'"\'',
            )
        value = self.source[self._pos:end]
        self._pos = end + 1
        return Token(TokenType.STRING, value, start)


# =============================================================================
# Convenience Function
# =============================================================================

def tokenize(source: str) -> list[Token]:
    """
    Tokenize Quark source code.

    Args:
        source: Quark source text

    Returns:
        List of tokens ending with EOF

    Raises:
        LexicalError: On the first malformed character or string literal
    """
    return list(QuarkLexer(source).tokenize())
