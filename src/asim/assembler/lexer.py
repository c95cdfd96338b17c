"""
asim Assembly Language Lexer
============================

This module implements a lexer (tokenizer) for asim assembly language.
It converts source text into a flat list of tokens plus a table of line
boundaries that later stages use to map offsets back to lines.

Token Types
-----------
- SYMBOL: Labels and mnemonics (letters and underscores)
- NUMBER: Decimal digit runs
- Delimiters: # : ( )
- NEWLINE: End of line, or a // comment running to end of line
- INVALID: Any character the language does not use
- END: End of input (exactly one, always last)

The lexer never fails. Unrecognized characters become INVALID tokens and
are rejected by the parser, which can then report them alongside every
other error in the program.

Tokens do not copy text out of the source; they hold offsets into it, and
Token.text() slices the source on demand.

Example
-------
>>> tokens, lines = tokenize("loop: ADD #1")
>>> [t.type.name for t in tokens]
['SYMBOL', 'COLON', 'SYMBOL', 'HASH', 'NUMBER', 'END']
"""

import logging
from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum, auto

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for asim assembly language."""

    # Structural tokens
    NEWLINE = auto()  # End of line or comment (statement boundary)
    END = auto()      # End of input

    # Values
    SYMBOL = auto()   # Labels, mnemonics
    NUMBER = auto()   # Decimal literals

    # Delimiters
    HASH = auto()     # # (fixed number prefix)
    COLON = auto()    # : (label terminator)
    LPAREN = auto()   # (
    RPAREN = auto()   # )

    INVALID = auto()  # Unrecognized character


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token, as a span of the source text.

    Attributes:
        type: The TokenType classification
        start: Offset of the first character
        end: Offset one past the last character
    """
    type: TokenType
    start: int
    end: int

    def text(self, source: str) -> str:
        """Return the source text covered by this token."""
        return source[self.start:self.end]

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.start}:{self.end})"


# =============================================================================
# Line Table
# =============================================================================

class LineTable:
    """
    Boundaries of the physical lines of a source text.

    Each entry is (start, end): the offset of the first character of the
    line and the offset of its terminating newline (or the text length for
    the final line). The newline itself therefore belongs to the line it
    ends.
    """

    def __init__(self) -> None:
        self._lines: list[tuple[int, int]] = []
        self._starts: list[int] = []

    def append(self, start: int, end: int) -> None:
        self._lines.append((start, end))
        self._starts.append(start)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(self._lines)

    def bounds(self, index: int) -> tuple[int, int]:
        """Return (start, end) of line `index`."""
        return self._lines[index]

    def index_of(self, offset: int) -> int:
        """
        Map a source offset to its 0-based line index.

        Offsets past the last line map to the last line.
        """
        return max(bisect_right(self._starts, offset) - 1, 0)

    def line_text(self, source: str, index: int) -> str:
        """Return the text of line `index`, without its newline."""
        start, end = self._lines[index]
        return source[start:end]


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes asim assembly source code.

    Usage:
        lexer = Lexer(source_text)
        tokens = lexer.tokenize()
        lines = lexer.line_table

    Attributes:
        source: The source code being tokenized
        line_table: Line boundaries, filled in by tokenize()
    """

    SINGLE_CHAR_TOKENS = {
        "#": TokenType.HASH,
        ":": TokenType.COLON,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
    }

    def __init__(self, source: str):
        self.source = source
        self.line_table = LineTable()

        self._pos = 0
        self._line_start = 0

    def tokenize(self) -> list[Token]:
        """
        Scan the whole source.

        Returns:
            List of tokens, always terminated by a single END token
        """
        tokens: list[Token] = []

        while not self._at_end():
            token = self._scan_token()
            if token is not None:
                tokens.append(token)

        # Close the final line, even when the source is empty
        self.line_table.append(self._line_start, len(self.source))
        tokens.append(Token(TokenType.END, len(self.source), len(self.source)))

        logger.debug(
            f"Tokenized {len(self.source)} characters into {len(tokens)} tokens "
            f"on {len(self.line_table)} lines"
        )
        return tokens

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        char = self.source[self._pos]
        self._pos += 1
        return char

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token | None:
        """
        Scan the next token from source.

        Returns:
            The next Token, or None if only whitespace was consumed
        """
        start = self._pos
        char = self._advance()

        if char == "\n":
            self.line_table.append(self._line_start, start)
            self._line_start = self._pos
            return Token(TokenType.NEWLINE, start, self._pos)

        if char in self.SINGLE_CHAR_TOKENS:
            return Token(self.SINGLE_CHAR_TOKENS[char], start, self._pos)

        if char == "/":
            if self._peek() == "/":
                return self._scan_comment(start)
            return Token(TokenType.INVALID, start, self._pos)

        if char.isdigit() and char.isascii():
            while self._peek().isdigit() and self._peek().isascii():
                self._advance()
            return Token(TokenType.NUMBER, start, self._pos)

        if self._is_symbol_char(char):
            while self._is_symbol_char(self._peek()):
                self._advance()
            return Token(TokenType.SYMBOL, start, self._pos)

        if char.isspace():
            return None

        return Token(TokenType.INVALID, start, self._pos)

    def _scan_comment(self, start: int) -> Token:
        """
        Scan a // comment up to (not including) the next newline.

        The comment ends the statement like a newline does. The line itself
        is closed by the newline character that follows it.
        """
        while not self._at_end() and self._peek() != "\n":
            self._advance()
        return Token(TokenType.NEWLINE, start, self._pos)

    @staticmethod
    def _is_symbol_char(char: str) -> bool:
        return char.isalpha() or char == "_"


def tokenize(source: str) -> tuple[list[Token], LineTable]:
    """
    Tokenize source text.

    Args:
        source: asim assembly source

    Returns:
        (tokens, line_table)
    """
    lexer = Lexer(source)
    tokens = lexer.tokenize()
    return tokens, lexer.line_table
