"""
asim Assembly Language Parser
=============================

This module implements the parser for asim assembly language. It turns the
token stream produced by the lexer into a list of unresolved commands: one
per source statement, still referring to the source through token offsets.

Statement Syntax
----------------
Every statement occupies one logical line:

    [label:] MNEMONIC [operand]

A label may also sit on a line of its own, in which case it names the next
statement:

    loop:
        ADD (12)

Operand Detection
-----------------
The operand kind is decided purely by its syntax:

| Syntax   | Kind    | Example   |
|----------|---------|-----------|
| #N       | FIXED   | LDA #3    |
| N        | FIXED   | JMP 4     |
| (N)      | ADDRESS | STA (15)  |
| name     | LABEL   | JMP loop  |

Whether the kind is legal for the mnemonic is checked against the shared
instruction table in asim.cpu.

Error Recovery
--------------
The parser never stops at the first problem. When a statement fails, the
error is recorded and the parser skips to the end of the line, then carries
on with the next one. Extra tokens after an otherwise valid statement are
each reported as unexpected, but the statement itself is kept.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from asim.assembler.lexer import Token, TokenType
from asim.cpu import OperandKind, get_instruction_attribute
from asim.errors import ErrorCollector, ErrorKind

logger = logging.getLogger(__name__)


# =============================================================================
# Parse Results
# =============================================================================

@dataclass(frozen=True)
class Operand:
    """
    A syntactically valid instruction operand.

    Attributes:
        kind: How the operand was written
        value: The NUMBER or SYMBOL token carrying the value
        start: Offset of the first character of the whole operand
        end: Offset one past the last character of the whole operand
    """
    kind: OperandKind
    value: Token
    start: int
    end: int


@dataclass(frozen=True)
class UnresolvedCommand:
    """
    A parsed statement whose operand has not been resolved yet.

    Attributes:
        label: The label token defined on this statement, if any
        instruction: The mnemonic token
        operand: The operand, or None for instructions that take none
    """
    label: Optional[Token]
    instruction: Token
    operand: Optional[Operand] = None


_NOT_ALLOWED = {
    OperandKind.FIXED: ErrorKind.NOT_ALLOWED_FIX_NUMBER,
    OperandKind.ADDRESS: ErrorKind.NOT_ALLOWED_ADDRESS,
    OperandKind.LABEL: ErrorKind.NOT_ALLOWED_LABEL,
}


class _StatementError(Exception):
    """Raised inside the parser to abandon the current statement."""

    def __init__(self, kind: ErrorKind, start: int, end: int):
        super().__init__(str(kind))
        self.kind = kind
        self.start = start
        self.end = end


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Parses asim tokens into unresolved commands.

    Usage:
        tokens, line_table = tokenize(source)
        parser = Parser(tokens, source)
        commands = parser.parse()
        if parser.errors.has_errors():
            ...
    """

    def __init__(
        self,
        tokens: list[Token],
        source: str,
        errors: Optional[ErrorCollector] = None
    ):
        """
        Initialize the parser.

        Args:
            tokens: Token list from the lexer, terminated by END
            source: The source text the tokens point into
            errors: Collector to record errors in (a new one if omitted)
        """
        self._tokens = tokens
        self._source = source
        self._pos = 0
        self.errors = errors if errors is not None else ErrorCollector()

    def parse(self) -> list[UnresolvedCommand]:
        """
        Parse all tokens.

        Returns:
            Every statement that parsed successfully, in source order
        """
        commands: list[UnresolvedCommand] = []

        while True:
            self._skip_blank_lines()
            if self._check(TokenType.END):
                break

            try:
                command = self._parse_statement()
            except _StatementError as e:
                self.errors.add(e.kind, e.start, e.end)
                self._skip_to_eol()
                continue

            commands.append(command)
            self._finish_line()

        logger.debug(
            f"Parsed {len(commands)} commands with "
            f"{self.errors.error_count()} errors so far"
        )
        return commands

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token (END once the stream is exhausted)."""
        if self._pos >= len(self._tokens):
            end = len(self._source)
            return Token(TokenType.END, end, end)
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if self._pos < len(self._tokens):
            self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        """Check if current token is one of the given types."""
        return self._current().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        """Match and consume if current token is one of the types."""
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, kind: ErrorKind) -> Token:
        """Expect a specific token type, abandon the statement if not found."""
        if not self._check(token_type):
            token = self._current()
            raise _StatementError(kind, token.start, token.end)
        return self._advance()

    def _at_eol(self) -> bool:
        return self._check(TokenType.NEWLINE, TokenType.END)

    def _skip_blank_lines(self) -> None:
        while self._match(TokenType.NEWLINE):
            pass

    def _skip_to_eol(self) -> None:
        """Skip remaining tokens to end of line."""
        while not self._at_eol():
            self._advance()

    def _finish_line(self) -> None:
        """Report every token left on the line as unexpected."""
        while not self._at_eol():
            token = self._advance()
            self.errors.add(ErrorKind.INVALID_TOKEN, token.start, token.end)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> UnresolvedCommand:
        first = self._expect(TokenType.SYMBOL, ErrorKind.MISSING_INSTRUCTION)

        if not self._match(TokenType.COLON):
            return self._parse_instruction(None, first)

        # Label: the instruction may follow on a later line
        self._skip_blank_lines()
        instruction = self._expect(TokenType.SYMBOL, ErrorKind.MISSING_INSTRUCTION)
        return self._parse_instruction(first, instruction)

    def _parse_instruction(
        self,
        label: Optional[Token],
        instruction: Token
    ) -> UnresolvedCommand:
        mnemonic = instruction.text(self._source)
        attribute = get_instruction_attribute(mnemonic)
        if attribute is None:
            raise _StatementError(
                ErrorKind.INVALID_INSTRUCTION, instruction.start, instruction.end
            )

        if attribute.allow_no_operand():
            return UnresolvedCommand(label, instruction)

        operand = self._parse_operand(instruction)
        if not attribute.allows(operand.kind):
            raise _StatementError(_NOT_ALLOWED[operand.kind], operand.start, operand.end)

        return UnresolvedCommand(label, instruction, operand)

    def _parse_operand(self, instruction: Token) -> Operand:
        """
        Parse one operand.

        Handles:
        - (N)   register address
        - #N    fixed number
        - N     fixed number
        - name  label reference
        """
        if self._at_eol():
            raise _StatementError(
                ErrorKind.MISSING_OPERAND, instruction.start, instruction.end
            )

        token = self._advance()

        if token.type == TokenType.LPAREN:
            value = self._expect(TokenType.NUMBER, ErrorKind.INVALID_ADDRESS)
            close = self._expect(TokenType.RPAREN, ErrorKind.MISSING_PARENTHESIS_CLOSE)
            return Operand(OperandKind.ADDRESS, value, token.start, close.end)

        if token.type == TokenType.HASH:
            value = self._expect(TokenType.NUMBER, ErrorKind.INVALID_FIX_NUMBER)
            return Operand(OperandKind.FIXED, value, token.start, value.end)

        if token.type == TokenType.NUMBER:
            return Operand(OperandKind.FIXED, token, token.start, token.end)

        if token.type == TokenType.SYMBOL:
            return Operand(OperandKind.LABEL, token, token.start, token.end)

        raise _StatementError(ErrorKind.MISSING_OPERAND, token.start, token.end)


def parse(
    tokens: list[Token],
    source: str,
    errors: Optional[ErrorCollector] = None
) -> tuple[list[UnresolvedCommand], ErrorCollector]:
    """
    Parse a token list.

    Args:
        tokens: Token list from the lexer
        source: The source text the tokens point into
        errors: Collector to record errors in (a new one if omitted)

    Returns:
        (unresolved commands, error collector)
    """
    parser = Parser(tokens, source, errors)
    commands = parser.parse()
    return commands, parser.errors
