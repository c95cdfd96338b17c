# =============================================================================
# test_resolver.py - Resolver Unit Tests
# =============================================================================
# Tests for label resolution and opcode selection.
#
# Test coverage includes:
#   - Label table construction and duplicate labels
#   - Forward and backward label references
#   - Opcode selection for every legal mnemonic/operand pair
#   - Source line numbers of commands
#   - Register address and jump target bounds
# =============================================================================

import pytest
from asim.assembler.lexer import Token, TokenType, tokenize
from asim.assembler.parser import UnresolvedCommand, parse
from asim.assembler.resolver import MAX_OPERAND, Resolver, resolve
from asim.cpu import Command, Opcode
from asim.errors import ErrorKind


# =============================================================================
# Helper Functions
# =============================================================================

def run_resolver(source: str, register_count: int = 16):
    tokens, line_table = tokenize(source)
    unresolved, errors = parse(tokens, source)
    assert not errors.has_errors(), errors.kinds()
    resolver = Resolver(source, line_table, register_count)
    commands = resolver.resolve(unresolved)
    return commands, resolver


def resolve_ok(source: str, register_count: int = 16) -> list[Command]:
    commands, resolver = run_resolver(source, register_count)
    assert not resolver.errors.has_errors(), resolver.errors.kinds()
    return commands


def resolve_errors(source: str, register_count: int = 16) -> list[ErrorKind]:
    _, resolver = run_resolver(source, register_count)
    return resolver.errors.kinds()


# =============================================================================
# Opcode Selection Tests
# =============================================================================

class TestOpcodeSelection:
    """Each legal mnemonic/operand pair maps to one opcode."""

    @pytest.mark.parametrize("source,opcode,operand", [
        ("NOP", Opcode.NOP, 0),
        ("LDA #3", Opcode.LOAD_FIX, 3),
        ("LDA (3)", Opcode.LOAD_FROM_REGISTER, 3),
        ("STA (3)", Opcode.SAVE_TO_REGISTER, 3),
        ("ADD #3", Opcode.ADD_FIX, 3),
        ("ADD (3)", Opcode.ADD_FROM_REGISTER, 3),
        ("SUB #3", Opcode.SUB_FIX, 3),
        ("SUB (3)", Opcode.SUB_FROM_REGISTER, 3),
        ("JMP 1", Opcode.JUMP, 1),
        ("BRZ #1", Opcode.BRANCH_IF_ZERO, 1),
        ("BRC #1", Opcode.BRANCH_IF_CARRY, 1),
        ("BRN 1", Opcode.BRANCH_IF_NEGATIVE, 1),
    ])
    def test_opcode(self, source, opcode, operand):
        assert resolve_ok(source) == [Command(opcode, operand, 0)]

    def test_fixed_value_not_truncated(self):
        """Values wider than four bits are kept; LDA loads them into a Nibble."""
        assert resolve_ok("LDA #20")[0].operand == 20


# =============================================================================
# Label Tests
# =============================================================================

class TestLabels:
    """Test label table construction and lookup."""

    def test_label_table(self):
        _, resolver = run_resolver("start: NOP\nNOP\nend: NOP")
        assert resolver.labels == {"start": 0, "end": 2}

    def test_label_indexes_commands_not_lines(self):
        """Blank lines and comments do not count."""
        _, resolver = run_resolver("// header\n\nNOP\n\ntarget:\n  NOP")
        assert resolver.labels == {"target": 1}

    def test_backward_reference(self):
        commands = resolve_ok("loop: ADD #1\nJMP loop")
        assert commands[1] == Command(Opcode.JUMP, 0, 1)

    def test_forward_reference(self):
        commands = resolve_ok("JMP done\nNOP\ndone: NOP")
        assert commands[0] == Command(Opcode.JUMP, 2, 0)

    def test_forward_and_backward_agree(self):
        commands = resolve_ok("JMP mid\nmid: NOP\nJMP mid")
        assert commands[0].operand == commands[2].operand == 1

    def test_labels_are_case_sensitive(self):
        assert resolve_errors("Loop: NOP\nJMP loop") == [ErrorKind.MISSING_LABEL]

    def test_missing_label(self):
        source = "JMP nowhere"
        _, resolver = run_resolver(source)
        error = resolver.errors.errors[0]
        assert error.kind == ErrorKind.MISSING_LABEL
        assert source[error.start:error.end] == "nowhere"

    def test_duplicate_label(self):
        """The second definition is rejected and the first one kept."""
        source = "x: NOP\nx: NOP\nJMP x"
        commands, resolver = run_resolver(source)
        assert resolver.errors.kinds() == [ErrorKind.LABEL_REASSIGN]
        assert resolver.labels == {"x": 0}
        assert commands[2] == Command(Opcode.JUMP, 0, 2)
        error = resolver.errors.errors[0]
        assert error.start == source.index("x:", 1)


# =============================================================================
# Line Number Tests
# =============================================================================

class TestLineNumbers:
    """Commands record the line of their instruction token."""

    def test_one_command_per_line(self):
        commands = resolve_ok("LDA #1\nADD #2\nSTA (3)")
        assert [c.line for c in commands] == [0, 1, 2]

    def test_blank_lines_and_comments(self):
        commands = resolve_ok("// setup\n\nLDA #1 // one\n\n\nSTA (0)\n")
        assert [c.line for c in commands] == [2, 5]

    def test_label_on_previous_line(self):
        commands = resolve_ok("NOP\nloop:\n  ADD #1")
        assert commands[1].line == 2


# =============================================================================
# Bounds Tests
# =============================================================================

class TestBounds:
    """Register addresses and jump targets must fit the machine."""

    def test_highest_register(self):
        assert resolve_ok("STA (15)")[0].operand == 15

    def test_register_out_of_range(self):
        assert resolve_errors("STA (16)") == [ErrorKind.ADDRESS_OUT_OF_RANGE]

    def test_register_count_is_configurable(self):
        assert resolve_errors("LDA (4)", register_count=4) == [ErrorKind.ADDRESS_OUT_OF_RANGE]
        assert len(resolve_ok("LDA (3)", register_count=4)) == 1

    def test_fixed_operand_not_bounded_by_registers(self):
        assert len(resolve_ok("ADD #99")) == 1

    def test_jump_to_end_halts(self):
        """Jumping to the command count is how a program stops."""
        assert resolve_ok("JMP 2\nNOP")[0].operand == 2

    def test_jump_past_end(self):
        assert resolve_errors("JMP 3\nNOP") == [ErrorKind.TARGET_OUT_OF_RANGE]

    def test_branch_target_is_relative(self):
        assert len(resolve_ok("NOP\nBRZ #2\nNOP")) == 3
        assert resolve_errors("NOP\nBRZ #3\nNOP") == [ErrorKind.TARGET_OUT_OF_RANGE]

    def test_out_of_range_span(self):
        source = "STA (20)"
        _, resolver = run_resolver(source)
        error = resolver.errors.errors[0]
        assert source[error.start:error.end] == "(20)"


# =============================================================================
# Operand Value Tests
# =============================================================================

class TestOperandValues:
    """Numbers must fit an unsigned 64-bit operand."""

    def test_largest_operand(self):
        assert resolve_ok(f"LDA #{MAX_OPERAND}")[0].operand == 2**64 - 1

    def test_operand_too_large(self):
        assert resolve_errors(f"LDA #{MAX_OPERAND + 1}") == [ErrorKind.INVALID_OPERANT]

    def test_very_long_literal(self):
        source = "LDA #" + "9" * 5000
        _, resolver = run_resolver(source)
        assert resolver.errors.kinds() == [ErrorKind.INVALID_OPERANT]
        error = resolver.errors.errors[0]
        assert source[error.start:error.end] == "9" * 5000

    def test_leading_zeros(self):
        assert resolve_ok("LDA #" + "0" * 5000 + "7")[0].operand == 7
        assert resolve_ok("JMP 000")[0].operand == 0

    def test_other_commands_still_resolved(self):
        commands, resolver = run_resolver("ADD #1\nLDA #" + "1" * 30 + "\nSTA (1)")
        assert resolver.errors.kinds() == [ErrorKind.INVALID_OPERANT]
        assert [c.opcode for c in commands] == [Opcode.ADD_FIX, Opcode.SAVE_TO_REGISTER]


class TestHandBuiltCommands:
    """Command lists that did not come from the parser."""

    def test_missing_operand(self):
        source = "LDA"
        _, line_table = tokenize(source)
        command = UnresolvedCommand(None, Token(TokenType.SYMBOL, 0, 3))
        resolver = Resolver(source, line_table)
        assert resolver.resolve([command]) == []
        assert resolver.errors.kinds() == [ErrorKind.MISSING_OPERAND]

    def test_no_operand(self):
        source = "NOP"
        _, line_table = tokenize(source)
        command = UnresolvedCommand(None, Token(TokenType.SYMBOL, 0, 3))
        assert Resolver(source, line_table).resolve([command]) == [Command(Opcode.NOP, 0, 0)]


# =============================================================================
# Functional Interface
# =============================================================================

class TestResolveFunction:

    def test_resolve(self):
        source = "ADD #1\nSTA (1)\n"
        tokens, line_table = tokenize(source)
        unresolved, errors = parse(tokens, source)
        commands, errors = resolve(unresolved, source, line_table, errors=errors)
        assert not errors.has_errors()
        assert commands == [
            Command(Opcode.ADD_FIX, 1, 0),
            Command(Opcode.SAVE_TO_REGISTER, 1, 1),
        ]

    def test_errors_of_all_commands_collected(self):
        kinds = resolve_errors("JMP a\nSTA (99)\nJMP b")
        assert kinds == [
            ErrorKind.MISSING_LABEL,
            ErrorKind.ADDRESS_OUT_OF_RANGE,
            ErrorKind.MISSING_LABEL,
        ]
