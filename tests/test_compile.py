# =============================================================================
# test_compile.py - Compiler Integration Tests
# =============================================================================
# Tests for compile() and the Assembler class: the full lexer -> parser ->
# resolver pipeline, error reports, listings and symbol files.
# =============================================================================

import pytest
from asim import CompileError, compile
from asim.assembler import Assembler, compile_file
from asim.cpu import Command, Opcode
from asim.errors import ErrorKind


MULTIPLY_SOURCE = """\
// Seed the registers
        LDA #2
        STA (12)
        LDA #3
        STA (13)
        LDA #4
        STA (14)
        LDA #5
        STA (15)

// Add with carry check
        LDA (13)
        ADD (15)
        BRC #4
        STA (15)
        LDA #0
        JMP add
        STA (15)
        LDA #1
add:    ADD (12)
        ADD (14)
        STA (14)
        NOP
"""


# =============================================================================
# Successful Compilation
# =============================================================================

class TestCompile:
    """Test end-to-end compilation."""

    def test_two_commands(self):
        assert compile("ADD #1\nSTA (1)\n") == [
            Command(Opcode.ADD_FIX, 1, 0),
            Command(Opcode.SAVE_TO_REGISTER, 1, 1),
        ]

    def test_empty_program(self):
        assert compile("") == []

    def test_comment_only_program(self):
        assert compile("// nothing here\n\n") == []

    @pytest.mark.parametrize("count", [1, 2, 5, 16])
    def test_n_lines_n_commands(self, count):
        """N label-free lines compile to N commands, command i on line i."""
        lines = ["LDA #1", "ADD (2)", "SUB #3", "STA (4)", "NOP"]
        source = "\n".join(lines[i % len(lines)] for i in range(count))
        commands = compile(source)
        assert len(commands) == count
        assert [c.line for c in commands] == list(range(count))

    def test_canonical_forms(self):
        commands = compile("lda #3\nsta (15)\nx: jmp x\nbrc 1\nNOP")
        assert [str(c) for c in commands] == [
            "LDA #3", "STA (15)", "JMP 2", "BRC #1", "NOP"
        ]

    def test_multiply_program(self):
        commands = compile(MULTIPLY_SOURCE)
        assert len(commands) == 20
        assert commands[13] == Command(Opcode.JUMP, 16, 16)
        assert commands[10] == Command(Opcode.BRANCH_IF_CARRY, 4, 13)

    def test_register_count(self):
        with pytest.raises(CompileError):
            compile("STA (8)", register_count=8)
        assert compile("STA (7)", register_count=8) == [
            Command(Opcode.SAVE_TO_REGISTER, 7, 0)
        ]


# =============================================================================
# Error Reports
# =============================================================================

class TestErrorReports:
    """Compilation fails with a complete report."""

    def test_not_allowed_fix_number(self):
        with pytest.raises(CompileError) as exc_info:
            compile("STA #5")
        assert exc_info.value.report.kinds() == [ErrorKind.NOT_ALLOWED_FIX_NUMBER]

    def test_error_position(self):
        with pytest.raises(CompileError) as exc_info:
            compile("NOP\n  STA #5\nNOP")
        error = exc_info.value.report.errors[0]
        assert error.line.number == 1
        assert error.line.text == "  STA #5"
        assert (error.start, error.end) == (6, 8)

    def test_duplicate_label_fails_alone(self):
        """Other lines of the program stay error-free."""
        source = "x: LDA #1\nADD (2)\nx: STA (3)\nJMP x"
        with pytest.raises(CompileError) as exc_info:
            compile(source)
        report = exc_info.value.report
        assert report.kinds() == [ErrorKind.LABEL_REASSIGN]
        assert report.errors[0].line.number == 2

    def test_parser_and_resolver_errors_together(self):
        source = "FOO\nJMP nowhere\nSTA #1\nLDA (99)"
        with pytest.raises(CompileError) as exc_info:
            compile(source)
        report = exc_info.value.report
        assert report.kinds() == [
            ErrorKind.INVALID_INSTRUCTION,
            ErrorKind.NOT_ALLOWED_FIX_NUMBER,
            ErrorKind.MISSING_LABEL,
            ErrorKind.ADDRESS_OUT_OF_RANGE,
        ]
        assert [e.line.number for e in report] == [0, 2, 1, 3]

    def test_error_on_last_line_without_newline(self):
        with pytest.raises(CompileError) as exc_info:
            compile("NOP\nLDA")
        error = exc_info.value.report.errors[0]
        assert error.kind == ErrorKind.MISSING_OPERAND
        assert error.line.number == 1
        assert error.line.text == "LDA"

    def test_report_format(self):
        with pytest.raises(CompileError) as exc_info:
            compile("STA #5")
        assert exc_info.value.report.format() == (
            "line 0: error: not allowed fix number\n"
            "    STA #5\n"
            "        ^^\n"
            "\n"
            "1 error"
        )

    def test_oversized_literal(self):
        with pytest.raises(CompileError) as exc_info:
            compile("NOP\nLDA #" + "9" * 5000)
        error = exc_info.value.report.errors[0]
        assert error.kind == ErrorKind.INVALID_OPERANT
        assert error.line.number == 1
        assert (error.start, error.end) == (5, 5005)

    def test_exception_message(self):
        with pytest.raises(CompileError, match="compilation failed with 2 errors"):
            compile("FOO\nBAR")


# =============================================================================
# Assembler Class
# =============================================================================

class TestAssembler:
    """Test the Assembler facade."""

    def test_symbols(self):
        asm = Assembler()
        asm.assemble_string(MULTIPLY_SOURCE)
        assert asm.get_symbols() == {"add": 16}
        assert not asm.has_errors()

    def test_error_report_kept(self):
        asm = Assembler()
        with pytest.raises(CompileError):
            asm.assemble_string("STA #5")
        assert asm.has_errors()
        assert "not allowed fix number" in asm.get_error_report()
        assert asm.get_commands() == []

    def test_listing(self):
        asm = Assembler()
        asm.assemble_string("start: LDA #3\n\nJMP start")
        listing = asm.get_listing()
        assert "   0    0:  LDA #3" in listing
        assert "   1    2:  JMP 0" in listing
        assert "start" in listing

    def test_write_files(self, tmp_path):
        asm = Assembler()
        asm.assemble_string("b: NOP\na: JMP b")
        asm.write_listing(tmp_path / "out.lst")
        asm.write_symbols(tmp_path / "out.sym")
        assert "JMP 0" in (tmp_path / "out.lst").read_text()
        assert (tmp_path / "out.sym").read_text() == (
            "# Symbol table\n"
            "# Generated by asimc\n"
            "a 1\n"
            "b 0\n"
        )

    def test_compile_file(self, tmp_path):
        path = tmp_path / "prog.asm"
        path.write_text("LDA #1\n")
        assert compile_file(path) == [Command(Opcode.LOAD_FIX, 1, 0)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Assembler().assemble_file(tmp_path / "missing.asm")

    def test_invalid_register_count(self):
        with pytest.raises(ValueError):
            Assembler(register_count=0)
