"""
asim Instruction Set Definition
===============================

This module defines the asim instruction set: the opcodes the engine
executes, the operand kinds the assembler recognizes, and the single table
that ties a (mnemonic, operand kind) pair to an opcode.

Operand Kinds
-------------
| Syntax   | Kind    | Meaning                         |
|----------|---------|---------------------------------|
| (none)   | -       | No operand (NOP)                |
| #N or N  | FIXED   | Literal number                  |
| (N)      | ADDRESS | Register index                  |
| name     | LABEL   | Command index of a labelled line |

Instruction Table
-----------------
| Mnemonic | Fixed    | Address            | Label | None |
|----------|----------|--------------------|-------|------|
| NOP      |          |                    |       | NOP  |
| LDA      | LOAD_FIX | LOAD_FROM_REGISTER |       |      |
| STA      |          | SAVE_TO_REGISTER   |       |      |
| ADD      | ADD_FIX  | ADD_FROM_REGISTER  |       |      |
| SUB      | SUB_FIX  | SUB_FROM_REGISTER  |       |      |
| JMP      | JUMP     |                    | JUMP  |      |
| BRZ      | BRANCH_IF_ZERO     |          |       |      |
| BRC      | BRANCH_IF_CARRY    |          |       |      |
| BRN      | BRANCH_IF_NEGATIVE |          |       |      |

The parser uses the table to decide which operand forms are legal, and the
resolver uses the very same table to pick the opcode, so the two stages
cannot disagree.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag, auto
from typing import Optional


# =============================================================================
# Operand Kind Enumeration
# =============================================================================

class OperandKind(Enum):
    """How an instruction operand is written in the source."""
    FIXED = auto()    # #5 or 5
    ADDRESS = auto()  # (5)
    LABEL = auto()    # loop

    def __str__(self) -> str:
        return {
            OperandKind.FIXED: "fixed number",
            OperandKind.ADDRESS: "address",
            OperandKind.LABEL: "label",
        }[self]


# =============================================================================
# Opcodes
# =============================================================================

class Opcode(IntEnum):
    """Executable operations of the asim engine."""
    NOP = 0
    LOAD_FIX = 1
    LOAD_FROM_REGISTER = 2
    SAVE_TO_REGISTER = 3
    ADD_FIX = 4
    ADD_FROM_REGISTER = 5
    SUB_FIX = 6
    SUB_FROM_REGISTER = 7
    JUMP = 8
    BRANCH_IF_ZERO = 9
    BRANCH_IF_CARRY = 10
    BRANCH_IF_NEGATIVE = 11


# =============================================================================
# Opcode Table
# =============================================================================
# Key: (mnemonic, operand kind), with None for "no operand"
# Value: the opcode the combination assembles to
# A combination missing from this table is illegal.
# =============================================================================

OPCODE_TABLE: dict[tuple[str, Optional[OperandKind]], Opcode] = {
    ("NOP", None): Opcode.NOP,

    ("LDA", OperandKind.FIXED): Opcode.LOAD_FIX,
    ("LDA", OperandKind.ADDRESS): Opcode.LOAD_FROM_REGISTER,

    ("STA", OperandKind.ADDRESS): Opcode.SAVE_TO_REGISTER,

    ("ADD", OperandKind.FIXED): Opcode.ADD_FIX,
    ("ADD", OperandKind.ADDRESS): Opcode.ADD_FROM_REGISTER,

    ("SUB", OperandKind.FIXED): Opcode.SUB_FIX,
    ("SUB", OperandKind.ADDRESS): Opcode.SUB_FROM_REGISTER,

    # JMP is absolute, branches are relative to their own index
    ("JMP", OperandKind.FIXED): Opcode.JUMP,
    ("JMP", OperandKind.LABEL): Opcode.JUMP,

    ("BRZ", OperandKind.FIXED): Opcode.BRANCH_IF_ZERO,
    ("BRC", OperandKind.FIXED): Opcode.BRANCH_IF_CARRY,
    ("BRN", OperandKind.FIXED): Opcode.BRANCH_IF_NEGATIVE,
}


# Set of all valid mnemonics
MNEMONICS: frozenset[str] = frozenset({
    mnemonic for mnemonic, _ in OPCODE_TABLE.keys()
})

BRANCH_OPCODES: frozenset[Opcode] = frozenset({
    Opcode.BRANCH_IF_ZERO,
    Opcode.BRANCH_IF_CARRY,
    Opcode.BRANCH_IF_NEGATIVE,
})

REGISTER_OPCODES: frozenset[Opcode] = frozenset({
    Opcode.LOAD_FROM_REGISTER,
    Opcode.SAVE_TO_REGISTER,
    Opcode.ADD_FROM_REGISTER,
    Opcode.SUB_FROM_REGISTER,
})


# =============================================================================
# Instruction Attributes
# =============================================================================

class OperandFlags(IntFlag):
    """Operand forms accepted by a mnemonic."""
    NO_OPERAND = 0x01
    FIXED = 0x02
    ADDRESS = 0x04
    LABEL = 0x08


_KIND_FLAGS = {
    None: OperandFlags.NO_OPERAND,
    OperandKind.FIXED: OperandFlags.FIXED,
    OperandKind.ADDRESS: OperandFlags.ADDRESS,
    OperandKind.LABEL: OperandFlags.LABEL,
}


@dataclass(frozen=True)
class InstructionAttribute:
    """
    Which operand forms a mnemonic accepts.

    Attributes:
        mnemonic: The instruction mnemonic (uppercase)
        flags: Accepted operand forms
    """
    mnemonic: str
    flags: OperandFlags

    def allows(self, kind: Optional[OperandKind]) -> bool:
        """Check whether this instruction accepts an operand of `kind` (None = no operand)."""
        return bool(self.flags & _KIND_FLAGS[kind])

    def allow_no_operand(self) -> bool:
        return self.allows(None)

    def allow_fixed_number(self) -> bool:
        return self.allows(OperandKind.FIXED)

    def allow_address(self) -> bool:
        return self.allows(OperandKind.ADDRESS)

    def allow_label(self) -> bool:
        return self.allows(OperandKind.LABEL)

    def valid_kinds(self) -> list[Optional[OperandKind]]:
        return [kind for kind in _KIND_FLAGS if self.allows(kind)]


def _build_attributes() -> dict[str, InstructionAttribute]:
    flags: dict[str, OperandFlags] = {}
    for mnemonic, kind in OPCODE_TABLE:
        flags[mnemonic] = flags.get(mnemonic, OperandFlags(0)) | _KIND_FLAGS[kind]
    return {
        mnemonic: InstructionAttribute(mnemonic, value)
        for mnemonic, value in flags.items()
    }


INSTRUCTION_ATTRIBUTES: dict[str, InstructionAttribute] = _build_attributes()


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_attribute(mnemonic: str) -> Optional[InstructionAttribute]:
    """
    Look up the operand forms accepted by a mnemonic.

    Args:
        mnemonic: The instruction mnemonic, in any case

    Returns:
        InstructionAttribute if the mnemonic exists, None otherwise
    """
    return INSTRUCTION_ATTRIBUTES.get(mnemonic.upper())


def get_opcode(mnemonic: str, kind: Optional[OperandKind]) -> Optional[Opcode]:
    """
    Look up the opcode for a mnemonic and operand kind.

    Args:
        mnemonic: The instruction mnemonic, in any case
        kind: The operand kind, or None for no operand

    Returns:
        The Opcode, or None if the combination is illegal
    """
    return OPCODE_TABLE.get((mnemonic.upper(), kind))


def is_valid_instruction(mnemonic: str) -> bool:
    return mnemonic.upper() in MNEMONICS


# =============================================================================
# Executable Command
# =============================================================================

_COMMAND_FORMATS = {
    Opcode.NOP: "NOP",
    Opcode.LOAD_FIX: "LDA #{}",
    Opcode.LOAD_FROM_REGISTER: "LDA ({})",
    Opcode.SAVE_TO_REGISTER: "STA ({})",
    Opcode.ADD_FIX: "ADD #{}",
    Opcode.ADD_FROM_REGISTER: "ADD ({})",
    Opcode.SUB_FIX: "SUB #{}",
    Opcode.SUB_FROM_REGISTER: "SUB ({})",
    Opcode.JUMP: "JMP {}",
    Opcode.BRANCH_IF_ZERO: "BRZ #{}",
    Opcode.BRANCH_IF_CARRY: "BRC #{}",
    Opcode.BRANCH_IF_NEGATIVE: "BRN #{}",
}


@dataclass(frozen=True)
class Command:
    """
    A fully resolved, executable instruction.

    Attributes:
        opcode: What to execute
        operand: Literal value, register index, jump target or branch offset
        line: 0-based source line the command was compiled from
    """
    opcode: Opcode
    operand: int = 0
    line: int = 0

    def __str__(self) -> str:
        """Render the command in canonical source form (e.g. 'LDA #3')."""
        return _COMMAND_FORMATS[self.opcode].format(self.operand)
