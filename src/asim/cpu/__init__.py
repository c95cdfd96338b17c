"""
asim CPU Package
================

This package contains the instruction set definitions shared by the
assembler and the engine.

Both the parser (which checks which operand forms are legal), the resolver
(which picks opcodes) and the engine (which executes them) use the same
definitions, ensuring the stages never disagree about the instruction set.

Usage:
    from asim.cpu import (
        Opcode,
        OperandKind,
        OPCODE_TABLE,
        get_opcode,
    )
"""

from asim.cpu.isa import (
    # Core types
    Opcode,
    OperandKind,
    OperandFlags,
    InstructionAttribute,
    Command,
    # Master instruction database
    OPCODE_TABLE,
    INSTRUCTION_ATTRIBUTES,
    # Instruction set reference lists
    MNEMONICS,
    BRANCH_OPCODES,
    REGISTER_OPCODES,
    # Lookup functions
    get_instruction_attribute,
    get_opcode,
    is_valid_instruction,
)

__all__ = [
    # Core types
    "Opcode",
    "OperandKind",
    "OperandFlags",
    "InstructionAttribute",
    "Command",
    # Master instruction database
    "OPCODE_TABLE",
    "INSTRUCTION_ATTRIBUTES",
    # Instruction set reference lists
    "MNEMONICS",
    "BRANCH_OPCODES",
    "REGISTER_OPCODES",
    # Lookup functions
    "get_instruction_attribute",
    "get_opcode",
    "is_valid_instruction",
]
