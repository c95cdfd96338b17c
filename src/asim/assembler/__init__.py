"""
asim Assembler
==============

This package compiles asim assembly source into the command list executed
by asim.emulator.Engine.

Main Components
---------------
- **Assembler**: Orchestrates compilation, keeps listings and symbols
- **Lexer**: Tokenizes source into offset-based tokens and a line table
- **Parser**: Parses tokens into unresolved commands, recovering per line
- **Resolver**: Builds the label table and selects opcodes

Assembly Process
----------------
1. **Lexing**: source -> tokens + line table (never fails)
2. **Parsing**: tokens -> unresolved commands, errors collected per line
3. **Resolving** (two-pass):
   - Pass 1: label table
   - Pass 2: operand values, opcodes, register and target bounds

Errors from every stage land in one report; compilation only succeeds when
that report is empty.

Example Usage
-------------
>>> from asim.assembler import compile
>>> compile("ADD #1\\nSTA (1)\\n")
[Command(opcode=<Opcode.ADD_FIX: 4>, operand=1, line=0), Command(opcode=<Opcode.SAVE_TO_REGISTER: 3>, operand=1, line=1)]
"""

from asim.assembler.assembler import Assembler, compile, compile_file
from asim.assembler.lexer import Lexer, LineTable, Token, TokenType, tokenize
from asim.assembler.parser import Operand, Parser, UnresolvedCommand, parse
from asim.assembler.resolver import DEFAULT_REGISTER_COUNT, Resolver, resolve

__all__ = [
    # Main class and functions
    "Assembler",
    "compile",
    "compile_file",
    # Lexer
    "Lexer",
    "LineTable",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "Operand",
    "UnresolvedCommand",
    "parse",
    # Resolver
    "Resolver",
    "resolve",
    "DEFAULT_REGISTER_COUNT",
]
