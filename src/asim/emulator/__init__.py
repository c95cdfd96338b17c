"""
asim Emulator
=============

The asim execution engine: a 4-bit accumulator machine that executes
compiled command lists one tick at a time.

Quick Start
-----------

    >>> from asim import compile
    >>> from asim.emulator import Engine
    >>> engine = Engine(16, compile("LDA #5\\nSUB #2\\nSTA (3)"))
    >>> while engine.tick():
    ...     pass
    >>> engine.register(3).value, engine.flags.carry
    (3, True)
"""

from asim.emulator.engine import Engine, EngineState, StatusFlags

__all__ = [
    "Engine",
    "EngineState",
    "StatusFlags",
]
