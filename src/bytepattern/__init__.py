"""
bytepattern - compact byte-pattern matching.

Patterns follow Lua-like syntax (%d, %a, [...], ^, $, +, *, ?). A pattern
is compiled once into a program of 16-bit instructions, which a small VM
with a bounded call stack then runs against input bytes.

    >>> program = compile(b"%d+")
    >>> match(b"abc123", program)
    (3, 3)
"""

__version__ = "0.1.0"

from .compiler import PatternCompiler, compile
from .errors import (
    PatternError,
    PatternInternalError,
    PatternStackOverflow,
    PatternSyntaxError,
    ProgramTooLargeError,
)
from .matcher import ERROR, NOT_FOUND, match, match_prefix
from .opcodes import OpCode, disassemble
from .pattern import MatchResult, Pattern, findall, search, test
from .program import MAX_PROGRAM_SIZE, Program
from .vm import STACK_LIMIT, PatternVM

__all__ = [
    "compile",
    "match",
    "match_prefix",
    "search",
    "test",
    "findall",
    "disassemble",
    "Pattern",
    "PatternCompiler",
    "PatternVM",
    "Program",
    "MatchResult",
    "OpCode",
    "NOT_FOUND",
    "ERROR",
    "MAX_PROGRAM_SIZE",
    "STACK_LIMIT",
    "PatternError",
    "PatternSyntaxError",
    "ProgramTooLargeError",
    "PatternStackOverflow",
    "PatternInternalError",
]
