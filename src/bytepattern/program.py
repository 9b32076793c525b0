"""
Compiled pattern program.

A Program is produced once by the compiler and never mutated afterwards,
so it can be shared freely between matcher calls and threads.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import PatternSyntaxError, ProgramTooLargeError
from .opcodes import OpCode, decode_instruction


MAX_PROGRAM_SIZE = 512

ERROR_NONE = 0
ERROR_TOO_LARGE = 1


@dataclass(frozen=True)
class Program:
    """Compiled bytecode for a pattern.

    error is 0 when compilation succeeded, 1 when the instruction capacity
    was exceeded, and -1 - index for a syntax error at pattern[index].
    """
    error: int = ERROR_NONE
    instructions: Tuple[int, ...] = ()

    @property
    def instruction_count(self) -> int:
        return len(self.instructions)

    @property
    def ok(self) -> bool:
        return self.error == ERROR_NONE

    @property
    def error_index(self) -> Optional[int]:
        """Pattern index of a syntax error, or None."""
        if self.error < 0:
            return -self.error - 1
        return None

    @property
    def starts_with_anchor(self) -> bool:
        """True if the first instruction is a '^' anchor."""
        if not self.instructions:
            return False
        opcode, arg = decode_instruction(self.instructions[0])
        return opcode == OpCode.MATCH_START_END and arg == ord('^')

    def check(self) -> "Program":
        """Raise the exception matching the error code, if any."""
        if self.error == ERROR_TOO_LARGE:
            raise ProgramTooLargeError(
                "Pattern exceeds the instruction capacity"
            )
        if self.error < 0:
            raise PatternSyntaxError("Invalid pattern", self.error_index)
        return self
