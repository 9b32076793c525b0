"""
Pattern bytecode VM.

Executes a compiled Program against one start offset of an input buffer.
Backtracking is local: the only saved continuations are the frames pushed
by CALL, which restore the input cursor when a class subroutine fails.
One attempt therefore runs in time proportional to the program length
times the number of bytes consumed.
"""

import logging
from typing import List, Tuple

from .classes import NO_INPUT, builtin_matches
from .errors import PatternInternalError, PatternStackOverflow
from .opcodes import ARG_SHIFT, OP_MASK, OpCode as Op
from .program import Program


logger = logging.getLogger('bytepattern.vm')

STACK_LIMIT = 8

_CARET = ord('^')
_DOLLAR = ord('$')

_BUILTIN_OPS = frozenset({
    Op.MATCH_BUILTIN,
    Op.MATCH_BUILTIN_OR_RET_F,
    Op.MATCH_BUILTIN_AND_RET_T,
    Op.MATCH_BUILTIN_AND_RET_F,
    Op.MATCH_BUILTIN_AND_RPT,
})


class PatternVM:
    """
    Pattern bytecode virtual machine.

    Holds no per-attempt state, so one VM can serve any number of calls.
    """

    DEFAULT_STACK_LIMIT = STACK_LIMIT

    def __init__(self, program: Program, stack_limit: int = DEFAULT_STACK_LIMIT):
        """
        Initialize pattern VM.

        Args:
            program: Compiled program, which must not carry an error
            stack_limit: Maximum number of call frames
        """
        self.program = program.check()
        self.stack_limit = stack_limit

    def run(self, data: bytes, start_pos: int = 0) -> Tuple[bool, int]:
        """
        Run the program with the input cursor at start_pos.

        Args:
            data: Input bytes
            start_pos: Start offset

        Returns:
            (matched, cursor) where cursor is the input position the
            attempt finished at

        Raises:
            ValueError: start_pos is outside 0..len(data)
        """
        if not 0 <= start_pos <= len(data):
            raise ValueError(f"Start offset out of range: {start_pos}")

        code = self.program.instructions
        size = len(code)
        length = len(data)

        pc = 0
        sp = start_pos
        result = False
        # Call frames: (call site pc, input cursor at the call)
        stack: List[Tuple[int, int]] = []

        while True:
            if not 0 <= pc < size:
                raise PatternInternalError("Program counter out of range", pc)

            instr = code[pc]
            opcode = instr & OP_MASK
            arg = instr >> ARG_SHIFT
            ch = data[sp] if sp < length else NO_INPUT

            succeed = fail = False

            if opcode == Op.RET:
                if arg:
                    succeed = True
                else:
                    fail = True

            elif opcode == Op.JUMP:
                pc = arg
                continue

            elif opcode == Op.MATCH_START_END:
                if arg == _CARET:
                    fail = sp != 0
                elif arg == _DOLLAR:
                    fail = sp != length
                else:
                    raise PatternInternalError(f"Invalid anchor {arg!r}", pc)

            elif opcode == Op.MATCH:
                if ch == arg:
                    sp += 1

            elif opcode == Op.MATCH_OR_RET_F:
                if ch == arg:
                    sp += 1
                else:
                    fail = True

            elif opcode == Op.MATCH_AND_RET_T:
                if ch == arg:
                    sp += 1
                    succeed = True

            elif opcode == Op.MATCH_AND_RET_F:
                if ch == arg:
                    sp += 1
                    fail = True

            elif opcode == Op.MATCH_AND_RPT:
                if ch == arg:
                    sp += 1
                    continue

            elif opcode == Op.CALL:
                if len(stack) >= self.stack_limit:
                    logger.debug('Call stack overflow at pc %d', pc)
                    raise PatternStackOverflow(
                        f"More than {self.stack_limit} nested calls"
                    )
                stack.append((pc, sp))
                pc = arg
                continue

            elif opcode == Op.RPT_IF_RET_T:
                if result:
                    pc -= 1
                    continue

            elif opcode == Op.RET_F_IF_RET_F:
                fail = not result

            elif opcode in _BUILTIN_OPS:
                try:
                    matched = builtin_matches(arg, ch)
                except PatternInternalError as e:
                    raise PatternInternalError(e.message, pc) from e
                if matched:
                    sp += 1

                if opcode == Op.MATCH_BUILTIN_OR_RET_F:
                    fail = not matched
                elif opcode == Op.MATCH_BUILTIN_AND_RET_T:
                    succeed = matched
                elif opcode == Op.MATCH_BUILTIN_AND_RET_F:
                    fail = matched
                elif opcode == Op.MATCH_BUILTIN_AND_RPT and matched:
                    continue

            if succeed:
                result = True
                if not stack:
                    return True, sp
                # Keep the cursor, resume after the call site
                pc, _ = stack.pop()
            elif fail:
                result = False
                if not stack:
                    return False, sp
                pc, sp = stack.pop()

            pc += 1
