"""
Pattern bytecode opcodes.

Every instruction is a 16-bit value: the low 4 bits hold the opcode, the
high 12 bits the argument. The argument is a byte value for the match
instructions and an instruction index for JUMP and CALL.
"""

from enum import IntEnum
from typing import Tuple


OP_MASK = 0x0F
ARG_SHIFT = 4
ARG_MAX = 0xFFF


class OpCode(IntEnum):
    """Pattern bytecode opcodes."""

    RET = 0x00  # Return (arg 1: success, arg 0: failure)
    JUMP = 0x01  # Continue at instruction arg
    MATCH_START_END = 0x02  # Anchor (arg: '^' or '$')
    MATCH = 0x03  # Consume byte if present
    MATCH_OR_RET_F = 0x04  # Consume byte or fail
    MATCH_AND_RET_T = 0x05  # Consume byte and return success
    MATCH_AND_RET_F = 0x06  # On byte, return failure
    MATCH_AND_RPT = 0x07  # Consume byte and run this instruction again
    CALL = 0x08  # Enter class subroutine at arg
    RPT_IF_RET_T = 0x09  # Re-run the preceding CALL after a success
    RET_F_IF_RET_F = 0x0A  # Fail after an unsuccessful CALL

    # Same as the five byte forms above, over a built-in class
    MATCH_BUILTIN = 0x0B
    MATCH_BUILTIN_OR_RET_F = 0x0C
    MATCH_BUILTIN_AND_RET_T = 0x0D
    MATCH_BUILTIN_AND_RET_F = 0x0E
    MATCH_BUILTIN_AND_RPT = 0x0F


# Control instructions take an instruction index (or flag), not a byte
CONTROL_OPCODES = frozenset({
    OpCode.RET,
    OpCode.JUMP,
    OpCode.CALL,
    OpCode.RPT_IF_RET_T,
    OpCode.RET_F_IF_RET_F,
})

OPCODE_INFO = {
    # opcode: (mnemonic, description)
    OpCode.RET: ("ret", "Return (arg: 1 success, 0 failure)"),
    OpCode.JUMP: ("jmp", "Jump to instruction (arg: index)"),
    OpCode.MATCH_START_END: ("mse", "Match start or end of input"),
    OpCode.MATCH: ("m", "Match byte if present"),
    OpCode.MATCH_OR_RET_F: ("mof", "Match byte or fail"),
    OpCode.MATCH_AND_RET_T: ("mat", "Match byte and succeed"),
    OpCode.MATCH_AND_RET_F: ("maf", "Match byte and fail"),
    OpCode.MATCH_AND_RPT: ("marpt", "Match byte repeatedly"),
    OpCode.CALL: ("call", "Call subroutine (arg: index)"),
    OpCode.RPT_IF_RET_T: ("crpt", "Repeat call if it succeeded"),
    OpCode.RET_F_IF_RET_F: ("crtnf", "Fail if call failed"),
    OpCode.MATCH_BUILTIN: ("mb", "Match class if present"),
    OpCode.MATCH_BUILTIN_OR_RET_F: ("mbof", "Match class or fail"),
    OpCode.MATCH_BUILTIN_AND_RET_T: ("mbat", "Match class and succeed"),
    OpCode.MATCH_BUILTIN_AND_RET_F: ("mbaf", "Match class and fail"),
    OpCode.MATCH_BUILTIN_AND_RPT: ("mbrpt", "Match class repeatedly"),
}


def make_instruction(opcode: OpCode, arg: int = 0) -> int:
    """Encode an opcode and its argument into a 16-bit instruction."""
    if not 0 <= arg <= ARG_MAX:
        raise ValueError(f"Instruction argument out of range: {arg}")
    return (opcode & OP_MASK) | (arg << ARG_SHIFT)


def decode_instruction(instr: int) -> Tuple[OpCode, int]:
    """Split a 16-bit instruction into (opcode, arg)."""
    return OpCode(instr & OP_MASK), instr >> ARG_SHIFT


def _format_arg(opcode: OpCode, arg: int) -> str:
    if opcode in CONTROL_OPCODES:
        return f"{arg:#x}"
    if 0x20 <= arg < 0x7F:
        return chr(arg)
    return f"\\x{arg:02x}"


def disassemble(program, verbose: bool = False) -> str:
    """
    Disassemble a program to human-readable format.

    Args:
        program: A compiled Program
        verbose: Append each instruction's description as a comment

    Returns:
        One line per instruction: index, mnemonic, argument
    """
    lines = []
    for i, instr in enumerate(program.instructions):
        opcode, arg = decode_instruction(instr)
        name, description = OPCODE_INFO[opcode]
        line = f"{i:04x}: {name:<6} {_format_arg(opcode, arg)}"
        if verbose:
            line = f"{line:<24}; {description}"
        lines.append(line)

    return "\n".join(lines)
