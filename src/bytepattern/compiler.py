"""
Pattern bytecode compiler.

Compiles pattern text to a Program in a single forward pass with two bytes
of lookahead. There is no intermediate tree: every atom is emitted as soon
as its quantifier (if any) has been seen.

Bracket classes become inline subroutines:

    jmp   L          ; placeholder, patched once ']' is seen
    mat   a          ; one instruction per member
    mat   b
    ret   0          ; no member matched
  L:call  <body>     ; call site, followed by quantifier control
    crtnf
"""

import logging
from typing import List, Optional, Union

from .classes import ANY, CLASS_LETTERS
from .errors import PatternSyntaxError
from .opcodes import ARG_MAX, OpCode as Op, make_instruction
from .program import ERROR_NONE, ERROR_TOO_LARGE, MAX_PROGRAM_SIZE, Program


logger = logging.getLogger('bytepattern.compiler')

ByteInput = Union[bytes, bytearray, memoryview, str]

PERCENT = ord('%')
DOT = ord('.')
CARET = ord('^')
DOLLAR = ord('$')
LBRACKET = ord('[')
RBRACKET = ord(']')
PLUS = ord('+')
STAR = ord('*')
QMARK = ord('?')

QUANTIFIERS = frozenset((PLUS, STAR, QMARK))
ANCHORS = frozenset((CARET, DOLLAR))

# Bytes that '%' turns back into literals
LITERAL_ESCAPES = frozenset(b"%.+*?^$[]")

# Instructions emitted for a single atom, by quantifier (None: no quantifier)
BYTE_ATOM_OPS = {
    None: (Op.MATCH_OR_RET_F,),
    QMARK: (Op.MATCH,),
    STAR: (Op.MATCH_AND_RPT,),
    PLUS: (Op.MATCH_OR_RET_F, Op.MATCH_AND_RPT),
}

BUILTIN_ATOM_OPS = {
    None: (Op.MATCH_BUILTIN_OR_RET_F,),
    QMARK: (Op.MATCH_BUILTIN,),
    STAR: (Op.MATCH_BUILTIN_AND_RPT,),
    PLUS: (Op.MATCH_BUILTIN_OR_RET_F, Op.MATCH_BUILTIN_AND_RPT),
}

# Call site of a bracket class, by quantifier
CLASS_CALL_OPS = {
    None: (Op.CALL, Op.RET_F_IF_RET_F),
    QMARK: (Op.CALL,),
    STAR: (Op.CALL, Op.RPT_IF_RET_T),
    PLUS: (Op.CALL, Op.RET_F_IF_RET_F, Op.CALL, Op.RPT_IF_RET_T),
}


def as_bytes(value: ByteInput) -> bytes:
    """Return pattern or input text as bytes; str must be ASCII."""
    if isinstance(value, str):
        return value.encode('ascii')
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"Expected bytes or str, not {type(value).__name__}")


class PatternCompiler:
    """Compiles pattern text to bytecode."""

    DEFAULT_MAX_PROGRAM_SIZE = MAX_PROGRAM_SIZE

    def __init__(self, max_program_size: int = DEFAULT_MAX_PROGRAM_SIZE):
        # Jump targets must fit in the 12-bit argument
        if not 0 < max_program_size <= ARG_MAX + 1:
            raise ValueError(f"Invalid program size limit: {max_program_size}")
        self.max_program_size = max_program_size
        self.code: List[int] = []
        self.error = ERROR_NONE
        self.pattern = b""

    def compile(self, pattern: ByteInput) -> Program:
        """
        Compile pattern text to a Program.

        Malformed patterns do not raise: the problem is recorded in the
        error field of the returned Program.

        Args:
            pattern: Pattern text

        Returns:
            The compiled Program
        """
        self.pattern = as_bytes(pattern)
        self.code = []
        self.error = ERROR_NONE

        try:
            self._compile_pattern()
        except PatternSyntaxError as e:
            logger.debug('Pattern %r rejected: %s', self.pattern, e)
            self.error = -1 - e.index
        else:
            self._emit(Op.RET, 1)

        if self.error == ERROR_TOO_LARGE:
            logger.debug('Pattern %r exceeds %d instructions',
                         self.pattern, self.max_program_size)

        program = Program(self.error, tuple(self.code))
        logger.debug('Compiled %r to %d instructions',
                     self.pattern, program.instruction_count)
        return program

    def _emit(self, opcode: Op, arg: int = 0) -> Optional[int]:
        """Emit an instruction and return its index.

        Once the capacity has been exceeded nothing more is emitted and
        None is returned.
        """
        if self.error:
            return None
        if len(self.code) >= self.max_program_size:
            self.error = ERROR_TOO_LARGE
            return None
        self.code.append(make_instruction(opcode, arg))
        return len(self.code) - 1

    def _patch(self, idx: Optional[int], opcode: Op, arg: int = 0):
        """Patch an instruction at index."""
        if idx is not None and idx < len(self.code):
            self.code[idx] = make_instruction(opcode, arg)

    def _peek(self, pos: int) -> Optional[int]:
        if pos < len(self.pattern):
            return self.pattern[pos]
        return None

    def _compile_pattern(self):
        """Compile the whole pattern, outside any class."""
        pos = 0
        while pos < len(self.pattern):
            c = self.pattern[pos]

            if c in QUANTIFIERS:
                raise PatternSyntaxError("Nothing to repeat", pos)
            if c == RBRACKET:
                raise PatternSyntaxError("Unmatched ']'", pos)

            if c == PERCENT:
                pos = self._compile_escape(pos)
            elif c in ANCHORS:
                self._emit(Op.MATCH_START_END, c)
                pos += 1
            elif c == DOT:
                pos = self._compile_atom(pos + 1, ANY, BUILTIN_ATOM_OPS)
            elif c == LBRACKET:
                pos = self._compile_class(pos)
            else:
                pos = self._compile_atom(pos + 1, c, BYTE_ATOM_OPS)

    def _compile_escape(self, pos: int) -> int:
        """Compile '%' and the byte after it."""
        target = self._peek(pos + 1)
        if target in LITERAL_ESCAPES:
            return self._compile_atom(pos + 2, target, BYTE_ATOM_OPS)
        if target in CLASS_LETTERS:
            return self._compile_atom(pos + 2, target, BUILTIN_ATOM_OPS)
        raise PatternSyntaxError("Invalid escape", pos)

    def _compile_atom(self, pos: int, arg: int, ops) -> int:
        """Emit a single atom followed by the quantifier at pos, if any.

        Returns the position after the atom and its quantifier.
        """
        quantifier = self._peek(pos)
        if quantifier not in QUANTIFIERS:
            quantifier = None

        for opcode in ops[quantifier]:
            self._emit(opcode, arg)

        return pos + 1 if quantifier is not None else pos

    def _compile_class(self, pos: int) -> int:
        """Compile a bracket class starting at the '[' at pos.

        Negation applies to each member on its own: a member of a negated
        class makes the subroutine fail when it matches. A byte that gets
        past every member is then accepted.
        """
        placeholder = self._emit(Op.RET, 0)
        pos += 1

        negated = self._peek(pos) == CARET
        if negated:
            pos += 1
            byte_op = Op.MATCH_AND_RET_F
            builtin_op = Op.MATCH_BUILTIN_AND_RET_F
        else:
            byte_op = Op.MATCH_AND_RET_T
            builtin_op = Op.MATCH_BUILTIN_AND_RET_T

        while True:
            c = self._peek(pos)
            if c is None:
                raise PatternSyntaxError("Unterminated class", pos)
            if c == RBRACKET:
                break

            if c == PERCENT:
                target = self._peek(pos + 1)
                if target in LITERAL_ESCAPES:
                    self._emit(byte_op, target)
                elif target in CLASS_LETTERS:
                    self._emit(builtin_op, target)
                else:
                    raise PatternSyntaxError("Invalid escape", pos)
                pos += 2
            else:
                self._emit(byte_op, c)
                pos += 1

        if negated:
            self._emit(Op.MATCH_BUILTIN_AND_RET_T, ANY)
        self._emit(Op.RET, 0)

        self._patch(placeholder, Op.JUMP, len(self.code))
        body = placeholder + 1 if placeholder is not None else 0

        # pos is on the closing ']'
        quantifier = self._peek(pos + 1)
        if quantifier not in QUANTIFIERS:
            quantifier = None

        for opcode in CLASS_CALL_OPS[quantifier]:
            self._emit(opcode, body if opcode == Op.CALL else 0)

        return pos + 2 if quantifier is not None else pos + 1


def compile(pattern: ByteInput,
            max_program_size: int = MAX_PROGRAM_SIZE) -> Program:
    """Compile pattern text to a Program (see PatternCompiler.compile)."""
    return PatternCompiler(max_program_size).compile(pattern)
