"""
Matcher driver.

Tries a Program at successive start offsets of the input and reports the
first one that matches. Unanchored search is quadratic in the worst case
(input length times program length); this is intended for short inputs
and patterns.

Only the first instruction is inspected for an anchor. A pattern that
starts with '^' is tried at offset 0 alone; a trailing '$' does not narrow
the search.
"""

import logging
from typing import Optional, Tuple

from .compiler import ByteInput, as_bytes
from .program import Program
from .vm import STACK_LIMIT, PatternVM


logger = logging.getLogger('bytepattern.matcher')

NOT_FOUND = -1
ERROR = -2


def match(data: ByteInput, program: Program, pos: int = 0,
          stack_limit: int = STACK_LIMIT) -> Tuple[int, int]:
    """
    Find the leftmost match of program in data.

    Args:
        data: Input bytes (or ASCII str)
        program: Compiled program
        pos: First start offset to try
        stack_limit: Maximum VM call depth

    Returns:
        (start, length) of the match, (NOT_FOUND, 0) if there is none, or
        (ERROR, 0) if the program carries a compile error

    Raises:
        ValueError: pos is negative
    """
    if pos < 0:
        raise ValueError(f"Start offset out of range: {pos}")
    if not program.ok:
        return ERROR, 0

    data = as_bytes(data)
    vm = PatternVM(program, stack_limit)
    anchored = program.starts_with_anchor

    for start in range(pos, len(data)):
        matched, end = vm.run(data, start)
        if matched:
            return start, end - start
        if anchored:
            break

    logger.debug('No match in %d bytes', len(data))
    return NOT_FOUND, 0


def match_prefix(data: ByteInput, program: Program,
                 stack_limit: int = STACK_LIMIT) -> Optional[Tuple[bytes, bytes]]:
    """
    Find the leftmost match and split the input around it.

    Returns:
        (matched bytes, bytes after the match), or None if nothing matched
        or the program carries a compile error
    """
    data = as_bytes(data)
    start, length = match(data, program, stack_limit=stack_limit)
    if start < 0:
        return None
    end = start + length
    return data[start:end], data[end:]
