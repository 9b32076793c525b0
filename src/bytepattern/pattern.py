"""
Main pattern module - public interface.

Wraps the compile/match pair in an object that raises on bad patterns.
"""

from typing import Iterator, List, Optional, Tuple

from .compiler import ByteInput, PatternCompiler, as_bytes
from .matcher import match
from .opcodes import disassemble
from .program import MAX_PROGRAM_SIZE, Program
from .vm import STACK_LIMIT


__all__ = ['Pattern', 'MatchResult', 'search', 'test', 'findall']


class MatchResult:
    """Result of a successful pattern match."""

    def __init__(self, input_bytes: bytes, start: int, end: int):
        self.input = input_bytes
        self.start = start
        self.end = end

    def group(self) -> bytes:
        return self.input[self.start:self.end]

    def span(self) -> Tuple[int, int]:
        return self.start, self.end

    def __len__(self) -> int:
        return self.end - self.start

    def __repr__(self):
        return f"MatchResult({self.group()!r}, span={self.span()})"


class Pattern:
    """
    A compiled pattern.

    Compile errors raise here instead of being carried in the program.
    """

    def __init__(
        self,
        pattern: ByteInput,
        max_program_size: int = MAX_PROGRAM_SIZE,
        stack_limit: int = STACK_LIMIT
    ):
        """
        Create a new Pattern.

        Args:
            pattern: The pattern text
            max_program_size: Instruction capacity of the program
            stack_limit: Maximum VM call depth

        Raises:
            PatternSyntaxError: The pattern is malformed
            ProgramTooLargeError: The program exceeds max_program_size
        """
        self.source = as_bytes(pattern)
        self.stack_limit = stack_limit

        compiler = PatternCompiler(max_program_size)
        self.program: Program = compiler.compile(self.source).check()

    def _search_from(self, data: bytes, pos: int) -> Optional[MatchResult]:
        start, length = match(data, self.program, pos, self.stack_limit)
        if start < 0:
            return None
        return MatchResult(data, start, start + length)

    def search(self, data: ByteInput) -> Optional[MatchResult]:
        """
        Find the leftmost match in data.

        Args:
            data: The bytes to search

        Returns:
            MatchResult or None if there's no match
        """
        return self._search_from(as_bytes(data), 0)

    def test(self, data: ByteInput) -> bool:
        """Return True if the pattern matches anywhere in data."""
        return self.search(data) is not None

    def finditer(self, data: ByteInput) -> Iterator[MatchResult]:
        """
        Iterate over successive non-overlapping matches.

        Each search resumes where the previous match ended; after an empty
        match it resumes one byte further on.
        """
        data = as_bytes(data)
        pos = 0
        while pos < len(data):
            result = self._search_from(data, pos)
            if result is None:
                return
            yield result
            pos = result.end if result.end > result.start else result.end + 1

    def findall(self, data: ByteInput) -> List[bytes]:
        """Return the bytes of every match found by finditer."""
        return [m.group() for m in self.finditer(data)]

    def disassemble(self, verbose: bool = False) -> str:
        return disassemble(self.program, verbose)

    def __repr__(self):
        return f"Pattern({self.source!r})"


def search(pattern: ByteInput, data: ByteInput) -> Optional[MatchResult]:
    """
    Search for pattern in data.

    Args:
        pattern: The pattern text
        data: The bytes to search

    Returns:
        Match result or None
    """
    return Pattern(pattern).search(data)


def test(pattern: ByteInput, data: ByteInput) -> bool:
    """
    Test if pattern matches data.

    Args:
        pattern: The pattern text
        data: The bytes to test

    Returns:
        True if matches, False otherwise
    """
    return Pattern(pattern).test(data)


def findall(pattern: ByteInput, data: ByteInput) -> List[bytes]:
    """Return every non-overlapping match of pattern in data."""
    return Pattern(pattern).findall(data)
