"""Pattern engine error types and exceptions."""

from typing import Optional


class PatternError(Exception):
    """Base class for all pattern errors."""

    def __init__(self, message: str = "", name: str = "PatternError"):
        self.message = message
        self.name = name
        super().__init__(f"{name}: {message}" if message else name)


class PatternSyntaxError(PatternError):
    """Malformed pattern, reported with the offending byte index."""

    def __init__(self, message: str = "", index: int = 0):
        self.index = index
        super().__init__(f"{message} (index {index})", "SyntaxError")


class ProgramTooLargeError(PatternError):
    """Raised when a compiled pattern exceeds the instruction capacity."""

    def __init__(self, message: str = "Program too large"):
        super().__init__(message, "CapacityError")


class PatternStackOverflow(PatternError):
    """Raised when the VM call stack depth is exceeded."""

    def __init__(self, message: str = "Call stack overflow"):
        super().__init__(message, "StackOverflow")


class PatternInternalError(PatternError):
    """Inconsistent program detected by the VM (a compiler defect)."""

    def __init__(self, message: str = "", pc: Optional[int] = None):
        self.pc = pc
        if pc is not None:
            message = f"{message} (pc {pc})"
        super().__init__(message, "InternalError")
