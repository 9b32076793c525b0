"""
ASCII character classifiers.

Every predicate takes a single byte value (an int in 0..255). Bytes above
0x7F belong to no class.
"""

from typing import Callable, Dict

from .errors import PatternInternalError


# End-of-input marker handed to the classifiers by the VM. It is outside the
# byte range, so no literal and no built-in class can match it.
NO_INPUT = 0x1000

PUNCTUATION = frozenset(b"!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")
WHITESPACE = frozenset(b" \t\r\n\f\v")

# Letters accepted after '%'; the uppercase form is the complement.
CLASS_LETTERS = frozenset(b"acdlpsuwxzACDLPSUWXZ")

ANY = ord(".")


def is_letter(c: int) -> bool:
    return 0x41 <= c <= 0x5A or 0x61 <= c <= 0x7A


def is_control(c: int) -> bool:
    return 0 <= c <= 0x1F or c == 0x7F


def is_digit(c: int) -> bool:
    return 0x30 <= c <= 0x39


def is_lower(c: int) -> bool:
    return 0x61 <= c <= 0x7A


def is_upper(c: int) -> bool:
    return 0x41 <= c <= 0x5A


def is_punctuation(c: int) -> bool:
    return c in PUNCTUATION


def is_whitespace(c: int) -> bool:
    return c in WHITESPACE


def is_alnum(c: int) -> bool:
    return is_digit(c) or is_letter(c)


def is_hexdigit(c: int) -> bool:
    return is_digit(c) or 0x41 <= c <= 0x46 or 0x61 <= c <= 0x66


def is_nul(c: int) -> bool:
    return c == 0


BUILTIN_CLASSES: Dict[int, Callable[[int], bool]] = {
    ord('a'): is_letter,
    ord('c'): is_control,
    ord('d'): is_digit,
    ord('l'): is_lower,
    ord('p'): is_punctuation,
    ord('s'): is_whitespace,
    ord('u'): is_upper,
    ord('w'): is_alnum,
    ord('x'): is_hexdigit,
    ord('z'): is_nul,
}


def builtin_matches(letter: int, value: int) -> bool:
    """
    Evaluate a built-in class against one input value.

    Args:
        letter: Class letter ('.' or one of CLASS_LETTERS) as a byte value
        value: Input byte, or NO_INPUT at end of input

    Returns:
        True if the value belongs to the class
    """
    if letter == ANY:
        return value != NO_INPUT

    predicate = BUILTIN_CLASSES.get(letter | 0x20)
    if predicate is None or letter not in CLASS_LETTERS:
        raise PatternInternalError(f"Invalid built-in class {letter!r}")

    if value == NO_INPUT:
        return False

    # Uppercase letters name the complement
    if is_upper(letter):
        return not predicate(value)
    return predicate(value)
