"""Tests for the pattern compiler."""

import dataclasses

import pytest

from bytepattern import MAX_PROGRAM_SIZE, PatternCompiler, compile
from bytepattern.opcodes import OpCode as Op, decode_instruction


def ops(pattern):
    """Compile pattern and decode its instructions to (opcode, arg) pairs."""
    program = compile(pattern)
    assert program.error == 0
    return [decode_instruction(i) for i in program.instructions]


def b(ch):
    return ord(ch)


class TestAtoms:
    """Test code generation for single atoms."""

    def test_literals(self):
        assert ops(b"abc") == [
            (Op.MATCH_OR_RET_F, b('a')),
            (Op.MATCH_OR_RET_F, b('b')),
            (Op.MATCH_OR_RET_F, b('c')),
            (Op.RET, 1),
        ]

    def test_empty_pattern(self):
        assert ops(b"") == [(Op.RET, 1)]

    def test_optional(self):
        assert ops(b"a?") == [(Op.MATCH, b('a')), (Op.RET, 1)]

    def test_star(self):
        assert ops(b"a*") == [(Op.MATCH_AND_RPT, b('a')), (Op.RET, 1)]

    def test_plus(self):
        assert ops(b"a+") == [
            (Op.MATCH_OR_RET_F, b('a')),
            (Op.MATCH_AND_RPT, b('a')),
            (Op.RET, 1),
        ]

    def test_builtin_class(self):
        assert ops(b"%d") == [(Op.MATCH_BUILTIN_OR_RET_F, b('d')), (Op.RET, 1)]
        assert ops(b"%W?") == [(Op.MATCH_BUILTIN, b('W')), (Op.RET, 1)]
        assert ops(b"%s+") == [
            (Op.MATCH_BUILTIN_OR_RET_F, b('s')),
            (Op.MATCH_BUILTIN_AND_RPT, b('s')),
            (Op.RET, 1),
        ]

    def test_dot_is_any_byte(self):
        assert ops(b".*") == [(Op.MATCH_BUILTIN_AND_RPT, b('.')), (Op.RET, 1)]

    @pytest.mark.parametrize("escaped", list("%.+*?^$[]"))
    def test_literal_escapes(self, escaped):
        assert ops(b"%" + escaped.encode()) == [
            (Op.MATCH_OR_RET_F, b(escaped)),
            (Op.RET, 1),
        ]

    def test_escaped_quantifier_can_be_quantified(self):
        assert ops(b"%++") == [
            (Op.MATCH_OR_RET_F, b('+')),
            (Op.MATCH_AND_RPT, b('+')),
            (Op.RET, 1),
        ]

    def test_anchors(self):
        assert ops(b"^a$") == [
            (Op.MATCH_START_END, b('^')),
            (Op.MATCH_OR_RET_F, b('a')),
            (Op.MATCH_START_END, b('$')),
            (Op.RET, 1),
        ]

    def test_str_pattern(self):
        assert compile("a%d") == compile(b"a%d")

    def test_pattern_type(self):
        with pytest.raises(TypeError):
            compile(42)


class TestBracketClasses:
    """Test code generation for bracket classes."""

    def test_class(self):
        assert ops(b"[ab]") == [
            (Op.JUMP, 4),
            (Op.MATCH_AND_RET_T, b('a')),
            (Op.MATCH_AND_RET_T, b('b')),
            (Op.RET, 0),
            (Op.CALL, 1),
            (Op.RET_F_IF_RET_F, 0),
            (Op.RET, 1),
        ]

    def test_negated_class(self):
        """Each member of a negated class fails the subroutine."""
        assert ops(b"[^ab]") == [
            (Op.JUMP, 5),
            (Op.MATCH_AND_RET_F, b('a')),
            (Op.MATCH_AND_RET_F, b('b')),
            (Op.MATCH_BUILTIN_AND_RET_T, b('.')),
            (Op.RET, 0),
            (Op.CALL, 1),
            (Op.RET_F_IF_RET_F, 0),
            (Op.RET, 1),
        ]

    def test_class_quantifiers(self):
        assert ops(b"[a]?")[3:] == [(Op.CALL, 1), (Op.RET, 1)]
        assert ops(b"[a]*")[3:] == [
            (Op.CALL, 1),
            (Op.RPT_IF_RET_T, 0),
            (Op.RET, 1),
        ]
        assert ops(b"[a]+")[3:] == [
            (Op.CALL, 1),
            (Op.RET_F_IF_RET_F, 0),
            (Op.CALL, 1),
            (Op.RPT_IF_RET_T, 0),
            (Op.RET, 1),
        ]

    def test_class_members(self):
        """Escapes and built-ins inside a class; '.' and '[' are literal."""
        assert ops(b"[%a.[%]]")[1:5] == [
            (Op.MATCH_BUILTIN_AND_RET_T, b('a')),
            (Op.MATCH_AND_RET_T, b('.')),
            (Op.MATCH_AND_RET_T, b('[')),
            (Op.MATCH_AND_RET_T, b(']')),
        ]

    def test_negated_builtin_member(self):
        assert ops(b"[^%d]")[1] == (Op.MATCH_BUILTIN_AND_RET_F, b('d'))

    def test_empty_class(self):
        assert ops(b"[]") == [
            (Op.JUMP, 2),
            (Op.RET, 0),
            (Op.CALL, 1),
            (Op.RET_F_IF_RET_F, 0),
            (Op.RET, 1),
        ]

    def test_second_class_jumps_past_first(self):
        code = ops(b"[a][b]")
        assert code[5] == (Op.JUMP, 8)
        assert code[8] == (Op.CALL, 6)


class TestSyntaxErrors:
    """Syntax errors are recorded as -1 - index of the offending byte."""

    @pytest.mark.parametrize("pattern,index", [
        (b"a]", 1),
        (b"*a", 0),
        (b"+", 0),
        (b"?", 0),
        (b"a**", 2),
        (b"^*", 1),
        (b"%q", 0),
        (b"ab%", 2),
        (b"[abc", 4),
        (b"[", 1),
        (b"[%q]", 1),
        (b"[a]+?", 4),
    ])
    def test_error_index(self, pattern, index):
        program = compile(pattern)
        assert program.error == -(index + 1)
        assert program.error_index == index
        assert not program.ok

    def test_compile_does_not_raise(self):
        program = compile(b"]]]")
        assert program.error == -1


class TestCapacity:
    """Test the instruction capacity guard."""

    def test_exact_fit(self):
        program = compile(b"a" * (MAX_PROGRAM_SIZE - 1))
        assert program.error == 0
        assert program.instruction_count == MAX_PROGRAM_SIZE

    def test_overflow(self):
        program = compile(b"a" * MAX_PROGRAM_SIZE)
        assert program.error == 1
        assert program.instruction_count == MAX_PROGRAM_SIZE

    def test_overflow_is_deterministic(self):
        assert compile(b"[ab]+" * 200) == compile(b"[ab]+" * 200)
        assert compile(b"[ab]+" * 200).error == 1

    def test_syntax_error_after_overflow(self):
        """Scanning continues after an overflow, so later syntax errors win."""
        program = compile(b"a" * 600 + b"]")
        assert program.error == -601

    def test_custom_capacity(self):
        compiler = PatternCompiler(max_program_size=4)
        assert compiler.compile(b"abc").error == 0
        assert compiler.compile(b"abcd").error == 1

    def test_capacity_fits_jump_targets(self):
        with pytest.raises(ValueError):
            PatternCompiler(max_program_size=0x2000)
        with pytest.raises(ValueError):
            PatternCompiler(max_program_size=0)


class TestProgram:
    """Test the compiled Program value."""

    def test_immutable(self):
        program = compile(b"abc")
        with pytest.raises(dataclasses.FrozenInstanceError):
            program.error = 1

    def test_starts_with_anchor(self):
        assert compile(b"^a").starts_with_anchor
        assert not compile(b"a^").starts_with_anchor
        assert not compile(b"%^a").starts_with_anchor
        assert not compile(b"a$").starts_with_anchor

    def test_compiler_reuse(self):
        compiler = PatternCompiler()
        first = compiler.compile(b"a]")
        second = compiler.compile(b"abc")
        assert first.error == -2
        assert second.error == 0
        assert second == compile(b"abc")
