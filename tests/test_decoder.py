"""
Instruction decoder tests: opcode extraction, per-parameter modes, faults.
"""

import pytest
from intcode_vm import IllegalMode, IllegalOpcode, Memory, Mode, Op, decode
from intcode_vm.decoder import Parameter


def _decode(words, pc=0):
    return decode(Memory(words), pc)


class TestOpcodes:
    """Opcode recognition and instruction length."""

    def test_all_opcodes_and_lengths(self):
        cases = [
            (1, Op.ADD, 4),
            (2, Op.MUL, 4),
            (3, Op.IN, 2),
            (4, Op.OUT, 2),
            (5, Op.JNZ, 3),
            (6, Op.JZ, 3),
            (7, Op.LT, 4),
            (8, Op.EQ, 4),
            (9, Op.ARB, 2),
            (99, Op.HALT, 1),
        ]
        for word, opcode, length in cases:
            instr = _decode([word, 0, 0, 0])
            assert instr.opcode == opcode, word
            assert instr.length == length, word

    def test_operands_are_raw_words(self):
        instr = _decode([0, 0, 1, 5, -6, 7], pc=2)
        assert instr.address == 2
        assert [p.value for p in instr.params] == [5, -6, 7]

    @pytest.mark.parametrize("word", [0, 10, 42, 98, 100])
    def test_unknown_opcode(self, word):
        with pytest.raises(IllegalOpcode, match="unrecognized opcode"):
            _decode([word])

    def test_negative_word_is_not_halt(self):
        """-1 % 100 is 99 in Python; the word must still be rejected."""
        with pytest.raises(IllegalOpcode, match="negative instruction word -1") as info:
            _decode([-1])
        assert "opcode 99" not in str(info.value)

    def test_fault_carries_pc(self):
        with pytest.raises(IllegalOpcode) as info:
            _decode([99, 99, 42], pc=2)
        assert info.value.pc == 2
        assert info.value.word == 42


class TestModes:
    """Parameter mode digits."""

    def test_mixed_modes(self):
        """1002: MUL, modes 0,1,0 read least-significant first."""
        instr = _decode([1002, 4, 3, 4, 33])
        assert instr.opcode == Op.MUL
        assert instr.params == (
            Parameter(Mode.POSITION, 4),
            Parameter(Mode.IMMEDIATE, 3),
            Parameter(Mode.POSITION, 4),
        )

    def test_relative_mode(self):
        instr = _decode([204, -34])
        assert instr.opcode == Op.OUT
        assert instr.params == (Parameter(Mode.RELATIVE, -34),)

    def test_three_modes(self):
        instr = _decode([21101, 3, 4, 5])
        assert [p.mode for p in instr.params] == [
            Mode.IMMEDIATE, Mode.IMMEDIATE, Mode.RELATIVE,
        ]

    def test_unknown_mode(self):
        with pytest.raises(IllegalMode, match="unrecognized mode 3"):
            _decode([301, 0, 0, 0])

    def test_unknown_mode_in_later_parameter(self):
        with pytest.raises(IllegalMode) as info:
            _decode([5007, 0, 0, 0])
        assert info.value.digit == 5


class TestFormatting:
    """Mnemonic and operand rendering."""

    def test_instruction_format(self):
        assert _decode([1002, 4, 3, 4]).format() == 'MUL [4], #3, [4]'

    def test_relative_format(self):
        assert _decode([109, 19]).format() == 'ARB #19'
        assert _decode([204, -34]).format() == 'OUT rb[-34]'
        assert _decode([203, 2]).format() == 'IN rb[+2]'

    def test_halt_format(self):
        assert _decode([99]).format() == 'HALT'
