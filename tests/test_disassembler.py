"""
Disassembler tests.
"""

from intcode_vm import Memory
from intcode_vm.disassembler import disassemble, format_listing


class TestDisassemble:
    """Linear walk over a memory image."""

    def test_instruction_then_data(self):
        """1002,4,3,4 decodes as MUL; 33 is not an opcode and becomes DATA."""
        listing = disassemble(Memory([1002, 4, 3, 4, 33]))
        assert [(e.address, e.mnemonic) for e in listing] == [(0, 'MUL'), (4, 'DATA')]
        assert listing[0].words == (1002, 4, 3, 4)
        assert listing[0].operands == '[4], #3, [4]'
        assert listing[1].words == (33,)

    def test_relative_operands(self):
        listing = disassemble(Memory([109, 19, 204, -34, 99]))
        assert [e.format().split(None, 1)[0] for e in listing] == ['000000:', '000002:', '000004:']
        assert [(e.mnemonic, e.operands) for e in listing] == [
            ('ARB', '#19'),
            ('OUT', 'rb[-34]'),
            ('HALT', ''),
        ]

    def test_bad_mode_is_data(self):
        listing = disassemble(Memory([301, 0, 99]))
        assert [e.mnemonic for e in listing] == ['DATA', 'DATA', 'HALT']

    def test_range(self):
        listing = disassemble(Memory([99, 99, 104, 7, 99]), start=2, end=4)
        assert len(listing) == 1
        assert listing[0].address == 2
        assert listing[0].mnemonic == 'OUT'

    def test_negative_start_clamped(self):
        listing = disassemble(Memory([104, 1, 99]), start=-3)
        assert [e.address for e in listing] == [0, 2]
        assert listing[0].mnemonic == 'OUT'

    def test_empty_memory(self):
        assert disassemble(Memory()) == []

    def test_format(self):
        line = disassemble(Memory([1002, 4, 3, 4]))[0].format()
        assert line.startswith('000000: 1002 4 3 4 ')
        assert line.endswith(' MUL [4], #3, [4]')

    def test_format_listing(self):
        text = format_listing(disassemble(Memory([104, 1, 99])))
        lines = text.splitlines()
        assert len(lines) == 2
        assert lines[0].endswith('OUT #1')
        assert lines[1].endswith('HALT')
