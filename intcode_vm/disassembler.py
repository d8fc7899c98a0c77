"""
Intcode VM - Linear disassembler

Walks a memory image from start to end, decoding each instruction with the
same decoder the machine uses. Programs mix code and data freely, so a word
that does not decode is emitted as a one-word DATA entry and the walk
continues with the next word.

    from intcode_vm import Memory
    from intcode_vm.disassembler import disassemble

    for entry in disassemble(Memory([1002, 4, 3, 4, 33])):
        print(entry.format())
    # 000000: 1002 4 3 4         MUL [4], #3, [4]
    # 000004: 33                 DATA 33
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .decoder import decode
from .errors import IllegalMode, IllegalOpcode
from .memory import Memory


@dataclass
class DisassembledInstruction:
    address: int
    words: Tuple[int, ...]
    mnemonic: str
    operands: str = ''

    def format(self) -> str:
        raw = ' '.join(str(w) for w in self.words)
        text = f'{self.mnemonic} {self.operands}'.rstrip()
        return f'{self.address:06d}: {raw:18s} {text}'


def disassemble(memory: Memory, start: int = 0,
                end: Optional[int] = None) -> List[DisassembledInstruction]:
    """Disassemble memory[start:end]; end defaults to len(memory).

    A negative start is clamped to address 0.
    """
    start = max(start, 0)
    if end is None:
        end = len(memory)

    listing = []
    addr = start
    while addr < end:
        try:
            instr = decode(memory, addr)
        except (IllegalOpcode, IllegalMode):
            word = memory.read(addr)
            listing.append(DisassembledInstruction(addr, (word,), 'DATA', str(word)))
            addr += 1
            continue

        words = tuple(memory.read(addr + i) for i in range(instr.length))
        operands = ', '.join(p.format() for p in instr.params)
        listing.append(DisassembledInstruction(addr, words, instr.mnemonic, operands))
        addr += instr.length
    return listing


def format_listing(listing: List[DisassembledInstruction]) -> str:
    return '\n'.join(entry.format() for entry in listing)
