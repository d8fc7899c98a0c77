"""
Intcode VM - Instruction decoder / opcode table

Instruction word layout (decimal, not binary):

    ...CBA OO
       |||  +-- opcode           = word % 100
       ||+----- mode of param 1  = (word // 100)   % 10
       |+------ mode of param 2  = (word // 1000)  % 10
       +------- mode of param 3  = (word // 10000) % 10

Parameter modes:
  POSITION   0   operand is an address
  IMMEDIATE  1   operand is the value itself (never a write target)
  RELATIVE   2   operand is an offset from the relative base register

The operands are the raw words at pc+1 .. pc+N. Instructions are decoded
fresh every step and never stored.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, NamedTuple, Optional, Tuple

from .errors import IllegalMode, IllegalOpcode


class Op(IntEnum):
    ADD = 1
    MUL = 2
    IN = 3
    OUT = 4
    JNZ = 5     # jump-if-true
    JZ = 6      # jump-if-false
    LT = 7
    EQ = 8
    ARB = 9     # adjust relative base
    HALT = 99


class Mode(IntEnum):
    POSITION = 0
    IMMEDIATE = 1
    RELATIVE = 2


# ──────────────────────────────────────────────
# Opcode table
# ──────────────────────────────────────────────
# Format: opcode -> (mnemonic, parameter_count)

OPCODES: Dict[int, Tuple[str, int]] = {
    Op.ADD:  ('ADD',  3),
    Op.MUL:  ('MUL',  3),
    Op.IN:   ('IN',   1),
    Op.OUT:  ('OUT',  1),
    Op.JNZ:  ('JNZ',  2),
    Op.JZ:   ('JZ',   2),
    Op.LT:   ('LT',   3),
    Op.EQ:   ('EQ',   3),
    Op.ARB:  ('ARB',  1),
    Op.HALT: ('HALT', 0),
}


class Parameter(NamedTuple):
    mode: Mode
    value: int

    def format(self) -> str:
        """Render as [n] (position), #n (immediate) or rb[+n] (relative)."""
        if self.mode == Mode.POSITION:
            return f'[{self.value}]'
        if self.mode == Mode.IMMEDIATE:
            return f'#{self.value}'
        return f'rb[{self.value:+d}]'


@dataclass(frozen=True)
class Instruction:
    """One decoded instruction at a given address."""
    address: int
    opcode: Op
    params: Tuple[Parameter, ...]

    @property
    def mnemonic(self) -> str:
        return OPCODES[self.opcode][0]

    @property
    def length(self) -> int:
        """Words consumed: the instruction word plus one per parameter."""
        return len(self.params) + 1

    def format(self) -> str:
        operands = ', '.join(p.format() for p in self.params)
        return f'{self.mnemonic} {operands}'.rstrip()


def decode_opcode(word: int, pc: Optional[int] = None) -> Op:
    """Map an instruction word to its Op, raising IllegalOpcode if unknown."""
    # negative words are never instructions; -1 % 100 == 99 in Python
    if word < 0 or word % 100 not in OPCODES:
        raise IllegalOpcode(word, pc)
    return Op(word % 100)


def decode(memory, pc: int) -> Instruction:
    """Decode the instruction at pc.

    Raises:
        IllegalOpcode: low two digits are not a defined opcode
        IllegalMode: a mode digit for one of the parameters is not 0, 1 or 2
    """
    word = memory.read(pc)
    opcode = decode_opcode(word, pc)
    count = OPCODES[opcode][1]

    modes = word // 100
    params = []
    for i in range(count):
        digit = modes % 10
        modes //= 10
        if digit not in (0, 1, 2):
            raise IllegalMode(digit, word, pc)
        params.append(Parameter(Mode(digit), memory.read(pc + 1 + i)))

    return Instruction(pc, opcode, tuple(params))
