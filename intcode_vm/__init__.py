"""
Intcode VM
==========
A small stored-program virtual machine used as the execution engine behind
several puzzle drivers (amplifier chains, painting and maze robots, an arcade
controller, diagnostic programs). Drivers load a program, push inputs, and
read outputs; the machine suspends whenever it needs input it does not have.

Architecture:
    ┌────────────┐    ┌──────────┐    ┌──────────────┐    ┌────────────┐
    │ Source     │───>│  Loader  │───>│ ProgramState │<──>│   Host     │
    │ (1,2,3,..) │    │ (words)  │    │ step / run   │    │ (queues)   │
    └────────────┘    └──────────┘    └──────────────┘    └────────────┘
                                       │            │
                                  ┌────────┐   ┌─────────┐
                                  │ Memory │   │ Decoder │
                                  └────────┘   └─────────┘

    - memory.py:       paged sparse memory, unbounded address space
    - decoder.py:      opcode table and parameter modes
    - machine.py:      ProgramState: executor, state machine, run loops
    - loader.py:       comma-separated program source
    - disassembler.py: linear listing of a memory image
    - chain.py:        host-side round-robin over several instances
"""

__version__ = "0.4.0"

from .errors import (
    IntcodeError, IllegalOpcode, IllegalMode, ImmediateWriteFault,
    AddressFault, ElementOverflow, InputRequired, ProgramLoadError,
)
from .memory import Memory, PAGE_SIZE, ELEMENT_MIN, ELEMENT_MAX
from .decoder import Op, Mode, Instruction, Parameter, decode
from .loader import parse_program, load_program_file, format_program
from .machine import ProgramState, State


def run_program(program, inputs=()) -> list:
    """Run a program to completion with pre-supplied inputs, return its outputs.

    Args:
        program: list of words, or comma-separated source text.
        inputs: every input value the program will read.

    Raises:
        InputRequired: the program needed more input than was given.
    """
    if isinstance(program, str):
        vm = ProgramState.from_text(program, inputs)
    else:
        vm = ProgramState(program, inputs)
    vm.run_to_completion()
    return list(vm.outputs)
