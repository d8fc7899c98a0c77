"""
Intcode VM - Program state, executor and run loop

This is the top-level class that owns all mutable execution state:
  - Memory (memory.py)
  - program counter and relative base register
  - input / output queues
  - terminated flag

Execution model:
  1. Decode instruction at pc (decoder.py)
  2. Resolve parameters against memory / relative base
  3. Execute handler: update memory, registers, queues
  4. Advance pc by instruction length unless a jump was taken

Machine states:
  RUNNING         can execute the next instruction
  AWAITING_INPUT  IN executed with an empty input queue; pc is unchanged
                  and the same IN is retried once input is pushed
  TERMINATED      HALT executed; absorbing, further steps do nothing

Fatal faults raise IntcodeError subclasses (errors.py). Waiting for input is
not a fault: it is returned as State.AWAITING_INPUT.
"""

import logging
from collections import deque
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from .decoder import Instruction, Mode, Op, Parameter, decode
from .errors import (
    AddressFault, ElementOverflow, ImmediateWriteFault, InputRequired,
)
from .loader import load_program_file, parse_program
from .memory import Memory, check_element


log = logging.getLogger(__name__)


class State(Enum):
    RUNNING = 'RUNNING'
    AWAITING_INPUT = 'AWAITING_INPUT'
    TERMINATED = 'TERMINATED'


class ProgramState:
    """One interpreter instance.

    Usage:
        vm = ProgramState.from_file('input.txt')
        vm.write(1, 12)               # patch a configuration cell
        vm.push_input(5)
        vm.run_to_completion()
        print(list(vm.outputs))

    Cooperative use (several instances feeding each other):
        vm.push_input(signal)
        if vm.run_to_next_input() is State.AWAITING_INPUT:
            ...forward vm.drain_output() to the next instance...
    """

    def __init__(self, program: Iterable[int] = (), inputs: Iterable[int] = ()):
        self.memory = Memory(program)
        self.inputs: deque = deque()
        self.outputs: deque = deque()
        self.pc: int = 0
        self.relative_base: int = 0
        self.steps: int = 0           # executed instructions, informational
        self._terminated = False
        self._blocked = False         # last IN found the input queue empty

        self._trace = False
        self._trace_output: List[str] = []

        self._dispatch = self._build_dispatch()
        self.extend_input(inputs)

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    @classmethod
    def from_text(cls, text: str, inputs: Iterable[int] = ()) -> 'ProgramState':
        """Build from comma-separated program text."""
        return cls(parse_program(text), inputs)

    @classmethod
    def from_file(cls, path: Union[str, Path],
                  inputs: Iterable[int] = ()) -> 'ProgramState':
        """Load and parse a program source file."""
        return cls(load_program_file(path), inputs)

    def clone(self) -> 'ProgramState':
        """Independent copy: no memory page or queue is shared with self."""
        other = ProgramState.__new__(ProgramState)
        other.memory = self.memory.copy()
        other.inputs = deque(self.inputs)
        other.outputs = deque(self.outputs)
        other.pc = self.pc
        other.relative_base = self.relative_base
        other.steps = self.steps
        other._terminated = self._terminated
        other._blocked = self._blocked
        other._trace = self._trace
        other._trace_output = list(self._trace_output)
        other._dispatch = other._build_dispatch()
        log.debug("cloned state at pc=%d (%d pages)", self.pc, self.memory.page_count)
        return other

    __copy__ = clone

    def __deepcopy__(self, memo) -> 'ProgramState':
        return self.clone()

    # ══════════════════════════════════════════════
    # Host interface
    # ══════════════════════════════════════════════

    def push_input(self, value: int):
        self.inputs.append(check_element(value))

    def extend_input(self, values: Iterable[int]):
        for value in values:
            self.push_input(value)

    def pop_output(self) -> Optional[int]:
        """Remove and return the oldest output, or None if there is none."""
        return self.outputs.popleft() if self.outputs else None

    def peek_output(self) -> Optional[int]:
        return self.outputs[0] if self.outputs else None

    def drain_output(self) -> List[int]:
        """Remove and return every pending output, oldest first."""
        values = list(self.outputs)
        self.outputs.clear()
        return values

    def read(self, addr: int) -> int:
        return self.memory.read(addr)

    def write(self, addr: int, value: int):
        self.memory.write(addr, value)

    @property
    def terminated(self) -> bool:
        return self._terminated

    @property
    def awaiting_input(self) -> bool:
        """True while suspended on IN and no input has been pushed since."""
        return self._blocked and not self.inputs and not self._terminated

    @property
    def state(self) -> State:
        if self._terminated:
            return State.TERMINATED
        if self.awaiting_input:
            return State.AWAITING_INPUT
        return State.RUNNING

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> State:
        """Execute one instruction and return the resulting state.

        An IN against an empty queue leaves pc and relative_base untouched
        and returns State.AWAITING_INPUT. Fatal faults propagate as
        IntcodeError subclasses.
        """
        if self._terminated:
            return State.TERMINATED

        pc = self.pc
        try:
            instr = decode(self.memory, pc)
            line = self._trace_line(instr) if self._trace else None
            self.pc = self._dispatch[instr.opcode](instr)
        except (AddressFault, ElementOverflow) as e:
            if e.pc is not None:
                raise
            raise type(e)(str(e), pc) from e

        if self._blocked:
            return State.AWAITING_INPUT
        if line is not None:
            self._trace_output.append(line)
            log.debug(line)
        self.steps += 1
        return State.TERMINATED if self._terminated else State.RUNNING

    def run_to_next_input(self) -> State:
        """Run until the program needs input it does not have, or halts.

        This is the only suspension point. Push more input and call again to
        resume at the same IN instruction.
        """
        while True:
            state = self.step()
            if state is not State.RUNNING:
                break
        if state is State.AWAITING_INPUT:
            log.debug("suspended for input at pc=%d after %d steps",
                      self.pc, self.steps)
        return state

    def run_to_completion(self):
        """Run until HALT.

        All input must already be queued. Suspending for input in this mode
        raises InputRequired instead of returning.
        """
        if self.run_to_next_input() is State.AWAITING_INPUT:
            raise InputRequired("program requested input but the queue is empty",
                                self.pc)

    # ══════════════════════════════════════════════
    # Operand resolution
    # ══════════════════════════════════════════════

    def _load(self, param: Parameter) -> int:
        """Resolve a parameter for reading."""
        if param.mode == Mode.IMMEDIATE:
            return param.value
        return self.memory.read(self._address(param))

    def _address(self, param: Parameter) -> int:
        """Resolve a parameter as a memory address (write target)."""
        if param.mode == Mode.POSITION:
            return param.value
        if param.mode == Mode.RELATIVE:
            return self.relative_base + param.value
        raise ImmediateWriteFault("write through immediate-mode parameter", self.pc)

    def _store(self, param: Parameter, value: int):
        self.memory.write(self._address(param), value)

    def _jump_target(self, param: Parameter) -> int:
        target = self._load(param)
        if target < 0:
            raise AddressFault(f"jump to negative address {target}", self.pc)
        return target

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(instr) -> next pc

    def _build_dispatch(self) -> Dict[Op, Callable[[Instruction], int]]:
        return {
            Op.ADD:  self._op_add,
            Op.MUL:  self._op_mul,
            Op.IN:   self._op_in,
            Op.OUT:  self._op_out,
            Op.JNZ:  self._op_jnz,
            Op.JZ:   self._op_jz,
            Op.LT:   self._op_lt,
            Op.EQ:   self._op_eq,
            Op.ARB:  self._op_arb,
            Op.HALT: self._op_halt,
        }

    def _op_add(self, instr: Instruction) -> int:
        a, b, dst = instr.params
        self._store(dst, self._load(a) + self._load(b))
        return instr.address + instr.length

    def _op_mul(self, instr: Instruction) -> int:
        a, b, dst = instr.params
        self._store(dst, self._load(a) * self._load(b))
        return instr.address + instr.length

    def _op_in(self, instr: Instruction) -> int:
        dst, = instr.params
        if not self.inputs:
            self._blocked = True
            return instr.address
        # resolve the target before consuming so a fault leaves the queue intact
        addr = self._address(dst)
        self.memory.write(addr, self.inputs.popleft())
        self._blocked = False
        return instr.address + instr.length

    def _op_out(self, instr: Instruction) -> int:
        a, = instr.params
        self.outputs.append(self._load(a))
        return instr.address + instr.length

    def _op_jnz(self, instr: Instruction) -> int:
        test, target = instr.params
        if self._load(test) != 0:
            return self._jump_target(target)
        return instr.address + instr.length

    def _op_jz(self, instr: Instruction) -> int:
        test, target = instr.params
        if self._load(test) == 0:
            return self._jump_target(target)
        return instr.address + instr.length

    def _op_lt(self, instr: Instruction) -> int:
        a, b, dst = instr.params
        self._store(dst, 1 if self._load(a) < self._load(b) else 0)
        return instr.address + instr.length

    def _op_eq(self, instr: Instruction) -> int:
        a, b, dst = instr.params
        self._store(dst, 1 if self._load(a) == self._load(b) else 0)
        return instr.address + instr.length

    def _op_arb(self, instr: Instruction) -> int:
        a, = instr.params
        self.relative_base = check_element(self.relative_base + self._load(a))
        return instr.address + instr.length

    def _op_halt(self, instr: Instruction) -> int:
        self._terminated = True
        log.info("terminated at pc=%d after %d steps, %d outputs pending",
                 instr.address, self.steps + 1, len(self.outputs))
        return instr.address + instr.length

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Record every executed instruction (also logged at DEBUG)."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def _trace_line(self, instr: Instruction) -> str:
        return f"{instr.address:06d}: {instr.format():32s} rb={self.relative_base}"

    def __repr__(self) -> str:
        return (f"ProgramState(pc={self.pc}, relative_base={self.relative_base}, "
                f"state={self.state.value}, inputs={len(self.inputs)}, "
                f"outputs={len(self.outputs)})")
