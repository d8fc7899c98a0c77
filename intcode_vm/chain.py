"""
Intcode VM - Cooperative chains of instances

Host-side orchestration of several machines wired output-to-input. Nothing
here runs concurrently: the host round-robins run_to_next_input() over the
instances and forwards outputs by hand, so the schedule is deterministic.

  serial:    phase_0 -> A -> B -> C -> D -> E -> result
  feedback:  A -> B -> C -> D -> E -+
             ^----------------------+   until E halts

Every instance is a clone() of the loaded image, seeded with its phase
setting as the first input.
"""

import itertools
import logging
from typing import List, Sequence, Tuple

from .errors import IntcodeError
from .machine import ProgramState


log = logging.getLogger(__name__)


class ChainError(IntcodeError):
    """An instance in the chain produced no output for a round."""


def _spawn(program: ProgramState, phases: Sequence[int]) -> List[ProgramState]:
    if not phases:
        raise ChainError("no phase settings given")
    instances = []
    for phase in phases:
        vm = program.clone()
        vm.push_input(phase)
        instances.append(vm)
    return instances


def run_serial(program: ProgramState, phases: Sequence[int], signal: int = 0) -> int:
    """Pass signal once through a chain of instances and return the final output."""
    for index, vm in enumerate(_spawn(program, phases)):
        vm.push_input(signal)
        vm.run_to_completion()
        if not vm.outputs:
            raise ChainError(f"instance {index} halted without output")
        signal = vm.outputs[-1]
    return signal


def run_feedback_loop(program: ProgramState, phases: Sequence[int],
                      signal: int = 0) -> int:
    """Run a ring of instances until the last one halts.

    Returns the last signal emitted by the final instance.
    """
    instances = _spawn(program, phases)
    rounds = 0
    index = 0
    while not instances[-1].terminated:
        vm = instances[index]
        vm.push_input(signal)
        vm.run_to_next_input()
        produced = vm.drain_output()
        if not produced:
            raise ChainError(f"instance {index} produced no output in round {rounds}")
        signal = produced[-1]

        index = (index + 1) % len(instances)
        if index == 0:
            rounds += 1

    log.debug("feedback loop %s finished after %d rounds: %d",
              tuple(phases), rounds, signal)
    return signal


def best_phase_setting(program: ProgramState, phases: Sequence[int],
                       feedback: bool = False) -> Tuple[int, Tuple[int, ...]]:
    """Try every ordering of phases and return (max_signal, ordering)."""
    if not phases:
        raise ChainError("no phase settings given")

    run = run_feedback_loop if feedback else run_serial
    best = None
    for ordering in itertools.permutations(phases):
        signal = run(program, ordering)
        if best is None or signal > best[0]:
            best = (signal, ordering)
    log.info("best phase setting %s -> %d", best[1], best[0])
    return best
