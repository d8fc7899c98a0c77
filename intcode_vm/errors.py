"""
Intcode VM - Fault hierarchy

Every condition that aborts execution derives from IntcodeError, so a host
can tell a broken program (or caller misuse) apart from normal results with a
single except clause.

The "needs input" condition is NOT in this module: it is the
State.AWAITING_INPUT value returned by the run loop, and the machine stays
resumable. Only run_to_completion() turns it into InputRequired.
"""

from typing import Optional


class IntcodeError(Exception):
    """Base class for fatal interpreter faults."""
    def __init__(self, message: str, pc: Optional[int] = None):
        self.pc = pc
        super().__init__(f"pc={pc}: {message}" if pc is not None else message)


class IllegalOpcode(IntcodeError):
    """Instruction word does not encode a known opcode."""
    def __init__(self, word: int, pc: Optional[int] = None):
        self.word = word
        if word < 0:
            message = f"unrecognized opcode: negative instruction word {word}"
        else:
            message = f"unrecognized opcode {word % 100} (word {word})"
        super().__init__(message, pc)


class IllegalMode(IntcodeError):
    """Parameter mode digit outside {0, 1, 2}."""
    def __init__(self, digit: int, word: int, pc: Optional[int] = None):
        self.digit = digit
        self.word = word
        super().__init__(f"unrecognized mode {digit} in word {word}", pc)


class ImmediateWriteFault(IntcodeError):
    """Write attempted through an immediate-mode parameter."""


class AddressFault(IntcodeError):
    """Negative memory address or jump target."""


class ElementOverflow(IntcodeError):
    """Value does not fit the signed 64-bit program element."""


class InputRequired(IntcodeError):
    """run_to_completion() reached a read with an empty input queue."""


class ProgramLoadError(IntcodeError):
    """Program source is malformed or unreadable."""
