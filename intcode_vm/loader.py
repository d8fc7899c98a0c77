"""
Intcode VM - Program source loader

Source format: decimal integers (optionally negative) separated by commas,
with any amount of whitespace or newlines around each token. A single
trailing comma is tolerated, as puzzle inputs are sometimes saved that way.

    1,9,10,3,
    2,3,11,0,
    99,30,40,50
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Union

from .errors import ElementOverflow, ProgramLoadError
from .memory import check_element


log = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_program(text: str) -> List[int]:
    """Parse comma-separated program text into a list of words.

    Raises:
        ProgramLoadError: empty source, an empty or non-integer token, or a
            value outside the signed 64-bit range
    """
    tokens = [token.strip() for token in text.split(',')]
    if tokens and tokens[-1] == '' and len(tokens) > 1:
        tokens.pop()

    if tokens == ['']:
        raise ProgramLoadError("program source is empty")

    program = []
    for index, token in enumerate(tokens):
        if not _INTEGER.fullmatch(token):
            raise ProgramLoadError(f"token {index}: {token!r} is not an integer")
        try:
            program.append(check_element(int(token)))
        except ElementOverflow as e:
            raise ProgramLoadError(f"token {index}: {e}") from e
    return program


def load_program_file(path: Union[str, Path]) -> List[int]:
    """Read and parse a program source file.

    I/O and decoding failures are reported as ProgramLoadError.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ProgramLoadError(f"cannot read {path}: {e}") from e

    program = parse_program(text)
    log.debug("loaded %d words from %s", len(program), path)
    return program


def format_program(values: Iterable[int]) -> str:
    """Inverse of parse_program()."""
    return ','.join(str(value) for value in values)
