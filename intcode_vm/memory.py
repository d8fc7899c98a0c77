"""
Intcode VM - Paged sparse memory

The address space is unbounded: any non-negative address can be written and
anything never written reads as 0. Storage is a dict of fixed-size pages
keyed by addr // PAGE_SIZE, allocated on the first write into that page, so
the cost follows the addresses actually touched rather than the largest one.

  page index  = addr // PAGE_SIZE
  page offset = addr %  PAGE_SIZE

Reads from a page that was never allocated return 0 without allocating.
"""

from typing import Dict, Iterable, List, Tuple

from .errors import AddressFault, ElementOverflow


PAGE_SIZE = 1024

# Signed 64-bit program element
ELEMENT_MIN = -(2 ** 63)
ELEMENT_MAX = 2 ** 63 - 1


def check_element(value: int) -> int:
    """Return value unchanged, or raise ElementOverflow if it is out of range."""
    if not ELEMENT_MIN <= value <= ELEMENT_MAX:
        raise ElementOverflow(f"value {value} outside signed 64-bit range")
    return value


class Memory:
    """Unbounded word-addressable memory built from lazily allocated pages.

    Usage:
        mem = Memory([1, 0, 0, 0, 99])
        mem[10_000_000]          # -> 0, nothing allocated
        mem[10_000_000] = 5      # allocates one page
    """

    __slots__ = ('_pages', '_extent')

    def __init__(self, values: Iterable[int] = ()):
        self._pages: Dict[int, List[int]] = {}
        self._extent = 0    # one past the highest address written
        self.load(values)

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        if addr < 0:
            raise AddressFault(f"read from negative address {addr}")
        page = self._pages.get(addr // PAGE_SIZE)
        if page is None:
            return 0
        return page[addr % PAGE_SIZE]

    def write(self, addr: int, value: int):
        if addr < 0:
            raise AddressFault(f"write to negative address {addr}")
        check_element(value)
        index = addr // PAGE_SIZE
        page = self._pages.get(index)
        if page is None:
            page = self._pages[index] = [0] * PAGE_SIZE
        page[addr % PAGE_SIZE] = value
        if addr >= self._extent:
            self._extent = addr + 1

    __getitem__ = read
    __setitem__ = write

    # --- Bulk load ---

    def load(self, values: Iterable[int], base: int = 0):
        """Write a sequence of words starting at base."""
        for offset, value in enumerate(values):
            self.write(base + offset, value)

    # --- Introspection ---

    @property
    def page_count(self) -> int:
        """Number of pages allocated so far."""
        return len(self._pages)

    def __len__(self) -> int:
        """One past the highest address ever written (0 when empty)."""
        return self._extent

    def to_list(self, length: int) -> List[int]:
        """Return cells 0 .. length-1 as a plain list."""
        return [self.read(addr) for addr in range(length)]

    def copy(self) -> 'Memory':
        """Deep copy: the new instance shares no pages with this one."""
        clone = Memory()
        clone._pages = {index: page[:] for index, page in self._pages.items()}
        clone._extent = self._extent
        return clone

    __copy__ = copy

    def __deepcopy__(self, memo) -> 'Memory':
        return self.copy()

    # --- Snapshots ---

    def snapshot(self) -> Dict[int, int]:
        """Capture every non-zero cell as {addr: value} for later diffing."""
        cells = {}
        for index in sorted(self._pages):
            base = index * PAGE_SIZE
            for offset, value in enumerate(self._pages[index]):
                if value:
                    cells[base + offset] = value
        return cells

    @staticmethod
    def diff_snapshots(snap_a: Dict[int, int],
                       snap_b: Dict[int, int]) -> Dict[int, Tuple[int, int]]:
        """Compare two snapshots, return {addr: (old, new)} for changed cells."""
        changes = {}
        for addr in sorted(set(snap_a) | set(snap_b)):
            old = snap_a.get(addr, 0)
            new = snap_b.get(addr, 0)
            if old != new:
                changes[addr] = (old, new)
        return changes

    # --- Dump ---

    def dump(self, start: int = 0, length: int = 64, width: int = 8) -> str:
        """Produce a decimal dump of memory for debugging."""
        lines = []
        for row in range(start, start + length, width):
            count = min(width, start + length - row)
            cells = ' '.join(f'{self.read(row + i):>6}' for i in range(count))
            lines.append(f'{row:06d}  {cells}')
        return '\n'.join(lines)
