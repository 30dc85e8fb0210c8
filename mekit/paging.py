"""64-bit page table entries and a simple page table allocator."""

from __future__ import annotations

from dataclasses import dataclass, fields

PTE_MAX = 512
PTE_ALIGN = 4096

# (field name, bit offset, bit width)
_LAYOUT = (
    ("present", 0, 1),
    ("rw", 1, 1),
    ("user", 2, 1),
    ("wt", 3, 1),
    ("cache", 4, 1),
    ("accessed", 5, 1),
    ("reserved", 6, 6),
    ("physical_address", 12, 36),
    ("reserved1", 48, 15),
    ("exec_disable", 63, 1),
)
_WIDTHS = {name: width for name, _, width in _LAYOUT}


@dataclass
class PageTableEntry:
    """One entry of a 64-bit page table."""

    present: bool = False
    rw: bool = False
    user: bool = False
    wt: bool = False
    cache: bool = False
    accessed: bool = False
    reserved: int = 0
    physical_address: int = 0
    reserved1: int = 0
    exec_disable: bool = False

    def __post_init__(self) -> None:
        for f in fields(self):
            value = int(getattr(self, f.name))
            width = _WIDTHS[f.name]
            if not 0 <= value < 1 << width:
                raise ValueError(f"{f.name} does not fit in {width} bits: {value}")

    def to_int(self):
        """Pack the entry into its 64-bit representation."""
        return sum(int(getattr(self, name)) << shift for name, shift, _ in _LAYOUT)

    @classmethod
    def from_int(cls, value):
        """Unpack a 64-bit entry."""
        if not 0 <= value < 1 << 64:
            raise ValueError(f"page table entry out of range: {value}")
        kwargs = {}
        for name, shift, width in _LAYOUT:
            bits = (value >> shift) & ((1 << width) - 1)
            kwargs[name] = bool(bits) if width == 1 else bits
        return cls(**kwargs)


class PageAllocator:
    """Hands out page table entries, reusing any that are no longer present."""

    def __init__(self):
        self.entries: list[PageTableEntry] = []

    def _allocate(self, rw: bool, user: bool) -> tuple[int, PageTableEntry]:
        for index, entry in enumerate(self.entries):
            if not entry.present:
                entry.user = bool(user)
                entry.rw = bool(rw)
                entry.present = True
                return index, entry
        entry = PageTableEntry(present=True, rw=bool(rw), user=bool(user))
        self.entries.append(entry)
        return len(self.entries) - 1, entry

    def alloc_page(self, rw, user):
        """Return a present entry with the given access bits."""
        return self._allocate(rw, user)[1]

    def create_page(self, rw, user):
        """Allocate an entry and return its index in the table."""
        return self._allocate(rw, user)[0]