"""Text-mode boot screen writer over an in-memory character cell buffer."""

from __future__ import annotations

from enum import IntEnum

BOOT_MESSAGE = "Loading MeKernel..."


class Color(IntEnum):
    BLACK = 0
    BLUE = 1
    GREEN = 2
    CYAN = 3
    RED = 4
    MAGENTA = 5
    BROWN = 6
    LIGHT_GRAY = 7
    DARK_GRAY = 8
    LIGHT_BLUE = 9
    LIGHT_GREEN = 10
    LIGHT_CYAN = 11
    LIGHT_RED = 12
    LIGHT_MAGENTA = 13
    YELLOW = 14
    WHITE = 15


def _check_colour(value: int, name: str) -> int:
    value = int(value)
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be between 0 and 255, got {value}")
    return value


class TextWriter:
    """Writes characters into a grid of 16-bit cells.

    Each cell holds the character byte in the low eight bits and the colour
    attribute (background in the high nibble, foreground in the low) above it.
    Cells are addressed linearly as ``y * columns + x``.
    """

    def __init__(self, columns=80, rows=25):
        if columns <= 0 or rows <= 0:
            raise ValueError("columns and rows must be positive")
        self.columns = columns
        self.rows = rows
        self.cells = [0] * (columns * rows)

    def _index(self, x: int, y: int) -> int:
        index = y * self.columns + x
        if not 0 <= index < len(self.cells):
            raise IndexError(f"position ({x}, {y}) is outside the screen")
        return index

    def write_character(self, c, forecolour, backcolour, x, y):
        """Put one character with the given colours at ``(x, y)``."""
        code = ord(c)
        if code > 0xFF:
            raise ValueError(f"character {c!r} does not fit in one byte")
        fore = _check_colour(forecolour, "forecolour")
        back = _check_colour(backcolour, "backcolour")
        attrib = ((back << 4) | (fore & 0x0F)) & 0xFFFF
        self.cells[self._index(x, y)] = (code | (attrib << 8)) & 0xFFFF

    def write_string(self, text, forecolour, backcolour, x, y):
        """Write ``text`` left to right starting at ``(x, y)``."""
        if not text:
            return
        for offset, c in enumerate(text):
            self.write_character(c, forecolour, backcolour, x + offset, y)

    def cell(self, x, y):
        """Return the 16-bit cell value at ``(x, y)``."""
        return self.cells[self._index(x, y)]


def boot_main(writer=None):
    """Show the loading message in the top-left corner; returns 0."""
    if writer is None:
        writer = TextWriter()
    writer.write_string(BOOT_MESSAGE, Color.BLACK, Color.WHITE, 0, 0)
    return 0