"""Animated GIF output: LZW image blocks and a frame-by-frame writer.

Frames are RGBA8 byte sequences; the alpha channel is ignored.  Only the
pixels that changed since the previous frame are coloured, and the rest are
written as transparent, so each frame is a delta on top of the last one.
"""

from __future__ import annotations

import struct
from typing import BinaryIO

from mekit.gif_palette import (
    TRANSPARENT_INDEX,
    Palette,
    dither_image,
    make_palette,
    threshold_image,
)

_MAX_CODE = 4095
_CHUNK_LIMIT = 255


class _BitWriter:
    """Packs codes least significant bit first into length-prefixed sub-blocks."""

    def __init__(self, out: bytearray) -> None:
        self._out = out
        self.bit_index = 0
        self.byte = 0
        self.chunk = bytearray()

    def write_bit(self, bit: int) -> None:
        self.byte |= (bit & 1) << self.bit_index
        self.bit_index += 1
        if self.bit_index > 7:
            self.chunk.append(self.byte)
            self.bit_index = 0
            self.byte = 0

    def write_chunk(self) -> None:
        self._out.append(len(self.chunk))
        self._out += self.chunk
        self.bit_index = 0
        self.byte = 0
        self.chunk.clear()

    def write_code(self, code: int, length: int) -> None:
        for _ in range(length):
            self.write_bit(code)
            code >>= 1
            if len(self.chunk) == _CHUNK_LIMIT:
                self.write_chunk()

    def finish(self) -> None:
        while self.bit_index:
            self.write_bit(0)
        if self.chunk:
            self.write_chunk()


def _u16(value: int) -> bytes:
    return struct.pack("<H", value & 0xFFFF)


def _palette_bytes(palette: Palette) -> bytearray:
    data = bytearray(3)  # entry 0 is the transparent colour
    for index in range(1, palette.size):
        data += bytes(palette.color(index))
    return data


def write_palette(palette, stream):
    """Write the ``2 ** bit_depth`` colours of ``palette`` to ``stream``."""
    stream.write(bytes(_palette_bytes(palette)))


def write_lzw_image(stream, image, left, top, width, height, delay, palette):
    """Write one frame: control extension, descriptor, local palette and LZW data.

    ``image`` is RGBA bytes whose alpha channel holds palette indices.
    """
    if len(image) < width * height * 4:
        raise ValueError("image holds fewer than width * height RGBA pixels")

    out = bytearray()
    # Graphics control extension: keep the previous frame, this one has transparency.
    out += bytes((0x21, 0xF9, 0x04, 0x05))
    out += _u16(delay)
    out += bytes((TRANSPARENT_INDEX, 0))

    out.append(0x2C)
    out += _u16(left) + _u16(top) + _u16(width) + _u16(height)
    out.append((0x80 + palette.bit_depth - 1) & 0xFF)
    out += _palette_bytes(palette)

    min_code_size = palette.bit_depth
    clear_code = 1 << min_code_size
    out.append(min_code_size)

    bits = _BitWriter(out)
    tree: dict[tuple[int, int], int] = {}
    cur_code = -1
    code_size = min_code_size + 1
    max_code = clear_code + 1

    bits.write_code(clear_code, code_size)

    for value in image[3:width * height * 4:4]:
        if cur_code < 0:
            cur_code = value
            continue
        nxt = tree.get((cur_code, value))
        if nxt is not None:
            cur_code = nxt
            continue

        bits.write_code(cur_code, code_size)
        max_code += 1
        tree[(cur_code, value)] = max_code
        if max_code >= 1 << code_size:
            code_size += 1
        if max_code == _MAX_CODE:
            bits.write_code(clear_code, code_size)
            tree.clear()
            code_size = min_code_size + 1
            max_code = clear_code + 1
        cur_code = value

    bits.write_code(cur_code, code_size)
    bits.write_code(clear_code, code_size)
    bits.write_code(clear_code + 1, min_code_size + 1)
    bits.finish()

    out.append(0)  # image block terminator
    stream.write(bytes(out))


class GifWriter:
    """Writes an animated GIF frame by frame to a binary stream."""

    def __init__(self, stream, width, height, delay):
        self._stream: BinaryIO | None = stream
        self._owns_stream = False
        self.width = width
        self.height = height
        self._old_image = bytearray(width * height * 4)
        self._first_frame = True

        header = bytearray(b"GIF89a")
        header += _u16(width) + _u16(height)
        # Unsorted global colour table of 2 entries, background 0, square pixels.
        header += bytes((0xF0, 0, 0))
        header += bytes(6)  # dummy global palette: two black entries
        if delay != 0:
            header += bytes((0x21, 0xFF, 11)) + b"NETSCAPE2.0"
            header += bytes((3, 1, 0, 0, 0))  # loop forever
        stream.write(bytes(header))

    @classmethod
    def open(cls, path, width, height, delay):
        """Create the file at ``path`` and start a GIF in it."""
        stream = open(path, "wb")
        try:
            writer = cls(stream, width, height, delay)
        except BaseException:
            stream.close()
            raise
        writer._owns_stream = True
        return writer

    @property
    def closed(self) -> bool:
        return self._stream is None

    def write_frame(self, image, width, height, delay, bit_depth=8, dither=False):
        """Quantise ``image`` (RGBA bytes) and append it as the next frame."""
        if self._stream is None:
            raise ValueError("write to a closed GIF writer")

        old = None if self._first_frame else self._old_image
        palette = make_palette(None if dither else old, image, width, height,
                               bit_depth, dither)
        quantise = dither_image if dither else threshold_image
        frame = quantise(old, image, width, height, palette)

        write_lzw_image(self._stream, frame, 0, 0, width, height, delay, palette)
        self._old_image = frame
        self._first_frame = False

    def close(self):
        """Write the trailer; the stream is closed if this writer opened it."""
        if self._stream is None:
            return
        self._stream.write(b"\x3b")
        if self._owns_stream:
            self._stream.close()
        else:
            self._stream.flush()
        self._stream = None
        self._old_image = bytearray()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False