# mekit

A small, dependency-free toolkit whose main piece is an animated GIF encoder.
It builds palettes with a modified median split, can quantise with
Floyd–Steinberg dithering, and colours only the pixels that changed since the
previous frame (the rest are written as transparent).

It also holds compact in-memory models of a few low-level structures:

- `mekit.acpi` — parses RSDP and SDT headers from a bytes-like memory image and
  looks up tables by signature.
- `mekit.hypervisor` — the `Hypervisor` enum of twelve-character CPUID vendor
  signatures, and `identify()` to map a signature to one (or `None`).
- `mekit.paging` — `PageTableEntry` packs and unpacks 64-bit page table
  entries; `PageAllocator` hands them out, reusing entries that are no longer
  present.
- `mekit.bootscreen` — `TextWriter`, a grid of 16-bit character cells (80x25 by
  default) with colour attributes, the `Color` enum, and `boot_main()`, which
  writes the loading message in the top-left corner.
- `mekit.syscalls` — `StackFrame` and `SyscallTable`, a fixed number of handler
  slots where `dispatch()` calls every registered handler in slot order.

## Installation

```
pip install .
```

## Writing a GIF

Frames are RGBA bytes, four bytes per pixel, row by row. The alpha channel is
ignored.

```python
from mekit.gif_writer import GifWriter

width, height = 4, 4
red = bytes([255, 0, 0, 255]) * (width * height)
blue = bytes([0, 0, 255, 255]) * (width * height)

with GifWriter.open("out.gif", width, height, delay=10) as gif:
    gif.write_frame(red, width, height, 10)
    gif.write_frame(blue, width, height, 10, bit_depth=8, dither=True)
```

`delay` is in hundredths of a second. A non-zero delay when the writer is
created adds a header that makes the animation loop forever. `bit_depth` (1 to
8, default 8) sets the size of each frame's local palette.

`GifWriter(stream, width, height, delay)` wraps a binary stream you already
have open; `close()` then writes the trailer and flushes the stream but leaves
it open. A writer made with `GifWriter.open()` closes its file. Writing a frame
after `close()` raises `ValueError`.

The lower-level pieces are public too: `write_lzw_image()` writes one image
block (graphics control extension, descriptor, local palette and LZW data) and
`write_palette()` writes a palette's colours.

## Palettes on their own

```python
from mekit.gif_palette import make_palette, threshold_image, dither_image

pixels = bytes([10, 20, 30, 255]) * 16
palette = make_palette(None, pixels, 4, 4, 8, False)
indexed = threshold_image(None, pixels, 4, 4, palette)
```

`threshold_image()` and `dither_image()` return RGBA bytes whose alpha channel
holds each pixel's palette index. When a previous frame is passed, pixels equal
to it get the transparent index 0. `closest_palette_color()` searches a
palette's k-d tree directly.

## ACPI lookup

```python
from mekit.acpi import ACPIManager, AcpiError

manager = ACPIManager(memory, rsdp_offset)
offset = manager.find("APIC")      # or manager["APIC"]
```

Offsets into `memory` stand in for physical addresses, and `find()` returns the
offset of the matching table header. `AcpiError` is raised when the root
pointer's revision is below 2, when a header runs past the end of memory, when
an entry fails its signature checksum, and when the lookup fails; lookup
failures carry a `code`: -2 for no signature, -3 for an empty one, -1 when
nothing matches. `checksum()` tells whether bytes sum to zero modulo 256.

## What this package does not do

Everything here works on Python objects and byte buffers. Nothing touches real
hardware or firmware: `ACPIManager.shutdown()` and `reset()` only record the
request in `power_requests`, `TextWriter` fills a list of cells rather than a
screen, and `PageAllocator` keeps its entries in a list. The package provides
no command-line program.

## Running the tests

```
pip install .[test]
pytest
```