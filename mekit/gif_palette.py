"""Palette construction and colour quantisation for GIF frames.

Frames are RGBA8 byte sequences (alpha ignored on input).  Palettes are built
with the modified median split technique: the pixels are placed in a balanced
k-d tree over RGB space and the leaves are averaged into palette entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field

TRANSPARENT_INDEX = 0
_NO_MATCH_DIFF = 1_000_000


def _zeros() -> list[int]:
    return [0] * 256


@dataclass
class Palette:
    """A palette of ``2 ** bit_depth`` colours plus the k-d tree that indexes it.

    Node ``i`` of the tree has children ``2 * i`` and ``2 * i + 1``; nodes at
    ``2 ** bit_depth`` and beyond are the leaves, each holding one colour.
    """

    bit_depth: int = 8
    r: list[int] = field(default_factory=_zeros)
    g: list[int] = field(default_factory=_zeros)
    b: list[int] = field(default_factory=_zeros)
    tree_split_elt: list[int] = field(default_factory=_zeros)
    tree_split: list[int] = field(default_factory=_zeros)

    @property
    def size(self) -> int:
        return 1 << self.bit_depth

    def color(self, index: int) -> tuple[int, int, int]:
        return self.r[index], self.g[index], self.b[index]


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _check_bit_depth(bit_depth: int) -> None:
    if not 1 <= bit_depth <= 8:
        raise ValueError(f"bit depth must be between 1 and 8, got {bit_depth}")


def _check_frame(frame, width: int, height: int, name: str) -> None:
    if width < 0 or height < 0:
        raise ValueError("width and height must not be negative")
    if len(frame) < width * height * 4:
        raise ValueError(f"{name} holds fewer than width * height RGBA pixels")


def closest_palette_color(palette, r, g, b, best_index, best_diff, root):
    """Walk the k-d tree below ``root`` for the entry nearest to ``(r, g, b)``.

    Returns ``(best_index, best_diff)``; the given best is only replaced by a
    strictly better match.  The transparent entry is never chosen.
    """
    leaf_base = 1 << palette.bit_depth
    if root > leaf_base - 1:
        index = root - leaf_base
        if index == TRANSPARENT_INDEX:
            return best_index, best_diff
        diff = (
            abs(r - palette.r[index])
            + abs(g - palette.g[index])
            + abs(b - palette.b[index])
        )
        if diff < best_diff:
            return index, diff
        return best_index, best_diff

    split_comp = (r, g, b)[palette.tree_split_elt[root]]
    split_pos = palette.tree_split[root]
    if split_pos > split_comp:
        best_index, best_diff = closest_palette_color(
            palette, r, g, b, best_index, best_diff, root * 2
        )
        if best_diff > split_pos - split_comp:
            best_index, best_diff = closest_palette_color(
                palette, r, g, b, best_index, best_diff, root * 2 + 1
            )
    else:
        best_index, best_diff = closest_palette_color(
            palette, r, g, b, best_index, best_diff, root * 2 + 1
        )
        if best_diff > split_comp - split_pos:
            best_index, best_diff = closest_palette_color(
                palette, r, g, b, best_index, best_diff, root * 2
            )
    return best_index, best_diff


def _swap_pixels(image: bytearray, a: int, b: int) -> None:
    ia, ib = a * 4, b * 4
    alpha = image[ia + 3]
    image[ia:ia + 3], image[ib:ib + 3] = image[ib:ib + 3], image[ia:ia + 3]
    # Both pixels keep the first pixel's alpha, as the palette builder expects.
    image[ib + 3] = alpha


def _partition(image: bytearray, left: int, right: int, elt: int, pivot: int) -> int:
    pivot_value = image[pivot * 4 + elt]
    _swap_pixels(image, pivot, right - 1)
    store = left
    split = False
    for ii in range(left, right - 1):
        value = image[ii * 4 + elt]
        if value < pivot_value:
            _swap_pixels(image, ii, store)
            store += 1
        elif value == pivot_value:
            if split:
                _swap_pixels(image, ii, store)
                store += 1
            split = not split
    _swap_pixels(image, store, right - 1)
    return store


def _partition_by_median(image: bytearray, left: int, right: int, com: int, needed: int) -> None:
    while left < right - 1:
        pivot = _partition(image, left, right, com, left + (right - left) // 2)
        if pivot > needed:
            right = pivot
        elif pivot < needed:
            left = pivot + 1
        else:
            return


def _split_palette(
    image: bytearray,
    base: int,
    num_pixels: int,
    first: int,
    last: int,
    split_elt: int,
    split_dist: int,
    node: int,
    for_dither: bool,
    pal: Palette,
) -> None:
    if last <= first or num_pixels == 0:
        return

    pixels = [
        (image[p * 4], image[p * 4 + 1], image[p * 4 + 2])
        for p in range(base, base + num_pixels)
    ]

    if last == first + 1:
        if for_dither:
            if first == 1:
                pal.r[first] = min(255, *(p[0] for p in pixels))
                pal.g[first] = min(255, *(p[1] for p in pixels))
                pal.b[first] = min(255, *(p[2] for p in pixels))
                return
            if first == (1 << pal.bit_depth) - 1:
                pal.r[first] = max(0, *(p[0] for p in pixels))
                pal.g[first] = max(0, *(p[1] for p in pixels))
                pal.b[first] = max(0, *(p[2] for p in pixels))
                return
        half = num_pixels // 2
        pal.r[first] = ((sum(p[0] for p in pixels) + half) // num_pixels) & 0xFF
        pal.g[first] = ((sum(p[1] for p in pixels) + half) // num_pixels) & 0xFF
        pal.b[first] = ((sum(p[2] for p in pixels) + half) // num_pixels) & 0xFF
        return

    r_range = max(p[0] for p in pixels) - min(p[0] for p in pixels)
    g_range = max(p[1] for p in pixels) - min(p[1] for p in pixels)
    b_range = max(p[2] for p in pixels) - min(p[2] for p in pixels)

    split_com = 1
    if b_range > g_range:
        split_com = 2
    if r_range > b_range and r_range > g_range:
        split_com = 0

    sub_a = num_pixels * (split_elt - first) // (last - first)
    sub_b = num_pixels - sub_a

    _partition_by_median(image, base, base + num_pixels, split_com, base + sub_a)

    pal.tree_split_elt[node] = split_com
    pal.tree_split[node] = image[(base + sub_a) * 4 + split_com]

    _split_palette(image, base, sub_a, first, split_elt, split_elt - split_dist,
                   split_dist // 2, node * 2, for_dither, pal)
    _split_palette(image, base + sub_a, sub_b, split_elt, last, split_elt + split_dist,
                   split_dist // 2, node * 2 + 1, for_dither, pal)


def _pick_changed_pixels(last_frame, frame: bytearray, num_pixels: int) -> int:
    """Move the pixels that differ from ``last_frame`` to the front of ``frame``."""
    changed = 0
    for p in range(num_pixels):
        o = p * 4
        if last_frame[o:o + 3] != frame[o:o + 3]:
            w = changed * 4
            frame[w:w + 3] = frame[o:o + 3]
            changed += 1
    return changed


def make_palette(last_frame, next_frame, width, height, bit_depth, build_for_dither):
    """Build a palette for ``next_frame``.

    When ``last_frame`` is given, only the pixels that changed since it are
    taken into account.
    """
    _check_bit_depth(bit_depth)
    _check_frame(next_frame, width, height, "next_frame")
    num_pixels = width * height
    if last_frame is not None:
        _check_frame(last_frame, width, height, "last_frame")

    pal = Palette(bit_depth=bit_depth)
    image = bytearray(next_frame[:num_pixels * 4])
    if last_frame is not None:
        num_pixels = _pick_changed_pixels(bytes(last_frame), image, num_pixels)

    last_elt = 1 << bit_depth
    split_elt = last_elt // 2
    split_dist = split_elt // 2
    _split_palette(image, 0, num_pixels, 1, last_elt, split_elt, split_dist, 1,
                   bool(build_for_dither), pal)

    # Bottom node for the transparency index.
    pal.tree_split[1 << (bit_depth - 1)] = 0
    pal.tree_split_elt[1 << (bit_depth - 1)] = 0
    pal.r[0] = pal.g[0] = pal.b[0] = 0
    return pal


def dither_image(last_frame, next_frame, width, height, palette):
    """Quantise ``next_frame`` with Floyd-Steinberg dithering.

    Returns RGBA bytes whose alpha channel holds the palette index of each
    pixel; pixels equal to ``last_frame`` get the transparent index.
    """
    _check_frame(next_frame, width, height, "next_frame")
    if last_frame is not None:
        _check_frame(last_frame, width, height, "last_frame")
    num_pixels = width * height
    quant = [v * 256 for v in next_frame[:num_pixels * 4]]

    spread = ((1, 7), (width - 1, 3), (width, 5), (width + 1, 1))

    for y in range(height):
        for x in range(width):
            p = y * width + x
            o = p * 4
            rr = _tdiv(quant[o] + 127, 256)
            gg = _tdiv(quant[o + 1] + 127, 256)
            bb = _tdiv(quant[o + 2] + 127, 256)

            if last_frame is not None and (
                last_frame[o] == rr and last_frame[o + 1] == gg and last_frame[o + 2] == bb
            ):
                quant[o:o + 4] = [rr, gg, bb, TRANSPARENT_INDEX]
                continue

            best, _ = closest_palette_color(
                palette, rr, gg, bb, TRANSPARENT_INDEX, _NO_MATCH_DIFF, 1
            )
            errors = (
                quant[o] - palette.r[best] * 256,
                quant[o + 1] - palette.g[best] * 256,
                quant[o + 2] - palette.b[best] * 256,
            )
            quant[o:o + 4] = [palette.r[best], palette.g[best], palette.b[best], best]

            for step, weight in spread:
                target = p + step
                if target < num_pixels:
                    t = target * 4
                    for c, err in enumerate(errors):
                        quant[t + c] += max(-quant[t + c], _tdiv(err * weight, 16))

    return bytearray(v & 0xFF for v in quant)


def threshold_image(last_frame, next_frame, width, height, palette):
    """Quantise ``next_frame`` by nearest palette colour, without dithering.

    Returns RGBA bytes whose alpha channel holds the palette index of each
    pixel; pixels equal to ``last_frame`` get the transparent index.
    """
    _check_frame(next_frame, width, height, "next_frame")
    if last_frame is not None:
        _check_frame(last_frame, width, height, "last_frame")
    out = bytearray(width * height * 4)
    for p in range(width * height):
        o = p * 4
        rgb = next_frame[o:o + 3]
        if last_frame is not None and last_frame[o:o + 3] == rgb:
            out[o:o + 3] = last_frame[o:o + 3]
            out[o + 3] = TRANSPARENT_INDEX
            continue
        best, _ = closest_palette_color(
            palette, next_frame[o], next_frame[o + 1], next_frame[o + 2],
            1, _NO_MATCH_DIFF, 1,
        )
        out[o:o + 4] = bytes((palette.r[best], palette.g[best], palette.b[best], best))
    return out