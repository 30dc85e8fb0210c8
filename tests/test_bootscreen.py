import pytest

from mekit.bootscreen import BOOT_MESSAGE, Color, TextWriter, boot_main


def _text(writer, y, length):
    return "".join(chr(writer.cell(x, y) & 0xFF) for x in range(length))


def test_write_character_layout():
    writer = TextWriter()
    writer.write_character("L", Color.BLACK, Color.WHITE, 3, 2)
    value = writer.cell(3, 2)
    assert value & 0xFF == ord("L")
    assert (value >> 8) & 0x0F == Color.BLACK
    assert value >> 12 == Color.WHITE


def test_write_string_places_characters():
    writer = TextWriter()
    writer.write_string("hello", Color.YELLOW, Color.BLUE, 10, 4)
    assert _text(writer, 4, 15)[10:] == "hello"
    assert writer.cell(9, 4) == 0
    assert all((writer.cell(x, 4) >> 8) & 0x0F == Color.YELLOW for x in range(10, 15))


def test_write_string_wraps_linearly():
    writer = TextWriter(columns=80, rows=25)
    writer.write_string("ab", Color.WHITE, Color.BLACK, 79, 0)
    assert writer.cell(79, 0) & 0xFF == ord("a")
    assert writer.cell(0, 1) & 0xFF == ord("b")


def test_empty_string_writes_nothing():
    writer = TextWriter()
    writer.write_string("", Color.WHITE, Color.BLACK, 0, 0)
    assert set(writer.cells) == {0}


def test_out_of_screen_raises():
    writer = TextWriter(columns=80, rows=25)
    with pytest.raises(IndexError):
        writer.write_character("x", Color.WHITE, Color.BLACK, 0, 25)
    with pytest.raises(IndexError):
        writer.cell(-1, 0)


def test_bad_colour_and_character():
    writer = TextWriter()
    with pytest.raises(ValueError):
        writer.write_character("x", 256, Color.BLACK, 0, 0)
    with pytest.raises(ValueError):
        writer.write_character("\u20ac", Color.WHITE, Color.BLACK, 0, 0)


def test_boot_main_writes_message():
    writer = TextWriter()
    assert boot_main(writer) == 0
    assert _text(writer, 0, len(BOOT_MESSAGE)) == "Loading MeKernel..."
    assert writer.cell(0, 0) >> 12 == Color.WHITE
    assert writer.cell(len(BOOT_MESSAGE), 0) == 0