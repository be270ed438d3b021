import struct

import pytest

from spfconv.errors import CapacityExceededError, InvalidFormatError
from spfconv.packing import MIN_OPAQUE_RGB565, TRANSPARENT, Color
from spfconv.spf import PALETTE_SIZE, SpfPalette

RED = Color.from_rgb8(255, 0, 0)
GREEN = Color.from_rgb8(0, 255, 0)
BLUE = Color.from_rgb8(0, 0, 255)


def words(data):
    return struct.unpack(f"<{len(data) // 2}H", data)


def test_palette_accepts_exactly_256_colors():
    palette = SpfPalette([RED] * 256)
    assert palette.padding == 0
    assert len(palette.pack()) == 1024


def test_palette_rejects_257_colors():
    with pytest.raises(CapacityExceededError):
        SpfPalette([RED] * 257)


@pytest.mark.parametrize("count", [0, 1, 3, 255])
def test_serialized_palette_is_always_full(count):
    palette = SpfPalette([BLUE] * count)
    assert palette.padding == PALETTE_SIZE - count
    table = words(palette.pack())
    primary, secondary = table[:256], table[256:]
    assert len(primary) == len(secondary) == 256
    assert primary[:count] == (0x001F,) * count
    assert secondary[:count] == (0x001F,) * count
    assert primary[count:] == (0,) * (256 - count)
    assert secondary[count:] == (0,) * (256 - count)


def test_primary_and_secondary_encodings():
    table = words(SpfPalette([RED, GREEN]).pack())
    assert table[0:2] == (0xF800, 0x07E0)
    assert table[256:258] == (0x7C00, 0x03E0)


def test_transparent_and_black_entries():
    black = Color.from_rgb8(0, 0, 0)
    table = words(SpfPalette([TRANSPARENT, black]).pack())
    assert table[0] == 0
    assert table[1] == MIN_OPAQUE_RGB565


def test_read_palette_decodes_primary_table():
    palette = SpfPalette.unpack_from(SpfPalette([RED, GREEN]).pack())
    assert len(palette) == 256
    assert palette[0] == RED
    assert palette[1] == GREEN
    assert all(color == TRANSPARENT for color in palette.colors[2:])
    assert len(palette.secondary) == 256


def test_read_palette_keeps_secondary_table():
    primary = [0xF800, 0x07E0] + [0] * 254
    secondary = [0x1234, 0x0421] + [0] * 254
    data = struct.pack("<512H", *(primary + secondary))
    palette = SpfPalette.unpack_from(data)
    assert palette.pack() == data


def test_read_palette_keeps_alpha_bit_of_secondary_words():
    primary = [0xF800, 0x001F] + [0] * 254
    secondary = [0xFC00, 0x8000] + [0x8421] * 254
    data = struct.pack("<512H", *(primary + secondary))
    palette = SpfPalette.unpack_from(data)
    assert palette.secondary_raw[:3] == [0xFC00, 0x8000, 0x8421]
    assert palette.pack() == data


def test_built_palette_has_no_secondary_raw_words():
    palette = SpfPalette([RED])
    assert palette.secondary_raw is None
    assert palette.secondary is None
    assert words(palette.pack())[PALETTE_SIZE] & 0x8000 == 0


def test_read_palette_at_offset():
    data = b"\xff" * 12 + SpfPalette([BLUE]).pack()
    assert SpfPalette.unpack_from(data, 12)[0] == BLUE


def test_truncated_palette():
    with pytest.raises(InvalidFormatError):
        SpfPalette.unpack_from(b"\x00" * 1000)
