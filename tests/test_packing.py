import pytest

from spfconv.packing import (
    CHANNEL_MAX,
    MIN_OPAQUE_RGB565,
    TRANSPARENT,
    Color,
    color_to_rgb565,
    color_to_rgb1555,
    pack565,
    pack1555,
    unpack565,
    unpack1555,
)

SAMPLES = range(0, CHANNEL_MAX + 1, 4369)


def test_pack565_white():
    assert pack565(CHANNEL_MAX, CHANNEL_MAX, CHANNEL_MAX) == 0xFFFF
    assert unpack565(0xFFFF) == Color(CHANNEL_MAX, CHANNEL_MAX, CHANNEL_MAX)


def test_pack565_field_layout():
    assert pack565(CHANNEL_MAX, 0, 0) == 0b11111_000000_00000
    assert pack565(0, CHANNEL_MAX, 0) == 0b00000_111111_00000
    assert pack565(0, 0, CHANNEL_MAX) == 0b00000_000000_11111


def test_black_is_perturbed_to_minimal_opaque_code():
    assert pack565(0, 0, 0) == MIN_OPAQUE_RGB565
    assert MIN_OPAQUE_RGB565 == 0b00001_000001_00001
    # Rounds down to zero in every channel, still must not become 0x0000.
    assert pack565(100, 100, 100) == MIN_OPAQUE_RGB565


def test_zero_word_is_transparent():
    assert unpack565(0) == TRANSPARENT
    assert unpack565(0).transparent
    assert unpack1555(0) == TRANSPARENT


def test_perturbed_black_decodes_opaque():
    color = unpack565(pack565(0, 0, 0))
    assert not color.transparent
    assert color.a == CHANNEL_MAX


def test_unpack565_pack565_error_is_bounded():
    for r in SAMPLES:
        for g in SAMPLES:
            for b in SAMPLES:
                if (r, g, b) == (0, 0, 0):
                    continue
                color = unpack565(pack565(r, g, b))
                assert abs(color.r - r) <= CHANNEL_MAX // 32
                assert abs(color.g - g) <= CHANNEL_MAX // 64
                assert abs(color.b - b) <= CHANNEL_MAX // 32
                assert color.a == CHANNEL_MAX


def test_pack1555_never_sets_alpha_bit():
    assert pack1555(CHANNEL_MAX, CHANNEL_MAX, CHANNEL_MAX) == 0x7FFF
    assert pack1555(CHANNEL_MAX, 0, 0) == 0x7C00
    assert pack1555(0, CHANNEL_MAX, 0) == 0x03E0
    assert pack1555(0, 0, CHANNEL_MAX) == 0x001F


def test_pack1555_does_not_perturb_black():
    assert pack1555(0, 0, 0) == 0


def test_unpack1555_ignores_alpha_bit():
    assert unpack1555(0x8000 | 0x7C00) == Color(CHANNEL_MAX, 0, 0)


@pytest.mark.parametrize("value", [1, 0x1F, 0x03E0, 0x7C00, 0x7FFF])
def test_unpack1555_pack1555_is_exact_on_five_bit_words(value):
    color = unpack1555(value)
    assert pack1555(color.r, color.g, color.b) == value


def test_transparent_color_packs_to_zero_565():
    assert color_to_rgb565(TRANSPARENT) == 0
    assert color_to_rgb565(Color(CHANNEL_MAX, 0, 0, 0)) == 0
    assert color_to_rgb565(Color(0, 0, 0)) == MIN_OPAQUE_RGB565
    assert color_to_rgb1555(TRANSPARENT) == 0


def test_rgb8_conversion():
    color = Color.from_rgb8(255, 128, 0)
    assert color == Color(CHANNEL_MAX, 128 * 257, 0, CHANNEL_MAX)
    assert color.to_rgba8() == (255, 128, 0, 255)
