from collections import namedtuple

CHANNEL_MAX = 0xFFFF
FIVE_BIT_MASK = 0x1F
SIX_BIT_MASK = 0x3F

# Smallest opaque 565 word; used when a real color would collapse to 0x0000.
MIN_OPAQUE_RGB565 = 0b00001_000001_00001


class Color(namedtuple("Color", "r g b a")):
    """RGBA color with 16-bit channels."""

    __slots__ = ()

    def __new__(cls, r, g, b, a=CHANNEL_MAX):
        return super().__new__(cls, r, g, b, a)

    @property
    def transparent(self):
        return self.a == 0

    @classmethod
    def from_rgb8(cls, r, g, b, a=0xFF):
        return cls(r * 257, g * 257, b * 257, a * 257)

    def to_rgba8(self):
        return tuple(narrow_channel(value) for value in self)


TRANSPARENT = Color(0, 0, 0, 0)


def scale(value, source_max, target_max):
    return (value * target_max + source_max // 2) // source_max


def narrow_channel(value):
    return scale(value, CHANNEL_MAX, 0xFF)


def pack565(r, g, b):
    r5 = scale(r, CHANNEL_MAX, FIVE_BIT_MASK)
    g6 = scale(g, CHANNEL_MAX, SIX_BIT_MASK)
    b5 = scale(b, CHANNEL_MAX, FIVE_BIT_MASK)
    value = (r5 << 11) | (g6 << 5) | b5
    if value == 0:
        return MIN_OPAQUE_RGB565
    return value


def unpack565(value):
    if value == 0:
        return TRANSPARENT
    r5 = (value >> 11) & FIVE_BIT_MASK
    g6 = (value >> 5) & SIX_BIT_MASK
    b5 = value & FIVE_BIT_MASK
    return Color(
        scale(r5, FIVE_BIT_MASK, CHANNEL_MAX),
        scale(g6, SIX_BIT_MASK, CHANNEL_MAX),
        scale(b5, FIVE_BIT_MASK, CHANNEL_MAX),
    )


def pack1555(r, g, b):
    # Bit 15 (alpha) is never set.
    r5 = scale(r, CHANNEL_MAX, FIVE_BIT_MASK)
    g5 = scale(g, CHANNEL_MAX, FIVE_BIT_MASK)
    b5 = scale(b, CHANNEL_MAX, FIVE_BIT_MASK)
    return (r5 << 10) | (g5 << 5) | b5


def unpack1555(value):
    if value == 0:
        return TRANSPARENT
    r5 = (value >> 10) & FIVE_BIT_MASK
    g5 = (value >> 5) & FIVE_BIT_MASK
    b5 = value & FIVE_BIT_MASK
    return Color(
        scale(r5, FIVE_BIT_MASK, CHANNEL_MAX),
        scale(g5, FIVE_BIT_MASK, CHANNEL_MAX),
        scale(b5, FIVE_BIT_MASK, CHANNEL_MAX),
    )


def color_to_rgb565(color):
    if color.transparent:
        return 0
    return pack565(color.r, color.g, color.b)


def color_to_rgb1555(color):
    return pack1555(color.r, color.g, color.b)
