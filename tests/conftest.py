import pytest
from PIL import Image

from spfconv.pixels import rgb_values
from spfconv.quantizer import Quantizer

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


class FakeQuantizer(Quantizer):
    """Keeps the first distinct colors it sees and maps pixels exactly."""

    name = "fake"

    def __init__(self):
        self.max_colors = []
        self.dithers = []

    def quantize(self, images, max_colors, dither):
        self.max_colors.append(max_colors)
        return super().quantize(images, max_colors, dither)

    def select_colors(self, pixels, max_colors):
        colors = []
        for pixel in pixels:
            if pixel not in colors:
                colors.append(pixel)
        return colors[:max_colors] or [BLACK]

    def remap(self, image, colors, dither):
        self.dithers.append(dither)
        rgb = image.convert("RGB")
        lookup = {color: index for index, color in enumerate(colors)}
        result = Image.new("P", rgb.size)
        result.putdata([lookup.get(pixel, 0) for pixel in rgb_values(rgb)])
        result.putpalette([channel for color in colors for channel in color])
        return result


@pytest.fixture
def fake_quantizer():
    return FakeQuantizer()


@pytest.fixture
def make_image():
    def factory(size, color=RED, mode="RGBA"):
        if mode == "RGBA" and len(color) == 3:
            color = color + (255,)
        return Image.new(mode, size, color)

    return factory


@pytest.fixture
def checker_image():
    """4x4 RGBA image: transparent cells on even offsets, red and black
    opaque cells elsewhere."""
    image = Image.new("RGBA", (4, 4))
    pixels = []
    for offset in range(16):
        if offset % 2 == 0:
            pixels.append((0, 0, 0, 0))
        elif offset % 4 == 1:
            pixels.append(RED + (255,))
        else:
            pixels.append(BLACK + (255,))
    image.putdata(pixels)
    return image
