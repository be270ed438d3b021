from PIL import Image

from spfconv.pixels import band_values, rgb_values, rgba_values

from conftest import BLUE, RED


def test_band_values_of_palette_image():
    image = Image.new("P", (3, 2))
    image.putdata([0, 1, 2, 3, 4, 255])
    assert band_values(image) == [0, 1, 2, 3, 4, 255]


def test_rgb_values_are_row_major():
    image = Image.new("RGB", (2, 2))
    image.putdata([RED, BLUE, BLUE, RED])
    assert rgb_values(image) == [RED, BLUE, BLUE, RED]


def test_rgba_values_convert_other_modes():
    image = Image.new("RGB", (2, 1), RED)
    assert rgba_values(image) == [RED + (255,), RED + (255,)]


def test_empty_image_has_no_values():
    assert rgb_values(Image.new("RGB", (0, 0))) == []
