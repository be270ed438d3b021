"""Row-major pixel access built on ``Image.tobytes``."""


def band_values(image):
    """Values of a single 8-bit band image (P, L, A) as a list of ints."""
    return list(image.tobytes())


def _chunked(data, width):
    return [tuple(data[i:i + width]) for i in range(0, len(data), width)]


def rgb_values(image):
    return _chunked(image.convert("RGB").tobytes(), 3)


def rgba_values(image):
    return _chunked(image.convert("RGBA").tobytes(), 4)
