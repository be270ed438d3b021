import logging
import math
from enum import Enum

from PIL import Image

from .errors import SpfError
from .pixels import band_values, rgb_values, rgba_values

try:
    import imagequant
except ImportError:
    imagequant = None

logger = logging.getLogger(__name__)

# Riemersma error queue
ERROR_QUEUE_LENGTH = 16
ERROR_QUEUE_RATIO = 16


class Dither(Enum):
    NONE = "none"
    ERROR_DIFFUSION = "error-diffusion"
    SPACE_FILLING_CURVE = "space-filling-curve"


PILLOW_DITHER = {
    Dither.NONE: Image.Dither.NONE,
    Dither.ERROR_DIFFUSION: Image.Dither.FLOYDSTEINBERG,
}


def opaque_pixels(images):
    pixels = []
    for image in images:
        pixels.extend(pixel[:3] for pixel in rgba_values(image) if pixel[3])
    return pixels


def pixel_strip(pixels):
    """Lay pixels out as a one-row RGB image for palette selection."""
    if not pixels:
        pixels = [(0, 0, 0)]
    strip = Image.new("RGB", (len(pixels), 1))
    strip.putdata(pixels)
    return strip


def used_colors(palette_image):
    """Return the RGB colors actually referenced by a palette image."""
    palette = palette_image.getpalette() or []
    colors = []
    for _count, index in sorted(
        palette_image.getcolors(256), key=lambda item: item[1]
    ):
        colors.append(tuple(palette[index * 3:index * 3 + 3]))
    return colors


def _palette_image(colors):
    palette_image = Image.new("P", (1, 1))
    flat = [channel for color in colors for channel in color]
    # Padding repeats the first color so no new color can be matched.
    flat.extend(list(colors[0]) * (256 - len(colors)))
    palette_image.putpalette(flat)
    return palette_image


def _indexed_image(size, indices, colors):
    image = Image.new("P", size)
    image.putdata(indices)
    image.putpalette([channel for color in colors for channel in color])
    return image


def _nearest(colors, r, g, b):
    best_index = 0
    best_distance = None
    for index, (cr, cg, cb) in enumerate(colors):
        distance = (cr - r) ** 2 + (cg - g) ** 2 + (cb - b) ** 2
        if best_distance is None or distance < best_distance:
            best_index = index
            best_distance = distance
            if distance == 0:
                break
    return best_index


def hilbert_d2xy(side, distance):
    x = y = 0
    step = 1
    t = distance
    while step < side:
        rx = 1 & (t // 2)
        ry = 1 & (t ^ rx)
        if ry == 0:
            if rx == 1:
                x = step - 1 - x
                y = step - 1 - y
            x, y = y, x
        x += step * rx
        y += step * ry
        t //= 4
        step *= 2
    return x, y


def hilbert_path(width, height):
    side = 1
    while side < max(width, height):
        side *= 2
    for distance in range(side * side):
        x, y = hilbert_d2xy(side, distance)
        if x < width and y < height:
            yield x, y


def _error_weights():
    base = math.exp(math.log(ERROR_QUEUE_RATIO) / (ERROR_QUEUE_LENGTH - 1))
    weights = [base ** i for i in range(ERROR_QUEUE_LENGTH)]
    total = sum(weights)
    # Oldest error first, newest error weighs most.
    return [weight / total for weight in weights]


def riemersma_dither(image, colors):
    """Map an image onto colors along a Hilbert curve.

    The quantization error of the last ERROR_QUEUE_LENGTH pixels on the
    curve is carried forward, with exponentially more weight for recent
    pixels.
    """
    rgb = image.convert("RGB")
    width, height = rgb.size
    source = rgb_values(rgb)
    weights = _error_weights()
    queue = [(0.0, 0.0, 0.0)] * ERROR_QUEUE_LENGTH
    indices = [0] * (width * height)
    nearest = {}

    for x, y in hilbert_path(width, height):
        offset = y * width + x
        r, g, b = source[offset]
        er = sum(w * e[0] for w, e in zip(weights, queue))
        eg = sum(w * e[1] for w, e in zip(weights, queue))
        eb = sum(w * e[2] for w, e in zip(weights, queue))
        tr = min(255, max(0, r + er))
        tg = min(255, max(0, g + eg))
        tb = min(255, max(0, b + eb))
        key = (int(tr + 0.5), int(tg + 0.5), int(tb + 0.5))
        index = nearest.get(key)
        if index is None:
            index = nearest[key] = _nearest(colors, *key)
        cr, cg, cb = colors[index]
        indices[offset] = index
        queue = queue[1:] + [(tr - cr, tg - cg, tb - cb)]

    return _indexed_image((width, height), indices, colors)


class Quantizer:
    """Reduce an image set to one shared palette.

    Subclasses choose the colors; remapping every image onto them with the
    requested dither strategy is shared.
    """

    name = None

    def select_colors(self, pixels, max_colors):
        raise NotImplementedError

    def remap(self, image, colors, dither):
        if dither is Dither.SPACE_FILLING_CURVE:
            return riemersma_dither(image, colors)

        rgb = image.convert("RGB")
        quantized = rgb.quantize(
            palette=_palette_image(colors),
            dither=PILLOW_DITHER[dither],
        )
        indices = [
            index if index < len(colors) else 0
            for index in band_values(quantized)
        ]
        return _indexed_image(rgb.size, indices, colors)

    def quantize(self, images, max_colors, dither=Dither.NONE):
        """Return one palette image per source, sharing at most
        ``max_colors`` opaque colors."""
        colors = self.select_colors(opaque_pixels(images), max_colors)
        colors = colors[:max_colors]
        logger.debug(
            "%s selected %d colors for %d images",
            self.name,
            len(colors),
            len(images),
        )
        return [self.remap(image, colors, dither) for image in images]


class PillowQuantizer(Quantizer):
    name = "pillow"

    def select_colors(self, pixels, max_colors):
        strip = pixel_strip(pixels)
        palette_image = strip.quantize(
            colors=max_colors,
            method=Image.Quantize.MEDIANCUT,
            dither=Image.Dither.NONE,
        )
        return used_colors(palette_image)


class ImagequantQuantizer(Quantizer):
    name = "imagequant"

    def __init__(self):
        if imagequant is None:
            raise SpfError(
                "The imagequant quantizer requires the 'imagequant' package. "
                "Install it via 'pip install imagequant'."
            )

    def select_colors(self, pixels, max_colors):
        strip = pixel_strip(pixels).convert("RGBA")
        palette_image = imagequant.quantize_pil_image(
            strip,
            dithering_level=0.0,
            max_colors=max_colors,
        )
        if palette_image.mode != "P":
            palette_image = palette_image.convert("P")
        return used_colors(palette_image)


QUANTIZERS = {
    PillowQuantizer.name: PillowQuantizer,
    ImagequantQuantizer.name: ImagequantQuantizer,
}


def get_quantizer(name):
    try:
        factory = QUANTIZERS[name]
    except KeyError:
        raise SpfError(f"Unknown quantizer '{name}'") from None
    return factory()
