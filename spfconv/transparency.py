"""Quantize an image set to 255 colors while keeping its transparency.

SPF can only express transparency as the zero 565 word, and color
quantization throws alpha away. Transparent pixels are therefore recorded
before quantizing, and written back afterwards into one extra palette slot
that quantization never gets to spend.
"""

import logging
from dataclasses import dataclass

from .packing import TRANSPARENT, Color
from .pixels import band_values
from .quantizer import Dither

logger = logging.getLogger(__name__)

MAX_QUANTIZED_COLORS = 255


def transparent_palette_indices(image):
    indices = set()
    transparency = image.info.get("transparency")
    if isinstance(transparency, int):
        indices.add(transparency)
    elif isinstance(transparency, bytes):
        indices.update(i for i, alpha in enumerate(transparency) if alpha == 0)
    if image.palette is not None and image.palette.mode == "RGBA":
        palette = image.getpalette("RGBA") or []
        indices.update(
            i for i in range(len(palette) // 4) if palette[i * 4 + 3] == 0
        )
    return indices


def transparency_map(image):
    """Return the row-major offsets of every transparent pixel."""
    if image.mode == "P":
        transparent = transparent_palette_indices(image)
        if not transparent:
            return frozenset()
        return frozenset(
            offset
            for offset, index in enumerate(band_values(image))
            if index in transparent
        )

    if "A" not in image.getbands() and "transparency" not in image.info:
        return frozenset()
    alpha = image.convert("RGBA").getchannel("A")
    return frozenset(
        offset
        for offset, value in enumerate(band_values(alpha))
        if value == 0
    )


@dataclass
class IndexedFrame:
    width: int
    height: int
    indices: list
    colormap: list

    @classmethod
    def from_image(cls, image):
        width, height = image.size
        indices = band_values(image)
        palette = image.getpalette() or []
        used = max(indices) + 1 if indices else 0
        colormap = [
            Color.from_rgb8(*palette[i * 3:i * 3 + 3]) for i in range(used)
        ]
        return cls(width, height, indices, colormap)

    def reserve_transparent(self, transparent):
        """Append a transparent slot and point transparent pixels at it."""
        slot = len(self.colormap)
        self.colormap.append(TRANSPARENT)
        for offset in transparent:
            self.indices[offset] = slot
        return slot

    def used_colors(self):
        seen = []
        for index in sorted(set(self.indices)):
            seen.append(self.colormap[index])
        return seen

    def remap(self, colormap):
        lookup = {}
        for position, color in enumerate(colormap):
            lookup.setdefault(color, position)
        table = [lookup.get(color) for color in self.colormap]
        return IndexedFrame(
            self.width,
            self.height,
            [table[index] for index in self.indices],
            list(colormap),
        )


def mosaic_colormap(frames):
    """Ordered union of the colors used by all frames.

    Opaque colors come first, in the order they are first seen. A single
    transparent entry closes the list when any frame uses one.
    """
    colors = []
    seen = set()
    has_transparent = False
    for frame in frames:
        for color in frame.used_colors():
            if color.transparent:
                has_transparent = True
            elif color not in seen:
                seen.add(color)
                colors.append(color)
    if has_transparent:
        colors.append(TRANSPARENT)
    return colors


def quantize_with_transparency(images, quantizer, dither=Dither.NONE):
    """Quantize images to a shared palette with a reserved transparent slot.

    Returns the composite colormap and one IndexedFrame per image, with
    indices into that colormap.
    """
    maps = [transparency_map(image) for image in images]
    quantized = quantizer.quantize(images, MAX_QUANTIZED_COLORS, dither)

    frames = []
    for image, transparent in zip(quantized, maps):
        frame = IndexedFrame.from_image(image)
        frame.reserve_transparent(transparent)
        frames.append(frame)

    colormap = mosaic_colormap(frames)
    logger.debug(
        "Composite colormap has %d colors, %d frames with transparency",
        len(colormap),
        sum(1 for transparent in maps if transparent),
    )
    return colormap, [frame.remap(colormap) for frame in frames]
