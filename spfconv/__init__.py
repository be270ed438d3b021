"""Convert between ordinary images and SPF palette images.

SPF holds one 256-color palette shared by any number of frames, each frame
stored as one palette index byte per pixel.
"""

from .convert import (
    ConvertOptions,
    describe_spf,
    images_to_spf,
    png_to_spf,
    read_spf,
    spf_to_png,
    write_spf,
)
from .errors import (
    CapacityExceededError,
    IndexOutOfRangeError,
    InvalidFormatError,
    InvalidOutputTargetError,
    MissingInputError,
    SpfError,
)
from .packing import Color, pack565, pack1555, unpack565, unpack1555
from .quantizer import Dither, get_quantizer
from .spf import (
    PadMode,
    SpfFrame,
    SpfFrameHeader,
    SpfHeader,
    SpfImage,
    SpfPalette,
)

__all__ = [
    "CapacityExceededError",
    "Color",
    "ConvertOptions",
    "Dither",
    "IndexOutOfRangeError",
    "InvalidFormatError",
    "InvalidOutputTargetError",
    "MissingInputError",
    "PadMode",
    "SpfError",
    "SpfFrame",
    "SpfFrameHeader",
    "SpfHeader",
    "SpfImage",
    "SpfPalette",
    "describe_spf",
    "get_quantizer",
    "images_to_spf",
    "pack1555",
    "pack565",
    "png_to_spf",
    "read_spf",
    "spf_to_png",
    "unpack1555",
    "unpack565",
    "write_spf",
]
