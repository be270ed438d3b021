import logging
import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from PIL import Image

from .errors import (
    CapacityExceededError,
    IndexOutOfRangeError,
    InvalidFormatError,
)
from .packing import (
    TRANSPARENT,
    color_to_rgb565,
    color_to_rgb1555,
    unpack565,
    unpack1555,
)
from .pixels import band_values

logger = logging.getLogger(__name__)

SPF_EXTENSION = ".spf"
PALETTE_SIZE = 256
FRAME_HEADER_SENTINEL = 0xCCCCCCCC

HEADER_STRUCT = struct.Struct("<III")
PALETTE_TABLE_STRUCT = struct.Struct(f"<{PALETTE_SIZE}H")
COUNT_STRUCT = struct.Struct("<I")
FRAME_HEADER_STRUCT = struct.Struct("<HHHHIIIIII")

U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF


class PadMode(Enum):
    IGNORE = "ignore"
    BORDER = "border"


def _need(data, offset, size, what):
    if offset + size > len(data):
        raise InvalidFormatError(f"File truncated: {what}")


@dataclass
class SpfHeader:
    unknown1: int = 0
    unknown2: int = 1
    color_format: int = 0

    def pack(self):
        return HEADER_STRUCT.pack(
            self.unknown1, self.unknown2, self.color_format
        )

    @classmethod
    def unpack_from(cls, data, offset=0):
        _need(data, offset, HEADER_STRUCT.size, "header")
        return cls(*HEADER_STRUCT.unpack_from(data, offset))


class SpfPalette:
    """Up to 256 colors, stored as a 565 table followed by a 1555 table.

    Only the 565 table is used to resolve frame pixels. The 1555 words
    read from a file are kept as-is and written back verbatim; palettes
    built from colors derive them from the primary colors.
    """

    size = PALETTE_TABLE_STRUCT.size * 2

    def __init__(self, colors, secondary_raw=None):
        colors = list(colors)
        if len(colors) > PALETTE_SIZE:
            raise CapacityExceededError(
                f"Palette can only contain {PALETTE_SIZE} colors, "
                f"got {len(colors)}"
            )
        self.colors = colors
        self.secondary_raw = (
            list(secondary_raw) if secondary_raw is not None else None
        )
        self.padding = PALETTE_SIZE - len(colors)

    def __len__(self):
        return len(self.colors)

    def __getitem__(self, index):
        return self.colors[index]

    @property
    def secondary(self):
        """Decoded 1555 colors, or None for a palette not read from a file."""
        if self.secondary_raw is None:
            return None
        return [unpack1555(word) for word in self.secondary_raw]

    def primary_words(self):
        words = [color_to_rgb565(color) for color in self.colors]
        return words + [0] * self.padding

    def secondary_words(self):
        if self.secondary_raw is not None:
            words = list(self.secondary_raw)
        else:
            words = [color_to_rgb1555(color) for color in self.colors]
        return words + [0] * (PALETTE_SIZE - len(words))

    def pack(self):
        primary = PALETTE_TABLE_STRUCT.pack(*self.primary_words())
        secondary = PALETTE_TABLE_STRUCT.pack(*self.secondary_words())
        return primary + secondary

    @classmethod
    def unpack_from(cls, data, offset=0):
        _need(data, offset, cls.size, "palette")
        primary = PALETTE_TABLE_STRUCT.unpack_from(data, offset)
        secondary = PALETTE_TABLE_STRUCT.unpack_from(
            data, offset + PALETTE_TABLE_STRUCT.size
        )
        return cls(
            [unpack565(word) for word in primary],
            secondary_raw=secondary,
        )


@dataclass
class SpfFrameHeader:
    pixel_width: int
    pixel_height: int
    pad_width: int = 0
    pad_height: int = 0
    reserved: int = 0
    start_address: int = 0
    byte_width: Optional[int] = None
    byte_count: Optional[int] = None
    semi_byte_count: int = 0

    size = FRAME_HEADER_STRUCT.size

    def __post_init__(self):
        if self.byte_width is None:
            self.byte_width = self.pixel_width
        if self.byte_count is None:
            self.byte_count = self.pixel_width * self.pixel_height
        self._check_range(
            U16_MAX, "pixel_width", "pixel_height", "pad_width", "pad_height"
        )
        self._check_range(
            U32_MAX,
            "reserved",
            "start_address",
            "byte_width",
            "byte_count",
            "semi_byte_count",
        )

    def _check_range(self, limit, *names):
        for name in names:
            value = getattr(self, name)
            if not 0 <= value <= limit:
                raise InvalidFormatError(
                    f"Frame {name} {value} does not fit in 0-{limit}"
                )

    def pack(self):
        return FRAME_HEADER_STRUCT.pack(
            self.pad_width,
            self.pad_height,
            self.pixel_width,
            self.pixel_height,
            FRAME_HEADER_SENTINEL,
            self.reserved,
            self.start_address,
            self.byte_width,
            self.byte_count,
            self.semi_byte_count,
        )

    @classmethod
    def unpack_from(cls, data, offset=0):
        _need(data, offset, FRAME_HEADER_STRUCT.size, "frame header")
        (
            pad_width,
            pad_height,
            pixel_width,
            pixel_height,
            _sentinel,
            reserved,
            start_address,
            byte_width,
            byte_count,
            semi_byte_count,
        ) = FRAME_HEADER_STRUCT.unpack_from(data, offset)
        return cls(
            pixel_width=pixel_width,
            pixel_height=pixel_height,
            pad_width=pad_width,
            pad_height=pad_height,
            reserved=reserved,
            start_address=start_address,
            byte_width=byte_width,
            byte_count=byte_count,
            semi_byte_count=semi_byte_count,
        )


@dataclass
class SpfFrame:
    header: SpfFrameHeader
    data: bytes

    def __post_init__(self):
        if len(self.data) != self.header.byte_count:
            raise InvalidFormatError(
                f"Frame data is {len(self.data)} bytes, header declares "
                f"{self.header.byte_count}"
            )

    @classmethod
    def from_indices(cls, width, height, indices):
        """Build a frame from row-major palette indices."""
        for index in indices:
            if not 0 <= index < PALETTE_SIZE:
                raise IndexOutOfRangeError(
                    f"Palette index {index} is outside 0-{PALETTE_SIZE - 1}"
                )
        header = SpfFrameHeader(pixel_width=width, pixel_height=height)
        return cls(header=header, data=bytes(indices))

    @classmethod
    def from_image(cls, image):
        """Build a frame from a palette-mode Pillow image.

        The image's pixel values must already be indices into the
        palette the frame will be written with.
        """
        if image.mode != "P":
            raise InvalidFormatError(
                f"Frames are built from palette images, got mode {image.mode}"
            )
        width, height = image.size
        return cls.from_indices(width, height, band_values(image))

    def to_image(self, palette, pad_mode=PadMode.IGNORE):
        header = self.header
        width, height = header.pixel_width, header.pixel_height
        left = top = 0
        if pad_mode is PadMode.BORDER:
            left, top = header.pad_width, header.pad_height

        clear = TRANSPARENT.to_rgba8()
        rgba = [
            clear if color.transparent else color.to_rgba8()[:3] + (0xFF,)
            for color in palette.colors
        ]
        # Indices beyond the real colors land in the zero-filled padding.
        rgba.extend([clear] * (PALETTE_SIZE - len(rgba)))

        image = Image.new("RGBA", (left + width, top + height), (0, 0, 0, 0))
        if width == 0 or height == 0:
            return image
        frame_image = Image.new("RGBA", (width, height), clear)
        pixels = self.data[:width * height]
        frame_image.putdata([rgba[index] for index in pixels])
        image.paste(frame_image, (left, top))
        return image


@dataclass
class SpfImage:
    header: SpfHeader
    palette: SpfPalette
    frames: list = field(default_factory=list)

    def assign_start_addresses(self):
        address = 0
        for frame in self.frames:
            frame.header.start_address = address
            address += frame.header.byte_count
        return address

    def to_bytes(self):
        total = self.assign_start_addresses()
        parts = [
            self.header.pack(),
            self.palette.pack(),
            COUNT_STRUCT.pack(len(self.frames)),
        ]
        parts.extend(frame.header.pack() for frame in self.frames)
        parts.append(COUNT_STRUCT.pack(total))
        parts.extend(bytes(frame.data) for frame in self.frames)
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data):
        offset = 0
        header = SpfHeader.unpack_from(data, offset)
        offset += HEADER_STRUCT.size

        palette = SpfPalette.unpack_from(data, offset)
        offset += SpfPalette.size

        _need(data, offset, COUNT_STRUCT.size, "frame count")
        (frame_count,) = COUNT_STRUCT.unpack_from(data, offset)
        offset += COUNT_STRUCT.size

        _need(data, offset, frame_count * FRAME_HEADER_STRUCT.size,
              "frame headers")
        frame_headers = []
        for _ in range(frame_count):
            frame_headers.append(SpfFrameHeader.unpack_from(data, offset))
            offset += FRAME_HEADER_STRUCT.size

        _need(data, offset, COUNT_STRUCT.size, "total byte count")
        (total_byte_count,) = COUNT_STRUCT.unpack_from(data, offset)
        offset += COUNT_STRUCT.size

        declared = sum(fh.byte_count for fh in frame_headers)
        if total_byte_count != declared:
            logger.debug(
                "Total byte count %d differs from frame sum %d",
                total_byte_count,
                declared,
            )

        frames = []
        for index, frame_header in enumerate(frame_headers):
            _need(data, offset, frame_header.byte_count, f"frame {index} data")
            frame_data = bytes(data[offset:offset + frame_header.byte_count])
            frames.append(SpfFrame(header=frame_header, data=frame_data))
            offset += frame_header.byte_count

        if offset != len(data):
            logger.debug(
                "Ignoring %d bytes after frame payloads", len(data) - offset
            )

        return cls(header=header, palette=palette, frames=frames)

    def to_images(self, pad_mode=PadMode.IGNORE):
        return [
            frame.to_image(self.palette, pad_mode) for frame in self.frames
        ]
