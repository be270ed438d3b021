import logging
import os
import re
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from .errors import (
    InvalidFormatError,
    InvalidOutputTargetError,
    MissingInputError,
)
from .quantizer import Dither, get_quantizer
from .spf import (
    SPF_EXTENSION,
    PadMode,
    SpfFrame,
    SpfHeader,
    SpfImage,
    SpfPalette,
)
from .transparency import quantize_with_transparency

logger = logging.getLogger(__name__)


@dataclass
class ConvertOptions:
    dither: Dither = Dither.NONE
    quantizer: str = "pillow"
    pad_mode: PadMode = PadMode.IGNORE
    create_dirs: bool = False
    frame_name: str = "frame{index}.png"


def natural_key(name):
    return [
        int(part) if part.isdigit() else part.casefold()
        for part in re.split(r"(\d+)", name)
    ]


def collect_input_paths(input_path):
    if os.path.isdir(input_path):
        names = [
            name
            for name in os.listdir(input_path)
            if not name.startswith(".")
            and os.path.isfile(os.path.join(input_path, name))
        ]
        if not names:
            raise MissingInputError(
                f"Input directory contains no files: {input_path}"
            )
        names.sort(key=natural_key)
        return [os.path.join(input_path, name) for name in names]
    if os.path.isfile(input_path):
        return [input_path]
    raise MissingInputError(f"Input path does not exist: {input_path}")


def has_spf_extension(path):
    return path.lower().endswith(SPF_EXTENSION)


def images_to_spf(images, options=None, quantizer=None):
    """Encode an ordered image set into an SpfImage."""
    options = options or ConvertOptions()
    if quantizer is None:
        quantizer = get_quantizer(options.quantizer)

    colormap, indexed_frames = quantize_with_transparency(
        images, quantizer, options.dither
    )
    palette = SpfPalette(colormap)
    frames = [
        SpfFrame.from_indices(frame.width, frame.height, frame.indices)
        for frame in indexed_frames
    ]
    spf_image = SpfImage(header=SpfHeader(), palette=palette, frames=frames)
    spf_image.assign_start_addresses()
    return spf_image


def read_spf(input_path):
    if not has_spf_extension(input_path):
        raise InvalidFormatError(
            "File is not an spf file (make sure it has the "
            f"{SPF_EXTENSION} extension): {input_path}"
        )
    if not os.path.isfile(input_path):
        raise MissingInputError(f"Input path does not exist: {input_path}")
    with open(input_path, "rb") as input_file:
        data = input_file.read()
    return SpfImage.from_bytes(data)


def write_spf(spf_image, output_path):
    if not has_spf_extension(output_path):
        output_path += SPF_EXTENSION
    data = spf_image.to_bytes()
    with open(output_path, "wb") as output_file:
        output_file.write(data)
    return output_path, len(data)


def png_to_spf(input_path, output_path, options=None, quantizer=None):
    options = options or ConvertOptions()
    paths = collect_input_paths(input_path)
    images = []
    for path in paths:
        try:
            with Image.open(path) as image:
                images.append(image.copy())
        except UnidentifiedImageError as exc:
            raise InvalidFormatError(f"Not an image: {path}") from exc
        logger.debug("Loaded %s (%dx%d, %s)", path, *image.size, image.mode)

    spf_image = images_to_spf(images, options, quantizer)
    output_path, size = write_spf(spf_image, output_path)

    print(f"Wrote SPF file: {output_path}")
    print(f"  Size: {size} bytes")
    print(
        f"  Palette: {len(spf_image.palette)} colors, "
        f"padding {spf_image.palette.padding}"
    )
    print(f"  Frames: {len(spf_image.frames)}, dither: {options.dither.value}")
    for index, frame in enumerate(spf_image.frames):
        header = frame.header
        print(
            f"    Frame {index}: {header.pixel_width}x{header.pixel_height}, "
            f"start {header.start_address}, bytes {header.byte_count}"
        )
    return output_path


def frame_output_paths(output_path, frame_count, options):
    if frame_count == 1:
        if os.path.isdir(output_path):
            name = options.frame_name.format(index=1)
            return [os.path.join(output_path, name)]
        if not os.path.splitext(output_path)[1]:
            raise InvalidOutputTargetError(
                "Output path is not a directory and does not have an "
                f"extension: {output_path}"
            )
        return [output_path]

    if not os.path.isdir(output_path):
        if os.path.exists(output_path) or not options.create_dirs:
            raise InvalidOutputTargetError(
                "Output path must be a directory when writing "
                f"{frame_count} frames: {output_path}"
            )
        os.makedirs(output_path)
        logger.debug("Created output directory %s", output_path)
    return [
        os.path.join(output_path, options.frame_name.format(index=index))
        for index in range(1, frame_count + 1)
    ]


def spf_to_png(input_path, output_path, options=None):
    options = options or ConvertOptions()
    spf_image = read_spf(input_path)
    if not spf_image.frames:
        raise InvalidFormatError(f"SPF file contains no frames: {input_path}")

    targets = frame_output_paths(output_path, len(spf_image.frames), options)
    for frame, target in zip(spf_image.frames, targets):
        image = frame.to_image(spf_image.palette, options.pad_mode)
        image.save(target)
        print(f"Wrote image: {target} ({image.width}x{image.height})")
    return targets


def describe_spf(input_path):
    spf_image = read_spf(input_path)
    header = spf_image.header
    palette = spf_image.palette
    opaque = sum(1 for color in palette.colors if not color.transparent)
    lines = [
        f"SPF file: {input_path}",
        f"  Header: unknown1={header.unknown1}, unknown2={header.unknown2}, "
        f"color format={header.color_format}",
        f"  Palette: {opaque} opaque colors, "
        f"{len(palette) - opaque} transparent entries",
        f"  Frames: {len(spf_image.frames)}",
    ]
    for index, frame in enumerate(spf_image.frames):
        fh = frame.header
        lines.append(
            f"    Frame {index}: {fh.pixel_width}x{fh.pixel_height} "
            f"pad {fh.pad_width}x{fh.pad_height}, start {fh.start_address}, "
            f"bytes {fh.byte_count}, semi {fh.semi_byte_count}"
        )
    return "\n".join(lines)
