import argparse
import logging
import sys

from .convert import ConvertOptions, describe_spf, png_to_spf, spf_to_png
from .errors import SpfError
from .quantizer import QUANTIZERS, Dither
from .spf import PadMode


def build_parser():
    parser = argparse.ArgumentParser(
        prog="spfconv",
        description="Convert between images and multi-frame SPF files.",
    )
    parser.add_argument(
        "input",
        help=(
            "Input file. In encode mode a directory turns every file in it "
            "into one frame, in natural filename order."
        ),
    )
    parser.add_argument(
        "output",
        nargs="?",
        help=(
            "Output file. Decoding several frames needs a directory "
            "(not used in info mode)."
        ),
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--mode",
        choices=["encode", "decode", "info"],
        default="encode",
        help=(
            "Operation mode. 'encode' converts images -> SPF, "
            "'decode' converts SPF -> PNG, 'info' prints SPF headers."
        ),
    )
    mode.add_argument(
        "-t",
        "--tospf",
        dest="mode",
        action="store_const",
        const="encode",
        help="Same as --mode encode",
    )
    mode.add_argument(
        "-f",
        "--fromspf",
        dest="mode",
        action="store_const",
        const="decode",
        help="Same as --mode decode",
    )
    parser.add_argument(
        "--dither",
        choices=[dither.value for dither in Dither],
        default=Dither.NONE.value,
        help="Dithering used when reducing to 255 colors (encode mode)",
    )
    parser.add_argument(
        "--quantizer",
        choices=sorted(QUANTIZERS),
        default="pillow",
        help="Color selection backend (encode mode, default: pillow)",
    )
    parser.add_argument(
        "--pad-mode",
        choices=[pad_mode.value for pad_mode in PadMode],
        default=PadMode.IGNORE.value,
        help=(
            "How frame pad sizes are applied in decode mode. 'border' draws "
            "the frame after a transparent top/left margin."
        ),
    )
    parser.add_argument(
        "--mkdir",
        action="store_true",
        help="Create the output directory when decoding several frames",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log diagnostic details",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.mode != "info" and args.output is None:
        parser.error(f"an output path is required in {args.mode} mode")

    options = ConvertOptions(
        dither=Dither(args.dither),
        quantizer=args.quantizer,
        pad_mode=PadMode(args.pad_mode),
        create_dirs=args.mkdir,
    )

    try:
        if args.mode == "encode":
            png_to_spf(args.input, args.output, options)
        elif args.mode == "decode":
            spf_to_png(args.input, args.output, options)
        else:
            print(describe_spf(args.input))
    except SpfError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0
