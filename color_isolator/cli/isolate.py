"""
color-isolate: keep one color of an image (or a folder of images),
turn every other pixel gray.

    color-isolate photo.png --at 120 48
    color-isolate photo.png --color "#d02020" --tolerance 45 -o red_only.png
    color-isolate shots/ --color 200,30,30 -o isolated/ --recursive
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..errors import ColorIsolatorError
from ..models.color import Color
from ..models.coordinate import Coordinate
from ..pipeline.isolate_color import ISOLATED_SUFFIX, OUTPUT_EXT, isolate_gallery
from ..services.color_sampler import ColorSampler
from ..services.image_service import ImageService
from ..services.isolation_transform import IsolationTransform

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="color-isolate",
        description="Keep pixels close to one color, convert the rest to grayscale.",
    )
    parser.add_argument("input", type=Path, help="Image file or directory of images")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Output file (single image) or directory (folder input, "
                             "default: <folder>_isolated beside it)")
    ref = parser.add_mutually_exclusive_group(required=True)
    ref.add_argument("--at", nargs=2, type=int, metavar=("X", "Y"),
                     help="Sample the reference color at pixel X Y")
    ref.add_argument("--color", type=Color.parse,
                     help='Reference color as "r,g,b", "r,g,b,a" or "#rrggbb"')
    parser.add_argument("--tolerance", type=float, default=None,
                        help="Max RGB distance that still counts as the same color "
                             "(default: SIMILARITY_TOLERANCE or 30)")
    parser.add_argument("--recursive", action="store_true",
                        help="Descend into sub-directories of a folder input")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _isolate_file(args, image_service: ImageService) -> Path:
    source = image_service.load(args.input)
    if args.at is not None:
        reference = ColorSampler().sample(source, Coordinate(*args.at))
    else:
        reference = args.color
    print(f"Reference color: {reference.to_css()}")

    isolated = IsolationTransform().isolate(source, reference, args.tolerance)
    output = args.output or args.input.with_name(f"{args.input.stem}{ISOLATED_SUFFIX}{OUTPUT_EXT}")
    return image_service.save(isolated, output)


def _isolate_dir(args, image_service: ImageService) -> list:
    # sibling of the input folder, so reruns never read earlier results
    output_dir = args.output or args.input.parent / f"{args.input.resolve().name}{ISOLATED_SUFFIX}"
    gallery = image_service.stream_gallery(args.input, recursive=args.recursive,
                                           exclude=output_dir)
    return isolate_gallery(
        gallery,
        output_dir,
        reference=args.color,
        at=Coordinate(*args.at) if args.at is not None else None,
        tolerance=args.tolerance,
        image_service=image_service,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    image_service = ImageService()
    try:
        if args.input.is_dir():
            written = _isolate_dir(args, image_service)
            print(f"Isolated {len(written)} images")
        else:
            written = _isolate_file(args, image_service)
            print(f"Saved: {written}")
    except (ColorIsolatorError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
