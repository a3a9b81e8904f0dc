import argparse
import logging
import os
import sys
from pprint import pprint
from typing import Optional

from psd_extract import PSDImage
from psd_extract.exceptions import PSDError
from psd_extract.version import __version__

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="psd-extract command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort decoding after this many seconds.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export layers as PNG")
    export_parser.add_argument("input_file", help="Input PSD file")
    export_parser.add_argument("output_dir", help="Output directory")

    show_parser = subparsers.add_parser("show", help="Show the file content")
    show_parser.add_argument("input_file", help="Input PSD file")

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    package_logger = logging.getLogger("psd_extract")
    if args.verbose:
        package_logger.setLevel(logging.DEBUG)
    else:
        package_logger.setLevel(logging.INFO)

    status = None
    try:
        psd = PSDImage.open(args.input_file, timeout=args.timeout)
    except PSDError as e:
        logger.error("Failed to decode %s: %s" % (args.input_file, e))
        if e.document is None:
            return 1
        # Layer images were decoded before the failure.
        logger.warning(
            "continuing with %d decoded layers" % len(e.document.layer_images)
        )
        psd = PSDImage(e.document)
        status = 1

    if args.command == "export":
        os.makedirs(args.output_dir, exist_ok=True)
        for index, layer in enumerate(psd):
            image = layer.topil()
            if image is None:
                logger.info("layer %d has no pixels, skipped" % index)
                continue
            output_file = os.path.join(args.output_dir, "layer%d.png" % index)
            image.save(output_file)
            logger.info("wrote %s" % output_file)

    elif args.command == "show":
        pprint(psd)
        for index, layer in enumerate(psd):
            print(
                "[%d] %r bbox=%r blend_mode=%r opacity=%d"
                % (index, layer, layer.bbox, layer.blend_mode, layer.opacity)
            )
        for diagnostic in psd.diagnostics:
            print("diagnostic: %s" % (diagnostic,))

    return status


if __name__ == "__main__":
    sys.exit(main())
