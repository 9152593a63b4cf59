#!/usr/bin/env python
import argparse
import logging
import re
import sys

from blur_kernel import KernelError, KernelSpec, InvalidSizeError, \
    InvalidVarianceError, generate_from_spec
from blur_present import print_kernel

logger = logging.getLogger(__name__)

EXIT_USAGE = 1
EXIT_INVALID = 2


class UsageError(Exception):
    pass


class KernelArgumentParser(argparse.ArgumentParser):
    """Prints usage to stdout and exits 1 instead of argparse's stderr/2."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # -1e-3, -inf and -nan are values, not options
        self._negative_number_matcher = re.compile(
            r'^-(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$|^-(inf|infinity|nan)$',
            re.IGNORECASE)

    def error(self, message):
        raise UsageError(message)


def make_parser() -> argparse.ArgumentParser:
    parser = KernelArgumentParser(
        prog="gen-kernel",
        description="Generate a normalized 2D gaussian blur kernel",
        epilog="example: gen-kernel 7 0.84089642")
    parser.add_argument('size',
                        help='odd kernel size, or radius with --radius')
    parser.add_argument('variance', help='sigma of gaussian kernel')
    parser.add_argument('--radius',
                        '-r',
                        action='store_true',
                        help='treat size as radius of kernel, center included')
    parser.add_argument('--verbose',
                        '-v',
                        action='store_true',
                        help='log debug information to stderr')
    return parser


def parse_spec(size: str, variance: str, radius: bool = False) -> KernelSpec:
    name = "blur-radius" if radius else "blur-size"
    try:
        size_value = int(size)
    except ValueError:
        raise InvalidSizeError(size, "should be an integer", name=name) from None
    try:
        variance_value = float(variance)
    except ValueError:
        raise InvalidVarianceError(variance) from None

    try:
        if radius:
            return KernelSpec.from_radius(size_value, variance_value)
        return KernelSpec(size_value, variance_value)
    except InvalidVarianceError as e:
        # report the argument as typed, not its float form
        raise InvalidVarianceError(variance, e.reason) from None


def main(argv=None) -> int:
    parser = make_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        parser.print_usage(sys.stdout)
        print(f"{parser.prog}: error: {e}")
        return EXIT_USAGE

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(asctime)s %(levelname)s %(message)s')

    try:
        spec = parse_spec(args.size, args.variance, radius=args.radius)
    except KernelError as e:
        logger.debug("rejected arguments %r %r", args.size, args.variance)
        print(f"ERROR: {e}")
        return EXIT_INVALID

    kernel = generate_from_spec(spec)
    logger.debug("separability error %.3e", kernel.separability_error())
    print_kernel(kernel)
    return 0


if __name__ == '__main__':
    sys.exit(main())
