"""Command-line interface for purefbc"""
import sys
import argparse
import logging
import time
import imageio.v3 as iio
from .cacheline import Cacheline
from .errors import DecodeError, UnsupportedMode

logger = logging.getLogger(__name__)


def _hex_code(value: str) -> int:
    return int(value, 16)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='purefbc',
        description='Decode compressed GPU framebuffer cachelines to RGBA8 pixels',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  purefbc dcc -d 28 < payload.bin > pixels.bin       # AMD DCC, 4 cachelines
  purefbc dcc -t -d cc < payload.txt                 # Hex in, labeled hex dump out
  purefbc ccs -g 8 -i dump.bin --index 3             # Intel gen8, 4th cacheline of a dump
  purefbc ccs -g 11 -c 6 -t -o preview.png < p.txt   # Intel gen11 mode 6, plus PNG preview
        """
    )
    subparsers = parser.add_subparsers(dest='format', required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('-t', '--text', action='store_true',
                        help='Read hex bytes and write a labeled hex dump instead of raw binary')
    common.add_argument('-i', '--input', help='Input file (default: stdin)')
    common.add_argument('--index', type=int, default=0,
                        help='Cacheline to decode from a raw dump (default: 0)')
    common.add_argument('-o', '--output', help='Also write a PNG preview of the decoded block')
    common.add_argument('-v', '--verbose', action='store_true', help='Log decode details')

    dcc = subparsers.add_parser('dcc', parents=[common], help='AMD delta color compression')
    dcc.add_argument('-d', '--dcc', type=_hex_code, required=True,
                     help='DCC metadata code in hex: 28, cc or 66')

    ccs = subparsers.add_parser('ccs', parents=[common], help='Intel compression control surface')
    ccs.add_argument('-g', '--generation', type=int, default=8, choices=(8, 11),
                     help='Hardware generation (default: 8)')
    ccs.add_argument('-c', '--ccs', type=int,
                     help='Gen11 CCS mode: 1, 2, 6 or 8')

    return parser


def read_cacheline(args: argparse.Namespace) -> Cacheline:
    """Read the input payload as raw bytes or hex text"""
    if args.input:
        with open(args.input, 'rb') as f:
            data = f.read()
    else:
        data = sys.stdin.buffer.read()

    if args.text:
        return Cacheline.from_hex(data.decode('ascii'))
    return Cacheline.from_dump(data, args.index)


def main(argv=None):
    """Command-line interface for purefbc"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.text and args.index:
        parser.error('--index applies to raw dumps only')
    if args.format == 'ccs' and args.generation == 11 and args.ccs is None:
        parser.error('generation 11 requires -c')

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s: %(message)s',
        stream=sys.stderr,
    )

    try:
        cacheline = read_cacheline(args)
        logger.debug("%s", cacheline)

        start = time.perf_counter()
        if args.format == 'dcc':
            block = cacheline.decode_dcc(args.dcc)
        else:
            block = cacheline.decode_ccs(args.generation, args.ccs)
        logger.debug("Decoded %r in %.2f ms", block, (time.perf_counter() - start) * 1000)

    except FileNotFoundError:
        print(f"Error: File '{args.input}' not found", file=sys.stderr)
        sys.exit(1)
    except UnsupportedMode as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    except DecodeError as e:
        print(f"Decode failed: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        sys.exit(1)

    if args.text:
        sys.stdout.write(block.to_hex())
    else:
        sys.stdout.buffer.write(block.tobytes())
    sys.stdout.flush()

    if args.output:
        iio.imwrite(args.output, block.to_image())
        logger.debug("Saved preview to: %s", args.output)


if __name__ == "__main__":
    main()
