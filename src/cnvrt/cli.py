"""
Command-line interface for cnvrt.

Usage:
  cnvrt photo.png -t webp                  # Write photo.webp to Downloads
  cnvrt photo.png -t jpg -o out.jpg        # Explicit output path
  cnvrt clip.mkv -t mp4 --preset fast      # Video transcode
  cnvrt --formats mkv                      # What can mkv become?
  cnvrt --status                           # FFmpeg availability
"""

from __future__ import annotations

import argparse
import os
import sys

from cnvrt._version import __version__
from cnvrt.catalog import get_supported_formats, is_supported_format, normalize
from cnvrt.config import get_config
from cnvrt.dispatcher import ConversionDispatcher
from cnvrt.handoff import InitialPathHandoff
from cnvrt.log import setup_logging
from cnvrt.models import ConversionRequest, TranscodeOptions
from cnvrt.provisioning import get_provisioner_status


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cnvrt",
        description="Convert images and videos between formats.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Images are converted with Pillow. Videos are transcoded with FFmpeg; if no
FFmpeg is installed, a static build is downloaded into the user cache on
first use.

Examples:
  cnvrt photo.png -t webp
  cnvrt photo.png -t jpg -o out.jpg --no-transparency
  cnvrt clip.mkv -t webm --bitrate 2000k
  cnvrt --formats mkv
  cnvrt --status
        """,
    )
    parser.add_argument("input", nargs="?", help="File to convert")
    parser.add_argument("-t", "--to", dest="to_format", help="Target format (e.g. png, mp4)")
    parser.add_argument(
        "-o",
        "--output",
        default="",
        help="Output path (default: Downloads directory)",
    )
    parser.add_argument(
        "--from",
        dest="from_format",
        help="Source format (default: input file extension)",
    )
    parser.add_argument(
        "--no-transparency",
        action="store_true",
        help="Flatten transparency onto a white background",
    )
    parser.add_argument("--bitrate", help="Video bitrate (e.g. 5000k)")
    parser.add_argument("--preset", help="Encoder preset (e.g. medium)")
    parser.add_argument("--json", action="store_true", help="Print the outcome as JSON")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More log output")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument("--status", action="store_true", help="Show FFmpeg availability")
    mode_group.add_argument(
        "--formats",
        metavar="EXT",
        help="List formats EXT can be converted to",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for cnvrt CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(["WARNING", "INFO", "DEBUG"][min(args.verbose, 2)])

    if args.status:
        return show_status()

    if args.formats:
        if not is_supported_format(args.formats):
            print(f"Error: Unsupported format: {args.formats}", file=sys.stderr)
            return 1
        print(" ".join(get_supported_formats(args.formats)))
        return 0

    if not args.input:
        parser.error("the following arguments are required: input")
    if not args.to_format:
        parser.error("the following arguments are required: -t/--to")

    handoff = InitialPathHandoff()
    handoff.set(args.input)
    return run_conversion(handoff, args)


def run_conversion(handoff: InitialPathHandoff, args: argparse.Namespace) -> int:
    """Convert the file handed over at startup.

    Args:
        handoff: Holds the input path given on the command line
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    input_path = handoff.take()
    if input_path is None:
        print("Error: no input file", file=sys.stderr)
        return 1

    from_format = args.from_format or os.path.splitext(input_path)[1]
    if not normalize(from_format):
        print(
            f"Error: cannot tell the format of {input_path}, use --from",
            file=sys.stderr,
        )
        return 1

    options = None
    if args.bitrate or args.preset:
        defaults = get_config().transcode
        options = TranscodeOptions(
            bitrate=args.bitrate or defaults.bitrate,
            preset=args.preset or defaults.preset,
        )

    request = ConversionRequest(
        input_path=input_path,
        output_path=args.output,
        source_format=from_format,
        target_format=args.to_format,
        keep_transparency=not args.no_transparency,
        options=options,
    )
    outcome = ConversionDispatcher().convert(request)

    if args.json:
        print(outcome.model_dump_json(indent=2))
    elif outcome.success:
        print(f"{outcome.message}: {outcome.output_path}")
    else:
        print(f"Error: {outcome.message}", file=sys.stderr)

    return 0 if outcome.success else 1


def show_status() -> int:
    """Print how FFmpeg would be resolved."""
    status = get_provisioner_status()

    print("cnvrt status:")
    print("=" * 50)
    print("\nFFmpeg:")
    print("-" * 50)
    for label, key in (("cached", "cached"), ("system", "system")):
        icon = "✓" if status[key] else "✗"
        print(f"  {icon} {label}")
    print(f"  cache path: {status['cache_path']}")
    if status.get("platform"):
        print(f"  download:   {status['platform']} <- {status['download_url']}")
    else:
        print(f"  download:   unavailable ({status.get('error')})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
