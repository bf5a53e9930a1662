"""
Command line entry point.

Compiles a decoded movie (MovieSource JSON) into an animation document.

Usage:
    python -m vectoranim hero_stream.json -o hero.json --scale 2
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from vectoranim.compiler import CompileOptions, compile_movie
from vectoranim.config import settings
from vectoranim.exceptions import AnimationCompileError
from vectoranim.formats import MovieSource

logger = logging.getLogger('vectoranim')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='vectoranim',
        description='Compile a decoded display-list stream into a JSON animation document',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s hero_stream.json                  # Writes hero_stream.anim.json
  %(prog)s hero_stream.json -o hero.json     # Custom output file
  %(prog)s hero_stream.json -o -             # Write to stdout
  %(prog)s hero_stream.json --scale 2        # Double all translations and scales
  %(prog)s hero_stream.json --packed         # Also writes hero_stream.an
"""
    )
    parser.add_argument('input', type=Path, help='Decoded movie JSON (MovieSource)')
    parser.add_argument(
        '--output', '-o',
        default=None,
        help='Output file, "-" for stdout (default: <input>.anim.json)'
    )
    parser.add_argument('--name', default=None, help='Document name (default: from input)')
    parser.add_argument(
        '--scale', '-s',
        type=float,
        default=settings.SCALE,
        help=f'Global output scale (default: {settings.SCALE})'
    )
    parser.add_argument(
        '--use-root-transform',
        action='store_true',
        default=settings.USE_ROOT_TRANSFORM,
        help='Flatten the input root_matrix into top-level spans, scale translations only'
    )
    parser.add_argument(
        '--workers', '-w',
        type=int,
        default=settings.WORKERS,
        help=f'Threads used to build sprites (default: {settings.WORKERS})'
    )
    parser.add_argument(
        '--packed',
        action='store_true',
        help='Also write a MessagePack copy (<input>.an) next to the input'
    )
    parser.add_argument(
        '--indent',
        type=int,
        default=settings.JSON_INDENT,
        help='JSON indentation (default: compact)'
    )
    return parser


def default_output_path(input_path: Path) -> Path:
    return input_path.with_name(f'{input_path.stem}.anim.json')


def packed_output_path(input_path: Path) -> Path:
    return input_path.with_name(f'{input_path.stem}.an')


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        movie = MovieSource.load(args.input)
        if args.name:
            movie = movie.model_copy(update={'name': args.name})
        options = CompileOptions(
            scale=args.scale,
            use_root_transform=args.use_root_transform,
            root_matrix=movie.root_matrix,
            workers=args.workers,
        )
        document = compile_movie(movie, options)
        if args.output == '-':
            sys.stdout.write(document.to_json(indent=args.indent) + '\n')
        else:
            output = Path(args.output) if args.output else default_output_path(args.input)
            document.save(output, indent=args.indent)
            logger.info("Wrote %s", output)
        if args.packed:
            packed = packed_output_path(args.input)
            document.save_packed(packed)
            logger.info("Wrote %s", packed)
    except (AnimationCompileError, ValidationError, ValueError, OSError) as e:
        logger.error("%s: %s", args.input, e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
