"""CLI entry point for pptxforge.

Builds decks from YAML or Markdown, validates existing packages and lists
their contents.

Usage::

    # Build a deck described in YAML
    pptxforge build deck.yaml -o output/deck.pptx

    # Convert Markdown to slides
    pptxforge markdown talk.md -o output/talk.pptx --size 16x9

    # Check an existing PPTX against the package invariants
    pptxforge validate output/deck.pptx

    # Show slide titles, or every part in the archive
    pptxforge inspect output/deck.pptx --parts
"""

import argparse
import io
import logging
import sys
from pathlib import Path

from pptx import Presentation as PptxPresentation
from pptx.util import Emu

from pptxforge.errors import PptxForgeError
from pptxforge.package.zipwriter import build_pptx
from pptxforge.processor.markdown import load_markdown
from pptxforge.qa.validator import QAValidator, list_parts
from pptxforge.schema.loader import load_deck
from pptxforge.schema.units import SlideSize


# ---------------------------------------------------------------------------
# Shared pipeline
# ---------------------------------------------------------------------------

def _build_and_write(deck, args):
    """Build, optionally QA, and write a deck."""
    _info(f"Deck: {deck.title or '(untitled)'} ({deck.slide_count} slides)")
    _info("Building PPTX...")
    pptx_bytes = build_pptx(deck)

    if not args.skip_qa:
        _info("Running QA validation...")
        qa_result = QAValidator(deck).validate(pptx_bytes)
        if qa_result.passed:
            _info(qa_result.summary())
        else:
            _warn(qa_result.summary())
            if args.verbose:
                print(qa_result.report(), file=sys.stderr)
            if not args.force:
                _error("QA validation failed. Use --force to write anyway, "
                       "or --skip-qa to skip validation.")
    else:
        _info("QA validation skipped (--skip-qa)")

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(pptx_bytes)
    _info(f"Written: {output} ({len(pptx_bytes):,} bytes)")


def _read_pptx(path_arg):
    path = Path(path_arg)
    if not path.exists():
        _error(f"PPTX file not found: {path}")
    return path, path.read_bytes()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_build(args):
    """Build a PPTX from a YAML deck file."""
    path = Path(args.deck)
    if not path.exists():
        _error(f"Deck file not found: {path}")
    deck = load_deck(path)
    _build_and_write(deck, args)


def cmd_markdown(args):
    """Build a PPTX from a Markdown file."""
    path = Path(args.source)
    if not path.exists():
        _error(f"Markdown file not found: {path}")
    deck = load_markdown(path, slide_size=SlideSize.from_name(args.size),
                         title=args.title)
    _build_and_write(deck, args)


def cmd_validate(args):
    """Validate an existing PPTX against the package invariants."""
    path, pptx_bytes = _read_pptx(args.pptx)
    _info(f"Validating {path}")
    qa_result = QAValidator().validate(pptx_bytes)
    print(qa_result.report())
    sys.exit(0 if qa_result.passed else 1)


def cmd_inspect(args):
    """Show slide titles and dimensions, or the archive's parts."""
    path, pptx_bytes = _read_pptx(args.pptx)
    if args.parts:
        for name in list_parts(pptx_bytes):
            print(name)
        return

    prs = PptxPresentation(io.BytesIO(pptx_bytes))
    width, height = Emu(prs.slide_width), Emu(prs.slide_height)
    print(f"File:        {path}")
    print(f"Title:       {prs.core_properties.title or '(untitled)'}")
    print(f"Dimensions:  {width.inches:g}\" x {height.inches:g}\"")
    print(f"Slides:      {len(prs.slides)}")
    print(f"Layouts:     {len(prs.slide_layouts)}")
    print()
    for number, slide in enumerate(prs.slides, start=1):
        title = slide.shapes.title.text if slide.shapes.title is not None else ""
        notes = " (notes)" if slide.has_notes_slide else ""
        print(f"  [{number:2d}] {title or '(no title)'}"
              f" | {slide.slide_layout.name}{notes}"
              f" | {len(slide.shapes)} shape(s)")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _info(msg):
    print(f"  {msg}", file=sys.stderr)


def _warn(msg):
    print(f"  WARNING: {msg}", file=sys.stderr)


def _error(msg):
    print(f"  ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pptxforge",
        description="Build OOXML presentations from deck descriptions.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- build ----
    build = subparsers.add_parser(
        "build",
        help="Build a PPTX from a YAML (or JSON) deck file.",
    )
    build.add_argument("deck", help="Path to the deck file.")
    _add_output_args(build)
    build.set_defaults(func=cmd_build)

    # ---- markdown ----
    md = subparsers.add_parser(
        "markdown",
        help="Build a PPTX from a Markdown file.",
    )
    md.add_argument("source", help="Path to the Markdown file.")
    md.add_argument(
        "--size",
        choices=["4x3", "16x9", "16x10", "widescreen"],
        default="4x3",
        help="Slide size (default: 4x3).",
    )
    md.add_argument(
        "--title",
        help="Deck title (default: the first '#' heading).",
    )
    _add_output_args(md)
    md.set_defaults(func=cmd_markdown)

    # ---- validate ----
    val = subparsers.add_parser(
        "validate",
        help="Validate an existing PPTX package.",
    )
    val.add_argument("pptx", help="Path to the PPTX file to validate.")
    _add_verbose_arg(val)
    val.set_defaults(func=cmd_validate)

    # ---- inspect ----
    insp = subparsers.add_parser(
        "inspect",
        help="Show slides or archive parts of a PPTX.",
    )
    insp.add_argument("pptx", help="Path to the PPTX file.")
    insp.add_argument(
        "--parts",
        action="store_true",
        default=False,
        help="List every part in the archive.",
    )
    _add_verbose_arg(insp)
    insp.set_defaults(func=cmd_inspect)

    return parser


def _add_output_args(parser):
    """Add -o / --skip-qa / --force / -v args to a build subparser."""
    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output PPTX file path.",
    )
    parser.add_argument(
        "--skip-qa",
        action="store_true",
        default=False,
        help="Skip QA validation after generation.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Write output even if QA validation fails.",
    )
    _add_verbose_arg(parser)


def _add_verbose_arg(parser):
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Show detailed output and debug logging.",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    try:
        args.func(args)
    except PptxForgeError as exc:
        _error(str(exc))


if __name__ == "__main__":
    main()
