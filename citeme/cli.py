#!/usr/bin/env python3
"""CiteMe CLI - citation generation and export from the command line.

Usage:
    citeme cite <pdfs...> [--masterpiece FILE | --text FILE] [options]
    citeme format <response.json> [options]
    citeme styles
    citeme --version
    citeme --help

Commands:
    cite      Generate citations for reference PDFs with Gemini
    format    Format and export a saved citation service response
    styles    List the supported citation styles

Examples:
    # Cite two references in APA and export PDF and DOCX
    citeme cite smith2020.pdf jones2019.pdf --style APA -o ./output

    # Add citations to your own essay
    citeme cite smith2020.pdf --masterpiece essay.pdf --style OSCOLA

    # Re-export a saved response as HTML
    citeme format citations.json --style IEEE --format html
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from .config import Config
from .core.styles import STYLE_RULES, supported_styles, validate_style
from .exceptions import CiteMeError

DEFAULT_FORMATS = "pdf,docx"
OUTPUT_FORMATS = ("pdf", "docx", "html", "json")
RESPONSE_FILE = "citations.json"


def get_version():
    """Get package version."""
    from citeme import __version__
    return __version__


def _parse_formats(value):
    formats = [fmt.strip().lower() for fmt in value.split(",") if fmt.strip()]
    unknown = [fmt for fmt in formats if fmt not in OUTPUT_FORMATS]
    if unknown or not formats:
        raise argparse.ArgumentTypeError(
            f"Unsupported format(s): {', '.join(unknown) or value!r}. "
            f"Choose from: {', '.join(OUTPUT_FORMATS)}"
        )
    return formats


def _create_session(args, require_provider=False):
    """Build a CiteMe session from CLI arguments, or print why it failed."""
    from citeme.citeme import CiteMe

    config = Config.from_env(args.env_file)
    if getattr(args, "api_key", None):
        config.gemini_api_key = args.api_key
    if require_provider and not config.gemini_api_key:
        print("Error: GEMINI_API_KEY not set. Use --api-key or set environment variable.")
        return None

    try:
        style = validate_style(args.style or config.citation_style)
    except CiteMeError as e:
        print(f"Error: {e}")
        return None

    level = logging.DEBUG if args.verbose else logging.WARNING
    return CiteMe(config=config, citation_style=style, log_level=level)


def _write_outputs(session, response, output_dir, formats):
    """Write the requested formats for every result and report what happened."""
    written = []
    if "json" in formats:
        os.makedirs(output_dir, exist_ok=True)
        json_path = os.path.join(output_dir, RESPONSE_FILE)
        Path(json_path).write_text(response.to_json(), encoding="utf-8")
        written.append(json_path)

    export_formats = [fmt for fmt in formats if fmt != "json"]
    failures = 0
    for file_name in session.results:
        for fmt in export_formats:
            result = session.export(file_name, fmt)
            if not result.ok:
                failures += 1
                print(f"  ✗ {file_name}: {result.error}")
                continue
            try:
                written.append(result.save(output_dir))
            except OSError as e:
                failures += 1
                print(f"  ✗ {result.file_name}: {e}")

    for path in written:
        print(f"  ✓ {path}")
    for error in session.errors:
        print(f"  ✗ {error}")
    return failures


def cmd_cite(args):
    """Generate citations for reference PDFs."""
    for path in args.pdfs:
        if not Path(path).exists():
            print(f"Error: PDF not found: {path}")
            return 1

    masterpiece_text = None
    if args.text:
        text_path = Path(args.text)
        if not text_path.exists():
            print(f"Error: Text file not found: {text_path}")
            return 1
        masterpiece_text = text_path.read_text(encoding="utf-8")
    if args.masterpiece and not Path(args.masterpiece).exists():
        print(f"Error: Masterpiece not found: {args.masterpiece}")
        return 1

    session = _create_session(args, require_provider=True)
    if session is None:
        return 1

    output_dir = args.output or session.config.output_dir

    print("=" * 60)
    print("CiteMe Citation Generation")
    print("=" * 60)
    print(f"\nStyle: {session.style_name}")
    print(f"References: {len(args.pdfs)}")

    try:
        response = session.generate(
            args.pdfs,
            masterpiece_path=args.masterpiece,
            masterpiece_text=masterpiece_text,
        )
    except CiteMeError as e:
        print(f"Error: {e}")
        return 1

    print(f"\nGenerated {len(response.results)} citation(s)\n")
    failures = _write_outputs(session, response, output_dir, args.format)
    print("=" * 60)
    return 1 if failures or not response.results else 0


def cmd_format(args):
    """Format and export a saved service response."""
    response_path = Path(args.response)
    if not response_path.exists():
        print(f"Error: Response file not found: {response_path}")
        return 1

    session = _create_session(args)
    if session is None:
        return 1

    try:
        response = session.load_response(response_path.read_text(encoding="utf-8"))
    except CiteMeError as e:
        print(f"Error: {e}")
        return 1

    if not response.results:
        print(f"No citation results in {response_path}")
        return 1

    output_dir = args.output or session.config.output_dir
    print(f"Formatting {len(response.results)} result(s) as {session.style_name}")
    failures = _write_outputs(session, response, output_dir, args.format)
    return 1 if failures else 0


def cmd_styles(args):
    """List the supported citation styles."""
    print(f"{'Style':<10} {'In-text':<42} {'Example'}")
    print("-" * 72)
    for name in supported_styles():
        rule = STYLE_RULES[validate_style(name)]
        print(f"{rule.name:<10} {rule.in_text_format:<42} {rule.example}")
    return 0


def _add_common_arguments(parser):
    parser.add_argument("--style", help=f"Citation style ({', '.join(supported_styles())})")
    parser.add_argument("-o", "--output", help="Output directory (default: CITEME_OUTPUT_DIR or ./output)")
    parser.add_argument("--format", type=_parse_formats, default=_parse_formats(DEFAULT_FORMATS),
                        help=f"Comma-separated output formats from {', '.join(OUTPUT_FORMATS)} "
                             f"(default: {DEFAULT_FORMATS})")
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="citeme",
        description="CiteMe - citation generation and document export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  citeme cite smith2020.pdf jones2019.pdf --style APA -o ./output
  citeme cite smith2020.pdf --masterpiece essay.pdf --style OSCOLA
  citeme format citations.json --style IEEE --format pdf,docx,html
  citeme styles
        """
    )
    parser.add_argument("--version", action="version", version=f"citeme {get_version()}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # cite command
    cite_parser = subparsers.add_parser(
        "cite",
        help="Generate citations for reference PDFs",
        description="Send reference PDFs to Gemini and export the citations."
    )
    cite_parser.add_argument("pdfs", nargs="+", help="Reference PDF files")
    source = cite_parser.add_mutually_exclusive_group()
    source.add_argument("--masterpiece", help="Your own document as a PDF")
    source.add_argument("--text", help="Your own document as a text file")
    cite_parser.add_argument("--api-key", help="Gemini API key (or set GEMINI_API_KEY)")
    _add_common_arguments(cite_parser)

    # format command
    format_parser = subparsers.add_parser(
        "format",
        help="Format and export a saved citation response",
        description="Export a saved {results, errors} JSON response without calling the model."
    )
    format_parser.add_argument("response", help="Service response JSON file")
    _add_common_arguments(format_parser)

    # styles command
    subparsers.add_parser(
        "styles",
        help="List supported citation styles",
        description="Show every supported style with its in-text format."
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "cite": cmd_cite,
        "format": cmd_format,
        "styles": cmd_styles,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
