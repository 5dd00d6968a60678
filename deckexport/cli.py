"""CLI orchestration for deck export."""

from __future__ import annotations

import argparse
import logging
import traceback
from pathlib import Path
from typing import Optional, Sequence

from .api import export_document, export_file_name
from .config import ExportOptions
from .errors import DocumentValidationError
from .images import DEFAULT_TIMEOUT
from .store import JsonDocumentStore
from .themes import DEFAULT_THEME_NAME, THEMES
from .validation import validate_document_file


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export slide documents (JSON) to PPTX decks")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", default=None, help="Path to a JSON document ({title, theme, slides})")
    source.add_argument("--store", default=None, help="Directory of stored documents (<id>.json); use with --id")
    parser.add_argument("--id", dest="document_id", default=None, help="Document id to look up in --store")
    parser.add_argument(
        "--output",
        default=None,
        help="Output PPTX path (default: file name derived from the document title, in the current directory)",
    )
    parser.add_argument("--theme", default=None, help="Theme name overriding the document's theme")
    parser.add_argument(
        "--default-theme",
        default=DEFAULT_THEME_NAME,
        help=f'Theme used when the document names none (default: "{DEFAULT_THEME_NAME}")',
    )
    parser.add_argument("--dark", action="store_true", help="Use the dark palette of the theme")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Image fetch timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument("--list-themes", action="store_true", help="Print registered theme names and exit")
    parser.add_argument("--verbose", action="store_true", help="Log layout details")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show full traceback for unexpected errors",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list_themes:
        for name in sorted(THEMES):
            print(name)
        return

    try:
        if args.store:
            if not args.document_id:
                raise SystemExit("--store requires --id")
            record = JsonDocumentStore(Path(args.store).resolve()).get(args.document_id)
            if record is None:
                raise SystemExit(f"Presentation not found: {args.document_id}")
            payload = record.to_document_dict()
            base_dir = Path(args.store).resolve()
        elif args.input:
            input_path = Path(args.input).resolve()
            payload = validate_document_file(input_path)
            base_dir = input_path.parent
        else:
            raise SystemExit("Pass --input or --store/--id")

        options = ExportOptions(
            default_theme=args.default_theme,
            dark_mode=args.dark,
            fetch_timeout=args.timeout,
            base_dir=base_dir,
            theme_override=args.theme,
        )
        result = export_document(payload, options)

        output_path = Path(args.output).resolve() if args.output else Path.cwd() / export_file_name(payload.get("title"))
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(result.data)
        print(f"✅ PPTX saved to {output_path} ({result.slide_count} slides)")
    except DocumentValidationError as e:
        raise SystemExit(str(e)) from e
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        raise SystemExit(f"PPTX export failed: {e}") from e


def main() -> None:
    run_cli()
