"""Public API helpers for exporting slide documents to PPTX."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .commands import SlidePage
from .composer import SlideComposer
from .config import ExportOptions
from .errors import DocumentValidationError, ExportError
from .images import ImageFetcher
from .model import Document
from .store import DocumentStore
from .themes import Theme, default_theme, resolve_theme
from .validation import validate_document
from .writer import PPTX_CONTENT_TYPE, PptxWriter

logger = logging.getLogger(__name__)

FILE_EXTENSION = ".pptx"
DEFAULT_FILE_STEM = "presentation"


@dataclass(frozen=True)
class ExportResult:
    data: bytes
    filename: str
    content_type: str = PPTX_CONTENT_TYPE
    slide_count: int = 0


@dataclass
class DownloadResponse:
    status: int
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


def export_file_name(title: Optional[str]) -> str:
    """Derive a safe ``.pptx`` file name from a document title."""
    cleaned = re.sub(r"[^A-Za-z0-9._ -]+", "_", (title or "").strip())
    cleaned = re.sub(r"\s+", " ", cleaned).strip(" ._")
    cleaned = re.sub(r"_+", "_", cleaned)
    return f"{cleaned[:100] or DEFAULT_FILE_STEM}{FILE_EXTENSION}"


def resolve_deck_theme(document: Document, options: ExportOptions) -> Theme:
    for ref in (options.theme_override, document.theme, options.default_theme):
        if ref is None:
            continue
        theme = resolve_theme(ref)
        if theme is not None:
            return theme
    return default_theme()


def compose_pages(document: Document, options: Optional[ExportOptions] = None, *, fetcher: Optional[ImageFetcher] = None) -> List[SlidePage]:
    """Lay out every slide of ``document`` into drawing commands."""
    options = options or ExportOptions()
    composer = SlideComposer(
        resolve_deck_theme(document, options),
        fetcher=fetcher or ImageFetcher(timeout=options.fetch_timeout, base_dir=options.base_dir),
        dark_mode=options.dark_mode,
    )
    return [composer.compose(slide) for slide in document.slides]


def export_document(
    payload: Dict[str, Any],
    options: Optional[ExportOptions] = None,
    *,
    fetcher: Optional[ImageFetcher] = None,
) -> ExportResult:
    """Validate, lay out and write a document; returns the complete deck bytes.

    Raises ``DocumentValidationError`` before any layout work for invalid
    input, and ``ExportError`` for anything that goes wrong afterwards.
    """
    document = Document.from_dict(validate_document(payload))
    options = options or ExportOptions()

    try:
        pages = compose_pages(document, options, fetcher=fetcher)
        writer = PptxWriter()
        writer.render(pages)
        data = writer.to_bytes()
    except DocumentValidationError:
        raise
    except Exception as exc:
        raise ExportError(f"Failed to export presentation: {exc}") from exc

    return ExportResult(data=data, filename=export_file_name(document.title), slide_count=len(pages))


def export_to_file(
    payload: Dict[str, Any],
    output_path: Path,
    options: Optional[ExportOptions] = None,
    *,
    fetcher: Optional[ImageFetcher] = None,
) -> Path:
    result = export_document(payload, options, fetcher=fetcher)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.data)
    return output_path


def _json_response(status: int, payload: Dict[str, Any]) -> DownloadResponse:
    return DownloadResponse(
        status=status,
        body=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


def handle_download_request(
    payload: Any,
    store: DocumentStore,
    options: Optional[ExportOptions] = None,
    *,
    fetcher: Optional[ImageFetcher] = None,
) -> DownloadResponse:
    """Turn a ``{"id": ...}`` download request into a complete response."""
    document_id = payload.get("id") if isinstance(payload, dict) else None
    if not isinstance(document_id, str) or not document_id.strip():
        return _json_response(400, {"error": "Invalid or missing presentation ID"})

    try:
        record = store.get(document_id.strip())
        if record is None:
            return _json_response(404, {"error": "Presentation not found"})
        result = export_document(record.to_document_dict(), options, fetcher=fetcher)
    except DocumentValidationError as exc:
        return _json_response(
            422,
            {"error": "Invalid presentation", "details": exc.issues, "slides": sorted(exc.slide_issues)},
        )
    except Exception as exc:
        logger.exception("PPT download failed for %s", document_id)
        return _json_response(500, {"error": "Internal server error", "details": str(exc)})

    return DownloadResponse(
        status=200,
        body=result.data,
        headers={
            "Content-Type": result.content_type,
            "Content-Disposition": f'attachment; filename="{result.filename}"',
        },
    )
