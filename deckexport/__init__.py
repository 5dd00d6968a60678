"""Export rich slide documents to absolute-positioned PPTX decks."""

from .api import (
    DownloadResponse,
    ExportResult,
    compose_pages,
    export_document,
    export_file_name,
    export_to_file,
    handle_download_request,
)
from .composer import SlideComposer
from .config import ExportOptions
from .errors import DocumentValidationError, ExportError, ImageFetchError
from .images import FetchedImage, ImageFetcher
from .layout import LayoutEngine
from .model import ContentArea, ContentNode, Document, LayoutType, NodeType, Slide
from .store import InMemoryDocumentStore, JsonDocumentStore
from .themes import THEMES, Theme, default_theme, resolve_theme
from .validation import validate_document, validate_document_file

__all__ = [
    "THEMES",
    "ContentArea",
    "ContentNode",
    "Document",
    "DocumentValidationError",
    "DownloadResponse",
    "ExportError",
    "ExportOptions",
    "ExportResult",
    "FetchedImage",
    "ImageFetchError",
    "ImageFetcher",
    "InMemoryDocumentStore",
    "JsonDocumentStore",
    "LayoutEngine",
    "LayoutType",
    "NodeType",
    "Slide",
    "SlideComposer",
    "Theme",
    "compose_pages",
    "default_theme",
    "export_document",
    "export_file_name",
    "export_to_file",
    "handle_download_request",
    "resolve_theme",
    "validate_document",
    "validate_document_file",
]
