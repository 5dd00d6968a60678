from __future__ import annotations

import json
from io import BytesIO
from pathlib import Path

import pytest
from pptx import Presentation

from deckexport import (
    DocumentValidationError,
    ExportError,
    ExportOptions,
    InMemoryDocumentStore,
    JsonDocumentStore,
    export_document,
    export_file_name,
    export_to_file,
    handle_download_request,
)
from deckexport.api import compose_pages, resolve_deck_theme
from deckexport.model import Document, LayoutType
from deckexport.themes import THEMES, parse_hex_color
from deckexport.writer import PPTX_CONTENT_TYPE, PptxWriter

from conftest import FakeFetcher, make_png

IMG = "https://images.example.com/cover.png"


def _doc(**extra) -> dict:
    doc = {
        "title": "Quarterly Report",
        "theme": "cornflower",
        "slides": [
            {
                "id": "s1",
                "rootImage": {"url": IMG, "query": "skyline"},
                "content": [
                    {"type": "h1", "children": [{"text": "Quarterly Report"}]},
                    {"type": "p", "children": [{"text": "Revenue grew 12%."}]},
                ],
            },
            {
                "id": "s2",
                "bgColor": "#101010",
                "content": [
                    {
                        "type": "bullets",
                        "children": [
                            {"type": "bullet", "children": [{"text": "North", "bold": True}]},
                            {"type": "bullet", "children": [{"text": "South"}]},
                        ],
                    },
                    {"type": "chart", "children": [{"text": ""}]},
                ],
            },
        ],
    }
    doc.update(extra)
    return doc


def test_export_document_produces_complete_deck() -> None:
    result = export_document(_doc(), fetcher=FakeFetcher({IMG: make_png()}))

    assert result.data[:2] == b"PK"
    assert result.filename == "Quarterly Report.pptx"
    assert result.content_type == PPTX_CONTENT_TYPE
    assert result.slide_count == 2

    prs = Presentation(BytesIO(result.data))
    assert len(prs.slides) == 2
    texts = [shape.text_frame.text for shape in prs.slides[1].shapes if shape.has_text_frame]
    assert "North" in texts
    assert not any(text.startswith("•") for text in texts)
    assert "[Chart]" in texts


def test_export_survives_unreachable_images() -> None:
    result = export_document(_doc(), fetcher=FakeFetcher())
    prs = Presentation(BytesIO(result.data))
    texts = [shape.text_frame.text for shape in prs.slides[0].shapes if shape.has_text_frame]
    assert texts[0] == "[Image not found]"
    assert "Quarterly Report" in texts


def test_invalid_document_is_rejected_before_layout(monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(*args, **kwargs):
        raise AssertionError("layout must not run")

    monkeypatch.setattr("deckexport.api.compose_pages", boom)
    with pytest.raises(DocumentValidationError):
        export_document({"title": "Empty", "slides": []})


def test_internal_errors_are_wrapped(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_render(self, pages):
        raise KeyError("shape")

    monkeypatch.setattr(PptxWriter, "render", broken_render)
    with pytest.raises(ExportError) as exc:
        export_document(_doc(), fetcher=FakeFetcher())
    assert "Failed to export presentation" in str(exc.value)


def test_theme_precedence() -> None:
    doc = Document.from_dict(_doc(theme="unknown-theme"))
    assert resolve_deck_theme(doc, ExportOptions()).name == "daktilo"
    assert resolve_deck_theme(doc, ExportOptions(default_theme="piano")).name == "piano"
    assert resolve_deck_theme(doc, ExportOptions(theme_override="orbit")).name == "orbit"
    assert resolve_deck_theme(Document.from_dict(_doc()), ExportOptions()).name == "cornflower"


def test_compose_pages_uses_dark_mode_option() -> None:
    doc = Document.from_dict(_doc(slides=[{"id": "only", "content": []}]))
    (page,) = compose_pages(doc, ExportOptions(dark_mode=True), fetcher=FakeFetcher())
    assert page.background == parse_hex_color(THEMES["cornflower"].dark.background)


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Quarterly Report", "Quarterly Report.pptx"),
        ("Q3: Plans/Results?", "Q3_ Plans_Results.pptx"),
        ("", "presentation.pptx"),
        (None, "presentation.pptx"),
        ("../../etc/passwd", "etc_passwd.pptx"),
        ("   ", "presentation.pptx"),
    ],
)
def test_export_file_name_is_sanitized(title, expected) -> None:
    assert export_file_name(title) == expected


def test_export_to_file_writes_bytes(tmp_path: Path) -> None:
    out = export_to_file(_doc(), tmp_path / "nested" / "deck.pptx", fetcher=FakeFetcher())
    assert out.read_bytes()[:2] == b"PK"


def test_download_request_success_sets_disposition() -> None:
    store = InMemoryDocumentStore({"abc": {"title": "Board Update", "presentation": {"theme": "orbit", "content": {"slides": _doc()["slides"]}}}})
    response = handle_download_request({"id": "abc"}, store, fetcher=FakeFetcher())

    assert response.status == 200
    assert response.headers["Content-Type"] == PPTX_CONTENT_TYPE
    assert response.headers["Content-Disposition"] == 'attachment; filename="Board Update.pptx"'
    assert response.body[:2] == b"PK"


@pytest.mark.parametrize("payload", [{}, {"id": ""}, {"id": 3}, None])
def test_download_request_requires_id(payload) -> None:
    response = handle_download_request(payload, InMemoryDocumentStore())
    assert response.status == 400
    assert response.json()["error"] == "Invalid or missing presentation ID"


def test_download_request_unknown_document() -> None:
    response = handle_download_request({"id": "nope"}, InMemoryDocumentStore())
    assert response.status == 404
    assert response.json() == {"error": "Presentation not found"}


def test_download_request_invalid_document() -> None:
    store = InMemoryDocumentStore({"abc": {"title": "Empty", "presentation": {"content": {"slides": []}}}})
    response = handle_download_request({"id": "abc"}, store)
    assert response.status == 422
    assert "slides must contain at least one slide" in response.json()["details"]


def test_download_request_reports_failing_slides() -> None:
    slides = [{"id": "a"}, {"content": "oops"}]
    store = InMemoryDocumentStore({"abc": {"title": "Broken", "slides": slides}})
    body = handle_download_request({"id": "abc"}, store).json()
    assert body["slides"] == [1]
    assert body["details"] == ["slides[1].content must be a list of nodes"]


def test_download_request_internal_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_render(self, pages):
        raise RuntimeError("disk full")

    monkeypatch.setattr(PptxWriter, "render", broken_render)
    store = InMemoryDocumentStore({"abc": _doc()})
    response = handle_download_request({"id": "abc"}, store, fetcher=FakeFetcher())
    assert response.status == 500
    body = response.json()
    assert body["error"] == "Internal server error"
    assert "disk full" in body["details"]


def test_json_store_reads_documents_and_rejects_unsafe_ids(tmp_path: Path) -> None:
    (tmp_path / "deck-1.json").write_text(json.dumps(_doc()), encoding="utf-8")
    store = JsonDocumentStore(tmp_path)

    record = store.get("deck-1")
    assert record is not None
    assert record.title == "Quarterly Report"
    assert record.theme == "cornflower"
    assert len(record.to_document_dict()["slides"]) == 2

    assert store.get("missing") is None
    assert store.get("../deck-1") is None


def test_unknown_layout_and_alignment_fall_back_during_export() -> None:
    slides = [
        {
            "id": "odd",
            "layoutType": "diagonal",
            "alignment": "middle",
            "content": [{"type": "h1", "children": [{"text": "Still exported"}]}],
        }
    ]
    doc = Document.from_dict(_doc(slides=slides))
    (slide,) = doc.slides
    assert slide.layout_type is LayoutType.NONE
    assert slide.alignment is None

    (page,) = compose_pages(doc, fetcher=FakeFetcher())
    (heading,) = page.text_boxes()
    # No alignment shift: the heading starts at the top of the content area.
    assert heading.y == page.content_area.y

    result = export_document(_doc(slides=slides), fetcher=FakeFetcher())
    assert result.slide_count == 1
    prs = Presentation(BytesIO(result.data))
    assert prs.slides[0].shapes[0].text_frame.text == "Still exported"
