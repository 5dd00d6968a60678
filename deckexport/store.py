"""Read-only lookup of persisted presentations."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .model import DocumentRecord

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class DocumentStore(Protocol):
    def get(self, document_id: str) -> Optional[DocumentRecord]: ...


def record_from_dict(document_id: str, data: Dict[str, Any]) -> DocumentRecord:
    """Build a record from the stored shape, or from a flat {title, theme, slides} document."""
    presentation = data.get("presentation")
    if isinstance(presentation, dict):
        content = presentation.get("content")
        return DocumentRecord(
            id=document_id,
            title=str(data.get("title") or ""),
            theme=presentation.get("theme"),
            content=content if isinstance(content, dict) else {},
        )
    return DocumentRecord(
        id=document_id,
        title=str(data.get("title") or ""),
        theme=data.get("theme"),
        content={"slides": data.get("slides")},
    )


class InMemoryDocumentStore:
    def __init__(self, documents: Optional[Dict[str, Dict[str, Any]]] = None):
        self._documents = dict(documents or {})

    def get(self, document_id: str) -> Optional[DocumentRecord]:
        data = self._documents.get(document_id)
        if not isinstance(data, dict):
            return None
        return record_from_dict(document_id, data)


class JsonDocumentStore:
    """Documents stored as ``<root>/<id>.json``."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def get(self, document_id: str) -> Optional[DocumentRecord]:
        if not _SAFE_ID.match(document_id or ""):
            return None
        path = self.root / f"{document_id}.json"
        if not path.is_file():
            return None
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            return None
        return record_from_dict(document_id, data)
