"""Exceptions raised while validating and exporting slide documents."""

from __future__ import annotations

import re
from typing import Dict, List

_SLIDE_PATH = re.compile(r"^slides\[(\d+)\]")


class DocumentValidationError(ValueError):
    """A document that cannot be exported, with one issue per problem found.

    Issues are path-prefixed strings such as ``slides[2].content must be a
    list of nodes``; ``slide_issues`` groups them by slide index.
    """

    def __init__(self, issues: List[str]):
        self.issues = [str(i).strip() for i in issues if str(i).strip()] or ["Invalid document"]
        super().__init__("\n".join(["Document validation failed:"] + [f"- {issue}" for issue in self.issues]))

    @property
    def slide_issues(self) -> Dict[int, List[str]]:
        grouped: Dict[int, List[str]] = {}
        for issue in self.issues:
            m = _SLIDE_PATH.match(issue)
            if m:
                grouped.setdefault(int(m.group(1)), []).append(issue)
        return grouped

    @property
    def document_issues(self) -> List[str]:
        """Issues not tied to a single slide (title, slide list, JSON syntax)."""
        return [issue for issue in self.issues if not _SLIDE_PATH.match(issue)]


class ImageFetchError(RuntimeError):
    """Raised when an image reference cannot be turned into image bytes."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Could not load image {url!r}: {reason}")


class ExportError(RuntimeError):
    """Raised when composing or writing the deck fails unexpectedly."""
