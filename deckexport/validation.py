"""Validation for slide documents submitted for export."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .errors import DocumentValidationError


def _check_node(node: Any, prefix: str, issues: list[str]) -> None:
    if not isinstance(node, dict):
        issues.append(f"{prefix} must be an object")
        return

    if "type" in node and not isinstance(node.get("type"), str):
        issues.append(f"{prefix}.type must be a string when provided")

    if "text" in node and not isinstance(node.get("text"), str):
        issues.append(f"{prefix}.text must be a string when provided")

    if "url" in node and node.get("url") is not None and not isinstance(node.get("url"), str):
        issues.append(f"{prefix}.url must be a string when provided")

    children = node.get("children")
    if children is None or isinstance(node.get("text"), str):
        return
    if not isinstance(children, list):
        issues.append(f"{prefix}.children must be a list")
        return
    for idx, child in enumerate(children):
        _check_node(child, f"{prefix}.children[{idx}]", issues)


def _check_slide(slide: Dict[str, Any], prefix: str, issues: list[str]) -> None:
    content = slide.get("content")
    if content is not None:
        if not isinstance(content, list):
            issues.append(f"{prefix}.content must be a list of nodes")
        else:
            for idx, node in enumerate(content):
                _check_node(node, f"{prefix}.content[{idx}]", issues)

    root_image = slide.get("rootImage")
    if root_image is not None:
        if not isinstance(root_image, dict):
            issues.append(f"{prefix}.rootImage must be an object when provided")
        elif root_image.get("url") is not None and not isinstance(root_image.get("url"), str):
            issues.append(f"{prefix}.rootImage.url must be a string when provided")

    for field in ("id", "layoutType", "alignment", "bgColor"):
        value = slide.get(field)
        if value is not None and not isinstance(value, str):
            issues.append(f"{prefix}.{field} must be a string when provided")


def _unwrap(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Accept a stored record ({presentation: {theme, content: {slides}}}) or a flat document."""
    presentation = payload.get("presentation")
    if not isinstance(presentation, dict):
        return payload

    content = presentation.get("content")
    slides = content.get("slides") if isinstance(content, dict) else presentation.get("slides")
    return {
        "title": payload.get("title") or presentation.get("title"),
        "theme": presentation.get("theme", payload.get("theme")),
        "slides": slides,
    }


def validate_document(payload: Any) -> Dict[str, Any]:
    """Validate a document mapping and return it in flat {title, theme, slides} form."""
    if not isinstance(payload, dict):
        raise DocumentValidationError(["Root JSON value must be an object"])

    document = _unwrap(payload)
    issues: list[str] = []

    title = document.get("title")
    if title is not None and not isinstance(title, str):
        issues.append("title must be a string when provided")

    slides = document.get("slides")
    if not isinstance(slides, list):
        issues.append("slides is required and must be a list")
    elif not slides:
        issues.append("slides must contain at least one slide")
    else:
        for idx, slide in enumerate(slides):
            prefix = f"slides[{idx}]"
            if not isinstance(slide, dict):
                issues.append(f"{prefix} must be an object")
                continue
            _check_slide(slide, prefix, issues)

    if issues:
        raise DocumentValidationError(issues)

    return document


def validate_document_file(path: Path) -> Dict[str, Any]:
    """Load and validate a JSON document file."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DocumentValidationError([f"Document file not found: {path}"]) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DocumentValidationError([f"Invalid JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}"]) from exc

    return validate_document(data)
