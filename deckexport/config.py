"""Export options shared by the API and the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .images import DEFAULT_TIMEOUT
from .themes import DEFAULT_THEME_NAME


@dataclass(frozen=True)
class ExportOptions:
    """Knobs for one export call.

    ``theme_override`` wins over the document's own theme reference;
    ``default_theme`` is used when neither resolves. ``base_dir`` anchors
    relative image paths.
    """

    default_theme: str = DEFAULT_THEME_NAME
    dark_mode: bool = False
    fetch_timeout: float = DEFAULT_TIMEOUT
    base_dir: Optional[Path] = None
    theme_override: Any = None
