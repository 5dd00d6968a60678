"""Flatten a content node's descendant tree into styled text runs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List

from .model import ContentNode, StyledRun, TextStyle


@dataclass(frozen=True)
class RunFlags:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False

    def merge(self, node: ContentNode) -> "RunFlags":
        # Flags only ever switch on while descending.
        return RunFlags(
            bold=self.bold or node.bold,
            italic=self.italic or node.italic,
            underline=self.underline or node.underline,
            strike=self.strike or node.strikethrough,
        )

    def apply(self, style: TextStyle) -> TextStyle:
        return replace(
            style,
            bold=style.bold or self.bold,
            italic=style.italic or self.italic,
            underline=style.underline or self.underline,
            strike=style.strike or self.strike,
        )


def extract_runs(node: ContentNode, base_style: TextStyle) -> List[StyledRun]:
    """Return one run per non-blank leaf under ``node``, in document order."""
    runs: List[StyledRun] = []

    def traverse(children: Iterable[ContentNode], flags: RunFlags) -> None:
        for child in children:
            child_flags = flags.merge(child)
            if child.is_leaf:
                if child.text and child.text.strip():
                    runs.append(StyledRun(text=child.text, style=child_flags.apply(base_style)))
            elif child.children:
                traverse(child.children, child_flags)

    traverse(node.children, RunFlags())
    return runs


def runs_text(runs: Iterable[StyledRun]) -> str:
    return "".join(run.text for run in runs)


def has_visible_text(runs: Iterable[StyledRun]) -> bool:
    return any(run.text.strip() for run in runs)
