from __future__ import annotations

from deckexport.model import ContentNode
from deckexport.rich_text import extract_runs, has_visible_text, runs_text
from deckexport.styles import resolve_style
from deckexport.themes import default_theme


def _node(data: dict) -> ContentNode:
    return ContentNode.from_dict(data)


def _base_style():
    return resolve_style(None, default_theme().for_mode(False))


def test_runs_follow_document_order_and_skip_blank_leaves() -> None:
    node = _node(
        {
            "type": "p",
            "children": [
                {"text": "Revenue "},
                {"text": "   "},
                {"text": ""},
                {"text": "grew", "bold": True},
                {"text": " 12%."},
            ],
        }
    )
    runs = extract_runs(node, _base_style())

    assert [r.text for r in runs] == ["Revenue ", "grew", " 12%."]
    assert [r.style.bold for r in runs] == [False, True, False]
    assert runs_text(runs) == "Revenue grew 12%."


def test_flags_accumulate_down_the_tree() -> None:
    node = _node(
        {
            "type": "p",
            "children": [
                {
                    "type": "span",
                    "italic": True,
                    "children": [
                        {"text": "a", "bold": True},
                        {"text": "b", "underline": True, "italic": False},
                        {"type": "span", "strikethrough": True, "children": [{"text": "c"}]},
                    ],
                },
                {"text": "d"},
            ],
        }
    )
    runs = extract_runs(node, _base_style())
    by_text = {r.text: r.style for r in runs}

    assert by_text["a"].italic and by_text["a"].bold
    # A leaf cannot switch an inherited flag off.
    assert by_text["b"].italic and by_text["b"].underline
    assert by_text["c"].italic and by_text["c"].strike
    assert not by_text["d"].italic
    assert not by_text["d"].bold


def test_siblings_do_not_leak_flags() -> None:
    node = _node({"type": "p", "children": [{"text": "x", "bold": True}, {"text": "y"}]})
    runs = extract_runs(node, _base_style())
    assert runs[0].style.bold
    assert not runs[1].style.bold


def test_every_leaf_visited_once() -> None:
    node = _node(
        {
            "type": "bullets",
            "children": [
                {"type": "bullet", "children": [{"text": "one"}]},
                {"type": "bullet", "children": [{"type": "p", "children": [{"text": "two"}, {"text": "three"}]}]},
            ],
        }
    )
    runs = extract_runs(node, _base_style())
    assert [r.text for r in runs] == ["one", "two", "three"]


def test_whitespace_only_tree_has_no_visible_text() -> None:
    node = _node({"type": "p", "children": [{"text": " "}, {"type": "span", "children": [{"text": "\n"}]}]})
    runs = extract_runs(node, _base_style())
    assert runs == []
    assert not has_visible_text(runs)


def test_base_style_is_kept_for_plain_runs() -> None:
    theme = default_theme().for_mode(False)
    heading_style = resolve_style(_node({"type": "h1"}).type, theme)
    runs = extract_runs(_node({"type": "h1", "children": [{"text": "Title"}]}), heading_style)
    assert runs[0].style == heading_style
