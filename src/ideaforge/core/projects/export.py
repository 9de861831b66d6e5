"""Renderers for saved projects. They only serialize an existing idea tree."""

from __future__ import annotations

import json
import re
from typing import Any

CSV_HEADER = "ID,Title,Content,Parent ID,Branch Color,Level,Timestamp"


def safe_filename(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", name or "", flags=re.IGNORECASE) or "project"


def render_json(project: dict[str, Any]) -> str:
    return json.dumps(project, ensure_ascii=False, indent=2)


def _label(node: dict[str, Any]) -> str:
    return str(node.get("title") or node.get("label") or "")


def render_markdown(name: str, idea_tree: list[dict[str, Any]]) -> str:
    children: dict[Any, list[dict[str, Any]]] = {}
    for node in idea_tree:
        children.setdefault(node.get("parentId") or None, []).append(node)

    lines: list[str] = [f"# {name}", ""]
    seen: set[Any] = set()

    def _render(node: dict[str, Any], depth: int) -> None:
        node_id = node.get("id")
        if node_id is not None:
            if node_id in seen:
                return
            seen.add(node_id)
        indent = "  " * depth
        lines.append(f"{indent}- **{_label(node)}**")
        content = node.get("content")
        if content and content != node.get("title"):
            lines.append(f"{indent}  {content}")
        lines.append("")
        for child in children.get(node_id, []) if node_id is not None else []:
            _render(child, depth + 1)

    for root in children.get(None, []):
        _render(root, 0)
    return "\n".join(lines) + "\n"


def _csv_cell(value: Any) -> str:
    if value is None or value == "":
        return '""'
    return '"' + str(value).replace('"', '""') + '"'


def render_csv(idea_tree: list[dict[str, Any]]) -> str:
    rows = [CSV_HEADER]
    for node in idea_tree:
        rows.append(
            ",".join(
                [
                    _csv_cell(node.get("id")),
                    _csv_cell(_label(node)),
                    _csv_cell(node.get("content")),
                    _csv_cell(node.get("parentId") or ""),
                    _csv_cell(node.get("branchColor")),
                    str(node.get("level") or 0),
                    str(node.get("timestamp") or ""),
                ]
            )
        )
    return "\n".join(rows) + "\n"
