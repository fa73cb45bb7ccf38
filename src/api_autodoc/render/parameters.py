"""Render a declared parameter tree as nested Markdown bullets."""

import json

from api_autodoc.errors import CyclicSchema
from api_autodoc.models import ParameterNode

INDENT = "  "


def render_parameters(root: ParameterNode | None) -> str:
    """Render the bullets for a registered schema, or ``""`` when there is none.

    A keyless root only groups the top-level parameters, so its children
    are rendered at depth zero instead of the root itself; a keyless root
    without children renders nothing.
    """
    if root is None:
        return ""
    if root.key is None:
        nodes = root.children
        seen = {id(root)}
    else:
        nodes = (root,)
        seen = set()
    lines: list[str] = []
    for node in nodes:
        _render(node, 0, seen, lines)
    return "\n".join(lines)


def parameters_section(root: ParameterNode | None) -> str:
    parameters = render_parameters(root)
    if not parameters:
        return ""
    return f"\n### Parameters\n{parameters}\n"


def render_line(node: ParameterNode) -> str:
    """Render a single node without its children.

    ``hash`` nodes carrying a comment still render the structured bullet.
    """
    if node.key is None:
        line = f"* {node.type}"
    else:
        line = f"* `{node.key}` {node.type}"
    annotations = _annotations(node)
    if annotations:
        line += f" ({', '.join(annotations)})"
    if node.description:
        line += f" - {node.description}"
    return line


def _render(node: ParameterNode, depth: int, seen: set[int], lines: list[str]) -> None:
    if id(node) in seen:
        raise CyclicSchema(f"parameter {node.key or node.type!r} contains itself")
    seen = seen | {id(node)}
    lines.append(INDENT * depth + render_line(node))
    for child in node.children:
        _render(child, depth + 1, seen, lines)


def _annotations(node: ParameterNode) -> list[str]:
    annotations = []
    if node.required:
        annotations.append("required")
    if node.only is not None:
        annotations.append(f"only: `{_contexts(node.only)}`")
    if node.except_ is not None:
        annotations.append(f"except: `{_contexts(node.except_)}`")
    if node.comment is not None:
        annotations.append(f"comment: `{json.dumps(node.comment, ensure_ascii=False)}`")
    return annotations


def _contexts(contexts: list[str]) -> str:
    return "[" + ", ".join(f":{c.lstrip(':')}" for c in contexts) + "]"
