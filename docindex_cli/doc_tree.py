"""Defensive accessors over parsed documentation trees.

The parser emits a loosely-typed JSON tree. Nothing beyond the minimal shape
below is guaranteed, so every accessor checks for presence and type before
descending::

    {
        "name": "library/Module",
        "path": [{"name": "library/Module", "kind": "module"}, ...],
        "description": {"type": "root", "children": [...]},
        "members": {"static": [doclet, ...], "instance": [...], ...},
        "tags": [{"title": "see", "description": "...", "lineNumber": 3}, ...],
        "context": {"file": "/abs/path.js", "loc": {"start": {"line": 1}}},
    }
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

Doc = Dict[str, Any]


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def record_name(doc: Any) -> str:
    name = _as_dict(doc).get("name")
    return name if isinstance(name, str) else ""


def record_path(doc: Any) -> List[Dict[str, Any]]:
    return [entry for entry in _as_list(_as_dict(doc).get("path")) if isinstance(entry, dict)]


def first_path_entry(doc: Any) -> Optional[Tuple[str, str]]:
    """Return ``(name, kind)`` of the first path entry, or None when absent."""
    path = record_path(doc)
    if not path:
        return None
    return str(path[0].get("name", "")), str(path[0].get("kind", ""))


def static_members(doc: Any) -> List[Doc]:
    members = _as_dict(_as_dict(doc).get("members"))
    return [m for m in _as_list(members.get("static")) if isinstance(m, dict)]


def member_tags(member: Any) -> List[Dict[str, Any]]:
    return [t for t in _as_list(_as_dict(member).get("tags")) if isinstance(t, dict)]


def context_file(context: Any, raw_prefix: str = "") -> str:
    filename = _as_dict(context).get("file")
    if not isinstance(filename, str) or not filename:
        return "<unknown>"
    if raw_prefix:
        filename = re.sub(raw_prefix, "", filename, count=1)
    return filename


def context_line(context: Any) -> Optional[int]:
    line = _as_dict(_as_dict(_as_dict(_as_dict(context).get("loc")).get("start"))).get("line")
    return line if isinstance(line, int) else None


def describe_location(doc: Any, raw_prefix: str = "") -> str:
    """Render ``"<name> in <file>:<line>"`` for diagnostics."""
    doc = _as_dict(doc)
    context = doc.get("context")
    line = context_line(context)
    where = context_file(context, raw_prefix)
    if line is not None:
        where = f"{where}:{line}"
    name = doc.get("name")
    return f"{name} in {where}" if name else where


def walk(node: Any) -> Iterator[Any]:
    """Yield *node* and every value beneath it, pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, dict):
            stack.extend(reversed(list(current.values())))
        elif isinstance(current, list):
            stack.extend(reversed(current))


def find_see_tags(doc: Any) -> List[Tuple[Dict[str, Any], Optional[Dict[str, Any]]]]:
    """Every ``see`` tag in the tree, paired with its owning doclet's context."""
    found = []
    for node in walk(doc):
        if not isinstance(node, dict):
            continue
        for tag in member_tags(node):
            if tag.get("title") == "see":
                context = node.get("context")
                found.append((tag, context if isinstance(context, dict) else None))
    return found


def find_link_urls(doc: Any) -> List[str]:
    """URLs of every ``link`` node in the tree, in document order."""
    urls = []
    for node in walk(doc):
        if isinstance(node, dict) and node.get("type") == "link":
            url = node.get("url")
            if isinstance(url, str):
                urls.append(url)
    return urls


def leaf_values(node: Any) -> List[Any]:
    """Every ``value`` entry found anywhere beneath *node*."""
    values = []
    for child in walk(node):
        if isinstance(child, dict) and "value" in child:
            values.append(child["value"])
    return values


def member_names(doc: Any) -> List[str]:
    """Names of every entry of every ``members`` group anywhere in the tree."""
    names = []
    for node in walk(doc):
        if not isinstance(node, dict):
            continue
        for group in _as_dict(node.get("members")).values():
            for member in _as_list(group):
                name = _as_dict(member).get("name")
                if isinstance(name, str):
                    names.append(name)
    return names


def to_text(value: Any) -> str:
    """Coerce a leaf value to text the way a JSON consumer would print it."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return json.dumps(value)
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def prune_record(
    value: Any,
    keys_to_ignore: frozenset,
    on_errors: Optional[Callable[[List[Any]], None]] = None,
) -> Any:
    """Deep copy *value* without *keys_to_ignore*.

    Non-empty ``errors`` lists are handed to *on_errors* before being dropped.
    """
    if isinstance(value, dict):
        pruned = {}
        for key, child in value.items():
            if key == "errors" and on_errors is not None and isinstance(child, list) and child:
                on_errors(child)
            if key in keys_to_ignore:
                continue
            pruned[key] = prune_record(child, keys_to_ignore, on_errors)
        return pruned
    if isinstance(value, list):
        return [prune_record(child, keys_to_ignore, on_errors) for child in value]
    return value
