from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, List, Optional

from .types import ArtifactCoordinate, DependencyNode

logger = logging.getLogger(__name__)

_LOG_LEVEL_PREFIX = re.compile(r"^\[(?:INFO|DEBUG|WARNING|WARN|ERROR)\]\s?")
_TREE_LINE = re.compile(r"^(?P<indent>(?:\|  |   )*)[+\\]- (?P<rest>.*)$")
_COORDINATE = re.compile(r"^[^\s:()]+(?::[^\s:()]*){3,5}$")
_JSON_START = re.compile(r"\s*(?:\{|\[\s*\{)")


class DependencyTreeError(ValueError):
    """Raised when dependency tree output cannot be turned into a tree."""


def parse_coordinate(text: str) -> ArtifactCoordinate:
    """Parse a ``dependency:tree`` coordinate.

    Accepted shapes are ``g:a:type:version`` (module roots),
    ``g:a:type:version:scope`` and ``g:a:type:classifier:version:scope``.
    """

    parts = text.strip().split(":")
    if len(parts) == 4:
        group, name, type_, version = parts
        return ArtifactCoordinate(group=group, name=name, version=version, type=type_)
    if len(parts) == 5:
        group, name, type_, version, scope = parts
        return ArtifactCoordinate(group=group, name=name, version=version, type=type_, scope=scope or None)
    if len(parts) == 6:
        group, name, type_, classifier, version, scope = parts
        return ArtifactCoordinate(
            group=group,
            name=name,
            version=version,
            type=type_,
            classifier=classifier or None,
            scope=scope or None,
        )
    raise DependencyTreeError(f"Unrecognised artifact coordinate: {text!r}")


def parse_tree_text(text: str) -> List[DependencyNode]:
    """Build trees from ``mvn dependency:tree`` text output.

    Multi-module output yields one root per module. Lines that are not part
    of a tree (build banners, plugin headers, timings) are ignored, as are
    verbose-mode entries wrapped in parentheses, which Maven omitted from
    the resolved graph.
    """

    roots: List[DependencyNode] = []
    stack: List[DependencyNode] = []

    for number, raw_line in enumerate(text.splitlines(), start=1):
        line = _LOG_LEVEL_PREFIX.sub("", raw_line.rstrip())
        if not line.strip():
            continue

        match = _TREE_LINE.match(line)
        if match is None:
            if _COORDINATE.match(line.strip()):
                root = DependencyNode(artifact=parse_coordinate(line.strip()))
                roots.append(root)
                stack = [root]
            continue

        rest = match.group("rest").strip()
        if rest.startswith("("):
            continue
        coordinate_text, _, annotations = rest.partition(" ")
        if not stack:
            raise DependencyTreeError(f"Line {number}: dependency {coordinate_text!r} has no module root")

        depth = len(match.group("indent")) // 3 + 1
        if depth > len(stack):
            raise DependencyTreeError(f"Line {number}: dependency {coordinate_text!r} skips a tree level")

        node = DependencyNode(
            artifact=parse_coordinate(coordinate_text),
            optional="(optional)" in annotations,
        )
        del stack[depth:]
        stack[-1].children.append(node)
        stack.append(node)

    logger.debug("Parsed %d dependency tree root(s) from text output", len(roots))
    return roots


def _blank_to_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _node_from_json(data: Any) -> DependencyNode:
    if not isinstance(data, dict):
        raise DependencyTreeError(f"Expected a dependency object, got {type(data).__name__}")
    missing = [key for key in ("groupId", "artifactId", "version") if not _blank_to_none(data.get(key))]
    if missing:
        raise DependencyTreeError(f"Dependency object is missing {', '.join(missing)}: {data!r}")

    artifact = ArtifactCoordinate(
        group=str(data["groupId"]),
        name=str(data["artifactId"]),
        version=str(data["version"]),
        type=_blank_to_none(data.get("type")) or "jar",
        classifier=_blank_to_none(data.get("classifier")),
        scope=_blank_to_none(data.get("scope")),
    )
    optional = str(data.get("optional", "false")).lower() == "true"
    children = [_node_from_json(child) for child in data.get("children") or []]
    return DependencyNode(artifact=artifact, children=children, optional=optional)


def parse_tree_json(text: str) -> List[DependencyNode]:
    """Build trees from ``mvn dependency:tree -DoutputType=json`` output."""

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DependencyTreeError(f"Unable to parse dependency tree JSON: {exc}") from exc

    if isinstance(data, list):
        return [_node_from_json(item) for item in data]
    return [_node_from_json(data)]


def load_dependency_trees(path: Path) -> List[DependencyNode]:
    content = path.read_text()
    if path.suffix.lower() == ".json" or _JSON_START.match(content):
        roots = parse_tree_json(content)
    else:
        roots = parse_tree_text(content)
    if not roots:
        raise DependencyTreeError(f"No dependency tree found in {path}")
    logger.debug("Loaded %d module tree(s) from %s", len(roots), path)
    return roots
