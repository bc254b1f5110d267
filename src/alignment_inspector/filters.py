"""Artifact, scope and module filters applied before classification."""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, List, Optional, Sequence

from .alignment import AlignmentConfigError
from .types_artifacts import ArtifactCoordinate, DependencyNode

logger = logging.getLogger(__name__)

ArtifactPredicate = Callable[[ArtifactCoordinate], bool]

SCOPE_INCLUDES = {
    "compile": {"compile", "provided", "system"},
    "runtime": {"compile", "runtime"},
    "compile+runtime": {"compile", "runtime", "provided", "system"},
    "runtime+system": {"compile", "runtime", "system"},
    "test": {"compile", "runtime", "provided", "system", "test", "import"},
    "provided": {"provided"},
    "system": {"system"},
}


def split_patterns(value: str | Sequence[str] | None) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [item.strip() for item in value if item and item.strip()]


def _segment_matches(token: str, pattern: str) -> bool:
    if pattern in {"", "*"}:
        return True
    if len(pattern) > 1 and pattern.startswith("*") and pattern.endswith("*"):
        return pattern[1:-1] in token
    if pattern.startswith("*"):
        return token.endswith(pattern[1:])
    if pattern.endswith("*"):
        return token.startswith(pattern[:-1])
    return token == pattern


def matches_artifact_pattern(artifact: ArtifactCoordinate, pattern: str) -> bool:
    """Match ``[groupId]:[artifactId]:[type]:[version]`` with ``*`` wildcards.

    Segments may be omitted or left empty; either acts as a wildcard. A
    pattern with more segments than the four above never matches.
    """

    tokens = [artifact.group, artifact.name, artifact.type, artifact.version]
    segments = pattern.split(":")
    if len(segments) > len(tokens):
        return False
    return all(_segment_matches(token, segment) for token, segment in zip(tokens, segments))


def build_exclude_filter(patterns: str | Sequence[str] | None) -> Optional[ArtifactPredicate]:
    """Return a predicate that is true for excluded artifacts, or None."""

    parsed = split_patterns(patterns)
    if not parsed:
        return None
    logger.debug("+ Filtering dependency tree by artifact exclude patterns: %s", parsed)

    def _excluded(artifact: ArtifactCoordinate) -> bool:
        return any(matches_artifact_pattern(artifact, pattern) for pattern in parsed)

    return _excluded


def build_scope_filter(scope: Optional[str]) -> Optional[ArtifactPredicate]:
    """Return a predicate that is true for artifacts outside ``scope``, or None."""

    if not scope:
        return None
    included = SCOPE_INCLUDES.get(scope.lower())
    if included is None:
        raise AlignmentConfigError(
            f"Unknown scope {scope!r}; expected one of {', '.join(sorted(SCOPE_INCLUDES))}"
        )
    logger.debug("+ Resolving dependency tree for scope '%s'", scope)

    def _out_of_scope(artifact: ArtifactCoordinate) -> bool:
        return artifact.scope is not None and artifact.scope not in included

    return _out_of_scope


def combine(*predicates: Optional[ArtifactPredicate]) -> Optional[ArtifactPredicate]:
    active = [predicate for predicate in predicates if predicate is not None]
    if not active:
        return None
    if len(active) == 1:
        return active[0]
    return lambda artifact: any(predicate(artifact) for predicate in active)


def node_filter(predicate: Optional[ArtifactPredicate]) -> Optional[Callable[[DependencyNode], bool]]:
    if predicate is None:
        return None
    return lambda node: predicate(node.artifact)


def prune_tree(root: DependencyNode, excluded: Optional[ArtifactPredicate]) -> DependencyNode:
    """Return a copy of ``root`` without excluded nodes and their subtrees.

    The root itself is the module under analysis and is always kept.
    """

    if excluded is None:
        return root

    def _copy(node: DependencyNode) -> DependencyNode:
        return DependencyNode(
            artifact=node.artifact,
            children=[_copy(child) for child in node.children if not excluded(child.artifact)],
            optional=node.optional,
        )

    return _copy(root)


def compile_module_patterns(patterns: str | Sequence[str] | None) -> List[re.Pattern]:
    """Translate module exclusion globs into regular expressions.

    Only ``*`` is translated (to ``.*``); every other character reaches the
    regex engine as-is, so ``.`` matches any character and other
    metacharacters keep their regex meaning.
    """

    compiled: List[re.Pattern] = []
    for pattern in split_patterns(patterns):
        try:
            compiled.append(re.compile(pattern.replace("*", ".*")))
        except re.error as exc:
            raise AlignmentConfigError(f"Invalid module exclude pattern {pattern!r}: {exc}") from exc
    return compiled


def is_module_excluded(module_name: str, patterns: Iterable[re.Pattern]) -> bool:
    for pattern in patterns:
        if pattern.fullmatch(module_name):
            logger.debug("+ Excluding module: %s (matched pattern: %s)", module_name, pattern.pattern)
            return True
    return False
