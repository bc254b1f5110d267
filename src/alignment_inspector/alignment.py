"""Version alignment classification and transitive instability detection.

A version is aligned when the configured pattern is found anywhere in it
(``re.search`` semantics, case-sensitive, no normalization). The detector
walks the subtree of every aligned direct dependency and records which of
them pull in unaligned versions further down.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from .types_artifacts import ArtifactCoordinate, DependencyNode, sort_artifacts

logger = logging.getLogger(__name__)

NodeFilter = Callable[[DependencyNode], bool]


class AlignmentConfigError(ValueError):
    """Raised when an alignment or exclusion pattern cannot be compiled."""


class AlignmentVerdict(enum.Enum):
    ALIGNED = "aligned"
    UNALIGNED = "unaligned"


@dataclass
class TransitiveInstability:
    """Aligned direct dependencies that still pull in unaligned versions.

    ``summary`` holds each offending direct dependency once. ``details``
    holds every distinct chain from a direct dependency down to an unaligned
    artifact, root first.
    """

    summary: List[ArtifactCoordinate] = field(default_factory=list)
    details: List[Tuple[ArtifactCoordinate, ...]] = field(default_factory=list)


def compile_alignment_pattern(text: str) -> re.Pattern:
    if not text:
        raise AlignmentConfigError("An alignment pattern is required")
    try:
        return re.compile(text)
    except re.error as exc:
        raise AlignmentConfigError(f"Invalid alignment pattern {text!r}: {exc}") from exc


def classify(version: str, pattern: re.Pattern) -> AlignmentVerdict:
    if pattern.search(version):
        return AlignmentVerdict.ALIGNED
    return AlignmentVerdict.UNALIGNED


def is_aligned(artifact: ArtifactCoordinate, pattern: re.Pattern) -> bool:
    return classify(artifact.version, pattern) is AlignmentVerdict.ALIGNED


def partition_direct(
    nodes: Iterable[DependencyNode], pattern: re.Pattern
) -> Tuple[List[ArtifactCoordinate], List[ArtifactCoordinate]]:
    """Split distinct direct dependency coordinates into aligned and unaligned."""

    seen: dict[ArtifactCoordinate, None] = {}
    for node in nodes:
        seen.setdefault(node.artifact, None)

    aligned = sort_artifacts(a for a in seen if is_aligned(a, pattern))
    unaligned = sort_artifacts(a for a in seen if not is_aligned(a, pattern))
    return aligned, unaligned


def find_unaligned_transitives(
    aligned_roots: Iterable[DependencyNode],
    pattern: re.Pattern,
    exclude: Optional[NodeFilter] = None,
) -> TransitiveInstability:
    """Find aligned direct dependencies with unaligned artifacts below them.

    Every occurrence of a coordinate is classified on its own, so a diamond
    dependency reached through two direct dependencies is reported under
    both. Excluded nodes hide their whole subtree.
    """

    summary: dict[ArtifactCoordinate, None] = {}
    details: list[Tuple[ArtifactCoordinate, ...]] = []

    def _visit(node: DependencyNode, ancestors: list[ArtifactCoordinate]) -> None:
        if exclude is not None and exclude(node):
            return
        ancestors.append(node.artifact)
        for child in node.children:
            _visit(child, ancestors)
        if classify(node.artifact.version, pattern) is AlignmentVerdict.UNALIGNED:
            summary.setdefault(ancestors[0], None)
            details.append(tuple(ancestors))
        ancestors.pop()

    for root in aligned_roots:
        _visit(root, [])

    distinct = list(dict.fromkeys(details))
    distinct.sort(key=lambda chain: chain[0].sort_key)
    logger.debug(
        "Found %d aligned direct dependencies with %d unaligned transitive chains",
        len(summary),
        len(distinct),
    )
    return TransitiveInstability(summary=sort_artifacts(summary), details=distinct)
