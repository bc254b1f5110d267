from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .types_artifacts import ArtifactCoordinate, DependencyNode, PathRecord

logger = logging.getLogger(__name__)


def collect_paths(
    roots: Iterable[DependencyNode],
    exclude: Optional[Callable[[DependencyNode], bool]] = None,
) -> List[PathRecord]:
    """Flatten direct dependency subtrees into one record per coordinate.

    The walk is pre-order in the order the tree builder produced. When a
    coordinate shows up again under a different path the first record is
    kept and the later one dropped.
    """

    collected: Dict[ArtifactCoordinate, PathRecord] = {}

    def _collect(node: DependencyNode, parent_path: Tuple[ArtifactCoordinate, ...]) -> None:
        if exclude is not None and exclude(node):
            return
        path = parent_path + (node.artifact,)
        if node.artifact not in collected:
            collected[node.artifact] = PathRecord(artifact=node.artifact, path=path)
        for child in node.children:
            _collect(child, path)

    for root in roots:
        _collect(root, ())

    logger.debug("Collected %d artifacts with paths for shade analysis", len(collected))
    return list(collected.values())
