"""Compose classification, detection and shade analysis into one report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .alignment import find_unaligned_transitives, partition_direct
from .filters import combine, is_module_excluded, node_filter, prune_tree
from .path_tracker import collect_paths
from .policy import CompiledSettings
from .shade_analyzer import analyze_shade_alignment, analyze_shade_configurations
from .types import AlignmentReport, DependencyNode, sort_artifacts

logger = logging.getLogger(__name__)


@dataclass
class ModuleInput:
    """One build module: its dependency tree and its raw shade plugin block."""

    name: str
    tree: Optional[DependencyNode] = None
    plugin_block: Optional[Dict[str, Any]] = None


def direct_dependencies(roots: Iterable[DependencyNode], reactor_keys: set[str]) -> List[DependencyNode]:
    """Collect every direct dependency node of every module.

    A coordinate shared by several modules is returned once per module,
    since each occurrence can resolve a different subtree. Dependencies on
    other modules of the same build are left out.
    """

    direct: List[DependencyNode] = []
    for root in roots:
        for child in root.children:
            if child.artifact.key in reactor_keys:
                continue
            logger.debug("Project %s, found direct dependency %s", root.artifact, child.artifact)
            direct.append(child)
    return direct


def build_report(modules: List[ModuleInput], compiled: CompiledSettings, title: str = "") -> AlignmentReport:
    settings = compiled.settings
    pattern = compiled.alignment_pattern

    included = [m for m in modules if not is_module_excluded(m.name, compiled.module_patterns)]
    reactor_keys = {m.tree.artifact.key for m in modules if m.tree is not None}

    excluded = combine(compiled.scope_filter, compiled.exclude_filter)
    roots = [prune_tree(m.tree, excluded) for m in included if m.tree is not None]
    direct = direct_dependencies(roots, reactor_keys)

    aligned_direct, unaligned_direct = partition_direct(direct, pattern)
    aligned_set = set(aligned_direct)
    aligned_nodes = [node for node in direct if node.artifact in aligned_set]
    transitive = find_unaligned_transitives(
        aligned_nodes, pattern, exclude=node_filter(compiled.exclude_filter)
    )

    report = AlignmentReport(
        title=title or ", ".join(m.name for m in included),
        alignment_pattern=pattern,
        aligned_direct=aligned_direct,
        unaligned_direct=unaligned_direct,
        transitive=transitive,
    )

    if settings.analyze_shade:
        configs = analyze_shade_configurations((m.name, m.plugin_block) for m in included)
        if settings.include_transitive_shaded:
            paths = collect_paths(direct)
            report.shade = analyze_shade_alignment(
                configs, sort_artifacts(record.artifact for record in paths), paths
            )
        else:
            distinct = dict.fromkeys(node.artifact for node in direct)
            report.shade = analyze_shade_alignment(configs, sort_artifacts(distinct))

    return report
