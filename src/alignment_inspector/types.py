from __future__ import annotations

"""Shared data structures for alignment inspection.

The definitions live in domain-focused modules (artifacts, shading, report
composition); this module re-exports them so callers have one stable import
path.
"""

from .types_artifacts import ArtifactCoordinate, DependencyNode, PathRecord, sort_artifacts
from .types_report import AlignmentReport, ShadeAlignmentResult
from .types_shade import RelocationRule, ShadeConfiguration

__all__ = [
    "AlignmentReport",
    "ArtifactCoordinate",
    "DependencyNode",
    "PathRecord",
    "RelocationRule",
    "ShadeAlignmentResult",
    "ShadeConfiguration",
    "sort_artifacts",
]
