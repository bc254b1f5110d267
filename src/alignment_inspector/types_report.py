from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from .alignment import TransitiveInstability, is_aligned
from .types_artifacts import ArtifactCoordinate, PathRecord
from .types_shade import ShadeConfiguration


@dataclass
class ShadeAlignmentResult:
    configurations: List[ShadeConfiguration]
    shaded: List[ArtifactCoordinate] = field(default_factory=list)
    unshaded: List[ArtifactCoordinate] = field(default_factory=list)
    shaded_with_paths: Optional[List[PathRecord]] = None

    @property
    def has_configurations(self) -> bool:
        return bool(self.configurations)

    @property
    def has_path_information(self) -> bool:
        return self.shaded_with_paths is not None

    def shaded_by_alignment(self, pattern: re.Pattern) -> Tuple[List[ArtifactCoordinate], List[ArtifactCoordinate]]:
        aligned = [artifact for artifact in self.shaded if is_aligned(artifact, pattern)]
        unaligned = [artifact for artifact in self.shaded if not is_aligned(artifact, pattern)]
        return aligned, unaligned

    def paths_by_alignment(
        self, pattern: re.Pattern, *, direct: bool
    ) -> Tuple[List[PathRecord], List[PathRecord]]:
        records = [record for record in self.shaded_with_paths or [] if record.is_direct == direct]
        aligned = [record for record in records if is_aligned(record.artifact, pattern)]
        unaligned = [record for record in records if not is_aligned(record.artifact, pattern)]
        return aligned, unaligned


@dataclass
class AlignmentReport:
    title: str
    alignment_pattern: re.Pattern
    aligned_direct: List[ArtifactCoordinate] = field(default_factory=list)
    unaligned_direct: List[ArtifactCoordinate] = field(default_factory=list)
    transitive: TransitiveInstability = field(default_factory=TransitiveInstability)
    shade: Optional[ShadeAlignmentResult] = None
    generated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def unaligned_transitive_summary(self) -> List[ArtifactCoordinate]:
        return self.transitive.summary

    @property
    def unaligned_transitive_details(self) -> List[Tuple[ArtifactCoordinate, ...]]:
        return self.transitive.details

    @property
    def is_fully_aligned(self) -> bool:
        return not self.unaligned_direct and not self.transitive.summary

    def counts(self) -> dict[str, int]:
        """Summarize the report for dashboards/CI."""

        counts = {
            "aligned_direct": len(self.aligned_direct),
            "unaligned_direct": len(self.unaligned_direct),
            "incompletely_aligned": len(self.transitive.summary),
            "unaligned_transitive_chains": len(self.transitive.details),
        }
        if self.shade is not None:
            counts["shade_configurations"] = len(self.shade.configurations)
            counts["shaded_artifacts"] = len(self.shade.shaded)
        return counts
