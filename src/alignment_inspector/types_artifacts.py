from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class ArtifactCoordinate:
    """Identifies a resolved dependency.

    Equality and hashing cover ``group:name:version:type[:classifier]``. The
    scope is carried for filtering and display only, so the same artifact
    pulled in under two scopes is still one coordinate.
    """

    group: str
    name: str
    version: str
    type: str = "jar"
    classifier: Optional[str] = None
    scope: Optional[str] = field(default=None, compare=False)

    @property
    def key(self) -> str:
        return f"{self.group}:{self.name}"

    @property
    def sort_key(self) -> Tuple[str, str]:
        return (self.group, self.name)

    def __str__(self) -> str:
        parts = [self.group, self.name, self.type]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        if self.scope:
            parts.append(self.scope)
        return ":".join(parts)


@dataclass
class DependencyNode:
    artifact: ArtifactCoordinate
    children: List["DependencyNode"] = field(default_factory=list)
    optional: bool = False


@dataclass(frozen=True, eq=False)
class PathRecord:
    """An artifact together with the chain of dependencies that pulled it in.

    ``path`` starts at the direct dependency and ends with ``artifact``.
    Two records are equal when they describe the same artifact, whatever
    the path; collectors rely on this to keep one record per coordinate.
    """

    artifact: ArtifactCoordinate
    path: Tuple[ArtifactCoordinate, ...]

    @classmethod
    def direct(cls, artifact: ArtifactCoordinate) -> "PathRecord":
        return cls(artifact=artifact, path=(artifact,))

    @property
    def is_direct(self) -> bool:
        return len(self.path) == 1

    @property
    def is_transitive(self) -> bool:
        return not self.is_direct

    @property
    def root(self) -> ArtifactCoordinate:
        return self.path[0]

    def format_dependency_path(self) -> str:
        if self.is_direct:
            return f"{self.artifact} (direct)"
        return " <- ".join(str(step) for step in reversed(self.path))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathRecord):
            return NotImplemented
        return self.artifact == other.artifact

    def __hash__(self) -> int:
        return hash(self.artifact)

    def __str__(self) -> str:
        return self.format_dependency_path()


def sort_artifacts(artifacts) -> List[ArtifactCoordinate]:
    return sorted(artifacts, key=lambda artifact: artifact.sort_key)
