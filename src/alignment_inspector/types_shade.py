from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class RelocationRule:
    """One ``<relocation>`` entry of a maven-shade-plugin configuration."""

    pattern: str
    shaded_pattern: str

    def apply(self, package: str) -> str:
        if package.startswith(self.pattern):
            return self.shaded_pattern + package[len(self.pattern):]
        return package

    def __str__(self) -> str:
        return f"{self.pattern} -> {self.shaded_pattern}"


@dataclass
class ShadeConfiguration:
    module_name: str
    relocations: List[RelocationRule] = field(default_factory=list)
    create_dependency_reduced_pom: bool = False

    @property
    def has_relocations(self) -> bool:
        return bool(self.relocations)

    def as_dict(self) -> dict:
        return {
            "module": self.module_name,
            "create_dependency_reduced_pom": self.create_dependency_reduced_pom,
            "relocations": [
                {"pattern": rule.pattern, "shaded_pattern": rule.shaded_pattern}
                for rule in self.relocations
            ],
        }
