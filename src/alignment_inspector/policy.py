from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, List, Optional

import yaml

from .alignment import compile_alignment_pattern
from .filters import (
    ArtifactPredicate,
    build_exclude_filter,
    build_scope_filter,
    compile_module_patterns,
    split_patterns,
)
from .types import AlignmentReport

# Policy files may use the plugin's original parameter names.
_KEY_ALIASES = {
    "alignmentPattern": "alignment_pattern",
    "excludes": "excludes",
    "excludeModules": "exclude_modules",
    "scope": "scope",
    "analyzeShade": "analyze_shade",
    "printShadeConfigurations": "print_shade_configurations",
    "includeTransitiveShaded": "include_transitive_shaded",
    "failOnUnalignedDependencies": "fail_on_unaligned",
    "fail_on_unaligned_dependencies": "fail_on_unaligned",
}


class PolicyFileError(ValueError):
    """Raised when a policy file cannot be read."""


@dataclass
class InspectorSettings:
    alignment_pattern: Optional[str] = None
    excludes: List[str] = field(default_factory=list)
    exclude_modules: List[str] = field(default_factory=list)
    scope: Optional[str] = None
    analyze_shade: bool = False
    print_shade_configurations: bool = False
    include_transitive_shaded: bool = False
    fail_on_unaligned: bool = False

    def merged(self, **overrides: Any) -> "InspectorSettings":
        """Return a copy with every override that is not None applied."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        for key in ("excludes", "exclude_modules"):
            if key in changes:
                changes[key] = split_patterns(changes[key])
        return replace(self, **changes)

    def compile(self) -> "CompiledSettings":
        """Validate every pattern up front so bad input fails before any traversal."""

        return CompiledSettings(
            settings=self,
            alignment_pattern=compile_alignment_pattern(self.alignment_pattern or ""),
            exclude_filter=build_exclude_filter(self.excludes),
            scope_filter=build_scope_filter(self.scope),
            module_patterns=compile_module_patterns(self.exclude_modules),
        )


@dataclass
class CompiledSettings:
    settings: InspectorSettings
    alignment_pattern: re.Pattern
    exclude_filter: Optional[ArtifactPredicate] = None
    scope_filter: Optional[ArtifactPredicate] = None
    module_patterns: List[re.Pattern] = field(default_factory=list)


@dataclass
class PolicyEvaluation:
    passed: bool
    failures: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"passed": self.passed, "failures": self.failures}


def _load_yaml(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise PolicyFileError(f"Unable to parse policy file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PolicyFileError(f"Policy file {path} must contain a mapping")
    return data


def load_policy(path: Path) -> InspectorSettings:
    raw = _load_yaml(path)
    known = {f.name for f in fields(InspectorSettings)}
    values: dict[str, Any] = {}
    for key, value in raw.items():
        name = _KEY_ALIASES.get(key, key)
        if name not in known:
            raise PolicyFileError(f"Unknown policy setting '{key}' in {path}")
        values[name] = value

    for key in ("excludes", "exclude_modules"):
        if key in values:
            values[key] = split_patterns(values[key])
    if values.get("alignment_pattern") is not None:
        values["alignment_pattern"] = str(values["alignment_pattern"])
    return InspectorSettings(**values)


def _dependencies(count: int) -> str:
    return "dependency" if count == 1 else "dependencies"


def _verb(count: int) -> str:
    return "is" if count == 1 else "are"


def evaluate_alignment(report: AlignmentReport, fail_on_unaligned: bool) -> PolicyEvaluation:
    """Decide whether a report should fail the build."""

    if not fail_on_unaligned:
        return PolicyEvaluation(passed=True)

    unaligned = len(report.unaligned_direct)
    incomplete = len(report.unaligned_transitive_summary)
    message = ""

    if unaligned:
        message = f"There {_verb(unaligned)} {unaligned} unaligned direct {_dependencies(unaligned)}"

    if incomplete:
        message += " and there" if message else "There"
        message += (
            f" {_verb(incomplete)} {incomplete} aligned direct {_dependencies(incomplete)}"
            " with at least one unaligned transitive dependency"
        )
    elif message:
        message += "."

    if not message:
        return PolicyEvaluation(passed=True)
    return PolicyEvaluation(passed=False, failures=[message])
