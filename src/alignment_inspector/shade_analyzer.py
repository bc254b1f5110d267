"""maven-shade-plugin relocation parsing and shaded-artifact matching.

Relocations are declared as Java package prefixes while dependencies are
identified by Maven group ids. The two only loosely correlate, so the
matcher is deliberately permissive: it prefers flagging an artifact that
was not really relocated over missing one that was. Treat a match as a
signal worth reviewing, not as proof.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from .types_artifacts import ArtifactCoordinate, PathRecord
from .types_report import ShadeAlignmentResult
from .types_shade import RelocationRule, ShadeConfiguration

logger = logging.getLogger(__name__)

PluginBlock = Mapping[str, Any]


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def _relocation_entries(raw: Any) -> List[Any]:
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        # <relocations><relocation>...</relocation></relocations> kept as a mapping
        raw = raw.get("relocation", [])
        if isinstance(raw, Mapping):
            return [raw]
    if isinstance(raw, (list, tuple)):
        return list(raw)
    return []


def parse_relocations(configuration: Optional[Mapping[str, Any]]) -> List[RelocationRule]:
    if not isinstance(configuration, Mapping):
        return []

    rules: List[RelocationRule] = []
    for entry in _relocation_entries(configuration.get("relocations")):
        if not isinstance(entry, Mapping):
            continue
        pattern = entry.get("pattern")
        shaded_pattern = entry.get("shadedPattern", entry.get("shaded_pattern"))
        if not pattern or not shaded_pattern:
            logger.debug("Skipping incomplete relocation: %s", dict(entry))
            continue
        rule = RelocationRule(pattern=str(pattern), shaded_pattern=str(shaded_pattern))
        logger.debug("Found relocation: %s", rule)
        rules.append(rule)
    return rules


def parse_shade_configuration(module_name: str, plugin_block: Optional[PluginBlock]) -> ShadeConfiguration:
    """Turn a raw shade plugin block into a :class:`ShadeConfiguration`.

    The dependency-reduced-POM flag is read from the plugin-level
    configuration only. Relocations from the plugin-level configuration come
    first, followed by those of each execution in declaration order.
    """

    if not plugin_block:
        return ShadeConfiguration(module_name=module_name)

    configuration = plugin_block.get("configuration")
    if not isinstance(configuration, Mapping):
        configuration = {}
    create_reduced_pom = _parse_bool(configuration.get("createDependencyReducedPom"))
    relocations = parse_relocations(configuration)

    for execution in plugin_block.get("executions") or []:
        if isinstance(execution, Mapping):
            relocations.extend(parse_relocations(execution.get("configuration")))

    return ShadeConfiguration(
        module_name=module_name,
        relocations=relocations,
        create_dependency_reduced_pom=create_reduced_pom,
    )


def analyze_shade_configurations(
    modules: Iterable[Tuple[str, Optional[PluginBlock]]]
) -> List[ShadeConfiguration]:
    """Return the shade configurations that declare at least one relocation."""

    configurations: List[ShadeConfiguration] = []
    for module_name, plugin_block in modules:
        if plugin_block is None:
            logger.debug("No maven-shade-plugin found in project: %s", module_name)
            continue
        config = parse_shade_configuration(module_name, plugin_block)
        if config.has_relocations:
            logger.debug(
                "Found shade configuration in project: %s with %d relocations",
                module_name,
                len(config.relocations),
            )
            configurations.append(config)
    return configurations


def _matches_rule(group: str, name: str, pattern: str) -> bool:
    if group.startswith(pattern):
        return True
    # relocation patterns are usually package names that begin with the group id
    if pattern.startswith(group):
        return True
    return name in pattern


def is_artifact_shaded(group: str, name: str, configs: Sequence[ShadeConfiguration]) -> bool:
    for config in configs:
        for rule in config.relocations:
            if _matches_rule(group, name, rule.pattern):
                return True
    return False


def analyze_shade_alignment(
    configs: Sequence[ShadeConfiguration],
    artifacts: Iterable[ArtifactCoordinate],
    paths: Optional[Iterable[PathRecord]] = None,
) -> ShadeAlignmentResult:
    shaded: List[ArtifactCoordinate] = []
    unshaded: List[ArtifactCoordinate] = []
    for artifact in artifacts:
        if is_artifact_shaded(artifact.group, artifact.name, configs):
            shaded.append(artifact)
        else:
            unshaded.append(artifact)

    shaded_with_paths = None
    if paths is not None:
        shaded_with_paths = sorted(
            (
                record
                for record in paths
                if is_artifact_shaded(record.artifact.group, record.artifact.name, configs)
            ),
            key=lambda record: str(record.artifact),
        )

    return ShadeAlignmentResult(
        configurations=list(configs),
        shaded=shaded,
        unshaded=unshaded,
        shaded_with_paths=shaded_with_paths,
    )
