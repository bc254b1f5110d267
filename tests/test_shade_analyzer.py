from alignment_inspector.shade_analyzer import (
    analyze_shade_alignment,
    analyze_shade_configurations,
    is_artifact_shaded,
    parse_shade_configuration,
)
from alignment_inspector.types import ArtifactCoordinate, PathRecord, RelocationRule, ShadeConfiguration


def _config(*patterns: str) -> ShadeConfiguration:
    return ShadeConfiguration(
        module_name="app",
        relocations=[RelocationRule(pattern, f"shaded.{pattern}") for pattern in patterns],
    )


def test_parser_reads_plugin_and_execution_relocations_in_order():
    block = {
        "configuration": {
            "createDependencyReducedPom": "TRUE",
            "relocations": [{"pattern": "com.google", "shadedPattern": "shaded.com.google"}],
        },
        "executions": [
            {"id": "one", "configuration": {"relocations": [{"pattern": "org.a", "shadedPattern": "x.org.a"}]}},
            {
                "id": "two",
                "configuration": {
                    "createDependencyReducedPom": "false",
                    "relocations": {"relocation": {"pattern": "com.google", "shadedPattern": "shaded.com.google"}},
                },
            },
        ],
    }

    config = parse_shade_configuration("app", block)

    assert config.create_dependency_reduced_pom is True
    assert [rule.pattern for rule in config.relocations] == ["com.google", "org.a", "com.google"]
    assert str(config.relocations[1]) == "org.a -> x.org.a"


def test_incomplete_relocations_are_skipped():
    block = {
        "configuration": {
            "relocations": [
                {"pattern": "org.only"},
                {"shadedPattern": "shaded.nothing"},
                {"pattern": "org.full", "shadedPattern": "shaded.org.full"},
            ]
        }
    }

    config = parse_shade_configuration("app", block)

    assert [rule.pattern for rule in config.relocations] == ["org.full"]
    assert config.create_dependency_reduced_pom is False


def test_reduced_pom_flag_defaults_to_false_when_unparseable():
    block = {"configuration": {"createDependencyReducedPom": "yes please"}}

    assert parse_shade_configuration("app", block).create_dependency_reduced_pom is False


def test_modules_without_relocations_are_dropped():
    modules = [
        ("no-plugin", None),
        ("flag-only", {"configuration": {"createDependencyReducedPom": "true"}}),
        ("shaded", {"configuration": {"relocations": [{"pattern": "io.a", "shadedPattern": "s.io.a"}]}}),
    ]

    configs = analyze_shade_configurations(modules)

    assert [config.module_name for config in configs] == ["shaded"]


def test_group_prefix_matches_pattern():
    assert is_artifact_shaded("com.google.guava", "guava", [_config("com.google")])


def test_pattern_starting_with_group_matches():
    assert is_artifact_shaded("io.strimzi", "api", [_config("io.strimzi.shaded")])


def test_pattern_containing_artifact_name_matches():
    assert is_artifact_shaded("com.example", "foo", [_config("com.example.internal.foo")])
    assert is_artifact_shaded("org.unrelated", "foo", [_config("net.vendor.foo.impl")])


def test_unrelated_artifact_is_not_shaded():
    assert not is_artifact_shaded("org.slf4j", "slf4j-api", [_config("com.google", "io.netty")])


def test_empty_configuration_list_never_matches():
    assert not is_artifact_shaded("com.google", "guava", [])


def test_rule_matching_is_case_sensitive():
    assert not is_artifact_shaded("com.Google", "Guava", [_config("com.google")])


def test_analyze_shade_alignment_partitions_artifacts_and_paths():
    guava = ArtifactCoordinate("com.google.guava", "guava", "32.0")
    slf4j = ArtifactCoordinate("org.slf4j", "slf4j-api", "2.0")
    failure = ArtifactCoordinate("com.google.guava", "failureaccess", "1.0")
    paths = [PathRecord.direct(guava), PathRecord.direct(slf4j), PathRecord(failure, (guava, failure))]

    result = analyze_shade_alignment([_config("com.google")], [guava, slf4j, failure], paths)

    assert result.shaded == [guava, failure]
    assert result.unshaded == [slf4j]
    assert [record.artifact for record in result.shaded_with_paths] == [failure, guava]
    assert result.has_path_information


def test_analyze_without_paths_has_no_path_information():
    result = analyze_shade_alignment([], [ArtifactCoordinate("g", "n", "1")])

    assert not result.has_configurations
    assert not result.has_path_information
    assert result.shaded == []


def test_relocation_rule_rewrites_matching_packages():
    rule = RelocationRule("com.google", "shaded.com.google")

    assert rule.apply("com.google.common.base") == "shaded.com.google.common.base"
    assert rule.apply("org.other") == "org.other"


def test_shaded_paths_are_ordered_by_full_coordinate():
    newer = ArtifactCoordinate("com.google.guava", "guava", "32.0")
    older = ArtifactCoordinate("com.google.guava", "guava", "31.1")
    root = ArtifactCoordinate("org.example", "app-lib", "1.0")
    paths = [PathRecord(newer, (root, newer)), PathRecord(older, (root, older))]

    result = analyze_shade_alignment([_config("com.google")], [older, newer], paths)

    assert [record.artifact.version for record in result.shaded_with_paths] == ["31.1", "32.0"]
