import json
from pathlib import Path

import pytest

from alignment_inspector.dependency_tree import (
    DependencyTreeError,
    load_dependency_trees,
    parse_coordinate,
    parse_tree_json,
    parse_tree_text,
)

TREE_OUTPUT = """\
[INFO] Scanning for projects...
[INFO] --- dependency:3.6.1:tree (default-cli) @ app ---
[INFO] com.example:app:jar:1.0.0
[INFO] +- io.strimzi:api:jar:0.40.0.redhat-00001:compile
[INFO] |  \\- com.fasterxml.jackson.core:jackson-databind:jar:2.15.2:compile
[INFO] |     \\- com.fasterxml.jackson.core:jackson-core:jar:2.15.2:compile
[INFO] +- org.junit:junit-bom:pom:tests:5.10.0:test (optional)
[INFO] \\- org.slf4j:slf4j-api:jar:1.7.36.redhat-00002:provided
[INFO] ------------------------------------------------------------------------
[INFO] BUILD SUCCESS
"""


def test_parse_coordinate_shapes():
    root = parse_coordinate("com.example:app:jar:1.0.0")
    assert (root.group, root.name, root.type, root.version, root.scope) == (
        "com.example",
        "app",
        "jar",
        "1.0.0",
        None,
    )

    scoped = parse_coordinate("org.slf4j:slf4j-api:jar:1.7.36:provided")
    assert scoped.scope == "provided"

    classified = parse_coordinate("org.junit:junit-bom:pom:tests:5.10.0:test")
    assert classified.classifier == "tests"
    assert classified.version == "5.10.0"

    with pytest.raises(DependencyTreeError):
        parse_coordinate("not-a-coordinate")


def test_parse_tree_text_builds_nested_tree():
    roots = parse_tree_text(TREE_OUTPUT)

    assert len(roots) == 1
    root = roots[0]
    assert root.artifact.name == "app"
    assert [child.artifact.name for child in root.children] == ["api", "junit-bom", "slf4j-api"]
    databind = root.children[0].children[0]
    assert databind.artifact.name == "jackson-databind"
    assert databind.children[0].artifact.name == "jackson-core"
    assert root.children[1].optional
    assert not root.children[0].optional


def test_parse_tree_text_handles_multiple_modules_without_log_prefix():
    text = "\n".join(
        [
            "com.example:core:jar:1.0",
            "\\- org.a:a:jar:1.0:compile",
            "com.example:web:war:1.0",
            "+- com.example:core:jar:1.0:compile",
            "\\- org.b:b:jar:2.0:runtime",
        ]
    )

    roots = parse_tree_text(text)

    assert [root.artifact.name for root in roots] == ["core", "web"]
    assert [child.artifact.name for child in roots[1].children] == ["core", "b"]


def test_verbose_omitted_entries_are_ignored():
    text = "\n".join(
        [
            "com.example:app:jar:1.0",
            "+- org.a:a:jar:1.0:compile",
            "|  \\- (org.c:c:jar:1.0:compile - omitted for duplicate)",
            "\\- org.c:c:jar:1.0:compile",
        ]
    )

    root = parse_tree_text(text)[0]

    assert root.children[0].children == []
    assert root.children[1].artifact.name == "c"


def test_tree_line_without_root_is_an_error():
    with pytest.raises(DependencyTreeError):
        parse_tree_text("+- org.a:a:jar:1.0:compile")


def test_skipped_level_is_an_error():
    text = "com.example:app:jar:1.0\n|  \\- org.a:a:jar:1.0:compile"

    with pytest.raises(DependencyTreeError):
        parse_tree_text(text)


def test_parse_tree_json_reads_maven_json_output():
    payload = {
        "groupId": "com.example",
        "artifactId": "app",
        "version": "1.0",
        "type": "jar",
        "scope": "",
        "classifier": "",
        "optional": "false",
        "children": [
            {
                "groupId": "io.strimzi",
                "artifactId": "api",
                "version": "0.40.0.redhat-00001",
                "type": "jar",
                "scope": "compile",
                "classifier": "",
                "optional": "true",
                "children": [],
            }
        ],
    }

    roots = parse_tree_json(json.dumps(payload))

    assert roots[0].artifact.scope is None
    assert roots[0].artifact.classifier is None
    child = roots[0].children[0]
    assert child.artifact.scope == "compile"
    assert child.optional


def test_parse_tree_json_rejects_incomplete_objects():
    with pytest.raises(DependencyTreeError):
        parse_tree_json(json.dumps({"groupId": "g", "artifactId": "a"}))

    with pytest.raises(DependencyTreeError):
        parse_tree_json("{not json")


def test_load_dependency_trees_detects_format(tmp_path: Path):
    text_file = tmp_path / "tree.txt"
    text_file.write_text(TREE_OUTPUT)
    json_file = tmp_path / "tree.out"
    json_file.write_text(json.dumps([{"groupId": "g", "artifactId": "a", "version": "1"}]))

    assert load_dependency_trees(text_file)[0].artifact.name == "app"
    assert load_dependency_trees(json_file)[0].artifact.name == "a"


def test_load_dependency_trees_requires_a_tree(tmp_path: Path):
    empty = tmp_path / "empty.txt"
    empty.write_text("[INFO] BUILD FAILURE\n")

    with pytest.raises(DependencyTreeError):
        load_dependency_trees(empty)
