from alignment_inspector.path_tracker import collect_paths
from alignment_inspector.types import ArtifactCoordinate, DependencyNode, PathRecord


def _art(name: str, version: str = "1.0") -> ArtifactCoordinate:
    return ArtifactCoordinate("org.example", name, version)


def test_records_every_node_with_its_path():
    b = DependencyNode(_art("b"))
    a = DependencyNode(_art("a"), [b])

    records = collect_paths([a])

    assert [r.artifact for r in records] == [a.artifact, b.artifact]
    assert records[0].is_direct
    assert records[1].path == (a.artifact, b.artifact)
    assert records[1].root == a.artifact


def test_first_path_wins_for_repeated_coordinate():
    x_under_a = DependencyNode(_art("x"))
    x_under_b = DependencyNode(_art("x"))
    a = DependencyNode(_art("a"), [x_under_a])
    b = DependencyNode(_art("b"), [DependencyNode(_art("mid"), [x_under_b])])

    records = collect_paths([a, b])

    x_records = [r for r in records if r.artifact == _art("x")]
    assert len(x_records) == 1
    assert x_records[0].path == (_art("a"), _art("x"))


def test_direct_dependency_seen_transitively_first_keeps_transitive_path():
    shared = DependencyNode(_art("shared"))
    a = DependencyNode(_art("a"), [DependencyNode(_art("shared"))])

    records = collect_paths([a, shared])

    shared_record = next(r for r in records if r.artifact == _art("shared"))
    assert shared_record.is_transitive


def test_format_dependency_path():
    a, b, c = _art("a", "1.0-redhat"), _art("b", "2.0"), _art("c", "3.0")

    assert PathRecord.direct(a).format_dependency_path() == "org.example:a:jar:1.0-redhat (direct)"
    assert PathRecord(b, (a, b)).format_dependency_path() == (
        "org.example:b:jar:2.0 <- org.example:a:jar:1.0-redhat"
    )
    assert str(PathRecord(c, (a, b, c))) == (
        "org.example:c:jar:3.0 <- org.example:b:jar:2.0 <- org.example:a:jar:1.0-redhat"
    )


def test_path_records_compare_by_artifact_only():
    a, b = _art("a"), _art("b")

    assert PathRecord(b, (a, b)) == PathRecord.direct(b)
    assert len({PathRecord(b, (a, b)), PathRecord.direct(b)}) == 1


def test_excluded_nodes_are_not_collected():
    a = DependencyNode(_art("a"), [DependencyNode(_art("skip"), [DependencyNode(_art("below"))])])

    records = collect_paths([a], exclude=lambda node: node.artifact.name == "skip")

    assert [r.artifact.name for r in records] == ["a"]


def test_coordinate_equality_ignores_scope():
    compile_scope = ArtifactCoordinate("g", "n", "1", scope="compile")
    test_scope = ArtifactCoordinate("g", "n", "1", scope="test")

    assert compile_scope == test_scope
    assert hash(compile_scope) == hash(test_scope)
    assert str(compile_scope) == "g:n:jar:1:compile"
    assert str(ArtifactCoordinate("g", "n", "1", classifier="tests")) == "g:n:jar:tests:1"
    assert ArtifactCoordinate("g", "n", "1", classifier="tests") != ArtifactCoordinate("g", "n", "1")
