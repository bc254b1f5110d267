from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import click

from .alignment import AlignmentConfigError
from .dependency_tree import DependencyTreeError, load_dependency_trees
from .inspector import ModuleInput, build_report
from .policy import InspectorSettings, PolicyFileError, evaluate_alignment, load_policy
from .pom_reader import PomReadError, read_shade_plugin
from .reporting import FORMATS, write_report
from .shade_analyzer import parse_shade_configuration

logger = logging.getLogger(__name__)


def _collect_modules(trees: tuple[str, ...], poms: tuple[str, ...]) -> list[ModuleInput]:
    # keyed by group:name so same-named modules from different groups stay apart
    modules: dict[str, ModuleInput] = {}
    for tree_file in trees:
        for root in load_dependency_trees(Path(tree_file)):
            modules.setdefault(root.artifact.key, ModuleInput(name=root.artifact.name)).tree = root

    for pom in poms:
        shade_module = read_shade_plugin(Path(pom))
        key = shade_module.key
        if shade_module.group is None:
            # no groupId anywhere in the POM: fall back to a unique name match
            matches = [k for k, m in modules.items() if m.name == shade_module.name]
            if len(matches) == 1:
                key = matches[0]
        module = modules.setdefault(key, ModuleInput(name=shade_module.name))
        module.plugin_block = shade_module.plugin_block

    return list(modules.values())


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Emit debug diagnostics on stderr.")
def main(verbose: bool) -> None:
    """Dependency version alignment inspector."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("trees", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.option(
    "--pom",
    "poms",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="Module pom.xml files to read maven-shade-plugin relocations from.",
)
@click.option(
    "--alignment-pattern",
    envvar="ALIGNMENT_PATTERN",
    help="Regex an aligned version must contain (e.g. 'redhat'). Defaults to ALIGNMENT_PATTERN.",
)
@click.option(
    "--policy",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="YAML policy file providing defaults for every option below.",
)
@click.option(
    "--excludes",
    help="Comma-separated [groupId]:[artifactId]:[type]:[version] patterns to drop from the tree.",
)
@click.option(
    "--exclude-modules",
    help="Comma-separated module name globs ('*' wildcard) to leave out of the analysis.",
)
@click.option("--scope", help="Only consider dependencies visible in this scope (compile, runtime, test...).")
@click.option(
    "--analyze-shade",
    is_flag=True,
    help="Report which artifacts are plausibly affected by shade relocations.",
)
@click.option(
    "--print-shade-configurations",
    is_flag=True,
    help="Include every shade configuration and its relocations in the report.",
)
@click.option(
    "--include-transitive-shaded",
    is_flag=True,
    help="Check transitive dependencies for shading too, with the path that pulled them in.",
)
@click.option(
    "--fail-on-unaligned",
    is_flag=True,
    help="Exit non-zero when unaligned direct or transitive dependencies are found.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(FORMATS, case_sensitive=False),
    default="text",
    show_default=True,
    help="Output format for the report.",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, writable=True, path_type=str),
    help="Write the report to a file instead of stdout.",
)
@click.option("--append-output", is_flag=True, help="Append to --output instead of overwriting it.")
@click.option("--title", help="Report title (defaults to the analysed module names).")
@click.option("--skip", is_flag=True, help="Skip the analysis entirely.")
def report(
    trees: tuple[str, ...],
    poms: tuple[str, ...],
    alignment_pattern: Optional[str],
    policy: Optional[str],
    excludes: Optional[str],
    exclude_modules: Optional[str],
    scope: Optional[str],
    analyze_shade: bool,
    print_shade_configurations: bool,
    include_transitive_shaded: bool,
    fail_on_unaligned: bool,
    fmt: str,
    output: Optional[str],
    append_output: bool,
    title: Optional[str],
    skip: bool,
) -> None:
    """Report dependency alignment for `mvn dependency:tree` output files."""

    if skip:
        click.echo("Skipping alignment analysis", err=True)
        return

    try:
        base = load_policy(Path(policy)) if policy else InspectorSettings()
    except PolicyFileError as exc:
        click.echo(str(exc), err=True)
        raise SystemExit(1)

    settings = base.merged(
        alignment_pattern=alignment_pattern,
        excludes=excludes,
        exclude_modules=exclude_modules,
        scope=scope,
        analyze_shade=analyze_shade or None,
        print_shade_configurations=print_shade_configurations or None,
        include_transitive_shaded=include_transitive_shaded or None,
        fail_on_unaligned=fail_on_unaligned or None,
    )
    try:
        compiled = settings.compile()
    except AlignmentConfigError as exc:
        raise click.UsageError(str(exc))

    if not trees:
        click.echo("No dependency trees supplied; nothing to analyse.", err=True)
        raise SystemExit(1)

    try:
        modules = _collect_modules(trees, poms)
    except (DependencyTreeError, PomReadError, OSError) as exc:
        click.echo(f"Cannot build project dependency graph: {exc}", err=True)
        raise SystemExit(1)

    alignment_report = build_report(modules, compiled, title=title or "")

    destination = Path(output) if output else None
    rendered = write_report(
        alignment_report,
        fmt,
        destination,
        append=append_output,
        show_shade_configurations=settings.print_shade_configurations,
    )
    if destination:
        logger.info("Wrote alignment report to: %s", destination)
        click.echo(f"Wrote alignment report to: {destination}", err=True)
    else:
        click.echo(rendered)

    evaluation = evaluate_alignment(alignment_report, settings.fail_on_unaligned)
    if not evaluation.passed:
        for failure in evaluation.failures:
            click.echo(failure, err=True)
        raise SystemExit(1)


@main.command()
@click.argument("poms", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of human text.")
def shade(poms: tuple[str, ...], json_output: bool) -> None:
    """Show the maven-shade-plugin relocations declared by each POM."""

    if not poms:
        click.echo("No POM files supplied; nothing to inspect.", err=True)
        raise SystemExit(1)

    configurations = []
    for pom in poms:
        try:
            module = read_shade_plugin(Path(pom))
        except PomReadError as exc:
            click.echo(str(exc), err=True)
            raise SystemExit(1)
        configurations.append(
            (module, parse_shade_configuration(module.name, module.plugin_block))
        )

    if json_output:
        payload = [
            {**config.as_dict(), "has_shade_plugin": module.plugin_block is not None}
            for module, config in configurations
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    for module, config in configurations:
        if module.plugin_block is None:
            click.echo(f"[shade] {module.name} - no maven-shade-plugin")
            continue
        click.echo(
            f"[shade] {module.name} - relocations={len(config.relocations)}"
            f" dependency_reduced_pom={str(config.create_dependency_reduced_pom).lower()}"
        )
        for rule in config.relocations:
            click.echo(f"  {rule}")


if __name__ == "__main__":
    main()
