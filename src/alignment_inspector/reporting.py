from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Sequence

from jinja2 import Environment, select_autoescape

from .alignment import is_aligned
from .types import AlignmentReport, ArtifactCoordinate, PathRecord, ShadeAlignmentResult

env = Environment(autoescape=select_autoescape(["html", "xml"]))

FORMATS = ["text", "json", "markdown", "md", "html"]


def _plural(count: int) -> str:
    return "y" if count == 1 else "ies"


def format_chain(chain: Sequence[ArtifactCoordinate]) -> str:
    """Render a root-first chain nearest artifact first: ``leaf <- ... <- root``."""

    return " <- ".join(str(artifact) for artifact in reversed(chain))


def _section(title: str, lines: Iterable[str]) -> List[str]:
    return [title, "-" * len(title), *lines, ""]


def render_title(title: str) -> str:
    banner = "=" * len(title)
    return f"{banner}\n{title}\n{banner}\n\n"


def _render_shade_configurations(shade: ShadeAlignmentResult, report: AlignmentReport) -> List[str]:
    if not shade.has_configurations:
        return ["No shade configurations found in the project.", ""]

    lines = ["Shade Configuration Analysis", "===========================", ""]
    lines.append(f"Found {len(shade.configurations)} shade configuration(s)")
    lines.append("")
    for index, config in enumerate(shade.configurations, start=1):
        lines.append(f"Configuration #{index} ({config.module_name}):")
        lines.append(f"  - Create dependency reduced POM: {str(config.create_dependency_reduced_pom).lower()}")
        lines.append(f"  - Number of relocations: {len(config.relocations)}")
        if config.relocations:
            lines.append("  - Relocations:")
            lines.extend(f"    * {rule}" for rule in config.relocations)
        lines.append("")

    aligned, unaligned = shade.shaded_by_alignment(report.alignment_pattern)
    if aligned:
        lines.extend(
            _section(
                f"{len(aligned)} Aligned artifacts affected by shading",
                (f"Aligned - {artifact}" for artifact in aligned),
            )
        )
    if unaligned:
        lines.extend(
            _section(
                f"{len(unaligned)} Unaligned artifacts affected by shading",
                (f"Unaligned - {artifact}" for artifact in unaligned),
            )
        )
    return lines


def _render_shade_summary(shade: ShadeAlignmentResult, report: AlignmentReport) -> List[str]:
    if not shade.has_configurations:
        return []

    pattern = report.alignment_pattern
    aligned, unaligned = shade.shaded_by_alignment(pattern)
    lines = ["Shade-Aware Alignment Summary", "============================", ""]
    lines.append(
        f"Shaded artifacts: {len(shade.shaded)} total, {len(aligned)} aligned, {len(unaligned)} unaligned"
    )
    if unaligned:
        lines.append("")
        lines.extend(_section("Unaligned Shaded Artifacts:", (f"Unaligned - {a}" for a in unaligned))[:-1])

    if shade.has_path_information and shade.shaded_with_paths:
        lines.append("")
        lines.append("Shaded Artifacts with Dependency Paths")
        lines.append("--------------------------------------")
        direct_aligned, direct_unaligned = shade.paths_by_alignment(pattern, direct=True)
        transitive_aligned, transitive_unaligned = shade.paths_by_alignment(pattern, direct=False)
        groups = [
            ("Direct Aligned Shaded Artifacts:", "Aligned", direct_aligned),
            ("Direct Unaligned Shaded Artifacts:", "Unaligned", direct_unaligned),
            ("Transitive Aligned Shaded Artifacts:", "Aligned", transitive_aligned),
            ("Transitive Unaligned Shaded Artifacts:", "Unaligned", transitive_unaligned),
        ]
        for title, label, records in groups:
            if not records:
                continue
            lines.append("")
            lines.extend(_section(title, (f"{label} - {r.format_dependency_path()}" for r in records))[:-1])

    lines.append("")
    return lines


def render_text(report: AlignmentReport, show_shade_configurations: bool = False) -> str:
    lines: List[str] = []
    for label, artifacts in (("Aligned", report.aligned_direct), ("Unaligned", report.unaligned_direct)):
        title = f"{len(artifacts)} {label} direct dependenc{_plural(len(artifacts))}"
        lines.extend(_section(title, (f"{label} - {artifact}" for artifact in artifacts)))

    if report.unaligned_transitive_summary:
        lines.extend(
            _section(
                "Summary - Aligned direct dependencies with unaligned transitive dependencies",
                (f"Incompletely aligned - {a}" for a in report.unaligned_transitive_summary),
            )
        )
    if report.unaligned_transitive_details:
        lines.extend(
            _section(
                "Detail - Aligned direct dependencies with unaligned transitive dependencies",
                (f"Unaligned transitive - {format_chain(c)}" for c in report.unaligned_transitive_details),
            )
        )

    if report.shade is not None:
        if show_shade_configurations:
            lines.extend(_render_shade_configurations(report.shade, report))
        lines.extend(_render_shade_summary(report.shade, report))

    body = "\n".join(lines) + "\n"
    if report.title:
        return render_title(report.title) + body
    return body


def _path_rows(records: Iterable[PathRecord], report: AlignmentReport) -> List[dict]:
    return [
        {
            "artifact": str(record.artifact),
            "direct": record.is_direct,
            "aligned": is_aligned(record.artifact, report.alignment_pattern),
            "path": [str(step) for step in record.path],
            "formatted": record.format_dependency_path(),
        }
        for record in records
    ]


def report_as_dict(report: AlignmentReport) -> dict:
    payload = {
        "title": report.title,
        "generated_at": report.generated_at.isoformat(),
        "alignment_pattern": report.alignment_pattern.pattern,
        "counts": report.counts(),
        "aligned_direct": [str(a) for a in report.aligned_direct],
        "unaligned_direct": [str(a) for a in report.unaligned_direct],
        "unaligned_transitive_summary": [str(a) for a in report.unaligned_transitive_summary],
        "unaligned_transitive_details": [
            [str(a) for a in chain] for chain in report.unaligned_transitive_details
        ],
    }
    if report.shade is not None:
        aligned, unaligned = report.shade.shaded_by_alignment(report.alignment_pattern)
        payload["shade"] = {
            "configurations": [config.as_dict() for config in report.shade.configurations],
            "shaded_aligned": [str(a) for a in aligned],
            "shaded_unaligned": [str(a) for a in unaligned],
            "unshaded": [str(a) for a in report.shade.unshaded],
            "shaded_with_paths": _path_rows(report.shade.shaded_with_paths, report)
            if report.shade.has_path_information
            else None,
        }
    return payload


def render_json(report: AlignmentReport) -> str:
    return json.dumps(report_as_dict(report), indent=2)


def render_markdown(report: AlignmentReport) -> str:
    lines = [
        f"# Alignment Report{': ' + report.title if report.title else ''}",
        "",
        f"Generated at: {report.generated_at.isoformat()}",
        f"Alignment pattern: `{report.alignment_pattern.pattern}`",
    ]

    lines.append("\n## Direct dependencies\n")
    lines.append("| Artifact | Status |")
    lines.append("| --- | --- |")
    for artifact in report.aligned_direct:
        lines.append(f"| {artifact} | Aligned |")
    for artifact in report.unaligned_direct:
        lines.append(f"| {artifact} | Unaligned |")

    if report.unaligned_transitive_details:
        lines.append("\n## Aligned direct dependencies with unaligned transitive dependencies\n")
        for artifact in report.unaligned_transitive_summary:
            lines.append(f"- Incompletely aligned: `{artifact}`")
        lines.append("")
        lines.append("| Dependency path |")
        lines.append("| --- |")
        for chain in report.unaligned_transitive_details:
            lines.append(f"| {format_chain(chain)} |")

    if report.shade is not None and report.shade.has_configurations:
        lines.append("\n## Shading\n")
        lines.append("| Module | Reduced POM | Relocations |")
        lines.append("| --- | --- | --- |")
        for config in report.shade.configurations:
            relocations = "; ".join(str(rule) for rule in config.relocations)
            lines.append(f"| {config.module_name} | {config.create_dependency_reduced_pom} | {relocations} |")
        aligned, unaligned = report.shade.shaded_by_alignment(report.alignment_pattern)
        lines.append("")
        lines.append(
            f"Shaded artifacts: {len(report.shade.shaded)} total, {len(aligned)} aligned, {len(unaligned)} unaligned"
        )
        for record in report.shade.shaded_with_paths or []:
            lines.append(f"- {record.format_dependency_path()}")

    return "\n".join(lines)


def render_html(report: AlignmentReport) -> str:
    template = env.from_string(
        """
<!doctype html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\" />
  <title>Alignment Report</title>
  <style>
    body { font-family: Arial, sans-serif; margin: 2rem; }
    h1, h2 { color: #1f2937; }
    table { border-collapse: collapse; width: 100%; margin-bottom: 1.5rem; }
    th, td { border: 1px solid #d1d5db; padding: 0.5rem; }
    th { background: #f3f4f6; text-align: left; }
    .badge { display: inline-block; padding: 0.35rem 0.6rem; border-radius: 0.4rem; font-weight: 600; }
    .badge.good { background: #d1fae5; color: #065f46; }
    .badge.bad { background: #fee2e2; color: #991b1b; }
  </style>
</head>
<body>
  <h1>Alignment Report{% if title %}: {{ title }}{% endif %}</h1>
  <p>Generated at: {{ generated_at }}</p>
  <p>Alignment pattern: <code>{{ pattern }}</code></p>
  <section>
    <h2>Direct dependencies</h2>
    <table>
      <thead><tr><th>Artifact</th><th>Status</th></tr></thead>
      <tbody>
        {% for artifact in aligned %}
        <tr><td>{{ artifact }}</td><td><span class=\"badge good\">Aligned</span></td></tr>
        {% endfor %}
        {% for artifact in unaligned %}
        <tr><td>{{ artifact }}</td><td><span class=\"badge bad\">Unaligned</span></td></tr>
        {% endfor %}
      </tbody>
    </table>
  </section>
  {% if chains %}
  <section>
    <h2>Aligned direct dependencies with unaligned transitive dependencies</h2>
    <ul>
      {% for artifact in summary %}<li>Incompletely aligned: {{ artifact }}</li>{% endfor %}
    </ul>
    <table>
      <thead><tr><th>Dependency path</th></tr></thead>
      <tbody>
        {% for chain in chains %}<tr><td>{{ chain }}</td></tr>{% endfor %}
      </tbody>
    </table>
  </section>
  {% endif %}
  {% if shade %}
  <section>
    <h2>Shading</h2>
    <table>
      <thead><tr><th>Module</th><th>Reduced POM</th><th>Relocations</th></tr></thead>
      <tbody>
        {% for config in shade.configurations %}
        <tr>
          <td>{{ config.module }}</td>
          <td>{{ config.create_dependency_reduced_pom }}</td>
          <td>{% for rule in config.relocations %}{{ rule.pattern }} &rarr; {{ rule.shaded_pattern }}{% if not loop.last %}<br />{% endif %}{% endfor %}</td>
        </tr>
        {% endfor %}
      </tbody>
    </table>
    <p>Shaded aligned: {{ shade.shaded_aligned | length }}, shaded unaligned: {{ shade.shaded_unaligned | length }}</p>
  </section>
  {% endif %}
</body>
</html>
"""
    )
    payload = report_as_dict(report)
    return template.render(
        title=report.title,
        generated_at=payload["generated_at"],
        pattern=payload["alignment_pattern"],
        aligned=payload["aligned_direct"],
        unaligned=payload["unaligned_direct"],
        summary=payload["unaligned_transitive_summary"],
        chains=[format_chain(chain) for chain in report.unaligned_transitive_details],
        shade=payload.get("shade"),
    )


def render_report(report: AlignmentReport, fmt: str, show_shade_configurations: bool = False) -> str:
    fmt = fmt.lower()
    if fmt == "text":
        return render_text(report, show_shade_configurations=show_shade_configurations)
    if fmt == "json":
        return render_json(report)
    if fmt in {"md", "markdown"}:
        return render_markdown(report)
    if fmt == "html":
        return render_html(report)
    raise ValueError(f"Unknown report format: {fmt}")


def write_report(
    report: AlignmentReport,
    fmt: str,
    destination: Path | None,
    *,
    append: bool = False,
    show_shade_configurations: bool = False,
) -> str:
    output = render_report(report, fmt, show_shade_configurations=show_shade_configurations)
    if destination:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with destination.open("a" if append else "w") as handle:
            handle.write(output)
    return output
