from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SHADE_PLUGIN_GROUP = "org.apache.maven.plugins"
SHADE_PLUGIN_ARTIFACT = "maven-shade-plugin"


class PomReadError(ValueError):
    """Raised when a POM file cannot be parsed."""


@dataclass
class ShadeModule:
    """A build module and its raw maven-shade-plugin block, if it has one."""

    name: str
    group: Optional[str] = None
    plugin_block: Optional[Dict[str, Any]] = None

    @property
    def key(self) -> str:
        return f"{self.group}:{self.name}" if self.group else self.name


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _children(element: Optional[ET.Element], name: str) -> List[ET.Element]:
    if element is None:
        return []
    return [child for child in element if _local(child.tag) == name]


def _text(element: Optional[ET.Element], name: str) -> Optional[str]:
    child = _child(element, name) if element is not None else None
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def element_to_value(element: ET.Element) -> Any:
    """Convert plugin configuration XML into plain mappings and lists.

    Leaf elements become their stripped text. Repeated child tags collect
    into a list, so ``<relocations>`` with several ``<relocation>`` children
    becomes ``{"relocation": [...]}``.
    """

    children = list(element)
    if not children:
        return (element.text or "").strip()

    value: Dict[str, Any] = {}
    for child in children:
        if not isinstance(child.tag, str):
            continue
        key = _local(child.tag)
        converted = element_to_value(child)
        if key in value:
            existing = value[key]
            if not isinstance(existing, list):
                value[key] = [existing]
            value[key].append(converted)
        else:
            value[key] = converted
    return value


def _find_shade_plugin(project: ET.Element) -> Optional[ET.Element]:
    build = _child(project, "build")
    for plugin in _children(_child(build, "plugins") if build is not None else None, "plugin"):
        group = _text(plugin, "groupId") or SHADE_PLUGIN_GROUP
        if group == SHADE_PLUGIN_GROUP and _text(plugin, "artifactId") == SHADE_PLUGIN_ARTIFACT:
            return plugin
    return None


def _plugin_block(plugin: ET.Element) -> Dict[str, Any]:
    configuration = _child(plugin, "configuration")
    block: Dict[str, Any] = {
        "configuration": element_to_value(configuration) if configuration is not None else {},
        "executions": [],
    }
    for execution in _children(_child(plugin, "executions"), "execution"):
        exec_config = _child(execution, "configuration")
        block["executions"].append(
            {
                "id": _text(execution, "id"),
                "configuration": element_to_value(exec_config) if exec_config is not None else {},
            }
        )
    return block


def read_shade_plugin(path: Path) -> ShadeModule:
    try:
        project = ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise PomReadError(f"Unable to parse POM {path}: {exc}") from exc

    name = _text(project, "artifactId") or path.parent.name
    # groupId is commonly inherited from <parent>
    group = _text(project, "groupId") or _text(_child(project, "parent"), "groupId")
    plugin = _find_shade_plugin(project)
    if plugin is None:
        logger.debug("No maven-shade-plugin declared in %s", path)
        return ShadeModule(name=name, group=group)
    return ShadeModule(name=name, group=group, plugin_block=_plugin_block(plugin))
