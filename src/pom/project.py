"""Reader for POM descriptor documents."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from constants import Constants
from pom.dependency import Dependency
from pom.xml import child, children, local_name, parse_document, text

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_MAX_INTERPOLATION_PASSES = 5


def _dependency_from_element(elem: ET.Element, transitive: bool = False) -> Dependency:
    return Dependency(
        group_id=text(elem, "groupId"),
        artifact_id=text(elem, "artifactId"),
        version=text(elem, "version"),
        scope=text(elem, "scope"),
        optional=text(elem, "optional").lower() == "true",
        transitive=transitive,
    )


@dataclass
class Project:
    """Root object in XML POM files defining packages."""

    group_id: str = ""
    artifact_id: str = ""
    name: str = ""
    version: str = ""
    parent: Optional[Dependency] = None
    dependencies: List[Dependency] = field(default_factory=list)
    dependencies_mgm: List[Dependency] = field(default_factory=list)
    plugins: List[Dependency] = field(default_factory=list)
    properties: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Project":
        """Read a Project from a downloaded POM file.

        Raises:
            DocumentFormatError: If the document is not valid XML.
        """
        root = parse_document(data, "pom")

        parent = None
        parent_elem = child(root, "parent")
        if parent_elem is not None and text(parent_elem, "artifactId"):
            parent = _dependency_from_element(parent_elem)

        plugins = []
        for elem in children(root, "build/plugins/plugin"):
            plugin = _dependency_from_element(elem)
            if not plugin.group_id:
                plugin.group_id = Constants.DEFAULT_PLUGIN_GROUP_ID
            plugins.append(plugin)

        properties = {}
        props_elem = child(root, "properties")
        if props_elem is not None:
            for prop in props_elem:
                if not isinstance(prop.tag, str):
                    continue  # comments and processing instructions
                properties[local_name(prop.tag)] = (prop.text or "").strip()

        return cls(
            group_id=text(root, "groupId"),
            artifact_id=text(root, "artifactId"),
            name=text(root, "name"),
            version=text(root, "version"),
            parent=parent,
            dependencies=[
                _dependency_from_element(elem)
                for elem in children(root, "dependencies/dependency")
            ],
            dependencies_mgm=[
                _dependency_from_element(elem, transitive=True)
                for elem in children(root, "dependencyManagement/dependencies/dependency")
            ],
            plugins=plugins,
            properties=properties,
        )

    def get_group_id(self) -> str:
        """Sometimes groupId is not specified in project."""
        if self.group_id:
            return self.group_id
        return self.parent.group_id if self.parent else ""

    def get_version(self) -> str:
        """Sometimes version is not specified in project."""
        if self.version:
            return self.version
        return self.parent.version if self.parent else ""

    def _variables(self) -> Dict[str, str]:
        """Values a ${...} placeholder in this POM can refer to."""
        variables = dict(self.properties)
        parent_group = self.parent.group_id if self.parent else ""
        parent_version = self.parent.version if self.parent else ""
        builtins = {
            "groupId": self.get_group_id(),
            "artifactId": self.artifact_id,
            "version": self.get_version(),
            "parent.groupId": parent_group,
            "parent.version": parent_version,
        }
        for key, value in builtins.items():
            if not value:
                continue
            variables[f"project.{key}"] = value
            variables[f"pom.{key}"] = value
        return variables

    def interpolate(self, value: str) -> str:
        """Substitute known ${...} placeholders, leaving unknown ones as-is."""
        if Constants.PLACEHOLDER_PREFIX not in value:
            return value
        variables = self._variables()
        for _ in range(_MAX_INTERPOLATION_PASSES):
            expanded = _PLACEHOLDER.sub(
                lambda m: variables.get(m.group(1).strip(), m.group(0)), value
            )
            if expanded == value:
                break
            value = expanded
        return value

    def fix_fields(self, dep: Dependency) -> Dependency:
        """POM file dependency fields can reference project fields."""
        return replace(
            dep,
            group_id=self.interpolate(dep.group_id),
            artifact_id=self.interpolate(dep.artifact_id),
            version=self.interpolate(dep.version),
        )

    def get_dependencies(self) -> List[Dependency]:
        """Every dependency edge of this POM in a stable order.

        The parent comes first, then direct dependencies, managed
        dependencies (flagged transitive) and finally build plugins.
        """
        deps: List[Dependency] = []
        if self.parent is not None:
            deps.append(self.fix_fields(self.parent))
        deps.extend(self.fix_fields(dep) for dep in self.dependencies)
        deps.extend(self.fix_fields(dep) for dep in self.dependencies_mgm)
        deps.extend(self.fix_fields(dep) for dep in self.plugins)
        return deps
