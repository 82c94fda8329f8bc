"""Effective project document parsing."""

from __future__ import annotations

import json
import os
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List

from .errors import MalformedDescriptor
from .models import ModuleRecord, ProjectDescriptor

_REQUIRED_FIELDS = ("groupId", "artifactId", "version")


def load_descriptor(path: Path) -> Any:
    """Read an effective project document written as JSON or effective-pom XML."""
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedDescriptor(f"Cannot read project document {path}: {exc}") from exc

    stripped = text.lstrip()
    if stripped.startswith("<"):
        return parse_effective_pom(stripped)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedDescriptor(f"Project document {path} is not valid JSON: {exc}") from exc


def parse_effective_pom(text: str) -> Any:
    """Convert `mvn help:effective-pom` output into the JSON document shape."""
    try:
        root = ET.fromstring(text.encode("utf-8"))
    except ET.ParseError as exc:
        raise MalformedDescriptor(f"Effective POM is not well-formed XML: {exc}") from exc

    tag = _local_name(root.tag)
    if tag == "projects":
        return [_element_to_value(child) for child in root if _local_name(child.tag) == "project"]
    if tag == "project":
        return _element_to_value(root)
    raise MalformedDescriptor(f"Unexpected effective POM root element <{tag}>")


def parse_descriptor(
    document: Any,
    *,
    project_root: Path | str,
    build_directory: str = "target",
) -> ProjectDescriptor:
    """Return root coordinates and the ordered module records of a project document."""
    projects = _unwrap_projects(document)
    if not projects:
        raise MalformedDescriptor("Project document lists no projects")

    root_prefix = str(project_root).rstrip(os.sep) + os.sep
    modules: List[ModuleRecord] = []
    for index, project in enumerate(projects):
        if not isinstance(project, dict):
            raise MalformedDescriptor(f"Project entry {index} is not an object")
        modules.append(_module_record(project, index, root_prefix, build_directory))

    return ProjectDescriptor(
        root=modules[0],
        modules=tuple(modules),
        raw_modules=tuple(projects),
    )


def normalize_build_path(directory: str, root_prefix: str, build_directory: str) -> str:
    """Turn an absolute build output directory into a module path relative to the root."""
    path = directory
    if path.startswith(root_prefix):
        path = "." + os.sep + path[len(root_prefix):]
    suffix = os.sep + build_directory
    if build_directory and path.endswith(suffix):
        path = path[: -len(suffix)]
    return path or "."


def _module_record(
    project: Dict[str, Any], index: int, root_prefix: str, build_directory: str
) -> ModuleRecord:
    coordinates: Dict[str, str] = {}
    for name in _REQUIRED_FIELDS:
        value = project.get(name)
        if not isinstance(value, str) or not value.strip():
            raise MalformedDescriptor(f"Project entry {index} is missing {name}")
        coordinates[name] = value.strip()

    build = project.get("build")
    directory = build.get("directory") if isinstance(build, dict) else None
    if not isinstance(directory, str) or not directory.strip():
        raise MalformedDescriptor(
            f"Project {coordinates['artifactId']} is missing build.directory"
        )

    return ModuleRecord(
        name=f"{coordinates['artifactId']}-{coordinates['version']}",
        groupId=coordinates["groupId"],
        artifactId=coordinates["artifactId"],
        version=coordinates["version"],
        path=normalize_build_path(directory.strip(), root_prefix, build_directory),
    )


def _unwrap_projects(document: Any) -> List[Any]:
    if isinstance(document, list):
        return list(document)
    if not isinstance(document, dict):
        raise MalformedDescriptor("Project document must be an object or an array")
    if "projects" in document:
        return _unwrap_projects(document["projects"])
    if "project" in document and not any(field in document for field in _REQUIRED_FIELDS):
        return _as_list(document["project"])
    return [document]


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _element_to_value(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return (element.text or "").strip()

    result: Dict[str, Any] = {}
    for child in children:
        if not isinstance(child.tag, str):
            continue
        key = _local_name(child.tag)
        value = _element_to_value(child)
        if key in result:
            existing = result[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[key] = [existing, value]
        else:
            result[key] = value
    return result


def _local_name(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""
    match = re.match(r"\{.+}(.*)", tag)
    return match.group(1) if match else tag


__all__ = [
    "load_descriptor",
    "normalize_build_path",
    "parse_descriptor",
    "parse_effective_pom",
]
