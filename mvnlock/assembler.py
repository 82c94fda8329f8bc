"""Lock document assembly, serialization and atomic output."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .errors import InvalidOutput, MalformedDependencies
from .models import LockDocument, MetadataDocument, ProjectDescriptor, TrackedArtifact

_ROOT_FIELDS = ("name", "groupId", "artifactId", "version")


def assemble_lock_document(
    descriptor: ProjectDescriptor,
    deps: Sequence[str],
    artifacts: Sequence[TrackedArtifact],
    metas: Sequence[MetadataDocument],
    remotes: Mapping[str, str],
) -> LockDocument:
    """Combine the pipeline outputs into a single lock document."""
    root = descriptor.root
    return LockDocument(
        name=root.name,
        groupId=root.groupId,
        artifactId=root.artifactId,
        version=root.version,
        submodules=list(descriptor.modules),
        deps=[fragment.strip() for fragment in deps],
        artifacts=list(artifacts),
        metas=list(metas),
        remotes=dict(remotes),
    )


def render_document(document: LockDocument) -> str:
    """Serialize ``document`` with the raw dependency fragments spliced in verbatim."""
    dep_items = [*document.deps]
    dep_items.extend(json.dumps(artifact.to_dict()) for artifact in document.artifacts)

    parts = [f"{json.dumps(name)}: {json.dumps(getattr(document, name))}" for name in _ROOT_FIELDS]
    parts.append(
        '"submodules": ' + json.dumps([module.to_dict() for module in document.submodules])
    )
    parts.append('"deps": [' + ", ".join(dep_items) + "]")
    parts.append('"metas": ' + json.dumps([meta.to_dict() for meta in document.metas]))
    parts.append('"remotes": ' + json.dumps(document.remotes))
    return "{" + ", ".join(parts) + "}"


def canonicalize(text: str, *, indent: Optional[int] = 2) -> str:
    """Re-parse serialized output and emit it with sorted keys."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidOutput(f"Assembled lock document is not valid JSON: {exc}") from exc
    return json.dumps(data, indent=indent, sort_keys=True, ensure_ascii=False) + "\n"


def write_atomic(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` through a temporary file and rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def write_lock_file(document: LockDocument, path: Path, *, indent: Optional[int] = 2) -> str:
    """Validate, canonicalize and atomically write ``document``; return the written text."""
    content = canonicalize(render_document(document), indent=indent)
    write_atomic(path, content)
    return content


def load_raw_dependencies(path: Path) -> List[str]:
    """Read pre-serialized dependency fragments, one per line."""
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedDependencies(f"Dependency list {path} is not UTF-8: {exc}") from exc
    fragments: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            fragments.append(stripped)
    return fragments


def check_lock_document(data: Any) -> List[str]:
    """Return the problems that stop a fetcher from consuming ``data``."""
    if not isinstance(data, dict):
        return ["lock document must be an object"]

    problems: List[str] = []
    for name in _ROOT_FIELDS:
        if not isinstance(data.get(name), str):
            problems.append(f"{name} must be a string")

    submodules = data.get("submodules")
    if not isinstance(submodules, list):
        problems.append("submodules must be a list")
    else:
        for index, module in enumerate(submodules):
            if not isinstance(module, dict) or not isinstance(module.get("path"), str):
                problems.append(f"submodules[{index}].path must be a string")

    if not isinstance(data.get("deps"), list):
        problems.append("deps must be a list")

    metas = data.get("metas")
    if not isinstance(metas, list):
        problems.append("metas must be a list")
    else:
        for index, meta in enumerate(metas):
            if not isinstance(meta, dict):
                problems.append(f"metas[{index}] must be an object")
                continue
            for key in ("path", "content"):
                if not isinstance(meta.get(key), str):
                    problems.append(f"metas[{index}].{key} must be a string")

    remotes = data.get("remotes")
    if not isinstance(remotes, dict):
        problems.append("remotes must be an object")
    else:
        bad: Dict[str, Any] = {
            key: value for key, value in remotes.items() if not isinstance(value, str)
        }
        for key in sorted(bad):
            problems.append(f"remotes[{key}] must be a string URL")

    return problems


__all__ = [
    "assemble_lock_document",
    "canonicalize",
    "check_lock_document",
    "load_raw_dependencies",
    "render_document",
    "write_atomic",
    "write_lock_file",
]
