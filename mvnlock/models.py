"""Core data models shared across mvnlock components."""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class ModuleRecord:
    """One build module taken from the effective project document."""

    name: str
    groupId: str
    artifactId: str
    version: str
    path: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "groupId": self.groupId,
            "artifactId": self.artifactId,
            "version": self.version,
            "path": self.path,
        }


@dataclass(frozen=True)
class ProjectDescriptor:
    """Normalized view of the effective project document."""

    root: ModuleRecord
    modules: Tuple[ModuleRecord, ...]
    raw_modules: Tuple[Dict[str, object], ...] = ()


@dataclass(frozen=True)
class TrackedArtifact:
    """A resolved dependency file under the cache root and its sha1 digest."""

    relativePath: str
    sha1: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.relativePath, "sha1": self.sha1}


@dataclass(frozen=True)
class MetadataDocument:
    """Raw contents of one remote repository metadata file."""

    path: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "content": self.content}


@dataclass
class LockDocument:
    """Everything a downstream fetcher needs to replay the dependency set."""

    name: str
    groupId: str
    artifactId: str
    version: str
    submodules: List[ModuleRecord] = field(default_factory=list)
    deps: List[str] = field(default_factory=list)
    artifacts: List[TrackedArtifact] = field(default_factory=list)
    metas: List[MetadataDocument] = field(default_factory=list)
    remotes: Dict[str, str] = field(default_factory=dict)
