"""Local artifact cache reconciliation.

Maven records which remote repository supplied each downloaded file in a
per-directory marker file (``_remote.repositories``) made of
``filename>repositoryId=`` lines. The reconciler reads those markers, maps
every tracked file back to its real name on disk (timestamped snapshot
builds are recorded under their ``-SNAPSHOT`` name), reads the companion
``.sha1`` digest and optionally registers the file in a content-addressed
store.
"""

from __future__ import annotations

import hashlib
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .errors import DigestMismatch, MissingDigest, UnresolvedSnapshot
from .logging import get_logger
from .models import TrackedArtifact
from .store import ContentStore

MARKER_SUFFIX = ".repositories"
DIGEST_SUFFIX = ".sha1"
SNAPSHOT_TOKEN = "-SNAPSHOT."

_TIMESTAMP = r"\d{8}\.\d{6}-\d+"
_TIMESTAMPED_NAME = re.compile(rf"^(?P<prefix>.+)-{_TIMESTAMP}\.(?P<ext>.+)$")
_MARKER_LINE = re.compile(r"^(?P<name>[^#>\s][^>\s]*)>(?P<repo>[^=\s]*)=?$")
_SHA1_TOKEN = re.compile(r"(?<![0-9a-fA-F])[0-9a-fA-F]{40}(?![0-9a-fA-F])")

logger = get_logger("reconciler")


@dataclass
class MarkerIndex:
    """Filename -> repository id entries parsed from one marker file."""

    path: Path
    entries: Dict[str, str] = field(default_factory=dict)

    @property
    def directory(self) -> Path:
        return self.path.parent

    @classmethod
    def parse(cls, path: Path, text: str) -> "MarkerIndex":
        index = cls(path=path)
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            match = _MARKER_LINE.match(line)
            if match is None:
                logger.debug("Ignoring unrecognised line in %s: %r", path, line)
                continue
            index.entries[match.group("name")] = match.group("repo")
        return index

    def lookup(self, filename: str) -> Optional[str]:
        """Return the marker entry that tracks ``filename``, if any."""
        if filename in self.entries:
            return filename
        snapshot_name = snapshot_entry_name(filename)
        if snapshot_name is not None and snapshot_name in self.entries:
            return snapshot_name
        return None


def snapshot_entry_name(filename: str) -> Optional[str]:
    """Map a timestamped snapshot filename to its ``-SNAPSHOT.`` form."""
    match = _TIMESTAMPED_NAME.match(filename)
    if match is None:
        return None
    return f"{match.group('prefix')}{SNAPSHOT_TOKEN}{match.group('ext')}"


def resolve_real_filename(entry: str, listing: Sequence[str]) -> str:
    """Return the on-disk filename recorded in a marker as ``entry``.

    Snapshot entries may exist on disk either literally or under exactly one
    timestamp-qualified name; the timestamped file wins when both are present.
    """
    if SNAPSHOT_TOKEN not in entry:
        if entry not in listing:
            raise UnresolvedSnapshot(f"No file on disk for marker entry {entry}")
        return entry

    prefix, _, extension = entry.partition(SNAPSHOT_TOKEN)
    pattern = re.compile(
        rf"^{re.escape(prefix)}-{_TIMESTAMP}\.{re.escape(extension)}$"
    )
    timestamped = sorted(name for name in listing if pattern.match(name))
    if len(timestamped) > 1:
        raise UnresolvedSnapshot(
            f"Snapshot {entry} is ambiguous: {', '.join(timestamped)}"
        )
    if timestamped:
        return timestamped[0]
    if entry in listing:
        return entry
    raise UnresolvedSnapshot(f"No file on disk matches snapshot {entry}")


def read_digest(artifact: Path) -> str:
    """Return the first sha1 token from the artifact's ``.sha1`` companion file."""
    digest_path = artifact.with_name(artifact.name + DIGEST_SUFFIX)
    try:
        text = digest_path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError as exc:
        raise MissingDigest(f"Missing digest file {digest_path}") from exc
    except OSError as exc:
        raise MissingDigest(f"Cannot read digest file {digest_path}: {exc}") from exc
    match = _SHA1_TOKEN.search(text)
    if match is None:
        raise MissingDigest(f"No sha1 digest found in {digest_path}")
    return match.group(0).lower()


def hash_file(path: Path) -> str:
    digest = hashlib.sha1()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def find_marker_files(cache_root: Path) -> List[Path]:
    """Return every marker file under ``cache_root`` sorted by relative path."""
    markers: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(cache_root):
        dirnames.sort()
        for filename in filenames:
            if filename.endswith(MARKER_SUFFIX):
                markers.append(Path(dirpath) / filename)
    return sorted(markers, key=lambda path: path.relative_to(cache_root).as_posix())


class CacheReconciler:
    """Walks a populated local repository and emits its tracked artifacts."""

    def __init__(
        self,
        cache_root: Path,
        *,
        store: ContentStore | None = None,
        no_add: bool = False,
        verify_digests: bool = False,
    ) -> None:
        self.cache_root = Path(cache_root)
        self.store = store
        self.no_add = no_add
        self.verify_digests = verify_digests

    def reconcile(self) -> List[TrackedArtifact]:
        if not self.cache_root.is_dir():
            raise NotADirectoryError(f"Cache directory not found: {self.cache_root}")

        artifacts: List[TrackedArtifact] = []
        for marker_path in find_marker_files(self.cache_root):
            index = self._load_marker(marker_path)
            if index is None:
                continue
            artifacts.extend(self._reconcile_marker(index))
        logger.debug("Reconciled %d artifacts under %s", len(artifacts), self.cache_root)
        return artifacts

    def _load_marker(self, path: Path) -> Optional[MarkerIndex]:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable marker file %s: %s", path, exc)
            return None
        return MarkerIndex.parse(path, text)

    def _reconcile_marker(self, index: MarkerIndex) -> List[TrackedArtifact]:
        directory = index.directory
        listing = sorted(
            entry.name
            for entry in directory.iterdir()
            if entry.is_file()
            and not entry.name.endswith(MARKER_SUFFIX)
            and not entry.name.endswith(DIGEST_SUFFIX)
        )

        emitted: set[str] = set()
        artifacts: List[TrackedArtifact] = []
        for filename in listing:
            entry = index.lookup(filename)
            if entry is None:
                continue
            repo_id = index.entries[entry]
            if not repo_id:
                logger.debug("Skipping %s/%s: no remote repository", directory, filename)
                continue
            if entry in emitted:
                continue
            emitted.add(entry)

            real_name = resolve_real_filename(entry, listing)
            if real_name != entry:
                logger.debug("Resolved snapshot %s to %s", entry, real_name)
            artifacts.append(self._track(directory / real_name))
        return artifacts

    def _track(self, path: Path) -> TrackedArtifact:
        sha1 = read_digest(path)
        if self.verify_digests:
            actual = hash_file(path)
            if actual != sha1:
                raise DigestMismatch(f"{path} has sha1 {actual}, digest file says {sha1}")
        if self.store is not None and not self.no_add:
            self.store.add(path, sha1)
        relative = path.relative_to(self.cache_root).as_posix()
        return TrackedArtifact(relativePath=relative, sha1=sha1)


def reconcile_cache(
    cache_root: Path,
    *,
    store: ContentStore | None = None,
    no_add: bool = False,
    verify_digests: bool = False,
) -> List[TrackedArtifact]:
    """Return the tracked artifacts of ``cache_root`` in marker order."""
    reconciler = CacheReconciler(
        cache_root, store=store, no_add=no_add, verify_digests=verify_digests
    )
    return reconciler.reconcile()


__all__ = [
    "CacheReconciler",
    "MarkerIndex",
    "find_marker_files",
    "read_digest",
    "reconcile_cache",
    "resolve_real_filename",
    "snapshot_entry_name",
]
