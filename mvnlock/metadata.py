"""Remote repository metadata collection."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import List

from .logging import get_logger
from .models import MetadataDocument

LOCAL_REPOSITORY_ID = "local"

_METADATA_NAME = re.compile(r"^maven-metadata-(?P<repo>.*)\.xml$")

logger = get_logger("metadata")


def collect_metadata(
    cache_root: Path, *, local_repository_id: str = LOCAL_REPOSITORY_ID
) -> List[MetadataDocument]:
    """Return every remote `maven-metadata-<id>.xml` under ``cache_root``, sorted by path."""
    found: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(cache_root):
        for filename in filenames:
            match = _METADATA_NAME.match(filename)
            if match is None:
                continue
            repo_id = match.group("repo")
            if not repo_id or repo_id == local_repository_id:
                continue
            found.append(Path(dirpath) / filename)

    documents: List[MetadataDocument] = []
    for path in sorted(found, key=lambda item: item.relative_to(cache_root).as_posix()):
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable metadata file %s: %s", path, exc)
            continue
        directory = path.parent.relative_to(cache_root).as_posix()
        documents.append(MetadataDocument(path=directory, content=content))
    logger.debug("Collected %d metadata documents", len(documents))
    return documents


__all__ = ["LOCAL_REPOSITORY_ID", "collect_metadata"]
