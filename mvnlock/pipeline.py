"""Lock-file generation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from .assembler import assemble_lock_document, write_lock_file
from .config import MvnLockConfig, load_config
from .descriptor import parse_descriptor
from .logging import get_logger
from .metadata import collect_metadata
from .models import LockDocument
from .reconciler import CacheReconciler
from .remotes import build_remote_map
from .store import CommandStore, ContentStore


@dataclass
class LockOutcome:
    """Result of a lock-file generation run."""

    path: Path
    document: LockDocument
    content: str


class LockfileGenerator:
    """Runs descriptor parsing, cache reconciliation and assembly in order."""

    def __init__(
        self,
        config: MvnLockConfig | None = None,
        store: ContentStore | None = None,
    ) -> None:
        self.config = config or load_config(Path.cwd())
        self.store = store
        self.logger = get_logger("pipeline")

    def run(
        self,
        *,
        cache_dir: Path,
        descriptor: Any,
        deps: Sequence[str],
        output: Path,
        no_add: bool = False,
    ) -> LockOutcome:
        """Produce the lock file at ``output`` and return what was written."""
        config = self.config
        cache_root = Path(cache_dir).expanduser().resolve()
        self.logger.info("Generating lock file from cache %s", cache_root)

        project = parse_descriptor(
            descriptor,
            project_root=config.project_root,
            build_directory=config.build_directory,
        )
        self.logger.info(
            "Project %s has %d module(s)", project.root.name, len(project.modules)
        )

        remotes = build_remote_map(project.raw_modules)
        self.logger.debug("Declared remotes: %s", ", ".join(sorted(remotes)) or "(none)")

        skip_store = no_add or not config.store.enabled
        reconciler = CacheReconciler(
            cache_root,
            store=None if skip_store else self._resolve_store(),
            no_add=skip_store,
            verify_digests=config.verify_digests,
        )
        artifacts = reconciler.reconcile()
        self.logger.info(
            "Tracked %d artifact(s)%s",
            len(artifacts),
            "" if skip_store else " and registered them in the store",
        )

        metas = collect_metadata(cache_root, local_repository_id=config.local_repository_id)
        self.logger.info("Collected %d repository metadata document(s)", len(metas))

        document = assemble_lock_document(project, deps, artifacts, metas, remotes)
        output_path = Path(output).expanduser()
        content = write_lock_file(document, output_path, indent=config.indent)
        self.logger.info("Lock file written to %s", output_path)
        return LockOutcome(path=output_path, document=document, content=content)

    def _resolve_store(self) -> ContentStore:
        if self.store is None:
            self.store = CommandStore(self.config.store.command)
        return self.store


__all__ = ["LockOutcome", "LockfileGenerator"]
