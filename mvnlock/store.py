"""Content-addressed store adapters."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Callable, Iterable, Protocol, Sequence

from .config import DEFAULT_STORE_COMMAND
from .errors import StoreError
from .logging import get_logger

_PLACEHOLDER = re.compile(r"\{(path|sha1)\}")


class ContentStore(Protocol):
    """Registers artifact files keyed by their content hash."""

    def add(self, path: Path, sha1: str) -> None:
        ...


class CommandStore:
    """Adds files to the store by running an external command per artifact.

    The default ``nix-store --add-fixed sha1`` command hashes the file itself,
    so the artifact path is appended and ``sha1`` is only logged. Commands for
    stores keyed by a caller-supplied digest can place ``{sha1}`` and ``{path}``
    in their arguments; when any argument carries a placeholder, every argument
    is formatted and the path is not appended.
    """

    def __init__(
        self,
        command: Sequence[str] | None = None,
        runner: Callable[..., str] | None = None,
    ) -> None:
        self._command = list(command or DEFAULT_STORE_COMMAND)
        self._runner = runner or self._default_runner
        self.logger = get_logger("store")

    def add(self, path: Path, sha1: str) -> None:
        args = self._arguments(path, sha1)
        self.logger.debug("Registering %s (sha1 %s)", path, sha1)
        try:
            output = self._runner(args, cwd=path.parent)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise StoreError(f"Failed to add {path} to the store: {exc}") from exc
        if output.strip():
            self.logger.debug("Store path %s", output.strip())

    def _arguments(self, path: Path, sha1: str) -> list[str]:
        if not any(_PLACEHOLDER.search(arg) for arg in self._command):
            return [*self._command, str(path)]
        try:
            return [arg.format(path=str(path), sha1=sha1) for arg in self._command]
        except (KeyError, IndexError, ValueError) as exc:
            raise StoreError(f"Invalid store command template {self._command}: {exc}") from exc

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


__all__ = ["CommandStore", "ContentStore"]
