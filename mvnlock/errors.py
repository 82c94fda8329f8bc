"""Error types raised while assembling a lock file."""

from __future__ import annotations


class LockError(RuntimeError):
    """Base class for failures that abort a lock-file run."""


class MalformedDescriptor(LockError):
    """Raised when the effective project document is empty or lacks coordinates."""


class MalformedDependencies(LockError):
    """Raised when the raw dependency list cannot be decoded."""


class MissingDigest(LockError):
    """Raised when an artifact has no readable sha1 companion file."""


class UnresolvedSnapshot(LockError):
    """Raised when a snapshot entry matches no file, or more than one, on disk."""


class InvalidOutput(LockError):
    """Raised when the assembled lock document does not parse back as JSON."""


class DigestMismatch(LockError):
    """Raised when an artifact's recomputed sha1 differs from its digest file."""


class StoreError(LockError):
    """Raised when registering an artifact in the content-addressed store fails."""


__all__ = [
    "DigestMismatch",
    "InvalidOutput",
    "LockError",
    "MalformedDependencies",
    "MalformedDescriptor",
    "MissingDigest",
    "StoreError",
    "UnresolvedSnapshot",
]
