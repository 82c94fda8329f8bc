"""Remote repository map extraction."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Mapping, Tuple

_REPOSITORY_SECTIONS = (
    ("repositories", "repository"),
    ("pluginRepositories", "pluginRepository"),
)


def build_remote_map(modules: Iterable[Mapping[str, Any]]) -> Dict[str, str]:
    """Flatten every module's repositories into an id -> url mapping.

    Regular repositories are read before plugin repositories for each module,
    and a later entry for an id replaces an earlier one.
    """
    remotes: Dict[str, str] = {}
    for module in modules:
        for repo_id, url in iter_repositories(module):
            remotes[repo_id] = url
    return remotes


def iter_repositories(module: Mapping[str, Any]) -> Iterator[Tuple[str, str]]:
    """Yield `(id, url)` pairs declared by a single module."""
    for section, item_key in _REPOSITORY_SECTIONS:
        for entry in _entries(module.get(section), item_key):
            repo_id = entry.get("id")
            url = entry.get("url")
            if isinstance(repo_id, str) and isinstance(url, str) and repo_id:
                yield repo_id, url


def _entries(value: Any, item_key: str) -> Iterator[Mapping[str, Any]]:
    if isinstance(value, Mapping):
        # XML-converted documents wrap the list in a singular element name.
        if item_key in value:
            value = value[item_key]
        elif "id" in value:
            value = [value]
        else:
            return
    if isinstance(value, Mapping):
        value = [value]
    if not isinstance(value, list):
        return
    for entry in value:
        if isinstance(entry, Mapping):
            yield entry


__all__ = ["build_remote_map", "iter_repositories"]
