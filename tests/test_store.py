"""Tests for the content-addressed store adapter."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from mvnlock.errors import StoreError
from mvnlock.store import CommandStore


def test_command_store_runs_configured_command(tmp_path: Path) -> None:
    artifact = tmp_path / "lib.jar"
    artifact.write_bytes(b"jar")
    calls = []

    def runner(args, cwd):
        calls.append((list(args), Path(cwd)))
        return "/nix/store/abc-lib.jar\n"

    store = CommandStore(runner=runner)
    store.add(artifact, "a" * 40)

    assert calls == [(["nix-store", "--add-fixed", "sha1", str(artifact)], tmp_path)]


def test_command_store_uses_custom_command(tmp_path: Path) -> None:
    artifact = tmp_path / "lib.jar"
    calls = []

    def runner(args, cwd):
        calls.append(list(args))
        return ""

    CommandStore(["cas", "put"], runner=runner).add(artifact, "b" * 40)

    assert calls == [["cas", "put", str(artifact)]]


def test_command_store_wraps_failures(tmp_path: Path) -> None:
    def runner(args, cwd):
        raise subprocess.CalledProcessError(1, list(args))

    store = CommandStore(runner=runner)

    with pytest.raises(StoreError):
        store.add(tmp_path / "lib.jar", "c" * 40)


def test_command_store_wraps_missing_executable(tmp_path: Path) -> None:
    def runner(args, cwd):
        raise FileNotFoundError("nix-store")

    with pytest.raises(StoreError):
        CommandStore(runner=runner).add(tmp_path / "lib.jar", "d" * 40)


def test_command_store_substitutes_placeholders(tmp_path: Path) -> None:
    artifact = tmp_path / "lib.jar"
    calls = []

    def runner(args, cwd):
        calls.append(list(args))
        return ""

    store = CommandStore(["cas", "put", "--sha1={sha1}", "{path}"], runner=runner)
    store.add(artifact, "e" * 40)

    assert calls == [["cas", "put", f"--sha1={'e' * 40}", str(artifact)]]


def test_command_store_rejects_unknown_placeholder(tmp_path: Path) -> None:
    store = CommandStore(["cas", "put", "{path}", "{size}"], runner=lambda args, cwd: "")

    with pytest.raises(StoreError):
        store.add(tmp_path / "lib.jar", "f" * 40)
