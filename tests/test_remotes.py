"""Tests for remote repository map extraction."""

from __future__ import annotations

from mvnlock.remotes import build_remote_map, iter_repositories


def test_build_remote_map_collects_both_repository_kinds() -> None:
    modules = [
        {
            "repositories": [{"id": "central", "url": "https://repo.maven.apache.org/maven2"}],
            "pluginRepositories": [{"id": "plugins", "url": "https://plugins.example.com"}],
        }
    ]

    assert build_remote_map(modules) == {
        "central": "https://repo.maven.apache.org/maven2",
        "plugins": "https://plugins.example.com",
    }


def test_build_remote_map_last_module_wins_on_collision() -> None:
    modules = [
        {"repositories": [{"id": "central", "url": "https://first.example.com"}]},
        {"repositories": [{"id": "central", "url": "https://second.example.com"}]},
    ]

    remotes = build_remote_map(modules)

    assert remotes == {"central": "https://second.example.com"}


def test_build_remote_map_accepts_converted_xml_shapes() -> None:
    modules = [
        {
            "repositories": {"repository": {"id": "central", "url": "https://central"}},
            "pluginRepositories": {
                "pluginRepository": [
                    {"id": "a", "url": "https://a"},
                    {"id": "b", "url": "https://b"},
                ]
            },
        },
        {"repositories": {"id": "single", "url": "https://single"}},
    ]

    assert build_remote_map(modules) == {
        "central": "https://central",
        "a": "https://a",
        "b": "https://b",
        "single": "https://single",
    }


def test_build_remote_map_empty_when_nothing_declared() -> None:
    assert build_remote_map([{"artifactId": "app"}, {"repositories": ""}]) == {}


def test_iter_repositories_skips_incomplete_entries() -> None:
    module = {
        "repositories": [
            {"id": "ok", "url": "https://ok"},
            {"id": "no-url"},
            {"url": "https://no-id"},
            "junk",
        ]
    }

    assert list(iter_repositories(module)) == [("ok", "https://ok")]
