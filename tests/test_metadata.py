"""Tests for repository metadata collection."""

from __future__ import annotations

from mvnlock.metadata import collect_metadata
from mvnlock.models import MetadataDocument

CENTRAL_XML = """<?xml version="1.0" encoding="UTF-8"?>
<metadata>
  <groupId>junit</groupId>
  <artifactId>junit</artifactId>
  <versioning><latest>4.13</latest></versioning>
</metadata>
"""


def test_collect_metadata_includes_remote_documents(cache_builder) -> None:
    cache_builder.write("junit/junit/maven-metadata-central.xml", CENTRAL_XML)

    metas = collect_metadata(cache_builder.root)

    assert metas == [MetadataDocument(path="junit/junit", content=CENTRAL_XML.lstrip("\n"))]


def test_collect_metadata_excludes_local_repository(cache_builder) -> None:
    cache_builder.write("junit/junit/maven-metadata-local.xml", "<metadata/>")
    cache_builder.write("junit/junit/maven-metadata.xml", "<metadata/>")
    cache_builder.write("junit/junit/maven-metadata-.xml", "<metadata/>")

    assert collect_metadata(cache_builder.root) == []


def test_collect_metadata_honours_custom_local_id(cache_builder) -> None:
    cache_builder.write("a/maven-metadata-local.xml", "<metadata/>")
    cache_builder.write("a/maven-metadata-offline.xml", "<metadata/>")

    metas = collect_metadata(cache_builder.root, local_repository_id="offline")

    assert [meta.path for meta in metas] == ["a"]


def test_collect_metadata_sorted_by_path(cache_builder) -> None:
    cache_builder.write("org/z/maven-metadata-central.xml", "<z/>")
    cache_builder.write("org/a/maven-metadata-snapshots.xml", "<a/>")
    cache_builder.write("org/a/maven-metadata-central.xml", "<a central=\"yes\"/>")

    metas = collect_metadata(cache_builder.root)

    assert [(meta.path, meta.content) for meta in metas] == [
        ("org/a", '<a central="yes"/>'),
        ("org/a", "<a/>"),
        ("org/z", "<z/>"),
    ]


def test_collect_metadata_skips_undecodable_documents(cache_builder) -> None:
    broken = cache_builder.root / "org/a/maven-metadata-central.xml"
    broken.parent.mkdir(parents=True)
    broken.write_bytes(b"<m>\xff\xfe</m>")
    cache_builder.write("org/b/maven-metadata-central.xml", "<m/>")

    metas = collect_metadata(cache_builder.root)

    assert [meta.path for meta in metas] == ["org/b"]
