"""Tests for the high-level check/record API."""

import json
import os

from diagcache.api import check, image_path_for, record
from diagcache.codes import StalenessReason
from diagcache.contracts import StalenessDecision
from diagcache.kernel.metadata import load_metadata, metadata_path_for
from diagcache.kernel.source import FileSource, InlineSource


def _render(image):
    """Stand-in for the external renderer."""
    image.parent.mkdir(parents=True, exist_ok=True)
    image.write_bytes(b"<svg/>")


def test_image_path_for(tmp_path, document):
    source = InlineSource(document, ["a"], {"target": "flow"})
    assert image_path_for(source, tmp_path, "svg") == tmp_path / "flow.svg"
    assert image_path_for(source, tmp_path, ".png") == tmp_path / "flow.png"


def test_first_run_needs_image(tmp_path, document):
    source = InlineSource(document, ["a -> b"])
    decision = check(source, tmp_path / "out.svg")
    assert isinstance(decision, StalenessDecision)
    assert decision.regenerate is True
    assert decision.reason == StalenessReason.NO_ARTIFACT
    assert decision.metadata_file is None


def test_image_without_metadata(tmp_path, document):
    image = tmp_path / "out.svg"
    _render(image)
    decision = check(InlineSource(document, ["a -> b"]), image)
    assert decision.reason == StalenessReason.NO_METADATA


def test_generate_then_reuse(tmp_path, document):
    image = tmp_path / "out.svg"
    source = InlineSource(document, ["a -> b"])
    _render(image)
    metadata = record(source, image)

    assert metadata.checksum == source.checksum()
    assert load_metadata(image) == metadata

    decision = check(InlineSource(document, ["a -> b"]), image)
    assert decision.regenerate is False
    assert decision.reason == StalenessReason.UP_TO_DATE
    assert decision.metadata_file == str(metadata_path_for(image))


def test_edit_makes_stale(tmp_path, document):
    image = tmp_path / "out.svg"
    _render(image)
    record(InlineSource(document, ["a -> b"]), image)

    decision = check(InlineSource(document, ["a -> c"]), image)
    assert decision.regenerate is True
    assert decision.reason == StalenessReason.CHECKSUM_CHANGED


def test_restored_content_not_stale_despite_touch(tmp_path, document):
    path = tmp_path / "flow.dot"
    path.write_text("a -> b\n", encoding="utf-8")
    image = tmp_path / "flow.svg"
    _render(image)
    os.utime(path, (1_000_000, 1_000_000))
    os.utime(image, (2_000_000, 2_000_000))
    record(FileSource(document, path), image)

    # Edit and restore: content identical, source still older than image
    path.write_text("a -> c\n", encoding="utf-8")
    path.write_text("a -> b\n", encoding="utf-8")
    os.utime(path, (1_500_000, 1_500_000))

    assert check(FileSource(document, path), image).regenerate is False


def test_file_touched_after_image(tmp_path, document):
    path = tmp_path / "flow.dot"
    path.write_text("a -> b\n", encoding="utf-8")
    image = tmp_path / "flow.svg"
    _render(image)
    record(FileSource(document, path), image)
    os.utime(image, (1_000_000, 1_000_000))
    os.utime(path, (2_000_000, 2_000_000))

    decision = check(FileSource(document, path), image)
    assert decision.reason == StalenessReason.SOURCE_NEWER


def test_custom_suffix(tmp_path, document):
    image = tmp_path / "out.svg"
    _render(image)
    source = InlineSource(document, ["a"])
    record(source, image, metadata_suffix=".meta.json")
    assert (tmp_path / "out.svg.meta.json").is_file()
    assert check(source, image).reason == StalenessReason.NO_METADATA
    assert check(source, image, metadata_suffix=".meta.json").regenerate is False


def test_decision_serializes(tmp_path, document):
    decision = check(InlineSource(document, ["a"]), tmp_path / "x.png")
    data = json.loads(decision.model_dump_json())
    assert data["reason"] == "NO_ARTIFACT"
    assert data["regenerate"] is True
