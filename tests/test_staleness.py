"""Tests for staleness decisions."""

import os

from diagcache.codes import StalenessReason
from diagcache.kernel.metadata import MetadataRecord
from diagcache.kernel.source import FileSource, InlineSource
from diagcache.kernel.staleness import artifact_reason, checksum_reason, mtime_reason


def set_mtime(path, seconds):
    os.utime(path, (seconds, seconds))


def _image(tmp_path, name="out.png"):
    image = tmp_path / name
    image.write_bytes(b"\x89PNG")
    return image


class TestChecksumPolicy:

    def test_matching_checksum_is_fresh(self):
        assert checksum_reason("abc", {"checksum": "abc"}) is None

    def test_differing_checksum_is_stale(self):
        assert checksum_reason("abc", {"checksum": "def"}) == StalenessReason.CHECKSUM_CHANGED

    def test_absent_record_is_stale(self):
        assert checksum_reason("abc", None) == StalenessReason.NO_METADATA

    def test_record_without_checksum_is_stale(self):
        assert checksum_reason("abc", {}) == StalenessReason.NO_METADATA

    def test_accepts_metadata_record(self):
        assert checksum_reason("abc", MetadataRecord.create("abc")) is None


class TestArtifactPolicy:

    def test_missing_path(self):
        assert artifact_reason(None) == StalenessReason.NO_ARTIFACT

    def test_missing_file(self, tmp_path):
        assert artifact_reason(tmp_path / "nope.png") == StalenessReason.NO_ARTIFACT

    def test_existing_file(self, tmp_path):
        assert artifact_reason(_image(tmp_path)) is None


class TestMtimePolicy:

    def test_no_source_file(self, tmp_path):
        assert mtime_reason(None, _image(tmp_path)) is None

    def test_empty_source_path(self, tmp_path):
        assert mtime_reason("", _image(tmp_path)) is None

    def test_source_newer(self, tmp_path):
        source = tmp_path / "a.dot"
        source.write_text("a")
        image = _image(tmp_path)
        set_mtime(image, 1_000_000)
        set_mtime(source, 1_000_100)
        assert mtime_reason(source, image) == StalenessReason.SOURCE_NEWER

    def test_equal_times_not_stale(self, tmp_path):
        source = tmp_path / "a.dot"
        source.write_text("a")
        image = _image(tmp_path)
        set_mtime(image, 1_000_000)
        set_mtime(source, 1_000_000)
        assert mtime_reason(source, image) is None


class TestInlineShouldProcess:

    def test_law_same_checksum(self, tmp_path, document):
        source = InlineSource(document, ["a -> b"])
        image = _image(tmp_path)
        assert source.should_process(image, {"checksum": source.checksum()}) is False

    def test_law_other_checksum(self, tmp_path, document):
        source = InlineSource(document, ["a -> b"])
        assert source.should_process(_image(tmp_path), {"checksum": "0" * 64}) is True

    def test_law_absent_record(self, tmp_path, document):
        source = InlineSource(document, ["a -> b"])
        assert source.should_process(_image(tmp_path), None) is True

    def test_missing_image(self, tmp_path, document):
        source = InlineSource(document, ["a -> b"])
        assert source.stale_reason(tmp_path / "missing.png", {"checksum": source.checksum()}) == (
            StalenessReason.NO_ARTIFACT
        )


class TestFileShouldProcess:

    def _setup(self, tmp_path, document, source_time, image_time):
        path = tmp_path / "flow.dot"
        path.write_text("a -> b\n", encoding="utf-8")
        image = _image(tmp_path)
        set_mtime(path, source_time)
        set_mtime(image, image_time)
        return FileSource(document, path), image

    def test_newer_source_forces_regeneration(self, tmp_path, document):
        source, image = self._setup(tmp_path, document, 2_000_000, 1_000_000)
        metadata = {"checksum": source.checksum()}
        assert source.should_process(image, metadata) is True
        assert source.stale_reason(image, metadata) == StalenessReason.SOURCE_NEWER

    def test_older_source_matching_checksum_is_fresh(self, tmp_path, document):
        source, image = self._setup(tmp_path, document, 1_000_000, 2_000_000)
        assert source.should_process(image, {"checksum": source.checksum()}) is False

    def test_older_source_changed_checksum(self, tmp_path, document):
        source, image = self._setup(tmp_path, document, 1_000_000, 2_000_000)
        assert source.stale_reason(image, {"checksum": "stale"}) == StalenessReason.CHECKSUM_CHANGED

    def test_no_backing_file_no_metadata(self, tmp_path, document):
        source = FileSource(document, None)
        assert source.stale_reason(_image(tmp_path), None) == StalenessReason.NO_METADATA

    def test_no_backing_file_matching_checksum(self, tmp_path, document):
        source = FileSource(document, None)
        assert source.should_process(_image(tmp_path), {"checksum": source.checksum()}) is False

    def test_empty_path_matching_checksum(self, tmp_path, document):
        source = FileSource(document, "")
        assert source.file_name is None
        assert source.code() == ""
        assert source.image_name() == source.checksum()
        assert source.should_process(_image(tmp_path), {"checksum": source.checksum()}) is False

    def test_missing_image(self, tmp_path, document):
        path = tmp_path / "flow.dot"
        path.write_text("a", encoding="utf-8")
        source = FileSource(document, path)
        assert source.stale_reason(tmp_path / "nope.png", None) == StalenessReason.NO_ARTIFACT
