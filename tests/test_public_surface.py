"""Test public API surface - ensure imports work correctly and no side effects.

This test verifies:
- diagcache exposes check, record and the source variants
- The two caller-visible error kinds are distinct
- Importing the package leaves its logging disabled
"""

import pytest


def test_root_exports():
    import diagcache

    for name in diagcache.__all__:
        assert hasattr(diagcache, name), name


def test_api_functions_callable():
    from diagcache import check, record, image_path_for

    assert callable(check)
    assert callable(record)
    assert callable(image_path_for)


def test_error_kinds_distinguishable():
    from diagcache import DiagcacheError, MissingExecutable, UnimplementedCapability

    assert issubclass(MissingExecutable, DiagcacheError)
    assert issubclass(UnimplementedCapability, DiagcacheError)
    assert not issubclass(MissingExecutable, UnimplementedCapability)
    assert not issubclass(UnimplementedCapability, MissingExecutable)


def test_variants_implement_contract():
    from diagcache import DiagramSource, FileSource, InlineSource

    assert issubclass(InlineSource, DiagramSource)
    assert issubclass(FileSource, DiagramSource)


def test_version_string():
    import diagcache

    assert diagcache.__version__ in ("1.0.0", "dev")


def test_import_has_no_log_output(capsys):
    import importlib
    import diagcache

    importlib.reload(diagcache)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""
